"""
Errors raised by the Markov chain core.
"""


class MarkovError(Exception):
    """Base class for chain model errors."""


class EmptyModel(MarkovError):
    """Generation was requested before any training happened."""

    def __init__(self, message: str = "model is empty, train first"):
        super().__init__(message)


class OrderMismatch(MarkovError):
    """Persisted chain order disagrees with the running configuration."""

    def __init__(self, expected: int, found: int):
        self.expected = expected
        self.found = found
        super().__init__(f"chain order mismatch: expected {expected}, found {found}")


class CorruptModel(MarkovError):
    """Persisted chain data could not be decoded."""
