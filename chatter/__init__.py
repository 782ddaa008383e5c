"""Markov chain chat bot service."""

__version__ = "1.0.0"
