"""
Markov chain text model (CPU-only).
Incremental training from token sequences, count-weighted sampling with a
bounded walk; persistence-friendly via to_dict/from_dict.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from chatter.services.errors import CorruptModel, EmptyModel, OrderMismatch

# Sentinels contain whitespace, so tokenize() can never produce them.
START = "\n<start>"
END = "\n<end>"

Context = Tuple[str, ...]
TransitionTable = Dict[Context, Dict[str, int]]


@dataclass
class ModelStats:
    """Size of a chain model."""
    order: int = 1
    contexts: int = 0
    transitions: int = 0
    observations: int = 0
    vocabulary: int = 0


class MarkovModel:
    """
    Order-N Markov chain over string tokens.

    transitions[context][next_token] holds the number of times next_token
    followed context in training. Counts only ever grow.
    """

    def __init__(self, order: int = 1, rng: Optional[random.Random] = None):
        if order < 1:
            raise ValueError("chain order must be at least 1")
        self.order = order
        self.transitions: TransitionTable = {}
        self.rng = rng or random.Random()

    @property
    def start_context(self) -> Context:
        return (START,) * self.order

    def is_empty(self) -> bool:
        return self.start_context not in self.transitions

    def train(self, tokens: Sequence[str]):
        """Add one token sequence; every N+1 window bumps one count."""
        if not tokens:
            return
        padded = [START] * self.order + list(tokens) + [END]
        for i in range(len(padded) - self.order):
            state = tuple(padded[i : i + self.order])
            nxt = padded[i + self.order]
            dist = self.transitions.setdefault(state, {})
            dist[nxt] = dist.get(nxt, 0) + 1

    def generate(self, seed: Optional[str] = None, max_length: int = 50) -> List[str]:
        """
        Random walk from the start context.

        Args:
            seed: Token to anchor the walk on; ignored if no context ends with it
            max_length: Hard cap on emitted tokens

        Returns:
            Generated tokens, without sentinels. May be shorter than max_length
            when the walk hits END or an unknown context.

        Raises:
            EmptyModel: nothing has been trained yet
        """
        if self.is_empty():
            raise EmptyModel()

        state = self._seed_state(seed)
        output: List[str] = []

        for _ in range(max(0, max_length)):
            dist = self.transitions.get(state)
            if not dist:
                break
            next_token = self._sample(dist)
            if next_token == END:
                break
            output.append(next_token)
            state = state[1:] + (next_token,)

        return output

    def is_anchor(self, token: Optional[str]) -> bool:
        """True if some known context ends with token."""
        if not token:
            return False
        return any(ctx[-1] == token for ctx in self.transitions)

    def count(self, context: Iterable[str], token: str) -> int:
        return self.transitions.get(tuple(context), {}).get(token, 0)

    def next_tokens(self, context: Iterable[str]) -> Dict[str, int]:
        return dict(self.transitions.get(tuple(context), {}))

    def merge(self, other: "MarkovModel"):
        """Add every count of another model of the same order."""
        if other.order != self.order:
            raise OrderMismatch(self.order, other.order)
        for state, dist in other.transitions.items():
            mine = self.transitions.setdefault(state, {})
            for token, n in dist.items():
                mine[token] = mine.get(token, 0) + n

    def stats(self) -> ModelStats:
        vocab = set()
        transitions = 0
        observations = 0
        for state, dist in self.transitions.items():
            vocab.update(state)
            vocab.update(dist)
            transitions += len(dist)
            observations += sum(dist.values())
        vocab.discard(START)
        vocab.discard(END)
        return ModelStats(
            order=self.order,
            contexts=len(self.transitions),
            transitions=transitions,
            observations=observations,
            vocabulary=len(vocab),
        )

    def to_dict(self) -> dict:
        return {
            "order": self.order,
            "transitions": [
                [list(state), dict(dist)] for state, dist in self.transitions.items()
            ],
        }

    @classmethod
    def from_dict(cls, raw: dict, rng: Optional[random.Random] = None) -> "MarkovModel":
        """Build a model from to_dict() output; CorruptModel on any bad entry."""
        try:
            order = raw["order"]
            entries = raw["transitions"]
        except (KeyError, TypeError) as e:
            raise CorruptModel(f"missing field: {e}") from e
        if not isinstance(order, int) or isinstance(order, bool) or order < 1:
            raise CorruptModel(f"invalid order: {order!r}")
        if not isinstance(entries, list):
            raise CorruptModel("transitions must be a list")

        model = cls(order, rng=rng)
        for entry in entries:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                raise CorruptModel(f"invalid transition entry: {entry!r}")
            state, dist = entry
            if (
                not isinstance(state, list)
                or len(state) != order
                or not all(isinstance(t, str) for t in state)
            ):
                raise CorruptModel(f"invalid context: {state!r}")
            if not isinstance(dist, dict) or not dist:
                raise CorruptModel(f"invalid distribution for {state!r}")
            for token, n in dist.items():
                if not isinstance(n, int) or isinstance(n, bool) or n < 1:
                    raise CorruptModel(f"invalid count {n!r} for {token!r}")
            model.transitions[tuple(state)] = dict(dist)
        return model

    # --- helpers ---
    def _seed_state(self, seed: Optional[str]) -> Context:
        if self.is_anchor(seed):
            return (START,) * (self.order - 1) + (seed,)
        return self.start_context

    def _sample(self, dist: Dict[str, int]) -> str:
        # sort so the draw depends only on the rng, not dict order
        tokens = sorted(dist)
        cumulative = np.cumsum([dist[t] for t in tokens])
        r = self.rng.random() * cumulative[-1]
        idx = int(np.searchsorted(cumulative, r, side="right"))
        return tokens[min(idx, len(tokens) - 1)]
