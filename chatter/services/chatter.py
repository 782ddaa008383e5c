"""
Chain service: the single owner of the shared Markov model.

Training takes the write side of the lock, generation and snapshots take the
read side. Callers only ever deal in plain strings.
"""
from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Iterable, Optional

from chatter.services import persistence
from chatter.services.markov import MarkovModel, ModelStats
from chatter.services.tokenizer import TokenizerConfig, detokenize, tokenize
from chatter.utils.locks import ReadWriteLock

logger = logging.getLogger(__name__)


class ChainService:
    """
    Thread-safe train/respond front for one MarkovModel.

    Usage:
        service = ChainService(order=1)
        service.train("the cat sat")
        service.respond()        # "the cat sat"
        service.respond("cat")   # "cat sat"
    """

    def __init__(
        self,
        order: int = 1,
        tokenizer: Optional[TokenizerConfig] = None,
        max_length: int = 50,
        random_seed: Optional[int] = None,
    ):
        self.order = order
        self.tokenizer = tokenizer or TokenizerConfig()
        self.max_length = max_length
        self.rng = random.Random(random_seed)
        self.model = MarkovModel(order, rng=self.rng)
        self.lock = ReadWriteLock()

    @classmethod
    def from_settings(cls, settings) -> "ChainService":
        return cls(
            order=settings.MARKOV_ORDER,
            tokenizer=TokenizerConfig(
                lowercase=settings.TOKENIZER_LOWERCASE,
                split_punctuation=settings.TOKENIZER_SPLIT_PUNCTUATION,
            ),
            max_length=settings.MARKOV_MAX_LENGTH,
            random_seed=settings.MARKOV_RANDOM_SEED,
        )

    def train(self, line: str) -> bool:
        """Learn from one line. Returns False for lines with no tokens."""
        tokens = tokenize(line, self.tokenizer)
        if not tokens:
            return False
        with self.lock.write_locked():
            self.model.train(tokens)
        return True

    def train_many(self, lines: Iterable[str]) -> int:
        """Learn from several lines under one write lock; returns lines used."""
        batches = [t for t in (tokenize(line, self.tokenizer) for line in lines) if t]
        with self.lock.write_locked():
            for tokens in batches:
                self.model.train(tokens)
        return len(batches)

    def respond(self, seed: Optional[str] = None, max_length: Optional[int] = None) -> str:
        """
        Generate a display string, optionally anchored on the seed's last token.

        Raises:
            EmptyModel: nothing has been trained yet
        """
        seed_tokens = tokenize(seed, self.tokenizer) if seed else []
        anchor = seed_tokens[-1] if seed_tokens else None
        limit = self.max_length if max_length is None else max_length

        with self.lock.read_locked():
            # the anchor counts toward the length cap
            anchored = limit > 0 and self.model.is_anchor(anchor)
            tokens = self.model.generate(anchor, limit - 1 if anchored else limit)

        if anchored:
            tokens = [anchor] + tokens
        return detokenize(tokens, self.tokenizer)

    def stats(self) -> ModelStats:
        with self.lock.read_locked():
            return self.model.stats()

    def is_empty(self) -> bool:
        with self.lock.read_locked():
            return self.model.is_empty()

    def save(self, path: Path):
        # snapshot under the lock, write the file outside it
        with self.lock.read_locked():
            snapshot = self.model.to_dict()
        persistence.save_snapshot(snapshot, Path(path))

    def load(self, path: Path):
        """
        Replace the model with the chain file at path.

        The running model is left untouched when the file is missing, corrupt
        or of another order.
        """
        model = persistence.load_model(Path(path), expected_order=self.order, rng=self.rng)
        with self.lock.write_locked():
            self.model = model
        logger.info(f"[Chain] Model replaced from {path}")

    def reset(self):
        with self.lock.write_locked():
            self.model = MarkovModel(self.order, rng=self.rng)
