"""
Shared pytest fixtures for chain and bot tests.
"""
import json
import random
from pathlib import Path
from typing import List

import pytest

from chatter.services.chatter import ChainService
from chatter.services.markov import MarkovModel
from chatter.services.tokenizer import TokenizerConfig


# Channel lines as a chat adapter would post them
SAMPLE_CHANNEL_LINES = [
    "hello everyone, how is it going?",
    "the build is broken again",
    "did anyone look at the build logs?",
    "hello there!",
    "I think the cache is stale",
    "the cache was cleared this morning",
    "going to lunch, back in an hour",
    "anyone up for coffee?",
]


@pytest.fixture
def sample_corpus() -> List[str]:
    """Channel lines for training."""
    return list(SAMPLE_CHANNEL_LINES)


@pytest.fixture
def scenario_lines() -> List[str]:
    """Two lines whose order-1 chain has only two possible outputs."""
    return ["the cat sat", "the dog ran"]


@pytest.fixture
def plain_tokenizer() -> TokenizerConfig:
    """Whitespace-only tokenizer, case preserved."""
    return TokenizerConfig(lowercase=False, split_punctuation=False)


@pytest.fixture
def seeded_model() -> MarkovModel:
    """Empty order-1 model with a fixed random source."""
    return MarkovModel(order=1, rng=random.Random(1234))


@pytest.fixture
def chain_service() -> ChainService:
    """Empty order-1 chain service with a fixed random seed."""
    return ChainService(order=1, random_seed=42)


@pytest.fixture
def trained_service(chain_service, sample_corpus) -> ChainService:
    """Chain service trained on the sample channel lines."""
    chain_service.train_many(sample_corpus)
    return chain_service


@pytest.fixture
def chain_file(tmp_path) -> Path:
    """Path for a chain file inside the test's temp dir."""
    return tmp_path / "chain.json"


# Helper functions for tests


def write_chain_file(data, path: Path) -> Path:
    """Helper to write a raw chain document."""
    if isinstance(data, bytes):
        path.write_bytes(data)
        return path
    with path.open("w", encoding="utf-8") as f:
        if isinstance(data, str):
            f.write(data)
        else:
            json.dump(data, f)
    return path
