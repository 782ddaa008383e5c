"""
Chain file persistence.

The chain file is a JSON document holding the chain order and the transition
table. Contexts are stored as arrays so tokens may contain any character.
"""
from __future__ import annotations

import json
import logging
import os
import random
import tempfile
from pathlib import Path
from typing import Optional

from chatter.services.errors import CorruptModel, OrderMismatch
from chatter.services.markov import MarkovModel

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def dumps(snapshot: dict) -> str:
    """Serialize a MarkovModel.to_dict() snapshot."""
    return json.dumps({"version": FORMAT_VERSION, **snapshot}, ensure_ascii=False)


def loads(
    data: str | bytes,
    expected_order: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> MarkovModel:
    """
    Decode a chain document into a new model.

    Raises:
        CorruptModel: data is not a valid chain document
        OrderMismatch: stored order differs from expected_order
    """
    try:
        raw = json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        raise CorruptModel(f"invalid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise CorruptModel("chain document must be an object")
    if raw.get("version", FORMAT_VERSION) != FORMAT_VERSION:
        raise CorruptModel(f"unsupported chain file version: {raw.get('version')!r}")

    order = raw.get("order")
    if expected_order is not None and isinstance(order, int) and order != expected_order:
        raise OrderMismatch(expected_order, order)
    return MarkovModel.from_dict(raw, rng=rng)


def save_snapshot(snapshot: dict, path: Path):
    """Write a snapshot atomically: temp file in the same dir, then replace."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = dumps(snapshot)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info(f"[Persist] Saved chain to {path} ({len(snapshot['transitions'])} contexts)")


def load_model(
    path: Path,
    expected_order: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> MarkovModel:
    """Read a chain file. FileNotFoundError propagates to the caller."""
    path = Path(path)
    logger.debug(f"[Persist] Reading chain from {path}")
    data = path.read_bytes()
    model = loads(data, expected_order=expected_order, rng=rng)
    logger.info(f"[Persist] Loaded chain from {path} ({len(model.transitions)} contexts)")
    return model
