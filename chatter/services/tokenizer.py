"""
Line tokenizer for the Markov chain.

Splits channel lines on whitespace and, optionally, peels punctuation off the
edges of each word so "hello," trains as "hello" followed by ",".
"""
from __future__ import annotations

import string
from dataclasses import dataclass
from typing import List, Tuple

PUNCTUATION = set(string.punctuation) | {"…", "“", "”", "‘", "’", "«", "»"}
OPENING = set("([{“‘«")
CLOSING = set(".,;:!?)]}…”’»")
# chars allowed in a multi-char run that still attaches to the previous word;
# ":" and ";" are left out so ":)" and ";)" stay standalone
TRAILING = (CLOSING - {":", ";"}) | {'"'}


@dataclass(frozen=True)
class TokenizerConfig:
    """Case folding and punctuation splitting policy."""
    lowercase: bool = False
    split_punctuation: bool = True


DEFAULT_CONFIG = TokenizerConfig()


def _peel(chunk: str) -> List[str]:
    """Split a leading and a trailing punctuation run off a word."""
    start = 0
    while start < len(chunk) and chunk[start] in PUNCTUATION:
        start += 1
    if start == len(chunk):
        # all punctuation: "...", ":)", "!!"
        return [chunk]

    end = len(chunk)
    while end > start and chunk[end - 1] in PUNCTUATION:
        end -= 1

    parts = []
    if start:
        parts.append(chunk[:start])
    parts.append(chunk[start:end])
    if end < len(chunk):
        parts.append(chunk[end:])
    return parts


def tokenize(line: str, config: TokenizerConfig = DEFAULT_CONFIG) -> List[str]:
    """
    Tokenize a line of text.

    Args:
        line: Message text, command prefix already stripped
        config: Tokenizer policy

    Returns:
        Ordered list of tokens; empty for blank lines
    """
    if config.lowercase:
        line = line.lower()

    tokens: List[str] = []
    for chunk in line.split():
        if config.split_punctuation:
            tokens.extend(_peel(chunk))
        else:
            tokens.append(chunk)
    return tokens


def _is_run_of(token: str, chars: set) -> bool:
    return bool(token) and all(c in chars for c in token)


def _attaches_left(token: str, quote_open: bool) -> bool:
    if token == '"':
        return quote_open
    if len(token) == 1:
        return token in CLOSING
    return _is_run_of(token, TRAILING)


def detokenize(tokens: List[str] | Tuple[str, ...], config: TokenizerConfig = DEFAULT_CONFIG) -> str:
    """
    Join tokens back into a display string.

    Closing punctuation attaches to the previous word, opening brackets to the
    next one. Straight double quotes alternate between opening and closing.
    Emoticons and other punctuation runs read as words of their own.
    """
    if not config.split_punctuation:
        return " ".join(tokens)

    out: List[str] = []
    glue_next = False
    quote_open = False
    for token in tokens:
        closing = _attaches_left(token, quote_open)
        if out and not glue_next and not closing:
            out.append(" ")
        out.append(token)

        glue_next = token in OPENING or (token == '"' and not quote_open)
        if _is_run_of(token, PUNCTUATION) and token.count('"') % 2:
            quote_open = not quote_open
    return "".join(out)
