from __future__ import annotations

"""Target-word list editing: normalized, unique, capped."""

import random
from typing import List, Optional, Sequence

from ..errors import InsufficientWordsError
from .bank import get_random_words, get_sight_words
from .similar import similar_words

MAX_TARGET_WORDS = 10


def normalize(word: str) -> str:
    return str(word).strip().lower()


def add_word(words: Sequence[str], word: str, limit: int = MAX_TARGET_WORDS) -> List[str]:
    """Return a new list with `word` appended unless blank, present or full."""
    out = list(words)
    w = normalize(word)
    if not w or w in out or len(out) >= limit:
        return out
    out.append(w)
    return out


def remove_word(words: Sequence[str], word: str) -> List[str]:
    w = normalize(word)
    return [x for x in words if x != w]


def replace_word(words: Sequence[str], old: str, new: str) -> List[str]:
    """Swap `old` for `new` in place; unchanged when `old` is absent or `new` already listed."""
    o, n = normalize(old), normalize(new)
    if not n or o not in words or n in words:
        return list(words)
    return [n if w == o else w for w in words]


def clean(words: Sequence[str], limit: int = MAX_TARGET_WORDS) -> List[str]:
    out: List[str] = []
    for w in words:
        out = add_word(out, w, limit)
    return out


def generate(grade_level: int, count: int = MAX_TARGET_WORDS, rng: Optional[random.Random] = None) -> List[str]:
    return clean(get_random_words(grade_level, count, rng), count)


def suggest(word: str, grade_level: int, count: int = 5) -> List[str]:
    return similar_words(normalize(word), [normalize(w) for w in get_sight_words(grade_level)], count)


def validate_for_save(words: Sequence[str], minimum: int = MAX_TARGET_WORDS) -> List[str]:
    """Cleaned list ready to persist; raises when too short."""
    out = clean(words)
    if len(out) < minimum:
        raise InsufficientWordsError(len(out), minimum)
    return out
