from __future__ import annotations

"""Visually similar word suggestions (edit distance)."""

from typing import List


def levenshtein(a: str, b: str) -> int:
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        cur = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                cur[j] = prev[j - 1]
            else:
                cur[j] = 1 + min(prev[j], cur[j - 1], prev[j - 1])
        prev = cur
    return prev[len(b)]


def similar_words(target: str, grade_words: List[str], count: int, max_distance: int = 2) -> List[str]:
    """Closest words to `target`, preferring those within `max_distance` edits.

    Ties break alphabetically; if too few are close, the next closest fill in.
    """
    ranked = sorted(
        ((levenshtein(target, w), w) for w in grade_words if w != target),
        key=lambda p: (p[0], p[1]),
    )
    close = [w for d, w in ranked if d <= max_distance]
    far = [w for d, w in ranked if d > max_distance]
    return (close + far)[:count]
