from __future__ import annotations

"""Baseline stability and the grade-increase hint."""

from typing import Iterable, List, Optional

from ..results.schema import SessionRecord
from .criteria import DEFAULT_CRITERIA, Criteria


def stable_window(history: Iterable[SessionRecord], criteria: Optional[Criteria] = None) -> Optional[int]:
    """Start index of the earliest stable window, or None."""
    c = criteria or DEFAULT_CRITERIA
    accs: List[float] = [s.accuracy for s in history]
    w = c.baseline_window
    for i in range(0, len(accs) - w + 1):
        window = accs[i:i + w]
        if max(window) - min(window) <= c.baseline_range_pct:
            return i
    return None


def is_baseline_established(history: Iterable[SessionRecord], criteria: Optional[Criteria] = None) -> bool:
    """Any 4 consecutive baseline sessions within 10 points of each other.

    Windows only accumulate as sessions are appended, so once true this stays true.
    """
    return stable_window(history, criteria) is not None


def suggest_grade_increase(
    history: Iterable[SessionRecord], grade_level: int, criteria: Optional[Criteria] = None
) -> Optional[int]:
    """Suggested grade when the last two baseline sessions are perfect; advisory only."""
    c = criteria or DEFAULT_CRITERIA
    hist = list(history)
    if len(hist) < 2:
        return None
    if all(s.accuracy >= c.perfect_pct for s in hist[-2:]):
        return min(int(grade_level) + 1, c.max_grade)
    return None
