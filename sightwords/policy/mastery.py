from __future__ import annotations

"""Level mastery under unprompted (constant time delay) conditions."""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..results.schema import PromptType, SessionRecord
from .criteria import DEFAULT_CRITERIA, Criteria


def unprompted(history: Iterable[SessionRecord]) -> List[SessionRecord]:
    return [s for s in history if s.prompt_type == PromptType.DELAY]


def is_mastered(history: Iterable[SessionRecord], criteria: Optional[Criteria] = None) -> bool:
    """True when the unprompted sessions of a level meet either criterion.

    - the two most recent both reach 90 %, or
    - the most recent three average at least 80 %.

    Prompted (immediate) sessions never count. Evaluated fresh on every call.
    """
    c = criteria or DEFAULT_CRITERIA
    delayed = unprompted(history)
    if len(delayed) < 2:
        return False
    last_two = delayed[-2:]
    rule_a = all(s.accuracy >= c.mastery_consecutive_pct for s in last_two)
    n = c.mastery_average_window
    rule_b = len(delayed) >= n and sum(s.accuracy for s in delayed[-n:]) / n >= c.mastery_average_pct
    return rule_a or rule_b


def level_history(sessions: Iterable[SessionRecord], level: int) -> List[SessionRecord]:
    return [s for s in sessions if s.level == level]


def is_level_mastered(sessions: Iterable[SessionRecord], level: int, criteria: Optional[Criteria] = None) -> bool:
    """Gate view of mastery: once any record of the level was stamped it stays mastered."""
    hist = level_history(sessions, level)
    return any(s.mastery_achieved for s in hist) or is_mastered(hist, criteria)


@dataclass(frozen=True)
class MasteryReport:
    achieved: bool
    accuracy: float
    prompted_accuracy: float
    unprompted_accuracy: float
    prompted_sessions: int
    unprompted_sessions: int


def mastery_report(history: Iterable[SessionRecord], criteria: Optional[Criteria] = None) -> MasteryReport:
    """Prompted vs unprompted summary for progress displays.

    Prompted accuracy averages every immediate-prompt session; unprompted
    accuracy averages the most recent (up to three) delay sessions.
    """
    hist = list(history)
    if not hist:
        return MasteryReport(False, 0.0, 0.0, 0.0, 0, 0)
    c = criteria or DEFAULT_CRITERIA
    prompted = [s for s in hist if s.prompt_type == PromptType.IMMEDIATE]
    delayed = unprompted(hist)
    recent = delayed[-c.mastery_average_window:]
    return MasteryReport(
        achieved=is_mastered(hist, c),
        accuracy=sum(s.accuracy for s in hist) / len(hist),
        prompted_accuracy=(sum(s.accuracy for s in prompted) / len(prompted)) if prompted else 0.0,
        unprompted_accuracy=(sum(s.accuracy for s in recent) / len(recent)) if recent else 0.0,
        prompted_sessions=len(prompted),
        unprompted_sessions=len(delayed),
    )
