from __future__ import annotations

"""Tiny pub/sub event bus for progress notifications."""

from typing import Any, Callable, Dict, List

from .explain import warn

POINTS_AWARDED = "points_awarded"
MASTERY_ACHIEVED = "mastery_achieved"
BASELINE_ESTABLISHED = "baseline_established"
GRADE_SUGGESTION = "grade_suggestion"
TARGET_WORDS_COMPLETED = "target_words_completed"


class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        self._subs.setdefault(event, []).append(handler)

    def emit(self, event: str, payload: Any) -> None:
        for h in self._subs.get(event, []):
            try:
                h(payload)
            except Exception as e:  # handler faults never interrupt a session
                warn(f"handler for '{event}' failed: {e!r}")
