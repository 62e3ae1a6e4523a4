from __future__ import annotations

"""Progression gate: which game modes may start a new session.

Phases only move forward: baseline → level 1 → level 2 → level 3 → target
words. A mode closes for good once its criterion is met (baseline
established, level mastered, every target word read correctly).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from ..errors import InsufficientWordsError, ModeUnavailableError
from ..results.schema import BASELINE_LEVEL, TARGET_WORDS_LEVEL, Phase, SessionRecord, TrialOutcome
from .baseline import is_baseline_established
from .criteria import DEFAULT_CRITERIA, Criteria
from .mastery import is_level_mastered


class Mode(str, Enum):
    BASELINE = "baseline"
    LEVEL1 = "level1"
    LEVEL2 = "level2"
    LEVEL3 = "level3"
    TARGET_WORDS = "target_words"

    @property
    def level(self) -> int:
        return _MODE_LEVELS[self]

    @property
    def phase(self) -> Phase:
        return Phase.BASELINE if self == Mode.BASELINE else Phase.INTERVENTION

    @classmethod
    def for_level(cls, level: int) -> "Mode":
        for m, lv in _MODE_LEVELS.items():
            if lv == int(level):
                return m
        raise KeyError(f"Unknown level: {level}")


_MODE_LEVELS = {
    Mode.BASELINE: BASELINE_LEVEL,
    Mode.LEVEL1: 1,
    Mode.LEVEL2: 2,
    Mode.LEVEL3: 3,
    Mode.TARGET_WORDS: TARGET_WORDS_LEVEL,
}

MODE_LABELS = {
    Mode.BASELINE: "Baseline Mode",
    Mode.LEVEL1: "Easy (Level 1)",
    Mode.LEVEL2: "Medium (Level 2)",
    Mode.LEVEL3: "Hard (Level 3)",
    Mode.TARGET_WORDS: "Target Words",
}


def target_words_completed(target_words: Sequence[str], sessions: Iterable[SessionRecord]) -> bool:
    """Every target word answered correct at least once in a target-word session."""
    words = {w.lower() for w in target_words}
    if not words:
        return False
    hit = set()
    for s in sessions:
        if s.level != TARGET_WORDS_LEVEL:
            continue
        for w, o in zip(s.words_asked, s.outcomes):
            if o == TrialOutcome.CORRECT:
                hit.add(w.lower())
    return words <= hit


@dataclass(frozen=True)
class ModeStatus:
    mode: Mode
    available: bool
    completed: bool
    reason: str = ""


class ProgressionGate:
    """Pure availability predicates over the current histories.

    `sessions` is the full intervention history (all levels, including
    target-word sessions); `baseline` is the baseline history.
    """

    def __init__(
        self,
        sessions: Iterable[SessionRecord],
        baseline: Iterable[SessionRecord],
        target_words: Sequence[str],
        criteria: Optional[Criteria] = None,
    ) -> None:
        self.sessions: List[SessionRecord] = list(sessions)
        self.baseline: List[SessionRecord] = list(baseline)
        self.target_words: List[str] = list(target_words)
        self.criteria = criteria or DEFAULT_CRITERIA

    # --- completion criteria ---

    @property
    def has_enough_words(self) -> bool:
        return len(self.target_words) >= self.criteria.min_target_words

    def baseline_established(self) -> bool:
        return is_baseline_established(self.baseline, self.criteria)

    def level_mastered(self, level: int) -> bool:
        return is_level_mastered(self.sessions, level, self.criteria)

    def target_words_completed(self) -> bool:
        return target_words_completed(self.target_words, self.sessions)

    def is_completed(self, mode: Mode) -> bool:
        mode = Mode(mode)
        if mode == Mode.BASELINE:
            return self.baseline_established()
        if mode == Mode.TARGET_WORDS:
            return self.target_words_completed()
        return self.level_mastered(mode.level)

    # --- availability ---

    def _prerequisite_met(self, mode: Mode) -> bool:
        if mode == Mode.BASELINE:
            return True
        if mode == Mode.LEVEL1:
            return self.baseline_established()
        if mode == Mode.TARGET_WORDS:
            return self.level_mastered(3)
        return self.level_mastered(mode.level - 1)

    def is_available(self, mode: Mode) -> bool:
        mode = Mode(mode)
        if mode in (Mode.BASELINE, Mode.TARGET_WORDS) and not self.has_enough_words:
            return False
        return self._prerequisite_met(mode) and not self.is_completed(mode)

    def status(self) -> Dict[Mode, ModeStatus]:
        out: Dict[Mode, ModeStatus] = {}
        for mode in Mode:
            completed = self.is_completed(mode)
            available = self.is_available(mode)
            reason = ""
            if completed:
                reason = "Baseline Established" if mode == Mode.BASELINE else "Mastery Achieved"
            elif mode in (Mode.BASELINE, Mode.TARGET_WORDS) and not self.has_enough_words:
                reason = "Set target words first"
            elif not self._prerequisite_met(mode):
                reason = "Complete baseline first" if mode == Mode.LEVEL1 else f"Master Level {3 if mode == Mode.TARGET_WORDS else mode.level - 1} first"
            out[mode] = ModeStatus(mode=mode, available=available, completed=completed, reason=reason)
        return out

    def check_start(self, mode: Mode) -> None:
        """Raise when a new session of `mode` may not start."""
        mode = Mode(mode)
        if mode in (Mode.BASELINE, Mode.TARGET_WORDS) and not self.has_enough_words:
            raise InsufficientWordsError(len(self.target_words), self.criteria.min_target_words)
        if not self.is_available(mode):
            st = self.status()[mode]
            raise ModeUnavailableError(f"{MODE_LABELS[mode]} is not available: {st.reason or 'locked'}")
