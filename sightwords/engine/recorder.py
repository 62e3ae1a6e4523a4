from __future__ import annotations

"""Per-trial outcome recording for the active session."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..results.schema import TrialOutcome

TIME_LIMIT_S = 10.0


def clamp_elapsed(seconds: float, limit_s: float = TIME_LIMIT_S) -> float:
    return round(min(float(limit_s), max(0.0, float(seconds))), 2)


@dataclass
class Trial:
    """One open question: the word, its shuffled options and when it started."""

    index: int
    word: str
    options: List[str]
    started_at: float
    prompt_visible: bool = False
    retries: int = 0
    outcome: Optional[TrialOutcome] = None
    elapsed_s: Optional[float] = None

    @property
    def finalized(self) -> bool:
        return self.outcome is not None


@dataclass
class SessionTally:
    """Running lists and counters for one session, in trial order."""

    outcomes: List[TrialOutcome] = field(default_factory=list)
    response_times: List[float] = field(default_factory=list)
    words_asked: List[str] = field(default_factory=list)
    counts: Dict[TrialOutcome, int] = field(default_factory=lambda: {o: 0 for o in TrialOutcome})
    retries: int = 0

    @property
    def correct(self) -> int:
        return self.counts[TrialOutcome.CORRECT]

    @property
    def assisted(self) -> int:
        return self.counts[TrialOutcome.ASSISTED]

    @property
    def no_answer(self) -> int:
        return self.counts[TrialOutcome.NO_ANSWER]

    @property
    def incorrect(self) -> int:
        return self.counts[TrialOutcome.INCORRECT]

    @property
    def total(self) -> int:
        return len(self.outcomes)


class OutcomeRecorder:
    def __init__(self, time_limit_s: float = TIME_LIMIT_S) -> None:
        self.time_limit_s = float(time_limit_s)
        self.tally = SessionTally()
        self._opened = 0

    def open(self, word: str, options: List[str], started_at: float) -> Trial:
        trial = Trial(index=self._opened, word=word, options=list(options), started_at=float(started_at))
        self._opened += 1
        return trial

    def note_incorrect(self, trial: Trial) -> None:
        """Count a wrong answer that leaves the trial open for a retry."""
        if trial.finalized:
            return
        trial.retries += 1
        self.tally.retries += 1

    def finalize(self, trial: Trial, outcome: TrialOutcome, elapsed_s: float) -> bool:
        """Record the trial outcome once. Later calls are no-ops and return False."""
        if trial.finalized:
            return False
        elapsed = clamp_elapsed(elapsed_s, self.time_limit_s)
        trial.outcome = TrialOutcome(outcome)
        trial.elapsed_s = elapsed
        t = self.tally
        t.outcomes.append(trial.outcome)
        t.response_times.append(elapsed)
        t.words_asked.append(trial.word)
        t.counts[trial.outcome] += 1
        return True
