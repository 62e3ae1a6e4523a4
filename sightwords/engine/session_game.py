from __future__ import annotations

"""The trial engine: runs one session's questions against the trial clock.

One trial is open at a time. Each trial owns a `TimerScope` holding its
prompt-reveal and time-limit callbacks; the session owns a second scope for
the feedback pause before the next trial. Every transition (finalize, next
trial, completion, abandon) cancels the outgoing scope, and finalization is
guarded by a lock so an answer racing the time limit is recorded once.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ..app.explain import trace as xtrace
from ..errors import SessionStateError
from ..policy.retry import policy_for
from ..results.schema import Phase, TrialOutcome, is_unscaffolded
from .clock import Scheduler, TimerScope
from .prompting import PromptPolicy, schedule_for
from .recorder import OutcomeRecorder, SessionTally, Trial


@dataclass(frozen=True)
class Question:
    word: str
    options: List[str]


@dataclass(frozen=True)
class SessionTiming:
    """Trial clock settings (seconds unless noted)."""

    time_limit_s: float = 10.0
    prompt_delay_ms: int = 3000
    pause_after_answer_s: float = 2.0
    pause_after_timeout_s: float = 5.0
    pause_unscaffolded_s: float = 0.2


class GameState(str, Enum):
    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class AnswerResult(str, Enum):
    CORRECT = "correct"
    ASSISTED = "assisted"
    INCORRECT = "incorrect"
    RETRY = "retry"
    IGNORED = "ignored"


class SessionGame:
    def __init__(
        self,
        questions: List[Question],
        *,
        session_number: int,
        phase: Phase,
        level: int,
        scheduler: Scheduler,
        timing: Optional[SessionTiming] = None,
        speak: Optional[Callable[[str], None]] = None,
        on_prompt: Optional[Callable[[Trial], None]] = None,
        on_trial_open: Optional[Callable[[Trial], None]] = None,
        on_trial_end: Optional[Callable[[Trial], None]] = None,
        on_complete: Optional[Callable[[SessionTally], None]] = None,
    ) -> None:
        if not questions:
            raise SessionStateError("a session needs at least one question")
        self.questions = list(questions)
        self.session_number = int(session_number)
        self.phase = Phase(phase)
        self.level = int(level)
        self.scheduler = scheduler
        self.timing = timing or SessionTiming()
        self.unscaffolded = is_unscaffolded(self.phase, self.level)
        self.prompt_policy: Optional[PromptPolicy] = (
            None if self.unscaffolded else schedule_for(self.session_number, self.timing.prompt_delay_ms)
        )
        self.policy = policy_for(self.phase, self.level)
        self.recorder = OutcomeRecorder(self.timing.time_limit_s)
        self.state = GameState.READY
        self.current: Optional[Trial] = None

        self._speak = speak or (lambda _w: None)
        self._on_prompt = on_prompt or (lambda _t: None)
        self._on_trial_open = on_trial_open or (lambda _t: None)
        self._on_trial_end = on_trial_end or (lambda _t: None)
        self._on_complete = on_complete or (lambda _r: None)

        self._lock = threading.RLock()
        self._trial_scope: Optional[TimerScope] = None
        self._session_scope = TimerScope(scheduler)

    # --- lifecycle ---

    @property
    def tally(self) -> SessionTally:
        return self.recorder.tally

    def start(self) -> None:
        with self._lock:
            if self.state != GameState.READY:
                raise SessionStateError(f"session already {self.state.value}")
            self.state = GameState.RUNNING
            xtrace("session_started", {"level": self.level, "phase": self.phase.value, "session": self.session_number})
            self._open_trial(0)

    def abandon(self) -> None:
        """Back out mid-session: cancel every timer and drop the open trial."""
        with self._lock:
            if self.state in (GameState.COMPLETED, GameState.ABANDONED):
                return
            self.state = GameState.ABANDONED
            self._cancel_timers()
            dropped = self.current.word if self.current is not None and not self.current.finalized else None
            self.current = None
            xtrace("session_abandoned", {"finalized": self.tally.total, "dropped": dropped})

    # --- answers ---

    def answer(self, word: str) -> AnswerResult:
        with self._lock:
            trial = self.current
            if self.state != GameState.RUNNING or trial is None or trial.finalized:
                return AnswerResult.IGNORED
            is_correct = str(word) == trial.word
            decision = self.policy.decide(is_correct, trial.prompt_visible)
            if decision.action == "retry":
                self.recorder.note_incorrect(trial)
                xtrace("retry", {"index": trial.index, "answer": word, "truth": trial.word})
                return AnswerResult.RETRY
            elapsed = self.scheduler.now() - trial.started_at
            assert decision.outcome is not None
            self._finalize(trial, decision.outcome, elapsed)
            pause = self.timing.pause_unscaffolded_s if self.unscaffolded else self.timing.pause_after_answer_s
            self._after_finalize(trial, pause)
            return AnswerResult(decision.outcome.value)

    # --- internals ---

    def _open_trial(self, index: int) -> None:
        if self._trial_scope is not None:
            self._trial_scope.cancel_all()
        scope = TimerScope(self.scheduler)
        self._trial_scope = scope
        q = self.questions[index]
        trial = self.recorder.open(q.word, q.options, self.scheduler.now())
        self.current = trial
        xtrace("trial_opened", {"index": index, "word": q.word, "options": q.options})
        self._on_trial_open(trial)
        self._speak(q.word)

        if self.prompt_policy is not None:
            if self.prompt_policy.immediate:
                self._show_prompt(trial)
            else:
                scope.call_later(self.prompt_policy.delay_ms / 1000.0, lambda: self._on_prompt_due(trial))
        scope.call_later(self.timing.time_limit_s, lambda: self._on_time_limit(trial))

    def _show_prompt(self, trial: Trial) -> None:
        trial.prompt_visible = True
        xtrace("prompt_shown", {"index": trial.index, "word": trial.word})
        self._on_prompt(trial)

    def _on_prompt_due(self, trial: Trial) -> None:
        with self._lock:
            if self.state != GameState.RUNNING or trial is not self.current or trial.finalized:
                return
            self._show_prompt(trial)

    def _on_time_limit(self, trial: Trial) -> None:
        with self._lock:
            if self.state != GameState.RUNNING or trial is not self.current or trial.finalized:
                return
            # scaffold is revealed with the time-up message
            if self.prompt_policy is not None and not trial.prompt_visible:
                self._show_prompt(trial)
            self._finalize(trial, self.policy.on_timeout(), self.timing.time_limit_s)
            pause = self.timing.pause_unscaffolded_s if self.unscaffolded else self.timing.pause_after_timeout_s
            self._after_finalize(trial, pause)

    def _finalize(self, trial: Trial, outcome: TrialOutcome, elapsed_s: float) -> None:
        if self.recorder.finalize(trial, outcome, elapsed_s):
            xtrace(
                "trial_finalized",
                {"index": trial.index, "word": trial.word, "outcome": trial.outcome.value, "seconds": trial.elapsed_s},
            )

    def _after_finalize(self, trial: Trial, pause_s: float) -> None:
        if self._trial_scope is not None:
            self._trial_scope.cancel_all()
        self._on_trial_end(trial)
        nxt = trial.index + 1
        if nxt >= len(self.questions):
            self._complete()
            return
        if pause_s <= 0:
            self._open_trial(nxt)
            return
        self._session_scope.call_later(pause_s, lambda: self._advance(nxt))

    def _advance(self, index: int) -> None:
        with self._lock:
            if self.state != GameState.RUNNING or self.current is None or self.current.index + 1 != index:
                return
            self._open_trial(index)

    def _complete(self) -> None:
        self.state = GameState.COMPLETED
        self._cancel_timers()
        t = self.tally
        xtrace("session_completed", {"correct": t.correct, "assisted": t.assisted, "no_answer": t.no_answer, "incorrect": t.incorrect, "total": t.total})
        self._on_complete(t)

    def _cancel_timers(self) -> None:
        if self._trial_scope is not None:
            self._trial_scope.cancel_all()
        self._session_scope.cancel_all()
