from __future__ import annotations

"""Session Manager: orchestrates the trial engine, policies and persistence.

CLI-agnostic: the shell supplies a scheduler, a speaker and callbacks, then
feeds answers into the running `SessionGame`. A completed session is
summarized, stamped with mastery when its level history qualifies, and
written as one new history; an abandoned session writes nothing.
"""

import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

import pyarrow as pa

from storage.store import append_trials, records_frame

from ..engine.clock import Scheduler
from ..engine.recorder import SessionTally
from ..engine.session_game import SessionGame, SessionTiming
from ..errors import SessionStateError
from ..policy.baseline import is_baseline_established, suggest_grade_increase
from ..policy.mastery import is_mastered, level_history
from ..policy.progression import Mode, target_words_completed
from ..results.schema import INTERVENTION_LEVELS, SessionRecord
from ..results.summarizer import summarize
from ..stats.points import session_points
from ..words.questions import build_questions
from . import events as ev
from .context import ParticipantContext
from .explain import trace as xtrace
from .explain import warn


@dataclass
class SessionOutcome:
    record: SessionRecord
    points: int = 0
    total_score: int = 0
    events: List[str] = field(default_factory=list)
    grade_suggestion: Optional[int] = None


class SessionManager:
    def __init__(
        self,
        ctx: ParticipantContext,
        scheduler: Scheduler,
        *,
        timing: Optional[SessionTiming] = None,
        bus: Optional[ev.EventBus] = None,
        speak: Optional[Callable[[str], None]] = None,
        rng: Optional[random.Random] = None,
        data_dir: Optional[Path] = None,
    ) -> None:
        self.ctx = ctx
        self.scheduler = scheduler
        self.timing = timing or SessionTiming()
        self.bus = bus or ev.EventBus()
        self.speak = speak
        self.rng = rng or random.Random()
        self.data_dir = Path(data_dir) if data_dir else None
        self.game: Optional[SessionGame] = None
        self.mode: Optional[Mode] = None
        self.last: Optional[SessionOutcome] = None
        self._on_finish: Optional[Callable[[SessionOutcome], None]] = None

    # --- numbering ---

    def next_session_number(self, mode: Mode) -> int:
        mode = Mode(mode)
        if mode == Mode.BASELINE:
            return len(self.ctx.baseline) + 1
        return len(level_history(self.ctx.sessions, mode.level)) + 1

    # --- lifecycle ---

    def start_session(
        self,
        mode: Mode,
        *,
        on_finish: Optional[Callable[[SessionOutcome], None]] = None,
        **callbacks,
    ) -> SessionGame:
        """Check the gate, build questions and start the engine.

        Extra keyword callbacks (`on_prompt`, `on_trial_open`, `on_trial_end`)
        are handed to the engine.
        """
        self.ctx.require_active()
        if self.ctx.active_session is not None:
            raise SessionStateError("a session is already running")
        if self.ctx.participant is None:
            raise SessionStateError("configure the participant's grade and reading level first")
        mode = Mode(mode)
        self.ctx.gate().check_start(mode)

        session_cfg = self.ctx.cfg.get("session", {})
        questions = build_questions(
            mode,
            self.ctx.participant.grade_for_level(mode.level),
            self.ctx.target_words,
            count=int(session_cfg.get("questions", 10)),
            options_per_trial=int(session_cfg.get("options_per_trial", 4)),
            rng=self.rng,
        )
        self.mode = mode
        self.last = None
        self._on_finish = on_finish
        self.game = SessionGame(
            questions,
            session_number=self.next_session_number(mode),
            phase=mode.phase,
            level=mode.level,
            scheduler=self.scheduler,
            timing=self.timing,
            speak=self.speak,
            on_complete=self._on_complete,
            **callbacks,
        )
        self.ctx.active_session = self.game
        self.game.start()
        return self.game

    def abandon(self) -> None:
        if self.game is None:
            return
        self.game.abandon()
        self._clear()

    def _clear(self) -> None:
        self.game = None
        self.ctx.active_session = None

    # --- completion ---

    def _on_complete(self, tally: SessionTally) -> None:
        game, mode = self.game, self.mode
        assert game is not None and mode is not None
        record = summarize(game.session_number, tally, game.phase, game.level)
        xtrace("session_summarized", {"level": record.level, "session": record.session_number, "accuracy": record.accuracy})
        if mode == Mode.BASELINE:
            outcome = self._finish_baseline(record)
        else:
            outcome = self._finish_intervention(record)
        self._clear()
        self.last = outcome
        self._write_trials(outcome.record)
        if self._on_finish is not None:
            self._on_finish(outcome)

    def _finish_baseline(self, record: SessionRecord) -> SessionOutcome:
        ctx = self.ctx
        was_established = is_baseline_established(ctx.baseline, ctx.criteria)
        history = ctx.baseline + [record]
        ctx.commit_baseline(history)
        out = SessionOutcome(record=record, total_score=ctx.total_score)
        if not was_established and is_baseline_established(history, ctx.criteria):
            out.events.append(ev.BASELINE_ESTABLISHED)
            self.bus.emit(ev.BASELINE_ESTABLISHED, {"sessions": len(history)})
        assert ctx.participant is not None
        suggestion = suggest_grade_increase(history, ctx.participant.grade_level, ctx.criteria)
        if suggestion is not None and suggestion != ctx.participant.grade_level:
            out.grade_suggestion = suggestion
            out.events.append(ev.GRADE_SUGGESTION)
            self.bus.emit(ev.GRADE_SUGGESTION, {"current": ctx.participant.grade_level, "suggested": suggestion})
        return out

    def _finish_intervention(self, record: SessionRecord) -> SessionOutcome:
        ctx = self.ctx
        was_complete = target_words_completed(ctx.target_words, ctx.sessions)
        events: List[str] = []
        if record.level in INTERVENTION_LEVELS:
            if is_mastered(level_history(ctx.sessions, record.level) + [record], ctx.criteria):
                record = record.with_mastery()
                xtrace("mastery_stamped", {"level": record.level, "session": record.session_number})
        history = ctx.sessions + [record]
        ctx.commit_sessions(history)

        rewards = ctx.cfg.get("rewards", {})
        points = session_points(record, int(rewards.get("correct", 10)), int(rewards.get("assisted", 5)))
        total = ctx.add_points(points)
        events.append(ev.POINTS_AWARDED)
        self.bus.emit(ev.POINTS_AWARDED, {"points": points, "total": total})

        if record.mastery_achieved:
            events.append(ev.MASTERY_ACHIEVED)
            self.bus.emit(ev.MASTERY_ACHIEVED, {"level": record.level, "session": record.session_number})
        if not was_complete and target_words_completed(ctx.target_words, history):
            events.append(ev.TARGET_WORDS_COMPLETED)
            self.bus.emit(ev.TARGET_WORDS_COMPLETED, {"words": list(ctx.target_words)})
        return SessionOutcome(record=record, points=points, total_score=total, events=events)

    def _write_trials(self, record: SessionRecord) -> None:
        if self.data_dir is None or not record.words_asked:
            return
        try:
            append_trials(records_frame(self.ctx.participant_id, [record]), self.data_dir)
        except (OSError, ValueError, pa.ArrowException) as e:
            warn(f"could not write trial table in {self.data_dir}: {e}")
