from __future__ import annotations

"""Participant context: owns the store view, profile, histories and active session.

Lifecycle is `init → active → torn_down`. Histories are only replaced whole
through `commit_*`, which writes them in one store call each.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from storage.kv import KeyValueStore
from storage.migration import migrate_participant
from storage.records import ParticipantStore, register_participant
from storage.schema import BASELINE_ESTABLISHED_KEY, TARGET_COMPLETE_KEY

from ..config.config import criteria_from
from ..errors import SessionStateError
from ..policy.criteria import DEFAULT_CRITERIA, Criteria
from ..policy.progression import ProgressionGate
from ..results.schema import INTERVENTION_LEVELS, SessionRecord, SurveyResponse
from ..stats.points import total_points
from ..words import targets
from .explain import trace as xtrace
from .participant import ParticipantInfo, make_participant, parse_participant


class ContextState(str, Enum):
    INIT = "init"
    ACTIVE = "active"
    TORN_DOWN = "torn_down"


class ParticipantContext:
    def __init__(self, store: KeyValueStore, participant_id: str, cfg: Optional[Dict[str, Any]] = None) -> None:
        self.cfg = cfg or {}
        self.criteria: Criteria = criteria_from(self.cfg) if self.cfg.get("criteria") else DEFAULT_CRITERIA
        self.records = ParticipantStore(store, participant_id)
        self.participant_id = participant_id
        self.state = ContextState.INIT
        self.participant: Optional[ParticipantInfo] = None
        self.sessions: List[SessionRecord] = []
        self.baseline: List[SessionRecord] = []
        self.target_words: List[str] = []
        self.surveys: List[SurveyResponse] = []
        self.total_score = 0
        self.active_session: Any = None

    # --- lifecycle ---

    def open(self) -> "ParticipantContext":
        if self.state == ContextState.TORN_DOWN:
            raise SessionStateError("context already torn down")
        register_participant(self.records.store, self.participant_id)
        self.participant = parse_participant(self.records.load_participant_config())
        if self.participant is not None:
            migrate_participant(self.records, self.participant.reading_level, self.participant.grade_level)
        self.reload()
        self.state = ContextState.ACTIVE
        xtrace(
            "context_opened",
            {"participant": self.participant_id, "sessions": len(self.sessions), "baseline": len(self.baseline)},
        )
        return self

    def reload(self) -> None:
        self.sessions = self.records.load_sessions()
        self.baseline = self.records.load_baseline()
        self.target_words = self.records.load_target_words()
        self.surveys = self.records.load_surveys()
        stored = self.records.load_total_score()
        self.total_score = stored if stored is not None else total_points(self.sessions)

    def close(self) -> None:
        if self.active_session is not None:
            self.active_session.abandon()
            self.active_session = None
        self.state = ContextState.TORN_DOWN

    def __enter__(self) -> "ParticipantContext":
        return self.open()

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def require_active(self) -> None:
        if self.state != ContextState.ACTIVE:
            raise SessionStateError(f"context is {self.state.value}")

    # --- profile and words ---

    def configure(self, grade_level: int, reading_level: int) -> ParticipantInfo:
        p = self.cfg.get("participant", {})
        info = make_participant(
            grade_level,
            reading_level,
            min_grade=int(p.get("min_grade", 5)),
            max_grade=int(p.get("max_grade", 8)),
        )
        self.records.save_participant_config(info.to_json())
        self.participant = info
        return info

    def save_target_words(self, words: List[str]) -> List[str]:
        cleaned = targets.validate_for_save(words, self.criteria.min_target_words)
        self.records.save_target_words(cleaned)
        self.target_words = cleaned
        return cleaned

    def gate(self) -> ProgressionGate:
        return ProgressionGate(self.sessions, self.baseline, self.target_words, self.criteria)

    # --- commits ---

    def commit_sessions(self, history: List[SessionRecord]) -> None:
        self.records.save_sessions(history)
        self.sessions = list(history)

    def commit_baseline(self, history: List[SessionRecord]) -> None:
        self.records.save_baseline(history)
        self.baseline = list(history)

    def add_points(self, points: int) -> int:
        self.total_score += int(points)
        self.records.save_total_score(self.total_score)
        return self.total_score

    def add_survey(self, survey: SurveyResponse) -> None:
        updated = self.surveys + [survey]
        self.records.save_surveys(updated)
        self.surveys = updated

    # --- celebrations ---

    def pending_celebrations(self) -> List[str]:
        """Milestones reached but not yet dismissed."""
        gate = self.gate()
        out: List[str] = []
        if gate.baseline_established() and not self.records.baseline_established_flag():
            out.append("baseline")
        celebrated = self.records.load_mastery_celebrated()
        for level in INTERVENTION_LEVELS:
            if gate.level_mastered(level) and not celebrated.get(level):
                out.append(f"level{level}")
        if gate.target_words_completed() and not self.records.target_complete_celebrated():
            out.append("target_words")
        return out

    def dismiss_celebration(self, name: str) -> None:
        if name == "baseline":
            self.records.save_flag(BASELINE_ESTABLISHED_KEY)
        elif name == "target_words":
            self.records.save_flag(TARGET_COMPLETE_KEY)
        elif name.startswith("level") and name[5:].isdigit():
            flags = self.records.load_mastery_celebrated()
            flags[int(name[5:])] = True
            self.records.save_mastery_celebrated(flags)
        else:
            raise ValueError(f"Unknown celebration: {name}")
