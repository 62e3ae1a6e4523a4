from __future__ import annotations

"""Participant-namespaced persistence of histories, words, flags and surveys.

Values are JSON strings under `"{participant}::{name}"`. Anything that fails
to parse is reported with a warning and replaced by an empty default; single
invalid records are skipped so one bad entry does not hide a history.
"""

import json
from typing import Any, Callable, Dict, List, Optional, TypeVar

from pydantic import ValidationError

from sightwords.app.explain import warn
from sightwords.results.schema import SessionRecord, SurveyResponse

from .kv import KeyValueStore
from .schema import (
    ALL_PARTICIPANTS_KEY,
    BASELINE_ESTABLISHED_KEY,
    BASELINE_KEY,
    MASTERY_CELEBRATED_KEY,
    PARTICIPANT_CONFIG_KEY,
    SESSIONS_KEY,
    SURVEYS_KEY,
    TARGET_COMPLETE_KEY,
    TARGET_WORDS_KEY,
    TOTAL_SCORE_KEY,
    participant_key,
)

T = TypeVar("T")


def _loads(raw: Optional[str], key: str) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        warn(f"malformed value under '{key}': {e}")
        return None


def parse_list(items: Any, parse: Callable[[Any], T], key: str) -> List[T]:
    if items is None:
        return []
    if not isinstance(items, list):
        warn(f"expected a list under '{key}', got {type(items).__name__}")
        return []
    out: List[T] = []
    for i, item in enumerate(items):
        try:
            out.append(parse(item))
        except (ValidationError, TypeError, ValueError) as e:
            warn(f"skipping invalid entry {i} under '{key}': {e.__class__.__name__}")
    return out


def list_participants(store: KeyValueStore) -> List[str]:
    data = _loads(store.get(ALL_PARTICIPANTS_KEY), ALL_PARTICIPANTS_KEY)
    if not isinstance(data, list):
        return []
    return [str(p) for p in data]


def register_participant(store: KeyValueStore, participant_id: str) -> List[str]:
    ids = list_participants(store)
    if participant_id not in ids:
        ids.append(participant_id)
        store.set(ALL_PARTICIPANTS_KEY, json.dumps(ids))
    return ids


class ParticipantStore:
    """Typed view of one participant's keys."""

    def __init__(self, store: KeyValueStore, participant_id: str) -> None:
        if not participant_id:
            raise ValueError("participant_id is required")
        self.store = store
        self.participant_id = participant_id

    def _key(self, name: str) -> str:
        return participant_key(self.participant_id, name)

    def _get(self, name: str) -> Any:
        key = self._key(name)
        return _loads(self.store.get(key), key)

    def _set(self, name: str, value: Any) -> None:
        self.store.set(self._key(name), json.dumps(value))

    # --- raw access (migration) ---

    def raw_sessions(self) -> Any:
        return self._get(SESSIONS_KEY)

    def write_raw_sessions(self, items: List[Dict[str, Any]]) -> None:
        self._set(SESSIONS_KEY, items)

    # --- histories ---

    def load_sessions(self) -> List[SessionRecord]:
        return parse_list(self._get(SESSIONS_KEY), SessionRecord.model_validate, self._key(SESSIONS_KEY))

    def save_sessions(self, records: List[SessionRecord]) -> None:
        self._set(SESSIONS_KEY, [r.to_json() for r in records])

    def load_baseline(self) -> List[SessionRecord]:
        return parse_list(self._get(BASELINE_KEY), SessionRecord.model_validate, self._key(BASELINE_KEY))

    def save_baseline(self, records: List[SessionRecord]) -> None:
        self._set(BASELINE_KEY, [r.to_json() for r in records])

    # --- words / profile ---

    def load_target_words(self) -> List[str]:
        return parse_list(self._get(TARGET_WORDS_KEY), lambda w: str(w).lower(), self._key(TARGET_WORDS_KEY))

    def save_target_words(self, words: List[str]) -> None:
        self._set(TARGET_WORDS_KEY, list(words))

    def load_participant_config(self) -> Optional[Dict[str, Any]]:
        data = self._get(PARTICIPANT_CONFIG_KEY)
        return data if isinstance(data, dict) else None

    def save_participant_config(self, data: Dict[str, Any]) -> None:
        self._set(PARTICIPANT_CONFIG_KEY, data)

    # --- score ---

    def load_total_score(self) -> Optional[int]:
        """Stored running total, or None when missing or corrupt."""
        data = self._get(TOTAL_SCORE_KEY)
        if isinstance(data, bool) or not isinstance(data, (int, float)) or data < 0:
            return None
        return int(data)

    def save_total_score(self, total: int) -> None:
        self._set(TOTAL_SCORE_KEY, int(total))

    # --- celebration flags ---

    def load_mastery_celebrated(self) -> Dict[int, bool]:
        data = self._get(MASTERY_CELEBRATED_KEY)
        if not isinstance(data, dict):
            return {}
        out: Dict[int, bool] = {}
        for k, v in data.items():
            try:
                out[int(k)] = bool(v)
            except ValueError:
                warn(f"ignoring celebration flag for level '{k}'")
        return out

    def save_mastery_celebrated(self, flags: Dict[int, bool]) -> None:
        self._set(MASTERY_CELEBRATED_KEY, {str(k): bool(v) for k, v in flags.items()})

    def load_flag(self, name: str) -> bool:
        return self._get(name) is True

    def save_flag(self, name: str, value: bool = True) -> None:
        self._set(name, bool(value))

    def target_complete_celebrated(self) -> bool:
        return self.load_flag(TARGET_COMPLETE_KEY)

    def baseline_established_flag(self) -> bool:
        return self.load_flag(BASELINE_ESTABLISHED_KEY)

    # --- surveys ---

    def load_surveys(self) -> List[SurveyResponse]:
        return parse_list(self._get(SURVEYS_KEY), SurveyResponse.model_validate, self._key(SURVEYS_KEY))

    def save_surveys(self, surveys: List[SurveyResponse]) -> None:
        self._set(SURVEYS_KEY, [s.to_json() for s in surveys])
