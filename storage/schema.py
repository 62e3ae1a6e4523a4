from __future__ import annotations

"""Storage keys and the Pydantic model / dtypes of the trial-level table."""

from datetime import datetime, timezone

import pandas as pd
from pandas.api.types import CategoricalDtype
from pydantic import BaseModel, Field, field_validator

from sightwords.results.schema import Phase, TrialOutcome

# --- Keys ---

SESSIONS_KEY = "sightWordsSessions"
BASELINE_KEY = "baselineSessions"
TARGET_WORDS_KEY = "targetWords"
PARTICIPANT_CONFIG_KEY = "participantConfig"
TOTAL_SCORE_KEY = "totalScore"
MASTERY_CELEBRATED_KEY = "masteryCelebrated"
TARGET_COMPLETE_KEY = "targetCompleteCelebrated"
BASELINE_ESTABLISHED_KEY = "baselineEstablished"
SURVEYS_KEY = "socialValiditySurveys"
ALL_PARTICIPANTS_KEY = "allParticipants"

KEY_SEPARATOR = "::"


def participant_key(participant_id: str, name: str) -> str:
    return f"{participant_id}{KEY_SEPARATOR}{name}"


# --- Trial table ---

OUTCOMES = {o.value for o in TrialOutcome}
PHASES = {p.value for p in Phase}


def _cat_dtype(categories: set[str]) -> CategoricalDtype:
    return CategoricalDtype(categories=sorted(categories), ordered=False)


DTYPES = {
    "participant_id": "string",
    # timezone-aware UTC timestamps
    "session_date": pd.DatetimeTZDtype(tz="UTC"),
    "phase": _cat_dtype(PHASES),
    "level": "UInt8",
    "session_number": "UInt16",
    "trial": "UInt16",
    "word": "string",
    "outcome": _cat_dtype(OUTCOMES),
    "seconds": "float32",
}


class TrialRow(BaseModel):
    participant_id: str
    session_date: datetime
    phase: Phase
    level: int = Field(ge=0, le=4)
    session_number: int = Field(ge=1, le=65535)
    trial: int = Field(ge=1, le=65535)
    word: str
    outcome: TrialOutcome
    seconds: float = Field(ge=0)

    @field_validator("session_date")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
