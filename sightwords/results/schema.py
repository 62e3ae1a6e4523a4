from __future__ import annotations

"""Session record schema.

Records are frozen Pydantic models. Field aliases keep the camelCase layout
of previously stored histories so they load without conversion.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# --- Constants ---

BASELINE_LEVEL = 0
INTERVENTION_LEVELS = (1, 2, 3)
TARGET_WORDS_LEVEL = 4
VALID_LEVELS = {BASELINE_LEVEL, *INTERVENTION_LEVELS, TARGET_WORDS_LEVEL}


class TrialOutcome(str, Enum):
    CORRECT = "correct"
    ASSISTED = "assisted"
    NO_ANSWER = "no-answer"
    INCORRECT = "incorrect"


class Phase(str, Enum):
    BASELINE = "baseline"
    INTERVENTION = "intervention"


class PromptType(str, Enum):
    IMMEDIATE = "immediate"
    DELAY = "delay"


def is_unscaffolded(phase: Phase, level: int) -> bool:
    """Baseline and target-word sessions run without prompts or retries."""
    return phase == Phase.BASELINE or level == TARGET_WORDS_LEVEL


# --- Pydantic models ---

class SessionRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    session_number: int = Field(alias="sessionNumber", ge=1)
    level: int = Field(default=1, ge=0)
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    correct: int = Field(default=0, alias="correctAnswers", ge=0)
    assisted: int = Field(default=0, alias="assistedAnswers", ge=0)
    no_answer: int = Field(default=0, alias="noAnswers", ge=0)
    incorrect: int = Field(default=0, alias="incorrectAnswers", ge=0)
    total: int = Field(default=0, alias="totalQuestions", ge=0)
    accuracy: float = Field(default=0.0, ge=0, le=100)
    response_times: List[float] = Field(default_factory=list, alias="timeToRespond")
    words_asked: List[str] = Field(default_factory=list, alias="wordsAsked")
    outcomes: List[TrialOutcome] = Field(default_factory=list, alias="responseTypes")
    phase: Phase = Phase.INTERVENTION
    prompt_type: Optional[PromptType] = Field(default=None, alias="promptType")
    mastery_achieved: bool = Field(default=False, alias="masteryAchieved")

    @field_validator("date")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @field_validator("accuracy", mode="before")
    @classmethod
    def _nan_safe(cls, v):
        try:
            f = float(v)
        except (TypeError, ValueError):
            return 0.0
        if f != f:
            return 0.0
        return min(100.0, max(0.0, f))

    @model_validator(mode="after")
    def _counts_fit_total(self) -> "SessionRecord":
        if self.correct + self.assisted + self.no_answer + self.incorrect > self.total:
            raise ValueError("outcome counts exceed totalQuestions")
        return self

    @property
    def unscaffolded(self) -> bool:
        return is_unscaffolded(self.phase, self.level)

    @property
    def failed(self) -> int:
        """Trials that did not end correct: reported as 'Incorrect' for baseline/target words."""
        return max(0, self.total - self.correct)

    def with_mastery(self) -> "SessionRecord":
        return self.model_copy(update={"mastery_achieved": True})

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class SurveyResponse(BaseModel):
    """Social validity questionnaire: four 1–5 ratings and three open answers."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    participant_id: str = Field(default="", alias="participantId")
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    helpfulness: int = Field(alias="q1_helpfulness", ge=1, le=5)
    engagement: int = Field(alias="q2_engagement", ge=1, le=5)
    ease_of_use: int = Field(alias="q3_easeOfUse", ge=1, le=5)
    would_recommend: int = Field(alias="q4_wouldRecommend", ge=1, le=5)
    improvements: str = Field(default="", alias="q5_improvements")
    liked: str = Field(default="", alias="q6_liked")
    difficulties: str = Field(default="", alias="q7_difficulties")

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
