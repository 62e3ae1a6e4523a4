from __future__ import annotations

"""Participant profile: grade and reading level, and the word-list grade per level."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import InvalidParticipantConfig
from ..results.schema import BASELINE_LEVEL, TARGET_WORDS_LEVEL

MIN_GRADE = 5
MAX_GRADE = 8
MIN_READING = 1


class ParticipantInfo(BaseModel):
    """Grade 5..8; reading level 1..8 and strictly below grade to show disparity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    grade_level: int = Field(alias="gradeLevel", ge=MIN_READING, le=MAX_GRADE)
    reading_level: int = Field(alias="readingLevel", ge=MIN_READING, le=MAX_GRADE)

    @model_validator(mode="after")
    def _disparity(self) -> "ParticipantInfo":
        if self.reading_level >= self.grade_level:
            raise ValueError("Reading level should be below grade level to show disparity.")
        return self

    @property
    def midway_grade(self) -> int:
        return (self.reading_level + self.grade_level) // 2

    def grade_for_level(self, level: int) -> int:
        """Word-list grade for a game level."""
        if level == 1:
            return self.reading_level
        if level == 2:
            return self.midway_grade
        if level in (3, BASELINE_LEVEL, TARGET_WORDS_LEVEL):
            return self.grade_level
        raise ValueError(f"Unknown level: {level}")

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def make_participant(
    grade_level: int,
    reading_level: int,
    *,
    min_grade: int = MIN_GRADE,
    max_grade: int = MAX_GRADE,
) -> ParticipantInfo:
    """Validate a profile; raises InvalidParticipantConfig so nothing is saved."""
    if not (min_grade <= int(grade_level) <= max_grade):
        raise InvalidParticipantConfig(f"Grade level must be between {min_grade} and {max_grade}.")
    try:
        return ParticipantInfo(grade_level=grade_level, reading_level=reading_level)
    except ValidationError as e:
        msg = e.errors()[0].get("msg", str(e))
        raise InvalidParticipantConfig(msg.removeprefix("Value error, ")) from e


def parse_participant(data: Optional[Dict[str, Any]]) -> Optional[ParticipantInfo]:
    """Stored profile or None; stored profiles are trusted for range but not for shape."""
    if not data:
        return None
    try:
        return ParticipantInfo.model_validate(data)
    except ValidationError:
        return None
