from __future__ import annotations

"""Decision thresholds for mastery, baseline stability and gating (Pydantic)."""

from pydantic import BaseModel, Field


class Criteria(BaseModel):
    """Behavioral criteria.

    - mastery_consecutive_pct: both of the last two unprompted sessions at or above this
    - mastery_average_pct: mean of the last three unprompted sessions at or above this
    - baseline_window: consecutive baseline sessions examined together
    - baseline_range_pct: max - min accuracy allowed inside a stable window
    - min_target_words: target words needed before baseline / target-word sessions
    - max_grade: ceiling for the grade-increase suggestion
    """

    mastery_consecutive_pct: float = Field(90.0, ge=0, le=100)
    mastery_average_pct: float = Field(80.0, ge=0, le=100)
    mastery_average_window: int = Field(3, ge=2)
    baseline_window: int = Field(4, ge=2)
    baseline_range_pct: float = Field(10.0, ge=0, le=100)
    perfect_pct: float = Field(100.0, ge=0, le=100)
    min_target_words: int = Field(10, ge=1)
    max_grade: int = Field(8, ge=1)


DEFAULT_CRITERIA = Criteria()
