from __future__ import annotations

"""Analytics configuration (graph and smoothing parameters) using Pydantic."""

from typing import List
from pydantic import BaseModel, Field


class AnalyticsConfig(BaseModel):
    """Parameters for phase graphs and smoothing.

    - criterion_lines: horizontal accuracy lines drawn on phase graphs (%)
    - smoothing_span: EWMA span in sessions (>1)
    - min_trials: words asked fewer times than this are left out of word summaries
    - dpi: resolution of saved figures
    """

    criterion_lines: List[float] = Field(default_factory=lambda: [80.0, 90.0])
    smoothing_span: int = Field(3, gt=1)
    min_trials: int = Field(1, ge=1)
    dpi: int = Field(150, gt=0)
