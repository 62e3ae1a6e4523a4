"""Sight-word constant time delay trainer.

Exposes the pure pieces of the intervention (prompt schedule, summarizer,
mastery and progression policies) so notebooks and tooling can simply
`import sightwords`.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .results.schema import Phase, PromptType, SessionRecord, TrialOutcome
from .engine.prompting import PromptPolicy, schedule_for
from .results.summarizer import summarize
from .policy.mastery import is_mastered, mastery_report
from .policy.baseline import is_baseline_established, suggest_grade_increase
from .policy.progression import Mode, ProgressionGate
from .stats.points import session_points

__all__ = [
    "__version__",
    "Phase",
    "PromptType",
    "SessionRecord",
    "TrialOutcome",
    "PromptPolicy",
    "schedule_for",
    "summarize",
    "is_mastered",
    "mastery_report",
    "is_baseline_established",
    "suggest_grade_increase",
    "Mode",
    "ProgressionGate",
    "session_points",
]
