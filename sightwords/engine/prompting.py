from __future__ import annotations

"""Prompt schedule: immediate verbal prompt first, then constant time delay."""

from dataclasses import dataclass

from ..results.schema import PromptType

IMMEDIATE_SESSIONS = 2
DEFAULT_DELAY_MS = 3000


@dataclass(frozen=True)
class PromptPolicy:
    immediate: bool
    delay_ms: int

    @property
    def prompt_type(self) -> PromptType:
        return PromptType.IMMEDIATE if self.immediate else PromptType.DELAY


def schedule_for(session_number: int, delay_ms: int = DEFAULT_DELAY_MS) -> PromptPolicy:
    """Return the prompt policy for the n-th session of a level (1-based).

    Sessions 1 and 2 show the scaffold at trial start; later sessions withhold
    it for `delay_ms`.
    """
    if session_number <= IMMEDIATE_SESSIONS:
        return PromptPolicy(immediate=True, delay_ms=0)
    return PromptPolicy(immediate=False, delay_ms=int(delay_ms))
