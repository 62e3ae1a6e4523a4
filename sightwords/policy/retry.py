from __future__ import annotations

"""Answer handling policies: what an answer or a timeout does to the open trial."""

from dataclasses import dataclass
from typing import Literal, Optional, Protocol

from ..results.schema import Phase, TrialOutcome, is_unscaffolded


@dataclass(frozen=True)
class Decision:
    action: Literal["finalize", "retry"]
    outcome: Optional[TrialOutcome] = None
    feedback: str = ""


class AnswerPolicy(Protocol):
    def decide(self, is_correct: bool, prompt_visible: bool) -> Decision: ...

    def on_timeout(self) -> TrialOutcome: ...


class RetryUntilCorrect:
    """Intervention: wrong → try again; right → correct, or assisted if the prompt was showing."""

    def decide(self, is_correct: bool, prompt_visible: bool) -> Decision:
        if not is_correct:
            return Decision(action="retry", feedback="Try again")
        if prompt_visible:
            return Decision(action="finalize", outcome=TrialOutcome.ASSISTED)
        return Decision(action="finalize", outcome=TrialOutcome.CORRECT)

    def on_timeout(self) -> TrialOutcome:
        return TrialOutcome.NO_ANSWER


class FirstAnswerFinal:
    """Baseline / target words: the first answer ends the trial; silence counts as a miss."""

    def decide(self, is_correct: bool, prompt_visible: bool) -> Decision:
        return Decision(action="finalize", outcome=TrialOutcome.CORRECT if is_correct else TrialOutcome.INCORRECT)

    def on_timeout(self) -> TrialOutcome:
        return TrialOutcome.INCORRECT


def policy_for(phase: Phase, level: int) -> AnswerPolicy:
    if is_unscaffolded(phase, level):
        return FirstAnswerFinal()
    return RetryUntilCorrect()
