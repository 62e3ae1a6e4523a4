from __future__ import annotations

"""Close out a session: weighted accuracy and the immutable SessionRecord."""

from datetime import datetime
from typing import Optional

from ..engine.prompting import IMMEDIATE_SESSIONS, schedule_for
from ..engine.recorder import SessionTally
from .schema import Phase, SessionRecord, TrialOutcome, is_unscaffolded

FADED_ASSISTED_WEIGHT = 0.5


def assisted_weight(session_number: int) -> float:
    """Assisted answers count fully while the prompt is immediate, half once it is delayed."""
    return 1.0 if session_number <= IMMEDIATE_SESSIONS else FADED_ASSISTED_WEIGHT


def weighted_accuracy(session_number: int, correct: int, assisted: int, total: int) -> float:
    if total <= 0:
        return 0.0
    score = correct + assisted * assisted_weight(session_number)
    return min(100.0, max(0.0, score / total * 100))


def unweighted_accuracy(correct: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return min(100.0, max(0.0, correct / total * 100))


def summarize(
    session_number: int,
    tally: SessionTally,
    phase: Phase,
    level: int,
    *,
    date: Optional[datetime] = None,
) -> SessionRecord:
    """Build the record for a finished session.

    Intervention records keep only resolved outcomes (transient incorrect
    retries never reach the tally). Baseline and target-word records use
    plain correct/total accuracy and carry no prompt type.
    """
    phase = Phase(phase)
    outcomes = list(tally.outcomes)
    total = len(outcomes)
    correct = outcomes.count(TrialOutcome.CORRECT)
    assisted = outcomes.count(TrialOutcome.ASSISTED)
    no_answer = outcomes.count(TrialOutcome.NO_ANSWER)
    incorrect = outcomes.count(TrialOutcome.INCORRECT)

    if is_unscaffolded(phase, level):
        accuracy = unweighted_accuracy(correct, total)
        prompt_type = None
    else:
        accuracy = weighted_accuracy(session_number, correct, assisted, total)
        prompt_type = schedule_for(session_number).prompt_type

    fields = dict(
        session_number=session_number,
        level=level,
        correct=correct,
        assisted=assisted,
        no_answer=no_answer,
        incorrect=incorrect,
        total=total,
        accuracy=accuracy,
        response_times=list(tally.response_times),
        words_asked=list(tally.words_asked),
        outcomes=outcomes,
        phase=phase,
        prompt_type=prompt_type,
    )
    if date is not None:
        fields["date"] = date
    return SessionRecord(**fields)
