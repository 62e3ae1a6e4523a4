from __future__ import annotations

"""Social validity questionnaire."""

from typing import Dict, Optional

from pydantic import ValidationError

from ..errors import SightWordsError
from ..results.schema import SurveyResponse

RATING_QUESTIONS = {
    "helpfulness": "This intervention was helpful in improving sight word recognition.",
    "engagement": "The intervention was engaging and maintained my/the participant's attention.",
    "ease_of_use": "The app was easy to use and navigate.",
    "would_recommend": "I would recommend this intervention to others working on sight words.",
}

OPEN_QUESTIONS = {
    "liked": "What did you like most about the intervention?",
    "difficulties": "Were there any difficulties or challenges with the intervention?",
    "improvements": "What improvements or changes would you suggest?",
}

RATING_SCALE = "1 = Strongly Disagree ... 5 = Strongly Agree"


class IncompleteSurvey(SightWordsError):
    """A rating question was left unanswered or out of range."""


def build_survey(participant_id: str, ratings: Dict[str, Optional[int]], answers: Dict[str, str]) -> SurveyResponse:
    missing = [k for k in RATING_QUESTIONS if not ratings.get(k)]
    if missing:
        raise IncompleteSurvey("Please answer all rating questions before submitting.")
    try:
        return SurveyResponse(
            participant_id=participant_id,
            **{k: int(ratings[k]) for k in RATING_QUESTIONS},
            **{k: (answers.get(k) or "").strip() for k in OPEN_QUESTIONS},
        )
    except ValidationError as e:
        raise IncompleteSurvey(f"Ratings must be between 1 and 5 ({e.error_count()} invalid).") from e
