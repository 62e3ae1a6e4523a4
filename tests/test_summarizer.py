import unittest

from pydantic import ValidationError

from sightwords.engine.recorder import OutcomeRecorder
from sightwords.results.schema import Phase, PromptType, SessionRecord, TrialOutcome
from sightwords.results.summarizer import summarize, weighted_accuracy


def _tally(outcomes):
    rec = OutcomeRecorder()
    for i, o in enumerate(outcomes):
        trial = rec.open(f"w{i}", [f"w{i}"], 0.0)
        rec.finalize(trial, o, 1.0)
    return rec.tally


C, A, N, X = TrialOutcome.CORRECT, TrialOutcome.ASSISTED, TrialOutcome.NO_ANSWER, TrialOutcome.INCORRECT


class SummarizerTests(unittest.TestCase):
    def test_assisted_counts_fully_while_prompt_is_immediate(self) -> None:
        r = summarize(2, _tally([C] * 6 + [A] * 4), Phase.INTERVENTION, 1)
        self.assertAlmostEqual(r.accuracy, 100.0)
        self.assertEqual(r.prompt_type, PromptType.IMMEDIATE)

    def test_assisted_counts_half_once_delayed(self) -> None:
        r = summarize(3, _tally([C] * 6 + [A] * 4), Phase.INTERVENTION, 1)
        self.assertAlmostEqual(r.accuracy, 80.0)
        self.assertEqual(r.prompt_type, PromptType.DELAY)
        self.assertEqual((r.correct, r.assisted, r.no_answer, r.total), (6, 4, 0, 10))

    def test_no_answer_scores_zero(self) -> None:
        r = summarize(5, _tally([C] * 5 + [N] * 5), Phase.INTERVENTION, 2)
        self.assertAlmostEqual(r.accuracy, 50.0)
        self.assertEqual(r.no_answer, 5)

    def test_baseline_is_unweighted_without_prompt_type(self) -> None:
        r = summarize(1, _tally([C] * 7 + [X] * 3), Phase.BASELINE, 0)
        self.assertAlmostEqual(r.accuracy, 70.0)
        self.assertIsNone(r.prompt_type)
        self.assertEqual(r.correct + r.incorrect, r.total)

    def test_target_words_session_is_unweighted(self) -> None:
        r = summarize(4, _tally([C] * 9 + [X]), Phase.INTERVENTION, 4)
        self.assertAlmostEqual(r.accuracy, 90.0)
        self.assertIsNone(r.prompt_type)

    def test_empty_session_has_zero_accuracy(self) -> None:
        self.assertEqual(weighted_accuracy(3, 0, 0, 0), 0.0)
        r = summarize(1, _tally([]), Phase.INTERVENTION, 1)
        self.assertEqual(r.accuracy, 0.0)
        self.assertEqual(r.total, 0)

    def test_parallel_arrays_match_total(self) -> None:
        r = summarize(3, _tally([C, A, N]), Phase.INTERVENTION, 1)
        self.assertEqual(len(r.words_asked), r.total)
        self.assertEqual(len(r.response_times), r.total)
        self.assertEqual(r.outcomes, [C, A, N])


class SessionRecordTests(unittest.TestCase):
    def test_legacy_json_loads_and_round_trips_aliases(self) -> None:
        legacy = {
            "sessionNumber": 3,
            "date": "2024-03-01T10:00:00.000Z",
            "level": 1,
            "correctAnswers": 8,
            "assistedAnswers": 1,
            "noAnswers": 1,
            "totalQuestions": 10,
            "accuracy": 85,
            "timeToRespond": [1, 2, 3, 1, 1, 1, 1, 1, 1, 10],
            "wordsAsked": ["w"] * 10,
            "responseTypes": ["correct"] * 8 + ["assisted", "no-answer"],
            "phase": "intervention",
            "promptType": "delay",
        }
        r = SessionRecord.model_validate(legacy)
        self.assertEqual(r.no_answer, 1)
        self.assertFalse(r.mastery_achieved)
        out = r.to_json()
        self.assertEqual(out["noAnswers"], 1)
        self.assertEqual(out["responseTypes"][-1], "no-answer")
        self.assertEqual(out["promptType"], "delay")

    def test_counts_may_not_exceed_total(self) -> None:
        with self.assertRaises(ValidationError):
            SessionRecord(session_number=1, correct=5, assisted=6, total=10)

    def test_nan_accuracy_is_zero(self) -> None:
        self.assertEqual(SessionRecord(session_number=1, accuracy=float("nan")).accuracy, 0.0)

    def test_records_are_frozen(self) -> None:
        r = SessionRecord(session_number=1)
        with self.assertRaises(ValidationError):
            r.accuracy = 50.0  # type: ignore[misc]
        self.assertTrue(r.with_mastery().mastery_achieved)
        self.assertFalse(r.mastery_achieved)


if __name__ == "__main__":
    unittest.main()
