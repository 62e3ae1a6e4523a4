import unittest

from sightwords.engine.prompting import schedule_for
from sightwords.engine.recorder import OutcomeRecorder, clamp_elapsed
from sightwords.results.schema import PromptType, TrialOutcome


class PromptScheduleTests(unittest.TestCase):
    def test_first_two_sessions_are_immediate(self) -> None:
        for n in (1, 2):
            policy = schedule_for(n)
            self.assertTrue(policy.immediate)
            self.assertEqual(policy.delay_ms, 0)
            self.assertEqual(policy.prompt_type, PromptType.IMMEDIATE)

    def test_later_sessions_delay_three_seconds(self) -> None:
        for n in (3, 4, 12):
            policy = schedule_for(n)
            self.assertFalse(policy.immediate)
            self.assertEqual(policy.delay_ms, 3000)
            self.assertEqual(policy.prompt_type, PromptType.DELAY)


class OutcomeRecorderTests(unittest.TestCase):
    def test_finalize_is_write_once(self) -> None:
        rec = OutcomeRecorder()
        trial = rec.open("said", ["said", "each", "which", "she"], 0.0)
        self.assertTrue(rec.finalize(trial, TrialOutcome.CORRECT, 1.234))
        self.assertFalse(rec.finalize(trial, TrialOutcome.NO_ANSWER, 10))
        self.assertEqual(rec.tally.outcomes, [TrialOutcome.CORRECT])
        self.assertEqual(rec.tally.response_times, [1.23])
        self.assertEqual(rec.tally.words_asked, ["said"])
        self.assertEqual(rec.tally.correct, 1)
        self.assertEqual(rec.tally.no_answer, 0)

    def test_elapsed_is_clamped_to_limit(self) -> None:
        self.assertEqual(clamp_elapsed(-1), 0.0)
        self.assertEqual(clamp_elapsed(12.5), 10.0)
        self.assertEqual(clamp_elapsed(3.456), 3.46)

    def test_retries_do_not_reach_outcomes(self) -> None:
        rec = OutcomeRecorder()
        trial = rec.open("who", ["who", "how", "two", "oil"], 0.0)
        rec.note_incorrect(trial)
        rec.note_incorrect(trial)
        rec.finalize(trial, TrialOutcome.ASSISTED, 4.0)
        rec.note_incorrect(trial)
        self.assertEqual(trial.retries, 2)
        self.assertEqual(rec.tally.retries, 2)
        self.assertEqual(rec.tally.outcomes, [TrialOutcome.ASSISTED])
        self.assertEqual(rec.tally.incorrect, 0)


if __name__ == "__main__":
    unittest.main()
