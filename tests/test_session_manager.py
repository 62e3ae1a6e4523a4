import json
import random
import tempfile
import unittest
from contextlib import redirect_stderr
from io import StringIO
from pathlib import Path

from sightwords.app import events as ev
from sightwords.app.context import ParticipantContext
from sightwords.app.session_manager import SessionManager
from sightwords.engine.clock import ManualScheduler
from sightwords.engine.session_game import SessionTiming
from sightwords.errors import InsufficientWordsError, ModeUnavailableError, SessionStateError
from sightwords.policy.progression import Mode
from sightwords.results.schema import PromptType
from sightwords.words.bank import get_sight_words
from storage.kv import MemoryStore
from storage.schema import participant_key
from storage.store import load_all

NO_PAUSE = SessionTiming(pause_after_answer_s=0, pause_after_timeout_s=0, pause_unscaffolded_s=0)


class SessionManagerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MemoryStore()
        self.ctx = ParticipantContext(self.store, "p1").open()
        self.ctx.configure(6, 3)
        self.ctx.save_target_words(get_sight_words(6)[:10])
        self.clock = ManualScheduler()
        self.bus = ev.EventBus()
        self.seen = []
        for name in (ev.POINTS_AWARDED, ev.MASTERY_ACHIEVED, ev.BASELINE_ESTABLISHED, ev.GRADE_SUGGESTION):
            self.bus.subscribe(name, lambda p, name=name: self.seen.append(name))
        self.sm = SessionManager(self.ctx, self.clock, timing=NO_PAUSE, bus=self.bus, rng=random.Random(7))

    def _play(self, mode: Mode, n_correct: int, wait_s: float = 0.0):
        game = self.sm.start_session(mode)
        answered = 0
        while self.sm.game is game:
            trial = game.current
            if wait_s:
                self.clock.advance(wait_s)
            if answered < n_correct:
                game.answer(trial.word)
            else:
                wrong = next(o for o in trial.options if o != trial.word)
                game.answer(wrong)
                if self.sm.game is game and game.current is trial:
                    self.clock.advance(10)
            answered += 1
        return self.sm.last

    def test_baseline_establishment_unlocks_level_one(self) -> None:
        for i in range(4):
            out = self._play(Mode.BASELINE, 5)
            self.assertEqual(out.record.session_number, i + 1)
            self.assertEqual(out.record.correct + out.record.incorrect, out.record.total)
            self.assertIsNone(out.record.prompt_type)
        self.assertIn(ev.BASELINE_ESTABLISHED, out.events)
        gate = self.ctx.gate()
        self.assertTrue(gate.is_available(Mode.LEVEL1))
        self.assertFalse(gate.is_available(Mode.BASELINE))
        with self.assertRaises(ModeUnavailableError):
            self.sm.start_session(Mode.BASELINE)
        stored = json.loads(self.store.get(participant_key("p1", "baselineSessions")))
        self.assertEqual(len(stored), 4)
        self.assertEqual(self.ctx.total_score, 0)

    def test_level_one_mastery_on_fourth_session_unlocks_level_two(self) -> None:
        for _ in range(4):
            self._play(Mode.BASELINE, 5)
        first = self._play(Mode.LEVEL1, 10)
        self.assertEqual(first.record.prompt_type, PromptType.IMMEDIATE)
        self.assertEqual(first.record.assisted, 10)
        self.assertEqual(first.points, 50)
        self._play(Mode.LEVEL1, 10)
        third = self._play(Mode.LEVEL1, 10)
        self.assertEqual(third.record.prompt_type, PromptType.DELAY)
        self.assertEqual(third.record.correct, 10)
        self.assertFalse(third.record.mastery_achieved)
        fourth = self._play(Mode.LEVEL1, 10)
        self.assertTrue(fourth.record.mastery_achieved)
        self.assertIn(ev.MASTERY_ACHIEVED, fourth.events)
        self.assertTrue(self.ctx.gate().is_available(Mode.LEVEL2))
        self.assertFalse(self.ctx.gate().is_available(Mode.LEVEL1))
        self.assertEqual(self.ctx.total_score, 50 + 50 + 100 + 100)
        stored = json.loads(self.store.get(participant_key("p1", "sightWordsSessions")))
        self.assertTrue(stored[-1]["masteryAchieved"])
        self.assertEqual(json.loads(self.store.get(participant_key("p1", "totalScore"))), 300)

    def test_delayed_prompt_shown_before_answer_is_assisted(self) -> None:
        for _ in range(4):
            self._play(Mode.BASELINE, 5)
        self._play(Mode.LEVEL1, 10)
        self._play(Mode.LEVEL1, 10)
        out = self._play(Mode.LEVEL1, 10, wait_s=3.0)
        self.assertEqual(out.record.assisted, 10)
        self.assertEqual(out.record.correct, 0)
        self.assertAlmostEqual(out.record.accuracy, 50.0)
        self.assertEqual(out.points, 50)

    def test_abandoned_session_writes_nothing(self) -> None:
        game = self.sm.start_session(Mode.BASELINE)
        game.answer(game.current.word)
        self.sm.abandon()
        self.assertIsNone(self.store.get(participant_key("p1", "baselineSessions")))
        self.assertEqual(self.ctx.baseline, [])
        self.assertIsNone(self.ctx.active_session)
        self.assertEqual(self.clock.pending(), 0)

    def test_one_session_at_a_time(self) -> None:
        self.sm.start_session(Mode.BASELINE)
        with self.assertRaises(SessionStateError):
            self.sm.start_session(Mode.BASELINE)

    def test_start_refused_without_enough_words(self) -> None:
        self.ctx.target_words = self.ctx.target_words[:5]
        with self.assertRaises(InsufficientWordsError):
            self.sm.start_session(Mode.BASELINE)

    def test_grade_suggestion_after_perfect_baselines(self) -> None:
        self._play(Mode.BASELINE, 10)
        out = self._play(Mode.BASELINE, 10)
        self.assertEqual(out.grade_suggestion, 7)
        self.assertIn(ev.GRADE_SUGGESTION, self.seen)

    def _with_data_dir(self, data_dir: Path) -> None:
        self.sm = SessionManager(self.ctx, self.clock, timing=NO_PAUSE, bus=self.bus, rng=random.Random(7), data_dir=data_dir)

    def test_trials_appended_to_table(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self._with_data_dir(Path(tmp))
            self._play(Mode.BASELINE, 5)
            df = load_all(Path(tmp))
        self.assertEqual(len(df), 10)
        self.assertEqual(set(df["participant_id"]), {"p1"})

    def test_corrupt_trial_table_does_not_block_sessions(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "trials.parquet").write_bytes(b"not parquet")
            self._with_data_dir(Path(tmp))
            err = StringIO()
            with redirect_stderr(err):
                first = self._play(Mode.BASELINE, 5)
                self.assertIsNone(self.ctx.active_session)
                second = self._play(Mode.BASELINE, 5)
                df = load_all(Path(tmp))
        self.assertEqual((first.record.session_number, second.record.session_number), (1, 2))
        self.assertEqual(len(self.ctx.baseline), 2)
        self.assertIn("unreadable trial table", err.getvalue())
        self.assertEqual(len(df), 20)

    def test_unwritable_trial_table_is_reported(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "not_a_dir"
            blocker.write_text("x", encoding="utf-8")
            self._with_data_dir(blocker)
            err = StringIO()
            with redirect_stderr(err):
                out = self._play(Mode.BASELINE, 5)
        self.assertEqual(out.record.session_number, 1)
        self.assertIsNone(self.ctx.active_session)
        self.assertIn("could not write trial table", err.getvalue())
        self.sm.start_session(Mode.BASELINE)

    def test_context_close_abandons_active_session(self) -> None:
        self.sm.start_session(Mode.BASELINE)
        self.ctx.close()
        self.assertEqual(self.clock.pending(), 0)
        self.assertIsNone(self.store.get(participant_key("p1", "baselineSessions")))


if __name__ == "__main__":
    unittest.main()
