import tempfile
import unittest
from datetime import timedelta
from pathlib import Path

from analytics.config import AnalyticsConfig
from analytics.metrics import word_session_matrix, word_summary
from analytics.plots import plot_phase_change, plot_word_heatmap
from analytics.prepare import load_trials, sessions_frame
from analytics.smoothing import ewma_by_session
from storage.store import append_trials, records_frame

from factories import baseline, delayed, immediate, target_session


def _history():
    base = [baseline(i, 30 + i, day=i) for i in range(1, 5)]
    sessions = [
        immediate(1, 60, day=5),
        immediate(2, 70, day=6),
        delayed(3, 90, day=7),
        delayed(4, 95, day=8, mastery=True),
        delayed(1, 50, level=2, day=9),
    ]
    return base, sessions


class SessionsFrameTests(unittest.TestCase):
    def test_rows_are_chronological_with_series(self) -> None:
        base, sessions = _history()
        df = sessions_frame(base, sessions)
        self.assertEqual(list(df["session_idx"]), list(range(1, 10)))
        self.assertEqual(list(df["series"])[3:6], ["Baseline", "Level 1", "Level 1"])
        self.assertEqual(df["series"].iloc[-1], "Level 2")
        self.assertTrue(bool(df["mastery"].iloc[7]))
        self.assertEqual(df["prompt_type"].iloc[5], "immediate")

    def test_empty_frame(self) -> None:
        df = sessions_frame([], [])
        self.assertTrue(df.empty)
        self.assertIn("session_idx", df.columns)

    def test_smoothing_restarts_per_series(self) -> None:
        base, sessions = _history()
        df = ewma_by_session(sessions_frame(base, sessions), "accuracy", span=3)
        first_level1 = df[df["series"] == "Level 1"].iloc[0]
        self.assertAlmostEqual(float(first_level1["accuracy_smooth"]), 60.0, places=3)


class WordMetricsTests(unittest.TestCase):
    def setUp(self) -> None:
        recs = [
            target_session(1, ["who", "oil", "who"], ["correct", "incorrect", "correct"]),
            target_session(2, ["who", "oil"], ["incorrect", "incorrect"], day=1),
        ]
        self.trials = records_frame("p1", recs)

    def test_word_summary_hardest_first(self) -> None:
        out = word_summary(self.trials)
        self.assertEqual(list(out["word"]), ["oil", "who"])
        who = out[out["word"] == "who"].iloc[0]
        self.assertEqual(int(who["asked"]), 3)
        self.assertEqual(int(who["correct"]), 2)
        self.assertAlmostEqual(float(who["acc"]), 2 / 3, places=5)
        self.assertEqual(int(out.iloc[0]["assisted"]), 0)

    def test_min_trials_filter(self) -> None:
        out = word_summary(self.trials, AnalyticsConfig(min_trials=3))
        self.assertEqual(list(out["word"]), ["who"])

    def test_word_session_matrix(self) -> None:
        m = word_session_matrix(self.trials)
        self.assertEqual(list(m.columns), [1, 2])
        self.assertAlmostEqual(float(m.loc["who", 1]), 1.0)
        self.assertAlmostEqual(float(m.loc["oil", 2]), 0.0)

    def test_load_trials_sorted(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            append_trials(self.trials.iloc[::-1].reset_index(drop=True), Path(tmp))
            df = load_trials(Path(tmp))
        self.assertEqual(list(df["session_number"]), [1, 1, 1, 2, 2])
        self.assertEqual(list(df["trial"])[:3], [1, 2, 3])


class PlotTests(unittest.TestCase):
    def test_phase_change_graph_is_written(self) -> None:
        base, sessions = _history()
        df = ewma_by_session(sessions_frame(base, sessions), "accuracy", span=3)
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "phase.png"
            self.assertTrue(plot_phase_change(df, save_path=out))
            self.assertGreater(out.stat().st_size, 0)

    def test_nothing_to_draw(self) -> None:
        self.assertFalse(plot_phase_change(sessions_frame([], [])))
        self.assertFalse(plot_word_heatmap(word_session_matrix(records_frame("p", []))))

    def test_heatmap_is_written(self) -> None:
        trials = records_frame("p1", [target_session(1, ["who", "oil"], ["correct", "incorrect"])])
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "words.png"
            self.assertTrue(plot_word_heatmap(word_session_matrix(trials), save_path=out))
            self.assertTrue(out.exists())


if __name__ == "__main__":
    unittest.main()
