import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from io import StringIO
from pathlib import Path

from sightwords.config.config import criteria_from, load_config, timing_from, validate_config


class ConfigTests(unittest.TestCase):
    def test_package_defaults(self) -> None:
        cfg = validate_config(load_config())
        self.assertEqual(cfg["storage"]["backend"], "json")
        self.assertEqual(cfg["session"]["questions"], 10)
        crit = criteria_from(cfg)
        self.assertEqual(crit.mastery_consecutive_pct, 90)
        self.assertEqual(crit.baseline_window, 4)
        timing = timing_from(cfg)
        self.assertEqual(timing.time_limit_s, 10.0)
        self.assertEqual(timing.prompt_delay_ms, 3000)
        self.assertFalse(cfg["explain"])

    def test_empty_config_gets_every_section(self) -> None:
        cfg = validate_config({})
        self.assertEqual(cfg["rewards"], {"correct": 10, "assisted": 5})
        self.assertEqual(cfg["participant"]["max_grade"], 8)
        self.assertEqual(cfg["criteria"]["min_target_words"], 10)

    def test_invalid_values_fall_back_with_warning(self) -> None:
        raw = {
            "storage": {"backend": "sqlite"},
            "session": {"questions": 0, "options_per_trial": 1},
            "timing": {"time_limit_s": "soon"},
        }
        out = StringIO()
        with redirect_stdout(out):
            cfg = validate_config(raw)
        self.assertEqual(cfg["storage"]["backend"], "json")
        self.assertEqual(cfg["session"]["questions"], 10)
        self.assertEqual(cfg["session"]["options_per_trial"], 4)
        self.assertEqual(cfg["timing"]["time_limit_s"], 10)
        self.assertEqual(out.getvalue().count("WARNING:"), 4)

    def test_invalid_criteria_use_defaults(self) -> None:
        with redirect_stdout(StringIO()):
            cfg = validate_config({"criteria": {"baseline_window": 1}})
        self.assertEqual(criteria_from(cfg).baseline_window, 4)

    def test_criteria_pick_up_session_and_participant_limits(self) -> None:
        cfg = validate_config({"session": {"min_target_words": 8}, "participant": {"max_grade": 7}})
        crit = criteria_from(cfg)
        self.assertEqual((crit.min_target_words, crit.max_grade), (8, 7))

    def test_yaml_file_is_loaded(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "cfg.yml"
            path.write_text("storage:\n  backend: memory\nexplain: true\n", encoding="utf-8")
            cfg = validate_config(load_config(str(path)))
        self.assertEqual(cfg["storage"]["backend"], "memory")
        self.assertTrue(cfg["explain"])

    def test_missing_file_exits(self) -> None:
        with redirect_stderr(StringIO()), self.assertRaises(SystemExit):
            load_config("/nonexistent/sightwords.yml")


if __name__ == "__main__":
    unittest.main()
