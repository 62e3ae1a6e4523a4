from __future__ import annotations

"""Configuration loading and validation for the sight-word trainer.

This module loads YAML configuration, applies defaults, and validates
backends and thresholds before the CLI builds its collaborators.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import sys

import yaml
from pydantic import ValidationError

from ..engine.session_game import SessionTiming
from ..policy.criteria import Criteria


ALLOWED_BACKENDS = {"json", "memory"}


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        cfg = _load_yaml(Path(path))
    else:
        cfg = _load_yaml(Path(__file__).with_name("defaults.yml"))
    return cfg


def _positive(section: Dict[str, Any], key: str, default: Any) -> None:
    try:
        ok = float(section[key]) > 0
    except (TypeError, ValueError):
        ok = False
    if not ok:
        print(f"WARNING: Invalid {key} '{section[key]}', using {default}.")
        section[key] = default


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    cfg.setdefault("storage", {})
    cfg.setdefault("session", {})
    cfg.setdefault("timing", {})
    cfg.setdefault("criteria", {})
    cfg.setdefault("rewards", {})
    cfg.setdefault("participant", {})
    cfg.setdefault("explain", False)

    storage = cfg["storage"]
    session = cfg["session"]
    timing = cfg["timing"]
    rewards = cfg["rewards"]
    participant = cfg["participant"]

    storage.setdefault("backend", "json")
    storage.setdefault("path", "./sightwords_data.json")
    storage.setdefault("trials_dir", "./sightwords_trials")

    session.setdefault("questions", 10)
    session.setdefault("options_per_trial", 4)
    session.setdefault("min_target_words", 10)
    session.setdefault("max_target_words", 10)

    timing.setdefault("time_limit_s", 10)
    timing.setdefault("prompt_delay_ms", 3000)
    timing.setdefault("pause_after_answer_s", 2.0)
    timing.setdefault("pause_after_timeout_s", 5.0)
    timing.setdefault("pause_unscaffolded_s", 0.2)

    rewards.setdefault("correct", 10)
    rewards.setdefault("assisted", 5)

    participant.setdefault("min_grade", 5)
    participant.setdefault("max_grade", 8)
    participant.setdefault("min_reading", 1)

    backend = storage.get("backend")
    if backend not in ALLOWED_BACKENDS:
        print(f"WARNING: Unsupported storage backend '{backend}', falling back to 'json'.")
        storage["backend"] = "json"

    _positive(session, "questions", 10)
    _positive(timing, "time_limit_s", 10)
    _positive(timing, "prompt_delay_ms", 3000)

    opts = session.get("options_per_trial")
    if not isinstance(opts, int) or opts < 2:
        print(f"WARNING: Unsupported options_per_trial '{opts}', using 4.")
        session["options_per_trial"] = 4

    try:
        crit = Criteria(
            **{
                **(cfg["criteria"] or {}),
                "min_target_words": session["min_target_words"],
                "max_grade": participant["max_grade"],
            }
        )
    except (ValidationError, TypeError) as e:
        print(f"WARNING: Invalid criteria ({e.__class__.__name__}), using defaults.")
        crit = Criteria()
    cfg["criteria"] = crit.model_dump()

    cfg["explain"] = bool(cfg.get("explain"))
    return cfg


def criteria_from(cfg: Dict[str, Any]) -> Criteria:
    return Criteria(**cfg.get("criteria", {}))


def timing_from(cfg: Dict[str, Any]) -> SessionTiming:
    t = cfg.get("timing", {})
    return SessionTiming(
        time_limit_s=float(t.get("time_limit_s", 10)),
        prompt_delay_ms=int(t.get("prompt_delay_ms", 3000)),
        pause_after_answer_s=float(t.get("pause_after_answer_s", 2.0)),
        pause_after_timeout_s=float(t.get("pause_after_timeout_s", 5.0)),
        pause_unscaffolded_s=float(t.get("pause_unscaffolded_s", 0.2)),
    )
