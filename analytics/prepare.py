from __future__ import annotations

"""Turn session histories into a tidy per-session frame for graphs."""

from pathlib import Path
from typing import Iterable

import numpy as np
import pandas as pd

from sightwords.results.schema import SessionRecord
from storage.store import load_all

from .export import session_type

COLUMNS = {
    "series": "string",
    "session_type": "string",
    "phase": "string",
    "level": "UInt8",
    "session_number": "UInt16",
    "date": pd.DatetimeTZDtype(tz="UTC"),
    "accuracy": "float32",
    "correct": "UInt16",
    "assisted": "UInt16",
    "no_answer": "UInt16",
    "total": "UInt16",
    "rt_mean_s": "float32",
    "prompt_type": "string",
    "mastery": "boolean",
}


def series_label(record: SessionRecord) -> str:
    if record.phase.value == "baseline":
        return "Baseline"
    if record.unscaffolded:
        return "Target Words"
    return f"Level {record.level}"


def sessions_frame(baseline: Iterable[SessionRecord], sessions: Iterable[SessionRecord]) -> pd.DataFrame:
    """One row per session, chronological, with a stable index 'session_idx'.

    'series' names the phase line each session belongs to on a phase graph.
    """
    rows = [
        {
            "series": series_label(r),
            "session_type": session_type(r),
            "phase": r.phase.value,
            "level": r.level,
            "session_number": r.session_number,
            "date": r.date,
            "accuracy": r.accuracy,
            "correct": r.correct,
            "assisted": r.assisted,
            "no_answer": r.no_answer,
            "total": r.total,
            "rt_mean_s": float(np.mean(r.response_times)) if r.response_times else np.nan,
            "prompt_type": r.prompt_type.value if r.prompt_type else None,
            "mastery": r.mastery_achieved,
        }
        for r in [*baseline, *sessions]
    ]
    if not rows:
        df = pd.DataFrame({k: pd.Series(dtype=v) for k, v in COLUMNS.items()})
    else:
        df = pd.DataFrame(rows).astype(COLUMNS)
    df = df.sort_values(["date", "phase"], kind="stable").reset_index(drop=True)
    df["session_idx"] = np.arange(1, len(df) + 1)
    return df


def load_trials(data_dir: Path) -> pd.DataFrame:
    """Trial table sorted by session date and trial number."""
    df = load_all(data_dir)
    return df.sort_values(["session_date", "trial"], kind="stable").reset_index(drop=True)
