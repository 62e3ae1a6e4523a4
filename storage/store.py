from __future__ import annotations

"""Parquet-backed trial table using pandas + pyarrow.

Unit of data: one row per finalized trial (participant × session × trial).
"""

from pathlib import Path
from typing import Iterable, List

import pandas as pd
import pyarrow as pa

from sightwords.app.explain import warn
from sightwords.results.schema import SessionRecord

from .schema import DTYPES, TrialRow


DATA_FILE = "trials.parquet"


def _empty_df() -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in DTYPES.items()})


def _fix_dtypes(df: pd.DataFrame) -> pd.DataFrame:
    for col, dt in DTYPES.items():
        if col not in df.columns:
            df[col] = pd.NA
        df[col] = df[col].astype(dt)
    return df[list(DTYPES.keys())]


def init_store(data_dir: Path) -> Path:
    """Ensure the data directory and an empty trial table exist."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    f = data_dir / DATA_FILE
    if not f.exists():
        _empty_df().to_parquet(f, engine="pyarrow", compression="zstd", index=False)
    return f


def trial_rows(participant_id: str, record: SessionRecord) -> List[TrialRow]:
    """Explode a session record's parallel arrays into one row per trial."""
    return [
        TrialRow(
            participant_id=participant_id,
            session_date=record.date,
            phase=record.phase,
            level=record.level,
            session_number=record.session_number,
            trial=i,
            word=word,
            outcome=outcome,
            seconds=seconds,
        )
        for i, (word, outcome, seconds) in enumerate(
            zip(record.words_asked, record.outcomes, record.response_times), start=1
        )
    ]


def validate_records(rows: List[TrialRow]) -> pd.DataFrame:
    """Validate trial rows and return a DataFrame with categorical / unsigned dtypes."""
    if not isinstance(rows, list):
        raise TypeError("rows must be a list[TrialRow]")
    parsed = [r if isinstance(r, TrialRow) else TrialRow.model_validate(r) for r in rows]
    if not parsed:
        return _empty_df()
    df = pd.DataFrame([r.model_dump(mode="json") for r in parsed])
    df["session_date"] = pd.to_datetime(df["session_date"], utc=True)
    return _fix_dtypes(df)


def records_frame(participant_id: str, records: Iterable[SessionRecord]) -> pd.DataFrame:
    rows: List[TrialRow] = []
    for r in records:
        rows.extend(trial_rows(participant_id, r))
    return validate_records(rows)


def _read_existing(f: Path) -> pd.DataFrame:
    """Stored table, or an empty one when missing or unreadable (it is then rewritten)."""
    if not f.exists():
        return _empty_df()
    try:
        return pd.read_parquet(f, engine="pyarrow")
    except (OSError, ValueError, pa.ArrowException) as e:
        warn(f"unreadable trial table {f}, starting a new one: {e}")
        return _empty_df()


def append_trials(df_new: pd.DataFrame, data_dir: Path) -> None:
    """Append rows to the trial table, dropping exact duplicates."""
    f = Path(data_dir) / DATA_FILE
    df_old = _read_existing(f)
    combined = pd.concat([_fix_dtypes(df_old), _fix_dtypes(df_new.copy())], ignore_index=True)
    combined = _fix_dtypes(combined).drop_duplicates()
    f.parent.mkdir(parents=True, exist_ok=True)
    combined.to_parquet(f, engine="pyarrow", compression="zstd", index=False)


def load_all(data_dir: Path) -> pd.DataFrame:
    return _fix_dtypes(_read_existing(Path(data_dir) / DATA_FILE))


def query_word(df: pd.DataFrame, word: str) -> pd.DataFrame:
    """Rows for one word, oldest first."""
    dff = df[df["word"].astype("string").str.lower() == str(word).lower()]
    return dff.sort_values(["session_date", "trial"]).reset_index(drop=True)


def export_ndjson(df: pd.DataFrame, out_path: Path) -> None:
    """Export a DataFrame to line-delimited JSON (NDJSON) for quick inspection."""
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    df.to_json(out_path, orient="records", lines=True, date_format="iso")
