from __future__ import annotations

"""Per-word metrics from the trial table."""

import pandas as pd

from .config import AnalyticsConfig

OUTCOME_COLUMNS = ["correct", "assisted", "no-answer", "incorrect"]


def word_summary(trials: pd.DataFrame, cfg: AnalyticsConfig | None = None) -> pd.DataFrame:
    """Outcome counts, accuracy and mean response time per word.

    Returns one row per word with columns:
    - asked, correct, assisted, no-answer, incorrect, acc (0..1), rt_mean_s
    Sorted by accuracy ascending so the hardest words come first.
    """
    cfg = cfg or AnalyticsConfig()
    if trials.empty:
        return pd.DataFrame(columns=["word", "asked", *OUTCOME_COLUMNS, "acc", "rt_mean_s"])
    g = trials.assign(word=trials["word"].astype("string").str.lower())
    counts = pd.crosstab(g["word"], g["outcome"].astype("string"))
    for col in OUTCOME_COLUMNS:
        if col not in counts.columns:
            counts[col] = 0
    counts = counts[OUTCOME_COLUMNS]
    out = counts.copy()
    out["asked"] = counts.sum(axis=1)
    out["acc"] = (counts["correct"] / out["asked"]).astype("float32")
    out["rt_mean_s"] = g.groupby("word")["seconds"].mean().astype("float32")
    out = out[out["asked"] >= cfg.min_trials]
    out = out.reset_index()[["word", "asked", *OUTCOME_COLUMNS, "acc", "rt_mean_s"]]
    return out.sort_values(["acc", "word"], kind="stable").reset_index(drop=True)


def word_session_matrix(trials: pd.DataFrame) -> pd.DataFrame:
    """Share of correct trials per (word, chronological session) cell."""
    if trials.empty:
        return pd.DataFrame()
    g = trials.assign(
        word=trials["word"].astype("string").str.lower(),
        hit=(trials["outcome"].astype("string") == "correct").astype("float32"),
    )
    order = g[["session_date", "level", "session_number"]].drop_duplicates().sort_values("session_date")
    order["session_idx"] = range(1, len(order) + 1)
    g = g.merge(order, on=["session_date", "level", "session_number"], how="left")
    return g.pivot_table(index="word", columns="session_idx", values="hit", aggfunc="mean").sort_index()
