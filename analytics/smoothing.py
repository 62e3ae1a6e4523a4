from __future__ import annotations

"""Smoothing utilities (EWMA by session)."""

import pandas as pd


def ewma_by_session(
    df: pd.DataFrame,
    value_col: str,
    span: int,
    group_cols: list[str] | None = None,
) -> pd.DataFrame:
    """Apply EWMA smoothing per group (default: per phase series) over session order.

    Returns a copy of df with a new column f"{value_col}_smooth" and rows sorted by session_idx.
    """
    group_cols = group_cols if group_cols is not None else ["series"]
    g = df.sort_values("session_idx").copy()
    if g.empty:
        g[f"{value_col}_smooth"] = pd.Series(dtype="float32")
        return g
    if not group_cols:
        g[f"{value_col}_smooth"] = g[value_col].astype("float32").ewm(span=span).mean().astype("float32")
        return g
    # transform keeps g's row index, so no realignment is needed
    smooth = g.groupby(group_cols, observed=True, sort=False)[value_col].transform(lambda s: s.astype("float32").ewm(span=span).mean())
    g[f"{value_col}_smooth"] = smooth.astype("float32")
    return g
