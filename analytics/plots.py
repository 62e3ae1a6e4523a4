from __future__ import annotations

"""Matplotlib plots: single-subject phase-change graph and word heatmap."""

from typing import Optional
import numpy as np
import pandas as pd
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from .config import AnalyticsConfig

SERIES_ORDER = ["Baseline", "Level 1", "Level 2", "Level 3", "Target Words"]


def plot_phase_change(
    df: pd.DataFrame,
    *,
    cfg: Optional[AnalyticsConfig] = None,
    title: Optional[str] = None,
    value_col: str = "accuracy",
    save_path: Optional[str | bytes | "os.PathLike[str]"] = None,
) -> bool:
    """Accuracy per session, one unconnected line per phase series.

    Dashed vertical lines mark phase changes; horizontal dotted lines mark the
    mastery criteria. Sessions stamped with mastery are drawn as stars.
    Returns False when there is nothing to draw.
    """
    cfg = cfg or AnalyticsConfig()
    if df.empty:
        return False
    g = df.sort_values("session_idx")
    fig, ax = plt.subplots(figsize=(9, 4.5))
    present = [s for s in SERIES_ORDER if s in set(g["series"].astype(str))]
    for name in present:
        s = g[g["series"].astype(str) == name]
        ax.plot(s["session_idx"], s[value_col], marker="o", linewidth=1.5, label=name)
        smooth_col = f"{value_col}_smooth"
        if smooth_col in s.columns and len(s) > 1:
            ax.plot(s["session_idx"], s[smooth_col], linewidth=1, linestyle="--", alpha=0.6)
        m = s[s["mastery"].fillna(False).astype(bool)] if "mastery" in s.columns else s.iloc[0:0]
        if not m.empty:
            ax.scatter(m["session_idx"], m[value_col], marker="*", s=160, zorder=3, color="gold", edgecolors="black")

    series = g["series"].astype(str).to_numpy()
    idx = g["session_idx"].to_numpy()
    for i in np.flatnonzero(series[1:] != series[:-1]):
        ax.axvline((idx[i] + idx[i + 1]) / 2.0, color="gray", linestyle="--", linewidth=1)

    for level in cfg.criterion_lines:
        ax.axhline(level, color="red", linestyle=":", linewidth=1)
        ax.annotate(f"{level:g}%", xy=(idx[-1], level), xytext=(4, 2), textcoords="offset points", fontsize=8, color="red")

    ax.set_ylim(-5, 105)
    ax.set_xlabel("Session")
    ax.set_ylabel("Accuracy (%)")
    ax.set_xticks(idx)
    ax.set_title(title or "Sight word accuracy by phase")
    ax.legend(loc="lower right", fontsize=8)
    if save_path:
        fig.savefig(save_path, bbox_inches="tight", dpi=cfg.dpi)
    plt.close(fig)
    return True


def plot_word_heatmap(
    matrix: pd.DataFrame,
    *,
    cfg: Optional[AnalyticsConfig] = None,
    save_path: Optional[str | bytes | "os.PathLike[str]"] = None,
) -> bool:
    """Share correct per word and session (rows words, columns sessions)."""
    cfg = cfg or AnalyticsConfig()
    if matrix.empty:
        return False
    M = matrix.to_numpy(dtype="float32")
    fig = plt.figure()
    im = plt.imshow(M, aspect="auto", origin="lower", vmin=0, vmax=1)
    plt.colorbar(im, label="share correct")
    plt.xticks(ticks=np.arange(matrix.shape[1]), labels=matrix.columns.astype(str))
    plt.yticks(ticks=np.arange(matrix.shape[0]), labels=matrix.index.astype(str))
    plt.title("Word accuracy by session")
    plt.xlabel("Session")
    plt.ylabel("Word")
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=cfg.dpi)
    plt.close(fig)
    return True
