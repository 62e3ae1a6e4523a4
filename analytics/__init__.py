from .config import AnalyticsConfig
from .export import (
    build_export,
    export_baseline_csv,
    export_json,
    export_sessions_csv,
    export_surveys_csv,
    sessions_table,
)
from .metrics import word_session_matrix, word_summary
from .prepare import load_trials, sessions_frame
from .smoothing import ewma_by_session
from .plots import plot_phase_change, plot_word_heatmap

__all__ = [
    "AnalyticsConfig",
    "build_export",
    "export_baseline_csv",
    "export_json",
    "export_sessions_csv",
    "export_surveys_csv",
    "sessions_table",
    "word_session_matrix",
    "word_summary",
    "load_trials",
    "sessions_frame",
    "ewma_by_session",
    "plot_phase_change",
    "plot_word_heatmap",
]
