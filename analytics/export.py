from __future__ import annotations

"""CSV and JSON exports of a participant's histories and surveys.

Every CSV cell is written as text and double-quoted. Counts carry no
decimals, accuracy and times two. Baseline and target-word rows report
`Incorrect` and leave `Assisted` / `No-Answer` blank; intervention rows do
the opposite.
"""

import csv
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from sightwords.results.schema import TARGET_WORDS_LEVEL, PromptType, SessionRecord, SurveyResponse

SESSION_HEADERS = [
    "Session Number",
    "Date",
    "Session Type",
    "Correct",
    "Incorrect",
    "Assisted",
    "No-Answer",
    "Total Questions",
    "Accuracy (%)",
    "Average Response Time (s)",
    "Prompt Type",
    "Words Tested",
    "Response Times (s)",
]

BASELINE_HEADERS = [
    "Baseline Session",
    "Date",
    "Correct Answers",
    "Total Questions",
    "Accuracy (%)",
    "Words Tested",
    "Response Times (s)",
]

SURVEY_HEADERS = [
    "Participant ID",
    "Date",
    "Q1: Helpfulness (1-5)",
    "Q2: Engagement (1-5)",
    "Q3: Ease of Use (1-5)",
    "Q4: Would Recommend (1-5)",
    "Q5: Liked Most",
    "Q6: Difficulties",
    "Q7: Improvements",
]

PROMPT_LABELS = {PromptType.IMMEDIATE: "Immediate", PromptType.DELAY: "3sec Delay"}


def fmt_number(val: Any, decimals: int = 2) -> str:
    """Fixed decimals; missing or non-numeric values become an empty cell."""
    if val is None or isinstance(val, bool):
        return ""
    try:
        f = float(val)
    except (TypeError, ValueError):
        return ""
    if np.isnan(f):
        return ""
    return f"{f:.{decimals}f}"


def fmt_date(d: datetime) -> str:
    return d.astimezone(timezone.utc).date().isoformat()


def session_type(record: SessionRecord) -> str:
    if record.phase.value == "baseline":
        return "Baseline"
    if record.level == TARGET_WORDS_LEVEL:
        return "Target Words"
    return "Intervention"


def _avg(times: Sequence[float]) -> Optional[float]:
    return float(np.mean(times)) if len(times) else None


def session_row(record: SessionRecord) -> List[str]:
    unscaffolded = record.unscaffolded
    return [
        fmt_number(record.session_number, 0),
        fmt_date(record.date),
        session_type(record),
        fmt_number(record.correct, 0),
        fmt_number(record.failed, 0) if unscaffolded else "",
        "" if unscaffolded else fmt_number(record.assisted, 0),
        "" if unscaffolded else fmt_number(record.no_answer, 0),
        fmt_number(record.total, 0),
        fmt_number(record.accuracy, 2),
        fmt_number(_avg(record.response_times), 2),
        PROMPT_LABELS.get(record.prompt_type, "") if record.prompt_type else "",
        "; ".join(record.words_asked),
        "; ".join(fmt_number(t, 2) for t in record.response_times),
    ]


def _write_csv(rows: List[List[str]], headers: List[str], out_path: Path) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(rows, columns=headers, dtype="string")
    df.to_csv(out_path, index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return out_path


def sessions_table(baseline: Iterable[SessionRecord], sessions: Iterable[SessionRecord]) -> List[List[str]]:
    """Baseline, intervention and target-word sessions together, oldest first."""
    records = sorted([*baseline, *sessions], key=lambda r: r.date)
    return [session_row(r) for r in records]


def export_sessions_csv(baseline: Iterable[SessionRecord], sessions: Iterable[SessionRecord], out_path: Path) -> Path:
    return _write_csv(sessions_table(baseline, sessions), SESSION_HEADERS, out_path)


def export_baseline_csv(baseline: Iterable[SessionRecord], out_path: Path) -> Path:
    rows = [
        [
            fmt_number(r.session_number, 0),
            fmt_date(r.date),
            fmt_number(r.correct, 0),
            fmt_number(r.total, 0),
            fmt_number(r.accuracy, 2),
            "; ".join(r.words_asked),
            "; ".join(fmt_number(t, 2) for t in r.response_times),
        ]
        for r in baseline
    ]
    return _write_csv(rows, BASELINE_HEADERS, out_path)


def export_surveys_csv(surveys: Iterable[SurveyResponse], out_path: Path) -> Path:
    rows = [
        [
            s.participant_id or "N/A",
            fmt_date(s.date),
            str(s.helpfulness),
            str(s.engagement),
            str(s.ease_of_use),
            str(s.would_recommend),
            s.liked,
            s.difficulties,
            s.improvements,
        ]
        for s in surveys
    ]
    return _write_csv(rows, SURVEY_HEADERS, out_path)


def overall_accuracy(sessions: Sequence[SessionRecord]) -> float:
    if not sessions:
        return 0.0
    return round(float(np.mean([s.accuracy for s in sessions])), 2)


def build_export(
    participant_id: str,
    target_words: Sequence[str],
    baseline: Sequence[SessionRecord],
    sessions: Sequence[SessionRecord],
    surveys: Sequence[SurveyResponse],
    *,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    return {
        "exportDate": (now or datetime.now(timezone.utc)).isoformat(),
        "participantId": participant_id,
        "targetWords": list(target_words),
        "baselineSessions": [r.to_json() for r in baseline],
        "sessions": [r.to_json() for r in sessions],
        "surveys": [s.to_json() for s in surveys],
        "summary": {
            "totalBaselineSessions": len(baseline),
            "totalSessions": len(sessions),
            "totalSurveys": len(surveys),
            "overallAccuracy": overall_accuracy(sessions),
        },
    }


def export_json(data: Dict[str, Any], out_path: Path) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return out_path


def default_filename(kind: str, now: Optional[datetime] = None) -> str:
    day = (now or datetime.now(timezone.utc)).date().isoformat()
    names = {
        "csv": f"ctd-sessions-{day}.csv",
        "baseline-csv": f"ctd-baseline-{day}.csv",
        "surveys-csv": f"social-validity-{day}.csv",
        "json": f"ctd-all-data-{day}.json",
        "trials": f"ctd-trials-{day}.ndjson",
    }
    return names[kind]
