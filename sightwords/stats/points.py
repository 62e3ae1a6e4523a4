from __future__ import annotations

"""Coins awarded per session and human-readable session summaries."""

from typing import Iterable

from ..results.schema import SessionRecord

POINTS_CORRECT = 10
POINTS_ASSISTED = 5


def session_points(record: SessionRecord, per_correct: int = POINTS_CORRECT, per_assisted: int = POINTS_ASSISTED) -> int:
    """10 per unprompted correct answer, 5 per assisted answer."""
    return int(record.correct) * per_correct + int(record.assisted) * per_assisted


def total_points(records: Iterable[SessionRecord]) -> int:
    return sum(session_points(r) for r in records)


def words_practiced(records: Iterable[SessionRecord]) -> int:
    return sum(int(r.total) for r in records)


def format_summary(record: SessionRecord) -> str:
    """Return a human-readable summary of one session."""
    if record.unscaffolded:
        lines = [
            f"Session {record.session_number} ({record.phase.value}, level {record.level})",
            f"Correct: {record.correct}/{record.total}  Incorrect: {record.failed}",
        ]
    else:
        prompt = record.prompt_type.value if record.prompt_type else "-"
        lines = [
            f"Session {record.session_number} (level {record.level}, {prompt} prompt)",
            f"Correct: {record.correct}  Assisted: {record.assisted}  No answer: {record.no_answer}  of {record.total}",
            f"Coins: {session_points(record)}",
        ]
    lines.append(f"Accuracy: {record.accuracy:.1f}%")
    if record.response_times:
        avg = sum(record.response_times) / len(record.response_times)
        lines.append(f"Average response time: {avg:.2f}s")
    if record.mastery_achieved:
        lines.append("Mastery achieved!")
    return "\n".join(lines)
