"""Session statistics.

``compute_stats`` is a pure function: it reads the recorded rounds and the
flashcards they reference and never raises for empty or partial sessions.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Mapping, Optional

from app.modules.study.models import (
    Flashcard,
    RoundResult,
    RoundStats,
    SessionStats,
    StudySession,
)

NO_DIFFICULT_SUBJECT = "None identified"


def accuracy(correct: int, total: int) -> int:
    """Whole-number percentage; 0 when there is nothing to score."""
    if total <= 0:
        return 0
    return round(100 * correct / total)


def format_duration(seconds: float) -> str:
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


def incorrect_ids(session: StudySession) -> list[int]:
    """Flashcard ids of every incorrect result, rounds in ascending order."""
    return [
        r.flashcard_id
        for round_no in sorted(session.rounds)
        for r in session.rounds[round_no]
        if not r.is_correct
    ]


def most_difficult_subject(
    session: StudySession, flashcards: Mapping[int, Flashcard]
) -> str:
    # ties go to the subject missed first (max() keeps the first maximum)
    counts: Counter[str] = Counter()
    for flashcard_id in incorrect_ids(session):
        card = flashcards.get(flashcard_id)
        if card is None:
            continue
        counts[card.subject] += 1
    if not counts:
        return NO_DIFFICULT_SUBJECT
    return max(counts, key=lambda subject: counts[subject])


def _round_stats(round_no: int, results: list[RoundResult]) -> RoundStats:
    correct = sum(1 for r in results if r.is_correct)
    return RoundStats(
        round=round_no,
        total=len(results),
        correct=correct,
        accuracy=accuracy(correct, len(results)),
    )


def compute_stats(
    session: StudySession,
    flashcards: Mapping[int, Flashcard],
    now: Optional[datetime] = None,
) -> SessionStats:
    now = now or datetime.now(timezone.utc)

    round_results = [
        _round_stats(round_no, session.rounds[round_no])
        for round_no in sorted(session.rounds)
    ]
    total_cards = sum(r.total for r in round_results)
    correct_count = sum(r.correct for r in round_results)

    return SessionStats(
        total_cards=total_cards,
        correct_count=correct_count,
        incorrect_count=total_cards - correct_count,
        accuracy=accuracy(correct_count, total_cards),
        time_spent=format_duration((now - session.start_time).total_seconds()),
        round_results=round_results,
        most_difficult_subject=most_difficult_subject(session, flashcards),
    )
