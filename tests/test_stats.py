from datetime import datetime, timedelta, timezone

from app.modules.study.models import Difficulty, Flashcard, RoundResult, StudySession
from app.modules.study.stats import (
    NO_DIFFICULT_SUBJECT,
    accuracy,
    compute_stats,
    format_duration,
    most_difficult_subject,
)

START = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _card(card_id: int, subject: str) -> Flashcard:
    return Flashcard(
        id=card_id,
        question="q",
        answer="a",
        subject=subject,
        class_level="9",
        difficulty=Difficulty.EASY,
    )


def _results(*pairs):
    return [RoundResult(flashcard_id=i, is_correct=ok) for i, ok in pairs]


def test_accuracy_rounds_to_integer():
    assert accuracy(3, 7) == 43
    assert accuracy(2, 3) == 67
    assert accuracy(5, 5) == 100


def test_accuracy_of_nothing_is_zero():
    assert accuracy(0, 0) == 0


def test_format_duration():
    assert format_duration(0) == "0:00"
    assert format_duration(65) == "1:05"
    assert format_duration(3600) == "60:00"
    assert format_duration(-4) == "0:00"


def test_compute_stats_across_rounds():
    session = StudySession(
        session_id="s",
        start_time=START,
        rounds={
            2: _results((4, False), (5, False)),
            1: _results((1, True), (2, True), (3, True), (4, False), (5, False)),
        },
    )
    cards = {4: _card(4, "mathematics"), 5: _card(5, "mathematics")}
    stats = compute_stats(session, cards, now=START + timedelta(seconds=125))

    assert stats.total_cards == 7
    assert stats.correct_count == 3
    assert stats.incorrect_count == 4
    assert stats.accuracy == 43
    assert stats.time_spent == "2:05"
    assert [r.round for r in stats.round_results] == [1, 2]
    assert stats.round_results[0].accuracy == 60
    assert stats.round_results[1].accuracy == 0
    assert stats.most_difficult_subject == "mathematics"


def test_compute_stats_is_idempotent():
    session = StudySession(
        session_id="s", start_time=START, rounds={1: _results((1, False))}
    )
    cards = {1: _card(1, "science")}
    now = START + timedelta(minutes=1)
    assert compute_stats(session, cards, now=now) == compute_stats(session, cards, now=now)


def test_empty_round_scores_zero():
    session = StudySession(session_id="s", start_time=START, rounds={1: []})
    stats = compute_stats(session, {}, now=START)
    assert stats.total_cards == 0
    assert stats.accuracy == 0
    assert stats.round_results[0].accuracy == 0
    assert stats.most_difficult_subject == NO_DIFFICULT_SUBJECT


def test_most_difficult_subject_tie_goes_to_first_missed():
    session = StudySession(
        session_id="s",
        rounds={1: _results((1, False), (2, False), (3, False), (4, False))},
    )
    cards = {
        1: _card(1, "history"),
        2: _card(2, "science"),
        3: _card(3, "science"),
        4: _card(4, "history"),
    }
    assert most_difficult_subject(session, cards) == "history"


def test_unresolvable_cards_are_ignored():
    session = StudySession(session_id="s", rounds={1: _results((99, False))})
    assert most_difficult_subject(session, {}) == NO_DIFFICULT_SUBJECT
