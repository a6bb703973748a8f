import pytest

from app.modules.study import question_bank
from app.modules.study.models import Difficulty


def test_cycle_repeats_to_exact_count():
    assert question_bank.cycle([1, 2], 5) == [1, 2, 1, 2, 1]
    assert question_bank.cycle([1, 2, 3], 2) == [1, 2]


def test_cycle_empty_input():
    assert question_bank.cycle([], 3) == []
    assert question_bank.cycle([1], 0) == []


@pytest.mark.parametrize("count", [1, 5, 12, 15])
def test_bank_questions_returns_exact_count(count):
    pairs = question_bank.bank_questions("history", Difficulty.HARD, count)
    assert len(pairs) == count
    assert all(q and a for q, a in pairs)


def test_unknown_subject_falls_back_to_mathematics():
    assert question_bank.bank_questions(
        "alchemy", Difficulty.EASY, 3
    ) == question_bank.bank_questions("mathematics", Difficulty.EASY, 3)


def test_document_topic_from_file_name():
    assert question_bank.document_topic("cell_biology-notes.pdf") == "cell biology notes"
    assert question_bank.document_topic(None) == "the document"


def test_document_questions_mention_topic():
    pairs = question_bank.document_questions("photosynthesis", 12)
    assert len(pairs) == 12
    assert all("photosynthesis" in q for q, _ in pairs)


def test_study_options_lists_every_difficulty():
    options = question_bank.study_options()
    assert [o.value for o in options.difficulty_levels] == ["easy", "medium", "hard"]
    assert [o.value for o in options.question_counts] == [5, 10, 15]
