import pytest
from pydantic import ValidationError

from app.modules.study.models import Difficulty, RoundBatch, RoundResult


def test_successor_steps_up_and_saturates():
    assert Difficulty.EASY.successor() == Difficulty.MEDIUM
    assert Difficulty.MEDIUM.successor() == Difficulty.HARD
    assert Difficulty.HARD.successor() == Difficulty.HARD


def test_difficulty_orders_by_rank():
    assert Difficulty.EASY < Difficulty.MEDIUM < Difficulty.HARD
    assert max([Difficulty.MEDIUM, Difficulty.HARD, Difficulty.EASY]) == Difficulty.HARD


def test_round_result_accepts_camel_case():
    r = RoundResult.model_validate({"flashcardId": 7, "isCorrect": False})
    assert r.flashcard_id == 7
    assert r.is_correct is False


@pytest.mark.parametrize(
    "payload",
    [
        {"flashcardId": "7", "isCorrect": True},
        {"flashcardId": 7, "isCorrect": "yes"},
        {"flashcardId": 7},
    ],
)
def test_round_result_rejects_loose_types(payload):
    with pytest.raises(ValidationError):
        RoundResult.model_validate(payload)


def test_round_batch_serializes_camel_case():
    batch = RoundBatch(session_id="s", flashcards=[], round=1, total_rounds=3)
    assert batch.model_dump(by_alias=True) == {
        "sessionId": "s",
        "flashcards": [],
        "round": 1,
        "totalRounds": 3,
    }
