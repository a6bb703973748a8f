from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import InternalError
from app.modules.study.generator import QuestionSource
from app.modules.study.models import (
    Difficulty,
    FlashcardSource,
    PdfDocument,
    RoundResult,
    SessionCompleted,
    StudySession,
)
from app.modules.study.sql_storage import SqlStudyStorage
from app.modules.study.state import StudySessionManager

from conftest import make_cards


@pytest.fixture
async def sql_storage(tmp_path):
    storage = SqlStudyStorage(f"sqlite+aiosqlite:///{tmp_path / 'study.db'}")
    await storage.init()
    yield storage
    await storage.close()


async def test_flashcards_round_trip(sql_storage):
    saved = await sql_storage.save_flashcards(
        make_cards(["science", "history"], Difficulty.MEDIUM), FlashcardSource.PDF, "doc"
    )
    assert saved[1].id == saved[0].id + 1

    found = await sql_storage.get_flashcards_by_ids([saved[1].id, 4242, saved[0].id])
    assert [c.subject for c in found] == ["history", "science"]
    assert found[0].difficulty == Difficulty.MEDIUM
    assert found[0].source == FlashcardSource.PDF


async def test_session_rounds_and_batches(sql_storage):
    start = datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)
    await sql_storage.create_session(
        StudySession(session_id="s1", start_time=start, total_rounds=2, issued={1: [1, 2]})
    )
    session = await sql_storage.save_round_results(
        "s1",
        1,
        [
            RoundResult(flashcard_id=2, is_correct=False),
            RoundResult(flashcard_id=1, is_correct=True),
        ],
    )
    assert session.start_time == start
    assert session.total_rounds == 2
    assert [r.flashcard_id for r in session.rounds[1]] == [2, 1]

    await sql_storage.record_batch("s1", 2, [2])
    await sql_storage.record_batch("s1", 2, [2, 1])
    session = await sql_storage.get_session("s1")
    assert session.issued == {1: [1, 2], 2: [2, 1]}


async def test_lazy_session_and_overwrite(sql_storage):
    await sql_storage.save_round_results("lazy", 1, [RoundResult(flashcard_id=1, is_correct=True)])
    session = await sql_storage.save_round_results(
        "lazy", 1, [RoundResult(flashcard_id=3, is_correct=False)]
    )
    assert session.total_rounds is None
    assert [r.flashcard_id for r in session.rounds[1]] == [3]
    assert session.start_time.tzinfo is not None


async def test_delete_idle_sessions(sql_storage):
    now = datetime.now(timezone.utc)
    await sql_storage.create_session(
        StudySession(session_id="old", last_activity=now - timedelta(days=1), issued={1: [1]})
    )
    await sql_storage.create_session(StudySession(session_id="new", last_activity=now))
    assert await sql_storage.delete_sessions_idle_since(now - timedelta(hours=1)) == ["old"]
    assert await sql_storage.get_session("old") is None
    assert await sql_storage.get_session("new") is not None


async def test_pdf_documents(sql_storage):
    await sql_storage.save_pdf_document(PdfDocument(id="p", name="n.pdf", content="c"))
    assert await sql_storage.get_pdf_document("p") == PdfDocument(id="p", name="n.pdf", content="c")
    assert await sql_storage.get_pdf_document("q") is None


async def test_manager_runs_on_sql_backend(sql_storage):
    manager = StudySessionManager(sql_storage, QuestionSource(use_upstream=False))
    batch = await manager.start_session(
        subject="science", class_level="5", difficulty=Difficulty.MEDIUM, count=5, rounds=2
    )
    results = [
        {"flashcardId": c.id, "isCorrect": i % 2 == 0} for i, c in enumerate(batch.flashcards)
    ]
    nxt = await manager.submit_round(batch.session_id, 1, results, 2)
    assert len(nxt.flashcards) == 2
    assert all(c.difficulty == Difficulty.HARD for c in nxt.flashcards)

    done = await manager.submit_round(
        batch.session_id,
        2,
        [{"flashcardId": c.id, "isCorrect": True} for c in nxt.flashcards],
        2,
    )
    assert isinstance(done, SessionCompleted)
    assert done.stats.total_cards == 7
    assert done.stats.correct_count == 5
    assert done.stats.accuracy == 71
    assert done.stats.most_difficult_subject == "science"


async def test_resubmitted_round_drops_later_rounds(sql_storage):
    await sql_storage.create_session(
        StudySession(session_id="s2", total_rounds=3, issued={1: [1, 2]})
    )
    await sql_storage.save_round_results("s2", 1, [RoundResult(flashcard_id=1, is_correct=False)])
    await sql_storage.record_batch("s2", 2, [1])
    await sql_storage.save_round_results("s2", 2, [RoundResult(flashcard_id=1, is_correct=True)])
    await sql_storage.record_batch("s2", 3, [])

    session = await sql_storage.save_round_results(
        "s2", 1, [RoundResult(flashcard_id=2, is_correct=True)]
    )
    assert list(session.rounds) == [1]
    assert [r.flashcard_id for r in session.rounds[1]] == [2]
    assert session.issued == {1: [1, 2]}


async def test_round_that_cannot_be_read_back_is_an_internal_error(sql_storage, monkeypatch):
    async def missing(session_id):
        return None

    monkeypatch.setattr(sql_storage, "get_session", missing)
    with pytest.raises(InternalError):
        await sql_storage.save_round_results(
            "gone", 1, [RoundResult(flashcard_id=1, is_correct=True)]
        )
