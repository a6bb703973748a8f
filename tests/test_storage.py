from datetime import datetime, timedelta, timezone

from app.modules.study.models import (
    Difficulty,
    FlashcardSource,
    PdfDocument,
    RoundResult,
    StudySession,
)

from conftest import make_cards


async def test_ids_are_assigned_in_input_order(storage):
    first = await storage.save_flashcards(make_cards(["math", "science"]))
    second = await storage.save_flashcards(make_cards(["history"]))
    assert [c.id for c in first] == [1, 2]
    assert [c.id for c in second] == [3]
    assert [c.subject for c in first] == ["math", "science"]


async def test_get_by_ids_skips_unknown(storage):
    saved = await storage.save_flashcards(make_cards(["a", "b", "c"]))
    found = await storage.get_flashcards_by_ids([saved[2].id, 999, saved[0].id])
    assert {c.id for c in found} == {saved[0].id, saved[2].id}


async def test_pdf_source_is_recorded(storage):
    saved = await storage.save_flashcards(
        make_cards(["science"], Difficulty.HARD), FlashcardSource.PDF, "doc-1"
    )
    assert saved[0].source == FlashcardSource.PDF
    assert saved[0].source_id == "doc-1"


async def test_save_round_results_creates_and_overwrites(storage):
    session = await storage.save_round_results(
        "s1", 1, [RoundResult(flashcard_id=1, is_correct=True)]
    )
    assert session.total_rounds is None
    assert list(session.rounds) == [1]

    session = await storage.save_round_results(
        "s1", 1, [RoundResult(flashcard_id=2, is_correct=False)]
    )
    assert [r.flashcard_id for r in session.rounds[1]] == [2]


async def test_returned_sessions_are_copies(storage):
    await storage.create_session(StudySession(session_id="s1", issued={1: [1, 2]}))
    session = await storage.get_session("s1")
    session.issued[1].append(3)
    assert (await storage.get_session("s1")).issued[1] == [1, 2]


async def test_record_batch_ignores_unknown_session(storage):
    await storage.record_batch("missing", 2, [1])
    assert await storage.get_session("missing") is None


async def test_delete_idle_sessions(storage):
    now = datetime.now(timezone.utc)
    await storage.create_session(
        StudySession(session_id="old", last_activity=now - timedelta(hours=7))
    )
    await storage.create_session(StudySession(session_id="fresh", last_activity=now))
    removed = await storage.delete_sessions_idle_since(now - timedelta(hours=6))
    assert removed == ["old"]
    assert await storage.get_session("old") is None
    assert await storage.get_session("fresh") is not None


async def test_pdf_documents(storage):
    await storage.save_pdf_document(PdfDocument(id="p1", name="a.pdf", content="text"))
    assert (await storage.get_pdf_document("p1")).content == "text"
    assert await storage.get_pdf_document("p2") is None
