"""SQLAlchemy-backed ``StudyStorage``.

Timestamps are stored as naive UTC and returned timezone-aware.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from sqlalchemy import delete, select

from app.core.db.base import Base, build_engine, build_session_maker
from app.core.db.schemas.study import (
    FlashcardRecord,
    PdfDocumentRecord,
    RoundBatchRecord,
    RoundResultRecord,
    StudySessionRecord,
)
from app.core.errors import InternalError
from app.core.logging import get_logger
from app.modules.study.models import (
    Flashcard,
    FlashcardSource,
    GeneratedCard,
    PdfDocument,
    RoundResult,
    StudySession,
)
from app.modules.study.storage import StudyStorage

logger = get_logger(__name__)


def _to_db(dt: datetime) -> datetime:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _from_db(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _to_flashcard(r: FlashcardRecord) -> Flashcard:
    return Flashcard(
        id=r.id,
        question=r.question,
        answer=r.answer,
        subject=r.subject,
        class_level=r.class_level,
        difficulty=r.difficulty,
        source=r.source,
        source_id=r.source_id,
    )


class SqlStudyStorage(StudyStorage):
    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.engine = build_engine(url, echo=echo)
        self.session_maker = build_session_maker(self.engine)

    async def init(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    # Flashcards ---------------------------------------------------------
    async def save_flashcards(
        self,
        cards: Sequence[GeneratedCard],
        source: FlashcardSource = FlashcardSource.DEFAULT,
        source_id: Optional[str] = None,
    ) -> list[Flashcard]:
        async with self.session_maker() as db:
            records: list[FlashcardRecord] = []
            # flush one by one so ids follow input order
            for card in cards:
                record = FlashcardRecord(
                    question=card.question,
                    answer=card.answer,
                    subject=card.subject,
                    class_level=card.class_level,
                    difficulty=card.difficulty,
                    source=source,
                    source_id=source_id,
                )
                db.add(record)
                await db.flush()
                records.append(record)
            await db.commit()
            return [_to_flashcard(r) for r in records]

    async def get_flashcards_by_ids(self, ids: Iterable[int]) -> list[Flashcard]:
        ids = list(ids)
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return []
        async with self.session_maker() as db:
            rows = await db.execute(
                select(FlashcardRecord).where(FlashcardRecord.id.in_(wanted))
            )
            by_id = {r.id: _to_flashcard(r) for r in rows.scalars().all()}
        return [by_id[i] for i in ids if i in by_id]

    # Sessions -----------------------------------------------------------
    async def create_session(self, session: StudySession) -> None:
        async with self.session_maker() as db:
            db.add(
                StudySessionRecord(
                    id=session.session_id,
                    total_rounds=session.total_rounds,
                    start_time=_to_db(session.start_time),
                    last_activity=_to_db(session.last_activity),
                )
            )
            for round_no, ids in session.issued.items():
                db.add(
                    RoundBatchRecord(
                        session_id=session.session_id,
                        round=round_no,
                        flashcard_ids=list(ids),
                    )
                )
            for round_no, results in session.rounds.items():
                db.add_all(self._result_records(session.session_id, round_no, results))
            await db.commit()

    async def get_session(self, session_id: str) -> Optional[StudySession]:
        async with self.session_maker() as db:
            record = await db.get(StudySessionRecord, session_id)
            if record is None:
                return None
            result_rows = await db.execute(
                select(RoundResultRecord)
                .where(RoundResultRecord.session_id == session_id)
                .order_by(RoundResultRecord.round, RoundResultRecord.position)
            )
            batch_rows = await db.execute(
                select(RoundBatchRecord)
                .where(RoundBatchRecord.session_id == session_id)
                .order_by(RoundBatchRecord.round)
            )

            rounds: dict[int, list[RoundResult]] = defaultdict(list)
            for r in result_rows.scalars().all():
                rounds[r.round].append(
                    RoundResult(flashcard_id=r.flashcard_id, is_correct=r.is_correct)
                )
            issued = {b.round: list(b.flashcard_ids or []) for b in batch_rows.scalars().all()}

            return StudySession(
                session_id=record.id,
                start_time=_from_db(record.start_time),
                total_rounds=record.total_rounds,
                rounds=dict(rounds),
                issued=issued,
                last_activity=_from_db(record.last_activity),
            )

    async def save_round_results(
        self, session_id: str, round: int, results: Sequence[RoundResult]
    ) -> StudySession:
        now = _to_db(datetime.now(timezone.utc))
        async with self.session_maker() as db:
            record = await db.get(StudySessionRecord, session_id)
            if record is None:
                record = StudySessionRecord(
                    id=session_id, start_time=now, last_activity=now
                )
                db.add(record)
                await db.flush()
            else:
                record.last_activity = now

            await db.execute(
                delete(RoundResultRecord).where(
                    RoundResultRecord.session_id == session_id,
                    RoundResultRecord.round >= round,
                )
            )
            await db.execute(
                delete(RoundBatchRecord).where(
                    RoundBatchRecord.session_id == session_id,
                    RoundBatchRecord.round > round,
                )
            )
            db.add_all(self._result_records(session_id, round, results))
            await db.commit()

        session = await self.get_session(session_id)
        if session is None:
            raise InternalError(f"Session {session_id} vanished while saving round {round}")
        return session

    async def record_batch(
        self, session_id: str, round: int, flashcard_ids: Sequence[int]
    ) -> None:
        async with self.session_maker() as db:
            record = await db.get(StudySessionRecord, session_id)
            if record is None:
                return
            record.last_activity = _to_db(datetime.now(timezone.utc))
            await db.execute(
                delete(RoundBatchRecord).where(
                    RoundBatchRecord.session_id == session_id,
                    RoundBatchRecord.round == round,
                )
            )
            db.add(
                RoundBatchRecord(
                    session_id=session_id, round=round, flashcard_ids=list(flashcard_ids)
                )
            )
            await db.commit()

    async def delete_sessions_idle_since(self, cutoff: datetime) -> list[str]:
        async with self.session_maker() as db:
            rows = await db.execute(
                select(StudySessionRecord.id).where(
                    StudySessionRecord.last_activity < _to_db(cutoff)
                )
            )
            stale = list(rows.scalars().all())
            if not stale:
                return []
            # SQLite does not enforce ON DELETE CASCADE without a pragma
            await db.execute(
                delete(RoundResultRecord).where(RoundResultRecord.session_id.in_(stale))
            )
            await db.execute(
                delete(RoundBatchRecord).where(RoundBatchRecord.session_id.in_(stale))
            )
            await db.execute(
                delete(StudySessionRecord).where(StudySessionRecord.id.in_(stale))
            )
            await db.commit()
        logger.debug("Deleted %d idle sessions", len(stale))
        return stale

    @staticmethod
    def _result_records(
        session_id: str, round: int, results: Sequence[RoundResult]
    ) -> list[RoundResultRecord]:
        return [
            RoundResultRecord(
                session_id=session_id,
                round=round,
                position=i,
                flashcard_id=r.flashcard_id,
                is_correct=r.is_correct,
            )
            for i, r in enumerate(results)
        ]

    # PDF documents ------------------------------------------------------
    async def save_pdf_document(self, document: PdfDocument) -> None:
        async with self.session_maker() as db:
            await db.merge(
                PdfDocumentRecord(
                    id=document.id, name=document.name, content=document.content
                )
            )
            await db.commit()

    async def get_pdf_document(self, document_id: str) -> Optional[PdfDocument]:
        async with self.session_maker() as db:
            record = await db.get(PdfDocumentRecord, document_id)
            if record is None:
                return None
            return PdfDocument(id=record.id, name=record.name, content=record.content)
