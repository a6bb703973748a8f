"""Storage abstraction for flashcards, study sessions and PDF documents.

The session state machine only talks to ``StudyStorage``; ``MemoryStorage``
keeps everything in-process and ``SqlStudyStorage`` (see ``sql_storage``)
persists through SQLAlchemy.
"""

from __future__ import annotations

import asyncio
import copy
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from app.modules.study.models import (
    Flashcard,
    FlashcardSource,
    GeneratedCard,
    PdfDocument,
    RoundResult,
    StudySession,
)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class StudyStorage(ABC):
    async def init(self) -> None:
        """Prepare the backend (create tables, open pools)."""

    async def close(self) -> None:
        """Release backend resources."""

    # Flashcards ---------------------------------------------------------
    @abstractmethod
    async def save_flashcards(
        self,
        cards: Sequence[GeneratedCard],
        source: FlashcardSource = FlashcardSource.DEFAULT,
        source_id: Optional[str] = None,
    ) -> list[Flashcard]:
        """Store cards under fresh ids, returned in input order."""

    @abstractmethod
    async def get_flashcards_by_ids(self, ids: Iterable[int]) -> list[Flashcard]:
        """Return the cards that exist; unknown ids are skipped."""

    # Sessions -----------------------------------------------------------
    @abstractmethod
    async def create_session(self, session: StudySession) -> None: ...

    @abstractmethod
    async def get_session(self, session_id: str) -> Optional[StudySession]: ...

    @abstractmethod
    async def save_round_results(
        self, session_id: str, round: int, results: Sequence[RoundResult]
    ) -> StudySession:
        """Record (or overwrite) a round, creating the session if it is new.

        Rounds recorded after ``round`` and batches issued after it are dropped.
        """

    @abstractmethod
    async def record_batch(
        self, session_id: str, round: int, flashcard_ids: Sequence[int]
    ) -> None:
        """Remember which cards were issued for ``round``."""

    @abstractmethod
    async def delete_sessions_idle_since(self, cutoff: datetime) -> list[str]:
        """Drop sessions whose last activity is older than ``cutoff``."""

    # PDF documents ------------------------------------------------------
    @abstractmethod
    async def save_pdf_document(self, document: PdfDocument) -> None: ...

    @abstractmethod
    async def get_pdf_document(self, document_id: str) -> Optional[PdfDocument]: ...


class MemoryStorage(StudyStorage):
    """Process-local storage. Everything is lost on restart."""

    def __init__(self) -> None:
        self._flashcards: dict[int, Flashcard] = {}
        self._sessions: dict[str, StudySession] = {}
        self._pdf_documents: dict[str, PdfDocument] = {}
        self._next_flashcard_id = 1
        self._lock = asyncio.Lock()

    async def save_flashcards(
        self,
        cards: Sequence[GeneratedCard],
        source: FlashcardSource = FlashcardSource.DEFAULT,
        source_id: Optional[str] = None,
    ) -> list[Flashcard]:
        saved: list[Flashcard] = []
        async with self._lock:
            for card in cards:
                flashcard = Flashcard(
                    id=self._next_flashcard_id,
                    question=card.question,
                    answer=card.answer,
                    subject=card.subject,
                    class_level=card.class_level,
                    difficulty=card.difficulty,
                    source=source,
                    source_id=source_id,
                )
                self._next_flashcard_id += 1
                self._flashcards[flashcard.id] = flashcard
                saved.append(flashcard)
        return saved

    async def get_flashcards_by_ids(self, ids: Iterable[int]) -> list[Flashcard]:
        return [self._flashcards[i] for i in ids if i in self._flashcards]

    async def create_session(self, session: StudySession) -> None:
        self._sessions[session.session_id] = copy.deepcopy(session)

    async def get_session(self, session_id: str) -> Optional[StudySession]:
        session = self._sessions.get(session_id)
        return copy.deepcopy(session) if session else None

    async def save_round_results(
        self, session_id: str, round: int, results: Sequence[RoundResult]
    ) -> StudySession:
        now = _now_utc()
        session = self._sessions.get(session_id)
        if session is None:
            session = StudySession(session_id=session_id, start_time=now)
            self._sessions[session_id] = session
        session.rounds = {n: r for n, r in session.rounds.items() if n < round}
        session.rounds[round] = list(results)
        session.issued = {n: ids for n, ids in session.issued.items() if n <= round}
        session.last_activity = now
        return copy.deepcopy(session)

    async def record_batch(
        self, session_id: str, round: int, flashcard_ids: Sequence[int]
    ) -> None:
        session = self._sessions.get(session_id)
        if session is None:
            return
        session.issued[round] = list(flashcard_ids)
        session.last_activity = _now_utc()

    async def delete_sessions_idle_since(self, cutoff: datetime) -> list[str]:
        stale = [
            sid for sid, s in self._sessions.items() if s.last_activity < cutoff
        ]
        for sid in stale:
            self._sessions.pop(sid, None)
        return stale

    async def save_pdf_document(self, document: PdfDocument) -> None:
        self._pdf_documents[document.id] = document

    async def get_pdf_document(self, document_id: str) -> Optional[PdfDocument]:
        return self._pdf_documents.get(document_id)
