"""Multi-round study session engine.

A session is created by ``start_session`` with the round-1 batch already
issued. Each ``submit_round`` records the round's results and either issues
the next batch (the cards answered incorrectly, one difficulty step harder)
or, on the last round, completes the session with its statistics. Sessions
idle for longer than the configured TTL are swept by a background loop.

Submissions are serialized per session; different sessions run in parallel.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Sequence, Union
from uuid import uuid4

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.core.config import Settings, settings
from app.core.errors import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.modules.study.generator import QuestionSource
from app.modules.study.models import (
    Difficulty,
    FlashcardSource,
    RoundBatch,
    RoundResult,
    SessionCompleted,
    SessionStats,
    StudySession,
)
from app.modules.study.stats import compute_stats, incorrect_ids
from app.modules.study.storage import MemoryStorage, StudyStorage

logger = get_logger(__name__)

_results_adapter = TypeAdapter(list[RoundResult])

RoundOutcome = Union[RoundBatch, SessionCompleted]


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class StudySessionManager:
    def __init__(
        self,
        storage: StudyStorage,
        questions: QuestionSource,
        *,
        strict_validation: bool = True,
        idle_seconds: int = 6 * 3600,
        sweep_interval: int = 300,
    ) -> None:
        self.storage = storage
        self.questions = questions
        self.strict_validation = strict_validation
        self._idle_seconds = max(60, int(idle_seconds))
        self._sweep_interval = max(5, int(sweep_interval))
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._cleanup_task: Optional[asyncio.Task] = None

    def _checkout_lock(self, session_id: str) -> asyncio.Lock:
        self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1
        return self._locks.setdefault(session_id, asyncio.Lock())

    def _checkin_lock(self, session_id: str, *, drop: bool = False) -> None:
        """Release a checkout; ``drop`` forgets the lock once nobody else holds it."""
        users = self._lock_users.get(session_id, 0) - 1
        if users > 0:
            self._lock_users[session_id] = users
            return
        self._lock_users.pop(session_id, None)
        if drop:
            self._locks.pop(session_id, None)

    # Session lifecycle --------------------------------------------------
    async def start_session(
        self,
        *,
        subject: str,
        class_level: str,
        difficulty: Difficulty,
        count: int,
        rounds: int,
        pdf_id: Optional[str] = None,
    ) -> RoundBatch:
        if rounds < 1:
            raise ValidationError("rounds must be at least 1")
        if count < 1:
            raise ValidationError("count must be at least 1")

        content: Optional[str] = None
        topic: Optional[str] = None
        source = FlashcardSource.DEFAULT
        if pdf_id:
            document = await self.storage.get_pdf_document(pdf_id)
            if document is None:
                raise NotFoundError("PDF document not found")
            content, topic = document.content, document.name
            source = FlashcardSource.PDF

        generated = await self.questions.generate(
            subject, class_level, difficulty, count, content, topic=topic
        )
        cards = await self.storage.save_flashcards(
            generated, source, pdf_id if source == FlashcardSource.PDF else None
        )

        session = StudySession(
            session_id=str(uuid4()),
            total_rounds=rounds,
            issued={1: [c.id for c in cards]},
        )
        await self.storage.create_session(session)
        logger.info(
            "Started study session: %s/%s, %d cards, %d rounds",
            subject,
            difficulty.value,
            len(cards),
            rounds,
            extra={"session_id": session.session_id},
        )
        return RoundBatch(
            session_id=session.session_id,
            flashcards=[c.to_response() for c in cards],
            round=1,
            total_rounds=rounds,
        )

    async def submit_round(
        self,
        session_id: str,
        round: int,
        results: Sequence[Union[RoundResult, dict[str, Any]]],
        total_rounds: int,
    ) -> RoundOutcome:
        parsed = self._parse_results(results)
        if not session_id:
            raise ValidationError("sessionId is required")
        if total_rounds < 1:
            raise ValidationError("totalRounds must be at least 1")
        if round < 1 or round > total_rounds:
            raise ValidationError(f"round must be between 1 and {total_rounds}")

        lock = self._checkout_lock(session_id)
        orphaned = False
        try:
            async with lock:
                existing = await self.storage.get_session(session_id)
                try:
                    self._validate_round(existing, round, parsed, total_rounds)
                except ValidationError:
                    orphaned = existing is None
                    raise
                return await self._record_round(session_id, round, parsed, total_rounds)
        finally:
            self._checkin_lock(session_id, drop=orphaned)

    async def _record_round(
        self,
        session_id: str,
        round: int,
        results: list[RoundResult],
        total_rounds: int,
    ) -> RoundOutcome:
        session = await self.storage.save_round_results(session_id, round, results)
        correct = sum(1 for r in results if r.is_correct)
        logger.info(
            "Recorded round %d/%d: %d/%d correct",
            round,
            total_rounds,
            correct,
            len(results),
            extra={"session_id": session_id},
        )

        if round < total_rounds:
            return await self._next_round(session_id, round, results, total_rounds)

        stats = await self._compute_stats(session)
        logger.info(
            "Completed study session with %d%% accuracy",
            stats.accuracy,
            extra={"session_id": session_id},
        )
        return SessionCompleted(session_id=session_id, stats=stats)

    async def _next_round(
        self,
        session_id: str,
        round: int,
        results: list[RoundResult],
        total_rounds: int,
    ) -> RoundBatch:
        missed = [r.flashcard_id for r in results if not r.is_correct]
        cards = await self.storage.get_flashcards_by_ids(missed)
        # stored cards keep their difficulty; only the issued view is escalated
        next_cards = [c.to_response(c.difficulty.successor()) for c in cards]
        await self.storage.record_batch(
            session_id, round + 1, [c.id for c in next_cards]
        )
        if not next_cards:
            logger.debug(
                "No missed cards in round %d; round %d is empty",
                round,
                round + 1,
                extra={"session_id": session_id},
            )
        return RoundBatch(
            session_id=session_id,
            flashcards=next_cards,
            round=round + 1,
            total_rounds=total_rounds,
        )

    async def get_stats(self, session_id: str) -> SessionStats:
        session = await self.storage.get_session(session_id)
        if session is None or not session.has_results:
            raise NotFoundError("Session not found")
        return await self._compute_stats(session)

    async def _compute_stats(self, session: StudySession) -> SessionStats:
        cards = await self.storage.get_flashcards_by_ids(set(incorrect_ids(session)))
        return compute_stats(session, {c.id: c for c in cards})

    # Validation ---------------------------------------------------------
    @staticmethod
    def _parse_results(results: Any) -> list[RoundResult]:
        if not isinstance(results, (list, tuple)):
            raise ValidationError("results must be a list")
        try:
            return _results_adapter.validate_python(
                [r.model_dump() if isinstance(r, RoundResult) else r for r in results]
            )
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid round results",
                errors=e.errors(include_url=False, include_context=False),
            ) from e

    def _validate_round(
        self,
        session: Optional[StudySession],
        round: int,
        results: list[RoundResult],
        total_rounds: int,
    ) -> None:
        issued = session.issued.get(round) if session else None
        # an empty result list is only valid for a round that was issued empty
        if not results and not (issued is not None and not issued):
            raise ValidationError("results must not be empty")

        if self.strict_validation:
            seen: set[int] = set()
            duplicates = []
            for i, r in enumerate(results):
                if r.flashcard_id in seen:
                    duplicates.append(
                        {
                            "loc": ["results", i, "flashcardId"],
                            "msg": "Duplicate flashcard in round",
                            "type": "value_error",
                            "input": r.flashcard_id,
                        }
                    )
                seen.add(r.flashcard_id)
            if duplicates:
                raise ValidationError(
                    "Each flashcard may appear only once per round", errors=duplicates
                )

        if session is None:
            return
        if session.total_rounds is not None and session.total_rounds != total_rounds:
            raise ValidationError(
                f"totalRounds does not match the session ({session.total_rounds})"
            )
        if not self.strict_validation:
            return

        if issued is None:
            if session.issued and round not in session.rounds:
                raise ValidationError(f"Round {round} has not been issued for this session")
            return

        allowed = set(issued)
        errors = [
            {
                "loc": ["results", i, "flashcardId"],
                "msg": "Flashcard was not issued for this round",
                "type": "value_error",
                "input": r.flashcard_id,
            }
            for i, r in enumerate(results)
            if r.flashcard_id not in allowed
        ]
        if errors:
            raise ValidationError(
                "Results reference flashcards not issued for this round", errors=errors
            )

    # Cleanup loop -------------------------------------------------------
    async def sweep_idle(self, now: Optional[datetime] = None) -> int:
        cutoff = (now or _now_utc()) - timedelta(seconds=self._idle_seconds)
        removed = await self.storage.delete_sessions_idle_since(cutoff)
        for session_id in removed:
            if session_id not in self._lock_users:
                self._locks.pop(session_id, None)
        if removed:
            logger.info("Evicted %d idle study sessions", len(removed))
        return len(removed)

    def start(self) -> None:
        if self._cleanup_task and not self._cleanup_task.done():
            return
        self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop(self) -> None:
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
        self._cleanup_task = None

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                await self.sweep_idle()
            except Exception:
                logger.exception("Idle session sweep failed")


def build_storage(config: Settings = settings) -> StudyStorage:
    backend = (config.storage.backend or "memory").lower()
    if backend == "memory":
        return MemoryStorage()
    if backend in ("database", "sql"):
        from app.modules.study.sql_storage import SqlStudyStorage

        return SqlStudyStorage(config.storage.database_url, echo=config.storage.echo)
    raise ValueError(f"Unknown storage backend: {config.storage.backend}")


def build_manager(config: Settings = settings) -> StudySessionManager:
    """Wire storage, question source and session settings together."""
    return StudySessionManager(
        build_storage(config),
        QuestionSource(config=config.generation),
        strict_validation=config.session.strict_round_validation,
        idle_seconds=config.session.ttl_seconds,
        sweep_interval=config.session.sweep_interval_seconds,
    )
