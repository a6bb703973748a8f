from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db.base import Base
from app.modules.study.models import Difficulty, FlashcardSource


class FlashcardRecord(Base):
    __tablename__ = "flashcards"
    # ids are never reused
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    subject: Mapped[str] = mapped_column(String, nullable=False, index=True)
    class_level: Mapped[str] = mapped_column(String, nullable=False)
    difficulty: Mapped[Difficulty] = mapped_column(Enum(Difficulty), nullable=False)
    source: Mapped[FlashcardSource] = mapped_column(
        Enum(FlashcardSource), default=FlashcardSource.DEFAULT, nullable=False
    )
    source_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )


class StudySessionRecord(Base):
    __tablename__ = "study_sessions"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    total_rounds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # naive UTC
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    last_activity: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )

    results: Mapped[list["RoundResultRecord"]] = relationship(
        "RoundResultRecord",
        back_populates="study_session",
        cascade="all, delete-orphan",
    )
    batches: Mapped[list["RoundBatchRecord"]] = relationship(
        "RoundBatchRecord",
        back_populates="study_session",
        cascade="all, delete-orphan",
    )


class RoundResultRecord(Base):
    __tablename__ = "round_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("study_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    round: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # not a foreign key: results may reference cards from an earlier cycle
    flashcard_id: Mapped[int] = mapped_column(Integer, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)

    study_session: Mapped["StudySessionRecord"] = relationship(
        "StudySessionRecord", back_populates="results"
    )


class RoundBatchRecord(Base):
    __tablename__ = "round_batches"
    __table_args__ = (
        UniqueConstraint("session_id", "round", name="uq_round_batch_session_round"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("study_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    round: Mapped[int] = mapped_column(Integer, nullable=False)
    flashcard_ids: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)

    study_session: Mapped["StudySessionRecord"] = relationship(
        "StudySessionRecord", back_populates="batches"
    )


class PdfDocumentRecord(Base):
    __tablename__ = "pdf_documents"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
