"""Study session module exports."""

from .models import (
    Difficulty,
    Flashcard,
    FlashcardResponse,
    RoundBatch,
    RoundResult,
    SessionCompleted,
    SessionStats,
    StudySession,
)

__all__ = [
    "Difficulty",
    "Flashcard",
    "FlashcardResponse",
    "RoundBatch",
    "RoundResult",
    "SessionCompleted",
    "SessionStats",
    "StudySession",
]
