"""Pydantic models for study sessions, flashcards and session statistics.

Wire-facing models serialize in camelCase (``classLevel``, ``flashcardId``)
to match the frontend; Python code uses the snake_case attribute names. The
mutable session aggregate is a dataclass owned by the storage layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_ORDER.index(self)

    def successor(self) -> "Difficulty":
        """Next difficulty step; ``hard`` saturates."""
        idx = min(self.rank + 1, len(_DIFFICULTY_ORDER) - 1)
        return _DIFFICULTY_ORDER[idx]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank >= other.rank


_DIFFICULTY_ORDER = (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)


class FlashcardSource(str, Enum):
    DEFAULT = "default"
    PDF = "pdf"
    CUSTOM = "custom"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GeneratedCard(BaseModel):
    """A question/answer pair tagged with the parameters it was generated for."""

    question: str
    answer: str
    subject: str
    class_level: str
    difficulty: Difficulty


class Flashcard(CamelModel):
    """A stored flashcard. Immutable once the store assigns its id."""

    model_config = ConfigDict(frozen=True)

    id: int
    question: str
    answer: str
    subject: str
    class_level: str
    difficulty: Difficulty
    source: FlashcardSource = FlashcardSource.DEFAULT
    source_id: Optional[str] = None

    def to_response(self, difficulty: Optional[Difficulty] = None) -> "FlashcardResponse":
        return FlashcardResponse(
            id=self.id,
            question=self.question,
            answer=self.answer,
            subject=self.subject,
            class_level=self.class_level,
            difficulty=difficulty or self.difficulty,
        )


class FlashcardResponse(CamelModel):
    """Session-facing view of a flashcard; never exposes its source."""

    id: int
    question: str
    answer: str
    subject: str
    class_level: str
    difficulty: Difficulty


class RoundResult(CamelModel):
    flashcard_id: int = Field(strict=True)
    is_correct: bool = Field(strict=True)


class RoundStats(CamelModel):
    round: int
    total: int
    correct: int
    accuracy: int


class SessionStats(CamelModel):
    total_cards: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    accuracy: int = 0
    time_spent: str = "0:00"
    round_results: list[RoundStats] = Field(default_factory=list)
    most_difficult_subject: str = "None identified"


class PdfDocument(BaseModel):
    id: str
    name: str
    content: str


class RoundBatch(CamelModel):
    """Cards shown for a round, as returned to the client."""

    session_id: str
    flashcards: list[FlashcardResponse] = Field(default_factory=list)
    round: int
    total_rounds: int


class SessionCompleted(CamelModel):
    session_id: str
    completed: Literal[True] = True
    stats: SessionStats


class OptionItem(BaseModel):
    value: str | int
    label: str
    color: Optional[str] = None
    icon: Optional[str] = None


class StudyOptions(CamelModel):
    subjects: list[OptionItem]
    class_levels: list[OptionItem]
    difficulty_levels: list[OptionItem]
    question_counts: list[OptionItem]


@dataclass
class StudySession:
    """All recorded rounds for one study attempt.

    ``issued`` holds the flashcard ids handed out for each round; it is empty
    for sessions created lazily by a round submission.
    """

    session_id: str
    start_time: datetime = field(default_factory=_now_utc)
    total_rounds: Optional[int] = None
    rounds: dict[int, list[RoundResult]] = field(default_factory=dict)
    issued: dict[int, list[int]] = field(default_factory=dict)
    last_activity: datetime = field(default_factory=_now_utc)

    @property
    def has_results(self) -> bool:
        return bool(self.rounds)
