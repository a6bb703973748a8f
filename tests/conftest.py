import pytest
from fastapi.testclient import TestClient

from app.modules.study.generator import QuestionSource
from app.modules.study.models import Difficulty, GeneratedCard
from app.modules.study.state import StudySessionManager
from app.modules.study.storage import MemoryStorage


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def questions() -> QuestionSource:
    # static bank only; tests never reach a model provider
    return QuestionSource(use_upstream=False)


@pytest.fixture
def manager(storage, questions) -> StudySessionManager:
    return StudySessionManager(storage, questions)


@pytest.fixture
def client(manager):
    from main import create_app

    with TestClient(create_app(manager)) as c:
        yield c


def make_cards(subjects, difficulty=Difficulty.EASY):
    return [
        GeneratedCard(
            question=f"Q{i}",
            answer=f"A{i}",
            subject=subject,
            class_level="9",
            difficulty=difficulty,
        )
        for i, subject in enumerate(subjects)
    ]
