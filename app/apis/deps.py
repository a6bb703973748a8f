from __future__ import annotations

from fastapi import Request

from app.modules.study.state import StudySessionManager


def get_study_manager(request: Request) -> StudySessionManager:
    """Session manager created by the app factory and kept on ``app.state``."""
    return request.app.state.study_manager
