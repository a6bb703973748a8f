from __future__ import annotations

from typing import Optional

from pydantic import Field

from app.modules.study.models import CamelModel, Difficulty, RoundResult


class StudySessionRequest(CamelModel):
    subject: str = Field(..., min_length=1)
    class_level: str = Field(..., min_length=1)
    difficulty: Difficulty
    count: int = Field(..., ge=5, le=15, description="Cards in the first round")
    rounds: int = Field(..., ge=1, le=5)
    pdf_id: Optional[str] = None


class RoundResultsRequest(CamelModel):
    session_id: str = Field(..., min_length=1)
    results: list[RoundResult]
    round: int = Field(..., ge=1)
    total_rounds: int = Field(..., ge=1)


class PdfUploadResponse(CamelModel):
    id: str
    name: str
    message: str = "PDF uploaded successfully"


class HealthResponse(CamelModel):
    status: str = "ok"
