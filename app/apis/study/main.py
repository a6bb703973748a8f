from __future__ import annotations

from typing import Annotated, Optional, Union
from uuid import uuid4

from fastapi import APIRouter, Depends, File, UploadFile

from app.apis.deps import get_study_manager
from app.apis.study.schemas import (
    HealthResponse,
    PdfUploadResponse,
    RoundResultsRequest,
    StudySessionRequest,
)
from app.core.config import settings
from app.core.errors import ValidationError
from app.core.logging import get_logger
from app.modules.study.models import (
    PdfDocument,
    RoundBatch,
    SessionCompleted,
    SessionStats,
    StudyOptions,
)
from app.modules.study.pdf import extract_pdf_text
from app.modules.study.question_bank import study_options
from app.modules.study.state import StudySessionManager

logger = get_logger(__name__)

router = APIRouter()

Manager = Annotated[StudySessionManager, Depends(get_study_manager)]

PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


@router.get(
    f"/{settings.app.version}/health",
    response_model=HealthResponse,
    tags=["study"],
)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get(
    f"/{settings.app.version}/options",
    response_model=StudyOptions,
    response_model_exclude_none=True,
    tags=["study"],
)
async def get_options() -> StudyOptions:
    return study_options()


@router.post(
    f"/{settings.app.version}/upload-pdf",
    response_model=PdfUploadResponse,
    tags=["study"],
)
async def upload_pdf(
    manager: Manager, pdf: Optional[UploadFile] = File(default=None)
) -> PdfUploadResponse:
    if pdf is None:
        raise ValidationError("No PDF file uploaded")
    name = pdf.filename or "document.pdf"
    if pdf.content_type not in PDF_CONTENT_TYPES and not name.lower().endswith(".pdf"):
        raise ValidationError("Only PDF files are allowed")

    data = await pdf.read()
    if not data:
        raise ValidationError("Uploaded PDF is empty")
    if len(data) > settings.session.max_pdf_bytes:
        raise ValidationError("PDF exceeds the maximum upload size")

    document = PdfDocument(
        id=str(uuid4()), name=name, content=extract_pdf_text(data, name)
    )
    await manager.storage.save_pdf_document(document)
    logger.info("Stored PDF %s (%d chars) as %s", name, len(document.content), document.id)
    return PdfUploadResponse(id=document.id, name=document.name)


@router.post(
    f"/{settings.app.version}/study-session",
    response_model=RoundBatch,
    tags=["study"],
)
async def create_study_session(
    req: StudySessionRequest, manager: Manager
) -> RoundBatch:
    return await manager.start_session(
        subject=req.subject,
        class_level=req.class_level,
        difficulty=req.difficulty,
        count=req.count,
        rounds=req.rounds,
        pdf_id=req.pdf_id,
    )


@router.post(
    f"/{settings.app.version}/round-results",
    response_model=Union[RoundBatch, SessionCompleted],
    tags=["study"],
)
async def submit_round_results(
    req: RoundResultsRequest, manager: Manager
) -> Union[RoundBatch, SessionCompleted]:
    return await manager.submit_round(
        req.session_id, req.round, req.results, req.total_rounds
    )


@router.get(
    f"/{settings.app.version}/session-stats/{{session_id}}",
    response_model=SessionStats,
    tags=["study"],
)
async def get_session_stats(session_id: str, manager: Manager) -> SessionStats:
    return await manager.get_stats(session_id)
