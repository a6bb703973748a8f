# Import models so Base metadata is aware of them
from .study import (  # noqa: F401
    FlashcardRecord,
    PdfDocumentRecord,
    RoundBatchRecord,
    RoundResultRecord,
    StudySessionRecord,
)
