"""PDF text extraction for uploaded study documents (PyMuPDF)."""

from __future__ import annotations

import pymupdf

from app.core.logging import get_logger

logger = get_logger(__name__)

MIN_TEXT_CHARS = 50
MAX_TEXT_CHARS = 15000

PLACEHOLDER_TEXT = (
    "This is content extracted from {name}. Please generate questions based on "
    "the document title and any context provided by the user."
)
UNREADABLE_TEXT = (
    "PDF content could not be extracted. Please generate questions based on the "
    "document title."
)


def extract_pdf_text(data: bytes, name: str = "uploaded document") -> str:
    """Extract plain text from a PDF; never raises on unreadable input."""
    try:
        with pymupdf.open(stream=data, filetype="pdf") as doc:
            text = " ".join((page.get_text("text") or "").strip() for page in doc)
    except Exception as e:  # noqa: BLE001
        logger.warning("Could not parse PDF %s: %s", name, e)
        return UNREADABLE_TEXT

    text = " ".join(text.split())
    if len(text) < MIN_TEXT_CHARS:
        return PLACEHOLDER_TEXT.format(name=name)
    if len(text) > MAX_TEXT_CHARS:
        text = text[:MAX_TEXT_CHARS] + "...[content truncated]"
    return text
