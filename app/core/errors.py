"""Error taxonomy shared by the study modules and the HTTP layer.

Each error carries the HTTP status it maps to so the API layer can translate
it without a lookup table. ``errors`` holds optional structured field errors.
"""

from __future__ import annotations

from typing import Any, Optional


class StudyError(Exception):
    status_code: int = 500
    default_message: str = "Unexpected error"

    def __init__(
        self, message: Optional[str] = None, *, errors: Optional[list[dict[str, Any]]] = None
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"message": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ValidationError(StudyError):
    """Malformed or out-of-range input; the caller can fix it."""

    status_code = 400
    default_message = "Invalid request data"


class NotFoundError(StudyError):
    status_code = 404
    default_message = "Not found"


class UpstreamGenerationError(StudyError):
    """The question generator failed and no fallback content was available."""

    status_code = 502
    default_message = "Failed to generate questions"


class InternalError(StudyError):
    status_code = 500
    default_message = "Internal server error"
