"""Error taxonomy for claim submission, review and lookup.

Every error carries the HTTP status an API layer should answer with, so
callers can map failures without knowing which component raised them.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ClaimsError(Exception):
    """Base exception for all claims portal errors."""

    http_status: int = 500
    code: str = "CLAIMS_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary for logging/serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(ClaimsError):
    """Missing or malformed input. Raised before any mutation."""

    http_status = 400
    code = "VALIDATION_ERROR"


class DuplicateSubmission(ClaimsError):
    """The employee already has a claim for the given day."""

    http_status = 400
    code = "DUPLICATE_SUBMISSION"

    @classmethod
    def for_day(cls, employee_id: str, claim_date: Any) -> "DuplicateSubmission":
        return cls(
            "Cannot submit more than one claim per day",
            details={"employee_id": employee_id, "date": str(claim_date)},
        )


class NotFound(ClaimsError):
    http_status = 404
    code = "NOT_FOUND"

    @classmethod
    def claim(cls, claim_id: int) -> "NotFound":
        return cls("Claim not found", details={"claim_id": claim_id})


class PayloadTooLarge(ClaimsError):
    """An attachment exceeds the per-file size limit."""

    http_status = 413
    code = "PAYLOAD_TOO_LARGE"


class InternalError(ClaimsError):
    """Unexpected persistence failure. The attempt was rolled back."""

    http_status = 500
    code = "INTERNAL_ERROR"


class StorageError(InternalError):
    """Blob I/O failure (disk full, permission denied, ...)."""

    code = "STORAGE_ERROR"
