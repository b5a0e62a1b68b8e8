"""Claim submission: validation, the daily limit, and the transactional write.

A submission attempt moves through ``validating -> checking_duplicate ->
writing`` and ends either ``committed`` or ``rolled_back``. Validation and
duplicate failures happen before anything is written. Once writing has
started, any failure rolls the database transaction back and deletes every
blob stored during the attempt, so readers never see a claim without its
attachments or an orphaned file on disk.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Callable, Mapping, Union

import pydantic

from claims_portal.database import Database
from claims_portal.exceptions import ClaimsError, DuplicateSubmission, InternalError, ValidationError
from claims_portal.logging_config import get_logger
from claims_portal.modules.claims.models import ClaimAttachment, ClaimSubmission, ClaimView
from claims_portal.modules.claims.query import to_claim_view
from claims_portal.modules.claims.repository import ClaimRepository
from claims_portal.modules.storage import BlobStore, StoredBlob

logger = get_logger(__name__)

SubmissionInput = Union[ClaimSubmission, Mapping[str, Any]]


def validate_submission(request: SubmissionInput) -> ClaimSubmission:
    """Coerce raw form fields into a ``ClaimSubmission``.

    Raises:
        ValidationError: If a required field is missing or malformed.
    """
    if isinstance(request, ClaimSubmission):
        return request
    try:
        return ClaimSubmission.model_validate(dict(request))
    except pydantic.ValidationError as exc:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        missing = any(
            err["type"] in {"missing", "string_too_short"} or "required" in err["msg"]
            for err in exc.errors()
        )
        message = "All fields are required" if missing else errors[0]["message"]
        raise ValidationError(message, details={"errors": errors}) from None


class ClaimSubmissionService:
    """Creates claims together with their attachments, all or nothing."""

    def __init__(
        self,
        database: Database,
        blobs: BlobStore,
        today: Callable[[], dt.date] = dt.date.today,
    ) -> None:
        self._database = database
        self._blobs = blobs
        self._today = today

    async def submit(self, request: SubmissionInput) -> ClaimView:
        """Submit a claim for today.

        Returns:
            The created claim (status ``pending``) with its attachments.

        Raises:
            ValidationError: Missing or malformed fields. Nothing written.
            DuplicateSubmission: The employee already claimed today. Nothing written.
            PayloadTooLarge: An attachment exceeds the size limit. Rolled back.
            StorageError: Attachment bytes could not be written. Rolled back.
            InternalError: Any other failure while writing. Rolled back.
        """
        log = logger.bind(state="validating")
        submission = validate_submission(request)

        claim_date = self._today()
        log = log.bind(employee_id=submission.employee_id, date=claim_date.isoformat())

        async with self._database.session() as session:
            repo = ClaimRepository(session)

            log.debug("submission_checking_duplicate", state="checking_duplicate")
            if await repo.has_claim_for(submission.employee_id, claim_date):
                log.info("submission_duplicate")
                raise DuplicateSubmission.for_day(submission.employee_id, claim_date)

            stored: list[StoredBlob] = []
            attachments: list[ClaimAttachment] = []
            log.debug("submission_writing", state="writing", attachments=len(submission.attachments))
            try:
                await repo.begin()
                claim = await repo.insert_claim(submission, claim_date)
                for upload in submission.attachments:
                    blob = await self._blobs.store(upload.filename, upload.stream, upload.content_type)
                    stored.append(blob)
                    attachments.append(
                        await repo.insert_attachment(claim.id, upload.filename, blob, upload.content_type)
                    )
                await repo.commit()
            except Exception as exc:
                await self._roll_back(repo, stored, log)
                log.warning(
                    "submission_rolled_back",
                    state="rolled_back",
                    error=str(exc),
                    error_type=type(exc).__name__,
                    blobs_compensated=len(stored),
                )
                if isinstance(exc, ClaimsError):
                    raise
                raise InternalError(
                    "Internal server error",
                    details={"employee_id": submission.employee_id},
                ) from exc

        # Rows stay loaded after commit, so no further read can fail here.
        view = to_claim_view(self._blobs, claim, attachments)
        log.info("claim_submitted", state="committed", claim_id=view.id, attachments=len(view.attachments))
        return view

    async def _roll_back(self, repo: ClaimRepository, stored: list[StoredBlob], log: Any) -> None:
        """Undo a failed attempt. Failures here are logged so the original error survives."""
        try:
            await repo.rollback()
        except Exception as exc:
            log.warning("submission_rollback_failed", error=str(exc), error_type=type(exc).__name__)
        await self._compensate(stored)

    async def _compensate(self, stored: list[StoredBlob]) -> None:
        """Best-effort removal of blobs written by a failed attempt."""
        for blob in stored:
            try:
                await self._blobs.delete(blob.reference)
            except Exception as exc:
                logger.warning("blob_compensation_failed", reference=blob.reference, error=str(exc))
