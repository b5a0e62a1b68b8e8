"""Read side: claims with their attachments and resolved URLs."""

from __future__ import annotations

from claims_portal.database import Database
from claims_portal.exceptions import ValidationError
from claims_portal.logging_config import get_logger
from claims_portal.modules.claims.models import AttachmentView, Claim, ClaimAttachment, ClaimView, is_valid_employee_id
from claims_portal.modules.claims.repository import ClaimRepository
from claims_portal.modules.storage import BlobStore

logger = get_logger(__name__)


def to_claim_view(blobs: BlobStore, claim: Claim, attachments: list[ClaimAttachment]) -> ClaimView:
    """Assemble a claim view from already loaded rows."""
    return ClaimView.from_record(
        claim,
        [
            AttachmentView(name=att.file_name, url=blobs.resolve_url(att.file_path), size=att.file_size)
            for att in attachments
        ],
    )


async def build_claim_view(repo: ClaimRepository, blobs: BlobStore, claim: Claim) -> ClaimView:
    """Assemble a claim with its attachment names, URLs and sizes."""
    return to_claim_view(blobs, claim, await repo.list_attachments(claim.id))


class ClaimQueryService:
    """Lookups for claim listings and detail views."""

    def __init__(self, database: Database, blobs: BlobStore) -> None:
        self._database = database
        self._blobs = blobs

    async def get_all(self) -> list[ClaimView]:
        async with self._database.session() as session:
            repo = ClaimRepository(session)
            claims = await repo.list_claims()
            return [await build_claim_view(repo, self._blobs, c) for c in claims]

    async def get_by_id(self, claim_id: int) -> ClaimView:
        """Return one claim.

        Raises:
            NotFound: If no claim has this id.
        """
        async with self._database.session() as session:
            repo = ClaimRepository(session)
            claim = await repo.get_claim(claim_id)
            return await build_claim_view(repo, self._blobs, claim)

    async def get_by_employee(self, employee_id: str) -> list[ClaimView]:
        """Return an employee's claims, newest first.

        Raises:
            ValidationError: If ``employee_id`` is not ``ATS0`` + three digits.
        """
        if not is_valid_employee_id(employee_id):
            raise ValidationError("Invalid Employee ID format", details={"employee_id": employee_id})

        async with self._database.session() as session:
            repo = ClaimRepository(session)
            claims = await repo.list_claims(employee_id=employee_id)
            logger.debug("employee_claims_listed", employee_id=employee_id, count=len(claims))
            return [await build_claim_view(repo, self._blobs, c) for c in claims]
