"""Reviewer actions on submitted claims."""

from __future__ import annotations

from typing import Optional

from claims_portal.database import Database
from claims_portal.exceptions import ValidationError
from claims_portal.logging_config import get_logger
from claims_portal.modules.claims.models import ClaimStatus, ClaimView
from claims_portal.modules.claims.query import build_claim_view
from claims_portal.modules.claims.repository import ClaimRepository
from claims_portal.modules.storage import BlobStore

logger = get_logger(__name__)


def parse_status(status: str) -> ClaimStatus:
    """Map a free-form status string onto ``ClaimStatus``.

    Raises:
        ValidationError: If the value is not one of pending/approved/rejected.
    """
    try:
        return ClaimStatus((status or "").strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in ClaimStatus)
        raise ValidationError(
            f"Invalid status {status!r}; expected one of: {allowed}",
            details={"status": status},
        ) from None


class ClaimReviewService:
    """Sets the review outcome (status and response text) of a claim."""

    def __init__(self, database: Database, blobs: BlobStore) -> None:
        self._database = database
        self._blobs = blobs

    async def review(self, claim_id: int, status: str, response: Optional[str] = None) -> ClaimView:
        """Overwrite a claim's status and response.

        Any number of reviews may be applied; only the latest is kept.

        Raises:
            ValidationError: If ``status`` is not a known claim status.
            NotFound: If no claim has this id.
        """
        new_status = parse_status(status)
        async with self._database.session() as session:
            repo = ClaimRepository(session)
            claim = await repo.update_status(claim_id, new_status.value, response or "")
            view = await build_claim_view(repo, self._blobs, claim)

        logger.info("claim_reviewed", claim_id=claim_id, status=new_status.value)
        return view
