"""Claim repository: persistence for claims and their attachment metadata."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from claims_portal.exceptions import DuplicateSubmission, NotFound
from claims_portal.logging_config import get_logger
from claims_portal.modules.claims.models import (
    DAILY_LIMIT_CONSTRAINT,
    Claim,
    ClaimAttachment,
    ClaimStatus,
    ClaimSubmission,
)
from claims_portal.modules.storage import StoredBlob

logger = get_logger(__name__)


def violates_daily_limit(exc: IntegrityError) -> bool:
    """Tell whether an integrity error comes from the one-claim-per-day constraint.

    PostgreSQL and MySQL name the constraint in the message; SQLite lists
    the columns instead.
    """
    message = str(exc.orig)
    return DAILY_LIMIT_CONSTRAINT in message or "claims.employee_id, claims.date" in message


class ClaimRepository:
    """Reads and writes claims within one database session.

    The caller owns the session; ``begin``/``commit``/``rollback`` let it
    group a claim insert with its attachment inserts into one transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    # ── Transactions ─────────────────────────────────────────────────

    async def begin(self) -> None:
        """Start a transaction unless one is already open on the session."""
        if not self._session.in_transaction():
            await self._session.begin()

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    # ── Writes ───────────────────────────────────────────────────────

    async def has_claim_for(self, employee_id: str, claim_date: dt.date) -> bool:
        stmt = select(
            exists().where(Claim.employee_id == employee_id, Claim.date == claim_date)
        )
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def insert_claim(self, submission: ClaimSubmission, claim_date: dt.date) -> Claim:
        """Insert a new claim row in ``pending`` state with an empty response.

        Raises:
            DuplicateSubmission: If the (employee, date) uniqueness constraint fires.
            IntegrityError: For any other constraint violation.
        """
        claim = Claim(
            employee_id=submission.employee_id,
            employee_name=submission.employee_name,
            title=submission.title,
            date=claim_date,
            amount=submission.amount,
            category=submission.category,
            description=submission.description,
            status=ClaimStatus.PENDING.value,
            response="",
        )
        self._session.add(claim)
        try:
            await self._session.flush()  # Flush to get the ID assigned
        except IntegrityError as exc:
            if not violates_daily_limit(exc):
                raise
            raise DuplicateSubmission.for_day(submission.employee_id, claim_date) from exc

        logger.debug("claim_inserted", claim_id=claim.id, employee_id=claim.employee_id)
        return claim

    async def insert_attachment(self, claim_id: int, filename: str, blob: StoredBlob, mime_type: str) -> ClaimAttachment:
        attachment = ClaimAttachment(
            claim_id=claim_id,
            file_name=filename,
            file_path=blob.reference,
            file_size=blob.size,
            mime_type=mime_type,
        )
        self._session.add(attachment)
        await self._session.flush()
        return attachment

    async def update_status(self, claim_id: int, status: str, response: str) -> Claim:
        """Overwrite status and response of a claim.

        Raises:
            NotFound: If no claim has this id.
        """
        claim = await self.get_claim(claim_id)
        claim.status = status
        claim.response = response
        await self._session.flush()
        logger.info("claim_status_updated", claim_id=claim_id, status=status)
        return claim

    # ── Reads ────────────────────────────────────────────────────────

    async def get_claim(self, claim_id: int) -> Claim:
        result = await self._session.execute(select(Claim).where(Claim.id == claim_id))
        claim = result.scalar_one_or_none()
        if claim is None:
            raise NotFound.claim(claim_id)
        return claim

    async def list_claims(self, employee_id: Optional[str] = None) -> list[Claim]:
        """List claims, newest date first; optionally only one employee's."""
        stmt = select(Claim)
        if employee_id is not None:
            stmt = stmt.where(Claim.employee_id == employee_id)
        stmt = stmt.order_by(Claim.date.desc(), Claim.id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_attachments(self, claim_id: int) -> list[ClaimAttachment]:
        result = await self._session.execute(
            select(ClaimAttachment)
            .where(ClaimAttachment.claim_id == claim_id)
            .order_by(ClaimAttachment.id)
        )
        return list(result.scalars().all())

    async def count_claims(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(Claim))
        return int(result.scalar_one())
