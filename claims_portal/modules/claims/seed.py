"""Demo claims loaded into an empty database."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from claims_portal.logging_config import get_logger
from claims_portal.modules.claims.models import Claim, ClaimStatus
from claims_portal.modules.claims.repository import ClaimRepository

logger = get_logger(__name__)

SAMPLE_CLAIMS: list[dict] = [
    {
        "employee_id": "ATS0123",
        "employee_name": "Veera",
        "title": "Travel Expense Reimbursement",
        "date": dt.date(2024, 5, 15),
        "amount": Decimal("37500.50"),
        "category": "Travel",
        "description": "Expenses for client meeting in Mumbai including flight, hotel, and meals.",
        "status": ClaimStatus.PENDING,
        "response": "",
    },
    {
        "employee_id": "ATS0456",
        "employee_name": "Raghava",
        "title": "Office Supplies Purchase",
        "date": dt.date(2024, 5, 10),
        "amount": Decimal("10450.30"),
        "category": "Office Supplies",
        "description": "Purchased notebooks, pens, and printer paper for the marketing department.",
        "status": ClaimStatus.APPROVED,
        "response": "Approved. Reimbursement will be processed in the next payroll cycle.",
    },
    {
        "employee_id": "ATS0124",
        "employee_name": "Pavan",
        "title": "Training Course Fee",
        "date": dt.date(2024, 5, 5),
        "amount": Decimal("62500.00"),
        "category": "Training",
        "description": "Fee for Advanced Project Management certification course.",
        "status": ClaimStatus.REJECTED,
        "response": "Rejected. This training was not pre-approved by your department manager.",
    },
    {
        "employee_id": "ATS0789",
        "employee_name": "Priya Sharma",
        "title": "Laptop Purchase",
        "date": dt.date(2024, 5, 18),
        "amount": Decimal("85000.00"),
        "category": "Equipment",
        "description": "New MacBook Pro for design team member",
        "status": ClaimStatus.PENDING,
        "response": "",
    },
    {
        "employee_id": "ATS0345",
        "employee_name": "Rahul Patel",
        "title": "Medical Checkup",
        "date": dt.date(2024, 5, 12),
        "amount": Decimal("5000.00"),
        "category": "Medical",
        "description": "Annual health checkup at Apollo Hospital",
        "status": ClaimStatus.APPROVED,
        "response": "Approved as per company health policy",
    },
]


async def seed_sample_claims(session: AsyncSession) -> int:
    """Insert the demo claims if the claims table is empty.

    Returns the number of claims inserted (0 when data already exists).
    """
    repo = ClaimRepository(session)
    if await repo.count_claims() > 0:
        return 0

    for data in SAMPLE_CLAIMS:
        session.add(Claim(**{**data, "status": data["status"].value}))
    await session.flush()
    logger.info("sample_claims_seeded", count=len(SAMPLE_CLAIMS))
    return len(SAMPLE_CLAIMS)
