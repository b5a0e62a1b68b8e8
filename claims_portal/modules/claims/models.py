"""Database models and Pydantic schemas for expense claims."""

from __future__ import annotations

import datetime as dt
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import StrEnum
from typing import Any, BinaryIO, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import Column, Date, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from claims_portal.database import Base

EMPLOYEE_ID_PATTERN = re.compile(r"^ATS0(?!000)\d{3}$")

CENTS = Decimal("0.01")
MAX_AMOUNT = Decimal("100000000")  # Numeric(10, 2)
DAILY_LIMIT_CONSTRAINT = "uq_claims_employee_id"


def is_valid_employee_id(employee_id: str) -> bool:
    """Check an employee id against the ``ATS0`` + three digits format (``ATS0000`` excluded)."""
    return bool(EMPLOYEE_ID_PATTERN.fullmatch(employee_id or ""))


class ClaimStatus(StrEnum):
    """Claim review status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Claim(Base):
    """SQLAlchemy model for a reimbursement claim."""

    __tablename__ = "claims"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(String(7), nullable=False, index=True)
    employee_name = Column(String(30), nullable=False)
    title = Column(String(30), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    category = Column(String(50), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String(20), default=ClaimStatus.PENDING.value, nullable=False)
    response = Column(Text, default="", nullable=False)

    attachments = relationship(
        "ClaimAttachment",
        back_populates="claim",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ClaimAttachment.id",
    )

    # One claim per employee per day
    __table_args__ = (UniqueConstraint("employee_id", "date", name=DAILY_LIMIT_CONSTRAINT),)

    def __repr__(self) -> str:
        return (
            f"<Claim(id={self.id}, employee_id={self.employee_id}, "
            f"date={self.date}, status={self.status})>"
        )


class ClaimAttachment(Base):
    """Attachment metadata. The bytes live in the blob store under ``file_path``."""

    __tablename__ = "claim_attachments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    claim_id = Column(
        Integer,
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False)

    claim = relationship("Claim", back_populates="attachments")

    def __repr__(self) -> str:
        return (
            f"<ClaimAttachment(id={self.id}, claim_id={self.claim_id}, "
            f"file_name={self.file_name}, file_path={self.file_path})>"
        )


# =============================================================================
# Pydantic models for submission input and read output
# =============================================================================


class AttachmentUpload(BaseModel):
    """One uploaded file part, as handed over by the transport layer."""

    filename: str = Field(..., min_length=1, description="Original file name supplied by the uploader")
    stream: Any = Field(..., description="Readable binary stream of the file content")
    content_type: str = Field(default="application/octet-stream", description="Declared MIME type")

    @field_validator("stream")
    @classmethod
    def validate_stream(cls, v: Any) -> BinaryIO:
        if not callable(getattr(v, "read", None)):
            raise ValueError("attachment stream must be a readable binary file object")
        return v


class ClaimSubmission(BaseModel):
    """Validated claim submission request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    employee_id: str = Field(..., min_length=1, max_length=7, validation_alias=AliasChoices("employee_id", "employeeId"))
    employee_name: str = Field(..., min_length=1, max_length=30, validation_alias=AliasChoices("employee_name", "employeeName"))
    title: str = Field(..., min_length=1, max_length=30)
    amount: Decimal
    category: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1)
    attachments: list[AttachmentUpload] = Field(default_factory=list)

    @field_validator("employee_id")
    @classmethod
    def validate_employee_id(cls, v: str) -> str:
        if not is_valid_employee_id(v):
            raise ValueError("Invalid Employee ID format")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Decimal:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("amount is required")
        try:
            amount = Decimal(str(v).strip())
        except InvalidOperation as exc:
            raise ValueError(f"amount is not a number: {v!r}") from exc
        if not amount.is_finite() or amount <= 0:
            raise ValueError("amount must be greater than zero")
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
        if amount >= MAX_AMOUNT:
            raise ValueError(f"amount must be less than {MAX_AMOUNT}")
        return amount


class AttachmentView(BaseModel):
    """Attachment as exposed to readers."""

    name: str
    url: str
    size: int


class ClaimView(BaseModel):
    """A claim together with its resolved attachments."""

    id: int
    employee_id: str
    employee_name: str
    title: str
    date: dt.date
    amount: Decimal
    category: str
    description: str
    status: str
    response: str = ""
    attachments: list[AttachmentView] = Field(default_factory=list)

    @classmethod
    def from_record(cls, claim: Claim, attachments: Optional[list[AttachmentView]] = None) -> "ClaimView":
        return cls(
            id=claim.id,
            employee_id=claim.employee_id,
            employee_name=claim.employee_name,
            title=claim.title,
            date=claim.date,
            amount=Decimal(str(claim.amount)).quantize(CENTS),
            category=claim.category,
            description=claim.description,
            status=claim.status,
            response=claim.response or "",
            attachments=attachments or [],
        )
