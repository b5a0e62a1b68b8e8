"""Expense claims: submission, review and lookup."""

from claims_portal.modules.claims.models import (
    AttachmentUpload,
    AttachmentView,
    Claim,
    ClaimAttachment,
    ClaimStatus,
    ClaimSubmission,
    ClaimView,
)
from claims_portal.modules.claims.query import ClaimQueryService
from claims_portal.modules.claims.repository import ClaimRepository
from claims_portal.modules.claims.review import ClaimReviewService
from claims_portal.modules.claims.submission import ClaimSubmissionService

__all__ = [
    "AttachmentUpload",
    "AttachmentView",
    "Claim",
    "ClaimAttachment",
    "ClaimQueryService",
    "ClaimRepository",
    "ClaimReviewService",
    "ClaimStatus",
    "ClaimSubmission",
    "ClaimSubmissionService",
    "ClaimView",
]
