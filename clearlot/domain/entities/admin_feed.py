"""Domain entities listed on the administrator notification feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Final

REVIEW_PENDING: Final[str] = "pending"
REVIEW_APPROVED: Final[str] = "approved"
REVIEW_REJECTED: Final[str] = "rejected"


@dataclass
class PaymentReceiptAlert:
    """Uploaded payment receipt waiting for an administrator decision."""

    purchase_id: str
    buyer_id: str
    buyer_company: str
    amount: float
    platform_fee: float
    final_amount: float
    receipt_url: str
    status: str = REVIEW_PENDING
    submitted_at: datetime | None = None


@dataclass
class OfferUploadAlert:
    """Offer listed by a seller that has not been approved yet."""

    offer_id: str
    seller_id: str
    seller_company: str
    title: str
    status: str = REVIEW_PENDING
    submitted_at: datetime | None = None


@dataclass
class VerificationDocumentAlert:
    """Company verification document uploaded by an account."""

    id: str
    user_id: str
    user_company: str
    document_type: str
    document_url: str
    status: str = REVIEW_PENDING
    verification_status: str = REVIEW_PENDING
    submitted_at: datetime | None = None


@dataclass
class AdminFeed:
    """Everything an administrator has to act on, plus their unread count."""

    payment_receipts: list[PaymentReceiptAlert] = field(default_factory=list)
    offer_uploads: list[OfferUploadAlert] = field(default_factory=list)
    verification_documents: list[VerificationDocumentAlert] = field(default_factory=list)
    unread_count: int = 0

    @property
    def pending_count(self) -> int:
        items = [*self.payment_receipts, *self.offer_uploads, *self.verification_documents]
        return sum(1 for item in items if item.status == REVIEW_PENDING)


__all__ = [
    "REVIEW_APPROVED",
    "REVIEW_PENDING",
    "REVIEW_REJECTED",
    "AdminFeed",
    "OfferUploadAlert",
    "PaymentReceiptAlert",
    "VerificationDocumentAlert",
]
