"""Schemas for the administrator notification area."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from clearlot.domain.entities import (
    AdminFeed,
    OfferUploadAlert,
    PaymentReceiptAlert,
    VerificationDocumentAlert,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReviewDecision(_CamelModel):
    reason: str | None = Field(default=None, max_length=500)


class SystemMessageCreate(_CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)


class BroadcastResponse(_CamelModel):
    recipients: int


class PaymentReceiptAlertRead(_CamelModel):
    purchase_id: str
    buyer_id: str
    buyer_company: str
    amount: float
    platform_fee: float
    final_amount: float
    receipt_url: str
    status: str
    submitted_at: datetime | None = None

    @classmethod
    def from_entity(cls, alert: PaymentReceiptAlert) -> "PaymentReceiptAlertRead":
        return cls(**vars(alert))


class OfferUploadAlertRead(_CamelModel):
    offer_id: str
    seller_id: str
    seller_company: str
    title: str
    status: str
    submitted_at: datetime | None = None

    @classmethod
    def from_entity(cls, alert: OfferUploadAlert) -> "OfferUploadAlertRead":
        return cls(**vars(alert))


class VerificationDocumentAlertRead(_CamelModel):
    id: str
    user_id: str
    user_company: str
    document_type: str
    document_url: str
    status: str
    verification_status: str
    submitted_at: datetime | None = None

    @classmethod
    def from_entity(cls, alert: VerificationDocumentAlert) -> "VerificationDocumentAlertRead":
        return cls(**vars(alert))


class AdminFeedRead(_CamelModel):
    payment_receipts: list[PaymentReceiptAlertRead]
    offer_uploads: list[OfferUploadAlertRead]
    verification_documents: list[VerificationDocumentAlertRead]
    unread_count: int
    pending_count: int

    @classmethod
    def from_entity(cls, feed: AdminFeed) -> "AdminFeedRead":
        return cls(
            payment_receipts=[
                PaymentReceiptAlertRead.from_entity(item) for item in feed.payment_receipts
            ],
            offer_uploads=[OfferUploadAlertRead.from_entity(item) for item in feed.offer_uploads],
            verification_documents=[
                VerificationDocumentAlertRead.from_entity(item)
                for item in feed.verification_documents
            ],
            unread_count=feed.unread_count,
            pending_count=feed.pending_count,
        )


__all__ = [
    "AdminFeedRead",
    "BroadcastResponse",
    "OfferUploadAlertRead",
    "PaymentReceiptAlertRead",
    "ReviewDecision",
    "SystemMessageCreate",
    "VerificationDocumentAlertRead",
]
