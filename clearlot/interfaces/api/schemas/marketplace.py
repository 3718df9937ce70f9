"""Schemas for the administrative marketplace endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from clearlot.domain.entities import Account, Offer, Purchase, WatchlistEntry

from .notification import NotificationRead

PurchaseStatus = Literal["pending", "approved", "rejected", "shipped", "delivered", "completed"]
AccountStatus = Literal["active", "inactive", "suspended", "pending", "pending_verification"]
VerificationStatus = Literal["approved", "rejected", "pending", "not_submitted"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PurchaseStatusUpdate(_CamelModel):
    status: PurchaseStatus


class OfferPriceUpdate(_CamelModel):
    price: float = Field(..., gt=0)


class AccountStatusUpdate(_CamelModel):
    status: AccountStatus


class VerificationStatusUpdate(_CamelModel):
    verification_status: VerificationStatus


class PurchaseRead(_CamelModel):
    id: str
    offer_id: str
    buyer_id: str
    seller_id: str
    status: str
    previous_status: str | None = None
    quantity: int = 0
    total_amount: float = 0.0
    platform_fee: float = 0.0
    final_amount: float
    purchase_date: datetime | None = None

    @classmethod
    def from_entity(cls, purchase: Purchase) -> "PurchaseRead":
        return cls(
            id=purchase.id,
            offer_id=purchase.offer_id,
            buyer_id=purchase.buyer_id,
            seller_id=purchase.seller_id,
            status=purchase.status,
            previous_status=purchase.previous_status,
            quantity=purchase.quantity,
            total_amount=purchase.total_amount,
            platform_fee=purchase.platform_fee,
            final_amount=purchase.final_amount,
            purchase_date=purchase.purchase_date,
        )


class OfferRead(_CamelModel):
    id: str
    offer_code: str
    title: str
    current_price: float
    previous_price: float | None = None
    original_price: float
    quantity: int = 0
    status: str = "active"
    rejection_reason: str | None = None

    @classmethod
    def from_entity(cls, offer: Offer) -> "OfferRead":
        return cls(
            id=offer.id,
            offer_code=offer.offer_code,
            title=offer.title,
            current_price=offer.current_price,
            previous_price=offer.previous_price,
            original_price=offer.original_price,
            quantity=offer.quantity,
            status=offer.status,
            rejection_reason=offer.rejection_reason,
        )


class AccountRead(_CamelModel):
    id: str
    email: str
    company: str
    name: str | None = None
    is_admin: bool
    status: str
    verification_status: str
    verification_notes: str | None = None

    @classmethod
    def from_entity(cls, account: Account) -> "AccountRead":
        return cls(
            id=account.id or "",
            email=account.email,
            company=account.company,
            name=account.name,
            is_admin=account.is_admin,
            status=account.status,
            verification_status=account.verification_status,
            verification_notes=account.verification_notes,
        )


class PurchaseStatusResponse(_CamelModel):
    purchase: PurchaseRead
    notifications: list[NotificationRead]


class OfferPriceResponse(_CamelModel):
    offer: OfferRead
    notifications: list[NotificationRead]


class PurchaseCreate(_CamelModel):
    offer_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    receipt_url: str = Field(..., min_length=1)


class WatchlistEntryRead(_CamelModel):
    id: str
    offer_id: str
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, entry: WatchlistEntry) -> "WatchlistEntryRead":
        return cls(id=entry.id, offer_id=entry.offer_id, created_at=entry.created_at)


class VerificationDocumentsSubmit(_CamelModel):
    documents: dict[str, str] = Field(..., min_length=1)


__all__ = [
    "AccountRead",
    "AccountStatus",
    "AccountStatusUpdate",
    "OfferPriceResponse",
    "OfferPriceUpdate",
    "OfferRead",
    "PurchaseCreate",
    "PurchaseRead",
    "PurchaseStatus",
    "PurchaseStatusResponse",
    "PurchaseStatusUpdate",
    "VerificationStatus",
    "VerificationDocumentsSubmit",
    "VerificationStatusUpdate",
    "WatchlistEntryRead",
]
