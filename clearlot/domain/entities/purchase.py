"""Domain entity representing a purchase of an offer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Final

from .account import Account
from .offer import Offer

PURCHASE_STATUS_PENDING: Final[str] = "pending"
PURCHASE_STATUS_APPROVED: Final[str] = "approved"
PURCHASE_STATUS_REJECTED: Final[str] = "rejected"
PURCHASE_STATUS_SHIPPED: Final[str] = "shipped"
PURCHASE_STATUS_DELIVERED: Final[str] = "delivered"
PURCHASE_STATUS_COMPLETED: Final[str] = "completed"

PURCHASE_STATUSES: Final[tuple[str, ...]] = (
    PURCHASE_STATUS_PENDING,
    PURCHASE_STATUS_APPROVED,
    PURCHASE_STATUS_REJECTED,
    PURCHASE_STATUS_SHIPPED,
    PURCHASE_STATUS_DELIVERED,
    PURCHASE_STATUS_COMPLETED,
)


@dataclass
class Purchase:
    """Order placed by a buyer for a seller's offer."""

    id: str | None
    offer_id: str
    buyer_id: str
    seller_id: str
    quantity: int
    unit_price: float
    total_amount: float
    platform_fee: float
    final_amount: float
    status: str = PURCHASE_STATUS_PENDING
    previous_status: str | None = None
    purchase_date: datetime | None = None
    payment_method: str = "bank-transfer"
    payment_details: dict[str, Any] | None = None
    delivery_details: dict[str, Any] | None = None
    shipped_at: datetime | None = None
    reminder_count: int = 0
    last_reminder_at: datetime | None = None
    admin_notified: bool = False

    @property
    def receipt_url(self) -> str | None:
        details = self.payment_details or {}
        return details.get("receiptUrl") or None


@dataclass
class EnrichedPurchase:
    """Purchase augmented with its related offer, buyer and seller records."""

    purchase: Purchase
    offer: Offer | None = None
    buyer: Account | None = None
    seller: Account | None = None
    extra: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "PURCHASE_STATUSES",
    "PURCHASE_STATUS_APPROVED",
    "PURCHASE_STATUS_COMPLETED",
    "PURCHASE_STATUS_DELIVERED",
    "PURCHASE_STATUS_PENDING",
    "PURCHASE_STATUS_REJECTED",
    "PURCHASE_STATUS_SHIPPED",
    "EnrichedPurchase",
    "Purchase",
]
