"""Domain entity representing a clearance offer."""

from dataclasses import dataclass
from datetime import datetime
from typing import Final

OFFER_STATUS_PENDING: Final[str] = "pending"
OFFER_STATUS_ACTIVE: Final[str] = "active"
OFFER_STATUS_REJECTED: Final[str] = "rejected"
OFFER_STATUS_SOLD: Final[str] = "sold"


@dataclass
class Offer:
    """Surplus lot listed by a supplier."""

    id: str | None
    offer_code: str
    title: str
    supplier_id: str
    current_price: float
    original_price: float
    quantity: int
    unit: str = "pcs"
    description: str = ""
    category: str = ""
    location: str = ""
    previous_price: float | None = None
    status: str = OFFER_STATUS_ACTIVE
    created_at: datetime | None = None
    rejection_reason: str | None = None


__all__ = [
    "OFFER_STATUS_ACTIVE",
    "OFFER_STATUS_PENDING",
    "OFFER_STATUS_REJECTED",
    "OFFER_STATUS_SOLD",
    "Offer",
]
