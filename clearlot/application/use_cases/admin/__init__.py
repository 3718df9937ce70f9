"""Use cases behind the administrator notification area."""

from .broadcast import broadcast_system_message
from .feed import load_admin_feed
from .reviews import (
    DEFAULT_OFFER_REJECTION_REASON,
    DEFAULT_RECEIPT_REJECTION_REASON,
    review_offer,
    review_payment_receipt,
    review_verification,
)

__all__ = [
    "DEFAULT_OFFER_REJECTION_REASON",
    "DEFAULT_RECEIPT_REJECTION_REASON",
    "broadcast_system_message",
    "load_admin_feed",
    "review_offer",
    "review_payment_receipt",
    "review_verification",
]
