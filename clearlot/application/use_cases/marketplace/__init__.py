"""Use cases for buying, following and administering marketplace records."""

from .add_to_watchlist import add_to_watchlist
from .place_purchase import DEFAULT_PLATFORM_FEE_RATE, place_purchase
from .update_account_status import update_account_status, update_verification_status
from .update_offer_price import update_offer_price
from .update_purchase_status import update_purchase_status

__all__ = [
    "DEFAULT_PLATFORM_FEE_RATE",
    "add_to_watchlist",
    "place_purchase",
    "update_account_status",
    "update_offer_price",
    "update_purchase_status",
    "update_verification_status",
]
