"""Repository implementations for infrastructure layer."""

from .account_repository import AccountRepository
from .invoice_template_repository import InvoiceTemplateRepository
from .notification_repository import NotificationRepository
from .offer_repository import OfferRepository
from .purchase_repository import PurchaseRepository
from .watchlist_repository import WatchlistRepository

__all__ = [
    "AccountRepository",
    "InvoiceTemplateRepository",
    "NotificationRepository",
    "OfferRepository",
    "PurchaseRepository",
    "WatchlistRepository",
]
