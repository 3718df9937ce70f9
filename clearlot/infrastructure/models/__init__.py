"""ORM models used by the application infrastructure."""

from .account import AccountModel
from .invoice_template import InvoiceTemplateModel
from .notification import NotificationModel
from .offer import OfferModel
from .purchase import PurchaseModel
from .watchlist import WatchlistModel

__all__ = [
    "AccountModel",
    "InvoiceTemplateModel",
    "NotificationModel",
    "OfferModel",
    "PurchaseModel",
    "WatchlistModel",
]
