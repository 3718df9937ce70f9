"""Domain entities exposed by the application."""

from .account import ACCOUNT_STATUSES, VERIFICATION_DOCUMENT_TYPES, VERIFICATION_STATUSES, Account
from .admin_feed import (
    REVIEW_APPROVED,
    REVIEW_PENDING,
    REVIEW_REJECTED,
    AdminFeed,
    OfferUploadAlert,
    PaymentReceiptAlert,
    VerificationDocumentAlert,
)
from .invoice_template import (
    InvoiceCompany,
    InvoiceHeader,
    InvoiceSections,
    InvoiceSettings,
    InvoiceStyling,
    InvoiceTemplate,
    build_default_invoice_template,
)
from .notification import (
    NOTIFICATION_PRIORITIES,
    NOTIFICATION_TYPES,
    Notification,
)
from .offer import (
    OFFER_STATUS_ACTIVE,
    OFFER_STATUS_PENDING,
    OFFER_STATUS_REJECTED,
    OFFER_STATUS_SOLD,
    Offer,
)
from .purchase import (
    PURCHASE_STATUSES,
    PURCHASE_STATUS_APPROVED,
    PURCHASE_STATUS_COMPLETED,
    PURCHASE_STATUS_DELIVERED,
    PURCHASE_STATUS_PENDING,
    PURCHASE_STATUS_REJECTED,
    PURCHASE_STATUS_SHIPPED,
    EnrichedPurchase,
    Purchase,
)
from .watchlist import WatchlistEntry

__all__ = [
    "ACCOUNT_STATUSES",
    "VERIFICATION_DOCUMENT_TYPES",
    "VERIFICATION_STATUSES",
    "Account",
    "REVIEW_APPROVED",
    "REVIEW_PENDING",
    "REVIEW_REJECTED",
    "AdminFeed",
    "OfferUploadAlert",
    "PaymentReceiptAlert",
    "VerificationDocumentAlert",
    "InvoiceCompany",
    "InvoiceHeader",
    "InvoiceSections",
    "InvoiceSettings",
    "InvoiceStyling",
    "InvoiceTemplate",
    "build_default_invoice_template",
    "NOTIFICATION_PRIORITIES",
    "NOTIFICATION_TYPES",
    "Notification",
    "OFFER_STATUS_ACTIVE",
    "OFFER_STATUS_PENDING",
    "OFFER_STATUS_REJECTED",
    "OFFER_STATUS_SOLD",
    "Offer",
    "PURCHASE_STATUSES",
    "PURCHASE_STATUS_APPROVED",
    "PURCHASE_STATUS_COMPLETED",
    "PURCHASE_STATUS_DELIVERED",
    "PURCHASE_STATUS_PENDING",
    "PURCHASE_STATUS_REJECTED",
    "PURCHASE_STATUS_SHIPPED",
    "EnrichedPurchase",
    "Purchase",
    "WatchlistEntry",
]
