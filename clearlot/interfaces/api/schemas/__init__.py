"""Pydantic schemas for the HTTP interface."""

from .admin_feed import (
    AdminFeedRead,
    BroadcastResponse,
    OfferUploadAlertRead,
    PaymentReceiptAlertRead,
    ReviewDecision,
    SystemMessageCreate,
    VerificationDocumentAlertRead,
)
from .auth import Token
from .invoice import (
    EnrichedPurchaseRead,
    InvoiceSettingsSchema,
    InvoiceTemplateCreate,
    InvoiceTemplateRead,
    InvoiceTemplateUpdate,
)
from .marketplace import (
    AccountRead,
    AccountStatusUpdate,
    OfferPriceResponse,
    OfferPriceUpdate,
    OfferRead,
    PurchaseCreate,
    PurchaseRead,
    PurchaseStatusResponse,
    PurchaseStatusUpdate,
    VerificationDocumentsSubmit,
    VerificationStatusUpdate,
    WatchlistEntryRead,
)
from .notification import CleanupResponse, NotificationRead, UnreadCountResponse

__all__ = [
    "AdminFeedRead",
    "BroadcastResponse",
    "OfferUploadAlertRead",
    "PaymentReceiptAlertRead",
    "ReviewDecision",
    "SystemMessageCreate",
    "VerificationDocumentAlertRead",
    "Token",
    "EnrichedPurchaseRead",
    "InvoiceSettingsSchema",
    "InvoiceTemplateCreate",
    "InvoiceTemplateRead",
    "InvoiceTemplateUpdate",
    "AccountRead",
    "AccountStatusUpdate",
    "OfferPriceResponse",
    "OfferPriceUpdate",
    "OfferRead",
    "PurchaseCreate",
    "PurchaseRead",
    "PurchaseStatusResponse",
    "PurchaseStatusUpdate",
    "VerificationDocumentsSubmit",
    "VerificationStatusUpdate",
    "WatchlistEntryRead",
    "CleanupResponse",
    "NotificationRead",
    "UnreadCountResponse",
]
