"""Collect what an administrator still has to review."""

from __future__ import annotations

import anyio
from sqlalchemy.orm import Session

from clearlot.domain.entities import (
    OFFER_STATUS_PENDING,
    PURCHASE_STATUS_PENDING,
    REVIEW_APPROVED,
    REVIEW_PENDING,
    REVIEW_REJECTED,
    VERIFICATION_DOCUMENT_TYPES,
    Account,
    AdminFeed,
    OfferUploadAlert,
    PaymentReceiptAlert,
    VerificationDocumentAlert,
)
from clearlot.infrastructure.notifications import NotificationStore
from clearlot.infrastructure.repositories import (
    AccountRepository,
    OfferRepository,
    PurchaseRepository,
)
from clearlot.utils import parse_iso_datetime

UNKNOWN_COMPANY = "Unknown Company"

_VERIFICATION_REVIEW_STATUS = {
    "approved": REVIEW_APPROVED,
    "rejected": REVIEW_REJECTED,
}


def _company(accounts: dict[str, Account], account_id: str) -> str:
    account = accounts.get(account_id)
    return account.company if account and account.company else UNKNOWN_COMPANY


def _document_url(value) -> str | None:
    if isinstance(value, dict):
        value = value.get("url")
    return value or None


def _verification_alerts(account: Account) -> list[VerificationDocumentAlert]:
    documents = account.verification_documents or {}
    review_status = _VERIFICATION_REVIEW_STATUS.get(account.verification_status, REVIEW_PENDING)
    alerts = []
    for document_type in VERIFICATION_DOCUMENT_TYPES:
        url = _document_url(documents.get(document_type))
        if not url:
            continue
        alerts.append(
            VerificationDocumentAlert(
                id=f"{account.id}_{document_type}",
                user_id=account.id,
                user_company=account.company or UNKNOWN_COMPANY,
                document_type=document_type,
                document_url=url,
                status=review_status,
                verification_status=account.verification_status,
                submitted_at=account.verification_submitted_at,
            )
        )
    return alerts


async def load_admin_feed(
    session: Session,
    store: NotificationStore,
    admin_id: str,
    *,
    limit: int = 20,
) -> AdminFeed:
    """Return the pending receipts, offers and verification documents.

    Each list is ordered newest first and holds at most ``limit`` entries.
    """

    def _load():
        purchases = [
            purchase
            for purchase in PurchaseRepository(session).list_by_status(PURCHASE_STATUS_PENDING)
            if purchase.receipt_url
        ][:limit]
        offers = OfferRepository(session).list_by_status(OFFER_STATUS_PENDING, limit=limit)
        accounts_repo = AccountRepository(session)
        submitted = accounts_repo.list_with_verification_documents()
        companies = accounts_repo.get_map_by_ids(
            [purchase.buyer_id for purchase in purchases]
            + [offer.supplier_id for offer in offers]
        )
        return purchases, offers, submitted, companies

    purchases, offers, submitted, companies = await anyio.to_thread.run_sync(_load)

    receipts = []
    for purchase in purchases:
        details = purchase.payment_details or {}
        receipts.append(
            PaymentReceiptAlert(
                purchase_id=purchase.id,
                buyer_id=purchase.buyer_id,
                buyer_company=_company(companies, purchase.buyer_id),
                amount=purchase.total_amount,
                platform_fee=purchase.platform_fee,
                final_amount=purchase.final_amount,
                receipt_url=purchase.receipt_url,
                status=details.get("approvalStatus") or REVIEW_PENDING,
                submitted_at=parse_iso_datetime(details.get("timestamp"))
                or purchase.purchase_date,
            )
        )

    uploads = [
        OfferUploadAlert(
            offer_id=offer.id,
            seller_id=offer.supplier_id,
            seller_company=_company(companies, offer.supplier_id),
            title=offer.title,
            status=REVIEW_PENDING,
            submitted_at=offer.created_at,
        )
        for offer in offers
    ]

    documents = [alert for account in submitted for alert in _verification_alerts(account)]

    return AdminFeed(
        payment_receipts=receipts,
        offer_uploads=uploads,
        verification_documents=documents[:limit],
        unread_count=await store.get_unread_count(admin_id),
    )
