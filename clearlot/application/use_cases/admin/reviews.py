"""Administrator decisions on receipts, offers and company verification."""

from __future__ import annotations

import logging

import anyio
from sqlalchemy.orm import Session

from clearlot.application.use_cases.marketplace import update_purchase_status
from clearlot.application.use_cases.notifications import notify_verification_reviewed
from clearlot.domain.entities import (
    OFFER_STATUS_ACTIVE,
    OFFER_STATUS_PENDING,
    OFFER_STATUS_REJECTED,
    PURCHASE_STATUS_APPROVED,
    PURCHASE_STATUS_PENDING,
    PURCHASE_STATUS_REJECTED,
    REVIEW_APPROVED,
    REVIEW_REJECTED,
    Account,
    Offer,
    Purchase,
)
from clearlot.infrastructure.notifications import (
    NotificationEventBus,
    NotificationStore,
    NotificationTriggers,
)
from clearlot.infrastructure.repositories import (
    AccountRepository,
    OfferRepository,
    PurchaseRepository,
)
from clearlot.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

DEFAULT_RECEIPT_REJECTION_REASON = "Payment receipt rejected by admin"
DEFAULT_OFFER_REJECTION_REASON = "Offer rejected by admin"


async def review_payment_receipt(
    session: Session,
    store: NotificationStore,
    bus: NotificationEventBus,
    triggers: NotificationTriggers,
    *,
    purchase_id: str,
    approved: bool,
    reason: str | None = None,
) -> Purchase:
    """Approve or reject the receipt of a pending purchase.

    The purchase follows the decision, which notifies buyer and seller. An
    approved receipt also tells the seller that the money arrived.

    Raises:
        ValueError: If the purchase does not exist or is no longer pending.
    """

    decided_at = now_in_app_timezone().isoformat()
    if approved:
        changes = {"approvalStatus": REVIEW_APPROVED, "approvedAt": decided_at}
    else:
        changes = {
            "approvalStatus": REVIEW_REJECTED,
            "rejectedAt": decided_at,
            "rejectionReason": reason or DEFAULT_RECEIPT_REJECTION_REASON,
        }

    def _record():
        purchases = PurchaseRepository(session)
        purchase = purchases.get(purchase_id)
        if purchase is None:
            raise ValueError(f"Purchase with id {purchase_id} not found")
        if purchase.status != PURCHASE_STATUS_PENDING:
            raise ValueError("Only pending purchases can be reviewed")
        purchases.update_payment_details(purchase_id, changes)
        return OfferRepository(session).get(purchase.offer_id)

    offer = await anyio.to_thread.run_sync(_record)
    purchase, _ = await update_purchase_status(
        session,
        store,
        bus,
        purchase_id=purchase_id,
        status=PURCHASE_STATUS_APPROVED if approved else PURCHASE_STATUS_REJECTED,
    )
    logger.info(
        "Payment receipt of purchase %s %s", purchase_id, "approved" if approved else "rejected"
    )
    if approved:
        await triggers.payment_received(
            purchase.seller_id,
            purchase.total_amount,
            offer.title if offer else "Unknown Offer",
        )
    return purchase


async def review_offer(
    session: Session,
    *,
    offer_id: str,
    approved: bool,
    reason: str | None = None,
) -> Offer:
    """Publish a pending offer or reject it with ``reason``."""

    def _review():
        offers = OfferRepository(session)
        offer = offers.get(offer_id)
        if offer is None:
            raise ValueError(f"Offer with id {offer_id} not found")
        if offer.status != OFFER_STATUS_PENDING:
            raise ValueError("Only pending offers can be reviewed")
        if approved:
            return offers.review(offer_id, OFFER_STATUS_ACTIVE)
        return offers.review(
            offer_id,
            OFFER_STATUS_REJECTED,
            rejection_reason=reason or DEFAULT_OFFER_REJECTION_REASON,
        )

    offer = await anyio.to_thread.run_sync(_review)
    logger.info("Offer %s reviewed, now %s", offer_id, offer.status)
    return offer


async def review_verification(
    session: Session,
    store: NotificationStore,
    bus: NotificationEventBus,
    *,
    account_id: str,
    approved: bool,
    reason: str | None = None,
) -> Account:
    """Approve or reject the verification documents of an account."""

    def _review():
        return AccountRepository(session).update_status(
            account_id,
            verification_status=REVIEW_APPROVED if approved else REVIEW_REJECTED,
            verification_notes=None if approved else reason,
        )

    account = await anyio.to_thread.run_sync(_review)
    await notify_verification_reviewed(
        store, bus, account, approved=approved, reason=None if approved else reason
    )
    return account
