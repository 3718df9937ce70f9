"""Use case for buying part of an offer against a bank transfer receipt."""

from __future__ import annotations

import logging

import anyio
from sqlalchemy.orm import Session

from clearlot.application.use_cases.notifications import (
    notify_order_status_changed,
    notify_payment_receipt_uploaded,
)
from clearlot.domain.entities import PURCHASE_STATUS_PENDING, Account, Purchase
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

DEFAULT_PLATFORM_FEE_RATE = 0.03


async def place_purchase(
    session: Session,
    store: NotificationStore,
    bus: NotificationEventBus,
    triggers: NotificationTriggers,
    *,
    buyer: Account,
    offer_id: str,
    quantity: int,
    receipt_url: str,
    fee_rate: float = DEFAULT_PLATFORM_FEE_RATE,
) -> Purchase:
    """Record a pending purchase and tell everybody involved.

    The buyer pays the subtotal plus the platform fee. The purchase stays
    ``pending`` until an administrator reviewed the uploaded receipt.

    Raises:
        ValueError: If the offer is unknown, not for sale, the buyer's own,
            or does not hold ``quantity`` units.
    """

    if quantity <= 0:
        raise ValueError("Quantity must be greater than zero")
    if not receipt_url.strip():
        raise ValueError("A payment receipt is required")

    def _create():
        offers = OfferRepository(session)
        offer = offers.get(offer_id)
        if offer is None:
            raise ValueError(f"Offer with id {offer_id} not found")
        if offer.supplier_id == buyer.id:
            raise ValueError("You cannot purchase your own offer")
        if offers.reserve_quantity(offer_id, quantity) is None:
            raise ValueError("Offer is not available in the requested quantity")

        subtotal = round(offer.current_price * quantity, 2)
        platform_fee = round(subtotal * fee_rate, 2)
        final_amount = round(subtotal + platform_fee, 2)
        submitted_at = now_in_app_timezone().isoformat()
        purchase = PurchaseRepository(session).create(
            Purchase(
                id=None,
                offer_id=offer.id,
                buyer_id=buyer.id,
                seller_id=offer.supplier_id,
                quantity=quantity,
                unit_price=offer.current_price,
                total_amount=subtotal,
                platform_fee=platform_fee,
                final_amount=final_amount,
                status=PURCHASE_STATUS_PENDING,
                payment_details={
                    "method": "bank-transfer",
                    "receiptUrl": receipt_url.strip(),
                    "amount": final_amount,
                    "status": "pending",
                    "approvalStatus": "pending",
                    "timestamp": submitted_at,
                },
            )
        )
        admins = AccountRepository(session).list_admins()
        return offer, purchase, admins

    offer, purchase, admins = await anyio.to_thread.run_sync(_create)
    logger.info(
        "Purchase %s of %s x %s placed by %s", purchase.id, quantity, offer.id, buyer.id
    )

    # Claim the new order so the seller's watcher sweep does not announce it again.
    claimed = await anyio.to_thread.run_sync(
        PurchaseRepository(session).acknowledge_status, purchase.id, None
    )
    if claimed:
        await notify_order_status_changed(
            store,
            bus,
            purchase,
            offer_title=offer.title,
            previous_status=None,
            buyer_company=buyer.company,
        )
    await notify_payment_receipt_uploaded(store, bus, purchase, admins)
    await triggers.purchase_success(
        buyer.id, offer.title, purchase.final_amount, offer.id, purchase.id
    )
    return purchase
