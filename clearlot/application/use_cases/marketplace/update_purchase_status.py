"""Use case for moving a purchase through its lifecycle."""

from __future__ import annotations

from dataclasses import replace

import anyio
from sqlalchemy.orm import Session

from clearlot.application.use_cases.notifications import notify_order_status_changed
from clearlot.domain.entities import PURCHASE_STATUSES, Notification, Purchase
from clearlot.infrastructure.notifications import NotificationEventBus, NotificationStore
from clearlot.infrastructure.repositories import (
    AccountRepository,
    OfferRepository,
    PurchaseRepository,
)


async def update_purchase_status(
    session: Session,
    store: NotificationStore,
    bus: NotificationEventBus,
    *,
    purchase_id: str,
    status: str,
) -> tuple[Purchase, list[Notification]]:
    """Change the status of a purchase and notify buyer and seller.

    Raises:
        ValueError: If the status is unknown or the purchase does not exist.
    """

    if status not in PURCHASE_STATUSES:
        raise ValueError(f"Unknown purchase status: {status}")

    def _update():
        purchases = PurchaseRepository(session)
        purchase, previous_status = purchases.update_status(purchase_id, status)
        offer = OfferRepository(session).get(purchase.offer_id)
        buyer = AccountRepository(session).get(purchase.buyer_id)
        return purchase, previous_status, offer, buyer

    purchase, previous_status, offer, buyer = await anyio.to_thread.run_sync(_update)
    if previous_status == status:
        return purchase, []

    # Claim the change first so a watcher sweep cannot announce it as well.
    claimed = await anyio.to_thread.run_sync(
        PurchaseRepository(session).acknowledge_status, purchase.id, previous_status
    )
    if not claimed:
        return purchase, []

    sent = await notify_order_status_changed(
        store,
        bus,
        purchase,
        offer_title=offer.title if offer else "Unknown Offer",
        previous_status=previous_status,
        buyer_company=buyer.company if buyer else None,
    )
    return replace(purchase, previous_status=status), sent
