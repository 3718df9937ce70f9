"""Utility helpers to generate and dispatch domain notifications.

Each helper persists the notification through the durable store first and
then publishes the stored record (with its id) on the event bus, so sessions
that receive it never write it a second time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from clearlot.domain.entities import (
    PURCHASE_STATUS_PENDING,
    Account,
    Notification,
    Offer,
    Purchase,
)
from clearlot.infrastructure.notifications import (
    NotificationEventBus,
    NotificationStore,
    NotificationStoreError,
)
from clearlot.infrastructure.notifications.triggers import (
    build_account_status_change,
    build_delivery_escalation,
    build_delivery_reminder,
    build_offer_purchased,
    build_offer_sales_status_change,
    build_order_status_change,
    build_payment_receipt_uploaded,
    build_price_drop,
    build_verification_review,
    build_verification_status_change,
)
from clearlot.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

SELLER_NOTIFIED_STATUSES = frozenset({"approved", "shipped", "delivered", "completed"})
DEFAULT_PRICE_DROP_THRESHOLD = 0.05
UNKNOWN_BUYER = "Unknown Buyer"


async def publish_notification(
    store: NotificationStore,
    bus: NotificationEventBus,
    notification: Notification,
) -> Notification | None:
    """Persist ``notification`` and announce the stored record on ``bus``."""

    try:
        notification_id = await store.add_notification(notification)
    except NotificationStoreError:
        logger.exception(
            "Could not store %s notification for %s", notification.type, notification.user_id
        )
        return None
    try:
        saved = await store.get_notification(notification_id)
    except NotificationStoreError:
        logger.warning("Could not read back notification %s", notification_id, exc_info=True)
        saved = None
    if saved is None:
        saved = replace(notification, id=notification_id, created_at=now_in_app_timezone())
    bus.trigger(saved)
    return saved


async def _publish_all(
    store: NotificationStore,
    bus: NotificationEventBus,
    notifications: Iterable[Notification],
) -> list[Notification]:
    sent: list[Notification] = []
    for notification in notifications:
        saved = await publish_notification(store, bus, notification)
        if saved is not None:
            sent.append(saved)
    return sent


async def notify_order_status_changed(
    store: NotificationStore,
    bus: NotificationEventBus,
    purchase: Purchase,
    *,
    offer_title: str,
    previous_status: str | None,
    buyer_company: str | None = None,
) -> list[Notification]:
    """Tell the buyer and, where relevant, the seller about a status change.

    A purchase seen for the first time (``previous_status`` is ``None``) while
    still pending is a new order and also produces an ``offer_purchased``
    notification for the seller.
    """

    status = purchase.status
    if status == previous_status:
        return []

    pending: list[Notification] = []
    if purchase.buyer_id:
        pending.append(
            build_order_status_change(
                purchase.buyer_id, offer_title, status, purchase.id, purchase.offer_id
            )
        )
    if purchase.seller_id and status in SELLER_NOTIFIED_STATUSES:
        pending.append(
            build_offer_sales_status_change(
                purchase.seller_id,
                offer_title,
                status,
                purchase.id,
                purchase.offer_id,
                buyer_company,
            )
        )
    if purchase.seller_id and status == PURCHASE_STATUS_PENDING and previous_status is None:
        pending.append(
            build_offer_purchased(
                purchase.seller_id,
                offer_title,
                buyer_company or UNKNOWN_BUYER,
                purchase.final_amount,
                purchase.offer_id,
                purchase.id,
            )
        )

    sent = await _publish_all(store, bus, pending)
    logger.info(
        "Order status change %s -> %s for purchase %s produced %s notifications",
        previous_status,
        status,
        purchase.id,
        len(sent),
    )
    return sent


def price_drop_ratio(previous_price: float | None, current_price: float) -> float:
    """Return the relative drop from ``previous_price`` (0 when it did not drop)."""

    if not previous_price or previous_price <= current_price:
        return 0.0
    return (previous_price - current_price) / previous_price


async def check_offer_price_drop(
    store: NotificationStore,
    bus: NotificationEventBus,
    offer: Offer,
    watcher_ids: Iterable[str],
    *,
    threshold: float = DEFAULT_PRICE_DROP_THRESHOLD,
) -> list[Notification]:
    """Notify every watchlist user when ``offer`` dropped by ``threshold`` or more."""

    ratio = price_drop_ratio(offer.previous_price, offer.current_price)
    if ratio <= 0 or ratio < threshold:
        return []

    percentage = round(ratio * 100)
    recipients = dict.fromkeys(user_id for user_id in watcher_ids if user_id)
    return await _publish_all(
        store,
        bus,
        (
            build_price_drop(
                user_id,
                offer.title,
                percentage,
                offer.id,
                float(offer.previous_price or 0),
                float(offer.current_price),
            )
            for user_id in recipients
        ),
    )


async def notify_account_status_changed(
    store: NotificationStore, bus: NotificationEventBus, account: Account
) -> Notification | None:
    return await publish_notification(
        store, bus, build_account_status_change(account.id, account.status)
    )


async def notify_verification_status_changed(
    store: NotificationStore, bus: NotificationEventBus, account: Account
) -> Notification | None:
    return await publish_notification(
        store, bus, build_verification_status_change(account.id, account.verification_status)
    )


async def notify_verification_reviewed(
    store: NotificationStore,
    bus: NotificationEventBus,
    account: Account,
    *,
    approved: bool,
    reason: str | None = None,
) -> Notification | None:
    return await publish_notification(
        store, bus, build_verification_review(account.id, account.company, approved, reason)
    )


async def notify_payment_receipt_uploaded(
    store: NotificationStore,
    bus: NotificationEventBus,
    purchase: Purchase,
    admins: Iterable[Account],
) -> list[Notification]:
    """Ask every administrator to review the receipt attached to ``purchase``."""

    return await _publish_all(
        store,
        bus,
        (
            build_payment_receipt_uploaded(
                admin.id, purchase.id, purchase.offer_id, purchase.buyer_id, purchase.final_amount
            )
            for admin in admins
        ),
    )


async def notify_delivery_reminder(
    store: NotificationStore,
    bus: NotificationEventBus,
    purchase: Purchase,
    *,
    offer_title: str,
    reminder_count: int,
) -> Notification | None:
    return await publish_notification(
        store,
        bus,
        build_delivery_reminder(purchase.buyer_id, offer_title, purchase.id, reminder_count),
    )


async def notify_delivery_escalation(
    store: NotificationStore,
    bus: NotificationEventBus,
    purchase: Purchase,
    admins: Iterable[Account],
    *,
    offer_title: str,
    buyer_company: str,
    seller_company: str,
) -> list[Notification]:
    """Tell every administrator that the buyer never confirmed the delivery."""

    sent = await _publish_all(
        store,
        bus,
        (
            build_delivery_escalation(
                admin.id,
                offer_title,
                purchase.id,
                buyer_company,
                seller_company,
                purchase.shipped_at,
                purchase.reminder_count,
            )
            for admin in admins
        ),
    )
    logger.info(
        "Unconfirmed delivery of purchase %s escalated to %s administrators",
        purchase.id,
        len(sent),
    )
    return sent


__all__ = [
    "DEFAULT_PRICE_DROP_THRESHOLD",
    "SELLER_NOTIFIED_STATUSES",
    "UNKNOWN_BUYER",
    "check_offer_price_drop",
    "notify_account_status_changed",
    "notify_delivery_escalation",
    "notify_delivery_reminder",
    "notify_order_status_changed",
    "notify_payment_receipt_uploaded",
    "notify_verification_reviewed",
    "notify_verification_status_changed",
    "price_drop_ratio",
    "publish_notification",
]
