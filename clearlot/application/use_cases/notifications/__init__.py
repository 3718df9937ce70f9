"""Notification aggregation and domain notification helpers."""

from .aggregator import DEFAULT_DEDUP_WINDOW, NotificationAggregator, synthesize_notification_id
from .events import (
    check_offer_price_drop,
    notify_account_status_changed,
    notify_delivery_escalation,
    notify_delivery_reminder,
    notify_order_status_changed,
    notify_payment_receipt_uploaded,
    notify_verification_reviewed,
    notify_verification_status_changed,
    price_drop_ratio,
    publish_notification,
)
from .watchers import DeliveryReminderWatcher, OrderStatusWatcher, PriceWatcher

__all__ = [
    "DEFAULT_DEDUP_WINDOW",
    "NotificationAggregator",
    "synthesize_notification_id",
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
    "DeliveryReminderWatcher",
    "OrderStatusWatcher",
    "PriceWatcher",
]
