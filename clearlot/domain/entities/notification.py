"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Final

NOTIFICATION_TYPES: Final[tuple[str, ...]] = (
    "purchase",
    "sale",
    "payment",
    "offer",
    "system",
    "watchlist",
    "order_status",
    "price_drop",
    "offer_purchased",
    "account_status",
    "verification_status",
    "offer_sales_status",
    "payment_approved",
    "report",
    "message",
    "delivery_reminder",
)

NOTIFICATION_PRIORITIES: Final[tuple[str, ...]] = ("low", "medium", "high")

# Correlation keys compared by the duplicate check.
CORRELATION_KEYS: Final[tuple[str, ...]] = ("offerId", "purchaseId", "status")


def validate_notification_type(value: str) -> str:
    """Return ``value`` when it is a known notification type."""

    if value not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type: {value!r}")
    return value


def validate_priority(value: str) -> str:
    """Return ``value`` when it is a known priority."""

    if value not in NOTIFICATION_PRIORITIES:
        raise ValueError(f"Unknown notification priority: {value!r}")
    return value


@dataclass
class Notification:
    """Information message delivered to a specific user.

    ``id`` and ``created_at`` are ``None`` for a freshly triggered payload that
    has not reached the durable store yet.
    """

    user_id: str
    type: str
    title: str
    message: str
    is_read: bool = False
    priority: str = "medium"
    data: dict[str, Any] = field(default_factory=dict)
    id: str | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        validate_notification_type(self.type)
        validate_priority(self.priority)
        if self.data is None:
            self.data = {}

    @property
    def is_persisted(self) -> bool:
        return bool(self.id)

    def correlation(self) -> tuple[Any, ...]:
        """Return the correlation fields used to detect duplicates."""

        return tuple(self.data.get(key) for key in CORRELATION_KEYS)

    def content_key(self) -> tuple[str, str, str]:
        return (self.type, self.title, self.message)

    def mark_read(self) -> "Notification":
        """Return a copy flagged as read."""

        return replace(self, is_read=True, data=dict(self.data))


__all__ = [
    "CORRELATION_KEYS",
    "NOTIFICATION_PRIORITIES",
    "NOTIFICATION_TYPES",
    "Notification",
    "validate_notification_type",
    "validate_priority",
]
