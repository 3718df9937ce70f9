"""Realtime notification helpers for the infrastructure layer."""

from .desktop import DesktopNotifier, WebsocketDesktopNotifier
from .event_bus import NotificationCallback, NotificationEventBus
from .manager import NotificationConnectionManager
from .publisher import (
    NotificationPublisher,
    serialize_notification,
    serialize_notifications,
)
from .store import (
    LiveFeedCallback,
    NotificationNotFoundError,
    NotificationStore,
    NotificationStoreError,
    SqlNotificationStore,
)
from .triggers import NotificationTriggers

__all__ = [
    "DesktopNotifier",
    "WebsocketDesktopNotifier",
    "NotificationCallback",
    "NotificationEventBus",
    "NotificationConnectionManager",
    "NotificationPublisher",
    "serialize_notification",
    "serialize_notifications",
    "LiveFeedCallback",
    "NotificationNotFoundError",
    "NotificationStore",
    "NotificationStoreError",
    "SqlNotificationStore",
    "NotificationTriggers",
]
