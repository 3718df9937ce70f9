"""Utility helpers to push notification messages to websocket subscribers."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

from anyio import from_thread
from fastapi import WebSocket

from clearlot.domain.entities import Notification

from .manager import NotificationConnectionManager


class NotificationPublisher:
    """Schedule websocket messages for delivery from sync or async code."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    def dispatch(
        self,
        user_id: str,
        message: dict[str, Any],
        *,
        connection: WebSocket | None = None,
    ) -> None:
        """Schedule ``message`` for ``connection`` or every socket of ``user_id``."""

        if not user_id:
            return
        if connection is None:
            send, args = self._manager.send_to_user, (user_id, dict(message))
        else:
            send, args = self._manager.send, (user_id, connection, dict(message))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            from_thread.start_soon(send, *args)
        else:
            loop.create_task(send(*args))


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket/JSON representation for ``notification``."""

    return {
        "id": notification.id,
        "userId": notification.user_id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "isRead": notification.is_read,
        "priority": notification.priority,
        "data": dict(notification.data or {}),
        "createdAt": notification.created_at.isoformat()
        if notification.created_at
        else None,
    }


def serialize_notifications(notifications: Iterable[Notification]) -> list[dict[str, Any]]:
    return [serialize_notification(notification) for notification in notifications]


__all__ = ["NotificationPublisher", "serialize_notification", "serialize_notifications"]
