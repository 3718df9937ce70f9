"""Desktop notification delivery for connected browser sessions."""

from __future__ import annotations

import logging
from typing import Protocol

from fastapi import WebSocket

from .publisher import NotificationPublisher

logger = logging.getLogger(__name__)

DESKTOP_NOTIFICATION_ICON = "/favicon.ico"


class DesktopNotifier(Protocol):
    """Host able to raise native desktop notifications."""

    def permission_granted(self) -> bool: ...

    def notify(self, title: str, body: str, tag: str) -> None: ...


class WebsocketDesktopNotifier:
    """Ask the browser tab behind ``connection`` to show a native notification.

    The browser owns the permission prompt; clients report the outcome with a
    ``desktop_permission`` websocket message which updates :attr:`granted`.
    """

    def __init__(
        self,
        publisher: NotificationPublisher,
        user_id: str,
        connection: WebSocket | None = None,
        *,
        enabled: bool = True,
        granted: bool = False,
    ) -> None:
        self._publisher = publisher
        self._user_id = user_id
        self._connection = connection
        self._enabled = enabled
        self.granted = granted

    def permission_granted(self) -> bool:
        return self._enabled and self.granted

    def notify(self, title: str, body: str, tag: str) -> None:
        logger.debug("Sending desktop notification %s to %s", tag, self._user_id)
        self._publisher.dispatch(
            self._user_id,
            {
                "type": "desktop-notification",
                "data": {
                    "title": title,
                    "body": body,
                    "tag": tag,
                    "icon": DESKTOP_NOTIFICATION_ICON,
                },
            },
            connection=self._connection,
        )


__all__ = ["DESKTOP_NOTIFICATION_ICON", "DesktopNotifier", "WebsocketDesktopNotifier"]
