"""Connection management helpers for notification websockets."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Track the open notification sockets of every signed-in account."""

    def __init__(self) -> None:
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``user_id``."""

        await websocket.accept()
        self._connections[user_id].add(websocket)
        logger.debug(
            "Notification socket opened for %s (%d open)",
            user_id,
            len(self._connections[user_id]),
        )

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        connections = self._connections.get(user_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(user_id, None)

    def is_connected(self, user_id: str, websocket: WebSocket) -> bool:
        return websocket in self._connections.get(user_id, ())

    async def send(self, user_id: str, websocket: WebSocket, message: dict[str, Any]) -> None:
        """Send ``message`` to a single registered socket of ``user_id``.

        Sockets that were already released are skipped and sockets failing to
        receive are dropped from the pool.
        """

        if not self.is_connected(user_id, websocket):
            return
        try:
            await websocket.send_json(message)
        except Exception:
            logger.debug("Dropping closed notification socket for %s", user_id)
            self.disconnect(user_id, websocket)

    async def send_to_user(self, user_id: str, message: dict[str, Any]) -> None:
        """Send ``message`` to every active connection for ``user_id``."""

        for connection in list(self._connections.get(user_id, ())):
            await self.send(user_id, connection, message)


__all__ = ["NotificationConnectionManager"]
