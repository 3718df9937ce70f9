"""In-process event bus delivering freshly triggered notifications."""

from __future__ import annotations

import logging
from collections.abc import Callable

from clearlot.domain.entities import Notification

logger = logging.getLogger(__name__)

NotificationCallback = Callable[[Notification], None]


class NotificationEventBus:
    """Fan out notification events to the subscribers of one application.

    Delivery is synchronous and in registration order. Nothing is queued or
    persisted: an event published while nobody listens is lost unless it was
    also written to the durable store. A subscriber registered with a
    ``user_id`` only receives the events addressed to that user.
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[object, str | None, NotificationCallback]] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def has_subscribers(self, user_id: str) -> bool:
        """Return whether an event for ``user_id`` would reach a subscriber."""

        return any(scope is None or scope == user_id for _, scope, _ in self._subscribers)

    def subscribe(
        self, callback: NotificationCallback, *, user_id: str | None = None
    ) -> Callable[[], None]:
        """Register ``callback`` and return the handle that removes it."""

        token = object()
        self._subscribers.append((token, user_id, callback))
        logger.debug("Notification subscriber added (total=%s)", len(self._subscribers))

        def unsubscribe() -> None:
            before = len(self._subscribers)
            self._subscribers = [
                entry for entry in self._subscribers if entry[0] is not token
            ]
            if len(self._subscribers) != before:
                logger.debug(
                    "Notification subscriber removed (remaining=%s)",
                    len(self._subscribers),
                )

        return unsubscribe

    def trigger(self, notification: Notification) -> None:
        """Invoke every matching subscriber registered at call time."""

        subscribers = [
            callback
            for _, scope, callback in self._subscribers
            if scope is None or scope == notification.user_id
        ]
        for index, callback in enumerate(subscribers, start=1):
            try:
                callback(notification)
            except Exception:
                logger.exception(
                    "Notification subscriber %s failed for %s event", index, notification.type
                )


__all__ = ["NotificationCallback", "NotificationEventBus"]
