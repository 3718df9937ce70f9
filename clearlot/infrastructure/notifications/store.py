"""Durable notification store backed by the relational database.

The store exposes the asynchronous contract used by the aggregation layer and
runs the blocking SQLAlchemy work on worker threads. Every mutation performed
through a store instance pushes the owner's full, refreshed list to the live
subscribers registered for that user.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Protocol, TypeVar

import anyio
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from clearlot.domain.entities import Notification
from clearlot.infrastructure.repositories import NotificationRepository
from clearlot.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

T = TypeVar("T")

LiveFeedCallback = Callable[[list[Notification]], None]


class NotificationStoreError(RuntimeError):
    """Raised when the durable store cannot complete an operation."""


class NotificationNotFoundError(NotificationStoreError):
    """Raised when the targeted notification does not exist."""


class NotificationStore(Protocol):
    """Operations offered by a durable notification backend."""

    async def add_notification(self, notification: Notification) -> str: ...

    async def get_notifications(
        self, user_id: str, limit: int | None = None
    ) -> list[Notification]: ...

    async def get_notification(self, notification_id: str) -> Notification | None: ...

    def subscribe_to_notifications(
        self, user_id: str, on_change: LiveFeedCallback
    ) -> Callable[[], None]: ...

    async def mark_as_read(self, notification_id: str) -> None: ...

    async def mark_all_as_read(self, user_id: str) -> None: ...

    async def delete_notification(self, notification_id: str) -> None: ...

    async def delete_all_notifications(self, user_id: str) -> None: ...

    async def get_unread_count(self, user_id: str) -> int: ...

    async def cleanup_old_notifications(self, user_id: str, days_old: int = 30) -> int: ...

    async def check_write_access(self, user_id: str) -> bool: ...


class SqlNotificationStore:
    """:class:`NotificationStore` implementation over SQLAlchemy sessions."""

    def __init__(
        self,
        session_factory: sessionmaker[Session] | Callable[[], Session],
        *,
        page_size: int = 50,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._session_factory = session_factory
        self._page_size = page_size
        self._clock = clock
        self._listeners: defaultdict[str, list[tuple[object, LiveFeedCallback]]] = (
            defaultdict(list)
        )

    @property
    def page_size(self) -> int:
        return self._page_size

    async def _run(
        self, error_message: str, operation: Callable[[NotificationRepository], T]
    ) -> T:
        def _work() -> T:
            session = self._session_factory()
            try:
                return operation(NotificationRepository(session))
            except SQLAlchemyError:
                session.rollback()
                raise
            finally:
                session.close()

        try:
            return await anyio.to_thread.run_sync(_work)
        except SQLAlchemyError as exc:
            logger.error("%s: %s", error_message, exc)
            raise NotificationStoreError(error_message) from exc

    async def add_notification(self, notification: Notification) -> str:
        """Persist ``notification`` and return the generated identifier."""

        saved = await self._run(
            "Failed to add notification",
            lambda repository: repository.create(notification),
        )
        logger.debug("Notification %s stored for %s", saved.id, saved.user_id)
        await self._publish(saved.user_id)
        return saved.id

    async def get_notifications(
        self, user_id: str, limit: int | None = None
    ) -> list[Notification]:
        page = self._page_size if limit is None else limit
        notifications = await self._run(
            "Failed to get notifications",
            lambda repository: repository.list_for_user(user_id, limit=page),
        )
        return list(notifications)

    async def get_notification(self, notification_id: str) -> Notification | None:
        return await self._run(
            "Failed to get notification",
            lambda repository: repository.get(notification_id),
        )

    def subscribe_to_notifications(
        self, user_id: str, on_change: LiveFeedCallback
    ) -> Callable[[], None]:
        """Call ``on_change`` with the full list after every change for ``user_id``."""

        token = object()
        self._listeners[user_id].append((token, on_change))

        def unsubscribe() -> None:
            listeners = self._listeners.get(user_id)
            if listeners is None:
                return
            listeners[:] = [entry for entry in listeners if entry[0] is not token]
            if not listeners:
                self._listeners.pop(user_id, None)

        return unsubscribe

    async def mark_as_read(self, notification_id: str) -> None:
        owner_id = await self._run(
            "Failed to mark notification as read",
            lambda repository: repository.mark_as_read(notification_id),
        )
        if owner_id is None:
            raise NotificationNotFoundError(f"Notification {notification_id} not found")
        await self._publish(owner_id)

    async def mark_all_as_read(self, user_id: str) -> None:
        updated = await self._run(
            "Failed to mark all notifications as read",
            lambda repository: repository.mark_all_as_read(user_id),
        )
        if updated:
            await self._publish(user_id)

    async def delete_notification(self, notification_id: str) -> None:
        owner_id = await self._run(
            "Failed to delete notification",
            lambda repository: repository.delete(notification_id),
        )
        if owner_id is None:
            raise NotificationNotFoundError(f"Notification {notification_id} not found")
        await self._publish(owner_id)

    async def delete_all_notifications(self, user_id: str) -> None:
        deleted = await self._run(
            "Failed to delete all notifications",
            lambda repository: repository.delete_all_for_user(user_id),
        )
        if deleted:
            await self._publish(user_id)

    async def get_unread_count(self, user_id: str) -> int:
        return await self._run(
            "Failed to get unread count",
            lambda repository: repository.count_unread(user_id),
        )

    async def cleanup_old_notifications(self, user_id: str, days_old: int = 30) -> int:
        """Delete notifications of ``user_id`` older than ``days_old`` days."""

        cutoff = self._clock() - timedelta(days=days_old)
        removed = await self._run(
            "Failed to cleanup old notifications",
            lambda repository: repository.delete_older_than(user_id, cutoff),
        )
        if removed:
            logger.info("Removed %s old notifications for %s", removed, user_id)
            await self._publish(user_id)
        return removed

    async def check_write_access(self, user_id: str) -> bool:
        """Create and remove a throwaway notification, bypassing the live feed."""

        sample = Notification(
            user_id=user_id,
            type="system",
            title="Write access check",
            message="Temporary notification used to verify write access.",
            priority="low",
        )

        def _write_and_remove(repository: NotificationRepository) -> bool:
            saved = repository.create(sample)
            repository.delete(saved.id)
            return True

        try:
            return await self._run("Failed to verify write access", _write_and_remove)
        except NotificationStoreError:
            return False

    async def _publish(self, user_id: str) -> None:
        listeners = list(self._listeners.get(user_id, ()))
        if not listeners:
            return
        try:
            notifications = await self.get_notifications(user_id)
        except NotificationStoreError:
            logger.exception("Live notification feed refresh failed for %s", user_id)
            return
        for _, callback in listeners:
            try:
                callback(list(notifications))
            except Exception:
                logger.exception("Live notification listener failed for %s", user_id)

    def listener_count(self, user_id: str) -> int:
        return len(self._listeners.get(user_id, ()))



__all__ = [
    "LiveFeedCallback",
    "NotificationNotFoundError",
    "NotificationStore",
    "NotificationStoreError",
    "SqlNotificationStore",
]
