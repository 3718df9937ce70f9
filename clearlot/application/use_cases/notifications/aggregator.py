"""Per-session aggregation of notifications from the bus and the durable store."""

from __future__ import annotations

import asyncio
import logging
import secrets
import string
import time
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from clearlot.domain.entities import Notification
from clearlot.infrastructure.notifications import (
    DesktopNotifier,
    NotificationEventBus,
    NotificationNotFoundError,
    NotificationStore,
)
from clearlot.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]
Watcher = Callable[[], Unsubscribe]
ChangeListener = Callable[[list[Notification]], None]

DEFAULT_DEDUP_WINDOW = timedelta(seconds=3)
_ID_ALPHABET = string.ascii_lowercase + string.digits


def synthesize_notification_id() -> str:
    """Return a locally generated id used when the durable write failed."""

    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"notification_{int(time.time() * 1000)}_{suffix}"


class NotificationAggregator:
    """Keep one deduplicated, newest-first notification list for a user.

    Entries arrive from three sources: the initial fetch, the durable live
    feed (which replaces the whole list) and the event bus. Mutations are
    written to the durable store first and applied locally only when the
    store accepted them.

    A bare payload that duplicates an entry added within the dedup window is
    deleted from the store again and its id is remembered, so a live-feed
    push that raced the check cannot bring it back.
    """

    def __init__(
        self,
        user_id: str,
        store: NotificationStore,
        bus: NotificationEventBus,
        *,
        desktop_notifier: DesktopNotifier | None = None,
        watchers: Iterable[Watcher] = (),
        clock: Callable[[], datetime] = now_in_app_timezone,
        dedup_window: timedelta = DEFAULT_DEDUP_WINDOW,
    ) -> None:
        self.user_id = user_id
        self._store = store
        self._bus = bus
        self._desktop_notifier = desktop_notifier
        self._watchers = list(watchers)
        self._clock = clock
        self._dedup_window = dedup_window
        self._notifications: list[Notification] = []
        self._listeners: list[tuple[object, ChangeListener]] = []
        self._handles: list[Unsubscribe] = []
        self._pending: set[asyncio.Task[Any]] = set()
        self._suppressed: set[str] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self.is_loading = False
        self.started = False

    # -- lifecycle -----------------------------------------------------

    async def start(self) -> None:
        """Load the initial list and attach the live sources."""

        if self.started:
            return
        self.started = True
        self.is_loading = True
        self._loop = asyncio.get_running_loop()
        try:
            try:
                initial = await self._store.get_notifications(self.user_id)
            except Exception:
                logger.exception("Loading notifications failed for %s", self.user_id)
                initial = []
            self._replace(initial)

            self._handles.append(
                self._store.subscribe_to_notifications(self.user_id, self._replace)
            )
            self._handles.append(
                self._bus.subscribe(self._on_bus_event, user_id=self.user_id)
            )

            for watcher in self._watchers:
                try:
                    self._handles.append(watcher())
                except Exception:
                    logger.exception("Notification watcher failed to start for %s", self.user_id)
        finally:
            self.is_loading = False

    async def stop(self) -> None:
        """Release every subscription and cancel pending bus-triggered adds."""

        handles, self._handles = self._handles, []
        for handle in handles:
            try:
                handle()
            except Exception:
                logger.exception("Releasing a notification subscription failed")
        pending, self._pending = set(self._pending), set()
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self.started = False

    # -- state ---------------------------------------------------------

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    def snapshot(self) -> list[Notification]:
        return [replace(item, data=dict(item.data)) for item in self._notifications]

    @property
    def unread_count(self) -> int:
        return sum(1 for item in self._notifications if not item.is_read)

    def get_notifications_by_type(self, notification_type: str) -> list[Notification]:
        return [item for item in self._notifications if item.type == notification_type]

    def on_change(self, listener: ChangeListener) -> Unsubscribe:
        """Call ``listener`` with the current list after every change."""

        token = object()
        self._listeners.append((token, listener))

        def unsubscribe() -> None:
            self._listeners = [entry for entry in self._listeners if entry[0] is not token]

        return unsubscribe

    def _set(self, notifications: list[Notification]) -> None:
        self._notifications = notifications
        current = list(notifications)
        for _, listener in list(self._listeners):
            try:
                listener(current)
            except Exception:
                logger.exception("Notification change listener failed for %s", self.user_id)

    def _replace(self, notifications: list[Notification]) -> None:
        self._set([item for item in notifications if item.id not in self._suppressed])

    # -- adding --------------------------------------------------------

    def _on_bus_event(self, notification: Notification) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.warning("Dropping notification event for stopped session %s", self.user_id)
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._spawn(notification)
        else:
            loop.call_soon_threadsafe(self._spawn, notification)

    def _spawn(self, notification: Notification) -> None:
        task = asyncio.get_running_loop().create_task(self.add_notification(notification))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def add_notification(self, notification: Notification) -> Notification | None:
        """Add ``notification`` and return it, or ``None`` when discarded."""

        if notification.id:
            if notification.id in self._suppressed or any(
                item.id == notification.id for item in self._notifications
            ):
                return None
            self._set([notification, *self._notifications])
            return notification

        try:
            notification_id = await self._store.add_notification(notification)
        except Exception:
            logger.exception("Persisting notification failed for %s", self.user_id)
            fallback = replace(
                notification,
                id=synthesize_notification_id(),
                created_at=self._clock(),
                data=dict(notification.data),
            )
            self._set([fallback, *self._notifications])
            return fallback

        record = await self._load_stored(notification, notification_id)
        if self._is_duplicate(record):
            await self._suppress(notification_id)
            return None

        # The live feed may already have delivered this record.
        remaining = [item for item in self._notifications if item.id != record.id]
        self._set([record, *remaining])
        self._notify_desktop(record)
        return record

    async def _load_stored(self, notification: Notification, notification_id: str) -> Notification:
        """Return the stored copy of a fresh write, carrying its durable timestamp."""

        try:
            stored = await self._store.get_notification(notification_id)
        except Exception:
            logger.warning("Reading back notification %s failed", notification_id, exc_info=True)
            stored = None
        if stored is not None:
            return stored
        return replace(
            notification,
            id=notification_id,
            created_at=self._clock(),
            data=dict(notification.data),
        )

    async def _suppress(self, notification_id: str) -> None:
        logger.debug("Discarding duplicate notification %s for %s", notification_id, self.user_id)
        self._suppressed.add(notification_id)
        if any(item.id == notification_id for item in self._notifications):
            self._set([item for item in self._notifications if item.id != notification_id])
        try:
            await self._store.delete_notification(notification_id)
        except NotificationNotFoundError:
            pass
        except Exception:
            logger.exception("Removing duplicate notification %s failed", notification_id)

    def _is_duplicate(self, candidate: Notification) -> bool:
        """Return whether an earlier identical entry exists within the window.

        Entries sharing a timestamp are ordered by id, so two sessions writing
        the same payload never both discard their copy.
        """

        now = candidate.created_at or self._clock()
        for existing in self._notifications:
            if existing.id == candidate.id or existing.created_at is None:
                continue
            if existing.content_key() != candidate.content_key():
                continue
            if existing.correlation() != candidate.correlation():
                continue
            age = now - existing.created_at
            if age < timedelta(0) or age >= self._dedup_window:
                continue
            if age == timedelta(0) and (existing.id or "") > (candidate.id or ""):
                continue
            return True
        return False

    def _notify_desktop(self, record: Notification) -> None:
        notifier = self._desktop_notifier
        if notifier is None:
            return
        try:
            if notifier.permission_granted():
                notifier.notify(record.title, record.message, record.id or "")
        except Exception:
            logger.exception("Desktop notification failed for %s", self.user_id)

    # -- mutations -----------------------------------------------------

    async def mark_as_read(self, notification_id: str) -> bool:
        try:
            await self._store.mark_as_read(notification_id)
        except Exception:
            logger.exception("Marking notification %s as read failed", notification_id)
            return False
        self._set(
            [
                item.mark_read() if item.id == notification_id else item
                for item in self._notifications
            ]
        )
        return True

    async def mark_all_as_read(self) -> bool:
        try:
            await self._store.mark_all_as_read(self.user_id)
        except Exception:
            logger.exception("Marking all notifications as read failed for %s", self.user_id)
            return False
        self._set([item if item.is_read else item.mark_read() for item in self._notifications])
        return True

    async def delete_notification(self, notification_id: str) -> bool:
        try:
            await self._store.delete_notification(notification_id)
        except Exception:
            logger.exception("Deleting notification %s failed", notification_id)
            return False
        self._set([item for item in self._notifications if item.id != notification_id])
        return True

    async def clear_all_notifications(self) -> bool:
        try:
            await self._store.delete_all_notifications(self.user_id)
        except Exception:
            logger.exception("Clearing notifications failed for %s", self.user_id)
            return False
        self._set([])
        return True

    # -- diagnostics ---------------------------------------------------

    async def run_diagnostics(self) -> dict[str, Any]:
        """Check the durable store and summarise the in-memory list."""

        report: dict[str, Any] = {
            "user_id": self.user_id,
            "write_access": False,
            "stored_count": None,
            "local_count": len(self._notifications),
            "unread_count": self.unread_count,
            "by_type": dict(Counter(item.type for item in self._notifications)),
        }
        try:
            report["write_access"] = await self._store.check_write_access(self.user_id)
            stored = await self._store.get_notifications(self.user_id)
            report["stored_count"] = len(stored)
        except Exception:
            logger.exception("Notification diagnostics failed for %s", self.user_id)
        return report


__all__ = [
    "DEFAULT_DEDUP_WINDOW",
    "NotificationAggregator",
    "synthesize_notification_id",
]
