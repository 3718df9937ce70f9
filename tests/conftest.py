"""Shared fixtures for the test-suite."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta
from itertools import count
from pathlib import Path

import pytest

TEST_DB_PATH = Path(tempfile.gettempdir()) / "clearlot_api_tests.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["APP_TIMEZONE"] = "Asia/Hong_Kong"
os.environ.pop("AZURE_STORAGE_CONNECTION_STRING", None)
os.environ.pop("AZURE_STORAGE_CONTAINER_NAME", None)

from clearlot.config import get_settings  # noqa: E402

get_settings.cache_clear()

from clearlot.domain.entities import Notification  # noqa: E402
from clearlot.infrastructure.notifications import (  # noqa: E402
    NotificationNotFoundError,
    NotificationStoreError,
)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def reset_database():
    """Give the test a freshly created database."""

    from clearlot.infrastructure.database import Base, engine, initialize_database

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(reset_database):
    from clearlot.infrastructure.database import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeNotificationStore:
    """In-memory notification store with switchable failures."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self.records: dict[str, Notification] = {}
        self.fail_writes = False
        self.fail_mutations = False
        self.added: list[Notification] = []
        self._ids = count(1)
        self._clock = clock or FakeClock()
        self._listeners: dict[str, list[Callable[[list[Notification]], None]]] = {}

    def _ordered(self, user_id: str) -> list[Notification]:
        items = [item for item in self.records.values() if item.user_id == user_id]
        return sorted(items, key=lambda item: item.created_at, reverse=True)

    def _publish(self, user_id: str) -> None:
        for callback in list(self._listeners.get(user_id, [])):
            callback(self._ordered(user_id))

    async def add_notification(self, notification: Notification) -> str:
        if self.fail_writes:
            raise NotificationStoreError("write failed")
        notification_id = f"n{next(self._ids)}"
        saved = replace(notification, id=notification_id, created_at=self._clock())
        self.records[notification_id] = saved
        self.added.append(saved)
        self._publish(saved.user_id)
        return notification_id

    async def get_notifications(self, user_id: str, limit: int | None = None) -> list[Notification]:
        items = self._ordered(user_id)
        return items[:limit] if limit is not None else items

    async def get_notification(self, notification_id: str) -> Notification | None:
        return self.records.get(notification_id)

    def subscribe_to_notifications(self, user_id, on_change):
        self._listeners.setdefault(user_id, []).append(on_change)

        def unsubscribe() -> None:
            listeners = self._listeners.get(user_id, [])
            if on_change in listeners:
                listeners.remove(on_change)

        return unsubscribe

    def listener_count(self, user_id: str) -> int:
        return len(self._listeners.get(user_id, []))

    def _check_mutation(self) -> None:
        if self.fail_mutations:
            raise NotificationStoreError("mutation failed")

    async def mark_as_read(self, notification_id: str) -> None:
        self._check_mutation()
        record = self.records.get(notification_id)
        if record is None:
            raise NotificationNotFoundError(notification_id)
        self.records[notification_id] = record.mark_read()
        self._publish(record.user_id)

    async def mark_all_as_read(self, user_id: str) -> None:
        self._check_mutation()
        for key, record in list(self.records.items()):
            if record.user_id == user_id:
                self.records[key] = record.mark_read()
        self._publish(user_id)

    async def delete_notification(self, notification_id: str) -> None:
        self._check_mutation()
        record = self.records.pop(notification_id, None)
        if record is None:
            raise NotificationNotFoundError(notification_id)
        self._publish(record.user_id)

    async def delete_all_notifications(self, user_id: str) -> None:
        self._check_mutation()
        for key in [key for key, item in self.records.items() if item.user_id == user_id]:
            del self.records[key]
        self._publish(user_id)

    async def get_unread_count(self, user_id: str) -> int:
        return sum(1 for item in self._ordered(user_id) if not item.is_read)

    async def cleanup_old_notifications(self, user_id: str, days_old: int = 30) -> int:
        return 0

    async def check_write_access(self, user_id: str) -> bool:
        return not self.fail_writes


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_store(clock: FakeClock) -> FakeNotificationStore:
    return FakeNotificationStore(clock)
