"""Tests for the SQL backed notification store."""

from __future__ import annotations

from datetime import timedelta

import pytest

from clearlot.domain.entities import Notification
from clearlot.infrastructure.notifications import (
    NotificationNotFoundError,
    SqlNotificationStore,
)
from clearlot.utils import now_in_app_timezone


def _payload(user_id: str = "user-1", **overrides) -> Notification:
    values = {
        "user_id": user_id,
        "type": "system",
        "title": "Maintenance",
        "message": "Tonight at 22:00",
    }
    values.update(overrides)
    return Notification(**values)


@pytest.fixture
def store(reset_database) -> SqlNotificationStore:
    from clearlot.infrastructure.database import SessionLocal

    return SqlNotificationStore(SessionLocal, page_size=2)


@pytest.mark.anyio
async def test_add_and_list_newest_first(store):
    now = now_in_app_timezone()
    await store.add_notification(_payload(message="old", created_at=now - timedelta(minutes=5)))
    newest_id = await store.add_notification(_payload(message="new", created_at=now))
    await store.add_notification(_payload(user_id="other"))

    notifications = await store.get_notifications("user-1")

    assert [item.message for item in notifications] == ["new", "old"]
    assert notifications[0].id == newest_id
    assert notifications[0].created_at is not None


@pytest.mark.anyio
async def test_listing_respects_the_page_size(store):
    for index in range(3):
        await store.add_notification(_payload(message=str(index)))

    assert len(await store.get_notifications("user-1")) == 2
    assert len(await store.get_notifications("user-1", limit=3)) == 3


@pytest.mark.anyio
async def test_mutations_and_unread_count(store):
    first = await store.add_notification(_payload(message="a"))
    second = await store.add_notification(_payload(message="b"))

    await store.mark_as_read(first)
    assert await store.get_unread_count("user-1") == 1

    await store.mark_all_as_read("user-1")
    assert await store.get_unread_count("user-1") == 0

    await store.delete_notification(second)
    assert [item.id for item in await store.get_notifications("user-1")] == [first]

    await store.delete_all_notifications("user-1")
    assert await store.get_notifications("user-1") == []


@pytest.mark.anyio
async def test_missing_notifications_raise_not_found(store):
    with pytest.raises(NotificationNotFoundError):
        await store.mark_as_read("missing")
    with pytest.raises(NotificationNotFoundError):
        await store.delete_notification("missing")


@pytest.mark.anyio
async def test_live_feed_receives_the_full_list(store):
    pushes: list[list[Notification]] = []
    unsubscribe = store.subscribe_to_notifications("user-1", pushes.append)

    notification_id = await store.add_notification(_payload())
    await store.mark_as_read(notification_id)
    await store.add_notification(_payload(user_id="other"))
    unsubscribe()
    await store.delete_all_notifications("user-1")

    assert len(pushes) == 2
    assert [item.id for item in pushes[0]] == [notification_id]
    assert pushes[1][0].is_read is True
    assert store.listener_count("user-1") == 0


@pytest.mark.anyio
async def test_cleanup_removes_only_old_notifications(store):
    now = now_in_app_timezone()
    await store.add_notification(_payload(message="stale", created_at=now - timedelta(days=45)))
    await store.add_notification(_payload(message="fresh", created_at=now - timedelta(days=2)))

    removed = await store.cleanup_old_notifications("user-1", days_old=30)

    assert removed == 1
    assert [item.message for item in await store.get_notifications("user-1")] == ["fresh"]


@pytest.mark.anyio
async def test_write_access_check_leaves_no_trace(store):
    pushes: list[list[Notification]] = []
    store.subscribe_to_notifications("user-1", pushes.append)

    assert await store.check_write_access("user-1") is True

    assert await store.get_notifications("user-1") == []
    assert pushes == []
