"""Tests for the per-session notification aggregator."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest

from clearlot.application.use_cases.notifications import NotificationAggregator
from clearlot.domain.entities import Notification
from clearlot.infrastructure.notifications import NotificationEventBus, NotificationTriggers


def _payload(**overrides) -> Notification:
    values = {
        "user_id": "user-1",
        "type": "price_drop",
        "title": "價格下降提醒！🎉",
        "message": "Offer dropped",
        "data": {"offerId": "offer-1"},
    }
    values.update(overrides)
    return Notification(**values)


class RecordingDesktop:
    def __init__(self, granted: bool = True) -> None:
        self.granted = granted
        self.shown: list[tuple[str, str, str]] = []

    def permission_granted(self) -> bool:
        return self.granted

    def notify(self, title: str, body: str, tag: str) -> None:
        self.shown.append((title, body, tag))


@pytest.fixture
def bus() -> NotificationEventBus:
    return NotificationEventBus()


@pytest.fixture
def aggregator(fake_store, bus, clock) -> NotificationAggregator:
    return NotificationAggregator("user-1", fake_store, bus, clock=clock)


async def _seed(fake_store, clock, *payloads: Notification) -> list[str]:
    ids = []
    for payload in payloads:
        ids.append(await fake_store.add_notification(payload))
        clock.advance(60)
    return ids


@pytest.mark.anyio
async def test_bare_payload_is_written_once_and_prepended(aggregator, fake_store, clock):
    added = await aggregator.add_notification(_payload())

    assert len(fake_store.added) == 1
    assert added is not None
    assert added.id == fake_store.added[0].id
    assert added.created_at == clock.now
    assert [item.id for item in aggregator.notifications] == [added.id]


@pytest.mark.anyio
async def test_payload_with_id_skips_the_store(aggregator, fake_store, clock):
    existing = _payload(id="remote-1", created_at=clock.now)

    assert await aggregator.add_notification(existing) is existing
    assert await aggregator.add_notification(existing) is None

    assert fake_store.added == []
    assert [item.id for item in aggregator.notifications] == ["remote-1"]


@pytest.mark.anyio
async def test_identical_payloads_within_window_are_collapsed(aggregator, fake_store, clock):
    await aggregator.add_notification(_payload())
    clock.advance(1)
    assert await aggregator.add_notification(_payload()) is None

    assert len(aggregator.notifications) == 1
    assert len(fake_store.added) == 2


@pytest.mark.anyio
async def test_identical_payloads_outside_window_are_kept(aggregator, clock):
    await aggregator.add_notification(_payload())
    clock.advance(3)
    await aggregator.add_notification(_payload())

    assert len(aggregator.notifications) == 2


@pytest.mark.anyio
async def test_different_correlation_is_not_a_duplicate(aggregator):
    await aggregator.add_notification(_payload(data={"offerId": "offer-1"}))
    await aggregator.add_notification(_payload(data={"offerId": "offer-2"}))

    offers = [item.data["offerId"] for item in aggregator.notifications]
    assert offers == ["offer-2", "offer-1"]


@pytest.mark.anyio
async def test_store_failure_synthesizes_an_id(aggregator, fake_store):
    fake_store.fail_writes = True

    added = await aggregator.add_notification(_payload())

    assert added is not None
    assert added.id.startswith("notification_")
    assert aggregator.unread_count == 1


@pytest.mark.anyio
async def test_mark_all_as_read_zeroes_unread_count(aggregator, fake_store, clock):
    await _seed(fake_store, clock, _payload(message="a"), _payload(message="b"))
    await aggregator.start()
    assert aggregator.unread_count == 2

    assert await aggregator.mark_all_as_read() is True

    assert aggregator.unread_count == 0
    assert all(item.is_read for item in aggregator.notifications)
    await aggregator.stop()


@pytest.mark.anyio
async def test_mark_as_read_only_flips_the_target(aggregator, fake_store, clock):
    first_id, second_id = await _seed(
        fake_store, clock, _payload(message="A"), _payload(message="B")
    )
    await aggregator.start()
    before = [item.id for item in aggregator.notifications]

    assert await aggregator.mark_as_read(first_id) is True

    assert [item.id for item in aggregator.notifications] == before
    flags = {item.id: item.is_read for item in aggregator.notifications}
    assert flags == {first_id: True, second_id: False}
    assert aggregator.unread_count == 1
    await aggregator.stop()


@pytest.mark.anyio
async def test_delete_keeps_the_order_of_the_others(aggregator, fake_store, clock):
    ids = await _seed(
        fake_store, clock, _payload(message="1"), _payload(message="2"), _payload(message="3")
    )
    await aggregator.start()

    assert await aggregator.delete_notification(ids[1]) is True

    assert [item.id for item in aggregator.notifications] == [ids[2], ids[0]]
    await aggregator.stop()


@pytest.mark.anyio
async def test_failed_clear_leaves_the_list_untouched(aggregator, fake_store, clock):
    await _seed(fake_store, clock, _payload(message="1"), _payload(message="2"))
    await aggregator.start()
    before = aggregator.snapshot()
    fake_store.fail_mutations = True

    assert await aggregator.clear_all_notifications() is False
    assert await aggregator.mark_all_as_read() is False

    assert aggregator.notifications == before
    await aggregator.stop()


@pytest.mark.anyio
async def test_live_feed_replaces_the_list(aggregator, fake_store, clock):
    await aggregator.start()
    assert fake_store.listener_count("user-1") == 1

    await fake_store.add_notification(_payload(message="from elsewhere"))

    assert [item.message for item in aggregator.notifications] == ["from elsewhere"]
    await aggregator.stop()
    assert fake_store.listener_count("user-1") == 0


@pytest.mark.anyio
async def test_bus_events_for_the_user_are_added(aggregator, bus, fake_store):
    await aggregator.start()

    bus.trigger(_payload(user_id="someone-else"))
    bus.trigger(_payload(id="server-1", created_at=datetime(2024, 1, 1, 12)))
    await _drain(aggregator)

    assert [item.id for item in aggregator.notifications] == ["server-1"]
    await aggregator.stop()
    assert bus.subscriber_count == 0


@pytest.mark.anyio
async def test_added_notification_is_mirrored_on_the_desktop(fake_store, bus, clock):
    desktop = RecordingDesktop()
    aggregator = NotificationAggregator(
        "user-1", fake_store, bus, desktop_notifier=desktop, clock=clock
    )

    added = await aggregator.add_notification(_payload())
    desktop.granted = False
    clock.advance(10)
    await aggregator.add_notification(_payload(message="quiet"))

    assert desktop.shown == [(added.title, added.message, added.id)]


@pytest.mark.anyio
async def test_watchers_are_started_and_released(fake_store, bus, clock):
    released = []

    def watcher():
        return lambda: released.append(True)

    aggregator = NotificationAggregator(
        "user-1", fake_store, bus, watchers=[watcher], clock=clock
    )
    await aggregator.start()
    await aggregator.stop()

    assert released == [True]


@pytest.mark.anyio
async def test_change_listeners_receive_every_update(aggregator):
    seen = []
    unsubscribe = aggregator.on_change(lambda items: seen.append(len(items)))

    await aggregator.add_notification(_payload(message="1"))
    unsubscribe()
    await aggregator.add_notification(_payload(message="2"))

    assert seen == [1]


@pytest.mark.anyio
async def test_custom_dedup_window(fake_store, bus, clock):
    aggregator = NotificationAggregator(
        "user-1", fake_store, bus, clock=clock, dedup_window=timedelta(seconds=10)
    )
    await aggregator.add_notification(_payload())
    clock.advance(5)
    await aggregator.add_notification(_payload())

    assert len(aggregator.notifications) == 1


@pytest.mark.anyio
async def test_diagnostics_report(aggregator, fake_store, clock):
    await _seed(fake_store, clock, _payload(message="1"))
    await aggregator.start()

    report = await aggregator.run_diagnostics()

    assert report["write_access"] is True
    assert report["stored_count"] == 1
    assert report["by_type"] == {"price_drop": 1}
    await aggregator.stop()


async def _drain(aggregator: NotificationAggregator) -> None:
    for _ in range(5):
        await asyncio.sleep(0)
    pending = list(aggregator._pending)
    if pending:
        await asyncio.gather(*pending)


@pytest.mark.anyio
async def test_started_aggregator_collapses_identical_payloads(aggregator, fake_store, clock):
    await aggregator.start()
    first = await aggregator.add_notification(_payload())
    clock.advance(1)

    assert await aggregator.add_notification(_payload()) is None

    assert [item.id for item in aggregator.notifications] == [first.id]
    assert list(fake_store.records) == [first.id]
    await aggregator.stop()


@pytest.mark.anyio
async def test_started_aggregator_honours_a_custom_dedup_window(fake_store, bus, clock):
    aggregator = NotificationAggregator(
        "user-1", fake_store, bus, clock=clock, dedup_window=timedelta(seconds=10)
    )
    await aggregator.start()
    await aggregator.add_notification(_payload())
    clock.advance(5)
    await aggregator.add_notification(_payload())

    assert len(aggregator.notifications) == 1
    await aggregator.stop()


@pytest.mark.anyio
async def test_discarded_duplicate_does_not_come_back_with_the_live_feed(
    aggregator, fake_store, clock
):
    await aggregator.start()
    await aggregator.add_notification(_payload())
    clock.advance(1)
    await aggregator.add_notification(_payload())
    clock.advance(1)

    await fake_store.add_notification(_payload(message="unrelated"))

    assert [item.message for item in aggregator.notifications] == [
        "unrelated",
        "Offer dropped",
    ]
    await aggregator.stop()


@pytest.mark.anyio
async def test_two_sessions_writing_the_same_payload_keep_one_copy(fake_store, bus, clock):
    first = NotificationAggregator("user-1", fake_store, bus, clock=clock)
    second = NotificationAggregator("user-1", fake_store, bus, clock=clock)
    await first.start()
    await second.start()

    kept = await first.add_notification(_payload())
    assert await second.add_notification(_payload()) is None

    assert [item.id for item in first.notifications] == [kept.id]
    assert [item.id for item in second.notifications] == [kept.id]
    assert list(fake_store.records) == [kept.id]
    await first.stop()
    await second.stop()


@pytest.mark.anyio
async def test_started_aggregator_over_the_sql_store_collapses_duplicates(
    reset_database, bus
):
    from clearlot.infrastructure.database import SessionLocal
    from clearlot.infrastructure.notifications import SqlNotificationStore

    store = SqlNotificationStore(SessionLocal)
    aggregator = NotificationAggregator("user-1", store, bus)
    await aggregator.start()

    first = await aggregator.add_notification(_payload())
    assert await aggregator.add_notification(_payload()) is None

    assert [item.id for item in aggregator.notifications] == [first.id]
    assert [item.id for item in await store.get_notifications("user-1")] == [first.id]
    await aggregator.stop()


@pytest.mark.anyio
async def test_added_record_carries_the_stored_timestamp(fake_store, bus, clock):
    aggregator = NotificationAggregator(
        "user-1", fake_store, bus, clock=lambda: datetime(2030, 1, 1)
    )

    added = await aggregator.add_notification(_payload())

    assert added.created_at == fake_store.records[added.id].created_at == clock.now


@pytest.mark.anyio
async def test_store_failure_is_prepended_without_dedup_or_desktop(fake_store, bus, clock):
    desktop = RecordingDesktop()
    aggregator = NotificationAggregator(
        "user-1", fake_store, bus, desktop_notifier=desktop, clock=clock
    )
    stored = await aggregator.add_notification(_payload())
    fake_store.fail_writes = True
    desktop.shown.clear()

    fallback = await aggregator.add_notification(_payload())

    assert fallback is not None
    assert fallback.id.startswith("notification_")
    assert [item.id for item in aggregator.notifications] == [fallback.id, stored.id]
    assert desktop.shown == []


@pytest.mark.anyio
async def test_triggers_reach_a_listening_session_through_its_dedup(
    aggregator, fake_store, bus, clock
):
    triggers = NotificationTriggers(bus, fake_store)
    await aggregator.start()

    await triggers.watchlist_added("user-1", "Cotton T-shirts", "offer-1")
    await _drain(aggregator)
    clock.advance(1)
    await triggers.watchlist_added("user-1", "Cotton T-shirts", "offer-1")
    await _drain(aggregator)

    assert [item.type for item in aggregator.notifications] == ["watchlist"]
    assert len(fake_store.records) == 1
    await aggregator.stop()
