"""Tests for the catch-up sweeps started with each notification session."""

from __future__ import annotations

from datetime import timedelta

import anyio
import pytest

from clearlot.application.use_cases.notifications import (
    DeliveryReminderWatcher,
    OrderStatusWatcher,
    PriceWatcher,
)
from clearlot.application.use_cases.notifications.watchers import _SweepWatcher
from clearlot.domain.entities import Account, Offer, Purchase
from clearlot.infrastructure.database import SessionLocal
from clearlot.infrastructure.notifications import NotificationEventBus
from clearlot.infrastructure.repositories import (
    AccountRepository,
    OfferRepository,
    PurchaseRepository,
    WatchlistRepository,
)
from clearlot.utils import now_in_app_timezone


@pytest.fixture
def seeded(db_session):
    accounts = AccountRepository(db_session)
    buyer = accounts.create(Account(id=None, email="b@example.com", password="x", company="Buyer Co"))
    seller = accounts.create(Account(id=None, email="s@example.com", password="x", company="Seller Co"))
    offer = OfferRepository(db_session).create(
        Offer(
            id=None,
            offer_code="OFF-9",
            title="Steel bolts",
            supplier_id=seller.id,
            current_price=80.0,
            original_price=120.0,
            quantity=1000,
            previous_price=100.0,
        )
    )
    purchase = PurchaseRepository(db_session).create(
        Purchase(
            id=None,
            offer_id=offer.id,
            buyer_id=buyer.id,
            seller_id=seller.id,
            quantity=5,
            unit_price=80.0,
            total_amount=400.0,
            platform_fee=12.0,
            final_amount=412.0,
        )
    )
    WatchlistRepository(db_session).add(buyer.id, offer.id)
    return buyer, seller, offer, purchase


@pytest.mark.anyio
async def test_new_order_is_announced_once(seeded, fake_store):
    buyer, seller, _, purchase = seeded
    bus = NotificationEventBus()

    watcher = OrderStatusWatcher(seller.id, SessionLocal, fake_store, bus)
    assert await watcher.sweep() == 1
    assert await watcher.sweep() == 0

    announced = {(item.user_id, item.type) for item in fake_store.added}
    assert announced == {(buyer.id, "order_status"), (seller.id, "offer_purchased")}
    with SessionLocal() as session:
        assert PurchaseRepository(session).get(purchase.id).previous_status == "pending"


@pytest.mark.anyio
async def test_price_drop_is_announced_once(seeded, fake_store):
    buyer, _, offer, _ = seeded
    bus = NotificationEventBus()
    events = []
    bus.subscribe(events.append)

    watcher = PriceWatcher(buyer.id, SessionLocal, fake_store, bus, threshold=0.05)
    assert await watcher.sweep() == 1
    assert await watcher.sweep() == 0

    assert [item.type for item in events] == ["price_drop"]
    assert events[0].data["percentage"] == 20
    with SessionLocal() as session:
        assert OfferRepository(session).get(offer.id).previous_price == 80.0


@pytest.mark.anyio
async def test_watcher_handle_cancels_the_sweep(seeded, fake_store):
    buyer, *_ = seeded

    stop = PriceWatcher(buyer.id, SessionLocal, fake_store, NotificationEventBus())()
    stop()
    await anyio.sleep(0)

    assert fake_store.added == []


@pytest.fixture
def shipped(seeded, db_session):
    buyer, seller, offer, purchase = seeded
    admin = AccountRepository(db_session).create(
        Account(id=None, email="a@example.com", password="x", company="Platform", is_admin=True)
    )
    shipped_purchase, _ = PurchaseRepository(db_session).update_status(purchase.id, "shipped")
    return buyer, seller, admin, shipped_purchase


def _reminder_watcher(user_id, store, hours_after_shipping):
    later = now_in_app_timezone() + timedelta(hours=hours_after_shipping)
    return DeliveryReminderWatcher(
        user_id, SessionLocal, store, NotificationEventBus(), clock=lambda: later
    )


@pytest.mark.anyio
async def test_shipping_starts_a_fresh_reminder_cycle(shipped):
    *_, purchase = shipped

    assert purchase.shipped_at is not None
    assert purchase.reminder_count == 0
    assert purchase.admin_notified is False


@pytest.mark.anyio
async def test_no_reminder_before_the_interval(shipped, fake_store):
    buyer, *_ = shipped

    assert await _reminder_watcher(buyer.id, fake_store, 0.5).sweep() == 0
    assert fake_store.added == []


@pytest.mark.anyio
async def test_buyer_is_reminded_once_per_interval(shipped, fake_store):
    buyer, seller, _, purchase = shipped

    assert await _reminder_watcher(buyer.id, fake_store, 1.1).sweep() == 1
    assert await _reminder_watcher(seller.id, fake_store, 1.2).sweep() == 0

    reminder = fake_store.added[0]
    assert reminder.user_id == buyer.id
    assert reminder.title == "📦 請確認收貨"
    assert reminder.data["purchaseId"] == purchase.id
    assert reminder.data["reminderCount"] == 1
    with SessionLocal() as session:
        stored = PurchaseRepository(session).get(purchase.id)
    assert stored.reminder_count == 1
    assert stored.last_reminder_at is not None
    assert stored.admin_notified is False


@pytest.mark.anyio
async def test_long_silence_is_escalated_to_admins_once(shipped, fake_store):
    buyer, _, admin, purchase = shipped

    assert await _reminder_watcher(buyer.id, fake_store, 6.5).sweep() == 1
    assert await _reminder_watcher(buyer.id, fake_store, 7.6).sweep() == 1

    escalations = [item for item in fake_store.added if item.type == "delivery_reminder"]
    assert [item.user_id for item in escalations] == [admin.id]
    assert "Buyer Co" in escalations[0].message
    assert "Seller Co" in escalations[0].message
    with SessionLocal() as session:
        assert PurchaseRepository(session).get(purchase.id).admin_notified is True


@pytest.mark.anyio
async def test_delivered_purchase_stops_the_reminders(shipped, fake_store, db_session):
    buyer, *_, purchase = shipped
    PurchaseRepository(db_session).update_status(purchase.id, "delivered")

    assert await _reminder_watcher(buyer.id, fake_store, 8).sweep() == 0


@pytest.mark.anyio
async def test_watcher_with_an_interval_keeps_sweeping(fake_store):
    class CountingWatcher(_SweepWatcher):
        interval = 0

        def __init__(self) -> None:
            super().__init__("user-1", SessionLocal, fake_store, NotificationEventBus())
            self.sweeps = 0

        async def sweep(self) -> int:
            self.sweeps += 1
            return 0

    watcher = CountingWatcher()
    stop = watcher()
    for _ in range(5):
        await anyio.sleep(0)
    stop()
    await anyio.sleep(0)

    assert watcher.sweeps > 1
