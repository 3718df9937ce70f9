"""Tests for the marketplace notification builders."""

from datetime import datetime

import pytest

from clearlot.infrastructure.notifications import NotificationEventBus, NotificationTriggers
from clearlot.infrastructure.notifications.triggers import (
    build_account_status_change,
    build_delivery_escalation,
    build_delivery_reminder,
    build_offer_sales_status_change,
    build_order_status_change,
    build_verification_review,
    build_verification_status_change,
)


@pytest.mark.anyio
async def test_listening_recipient_gets_the_bare_payload_on_the_bus(fake_store):
    bus = NotificationEventBus()
    received = []
    bus.subscribe(received.append, user_id="buyer-1")

    notification = await NotificationTriggers(bus, fake_store).purchase_success(
        "buyer-1", "Cotton T-shirts", 250.0, "offer-1", "purchase-1"
    )

    assert received == [notification]
    assert notification.id is None
    assert notification.created_at is None
    assert notification.priority == "high"
    assert notification.data == {
        "offerId": "offer-1",
        "purchaseId": "purchase-1",
        "amount": 250.0,
        "actionUrl": "/hk/buyer-1/my-orders",
    }
    assert fake_store.added == []


@pytest.mark.anyio
async def test_offline_recipient_gets_the_payload_stored(fake_store):
    bus = NotificationEventBus()
    received = []
    bus.subscribe(received.append, user_id="someone-else")

    notification = await NotificationTriggers(bus, fake_store).watchlist_added(
        "buyer-1", "Cotton T-shirts", "offer-1"
    )

    assert received == []
    assert notification.id == fake_store.added[0].id
    assert fake_store.added[0].type == "watchlist"


@pytest.mark.anyio
async def test_offline_store_failure_is_logged(fake_store, caplog):
    fake_store.fail_writes = True

    notification = await NotificationTriggers(NotificationEventBus(), fake_store).system_message(
        "buyer-1", "Maintenance", "Tonight"
    )

    assert notification is None
    assert "Could not store system notification" in caplog.text


@pytest.mark.parametrize(
    ("status", "priority"),
    [("pending", "medium"), ("delivered", "high"), ("completed", "high")],
)
def test_order_status_priority(status, priority):
    notification = build_order_status_change("u", "Lot", status, "p", "o")

    assert notification.priority == priority
    assert notification.data["actionUrl"] == "/hk/u/my-orders"


def test_unknown_order_status_uses_fallbacks():
    notification = build_order_status_change("u", "Lot", "returned", "p", "o")

    assert notification.title == "訂單狀態：Returned 📋"
    assert notification.message.startswith("您的訂單狀態已更新")


def test_sales_status_mentions_the_buyer():
    notification = build_offer_sales_status_change("s", "Lot", "approved", "p", "o", "Acme")

    assert "Acme" in notification.message
    assert notification.priority == "medium"
    assert notification.data["buyerCompany"] == "Acme"


def test_account_and_verification_messages():
    account = build_account_status_change("u", "suspended")
    verification = build_verification_status_change("u", "approved")

    assert account.title == "帳戶狀態：Suspended ⚠️"
    assert account.data["actionUrl"] == "/hk/u/company-settings"
    assert verification.type == "verification_status"
    assert verification.title.endswith("🎉")


def test_delivery_reminder_and_escalation():
    reminder = build_delivery_reminder("buyer", "Lot", "p1", 2)
    escalation = build_delivery_escalation(
        "admin", "Lot", "p1", "Acme", "Supplier Co", datetime(2024, 1, 1, 12), 6
    )

    assert reminder.title == "📦 請確認收貨"
    assert reminder.data["actionUrl"] == "/hk/buyer/my-orders"
    assert reminder.data["reminderCount"] == 2
    assert escalation.type == "delivery_reminder"
    assert escalation.message == '買家 Acme 在發貨後6小時仍未確認收到訂單 "Lot" (賣家: Supplier Co)'
    assert escalation.data["shippedAt"] == "2024-01-01T12:00:00"


def test_verification_review_wording():
    approved = build_verification_review("u", "Acme", True)
    rejected = build_verification_review("u", "Acme", False, "Blurry scan")

    assert approved.title == "驗證已通過！✅"
    assert approved.data["isVerified"] is True
    assert "rejectionReason" not in approved.data
    assert rejected.title == "驗證被拒絕 ❌"
    assert rejected.data["rejectionReason"] == "Blurry scan"
    assert rejected.data["actionUrl"] == "/hk/u/profile"
