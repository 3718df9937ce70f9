"""Tests for the administrator marketplace endpoints."""

from __future__ import annotations

import pytest

from clearlot.domain.entities import Offer
from clearlot.infrastructure.database import SessionLocal
from clearlot.infrastructure.repositories import (
    NotificationRepository,
    OfferRepository,
    PurchaseRepository,
)


@pytest.fixture
def admin_headers(client, marketplace, auth_headers):
    return auth_headers("admin@clearlot.com", admin=True)


def _notification_types(user_id: str) -> list[str]:
    with SessionLocal() as session:
        return [item.type for item in NotificationRepository(session).list_for_user(user_id)]


def test_purchase_status_change_notifies_buyer_and_seller(client, marketplace, admin_headers):
    response = client.patch(
        f"/admin/purchases/{marketplace.purchase.id}/status",
        json={"status": "approved"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["purchase"]["status"] == "approved"
    assert body["purchase"]["previousStatus"] == "approved"
    assert [(item["userId"], item["type"]) for item in body["notifications"]] == [
        (marketplace.buyer.id, "order_status"),
        (marketplace.seller.id, "offer_sales_status"),
    ]
    assert _notification_types(marketplace.buyer.id) == ["order_status"]
    assert _notification_types(marketplace.seller.id) == ["offer_sales_status"]


def test_repeating_a_status_sends_nothing(client, marketplace, admin_headers):
    path = f"/admin/purchases/{marketplace.purchase.id}/status"
    client.patch(path, json={"status": "shipped"}, headers=admin_headers)

    response = client.patch(path, json={"status": "shipped"}, headers=admin_headers)

    assert response.json()["notifications"] == []


def test_change_after_an_announced_status_is_sent(client, marketplace, admin_headers):
    with SessionLocal() as session:
        PurchaseRepository(session).update_status(marketplace.purchase.id, "approved")
        PurchaseRepository(session).acknowledge_status(marketplace.purchase.id, "pending")

    response = client.patch(
        f"/admin/purchases/{marketplace.purchase.id}/status",
        json={"status": "shipped"},
        headers=admin_headers,
    )

    assert len(response.json()["notifications"]) == 2


def test_unknown_purchase_and_invalid_status(client, marketplace, admin_headers):
    missing = client.patch(
        "/admin/purchases/missing/status", json={"status": "approved"}, headers=admin_headers
    )
    invalid = client.patch(
        f"/admin/purchases/{marketplace.purchase.id}/status",
        json={"status": "lost"},
        headers=admin_headers,
    )

    assert missing.status_code == 404
    assert invalid.status_code == 422


def test_price_drops_are_announced_to_watchers(client, marketplace, admin_headers):
    path = f"/admin/offers/{marketplace.offer.id}/price"

    first = client.patch(path, json={"price": 80}, headers=admin_headers).json()
    assert [item["userId"] for item in first["notifications"]] == [marketplace.buyer.id]
    assert first["notifications"][0]["data"]["percentage"] == 20
    assert first["offer"]["previousPrice"] == 80

    small = client.patch(path, json={"price": 78}, headers=admin_headers).json()
    assert small["notifications"] == []
    assert small["offer"]["previousPrice"] == 80

    accumulated = client.patch(path, json={"price": 75}, headers=admin_headers).json()
    assert accumulated["notifications"][0]["data"]["percentage"] == 6

    increase = client.patch(path, json={"price": 90}, headers=admin_headers).json()
    assert increase["notifications"] == []
    assert increase["offer"]["previousPrice"] == 90


def test_price_must_be_positive(client, marketplace, admin_headers):
    response = client.patch(
        f"/admin/offers/{marketplace.offer.id}/price", json={"price": 0}, headers=admin_headers
    )

    assert response.status_code == 422


def test_account_status_changes_notify_the_owner(client, marketplace, admin_headers):
    path = f"/admin/accounts/{marketplace.seller.id}/status"

    response = client.patch(path, json={"status": "suspended"}, headers=admin_headers)
    client.patch(path, json={"status": "suspended"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "suspended"
    assert _notification_types(marketplace.seller.id) == ["account_status"]


def test_verification_changes_notify_the_owner(client, marketplace, admin_headers):
    response = client.patch(
        f"/admin/accounts/{marketplace.seller.id}/verification",
        json={"verificationStatus": "approved"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["verificationStatus"] == "approved"
    assert _notification_types(marketplace.seller.id) == ["verification_status"]


def test_unknown_account(client, marketplace, admin_headers):
    response = client.patch(
        "/admin/accounts/missing/status", json={"status": "active"}, headers=admin_headers
    )

    assert response.status_code == 404


@pytest.fixture
def uploaded_receipt(marketplace):
    with SessionLocal() as session:
        PurchaseRepository(session).update_payment_details(
            marketplace.purchase.id, {"receiptUrl": "https://r/1.png", "approvalStatus": "pending"}
        )
    return marketplace


def test_approved_receipt_confirms_the_payment_to_the_seller(
    client, uploaded_receipt, admin_headers
):
    response = client.post(
        f"/admin/payment-receipts/{uploaded_receipt.purchase.id}/approve", headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    with SessionLocal() as session:
        details = PurchaseRepository(session).get(uploaded_receipt.purchase.id).payment_details
    assert details["approvalStatus"] == "approved"
    assert "approvedAt" in details
    assert _notification_types(uploaded_receipt.buyer.id) == ["order_status"]
    assert sorted(_notification_types(uploaded_receipt.seller.id)) == [
        "offer_sales_status",
        "payment",
    ]


def test_rejected_receipt_keeps_the_reason(client, uploaded_receipt, admin_headers):
    path = f"/admin/payment-receipts/{uploaded_receipt.purchase.id}"

    response = client.post(f"{path}/reject", json={"reason": "Blurry"}, headers=admin_headers)
    again = client.post(f"{path}/approve", headers=admin_headers)

    assert response.json()["status"] == "rejected"
    with SessionLocal() as session:
        details = PurchaseRepository(session).get(uploaded_receipt.purchase.id).payment_details
    assert details["approvalStatus"] == "rejected"
    assert details["rejectionReason"] == "Blurry"
    assert _notification_types(uploaded_receipt.seller.id) == []
    assert again.status_code == 400


def test_pending_offer_review(client, marketplace, admin_headers):
    with SessionLocal() as session:
        pending = OfferRepository(session).create(
            Offer(
                id=None,
                offer_code="OFF-002",
                title="Denim Jackets",
                supplier_id=marketplace.seller.id,
                current_price=40.0,
                original_price=80.0,
                quantity=100,
                status="pending",
            )
        )

    rejected = client.post(f"/admin/offers/{pending.id}/reject", headers=admin_headers)
    active = client.post(f"/admin/offers/{marketplace.offer.id}/approve", headers=admin_headers)

    assert rejected.status_code == 200
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["rejectionReason"] == "Offer rejected by admin"
    assert active.status_code == 400


def test_verification_review_tells_the_owner(client, marketplace, admin_headers):
    response = client.post(
        f"/admin/accounts/{marketplace.buyer.id}/verification/reject",
        json={"reason": "Blurry scan"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["verificationStatus"] == "rejected"
    assert response.json()["verificationNotes"] == "Blurry scan"
    with SessionLocal() as session:
        [notification] = NotificationRepository(session).list_for_user(marketplace.buyer.id)
    assert notification.title == "驗證被拒絕 ❌"
    assert notification.data["rejectionReason"] == "Blurry scan"
