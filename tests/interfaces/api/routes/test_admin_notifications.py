"""Tests for the administrator notification area."""

from __future__ import annotations

import pytest

from clearlot.domain.entities import Offer
from clearlot.infrastructure.database import SessionLocal
from clearlot.infrastructure.repositories import NotificationRepository, OfferRepository


@pytest.fixture
def admin_headers(client, marketplace, auth_headers):
    return auth_headers("admin@clearlot.com", admin=True)


@pytest.fixture
def review_queue(client, marketplace, auth_headers):
    buyer = auth_headers("buyer@example.com")
    client.post(
        "/purchases",
        json={"offerId": marketplace.offer.id, "quantity": 5, "receiptUrl": "https://r/1.png"},
        headers=buyer,
    )
    client.put(
        "/accounts/me/verification-documents",
        json={
            "documents": {
                "businessRegistration": "https://d/br.pdf",
                "taxCertificate": "https://d/tax.pdf",
            }
        },
        headers=buyer,
    )
    with SessionLocal() as session:
        OfferRepository(session).create(
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
    return marketplace


def test_feed_lists_everything_waiting_for_review(client, review_queue, admin_headers):
    response = client.get("/admin/notifications/feed", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    [receipt] = body["paymentReceipts"]
    assert receipt["buyerCompany"] == "Buyer Co"
    assert receipt["finalAmount"] == 515.0
    assert receipt["receiptUrl"] == "https://r/1.png"
    assert receipt["status"] == "pending"
    assert [item["title"] for item in body["offerUploads"]] == ["Denim Jackets"]
    assert body["offerUploads"][0]["sellerCompany"] == "Seller Co"
    assert sorted(item["id"] for item in body["verificationDocuments"]) == [
        f"{review_queue.buyer.id}_businessRegistration",
        f"{review_queue.buyer.id}_taxCertificate",
    ]
    assert body["unreadCount"] == 1
    assert body["pendingCount"] == 4


def test_unread_count_drops_after_marking_read(client, review_queue, admin_headers):
    client.post("/notifications/read-all", headers=admin_headers)

    body = client.get("/admin/notifications/feed", headers=admin_headers).json()

    assert body["unreadCount"] == 0
    assert len(body["paymentReceipts"]) == 1


def test_feed_is_admin_only(client, marketplace, auth_headers):
    response = client.get("/admin/notifications/feed", headers=auth_headers("buyer@example.com"))

    assert response.status_code == 403


def test_system_message_reaches_every_active_account(
    client, marketplace, make_account, admin_headers
):
    suspended = make_account("gone@example.com", company="Gone Ltd", status="suspended")

    response = client.post(
        "/admin/notifications/system",
        json={"title": "Maintenance", "message": "Back at 02:00"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json() == {"recipients": 3}
    with SessionLocal() as session:
        repository = NotificationRepository(session)
        [received] = repository.list_for_user(marketplace.buyer.id)
        assert repository.list_for_user(suspended.id) == []
    assert received.type == "system"
    assert received.title == "Maintenance"


def test_system_message_requires_an_admin(client, marketplace, auth_headers):
    response = client.post(
        "/admin/notifications/system",
        json={"title": "Hi", "message": "There"},
        headers=auth_headers("buyer@example.com"),
    )

    assert response.status_code == 403
