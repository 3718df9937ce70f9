"""Tests for the buyer and seller marketplace endpoints."""

from __future__ import annotations

import pytest

from clearlot.infrastructure.database import SessionLocal
from clearlot.infrastructure.repositories import NotificationRepository, OfferRepository


def _notification_types(user_id: str) -> list[str]:
    with SessionLocal() as session:
        return sorted(item.type for item in NotificationRepository(session).list_for_user(user_id))


@pytest.fixture
def buyer_headers(client, marketplace, auth_headers):
    return auth_headers("buyer@example.com")


def test_following_an_offer_is_confirmed_once(client, marketplace, make_account, auth_headers):
    fan = make_account("fan@example.com", company="Fan Co")
    headers = auth_headers("fan@example.com")
    path = f"/watchlist/{marketplace.offer.id}"

    first = client.post(path, headers=headers)
    second = client.post(path, headers=headers)

    assert first.status_code == second.status_code == 201
    assert first.json()["id"] == second.json()["id"]
    assert _notification_types(fan.id) == ["watchlist"]


def test_own_and_unknown_offers_cannot_be_followed(client, marketplace, auth_headers):
    headers = auth_headers("seller@example.com")

    own = client.post(f"/watchlist/{marketplace.offer.id}", headers=headers)
    unknown = client.post("/watchlist/missing", headers=headers)

    assert own.status_code == 400
    assert unknown.status_code == 404
    assert _notification_types(marketplace.seller.id) == []


def test_watchlist_lists_followed_offers(client, marketplace, buyer_headers):
    response = client.get("/watchlist", headers=buyer_headers)

    assert response.status_code == 200
    assert [item["offerId"] for item in response.json()] == [marketplace.offer.id]


def test_purchase_charges_the_platform_fee_and_notifies_everyone(
    client, marketplace, buyer_headers
):
    response = client.post(
        "/purchases",
        json={
            "offerId": marketplace.offer.id,
            "quantity": 5,
            "receiptUrl": "https://files.example.com/receipt.png",
        },
        headers=buyer_headers,
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["status"] == "pending"
    assert body["totalAmount"] == 500.0
    assert body["platformFee"] == 15.0
    assert body["finalAmount"] == 515.0
    with SessionLocal() as session:
        assert OfferRepository(session).get(marketplace.offer.id).quantity == 495
    assert _notification_types(marketplace.buyer.id) == ["order_status", "purchase"]
    assert _notification_types(marketplace.seller.id) == ["offer_purchased"]
    assert _notification_types(marketplace.admin.id) == ["payment"]


def test_buying_the_whole_lot_marks_the_offer_sold(client, marketplace, buyer_headers):
    response = client.post(
        "/purchases",
        json={"offerId": marketplace.offer.id, "quantity": 500, "receiptUrl": "r.png"},
        headers=buyer_headers,
    )

    assert response.status_code == 201
    with SessionLocal() as session:
        offer = OfferRepository(session).get(marketplace.offer.id)
    assert offer.quantity == 0
    assert offer.status == "sold"


@pytest.mark.parametrize(
    ("email", "quantity", "expected"),
    [
        ("seller@example.com", 5, 400),
        ("buyer@example.com", 501, 400),
        ("buyer@example.com", 0, 422),
    ],
)
def test_invalid_purchases_are_refused(client, marketplace, auth_headers, email, quantity, expected):
    response = client.post(
        "/purchases",
        json={"offerId": marketplace.offer.id, "quantity": quantity, "receiptUrl": "r.png"},
        headers=auth_headers(email),
    )

    assert response.status_code == expected
    assert _notification_types(marketplace.admin.id) == []


def test_uploading_verification_documents_queues_the_account(client, marketplace, buyer_headers):
    response = client.put(
        "/accounts/me/verification-documents",
        json={"documents": {"businessRegistration": "https://files.example.com/br.pdf"}},
        headers=buyer_headers,
    )

    assert response.status_code == 200
    assert response.json()["verificationStatus"] == "pending"
    assert _notification_types(marketplace.buyer.id) == ["verification_status"]


def test_unknown_document_type_is_refused(client, marketplace, buyer_headers):
    response = client.put(
        "/accounts/me/verification-documents",
        json={"documents": {"selfie": "https://files.example.com/me.png"}},
        headers=buyer_headers,
    )

    assert response.status_code == 400
