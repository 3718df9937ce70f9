"""Fixtures shared by the HTTP and websocket route tests."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient

from clearlot.domain.entities import Account, Offer, Purchase
from clearlot.infrastructure.database import SessionLocal
from clearlot.infrastructure.repositories import (
    AccountRepository,
    OfferRepository,
    PurchaseRepository,
    WatchlistRepository,
)
from clearlot.infrastructure.security import get_password_hash

PASSWORD = "Secret123"


@dataclass
class Marketplace:
    admin: Account
    buyer: Account
    seller: Account
    offer: Offer
    purchase: Purchase


def create_account(email: str, *, company: str, is_admin: bool = False, status: str = "active") -> Account:
    with SessionLocal() as session:
        return AccountRepository(session).create(
            Account(
                id=None,
                email=email,
                password=get_password_hash(PASSWORD),
                company=company,
                is_admin=is_admin,
                status=status,
            )
        )


@pytest.fixture
def client(reset_database):
    from main import create_app

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def marketplace(reset_database) -> Marketplace:
    admin = create_account("admin@clearlot.com", company="Clearlot", is_admin=True)
    buyer = create_account("buyer@example.com", company="Buyer Co")
    seller = create_account("seller@example.com", company="Seller Co")
    with SessionLocal() as session:
        offer = OfferRepository(session).create(
            Offer(
                id=None,
                offer_code="OFF-001",
                title="Cotton T-shirts",
                supplier_id=seller.id,
                current_price=100.0,
                original_price=150.0,
                quantity=500,
            )
        )
        purchase = PurchaseRepository(session).create(
            Purchase(
                id=None,
                offer_id=offer.id,
                buyer_id=buyer.id,
                seller_id=seller.id,
                quantity=10,
                unit_price=100.0,
                total_amount=1000.0,
                platform_fee=30.0,
                final_amount=1030.0,
                previous_status="pending",
            )
        )
        WatchlistRepository(session).add(buyer.id, offer.id)
    return Marketplace(admin=admin, buyer=buyer, seller=seller, offer=offer, purchase=purchase)


def _login(client: TestClient, email: str, *, admin: bool = False) -> str:
    path = "/auth/admin/token" if admin else "/auth/token"
    response = client.post(path, data={"username": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


@pytest.fixture
def login(client: TestClient):
    """Return a callable signing an account in and returning its token."""

    def _sign_in(email: str, *, admin: bool = False) -> str:
        return _login(client, email, admin=admin)

    return _sign_in


@pytest.fixture
def auth_headers(login):
    def _headers(email: str, *, admin: bool = False) -> dict[str, str]:
        return {"Authorization": f"Bearer {login(email, admin=admin)}"}

    return _headers


@pytest.fixture
def make_account(reset_database):
    return create_account
