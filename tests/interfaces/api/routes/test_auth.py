"""Tests for the sign-in endpoints."""

from __future__ import annotations

from jose import jwt


def test_admin_sign_in_returns_an_admin_token(client, marketplace):
    response = client.post(
        "/auth/admin/token",
        data={"username": "ADMIN@clearlot.com", "password": "Secret123"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["is_admin"] is True
    claims = jwt.get_unverified_claims(body["access_token"])
    assert claims["sub"] == "admin@clearlot.com"
    assert claims["adm"] is True


def test_admin_sign_in_rejects_regular_accounts(client, marketplace):
    response = client.post(
        "/auth/admin/token",
        data={"username": "buyer@example.com", "password": "Secret123"},
    )

    assert response.status_code == 403
    assert response.json() == {"detail": "您沒有管理員權限"}


def test_admin_sign_in_with_unknown_email(client, marketplace):
    response = client.post(
        "/auth/admin/token",
        data={"username": "nobody@example.com", "password": "Secret123"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "找不到此電子郵件的帳戶"


def test_admin_sign_in_with_wrong_password(client, marketplace):
    response = client.post(
        "/auth/admin/token",
        data={"username": "admin@clearlot.com", "password": "wrong"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "密碼錯誤"


def test_regular_sign_in(client, marketplace):
    response = client.post(
        "/auth/token",
        data={"username": "buyer@example.com", "password": "Secret123"},
    )

    assert response.status_code == 200
    assert response.json()["is_admin"] is False


def test_suspended_accounts_cannot_sign_in(client, make_account):
    make_account("blocked@example.com", company="Blocked", status="suspended")

    response = client.post(
        "/auth/token",
        data={"username": "blocked@example.com", "password": "Secret123"},
    )

    assert response.status_code == 403


def test_admin_routes_require_an_admin(client, marketplace, auth_headers):
    response = client.get(
        "/admin/invoices/templates", headers=auth_headers("buyer@example.com")
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "您沒有管理員權限"


def test_tokens_are_revoked_when_the_status_changes(client, marketplace, auth_headers):
    admin_headers = auth_headers("admin@clearlot.com", admin=True)
    buyer_headers = auth_headers("buyer@example.com")
    assert client.get("/notifications/", headers=buyer_headers).status_code == 200

    response = client.patch(
        f"/admin/accounts/{marketplace.buyer.id}/status",
        json={"status": "suspended"},
        headers=admin_headers,
    )
    assert response.status_code == 200

    assert client.get("/notifications/", headers=buyer_headers).status_code == 401
