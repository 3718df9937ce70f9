"""Tests for the administrator invoice endpoints."""

from __future__ import annotations

from io import BytesIO

import pytest
from openpyxl import load_workbook


@pytest.fixture
def admin_headers(client, marketplace, auth_headers):
    return auth_headers("admin@clearlot.com", admin=True)


def test_enriched_purchase_listing(client, marketplace, admin_headers):
    response = client.get("/admin/invoices/purchases", headers=admin_headers)

    assert response.status_code == 200
    [purchase] = response.json()
    assert purchase["id"] == marketplace.purchase.id
    assert purchase["offer"]["title"] == "Cotton T-shirts"
    assert purchase["buyer"]["company"] == "Buyer Co"
    assert purchase["seller"]["company"] == "Seller Co"
    assert purchase["finalAmount"] == 1030.0


def test_default_template_is_built_in_until_one_is_stored(client, marketplace, admin_headers):
    response = client.get("/admin/invoices/templates/default", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["id"] == "default-1"
    assert response.json()["settings"]["styling"]["primaryColor"] == "#2563eb"


def test_template_lifecycle(client, marketplace, admin_headers):
    created = client.post(
        "/admin/invoices/templates",
        json={
            "name": "Red",
            "isDefault": True,
            "settings": {"styling": {"primaryColor": "#ff0000"}},
        },
        headers=admin_headers,
    )
    assert created.status_code == 201
    template = created.json()
    assert template["settings"]["styling"]["primaryColor"] == "#ff0000"
    assert template["settings"]["header"]["title"] == "發票 / INVOICE"

    default = client.get("/admin/invoices/templates/default", headers=admin_headers).json()
    assert default["id"] == template["id"]

    updated = client.put(
        f"/admin/invoices/templates/{template['id']}",
        json={"name": "Crimson"},
        headers=admin_headers,
    )
    assert updated.json()["name"] == "Crimson"
    assert updated.json()["settings"]["styling"]["primaryColor"] == "#ff0000"

    listing = client.get("/admin/invoices/templates", headers=admin_headers).json()
    assert [item["name"] for item in listing] == ["Crimson"]

    path = f"/admin/invoices/templates/{template['id']}"
    assert client.delete(path, headers=admin_headers).status_code == 204
    assert client.delete(path, headers=admin_headers).status_code == 404


def test_invalid_template_colour_is_rejected(client, marketplace, admin_headers):
    response = client.post(
        "/admin/invoices/templates",
        json={"name": "Bad", "settings": {"styling": {"primaryColor": "red"}}},
        headers=admin_headers,
    )

    assert response.status_code == 422


def test_logo_upload_requires_storage(client, marketplace, admin_headers):
    template = client.post(
        "/admin/invoices/templates", json={"name": "Logo"}, headers=admin_headers
    ).json()

    response = client.post(
        f"/admin/invoices/templates/{template['id']}/logo",
        files={"file": ("logo.png", b"\x89PNG fake", "image/png")},
        headers=admin_headers,
    )

    assert response.status_code == 503


def test_excel_invoice_download(client, marketplace, admin_headers):
    response = client.get(
        f"/admin/invoices/{marketplace.purchase.id}/excel", headers=admin_headers
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    disposition = response.headers["content-disposition"]
    assert f'filename="invoice_{marketplace.purchase.id}_' in disposition
    assert disposition.endswith('.xlsx"')
    workbook = load_workbook(BytesIO(response.content))
    values = [cell for row in workbook.active.iter_rows(values_only=True) for cell in row if cell]
    assert "公司名稱 / Company: Buyer Co" in values


def test_pdf_invoice_download(client, marketplace, admin_headers):
    response = client.get(
        f"/admin/invoices/{marketplace.purchase.id}/pdf", headers=admin_headers
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_archiving_without_storage_fails_cleanly(client, marketplace, admin_headers):
    response = client.get(
        f"/admin/invoices/{marketplace.purchase.id}/pdf",
        params={"archive": True},
        headers=admin_headers,
    )

    assert response.status_code == 503


def test_unknown_purchase_or_template(client, marketplace, admin_headers):
    missing_purchase = client.get("/admin/invoices/missing/excel", headers=admin_headers)
    missing_template = client.get(
        f"/admin/invoices/{marketplace.purchase.id}/excel",
        params={"template_id": "missing"},
        headers=admin_headers,
    )

    assert missing_purchase.status_code == 404
    assert missing_template.status_code == 404
