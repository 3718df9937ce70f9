"""Blob storage helpers for generated invoices and template logos."""

from __future__ import annotations

import logging
import re
from uuid import uuid4

from clearlot.infrastructure.storage import upload_blob

logger = logging.getLogger(__name__)

INVOICE_PREFIX = "Invoices"
LOGO_PREFIX = "InvoiceLogos"


def _sanitize_filename(name: str) -> str:
    """Return ``name`` transformed into a storage-safe file name."""

    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", name.strip())
    cleaned = cleaned.strip("_.")
    return cleaned or "file"


def build_invoice_blob_path(purchase_id: str, filename: str) -> str:
    return f"{INVOICE_PREFIX}/{purchase_id}/{_sanitize_filename(filename)}"


def archive_invoice(
    purchase_id: str, filename: str, content: bytes, *, content_type: str
) -> str:
    """Store a generated invoice and return its blob URL."""

    blob_path = build_invoice_blob_path(purchase_id, filename)
    url = upload_blob(blob_path, content, content_type=content_type)
    logger.info("Archived invoice for purchase %s at %s", purchase_id, blob_path)
    return url


def upload_invoice_logo(
    template_id: str, filename: str, content: bytes, *, content_type: str | None
) -> str:
    """Store a template logo and return its blob URL."""

    blob_path = f"{LOGO_PREFIX}/{template_id}/{uuid4().hex}-{_sanitize_filename(filename)}"
    return upload_blob(blob_path, content, content_type=content_type)


__all__ = [
    "INVOICE_PREFIX",
    "LOGO_PREFIX",
    "archive_invoice",
    "build_invoice_blob_path",
    "upload_invoice_logo",
]
