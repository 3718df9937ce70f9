"""Use case for producing invoice documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal

from sqlalchemy.orm import Session

from clearlot.infrastructure.invoices import (
    EXCEL_CONTENT_TYPE,
    PDF_CONTENT_TYPE,
    InvoiceData,
    archive_invoice,
    default_invoice_filename,
    render_invoice_excel,
    render_invoice_pdf,
)
from clearlot.infrastructure.repositories import (
    AccountRepository,
    OfferRepository,
    PurchaseRepository,
)
from clearlot.infrastructure.storage import StorageConfigurationError, is_storage_configured

from .templates import get_default_invoice_template, get_invoice_template

logger = logging.getLogger(__name__)

InvoiceFormat = Literal["excel", "pdf"]

_FORMATS = {
    "excel": ("xlsx", EXCEL_CONTENT_TYPE, render_invoice_excel),
    "pdf": ("pdf", PDF_CONTENT_TYPE, render_invoice_pdf),
}


@dataclass
class GeneratedInvoice:
    """Rendered invoice ready to be downloaded."""

    filename: str
    content: bytes
    content_type: str
    url: str | None = None


def load_invoice_data(
    session: Session, purchase_id: str, *, template_id: str | None = None
) -> InvoiceData:
    """Collect the records printed on the invoice of ``purchase_id``.

    Missing offer, buyer or seller records are left empty; the renderers print
    placeholders for them.
    """

    purchase = PurchaseRepository(session).get(purchase_id)
    if purchase is None:
        raise ValueError(f"Purchase with id {purchase_id} not found")
    accounts = AccountRepository(session).get_map_by_ids(
        [purchase.buyer_id, purchase.seller_id]
    )
    if template_id:
        template = get_invoice_template(session, template_id)
    else:
        template = get_default_invoice_template(session)
    return InvoiceData(
        purchase=purchase,
        offer=OfferRepository(session).get(purchase.offer_id),
        buyer=accounts.get(purchase.buyer_id),
        seller=accounts.get(purchase.seller_id),
        template=template,
    )


def generate_invoice(
    session: Session,
    purchase_id: str,
    *,
    output_format: InvoiceFormat = "excel",
    template_id: str | None = None,
    archive: bool = False,
    today: date | None = None,
    generated_at: datetime | None = None,
) -> GeneratedInvoice:
    """Render the invoice of ``purchase_id`` and optionally archive it."""

    if output_format not in _FORMATS:
        raise ValueError(f"Unsupported invoice format: {output_format}")
    extension, content_type, render = _FORMATS[output_format]
    if archive and not is_storage_configured():
        raise StorageConfigurationError("Blob storage is not configured")

    data = load_invoice_data(session, purchase_id, template_id=template_id)
    content = render(data, generated_at=generated_at)
    filename = default_invoice_filename(purchase_id, extension, today)
    logger.info("Generated %s invoice for purchase %s", output_format, purchase_id)

    url = None
    if archive:
        url = archive_invoice(purchase_id, filename, content, content_type=content_type)
    return GeneratedInvoice(
        filename=filename, content=content, content_type=content_type, url=url
    )


__all__ = ["GeneratedInvoice", "InvoiceFormat", "generate_invoice", "load_invoice_data"]
