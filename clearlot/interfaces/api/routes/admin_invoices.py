"""Administrator endpoints for invoices and invoice templates."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    Query,
    Response,
    UploadFile,
    status,
)
from sqlalchemy.orm import Session

from clearlot.application.use_cases.invoices import (
    PurchaseLoadTimeoutError,
    build_repository_fetchers,
    create_invoice_template,
    delete_invoice_template,
    enrich_purchases,
    generate_invoice,
    get_default_invoice_template,
    list_invoice_templates,
    load_purchases_for_admin,
    update_invoice_template,
    upload_template_logo,
)
from clearlot.config import get_settings
from clearlot.domain.entities import Account
from clearlot.infrastructure.database import get_db
from clearlot.infrastructure.storage import StorageConfigurationError
from clearlot.interfaces.api.dependencies import get_session_factory, require_admin
from clearlot.interfaces.api.schemas import (
    EnrichedPurchaseRead,
    InvoiceTemplateCreate,
    InvoiceTemplateRead,
    InvoiceTemplateUpdate,
)

router = APIRouter(prefix="/admin/invoices", tags=["admin-invoices"])
logger = logging.getLogger(__name__)


def _value_error_to_http(exc: ValueError) -> HTTPException:
    detail = str(exc)
    status_code = status.HTTP_400_BAD_REQUEST
    if detail.endswith("not found"):
        status_code = status.HTTP_404_NOT_FOUND
    return HTTPException(status_code=status_code, detail=detail)


def _storage_unavailable(exc: StorageConfigurationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.get("/purchases", response_model=list[EnrichedPurchaseRead])
async def list_enriched_purchases(
    session_factory=Depends(get_session_factory),
    _: Account = Depends(require_admin),
) -> list[EnrichedPurchaseRead]:
    """Return every purchase with its offer, buyer and seller attached."""

    settings = get_settings()
    fetch_all, fetch_offer, fetch_account = build_repository_fetchers(session_factory)
    try:
        purchases = await load_purchases_for_admin(
            fetch_all, timeout=settings.purchase_load_timeout_seconds
        )
    except PurchaseLoadTimeoutError as exc:
        raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(exc)) from exc

    enriched = await enrich_purchases(
        purchases,
        fetch_offer,
        fetch_account,
        batch_size=settings.enrichment_batch_size,
        batch_delay=settings.enrichment_batch_delay_seconds,
        field_timeout=settings.enrichment_field_timeout_seconds,
    )
    return [EnrichedPurchaseRead.from_entity(item) for item in enriched]


@router.get("/templates", response_model=list[InvoiceTemplateRead])
def list_templates(
    db: Session = Depends(get_db),
    _: Account = Depends(require_admin),
) -> list[InvoiceTemplateRead]:
    return [InvoiceTemplateRead.from_entity(template) for template in list_invoice_templates(db)]


@router.get("/templates/default", response_model=InvoiceTemplateRead)
def get_default_template(
    db: Session = Depends(get_db),
    _: Account = Depends(require_admin),
) -> InvoiceTemplateRead:
    return InvoiceTemplateRead.from_entity(get_default_invoice_template(db))


@router.post(
    "/templates",
    response_model=InvoiceTemplateRead,
    status_code=status.HTTP_201_CREATED,
)
def create_template(
    template_in: InvoiceTemplateCreate,
    db: Session = Depends(get_db),
    _: Account = Depends(require_admin),
) -> InvoiceTemplateRead:
    try:
        template = create_invoice_template(
            db,
            name=template_in.name,
            settings=template_in.settings.to_entity(),
            is_default=template_in.is_default,
        )
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return InvoiceTemplateRead.from_entity(template)


@router.put("/templates/{template_id}", response_model=InvoiceTemplateRead)
def update_template(
    template_id: str,
    template_in: InvoiceTemplateUpdate,
    db: Session = Depends(get_db),
    _: Account = Depends(require_admin),
) -> InvoiceTemplateRead:
    try:
        template = update_invoice_template(
            db,
            template_id,
            name=template_in.name,
            settings=template_in.settings.to_entity() if template_in.settings else None,
            is_default=template_in.is_default,
        )
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return InvoiceTemplateRead.from_entity(template)


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(
    template_id: str,
    db: Session = Depends(get_db),
    _: Account = Depends(require_admin),
) -> Response:
    try:
        delete_invoice_template(db, template_id)
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/templates/{template_id}/logo", response_model=InvoiceTemplateRead)
def upload_logo(
    template_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    _: Account = Depends(require_admin),
) -> InvoiceTemplateRead:
    """Upload a logo image and show it on invoices using this template."""

    content = file.file.read()
    try:
        template = upload_template_logo(
            db,
            template_id,
            filename=file.filename or "logo",
            content=content,
            content_type=file.content_type,
        )
    except StorageConfigurationError as exc:
        raise _storage_unavailable(exc) from exc
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc
    return InvoiceTemplateRead.from_entity(template)


@router.get("/{purchase_id}/{output_format}")
def download_invoice(
    purchase_id: str,
    output_format: Literal["excel", "pdf"],
    template_id: str | None = Query(default=None),
    archive: bool = Query(default=False),
    db: Session = Depends(get_db),
    _: Account = Depends(require_admin),
) -> Response:
    """Render the invoice of a purchase as an Excel workbook or a PDF."""

    try:
        invoice = generate_invoice(
            db,
            purchase_id,
            output_format=output_format,
            template_id=template_id,
            archive=archive,
        )
    except StorageConfigurationError as exc:
        raise _storage_unavailable(exc) from exc
    except ValueError as exc:
        raise _value_error_to_http(exc) from exc

    headers = {"Content-Disposition": f'attachment; filename="{invoice.filename}"'}
    if invoice.url:
        headers["X-Invoice-Url"] = invoice.url
    return Response(content=invoice.content, media_type=invoice.content_type, headers=headers)
