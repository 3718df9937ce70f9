"""Use cases for managing invoice templates."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from sqlalchemy.orm import Session

from clearlot.domain.entities import (
    InvoiceSettings,
    InvoiceTemplate,
    build_default_invoice_template,
)
from clearlot.infrastructure.invoices import upload_invoice_logo
from clearlot.infrastructure.repositories import InvoiceTemplateRepository
from clearlot.infrastructure.storage import StorageConfigurationError, is_storage_configured

logger = logging.getLogger(__name__)

ALLOWED_LOGO_CONTENT_TYPES = frozenset(
    {"image/png", "image/jpeg", "image/gif", "image/svg+xml", "image/webp"}
)
MAX_LOGO_BYTES = 2 * 1024 * 1024


def list_invoice_templates(session: Session) -> Sequence[InvoiceTemplate]:
    return InvoiceTemplateRepository(session).list()


def get_default_invoice_template(session: Session) -> InvoiceTemplate:
    """Return the stored default, the first stored template or the built-in one."""

    templates = InvoiceTemplateRepository(session).list()
    for template in templates:
        if template.is_default:
            return template
    if templates:
        return templates[0]
    return build_default_invoice_template()


def get_invoice_template(session: Session, template_id: str) -> InvoiceTemplate:
    template = InvoiceTemplateRepository(session).get(template_id)
    if template is None:
        if template_id == build_default_invoice_template().id:
            return build_default_invoice_template()
        raise ValueError(f"Invoice template with id {template_id} not found")
    return template


def create_invoice_template(
    session: Session,
    *,
    name: str,
    settings: InvoiceSettings | None = None,
    is_default: bool = False,
) -> InvoiceTemplate:
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("Template name is required")
    template = InvoiceTemplate(
        id=None,
        name=cleaned,
        is_default=is_default,
        settings=settings or InvoiceSettings(),
    )
    created = InvoiceTemplateRepository(session).create(template)
    logger.info("Invoice template %s created", created.id)
    return created


def update_invoice_template(
    session: Session,
    template_id: str,
    *,
    name: str | None = None,
    settings: InvoiceSettings | None = None,
    is_default: bool | None = None,
) -> InvoiceTemplate:
    repository = InvoiceTemplateRepository(session)
    current = repository.get(template_id)
    if current is None:
        raise ValueError(f"Invoice template with id {template_id} not found")
    if name is not None and not name.strip():
        raise ValueError("Template name is required")
    updated = replace(
        current,
        name=name.strip() if name is not None else current.name,
        settings=settings if settings is not None else current.settings,
        is_default=is_default if is_default is not None else current.is_default,
    )
    return repository.update(updated)


def delete_invoice_template(session: Session, template_id: str) -> None:
    InvoiceTemplateRepository(session).delete(template_id)
    logger.info("Invoice template %s deleted", template_id)


def upload_template_logo(
    session: Session,
    template_id: str,
    *,
    filename: str,
    content: bytes,
    content_type: str | None,
) -> InvoiceTemplate:
    """Store a logo image and point the template header at it.

    Raises:
        ValueError: If the template does not exist or the file is not an
            accepted image.
        StorageConfigurationError: If blob storage is not configured.
    """

    repository = InvoiceTemplateRepository(session)
    template = repository.get(template_id)
    if template is None:
        raise ValueError(f"Invoice template with id {template_id} not found")
    if content_type not in ALLOWED_LOGO_CONTENT_TYPES:
        raise ValueError("Logo must be a PNG, JPEG, GIF, SVG or WebP image")
    if not content:
        raise ValueError("Logo file is empty")
    if len(content) > MAX_LOGO_BYTES:
        raise ValueError("Logo must be smaller than 2 MB")
    if not is_storage_configured():
        raise StorageConfigurationError("Blob storage is not configured")

    url = upload_invoice_logo(template_id, filename, content, content_type=content_type)
    settings = template.settings
    header = replace(settings.header, logo_url=url, show_logo=True)
    return repository.update(replace(template, settings=replace(settings, header=header)))


__all__ = [
    "create_invoice_template",
    "delete_invoice_template",
    "get_default_invoice_template",
    "get_invoice_template",
    "list_invoice_templates",
    "update_invoice_template",
    "upload_template_logo",
]
