"""Domain entity describing how invoices are laid out and styled."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Any

DEFAULT_INVOICE_TITLE = "發票 / INVOICE"
DEFAULT_PLATFORM_NAME = "Clearlot Platform"


@dataclass
class InvoiceHeader:
    title: str = DEFAULT_INVOICE_TITLE
    subtitle: str = DEFAULT_PLATFORM_NAME
    logo_url: str | None = None
    show_logo: bool = True


@dataclass
class InvoiceCompany:
    name: str = DEFAULT_PLATFORM_NAME
    address: str = "Hong Kong"
    phone: str = "+852-XXXX-XXXX"
    email: str = "info@clearlot.com"
    show_company_info: bool = True


@dataclass
class InvoiceStyling:
    primary_color: str = "#2563eb"
    secondary_color: str = "#64748b"
    font_family: str = "Arial"
    font_size: int = 12


@dataclass
class InvoiceSections:
    show_buyer_info: bool = True
    show_seller_info: bool = True
    show_product_table: bool = True
    show_payment_info: bool = True
    show_delivery_info: bool = True
    show_footer: bool = True
    footer_text: str = ""


@dataclass
class InvoiceSettings:
    """Visual settings applied when rendering an invoice."""

    header: InvoiceHeader = field(default_factory=InvoiceHeader)
    company: InvoiceCompany = field(default_factory=InvoiceCompany)
    styling: InvoiceStyling = field(default_factory=InvoiceStyling)
    sections: InvoiceSections = field(default_factory=InvoiceSections)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "InvoiceSettings":
        """Build settings from a stored payload, filling any missing value."""

        payload = payload or {}

        def _section(section_cls, key: str):
            raw = payload.get(key) or {}
            names = {item.name for item in fields(section_cls)}
            return section_cls(**{name: raw[name] for name in names if name in raw})

        return cls(
            header=_section(InvoiceHeader, "header"),
            company=_section(InvoiceCompany, "company"),
            styling=_section(InvoiceStyling, "styling"),
            sections=_section(InvoiceSections, "sections"),
        )


@dataclass
class InvoiceTemplate:
    """Named, reusable invoice settings."""

    id: str | None
    name: str
    is_default: bool = False
    settings: InvoiceSettings = field(default_factory=InvoiceSettings)
    created_at: datetime | None = None
    updated_at: datetime | None = None


def build_default_invoice_template() -> InvoiceTemplate:
    """Return the built-in template used when none is stored."""

    return InvoiceTemplate(id="default-1", name="Default Template", is_default=True)


__all__ = [
    "DEFAULT_INVOICE_TITLE",
    "DEFAULT_PLATFORM_NAME",
    "InvoiceCompany",
    "InvoiceHeader",
    "InvoiceSections",
    "InvoiceSettings",
    "InvoiceStyling",
    "InvoiceTemplate",
    "build_default_invoice_template",
]
