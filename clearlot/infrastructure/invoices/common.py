"""Shared helpers for the invoice renderers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Final

from clearlot.domain.entities import (
    Account,
    InvoiceSettings,
    InvoiceTemplate,
    Offer,
    Purchase,
)
from clearlot.utils import format_display_datetime, now_in_app_timezone

DEFAULT_PRIMARY_ARGB: Final[str] = "FF2563EB"
DEFAULT_FOOTER_TEXT: Final[str] = (
    "此發票由 Clearlot 平台自動生成 / This invoice is automatically generated by Clearlot Platform"
)
NOT_AVAILABLE: Final[str] = "N/A"
BUYER_NOT_AVAILABLE: Final[str] = "買方資料不詳 / Buyer information not available"
SELLER_NOT_AVAILABLE: Final[str] = "賣方資料不詳 / Seller information not available"
PRODUCT_NOT_AVAILABLE: Final[str] = "產品名稱不詳 / Product name not available"
PAYMENT_METHOD_LABEL: Final[str] = "付款方式 / Payment Method: 銀行轉帳 / Bank Transfer"
TABLE_HEADERS: Final[tuple[str, ...]] = (
    "產品名稱 / Product",
    "數量 / Qty",
    "單價 / Unit Price",
    "總額 / Total",
)

EXCEL_CONTENT_TYPE: Final[str] = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
)
PDF_CONTENT_TYPE: Final[str] = "application/pdf"

_HEX_PATTERN = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


@dataclass
class InvoiceData:
    """Everything needed to render one invoice."""

    purchase: Purchase
    offer: Offer | None = None
    buyer: Account | None = None
    seller: Account | None = None
    template: InvoiceTemplate | None = None

    @property
    def settings(self) -> InvoiceSettings:
        if self.template is None:
            return InvoiceSettings()
        return self.template.settings


def format_currency(amount: float | int | None) -> str:
    return f"HK$ {float(amount or 0):.2f}"


def format_invoice_date(value: str | datetime | None) -> str:
    return format_display_datetime(value)


def hex_to_argb(value: str | None) -> str:
    """Convert ``#rrggbb`` into the ``AARRGGBB`` form used by spreadsheets."""

    match = _HEX_PATTERN.match(value or "")
    if not match:
        return DEFAULT_PRIMARY_ARGB
    return "FF" + "".join(match.groups()).upper()


def hex_to_rgb(value: str | None) -> tuple[float, float, float]:
    """Convert ``#rrggbb`` into an ``(r, g, b)`` tuple of floats in ``0..1``."""

    argb = hex_to_argb(value)
    return tuple(int(argb[index : index + 2], 16) / 255 for index in (2, 4, 6))  # type: ignore[return-value]


def payment_detail(purchase: Purchase, key: str) -> Any:
    return (purchase.payment_details or {}).get(key)


def logo_label(logo_url: str) -> str:
    return f"[LOGO: {logo_url.rstrip('/').split('/')[-1]}]"


def default_invoice_filename(
    purchase_id: str, extension: str, today: date | None = None
) -> str:
    """Return ``invoice_<purchase id>_<YYYY-MM-DD>.<extension>``."""

    day = today or now_in_app_timezone().date()
    return f"invoice_{purchase_id}_{day.isoformat()}.{extension.lstrip('.')}"


def generated_label(generated_at: datetime | None = None) -> str:
    return f"生成時間 / Generated: {format_invoice_date(generated_at or now_in_app_timezone())}"


@dataclass(frozen=True)
class InvoiceLine:
    """One logical row of the invoice layout.

    ``kind`` selects the styling applied by a renderer; ``values`` holds the
    cell contents (a single entry except for table rows).
    """

    kind: str
    values: tuple[Any, ...] = ()

    @property
    def text(self) -> str:
        return str(self.values[0]) if self.values else ""


def _line(kind: str, *values: Any) -> InvoiceLine:
    return InvoiceLine(kind, tuple(values))


BLANK = InvoiceLine("blank")


def build_invoice_lines(
    data: InvoiceData, *, generated_at: datetime | None = None
) -> list[InvoiceLine]:
    """Lay out the sections enabled by the template, top to bottom."""

    settings = data.settings
    header, company, sections = settings.header, settings.company, settings.sections
    purchase = data.purchase
    lines: list[InvoiceLine] = []

    if header.logo_url and header.show_logo:
        lines.append(_line("logo", logo_label(header.logo_url)))
    lines.append(_line("title", header.title))
    lines.append(_line("subtitle", header.subtitle))
    lines.append(BLANK)

    if company.show_company_info:
        lines.append(_line("company", company.name))
        lines.append(_line("text", company.address))
        lines.append(_line("text", f"Phone: {company.phone}"))
        lines.append(_line("text", f"Email: {company.email}"))
        lines.append(BLANK)

    transaction_id = payment_detail(purchase, "transactionId") or NOT_AVAILABLE
    lines.append(_line("detail", f"發票編號 / Invoice No: {purchase.id}"))
    lines.append(_line("detail", f"日期 / Date: {format_invoice_date(purchase.purchase_date)}"))
    lines.append(_line("detail", f"交易編號 / Transaction ID: {transaction_id}"))
    lines.append(BLANK)

    if sections.show_buyer_info:
        lines.append(_line("heading", "買方資料 / Buyer Information"))
        if data.buyer is not None:
            lines.append(
                _line("detail", f"公司名稱 / Company: {data.buyer.company or NOT_AVAILABLE}")
            )
        else:
            lines.append(_line("detail", BUYER_NOT_AVAILABLE))
        lines.append(BLANK)

    if sections.show_seller_info:
        lines.append(_line("heading", "賣方資料 / Seller Information"))
        if data.seller is not None:
            lines.append(
                _line("detail", f"公司名稱 / Company: {data.seller.company or NOT_AVAILABLE}")
            )
        else:
            lines.append(_line("detail", SELLER_NOT_AVAILABLE))
        lines.append(BLANK)

    if sections.show_product_table:
        product_name = data.offer.title if data.offer and data.offer.title else PRODUCT_NOT_AVAILABLE
        lines.append(_line("heading", "產品詳情 / Product Details"))
        lines.append(_line("table_header", *TABLE_HEADERS))
        lines.append(
            _line(
                "table_row",
                product_name,
                purchase.quantity,
                format_currency(purchase.unit_price),
                format_currency(purchase.total_amount),
            )
        )
        lines.append(BLANK)
        lines.append(_line("summary", f"小計 / Subtotal: {format_currency(purchase.total_amount)}"))
        lines.append(
            _line("summary", f"平台費用 / Platform Fee: {format_currency(purchase.platform_fee)}")
        )
        lines.append(_line("total", f"總計 / Total: {format_currency(purchase.final_amount)}"))
        lines.append(BLANK)

    if sections.show_payment_info:
        lines.append(_line("heading", "付款資訊 / Payment Information"))
        lines.append(_line("detail", PAYMENT_METHOD_LABEL))
        payment_status = payment_detail(purchase, "status") or NOT_AVAILABLE
        lines.append(_line("detail", f"付款狀態 / Payment Status: {payment_status}"))
        paid_at = payment_detail(purchase, "timestamp")
        if paid_at:
            lines.append(_line("detail", f"付款時間 / Payment Time: {format_invoice_date(paid_at)}"))
        lines.append(BLANK)

    delivery = purchase.delivery_details
    if sections.show_delivery_info and delivery:
        lines.append(_line("heading", "送貨地址 / Delivery Address"))
        lines.append(_line("detail", f"地區 / District: {delivery.get('district', '')}"))
        lines.append(_line("detail", f"分區 / Subdivision: {delivery.get('subdivision', '')}"))
        lines.append(_line("detail", f"地址 / Address: {delivery.get('address1', '')}"))
        if delivery.get("address2"):
            lines.append(_line("detail", delivery["address2"]))
        lines.append(
            _line("detail", f"聯絡人 / Contact Person: {delivery.get('contactPersonName', '')}")
        )
        lines.append(
            _line("detail", f"聯絡電話 / Contact Phone: {delivery.get('contactPersonPhone', '')}")
        )
        lines.append(BLANK)

    if sections.show_footer:
        lines.append(_line("footer", sections.footer_text or DEFAULT_FOOTER_TEXT))
        lines.append(_line("footer", generated_label(generated_at)))

    return lines


__all__ = [
    "BLANK",
    "BUYER_NOT_AVAILABLE",
    "InvoiceLine",
    "build_invoice_lines",
    "DEFAULT_FOOTER_TEXT",
    "DEFAULT_PRIMARY_ARGB",
    "EXCEL_CONTENT_TYPE",
    "InvoiceData",
    "NOT_AVAILABLE",
    "PAYMENT_METHOD_LABEL",
    "PDF_CONTENT_TYPE",
    "PRODUCT_NOT_AVAILABLE",
    "SELLER_NOT_AVAILABLE",
    "TABLE_HEADERS",
    "default_invoice_filename",
    "format_currency",
    "format_invoice_date",
    "generated_label",
    "hex_to_argb",
    "hex_to_rgb",
    "logo_label",
    "payment_detail",
]
