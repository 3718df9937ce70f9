"""Render invoices as Excel workbooks."""

from __future__ import annotations

from datetime import datetime
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.worksheet.page import PageMargins
from openpyxl.worksheet.worksheet import Worksheet

from .common import InvoiceData, InvoiceLine, build_invoice_lines, hex_to_argb

SHEET_TITLE = "Invoice"
COLUMN_WIDTHS = {"A": 50, "B": 15, "C": 20, "D": 20}
_WHITE = "FFFFFFFF"
_MUTED = "FF888888"
_THIN = Side(style="thin")
_CELL_BORDER = Border(top=_THIN, left=_THIN, bottom=_THIN, right=_THIN)
_ROW_HEIGHTS = {
    "logo": 60,
    "title": 25,
    "subtitle": 20,
    "heading": 20,
    "table_header": 25,
    "table_row": 25,
}


def _configure_page(worksheet: Worksheet) -> None:
    worksheet.page_setup.paperSize = worksheet.PAPERSIZE_A4
    worksheet.page_setup.orientation = worksheet.ORIENTATION_PORTRAIT
    worksheet.page_margins = PageMargins(
        left=0.5, right=0.5, top=0.5, bottom=0.5, header=0.3, footer=0.3
    )


def build_invoice_workbook(
    data: InvoiceData, *, generated_at: datetime | None = None
) -> Workbook:
    """Return a single-sheet workbook laid out like the printed invoice."""

    styling = data.settings.styling
    family = styling.font_family
    size = styling.font_size
    primary = hex_to_argb(styling.primary_color)
    secondary = hex_to_argb(styling.secondary_color)

    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = SHEET_TITLE
    _configure_page(worksheet)

    fonts = {
        "logo": Font(name=family, size=size - 2, italic=True, color=_MUTED),
        "title": Font(name=family, size=size + 4, bold=True, color=primary),
        "subtitle": Font(name=family, size=size, color=secondary),
        "company": Font(name=family, size=size, bold=True),
        "text": Font(name=family, size=size),
        "detail": Font(name=family, size=size - 2),
        "heading": Font(name=family, size=size, bold=True, color=primary),
        "summary": Font(name=family, size=size - 2),
        "total": Font(name=family, size=size, bold=True, color=primary),
        "footer": Font(name=family, size=size - 4, color=secondary),
    }
    header_font = Font(name=family, size=size - 2, bold=True, color=_WHITE)
    header_fill = PatternFill(fill_type="solid", fgColor=primary)
    row_font = Font(name=family, size=size - 2)

    for row_index, line in enumerate(build_invoice_lines(data, generated_at=generated_at), start=1):
        if line.kind in _ROW_HEIGHTS:
            worksheet.row_dimensions[row_index].height = _ROW_HEIGHTS[line.kind]
        if line.kind == "blank":
            continue
        if line.kind in {"table_header", "table_row"}:
            _write_table_row(worksheet, row_index, line, header_font, header_fill, row_font)
            continue

        column = 3 if line.kind in {"summary", "total"} else 1
        cell = worksheet.cell(row=row_index, column=column, value=line.text)
        cell.font = fonts[line.kind]
        if line.kind in {"logo", "title", "subtitle", "footer"}:
            cell.alignment = Alignment(horizontal="center")
        elif column == 3:
            cell.alignment = Alignment(horizontal="right")

    for letter, width in COLUMN_WIDTHS.items():
        worksheet.column_dimensions[letter].width = width

    return workbook


def _write_table_row(
    worksheet: Worksheet,
    row_index: int,
    line: InvoiceLine,
    header_font: Font,
    header_fill: PatternFill,
    row_font: Font,
) -> None:
    is_header = line.kind == "table_header"
    for column, value in enumerate(line.values, start=1):
        cell = worksheet.cell(row=row_index, column=column, value=value)
        cell.border = _CELL_BORDER
        if is_header:
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")
        else:
            cell.font = row_font
            cell.alignment = Alignment(horizontal="left" if column == 1 else "center")


def render_invoice_excel(
    data: InvoiceData, *, generated_at: datetime | None = None
) -> bytes:
    """Return the ``.xlsx`` bytes for ``data``."""

    workbook = build_invoice_workbook(data, generated_at=generated_at)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


__all__ = ["COLUMN_WIDTHS", "SHEET_TITLE", "build_invoice_workbook", "render_invoice_excel"]
