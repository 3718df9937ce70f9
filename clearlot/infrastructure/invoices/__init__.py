"""Invoice rendering and archiving."""

from .archive import archive_invoice, build_invoice_blob_path, upload_invoice_logo
from .common import (
    EXCEL_CONTENT_TYPE,
    PDF_CONTENT_TYPE,
    InvoiceData,
    InvoiceLine,
    build_invoice_lines,
    default_invoice_filename,
    format_currency,
    hex_to_argb,
)
from .excel import build_invoice_workbook, render_invoice_excel
from .pdf import render_invoice_pdf

__all__ = [
    "EXCEL_CONTENT_TYPE",
    "PDF_CONTENT_TYPE",
    "InvoiceData",
    "InvoiceLine",
    "archive_invoice",
    "build_invoice_blob_path",
    "build_invoice_lines",
    "build_invoice_workbook",
    "default_invoice_filename",
    "format_currency",
    "hex_to_argb",
    "render_invoice_excel",
    "render_invoice_pdf",
    "upload_invoice_logo",
]
