"""Render invoices as vector PDF documents."""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from io import BytesIO

from reportlab.lib.colors import Color, black, white
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfgen.canvas import Canvas

from .common import InvoiceData, InvoiceLine, build_invoice_lines, hex_to_rgb

# Traditional Chinese CID font shipped with reportlab; covers the Latin labels too.
CJK_FONT_NAME = "MSung-Light"
PAGE_MARGIN = 15 * mm
_MUTED = Color(0.53, 0.53, 0.53)
_TABLE_WEIGHTS = (50, 15, 20, 20)


@lru_cache(maxsize=1)
def _register_font() -> str:
    pdfmetrics.registerFont(UnicodeCIDFont(CJK_FONT_NAME))
    return CJK_FONT_NAME


class _InvoiceCanvas:
    """Cursor-based writer placing invoice lines top to bottom."""

    def __init__(self, canvas: Canvas, font: str) -> None:
        self.canvas = canvas
        self.font = font
        self.width, self.height = A4
        self.left = PAGE_MARGIN
        self.right = self.width - PAGE_MARGIN
        self.y = self.height - PAGE_MARGIN

    @property
    def content_width(self) -> float:
        return self.right - self.left

    def ensure_space(self, needed: float) -> None:
        if self.y - needed < PAGE_MARGIN:
            self.canvas.showPage()
            self.y = self.height - PAGE_MARGIN

    def text(
        self,
        value: str,
        size: float,
        *,
        color: Color = black,
        bold: bool = False,
        align: str = "left",
        leading: float = 1.5,
    ) -> None:
        for chunk in simpleSplit(value, self.font, size, self.content_width) or [""]:
            self.ensure_space(size * leading)
            self.y -= size * leading
            self._draw(chunk, size, self.y, color=color, bold=bold, align=align)

    def _draw(
        self,
        value: str,
        size: float,
        y: float,
        *,
        color: Color,
        bold: bool,
        align: str,
        left: float | None = None,
        right: float | None = None,
    ) -> None:
        left = self.left if left is None else left
        right = self.right if right is None else right
        text_width = pdfmetrics.stringWidth(value, self.font, size)
        if align == "center":
            x = left + (right - left - text_width) / 2
        elif align == "right":
            x = right - text_width
        else:
            x = left
        text = self.canvas.beginText()
        text.setFont(self.font, size)
        text.setFillColor(color)
        # CID fonts have no bold face; bold is drawn as fill plus stroke.
        self.canvas.setStrokeColor(color)
        self.canvas.setLineWidth(size * 0.03)
        text.setTextRenderMode(2 if bold else 0)
        text.setTextOrigin(x, y)
        text.textOut(value)
        self.canvas.drawText(text)

    def table_row(
        self,
        values: tuple[object, ...],
        size: float,
        *,
        fill: Color | None = None,
        text_color: Color = black,
        bold: bool = False,
    ) -> None:
        row_height = size * 2.2
        self.ensure_space(row_height)
        top = self.y
        bottom = top - row_height
        total_weight = sum(_TABLE_WEIGHTS)
        x = self.left
        self.canvas.setLineWidth(0.5)
        for index, value in enumerate(values):
            cell_width = self.content_width * _TABLE_WEIGHTS[index] / total_weight
            if fill is not None:
                self.canvas.setFillColor(fill)
                self.canvas.rect(x, bottom, cell_width, row_height, stroke=0, fill=1)
            self.canvas.setStrokeColor(black)
            self.canvas.rect(x, bottom, cell_width, row_height, stroke=1, fill=0)
            padding = size * 0.4
            self._draw(
                str(value),
                size,
                bottom + (row_height - size) / 2 + size * 0.15,
                color=text_color,
                bold=bold,
                align="left" if index == 0 else "center",
                left=x + padding,
                right=x + cell_width - padding,
            )
            x += cell_width
        self.y = bottom


def render_invoice_pdf(data: InvoiceData, *, generated_at: datetime | None = None) -> bytes:
    """Return the PDF bytes for ``data`` drawn on A4 pages."""

    font = _register_font()
    styling = data.settings.styling
    size = float(styling.font_size)
    primary = Color(*hex_to_rgb(styling.primary_color))
    secondary = Color(*hex_to_rgb(styling.secondary_color))

    buffer = BytesIO()
    canvas = Canvas(buffer, pagesize=A4)
    canvas.setTitle(f"Invoice {data.purchase.id}")
    canvas.setAuthor(data.settings.company.name)
    writer = _InvoiceCanvas(canvas, font)

    for line in build_invoice_lines(data, generated_at=generated_at):
        _draw_line(writer, line, size, primary, secondary)

    canvas.showPage()
    canvas.save()
    return buffer.getvalue()


def _draw_line(
    writer: _InvoiceCanvas,
    line: InvoiceLine,
    size: float,
    primary: Color,
    secondary: Color,
) -> None:
    kind = line.kind
    if kind == "blank":
        writer.y -= size * 0.8
    elif kind == "logo":
        writer.text(line.text, size - 2, color=_MUTED, align="center", leading=3)
    elif kind == "title":
        writer.text(line.text, size + 4, color=primary, bold=True, align="center", leading=1.8)
    elif kind == "subtitle":
        writer.text(line.text, size, color=secondary, align="center")
    elif kind == "company":
        writer.text(line.text, size, bold=True)
    elif kind == "text":
        writer.text(line.text, size)
    elif kind == "heading":
        writer.text(line.text, size, color=primary, bold=True, leading=1.8)
    elif kind == "table_header":
        writer.table_row(line.values, size - 2, fill=primary, text_color=white, bold=True)
    elif kind == "table_row":
        writer.table_row(line.values, size - 2)
    elif kind == "summary":
        writer.text(line.text, size - 2, align="right")
    elif kind == "total":
        writer.text(line.text, size, color=primary, bold=True, align="right")
    elif kind == "footer":
        writer.text(line.text, size - 4, color=secondary, align="center")
    else:
        writer.text(line.text, size - 2)


__all__ = ["CJK_FONT_NAME", "render_invoice_pdf"]
