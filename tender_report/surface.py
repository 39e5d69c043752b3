"""
surface.py — ReportLab drawing surface.

Wraps a ``reportlab.pdfgen.canvas.Canvas`` behind the small set of drawing
primitives the report needs, expressed in top-down millimetre coordinates so
the layout code reads like the page it produces. Tables are built as
``platypus.Table`` objects and drawn straight onto the canvas; when a table
is taller than the space left, it is cut on a row boundary and the remainder
is handed back to the caller.
"""

import io
import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas as rl_canvas
from reportlab.platypus import Table, TableStyle

from tender_report.layout import PageLayout

logger = logging.getLogger(__name__)

_ALIGN = {"left": "LEFT", "center": "CENTER", "right": "RIGHT"}


def _hex(h: str):
    """Convert a hex colour string to ReportLab Color."""
    h = h.lstrip("#")
    r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    return colors.Color(r / 255, g / 255, b / 255)


# ---------------------------------------------------------------------------
# Table description
# ---------------------------------------------------------------------------

@dataclass
class TableBlock:
    """Library-neutral table description.

    ``col_widths`` are millimetres; when omitted the columns share the
    available width equally. ``aligns`` maps body column index to
    'left' | 'center' | 'right'.
    """
    head: list[str]
    body: list[list[str]]
    col_widths: Optional[list[float]] = None
    aligns: dict[int, str] = field(default_factory=dict)
    theme: str = "striped"        # 'grid' | 'striped' | 'plain'
    font_size: float = 9
    head_fill: str = "2962FF"
    head_align: str = "left"
    stripe: str = "F3F4F6"
    grid: str = "E5E7EB"

    def take(self, n: int) -> "TableBlock":
        """The same table restricted to its first ``n`` body rows."""
        return replace(self, body=self.body[:n])

    def rest(self, n: int) -> Optional["TableBlock"]:
        """The body rows after the first ``n``, or None if nothing is left."""
        if n >= len(self.body):
            return None
        return replace(self, body=self.body[n:])


def _build_table(block: TableBlock, width_pt: float) -> Table:
    """Create the styled platypus Table for a block."""
    n_cols = len(block.head)
    if block.col_widths:
        col_widths = [w * mm for w in block.col_widths]
    else:
        col_widths = [width_pt / n_cols] * n_cols

    data = [block.head] + [[str(c) for c in row] for row in block.body]
    table = Table(data, colWidths=col_widths, repeatRows=1)

    ts = TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), _hex(block.head_fill)),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ALIGN", (0, 0), (-1, 0), _ALIGN.get(block.head_align, "LEFT")),
        ("FONTSIZE", (0, 0), (-1, -1), block.font_size),
        ("LEADING", (0, 0), (-1, -1), block.font_size * 1.2),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ("LEFTPADDING", (0, 0), (-1, -1), 4),
        ("RIGHTPADDING", (0, 0), (-1, -1), 4),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ])
    if block.theme == "grid":
        ts.add("GRID", (0, 0), (-1, -1), 0.4, _hex(block.grid))
    if block.body:
        ts.add("FONTNAME", (0, 1), (-1, -1), "Helvetica")
        if block.theme == "striped":
            ts.add("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, _hex(block.stripe)])
        for col, align in block.aligns.items():
            ts.add("ALIGN", (col, 1), (col, -1), _ALIGN.get(align, "LEFT"))
    table.setStyle(ts)
    return table


# ---------------------------------------------------------------------------
# Surface
# ---------------------------------------------------------------------------

class ReportLabSurface:
    """Canvas-backed surface in top-down millimetre coordinates.

    Args:
        layout: Page geometry; fixes the page size.
        title: PDF document title metadata.
        author: PDF author metadata.
    """

    def __init__(self, layout: PageLayout, title: str = "", author: str = ""):
        self.layout = layout
        self._buffer = io.BytesIO()
        self.canvas = rl_canvas.Canvas(
            self._buffer,
            pagesize=(layout.page_width * mm, layout.page_height * mm),
        )
        if title:
            self.canvas.setTitle(title)
        if author:
            self.canvas.setAuthor(author)
        self.font = ("Helvetica", 10.0)
        self.text_color = "000000"
        self.fill_color = "FFFFFF"
        self.stroke_color = "000000"
        self._apply_state()

    # -- coordinate helpers -------------------------------------------------

    def _x(self, x: float) -> float:
        return x * mm

    def _y(self, y: float) -> float:
        return (self.layout.page_height - y) * mm

    def _apply_state(self) -> None:
        self.canvas.setFont(*self.font)
        self.canvas.setStrokeColor(_hex(self.stroke_color))

    # -- pages --------------------------------------------------------------

    @property
    def page_number(self) -> int:
        return self.canvas.getPageNumber()

    def new_page(self) -> None:
        self.canvas.showPage()
        # showPage() resets the graphics state
        self._apply_state()

    def finish(self) -> bytes:
        self.canvas.save()
        return self._buffer.getvalue()

    # -- state --------------------------------------------------------------

    def set_font(self, name: str, size: float) -> None:
        self.font = (name, float(size))
        self.canvas.setFont(name, size)

    def set_text_color(self, hex_colour: str) -> None:
        self.text_color = hex_colour

    def set_fill_color(self, hex_colour: str) -> None:
        self.fill_color = hex_colour

    def set_stroke_color(self, hex_colour: str) -> None:
        self.stroke_color = hex_colour
        self.canvas.setStrokeColor(_hex(hex_colour))

    # -- primitives ---------------------------------------------------------

    def draw_text(self, x: float, y: float, text: str, align: str = "left") -> None:
        c = self.canvas
        c.setFillColor(_hex(self.text_color))
        if align == "center":
            c.drawCentredString(self._x(x), self._y(y), text)
        elif align == "right":
            c.drawRightString(self._x(x), self._y(y), text)
        else:
            c.drawString(self._x(x), self._y(y), text)

    def rect(self, x: float, y: float, w: float, h: float,
             fill: bool = True, stroke: bool = False) -> None:
        self.canvas.setFillColor(_hex(self.fill_color))
        self.canvas.rect(self._x(x), self._y(y + h), w * mm, h * mm,
                         fill=int(fill), stroke=int(stroke))

    def round_rect(self, x: float, y: float, w: float, h: float, radius: float,
                   fill: bool = True, stroke: bool = False) -> None:
        self.canvas.setFillColor(_hex(self.fill_color))
        self.canvas.roundRect(self._x(x), self._y(y + h), w * mm, h * mm, radius * mm,
                              fill=int(fill), stroke=int(stroke))

    def line(self, x1: float, y1: float, x2: float, y2: float, width: float = 0.3) -> None:
        self.canvas.setLineWidth(width * mm)
        self.canvas.line(self._x(x1), self._y(y1), self._x(x2), self._y(y2))

    def string_width(self, text: str) -> float:
        """Width of ``text`` in the current font, in millimetres."""
        return stringWidth(text, *self.font) / mm

    def wrap_text(self, text: str, width: float) -> list[str]:
        """Split ``text`` into lines no wider than ``width`` mm in the current font."""
        if not text:
            return []
        return simpleSplit(text, self.font[0], self.font[1], width * mm)

    def draw_image(self, png: io.BytesIO, x: float, y: float, w: float, h: float) -> None:
        png.seek(0)
        self.canvas.drawImage(ImageReader(png), self._x(x), self._y(y + h),
                              width=w * mm, height=h * mm, mask="auto")

    # -- tables -------------------------------------------------------------

    def _measure(self, block: TableBlock, width_pt: float) -> float:
        table = _build_table(block, width_pt)
        return table.wrapOn(self.canvas, width_pt, self.layout.page_height * mm)[1]

    def _rows_that_fit(self, block: TableBlock, width_pt: float, avail_pt: float) -> int:
        """Largest body-row count whose table (header included) fits ``avail_pt``."""
        lo, hi = 0, len(block.body)
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if self._measure(block.take(mid), width_pt) <= avail_pt:
                lo = mid
            else:
                hi = mid - 1
        return lo

    def draw_table(
        self,
        block: TableBlock,
        x: float,
        y: float,
        width: float,
        available_height: float,
        force: bool = False,
    ) -> tuple[float, Optional[TableBlock]]:
        """Draw as many rows of ``block`` as fit below ``y``.

        Args:
            block: Table to draw.
            x: Left edge (mm).
            y: Top edge (mm, top-down).
            width: Available width (mm) for equal-width columns.
            available_height: Space left above the bottom margin (mm).
            force: Draw at least one body row even if it overflows.

        Returns:
            (height drawn in mm, remaining rows or None when complete).
        """
        width_pt = width * mm
        avail_pt = max(available_height, 0) * mm

        if not block.body:
            height = self._measure(block, width_pt)
            if height > avail_pt and not force:
                return 0.0, block
            _build_table(block, width_pt).drawOn(self.canvas, self._x(x), self._y(y) - height)
            return height / mm, None

        n = self._rows_that_fit(block, width_pt, avail_pt)
        if n == 0:
            if not force:
                return 0.0, block
            n = 1
            logger.warning("Table row taller than a page; drawing past the bottom margin")

        part = block.take(n)
        table = _build_table(part, width_pt)
        _, height = table.wrapOn(self.canvas, width_pt, avail_pt)
        table.drawOn(self.canvas, self._x(x), self._y(y) - height)
        return height / mm, block.rest(n)
