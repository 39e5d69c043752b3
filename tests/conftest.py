"""
conftest.py — Shared fixtures.

RecordingSurface stands in for the ReportLab surface in layout tests: it
keeps every drawn string per page and lays tables out with fixed row heights,
so page-break behaviour can be asserted without parsing PDF output.
"""

import json
import sys
import textwrap
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from tender_report.payload import parse_payload


class RecordingSurface:
    """In-memory drawing surface that records text and table rows per page."""

    def __init__(self, row_height: float = 8.0, head_height: float = 8.0):
        self.row_height = row_height
        self.head_height = head_height
        self.texts = []      # (page, font, text)
        self.positions = []  # (page, y, text)
        self.tables = []     # (page, head, rows)
        self.images = []     # page numbers
        self._pages = 1
        self.font = ("Helvetica", 10.0)
        self.text_color = "000000"
        self.fill_color = "FFFFFF"

    @property
    def page_number(self) -> int:
        return self._pages

    def new_page(self) -> None:
        self._pages += 1

    def finish(self) -> bytes:
        return b""

    def page_texts(self, page: int) -> list[str]:
        return [t for p, _, t in self.texts if p == page]

    def set_font(self, name, size):
        self.font = (name, float(size))

    def set_text_color(self, hex_colour):
        self.text_color = hex_colour

    def set_fill_color(self, hex_colour):
        self.fill_color = hex_colour

    def set_stroke_color(self, hex_colour):
        pass

    def draw_text(self, x, y, text, align="left"):
        self.texts.append((self._pages, self.font, text))
        self.positions.append((self._pages, y, text))

    def rect(self, x, y, w, h, fill=True, stroke=False):
        pass

    def round_rect(self, x, y, w, h, radius, fill=True, stroke=False):
        pass

    def line(self, x1, y1, x2, y2, width=0.3):
        pass

    def string_width(self, text):
        return len(text) * self.font[1] * 0.18

    def wrap_text(self, text, width):
        if not text:
            return []
        chars = max(int(width / (self.font[1] * 0.18)), 1)
        return textwrap.wrap(text, chars) or [""]

    def draw_image(self, png, x, y, w, h):
        self.images.append(self._pages)

    def draw_table(self, block, x, y, width, available_height, force=False):
        if not block.body:
            if self.head_height > available_height and not force:
                return 0.0, block
            self.tables.append((self._pages, block.head, []))
            return self.head_height, None
        fit = int((available_height - self.head_height) // self.row_height)
        n = min(len(block.body), max(fit, 0))
        if n == 0:
            if not force:
                return 0.0, block
            n = 1
        self.tables.append((self._pages, block.head, block.body[:n]))
        return self.head_height + n * self.row_height, block.rest(n)


@pytest.fixture
def recording_surface():
    return RecordingSurface()


@pytest.fixture
def sample_raw() -> dict:
    with open(ROOT / "data" / "sample" / "report.json", encoding="utf-8") as fh:
        return json.load(fh)


@pytest.fixture
def sample_report(sample_raw):
    return parse_payload(sample_raw)


@pytest.fixture
def report_factory():
    """Build a payload from win / market-win counts."""

    def _make(wins=0, market=0, days=30, value=100000.0, **data):
        raw = {
            "meta": {
                "report_generated_at": "2025-01-15",
                "params_used": {"sellerName": "Test Seller", "days": days},
            },
            "data": {
                "missedButWinnable": {
                    "recentWins": [
                        {"bid_number": f"GEM/2025/B/{i}", "dept": "Dept A", "total_price": value}
                        for i in range(wins)
                    ],
                    "marketWins": [
                        {"bid_number": f"GEM/2025/B/M{i}", "total_price": value}
                        for i in range(market)
                    ],
                },
                **data,
            },
        }
        return parse_payload(raw)

    return _make
