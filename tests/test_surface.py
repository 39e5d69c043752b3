"""
test_surface.py — Tests for the ReportLab drawing surface.

Tests cover:
    - Table splitting on measured row boundaries (draw_table)
    - Forced single-row draws and the no-room case
    - Header-only tables
    - Page handling and PDF output
"""

import logging
import sys
from pathlib import Path

import pytest
from reportlab.lib.units import mm

sys.path.insert(0, str(Path(__file__).parent.parent))

from tender_report.layout import PageLayout
from tender_report.surface import ReportLabSurface, TableBlock


@pytest.fixture
def surface():
    return ReportLabSurface(PageLayout())


def _table(rows: int, cell: str = "value") -> TableBlock:
    return TableBlock(
        head=["#", "Department", "Total Tenders"],
        body=[[str(i), f"{cell} {i}", str(i * 3)] for i in range(rows)],
        col_widths=[12, 128, 40],
    )


class TestDrawTableSplit:
    """Measured splitting of a long table."""

    def test_rows_drawn_plus_remainder_equal_input(self, surface):
        block = _table(120)
        height, rest = surface.draw_table(block, 15, 20, 180, 100)
        assert rest is not None
        drawn = len(block.body) - len(rest.body)
        assert drawn > 0
        assert rest.body == block.body[drawn:]
        assert rest.head == block.head

    def test_height_within_available(self, surface):
        height, _ = surface.draw_table(_table(120), 15, 20, 180, 100)
        assert 0 < height <= 100

    def test_drawn_rows_are_the_most_that_fit(self, surface):
        block = _table(120)
        _, rest = surface.draw_table(block, 15, 20, 180, 100)
        drawn = len(block.body) - len(rest.body)
        assert surface._measure(block.take(drawn + 1), 180 * mm) > 100 * mm

    def test_small_table_completes(self, surface):
        height, rest = surface.draw_table(_table(3), 15, 20, 180, 200)
        assert rest is None
        assert height > 0

    def test_repeated_draws_consume_every_row(self, surface):
        pending, drawn = _table(120), 0
        while pending is not None:
            before = len(pending.body)
            _, pending = surface.draw_table(pending, 15, 20, 180, 250, force=True)
            drawn += before - (len(pending.body) if pending else 0)
            surface.new_page()
        assert drawn == 120


class TestDrawTableLimits:
    """Rows that do not fit at all."""

    def test_no_room_without_force_returns_block(self, surface):
        block = _table(5)
        height, rest = surface.draw_table(block, 15, 270, 180, 2)
        assert height == 0.0
        assert rest is block

    def test_forced_tall_row_is_drawn(self, surface, caplog):
        tall = "\n".join(["line"] * 120)
        block = _table(2, cell=tall)
        with caplog.at_level(logging.WARNING):
            height, rest = surface.draw_table(block, 15, 20, 180, 50, force=True)
        assert height > 50
        assert rest is not None and len(rest.body) == 1
        assert "taller than a page" in caplog.text

    def test_tall_row_without_force_waits(self, surface):
        block = _table(1, cell="\n".join(["line"] * 120))
        height, rest = surface.draw_table(block, 15, 20, 180, 50)
        assert (height, rest) == (0.0, block)


class TestHeaderOnlyTable:

    def test_header_drawn_when_room(self, surface):
        height, rest = surface.draw_table(_table(0), 15, 20, 180, 50)
        assert rest is None
        assert height > 0

    def test_header_deferred_without_room(self, surface):
        block = _table(0)
        height, rest = surface.draw_table(block, 15, 270, 180, 0.5)
        assert (height, rest) == (0.0, block)


class TestSurfaceBasics:

    def test_page_numbers(self, surface):
        assert surface.page_number == 1
        surface.new_page()
        assert surface.page_number == 2

    def test_font_survives_new_page(self, surface):
        surface.set_font("Helvetica-Bold", 14)
        surface.new_page()
        assert surface.font == ("Helvetica-Bold", 14.0)

    def test_wrap_text_respects_width(self, surface):
        surface.set_font("Helvetica", 10)
        lines = surface.wrap_text("word " * 200, 50)
        assert len(lines) > 1
        assert all(surface.string_width(line) <= 50 for line in lines)

    def test_wrap_empty(self, surface):
        assert surface.wrap_text("", 50) == []

    def test_finish_returns_pdf(self, surface):
        surface.draw_text(15, 20, "Tender report")
        assert surface.finish().startswith(b"%PDF")
