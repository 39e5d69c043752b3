"""
layout.py — Layout Cursor / Pager.

Tracks the vertical draw position on the current page and decides when a
new page must begin. Every new page gets the running chrome (header band and
footer band) redrawn before control returns to the content sequence.

Coordinates are top-down in the surface's unit (millimetres for the ReportLab
surface): ``y`` grows as content is drawn and resets to ``top_offset`` on a
new page. The cursor never draws content itself apart from wrapped lines and
tables handed to it; it only owns the page-break bookkeeping.

Tables are placed by measurement rather than estimate: the surface reports
the height it actually drew plus any rows that did not fit, and the cursor
carries the remainder onto the next page.
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Optional

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Page geometry
# ---------------------------------------------------------------------------

@dataclass
class PageLayout:
    """Fixed page geometry (A4 portrait in millimetres by default)."""
    page_width: float = 210.0
    page_height: float = 297.0
    margin: float = 15.0
    bottom_margin: float = 25.0
    top_offset: float = 20.0
    section_top: float = 25.0
    header_y: float = 10.0
    footer_y: float = 10.0     # measured up from the bottom edge

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def bottom_limit(self) -> float:
        """Lowest y at which content may still end on a page."""
        return self.page_height - self.bottom_margin

    @classmethod
    def from_config(cls, cfg: Optional[dict[str, Any]]) -> "PageLayout":
        """Build a layout from the ``layout`` block of config.yaml.

        Unknown keys are ignored so the config file can carry comments-as-keys
        or settings for other consumers.
        """
        known = {f.name for f in fields(cls)}
        overrides = {k: float(v) for k, v in (cfg or {}).items() if k in known}
        return cls(**overrides)


# ---------------------------------------------------------------------------
# Running header / footer
# ---------------------------------------------------------------------------

class PageChrome:
    """Running header and footer drawn at fixed absolute positions."""

    def __init__(
        self,
        header_text: str,
        generated_label: str,
        footer_label: str = "",
        colour: str = "646464",
    ):
        self.header_text = header_text
        self.generated_label = generated_label
        self.footer_label = footer_label
        self.colour = colour

    def draw_header(self, surface, layout: PageLayout) -> None:
        surface.set_font("Helvetica", 8)
        surface.set_text_color(self.colour)
        surface.draw_text(layout.page_width / 2, layout.header_y,
                          self.header_text, align="center")

    def draw_footer(self, surface, layout: PageLayout) -> None:
        y = layout.page_height - layout.footer_y
        surface.set_font("Helvetica", 8)
        surface.set_text_color(self.colour)
        surface.draw_text(layout.margin, y, f"Generated: {self.generated_label}")
        if self.footer_label:
            surface.draw_text(layout.page_width / 2, y, self.footer_label, align="center")
        surface.draw_text(layout.page_width - layout.margin, y,
                          f"Page {surface.page_number}", align="right")


# ---------------------------------------------------------------------------
# Cursor
# ---------------------------------------------------------------------------

class LayoutCursor:
    """Vertical cursor bound to one drawing surface for one render call.

    Args:
        surface: Drawing surface exposing ``page_number``, ``new_page()``,
            text primitives and ``draw_table()``.
        layout: Page geometry.
        chrome: Header/footer painter; ``None`` draws no chrome.
    """

    def __init__(self, surface, layout: PageLayout, chrome: Optional[PageChrome] = None):
        self.surface = surface
        self.layout = layout
        self.chrome = chrome
        self.y = layout.top_offset
        self._page_top = layout.top_offset

    @property
    def page_count(self) -> int:
        return self.surface.page_number

    @property
    def remaining(self) -> float:
        """Vertical space left above the bottom margin."""
        return self.layout.bottom_limit - self.y

    # -- page management ----------------------------------------------------

    def begin(self) -> None:
        """Stamp the footer on the first page (the cover carries no header)."""
        self.y = self.layout.top_offset
        self._page_top = self.y
        self.draw_footer()

    def ensure_space(self, required_height: float) -> bool:
        """Start a new page if ``required_height`` does not fit below the cursor.

        Returns:
            True when a page transition happened.
        """
        if required_height <= 0:
            raise ValueError(f"required_height must be positive, got {required_height!r}")
        if self.y + required_height > self.layout.bottom_limit:
            self.advance_page()
            return True
        return False

    def advance_page(self, top: Optional[float] = None) -> None:
        """Finish the current page and start a fresh one with chrome.

        Args:
            top: Cursor start on the new page; defaults to ``top_offset``.
        """
        self.surface.new_page()
        self.y = self.layout.top_offset if top is None else top
        self._page_top = self.y
        self.draw_header()
        self.draw_footer()
        logger.debug("Page %d started (cursor at %.1f)", self.page_count, self.y)

    def draw_header(self) -> None:
        if self.chrome is not None:
            self.chrome.draw_header(self.surface, self.layout)

    def draw_footer(self) -> None:
        if self.chrome is not None:
            self.chrome.draw_footer(self.surface, self.layout)

    # -- cursor movement ----------------------------------------------------

    def advance(self, height: float) -> None:
        self.y += height

    def move_to(self, y: float) -> None:
        """Absolute positioning, used by fixed layouts such as the cover."""
        self.y = y

    # -- content placement --------------------------------------------------

    def place_lines(self, lines: list[str], x: float, line_height: float) -> int:
        """Draw pre-wrapped lines, breaking pages between lines as needed.

        The caller sets font and colour beforehand; they are re-applied after
        a page break since the chrome changes them.
        """
        font = getattr(self.surface, "font", None)
        colour = getattr(self.surface, "text_color", None)
        for line in lines:
            if self.ensure_space(line_height) and font is not None:
                self.surface.set_font(*font)
                if colour is not None:
                    self.surface.set_text_color(colour)
            self.surface.draw_text(x, self.y, line)
            self.y += line_height
        return len(lines)

    def place_table(self, block, x: Optional[float] = None,
                    width: Optional[float] = None) -> float:
        """Draw a table, continuing it on new pages until every row is placed.

        Returns:
            Total height consumed across all pages.
        """
        x = self.layout.margin if x is None else x
        width = self.layout.content_width if width is None else width
        pending = block
        total = 0.0
        # At the top of a page (or on a continuation page) at least one row is
        # drawn even if it overflows; moving on would only add an empty page.
        fresh_page = self.y <= self._page_top
        while pending is not None:
            height, pending = self.surface.draw_table(
                pending, x, self.y, width, self.remaining, force=fresh_page,
            )
            self.y += height
            total += height
            if pending is not None:
                logger.debug("Table continues on next page (%d rows left)", len(pending.body))
                self.advance_page()
                fresh_page = True
        return total
