"""
pdf_builder.py — Tender Performance Report PDF Generator.

Draws the report directly onto a ReportLab canvas through the layout cursor,
which owns every page-break decision and redraws the running header/footer on
each new page. Sections are independently selectable:

    Cover:                    seller, period, department, offered items (always)
    executive_summary:        KPI cards, win/loss split, metrics table, commentary
    recent_wins:              latest successful bids
    missed_opportunities:     tenders awarded to competitors + winning ranges
    price_band:               highest / average / lowest winning price
    top_states:               geographic performance chart + table
    top_sellers_by_dept:      leading sellers per department
    category_listing:         tender categories by value
    all_departments:          tender counts for every department
    low_competition:          open tenders with few bidders
    department_affinity:      engagement signals + revenue by department
    organization_affinity:    engagement signals by organisation
    ministry_affinity:        engagement signals by ministry

Charts are matplotlib PNG byte streams embedded in the PDF. No temp files are
written; the finished document is returned as bytes.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from tender_report.charts import chart_top_states, chart_win_loss
from tender_report.layout import LayoutCursor, PageChrome, PageLayout
from tender_report.metrics import PerformanceSummary, _share, compute_summary
from tender_report.narrative import (
    NarrativePackage,
    _count,
    _date,
    _inr,
    _pct,
    _quantity,
    _truncate,
    generate_narrative,
)
from tender_report.payload import ReportData
from tender_report.surface import ReportLabSurface, TableBlock

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Brand and wording defaults (overridable from config.yaml -> report)
# ---------------------------------------------------------------------------

DEFAULT_BRAND: dict[str, str] = {
    "primary":   "2962FF",
    "secondary": "10B981",
    "accent":    "F97316",
    "dark":      "3C3C3C",
    "text":      "000000",
    "muted":     "505050",
    "light":     "EEF2FF",
    "stripe":    "F3F4F6",
    "grid":      "E5E7EB",
    "chrome":    "646464",
}

DEFAULT_TEXT: dict[str, str] = {
    "cover_kicker":   "GOVERNMENT",
    "cover_title":    "TENDER ANALYSIS",
    "cover_subtitle": "Comprehensive Performance Report",
    "header_text":    "Government Tender Performance Analysis",
    "footer_label":   "",
}

_CARD_H = 22.0
_COVER_SELLER_LINES = 2
_COVER_ITEMS = 5


# ---------------------------------------------------------------------------
# Render state
# ---------------------------------------------------------------------------

@dataclass
class RenderedReport:
    """Finished document handed back to the caller."""
    pdf_bytes: bytes
    page_count: int
    sections: list[str]

    def save(self, path) -> Path:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(self.pdf_bytes)
        return p


@dataclass
class _RenderContext:
    cursor: LayoutCursor
    report: ReportData
    summary: PerformanceSummary
    narrative: NarrativePackage
    brand: dict[str, str]
    text: dict[str, str]

    @property
    def surface(self):
        return self.cursor.surface

    @property
    def layout(self) -> PageLayout:
        return self.cursor.layout


# ---------------------------------------------------------------------------
# Drawing helpers
# ---------------------------------------------------------------------------

def _heading(ctx: _RenderContext, text: str, size: float = 14, gap: float = 8) -> None:
    """Section or sub-section title; kept on the same page as what follows."""
    ctx.cursor.ensure_space(gap + 10)
    s = ctx.surface
    s.set_font("Helvetica-Bold", size)
    s.set_text_color(ctx.brand["text"])
    s.draw_text(ctx.layout.margin, ctx.cursor.y, text)
    ctx.cursor.advance(gap)


def _section_start(ctx: _RenderContext, title: str) -> None:
    """Begin a section on a fresh page."""
    ctx.cursor.advance_page(top=ctx.layout.section_top)
    _heading(ctx, title, size=16, gap=12)


def _section_flow(ctx: _RenderContext, title: str) -> None:
    """Begin a section below the previous one (never on the cover)."""
    if ctx.cursor.page_count == 1:
        ctx.cursor.advance_page(top=ctx.layout.section_top)
    else:
        ctx.cursor.ensure_space(40)
        ctx.cursor.advance(10)
    _heading(ctx, title)


def _line(
    ctx: _RenderContext,
    text: str,
    size: float = 10,
    bold: bool = False,
    colour: Optional[str] = None,
    gap: float = 6,
) -> None:
    ctx.cursor.ensure_space(gap)
    s = ctx.surface
    s.set_font("Helvetica-Bold" if bold else "Helvetica", size)
    s.set_text_color(colour or ctx.brand["text"])
    s.draw_text(ctx.layout.margin, ctx.cursor.y, text)
    ctx.cursor.advance(gap)


def _prose(
    ctx: _RenderContext,
    text: str,
    size: float = 9,
    colour: Optional[str] = None,
    indent: float = 0.0,
    line_height: float = 5.0,
    bold: bool = False,
) -> None:
    """Wrapped paragraph; page breaks may fall between any two lines."""
    s = ctx.surface
    s.set_font("Helvetica-Bold" if bold else "Helvetica", size)
    s.set_text_color(colour or ctx.brand["dark"])
    lines = s.wrap_text(text, ctx.layout.content_width - indent)
    ctx.cursor.place_lines(lines, ctx.layout.margin + indent, line_height)


def _bullets(ctx: _RenderContext, items: list[str]) -> None:
    for item in items:
        _prose(ctx, f"- {item}", indent=3)
    ctx.cursor.advance(3)


def _clip_lines(lines: list[str], max_lines: int) -> list[str]:
    """Keep at most ``max_lines`` wrapped lines, marking the cut with '...'."""
    if len(lines) <= max_lines:
        return lines
    kept = lines[:max_lines]
    kept[-1] = kept[-1][:-3].rstrip() + "..."
    return kept


def _fit_font(s, text: str, max_w: float, size: float, min_size: float = 8) -> None:
    """Shrink a bold font until ``text`` fits ``max_w``."""
    s.set_font("Helvetica-Bold", size)
    while s.string_width(text) > max_w and size > min_size:
        size -= 0.5
        s.set_font("Helvetica-Bold", size)


def _kpi_cards(ctx: _RenderContext, cards: list[tuple[str, str, str]]) -> None:
    """A row of KPI tiles: (label, value, accent hex)."""
    cursor, s, lay = ctx.cursor, ctx.surface, ctx.layout
    cursor.ensure_space(_CARD_H + 4)
    gap = 4.0
    n = len(cards)
    w = (lay.content_width - gap * (n - 1)) / n
    top = cursor.y
    for i, (label, value, colour) in enumerate(cards):
        x = lay.margin + i * (w + gap)
        s.set_fill_color(ctx.brand["light"])
        s.round_rect(x, top, w, _CARD_H, 2)
        s.set_fill_color(colour)
        s.rect(x, top, 1.5, _CARD_H)

        s.set_font("Helvetica", 8)
        s.set_text_color(ctx.brand["muted"])
        s.draw_text(x + w / 2, top + 7, label, align="center")

        _fit_font(s, value, w - 5, 15)
        s.set_text_color(colour)
        s.draw_text(x + w / 2, top + 16, value, align="center")
    cursor.advance(_CARD_H + 8)


def _chart(ctx: _RenderContext, png, height: float) -> None:
    ctx.cursor.ensure_space(height + 4)
    ctx.surface.draw_image(png, ctx.layout.margin, ctx.cursor.y,
                           ctx.layout.content_width, height)
    ctx.cursor.advance(height + 6)


def _table(ctx: _RenderContext, block: TableBlock, gap: float = 10) -> None:
    ctx.cursor.place_table(block)
    ctx.cursor.advance(gap)


def _bid_table(ctx: _RenderContext, bids: list, limit: int, seller_column: bool = False) -> TableBlock:
    """Standard bid listing: number, buyer, quantity, value and date."""
    if seller_column:
        head = ["#", "Bid Number", "Winning Seller", "Organization", "Qty", "Value", "Date"]
        widths = [8, 32, 34, 40, 14, 28, 24]
        rows = [
            [str(i + 1), b.bid_number or "N/A", _truncate(b.seller, 20) or "N/A",
             _truncate(b.org, 24), _quantity(b.quantity), _inr(b.total_price), _date(b.ended_at)]
            for i, b in enumerate(bids[:limit])
        ]
    else:
        head = ["#", "Bid Number", "Organization", "Department", "Qty", "Value", "Date"]
        widths = [8, 34, 40, 34, 14, 28, 22]
        rows = [
            [str(i + 1), b.bid_number or "N/A", _truncate(b.org, 28), _truncate(b.dept, 23),
             _quantity(b.quantity), _inr(b.total_price), _date(b.ended_at)]
            for i, b in enumerate(bids[:limit])
        ]
    return TableBlock(
        head=head,
        body=rows,
        col_widths=widths,
        aligns={0: "center", 4: "center", 5: "right", 6: "center"},
        theme="grid",
        font_size=8,
        head_fill=ctx.brand["primary"],
        head_align="center",
        grid=ctx.brand["grid"],
    )


def _affinity_list(ctx: _RenderContext, items: list, colour: str, limit: int = 5) -> None:
    """Entity name in the accent colour followed by its indented signal."""
    s = ctx.surface
    for item in items[:limit]:
        ctx.cursor.ensure_space(15)
        s.set_font("Helvetica-Bold", 10)
        s.set_text_color(colour)
        ctx.cursor.place_lines(s.wrap_text(item.name, ctx.layout.content_width),
                               ctx.layout.margin, 6)
        _prose(ctx, item.signal or "No signal detail provided.", indent=5)
        ctx.cursor.advance(3)


# ---------------------------------------------------------------------------
# Page content builders
# ---------------------------------------------------------------------------

def _page_cover(ctx: _RenderContext) -> None:
    """Cover page: fixed layout on page 1."""
    s, cursor, lay, brand = ctx.surface, ctx.cursor, ctx.layout, ctx.brand
    params = ctx.report.meta.params
    cx = lay.page_width / 2

    s.set_fill_color(brand["primary"])
    s.rect(0, 0, lay.page_width, 6)

    s.set_font("Helvetica", 10)
    s.set_text_color(brand["muted"])
    s.draw_text(cx, 40, ctx.text["cover_kicker"], align="center")

    cursor.move_to(60)
    s.set_font("Helvetica-Bold", 24)
    s.set_text_color(brand["text"])
    s.draw_text(cx, cursor.y, ctx.text["cover_title"], align="center")
    cursor.advance(15)
    s.set_font("Helvetica-Bold", 18)
    s.draw_text(cx, cursor.y, ctx.text["cover_subtitle"], align="center")
    cursor.advance(25)

    s.set_font("Helvetica-Bold", 20)
    s.set_text_color(brand["primary"])
    seller_lines = _clip_lines(s.wrap_text(params.seller_name or "N/A", lay.content_width),
                               _COVER_SELLER_LINES)
    for i, line in enumerate(seller_lines):
        s.draw_text(cx, cursor.y, line, align="center")
        if i < len(seller_lines) - 1:
            cursor.advance(9)
    cursor.advance(20)

    s.set_font("Helvetica", 10)
    s.set_text_color(brand["muted"])
    for text in (
        f"Report Generated: {_date(ctx.report.meta.report_generated_at)}",
        f"Analysis Period: {params.days} days",
    ):
        s.draw_text(cx, cursor.y, text, align="center")
        cursor.advance(8)
    s.draw_text(cx, cursor.y, f"Department: {params.department or 'N/A'}", align="center")
    cursor.advance(15)

    # The cover is a single page: text stops above the bottom margin and the
    # "Prepared for" line.
    floor = lay.bottom_limit - (12 if params.email else 0)
    items = params.offered_items
    if items and cursor.y + 8 <= floor:
        s.set_font("Helvetica-Bold", 10)
        s.draw_text(cx, cursor.y, "Offered Items:", align="center")
        cursor.advance(8)
        s.set_font("Helvetica", 10)
        shown = 0
        for item in items[:_COVER_ITEMS]:
            lines = _clip_lines(s.wrap_text(f"- {item}", lay.page_width - 60), 2)
            # one line stays free for the "and N more" note
            if cursor.y + 6 * len(lines) > floor:
                break
            for line in lines:
                s.draw_text(cx, cursor.y, line, align="center")
                cursor.advance(6)
            shown += 1
        if shown < len(items) and cursor.y <= floor:
            s.draw_text(cx, cursor.y, f"and {len(items) - shown} more", align="center")
            cursor.advance(6)

    if params.email:
        s.set_font("Helvetica-Oblique", 8)
        s.draw_text(cx, lay.bottom_limit - 5, f"Prepared for {params.email}", align="center")


def _page_executive_summary(ctx: _RenderContext) -> None:
    sm, brand = ctx.summary, ctx.brand
    _section_start(ctx, "Executive Summary")

    _heading(ctx, "Performance Highlights")
    _kpi_cards(ctx, [
        ("Win Rate", _pct(sm.win_rate), brand["primary"]),
        ("Total Bids", _count(sm.total_bids), brand["dark"]),
        ("Successful Wins", _count(sm.wins), brand["secondary"]),
        ("Total Won Value", _inr(sm.total_value), brand["accent"]),
    ])

    _heading(ctx, "Win/Loss Distribution")
    _line(ctx, f"Wins: {sm.wins} ({_pct(sm.win_rate)})")
    _line(ctx, f"Losses: {sm.losses} ({_pct(sm.loss_rate)})", gap=8)
    if sm.total_bids:
        _chart(ctx, chart_win_loss(sm, brand), 28)
    else:
        ctx.cursor.advance(4)

    _heading(ctx, "Detailed Performance Metrics")
    rows = [
        ["Total Bids Participated", _count(sm.total_bids), "Participation"],
        ["Successful Wins", _count(sm.wins), "Performance"],
        ["Unsuccessful Bids", _count(sm.losses), "Performance"],
        ["Win Rate", _pct(sm.win_rate), "Performance"],
        ["Total Bid Value", _inr(sm.total_value), "Financial"],
        ["Average Order Value", _inr(sm.avg_value), "Financial"],
        ["Average Bids per Day", f"{sm.avg_bids_per_day:.2f}", "Activity"],
    ]
    _table(ctx, TableBlock(
        head=["Metric", "Value", "Category"],
        body=rows,
        col_widths=[80, 60, 40],
        aligns={1: "right"},
        head_fill=brand["primary"],
        stripe=brand["stripe"],
    ))

    _heading(ctx, "Commentary")
    _prose(ctx, ctx.narrative.executive_commentary)
    ctx.cursor.advance(6)

    if ctx.narrative.strategy_summary:
        ctx.cursor.ensure_space(40)
        _heading(ctx, "AI-Powered Strategic Insights")
        _prose(ctx, ctx.narrative.strategy_summary)


def _page_recent_wins(ctx: _RenderContext) -> None:
    sm = ctx.summary
    wins = ctx.report.data.missed_but_winnable.recent_wins
    _section_start(ctx, "Recent Successful Bids")
    _line(ctx, f"Total Wins: {sm.wins}   Total Value: {_inr(sm.total_value)}   "
               f"Average: {_inr(sm.avg_value)}", gap=8)
    _table(ctx, _bid_table(ctx, wins, limit=10))
    if len(wins) > 10:
        _line(ctx, f"Showing the 10 most recent of {len(wins)} wins.", size=8,
              colour=ctx.brand["muted"])


def _page_missed_opportunities(ctx: _RenderContext) -> None:
    data, brand = ctx.report.data, ctx.brand
    mbw = data.missed_but_winnable
    _section_start(ctx, "Missed Opportunities")
    _kpi_cards(ctx, [
        ("Estimated Missed Value", _inr(data.estimated_missed_value), brand["accent"]),
        ("Won by Competitors", _count(len(mbw.market_wins)), brand["primary"]),
        ("Loss Rate", _pct(ctx.summary.loss_rate), brand["dark"]),
    ])
    _prose(ctx, ctx.narrative.missed_value_commentary)
    ctx.cursor.advance(8)

    if mbw.market_wins:
        _heading(ctx, "Winnable Bids Awarded to Competitors")
        _table(ctx, _bid_table(ctx, mbw.market_wins, limit=10, seller_column=True))
    if mbw.signals.quantity_ranges:
        _heading(ctx, "Winning Quantity Ranges", size=12)
        _bullets(ctx, mbw.signals.quantity_ranges)
    if mbw.signals.price_ranges:
        _heading(ctx, "Winning Price Ranges", size=12)
        _bullets(ctx, mbw.signals.price_ranges)


def _section_price_band(ctx: _RenderContext) -> None:
    band, brand = ctx.report.data.price_band, ctx.brand
    _section_flow(ctx, "Market Price Band")
    _kpi_cards(ctx, [
        ("Highest Winning Price", _inr(band.highest), brand["accent"]),
        ("Average Winning Price", _inr(band.average), brand["primary"]),
        ("Lowest Winning Price", _inr(band.lowest), brand["secondary"]),
    ])
    _prose(ctx, (
        f"Winning prices for comparable tenders spanned {_inr(band.highest - band.lowest)} "
        f"between the highest and lowest award. Bids priced close to the average of "
        f"{_inr(band.average)} have stayed competitive across the analysis period."
    ))


def _page_top_states(ctx: _RenderContext) -> None:
    states = sorted(ctx.report.data.top_performing_states, key=lambda s: s.value, reverse=True)
    total = sum(s.value for s in states)
    _section_start(ctx, "Geographic Performance")
    _heading(ctx, "Top Performing States")
    _chart(ctx, chart_top_states(states, ctx.brand), 70)
    rows = [
        [str(i + 1), _truncate(st.state, 40) or "N/A", _count(st.count), _inr(st.value),
         _pct(_share(st.value, total))]
        for i, st in enumerate(states[:10])
    ]
    _table(ctx, TableBlock(
        head=["#", "State", "Tenders", "Value", "Share"],
        body=rows,
        col_widths=[10, 60, 30, 50, 30],
        aligns={0: "center", 2: "center", 3: "right", 4: "right"},
        head_fill=ctx.brand["primary"],
        stripe=ctx.brand["stripe"],
    ))


def _section_top_sellers_by_dept(ctx: _RenderContext) -> None:
    sellers = sorted(ctx.report.data.top_sellers_by_dept, key=lambda s: s.value, reverse=True)
    _section_flow(ctx, "Top Sellers by Department")
    rows = [
        [str(i + 1), _truncate(s.seller, 40) or "N/A", _truncate(s.dept, 34) or "N/A", _inr(s.value)]
        for i, s in enumerate(sellers[:10])
    ]
    _table(ctx, TableBlock(
        head=["#", "Seller", "Department", "Value"],
        body=rows,
        col_widths=[10, 70, 60, 40],
        aligns={0: "center", 3: "right"},
        head_fill=ctx.brand["secondary"],
        stripe=ctx.brand["stripe"],
    ))


def _section_category_listing(ctx: _RenderContext) -> None:
    categories = sorted(ctx.report.data.category_listing, key=lambda c: c.value, reverse=True)
    _section_flow(ctx, "Category Listing")
    rows = [
        [str(i + 1), _truncate(c.category, 42) or "N/A", _count(c.count), _inr(c.value),
         _inr(round(c.value / c.count)) if c.count else "N/A"]
        for i, c in enumerate(categories[:15])
    ]
    _table(ctx, TableBlock(
        head=["#", "Category", "Tenders", "Value", "Avg Value"],
        body=rows,
        col_widths=[10, 70, 25, 40, 35],
        aligns={0: "center", 2: "center", 3: "right", 4: "right"},
        head_fill=ctx.brand["primary"],
        stripe=ctx.brand["stripe"],
    ))


def _section_all_departments(ctx: _RenderContext) -> None:
    departments = sorted(ctx.report.data.all_departments,
                         key=lambda d: d.total_tenders, reverse=True)
    _section_flow(ctx, "All Departments")
    _line(ctx, f"{len(departments)} departments published tenders in the analysis period.",
          size=9, colour=ctx.brand["muted"], gap=7)
    rows = [
        [str(i + 1), _truncate(d.department, 80) or "N/A", _count(d.total_tenders)]
        for i, d in enumerate(departments)
    ]
    _table(ctx, TableBlock(
        head=["#", "Department", "Total Tenders"],
        body=rows,
        col_widths=[12, 128, 40],
        aligns={0: "center", 2: "right"},
        theme="grid",
        font_size=8,
        head_fill=ctx.brand["dark"],
        grid=ctx.brand["grid"],
    ))


def _page_low_competition(ctx: _RenderContext) -> None:
    low = ctx.report.data.low_competition
    _section_start(ctx, "Low Competition Opportunities")
    _line(ctx, f"Opportunities identified: {low.count}   As of: {_date(low.generated_at)}", gap=8)
    _prose(ctx, ctx.narrative.low_competition_commentary)
    ctx.cursor.advance(8)
    if low.results:
        _table(ctx, _bid_table(ctx, low.results, limit=15))


def _page_department_affinity(ctx: _RenderContext) -> None:
    sm, brand, lay = ctx.summary, ctx.brand, ctx.layout
    depts = ctx.report.data.missed_but_winnable.signals.dept_affinity
    _section_start(ctx, "Department Performance")
    _heading(ctx, "Department Performance Analysis")
    _line(ctx, f"Total Departments: {len(depts)}   Total Revenue: {_inr(sm.total_value)}", gap=12)

    _heading(ctx, "Top Departments by Engagement", size=12)
    _affinity_list(ctx, depts, brand["primary"])
    ctx.cursor.advance(5)

    ctx.cursor.ensure_space(30)
    _heading(ctx, "Top 5 Departments by Revenue", size=12)
    if not sm.department_revenue:
        _line(ctx, "No won revenue is attributed to a department yet.", size=9,
              colour=brand["muted"])
        return
    s = ctx.surface
    for dept, value in sm.department_revenue:
        ctx.cursor.ensure_space(8)
        s.set_font("Helvetica", 10)
        s.set_text_color(brand["dark"])
        s.draw_text(lay.margin, ctx.cursor.y, _truncate(dept, 70))
        s.draw_text(lay.page_width - lay.margin, ctx.cursor.y, _inr(value), align="right")
        ctx.cursor.advance(7)


def _section_organization_affinity(ctx: _RenderContext) -> None:
    _section_flow(ctx, "Organization Affinity")
    _affinity_list(ctx, ctx.report.data.missed_but_winnable.signals.org_affinity,
                   ctx.brand["secondary"])


def _section_ministry_affinity(ctx: _RenderContext) -> None:
    _section_flow(ctx, "Ministry Affinity")
    _affinity_list(ctx, ctx.report.data.missed_but_winnable.signals.ministry_affinity,
                   ctx.brand["accent"])


# ---------------------------------------------------------------------------
# Section registry
# ---------------------------------------------------------------------------

_SECTION_RENDERERS: dict[str, tuple[Callable[[_RenderContext], None], Callable[[ReportData], bool]]] = {
    "executive_summary": (
        _page_executive_summary, lambda r: True),
    "recent_wins": (
        _page_recent_wins, lambda r: bool(r.data.missed_but_winnable.recent_wins)),
    "missed_opportunities": (
        _page_missed_opportunities,
        lambda r: bool(r.data.missed_but_winnable.market_wins or r.data.estimated_missed_value > 0
                       or r.data.missed_but_winnable.signals.quantity_ranges
                       or r.data.missed_but_winnable.signals.price_ranges)),
    "price_band": (
        _section_price_band, lambda r: r.data.price_band is not None),
    "top_states": (
        _page_top_states, lambda r: bool(r.data.top_performing_states)),
    "top_sellers_by_dept": (
        _section_top_sellers_by_dept, lambda r: bool(r.data.top_sellers_by_dept)),
    "category_listing": (
        _section_category_listing, lambda r: bool(r.data.category_listing)),
    "all_departments": (
        _section_all_departments, lambda r: bool(r.data.all_departments)),
    "low_competition": (
        _page_low_competition,
        lambda r: bool(r.data.low_competition.results or r.data.low_competition.count)),
    "department_affinity": (
        _page_department_affinity,
        lambda r: bool(r.data.missed_but_winnable.signals.dept_affinity)),
    "organization_affinity": (
        _section_organization_affinity,
        lambda r: bool(r.data.missed_but_winnable.signals.org_affinity)),
    "ministry_affinity": (
        _section_ministry_affinity,
        lambda r: bool(r.data.missed_but_winnable.signals.ministry_affinity)),
}

SECTIONS: tuple[str, ...] = tuple(_SECTION_RENDERERS)


def resolve_sections(requested: Optional[list[str]] = None) -> list[str]:
    """Normalise a section selection into render order.

    An empty or missing selection means every section. Unknown names are
    logged and ignored.
    """
    if not requested:
        return list(SECTIONS)
    wanted = {s.strip().lower().replace("-", "_") for s in requested if s and s.strip()}
    for name in sorted(wanted - set(SECTIONS)):
        logger.warning("Unknown report section '%s' ignored", name)
    return [s for s in SECTIONS if s in wanted]


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def render_report(
    report: ReportData,
    sections: Optional[list[str]] = None,
    cfg: Optional[dict[str, Any]] = None,
    surface=None,
) -> RenderedReport:
    """Lay out the full report for one payload.

    Args:
        report: Parsed report payload (read-only for the whole call).
        sections: Section keys to render; None uses ``report.sections`` from
            the config, and an empty selection renders everything.
        cfg: Parsed config.yaml; None uses built-in defaults.
        surface: Drawing surface; defaults to a new ReportLab canvas.

    Returns:
        RenderedReport with the PDF bytes and page count.
    """
    cfg = cfg or {}
    report_cfg = cfg.get("report", {}) or {}
    brand = {**DEFAULT_BRAND, **(report_cfg.get("brand") or {})}
    text = {**DEFAULT_TEXT, **{k: str(report_cfg[k]) for k in DEFAULT_TEXT
                    if report_cfg.get(k) is not None}}
    layout = PageLayout.from_config(cfg.get("layout"))
    templates_dir = (cfg.get("paths") or {}).get("templates_dir", "templates")

    if sections is None:
        sections = report_cfg.get("sections")
    selected = resolve_sections(sections)

    summary = compute_summary(report)
    narrative = generate_narrative(report, summary, templates_dir)

    params = report.meta.params
    if surface is None:
        surface = ReportLabSurface(
            layout,
            title=f"{text['cover_title'].title()} — {params.seller_name or 'N/A'}",
            author=text["header_text"],
        )
    chrome = PageChrome(
        header_text=text["header_text"],
        generated_label=_date(report.meta.report_generated_at),
        footer_label=text["footer_label"],
        colour=brand["chrome"],
    )
    cursor = LayoutCursor(surface, layout, chrome)
    ctx = _RenderContext(cursor, report, summary, narrative, brand, text)

    cursor.begin()
    _page_cover(ctx)

    rendered = []
    for key in selected:
        render, has_data = _SECTION_RENDERERS[key]
        if not has_data(report):
            logger.debug("Section '%s' skipped — no data in payload", key)
            continue
        render(ctx)
        rendered.append(key)

    page_count = surface.page_number
    pdf_bytes = surface.finish()
    logger.info(
        "Report rendered — %d pages | sections: %s",
        page_count, ", ".join(rendered) or "cover only",
    )
    return RenderedReport(pdf_bytes=pdf_bytes, page_count=page_count, sections=rendered)


def _load_config(config_path: str = "config.yaml") -> dict[str, Any]:
    with open(config_path, "r") as fh:
        return yaml.safe_load(fh) or {}


def _slug(text: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "_", text).strip("_").lower() or "seller"


def generate_pdf(
    report: ReportData,
    sections: Optional[list[str]] = None,
    config_path: str = "config.yaml",
    output_path: Optional[str] = None,
) -> Path:
    """Render the report and write it to disk.

    Args:
        report: Parsed report payload.
        sections: Section keys to render (see ``SECTIONS``).
        config_path: Path to configuration YAML.
        output_path: Explicit destination; defaults to paths.output_dir /
            paths.pdf_filename from the config.

    Returns:
        Path to the generated PDF file.
    """
    cfg = _load_config(config_path)
    rendered = render_report(report, sections, cfg)

    if output_path is None:
        paths = cfg.get("paths") or {}
        filename = paths.get("pdf_filename", "tender_report_{seller}_{date}.pdf").format(
            seller=_slug(report.meta.params.seller_name),
            date=datetime.today().strftime("%Y%m%d"),
        )
        output_path = Path(paths.get("output_dir", "data/output")) / filename

    path = rendered.save(output_path)
    logger.info("PDF report saved to %s (%d pages)", path, rendered.page_count)
    return path
