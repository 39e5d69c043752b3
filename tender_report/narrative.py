"""
narrative.py — Report Commentary Generator.

Turns the performance summary and payload into short prose blocks using the
templates in ``templates/narrative.yaml``:

    1. Picks the template variant per section (win-rate band, value present)
    2. Resolves every {placeholder} with formatted values
    3. Returns a NarrativePackage with one text block per prose section

Also hosts the formatting helpers shared by the PDF builder: Indian-grouped
rupee amounts, percentages and short dates.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
import yaml

from tender_report.metrics import PerformanceSummary
from tender_report.payload import ReportData

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

STRONG_WIN_RATE = 30.0
MODERATE_WIN_RATE = 10.0


# ---------------------------------------------------------------------------
# Data structure
# ---------------------------------------------------------------------------

@dataclass
class NarrativePackage:
    """One commentary block per prose section."""
    executive_commentary: str
    missed_value_commentary: str
    low_competition_commentary: str
    strategy_summary: str


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def _group_indian(digits: str) -> str:
    """Insert separators in Indian style: last three digits, then pairs."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def _inr(value: float) -> str:
    """Format a rupee amount, e.g. 1234567.5 -> 'Rs 12,34,567.50'.

    Whole amounts are printed without decimals.
    """
    sign = "-" if value < 0 else ""
    whole, frac = f"{abs(value):.2f}".split(".")
    text = f"Rs {sign}{_group_indian(whole)}"
    return text if frac == "00" else f"{text}.{frac}"


def _pct(value: float, decimals: int = 1) -> str:
    """Format a value already expressed in percent: 12.345 -> '12.3%'."""
    return f"{value:.{decimals}f}%"


def _count(value: float) -> str:
    """Integer count with Indian digit grouping."""
    n = int(round(value))
    return ("-" if n < 0 else "") + _group_indian(str(abs(n)))


def _quantity(value) -> str:
    if value is None:
        return "N/A"
    return _count(value) if float(value).is_integer() else f"{value:g}"


def _date(value: str) -> str:
    """Render an ISO-ish date string as '05 Mar 2025'.

    Empty values and strings that cannot be parsed render as 'N/A'; the latter
    are logged so bad upstream data is visible.
    """
    if not value:
        return "N/A"
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        logger.warning("Unparseable date %r rendered as N/A", value)
        return "N/A"
    return ts.strftime("%d %b %Y")


def _truncate(text: str, n: int) -> str:
    return (text or "")[:n]


def _load_templates(templates_dir: str = "templates") -> dict[str, Any]:
    """Load commentary templates from narrative.yaml.

    Args:
        templates_dir: Directory containing narrative.yaml.

    Returns:
        Parsed template dictionary.
    """
    path = Path(templates_dir) / "narrative.yaml"
    if not path.exists() and not Path(templates_dir).is_absolute():
        path = _PROJECT_ROOT / templates_dir / "narrative.yaml"
    with open(path, "r") as fh:
        return yaml.safe_load(fh)


# ---------------------------------------------------------------------------
# Section generators
# ---------------------------------------------------------------------------

def _win_rate_band(summary: PerformanceSummary) -> str:
    if summary.total_bids == 0:
        return "no_activity"
    if summary.win_rate >= STRONG_WIN_RATE:
        return "strong"
    if summary.win_rate >= MODERATE_WIN_RATE:
        return "moderate"
    return "weak"


def _gen_executive(
    report: ReportData,
    summary: PerformanceSummary,
    templates: dict[str, Any],
) -> str:
    tmpl = templates["executive_summary"][_win_rate_band(summary)]
    return tmpl.format(
        seller=report.meta.params.seller_name or "The seller",
        wins=summary.wins,
        total_bids=summary.total_bids,
        days=report.meta.params.days,
        win_rate=_pct(summary.win_rate),
        total_value=_inr(summary.total_value),
        avg_value=_inr(summary.avg_value),
    ).strip()


def _gen_missed_value(report: ReportData, templates: dict[str, Any]) -> str:
    data = report.data
    tmpl_set = templates["missed_value"]
    tmpl = tmpl_set["with_value"] if data.estimated_missed_value > 0 else tmpl_set["without_value"]
    return tmpl.format(
        seller=report.meta.params.seller_name or "the seller",
        market_wins=len(data.missed_but_winnable.market_wins),
        missed_value=_inr(data.estimated_missed_value),
    ).strip()


def _gen_low_competition(report: ReportData, templates: dict[str, Any]) -> str:
    low = report.data.low_competition
    return templates["low_competition"].format(
        count=low.count,
        generated_at=_date(low.generated_at),
    ).strip()


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

def generate_narrative(
    report: ReportData,
    summary: PerformanceSummary,
    templates_dir: str = "templates",
) -> NarrativePackage:
    """Generate every commentary block for a report.

    Args:
        report: Parsed report payload.
        summary: Performance summary from metrics.compute_summary().
        templates_dir: Directory holding narrative.yaml.

    Returns:
        NarrativePackage with one text block per prose section.
    """
    templates = _load_templates(templates_dir)

    narrative = NarrativePackage(
        executive_commentary=_gen_executive(report, summary, templates),
        missed_value_commentary=_gen_missed_value(report, templates),
        low_competition_commentary=_gen_low_competition(report, templates),
        strategy_summary=report.data.missed_but_winnable.strategy_summary,
    )
    logger.info(
        "Narrative generated — band: %s | executive commentary: %d chars",
        _win_rate_band(summary), len(narrative.executive_commentary),
    )
    return narrative
