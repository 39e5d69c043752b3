"""
metrics.py — Bid Performance Summary.

Derives the headline figures shown on the executive summary from the
payload's win lists:

    Participation: total bids, average bids per day
    Performance:   wins, losses, win rate, loss rate
    Financial:     total won value, average order value
    Departments:   won value per department (top N)

Total bids is the seller's recent wins plus the market wins recorded for the
same tenders (each a bid the seller took part in but lost). Ratios are guarded
so an empty payload yields 0.0 rather than NaN.
"""

import logging
from dataclasses import dataclass, field

import pandas as pd

from tender_report.payload import Bid, ReportData

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data structure
# ---------------------------------------------------------------------------

@dataclass
class PerformanceSummary:
    """Headline bid performance KPIs for one seller."""
    total_bids: int
    wins: int
    losses: int
    win_rate: float            # percent, one decimal
    loss_rate: float           # percent, one decimal
    total_value: float
    avg_value: float
    avg_bids_per_day: float
    department_revenue: list = field(default_factory=list)   # [(dept, value)]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _share(part: float, whole: float) -> float:
    """Percentage of ``part`` in ``whole``; 0.0 when ``whole`` is zero."""
    return round(part / whole * 100, 1) if whole else 0.0


def _bids_frame(bids: list[Bid]) -> pd.DataFrame:
    """Tabulate bids for aggregation (columns exist even when empty)."""
    return pd.DataFrame(
        [{"dept": b.dept.strip(), "org": b.org, "total_price": b.total_price} for b in bids],
        columns=["dept", "org", "total_price"],
    )


def _department_revenue(wins: pd.DataFrame, top_n: int) -> list[tuple[str, float]]:
    """Sum won value per department, largest first."""
    named = wins[wins["dept"] != ""]
    if named.empty:
        return []
    totals = (
        named.groupby("dept")["total_price"].sum()
        .sort_values(ascending=False, kind="mergesort")
        .head(top_n)
    )
    return [(dept, round(float(value), 2)) for dept, value in totals.items()]


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def compute_summary(report: ReportData, top_n: int = 5) -> PerformanceSummary:
    """Compute the performance summary for a report payload.

    Args:
        report: Parsed report payload.
        top_n: Number of departments kept in the revenue breakdown.

    Returns:
        PerformanceSummary instance.
    """
    mbw = report.data.missed_but_winnable
    wins_df = _bids_frame(mbw.recent_wins)

    wins = len(mbw.recent_wins)
    losses = len(mbw.market_wins)
    total_bids = wins + losses

    total_value = float(wins_df["total_price"].sum()) if wins else 0.0
    avg_value = float(round(total_value / wins)) if wins else 0.0
    days = report.meta.params.days
    avg_per_day = round(total_bids / days, 2) if days > 0 else 0.0

    summary = PerformanceSummary(
        total_bids=total_bids,
        wins=wins,
        losses=losses,
        win_rate=_share(wins, total_bids),
        loss_rate=_share(losses, total_bids),
        total_value=round(total_value, 2),
        avg_value=avg_value,
        avg_bids_per_day=avg_per_day,
        department_revenue=_department_revenue(wins_df, top_n),
    )

    logger.info(
        "Performance computed — bids: %d | wins: %d | win rate: %.1f%% | value: %.0f",
        summary.total_bids, summary.wins, summary.win_rate, summary.total_value,
    )
    return summary
