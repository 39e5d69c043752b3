"""
charts.py — Report charts.

matplotlib figures rendered to PNG byte streams for embedding in the PDF.
Nothing is written to disk; everything passes through BytesIO.
"""

import io
import logging

import matplotlib
matplotlib.use("Agg")  # non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

from tender_report.metrics import PerformanceSummary

logger = logging.getLogger(__name__)


def _mpl_hex(h: str) -> str:
    """Return hex with # for matplotlib."""
    return f"#{h.lstrip('#')}"


def _fig_to_png(fig) -> io.BytesIO:
    """Render a matplotlib figure to an in-memory PNG.

    Args:
        fig: Matplotlib Figure object.

    Returns:
        BytesIO positioned at the start of the PNG data.
    """
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=150, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    plt.close(fig)
    buf.seek(0)
    return buf


def chart_win_loss(summary: PerformanceSummary, brand: dict) -> io.BytesIO:
    """Single stacked bar: wins vs losses share of all bids."""
    fig, ax = plt.subplots(figsize=(8, 1.3))
    fig.patch.set_facecolor("white")
    ax.set_facecolor("white")

    parts = [
        ("Wins", summary.wins, summary.win_rate, brand["secondary"]),
        ("Losses", summary.losses, summary.loss_rate, brand["accent"]),
    ]
    left = 0.0
    for label, count, share, colour in parts:
        if share <= 0:
            continue
        ax.barh(0, share, left=left, height=0.55, color=_mpl_hex(colour),
                label=f"{label}: {count} ({share:.1f}%)")
        if share >= 8:
            ax.text(left + share / 2, 0, f"{share:.1f}%", ha="center", va="center",
                    fontsize=9, color="white", fontweight="bold")
        left += share

    ax.set_xlim(0, 100)
    ax.set_yticks([])
    ax.xaxis.set_major_formatter(plt.FuncFormatter(lambda v, _: f"{v:.0f}%"))
    ax.tick_params(axis="x", labelsize=7.5)
    if left > 0:
        ax.legend(fontsize=8, loc="upper center", bbox_to_anchor=(0.5, -0.35),
                  ncol=2, frameon=False)
    ax.spines[["top", "right", "left"]].set_visible(False)
    fig.tight_layout()
    return _fig_to_png(fig)


def chart_top_states(states: list, brand: dict, limit: int = 10) -> io.BytesIO:
    """Horizontal bar chart: won value by state (largest on top)."""
    top = sorted(states, key=lambda s: s.value, reverse=True)[:limit]
    names = [s.state or "Unknown" for s in top][::-1]
    values = np.array([s.value for s in top][::-1]) / 1e5   # lakh

    fig, ax = plt.subplots(figsize=(8, 3.4))
    fig.patch.set_facecolor("white")
    ax.set_facecolor("white")

    y = np.arange(len(names))
    bars = ax.barh(y, values, color=_mpl_hex(brand["primary"]), alpha=0.9, zorder=3)
    for bar, value in zip(bars, values):
        ax.text(bar.get_width(), bar.get_y() + bar.get_height() / 2, f" {value:,.1f}L",
                va="center", fontsize=7.5, color=_mpl_hex(brand["dark"]))

    ax.set_yticks(y)
    ax.set_yticklabels(names, fontsize=8)
    ax.set_xlabel("Value (Rs lakh)", fontsize=8)
    ax.tick_params(axis="x", labelsize=7.5)
    ax.set_title("Top Performing States by Value", fontsize=10,
                 color=_mpl_hex(brand["primary"]), fontweight="bold", pad=8)
    ax.spines[["top", "right"]].set_visible(False)
    ax.grid(axis="x", linestyle="--", alpha=0.4, zorder=0)
    fig.tight_layout()
    return _fig_to_png(fig)
