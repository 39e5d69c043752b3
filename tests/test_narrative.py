"""
test_narrative.py — Unit tests for the commentary generator.

Tests cover:
    - Formatting helpers (_inr, _pct, _count, _quantity, _date)
    - Win-rate band selection
    - Generated commentary content
"""

import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from tender_report.metrics import PerformanceSummary, compute_summary
from tender_report.narrative import (
    _count,
    _date,
    _inr,
    _pct,
    _quantity,
    _win_rate_band,
    generate_narrative,
)


class TestFormattingHelpers:
    """Rupee, percentage, count and date formatting."""

    def test_inr_lakh_grouping(self):
        assert _inr(1234567.5) == "Rs 12,34,567.50"

    def test_inr_crore_grouping(self):
        assert _inr(12345678.9) == "Rs 1,23,45,678.90"

    def test_inr_whole_amount_has_no_decimals(self):
        assert _inr(100000) == "Rs 1,00,000"

    def test_inr_small(self):
        assert _inr(999) == "Rs 999"

    def test_inr_zero(self):
        assert _inr(0) == "Rs 0"

    def test_inr_negative(self):
        assert _inr(-2500) == "Rs -2,500"

    def test_pct(self):
        assert _pct(55.6) == "55.6%"

    def test_pct_zero(self):
        assert _pct(0.0) == "0.0%"

    def test_count(self):
        assert _count(1234567) == "12,34,567"

    def test_quantity_missing(self):
        assert _quantity(None) == "N/A"

    def test_quantity_whole(self):
        assert _quantity(2500.0) == "2,500"

    def test_quantity_fractional(self):
        assert _quantity(2.5) == "2.5"

    def test_date_iso(self):
        assert _date("2025-03-02") == "02 Mar 2025"

    def test_date_with_time(self):
        assert _date("2025-03-14T09:30:00Z") == "14 Mar 2025"

    def test_date_empty(self):
        assert _date("") == "N/A"

    def test_date_unparseable_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert _date("not recorded") == "N/A"
        assert "not recorded" in caplog.text


def _summary(total_bids: int, win_rate: float) -> PerformanceSummary:
    wins = round(total_bids * win_rate / 100)
    return PerformanceSummary(
        total_bids=total_bids, wins=wins, losses=total_bids - wins,
        win_rate=win_rate, loss_rate=100 - win_rate if total_bids else 0.0,
        total_value=0.0, avg_value=0.0, avg_bids_per_day=0.0,
    )


class TestWinRateBand:

    def test_strong(self):
        assert _win_rate_band(_summary(10, 30.0)) == "strong"

    def test_moderate(self):
        assert _win_rate_band(_summary(10, 10.0)) == "moderate"

    def test_weak(self):
        assert _win_rate_band(_summary(10, 5.0)) == "weak"

    def test_no_activity(self):
        assert _win_rate_band(_summary(0, 0.0)) == "no_activity"


class TestNarrativeGeneration:
    """End-to-end commentary from the sample payload."""

    @pytest.fixture
    def narrative(self, sample_report):
        return generate_narrative(sample_report, compute_summary(sample_report))

    def test_executive_mentions_seller_and_rate(self, narrative):
        text = narrative.executive_commentary
        assert "Shree Ganesh Medical Supplies Pvt Ltd" in text
        assert "55.6%" in text
        assert "{" not in text

    def test_missed_value_formatted(self, narrative):
        assert "Rs 48,75,000" in narrative.missed_value_commentary

    def test_low_competition(self, narrative):
        assert narrative.low_competition_commentary.startswith("3 open tenders")
        assert "14 Mar 2025" in narrative.low_competition_commentary

    def test_strategy_passed_through(self, narrative, sample_report):
        assert narrative.strategy_summary == sample_report.data.missed_but_winnable.strategy_summary

    def test_empty_payload_uses_no_activity(self, report_factory):
        report = report_factory()
        narrative = generate_narrative(report, compute_summary(report))
        assert narrative.executive_commentary.startswith("No completed bids")
        assert "No value estimate" in narrative.missed_value_commentary
