"""
test_metrics.py — Unit tests for the bid performance summary.

Tests cover:
    - Guarded ratios (no division by zero on empty payloads)
    - Totals and averages from the sample payload
    - Department revenue ranking
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from tender_report.metrics import _share, compute_summary
from tender_report.narrative import _pct


class TestShare:

    def test_zero_whole_returns_zero(self):
        assert _share(5, 0) == 0.0

    def test_rounded_to_one_decimal(self):
        assert _share(1, 3) == 33.3


class TestEmptyPayload:
    """No wins and no market wins."""

    def test_win_rate_renders_zero(self, report_factory):
        summary = compute_summary(report_factory())
        assert summary.total_bids == 0
        assert _pct(summary.win_rate) == "0.0%"
        assert _pct(summary.loss_rate) == "0.0%"

    def test_values_are_zero(self, report_factory):
        summary = compute_summary(report_factory())
        assert summary.total_value == 0.0
        assert summary.avg_value == 0.0
        assert summary.department_revenue == []

    def test_zero_days_guarded(self, report_factory):
        summary = compute_summary(report_factory(wins=2, days=0))
        assert summary.avg_bids_per_day == 0.0


class TestSampleSummary:
    """Figures derived from data/sample/report.json."""

    @pytest.fixture
    def summary(self, sample_report):
        return compute_summary(sample_report)

    def test_bid_counts(self, summary):
        assert summary.wins == 5
        assert summary.losses == 4
        assert summary.total_bids == 9

    def test_rates(self, summary):
        assert summary.win_rate == 55.6
        assert summary.loss_rate == 44.4

    def test_total_and_average_value(self, summary):
        assert summary.total_value == pytest.approx(2265500.5)
        assert summary.avg_value == 453100

    def test_bids_per_day(self, summary):
        assert summary.avg_bids_per_day == 0.15

    def test_department_revenue_ranked(self, summary):
        depts = [d for d, _ in summary.department_revenue]
        assert depts == [
            "Department of Labour and Employment",
            "Department of Health and Family Welfare",
            "Department of Defence",
        ]
        assert summary.department_revenue[1][1] == 683000


class TestCounts:

    def test_win_rate_from_counts(self, report_factory):
        summary = compute_summary(report_factory(wins=1, market=3))
        assert summary.win_rate == 25.0
        assert summary.loss_rate == 75.0

    def test_top_n_limits_departments(self, report_factory):
        summary = compute_summary(report_factory(wins=3), top_n=1)
        assert summary.department_revenue == [("Dept A", 300000.0)]
