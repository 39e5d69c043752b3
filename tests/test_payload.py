"""
test_payload.py — Unit tests for payload parsing.

Tests cover:
    - Defaults for a sparse / empty document
    - camelCase and snake_case key handling
    - Numeric coercion of upstream strings
    - File loading errors
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from tender_report.payload import ReportParams, _int, _num, load_payload, parse_payload


class TestDefaults:
    """A sparse payload still produces a complete snapshot."""

    def test_empty_document(self):
        report = parse_payload({})
        assert report.meta.params.seller_name == ""
        assert report.meta.params.days == 0
        assert report.data.price_band is None
        assert report.data.missed_but_winnable.recent_wins == []
        assert report.data.low_competition.count == 0

    def test_null_blocks_are_defaulted(self):
        report = parse_payload({"meta": None, "data": {"priceBand": None, "lowCompetitionBids": None}})
        assert report.data.price_band is None
        assert report.data.low_competition.results == []

    def test_non_object_rejected(self):
        with pytest.raises(ValueError):
            parse_payload([1, 2, 3])


class TestKeyStyles:
    """Upstream camelCase keys and snake_case equivalents."""

    def test_sample_camel_case(self, sample_report):
        params = sample_report.meta.params
        assert params.seller_name == "Shree Ganesh Medical Supplies Pvt Ltd"
        assert params.days == 60
        assert len(sample_report.data.missed_but_winnable.recent_wins) == 5
        assert sample_report.data.price_band.highest == 1845000

    def test_snake_case(self):
        report = parse_payload({
            "meta": {"params_used": {"seller_name": "Acme", "days": "30"}},
            "data": {"missed_but_winnable": {"recent_wins": [{"bidNumber": "B1", "totalPrice": "1,250.50"}]}},
        })
        win = report.data.missed_but_winnable.recent_wins[0]
        assert report.meta.params.seller_name == "Acme"
        assert report.meta.params.days == 30
        assert win.bid_number == "B1"
        assert win.total_price == 1250.5

    def test_market_win_seller_name(self, sample_report):
        first = sample_report.data.missed_but_winnable.market_wins[0]
        assert first.seller == "Medline Healthcare India"

    def test_missing_quantity_is_none(self, sample_report):
        last = sample_report.data.missed_but_winnable.recent_wins[-1]
        assert last.quantity is None

    def test_affinity_without_name_dropped(self):
        report = parse_payload({"data": {"missedButWinnable": {"ai": {"signals": {
            "deptAffinity": [{"dept": "Dept A", "signal": "strong"}, {"signal": "orphan"}],
        }}}}})
        names = [a.name for a in report.data.missed_but_winnable.signals.dept_affinity]
        assert names == ["Dept A"]

    def test_low_competition_count_defaults_to_results(self):
        report = parse_payload({"data": {"lowCompetitionBids": {"results": [{"bid_number": "X"}]}}})
        assert report.data.low_competition.count == 1


class TestHelpers:

    def test_num_handles_strings(self):
        assert _num("12,34,567.5") == 1234567.5

    def test_num_bad_value_defaults(self):
        assert _num("n/a") == 0.0

    @pytest.mark.parametrize("value", ["NaN", "inf", "-Infinity", float("nan"), float("inf")])
    def test_num_non_finite_defaults(self, value):
        assert _num(value) == 0.0

    def test_int_non_finite_defaults(self):
        assert _int("inf") == 0

    def test_non_finite_fields_in_document(self):
        report = parse_payload(json.loads(
            '{"meta": {"params_used": {"days": Infinity}},'
            ' "data": {"estimatedMissedValue": NaN,'
            ' "missedButWinnable": {"recentWins": [{"total_price": "NaN", "quantity": "inf"}]}}}'
        ))
        win = report.data.missed_but_winnable.recent_wins[0]
        assert report.meta.params.days == 0
        assert report.data.estimated_missed_value == 0.0
        assert win.total_price == 0.0
        assert win.quantity == 0.0

    def test_offered_items_split(self):
        params = ReportParams(offered_item=" Gloves, Masks ,, Syringes ")
        assert params.offered_items == ["Gloves", "Masks", "Syringes"]


class TestLoadPayload:

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_payload(str(tmp_path / "missing.json"))

    def test_reads_file(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text('{"meta": {"params_used": {"sellerName": "Acme"}}}', encoding="utf-8")
        assert load_payload(str(path)).meta.params.seller_name == "Acme"

    def test_non_object_file(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError):
            load_payload(str(path))
