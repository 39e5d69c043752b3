"""
payload.py — Analytics payload model.

The upstream analytics service delivers one JSON document per report: request
metadata plus a set of optional, already-computed data blocks (seller bids,
price band, state / department / category aggregates, low-competition bids
and AI-derived affinity signals).

This module maps that document onto read-only dataclasses. Keys are accepted
in the upstream camelCase as well as snake_case. Missing or malformed
optional values are defaulted (zero, empty list, None) rather than treated as
errors, so a sparse payload still renders.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Bid:
    """One tender bid (won by the seller, by a competitor, or still open)."""
    bid_number: str = ""
    org: str = ""
    dept: str = ""
    ministry: str = ""
    seller: str = ""
    item: str = ""
    quantity: Optional[float] = None
    total_price: float = 0.0
    ended_at: str = ""


@dataclass(frozen=True)
class PriceBand:
    highest: float
    lowest: float
    average: float


@dataclass(frozen=True)
class StatePerformance:
    state: str
    value: float
    count: int


@dataclass(frozen=True)
class DeptSeller:
    seller: str
    dept: str
    value: float


@dataclass(frozen=True)
class CategoryStat:
    category: str
    count: int
    value: float


@dataclass(frozen=True)
class DepartmentTenders:
    department: str
    total_tenders: int


@dataclass(frozen=True)
class LowCompetition:
    results: list = field(default_factory=list)
    count: int = 0
    generated_at: str = ""


@dataclass(frozen=True)
class AffinitySignal:
    """Engagement indicator between the seller and one buyer entity."""
    name: str
    signal: str


@dataclass(frozen=True)
class AiSignals:
    org_affinity: list = field(default_factory=list)
    dept_affinity: list = field(default_factory=list)
    ministry_affinity: list = field(default_factory=list)
    quantity_ranges: list = field(default_factory=list)
    price_ranges: list = field(default_factory=list)


@dataclass(frozen=True)
class MissedButWinnable:
    seller: str = ""
    recent_wins: list = field(default_factory=list)
    market_wins: list = field(default_factory=list)
    strategy_summary: str = ""
    signals: AiSignals = field(default_factory=AiSignals)


@dataclass(frozen=True)
class ReportParams:
    seller_name: str = ""
    department: str = ""
    offered_item: str = ""
    days: int = 0
    limit: int = 0
    email: str = ""

    @property
    def offered_items(self) -> list[str]:
        return [item.strip() for item in self.offered_item.split(",") if item.strip()]


@dataclass(frozen=True)
class ReportMeta:
    report_generated_at: str = ""
    params: ReportParams = field(default_factory=ReportParams)


@dataclass(frozen=True)
class ReportSections:
    seller_bids: list = field(default_factory=list)
    estimated_missed_value: float = 0.0
    price_band: Optional[PriceBand] = None
    top_performing_states: list = field(default_factory=list)
    top_sellers_by_dept: list = field(default_factory=list)
    category_listing: list = field(default_factory=list)
    all_departments: list = field(default_factory=list)
    low_competition: LowCompetition = field(default_factory=LowCompetition)
    missed_but_winnable: MissedButWinnable = field(default_factory=MissedButWinnable)


@dataclass(frozen=True)
class ReportData:
    """Complete, read-only input for one render call."""
    meta: ReportMeta
    data: ReportSections


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _get(obj: Any, *keys: str, default: Any = None) -> Any:
    """Return the first present, non-null key of ``obj`` (a dict) or ``default``."""
    if not isinstance(obj, dict):
        return default
    for key in keys:
        value = obj.get(key)
        if value is not None:
            return value
    return default


def _num(value: Any, default: float = 0.0) -> float:
    """Coerce numbers and numeric strings ('1,250.50') to float.

    NaN and infinities (JSON literals or strings) fall back to ``default``.
    """
    if value is None or value == "":
        return default
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        try:
            result = float(str(value).replace(",", "").strip())
        except ValueError:
            logger.debug("Non-numeric value %r defaulted to %s", value, default)
            return default
    if not math.isfinite(result):
        logger.debug("Non-finite value %r defaulted to %s", value, default)
        return default
    return result


def _int(value: Any, default: int = 0) -> int:
    return int(round(_num(value, default)))


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


# ---------------------------------------------------------------------------
# Block parsers
# ---------------------------------------------------------------------------

def _bid(raw: dict) -> Bid:
    quantity = _get(raw, "quantity", "qty")
    return Bid(
        bid_number=_str(_get(raw, "bid_number", "bidNumber", default="")),
        org=_str(_get(raw, "org", "organization", "organisation", default="")),
        dept=_str(_get(raw, "dept", "department", default="")),
        ministry=_str(_get(raw, "ministry", default="")),
        seller=_str(_get(raw, "seller", "seller_name", "sellerName", default="")),
        item=_str(_get(raw, "item", "offered_item", "offeredItem", default="")),
        quantity=_num(quantity) if quantity not in (None, "") else None,
        total_price=_num(_get(raw, "total_price", "totalPrice", "value")),
        ended_at=_str(_get(raw, "ended_at", "endedAt", "end_date", default="")),
    )


def _bids(value: Any) -> list[Bid]:
    return [_bid(b) for b in _list(value) if isinstance(b, dict)]


def _price_band(raw: Any) -> Optional[PriceBand]:
    if not isinstance(raw, dict):
        return None
    return PriceBand(
        highest=_num(raw.get("highest")),
        lowest=_num(raw.get("lowest")),
        average=_num(raw.get("average")),
    )


def _affinities(value: Any, name_key: str) -> list[AffinitySignal]:
    out = []
    for raw in _list(value):
        if not isinstance(raw, dict):
            continue
        name = _str(_get(raw, name_key, "name", default="")).strip()
        if name:
            out.append(AffinitySignal(name=name, signal=_str(raw.get("signal", ""))))
    return out


def _signals(raw: Any) -> AiSignals:
    return AiSignals(
        org_affinity=_affinities(_get(raw, "org_affinity", "orgAffinity"), "org"),
        dept_affinity=_affinities(_get(raw, "dept_affinity", "deptAffinity"), "dept"),
        ministry_affinity=_affinities(_get(raw, "ministry_affinity", "ministryAffinity"), "ministry"),
        quantity_ranges=[_str(r) for r in _list(_get(raw, "quantity_ranges", "quantityRanges"))],
        price_ranges=[_str(r) for r in _list(_get(raw, "price_ranges", "priceRanges"))],
    )


def _missed_but_winnable(raw: Any) -> MissedButWinnable:
    ai = _get(raw, "ai", default={})
    return MissedButWinnable(
        seller=_str(_get(raw, "seller", default="")),
        recent_wins=_bids(_get(raw, "recentWins", "recent_wins")),
        market_wins=_bids(_get(raw, "marketWins", "market_wins")),
        strategy_summary=_str(_get(ai, "strategy_summary", "strategySummary", default="")).strip(),
        signals=_signals(_get(ai, "signals", default={})),
    )


def _low_competition(raw: Any) -> LowCompetition:
    results = _bids(_get(raw, "results"))
    return LowCompetition(
        results=results,
        count=_int(_get(raw, "count"), default=len(results)),
        generated_at=_str(_get(raw, "generated_at", "generatedAt", default="")),
    )


def _sections(raw: dict) -> ReportSections:
    states = [
        StatePerformance(
            state=_str(s.get("state", "")),
            value=_num(s.get("value")),
            count=_int(s.get("count")),
        )
        for s in _list(_get(raw, "topPerformingStates", "top_performing_states"))
        if isinstance(s, dict)
    ]
    dept_sellers = [
        DeptSeller(
            seller=_str(s.get("seller", "")),
            dept=_str(s.get("dept", "")),
            value=_num(s.get("value")),
        )
        for s in _list(_get(raw, "topSellersByDept", "top_sellers_by_dept"))
        if isinstance(s, dict)
    ]
    categories = [
        CategoryStat(
            category=_str(c.get("category", "")),
            count=_int(c.get("count")),
            value=_num(c.get("value")),
        )
        for c in _list(_get(raw, "categoryListing", "category_listing"))
        if isinstance(c, dict)
    ]
    departments = [
        DepartmentTenders(
            department=_str(d.get("department", "")),
            total_tenders=_int(d.get("total_tenders")),
        )
        for d in _list(_get(raw, "allDepartments", "all_departments"))
        if isinstance(d, dict)
    ]
    return ReportSections(
        seller_bids=_bids(_get(raw, "sellerBids", "seller_bids")),
        estimated_missed_value=_num(_get(raw, "estimatedMissedValue", "estimated_missed_value")),
        price_band=_price_band(_get(raw, "priceBand", "price_band")),
        top_performing_states=states,
        top_sellers_by_dept=dept_sellers,
        category_listing=categories,
        all_departments=departments,
        low_competition=_low_competition(_get(raw, "lowCompetitionBids", "low_competition_bids", default={})),
        missed_but_winnable=_missed_but_winnable(_get(raw, "missedButWinnable", "missed_but_winnable", default={})),
    )


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def parse_payload(raw: dict[str, Any]) -> ReportData:
    """Build a ReportData snapshot from a decoded payload document.

    Args:
        raw: Decoded JSON object with ``meta`` and ``data`` keys.

    Returns:
        ReportData with every missing optional block defaulted.

    Raises:
        ValueError: If ``raw`` is not a JSON object.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Report payload must be a JSON object, got {type(raw).__name__}")

    meta_raw = _get(raw, "meta", default={})
    params_raw = _get(meta_raw, "params_used", "paramsUsed", default={})
    params = ReportParams(
        seller_name=_str(_get(params_raw, "sellerName", "seller_name", default="")).strip(),
        department=_str(_get(params_raw, "department", default="")).strip(),
        offered_item=_str(_get(params_raw, "offeredItem", "offered_item", default="")),
        days=_int(_get(params_raw, "days")),
        limit=_int(_get(params_raw, "limit")),
        email=_str(_get(params_raw, "email", default="")),
    )
    meta = ReportMeta(
        report_generated_at=_str(_get(meta_raw, "report_generated_at", "reportGeneratedAt", default="")),
        params=params,
    )
    data = _sections(_get(raw, "data", default={}))

    mbw = data.missed_but_winnable
    logger.debug(
        "Payload parsed — seller=%s | recent wins=%d | market wins=%d | states=%d",
        params.seller_name or "N/A", len(mbw.recent_wins), len(mbw.market_wins),
        len(data.top_performing_states),
    )
    return ReportData(meta=meta, data=data)


def load_payload(path: str) -> ReportData:
    """Read and parse a payload JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document is not a JSON object.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(
            f"Report payload not found at {p}. Export it from the analytics service first."
        )
    with open(p, "r", encoding="utf-8") as fh:
        raw = json.load(fh)
    logger.info("Loaded report payload from %s", p)
    return parse_payload(raw)
