"""Tests for the aggregation engine and calculation pipeline."""

import math
import random

import pytest

from ifta_calc.access import AccessTier
from ifta_calc.calculator import CalculationResult, IftaCalculator, aggregate
from ifta_calc.parser import TripRow, parse_trip_data
from ifta_calc.rates import GALLONS_PER_LITRE, RateLookup, RateTable

SCENARIO_TEXT = "TX,1200,130\nON,500,190"


@pytest.fixture
def table() -> RateTable:
    return RateTable(quarter="2025-Q3", rates={"TX": 0.20, "ON": 0.427, "OR": 0.0, "OK": 0.2})


@pytest.fixture
def calc() -> IftaCalculator:
    return IftaCalculator()


class StaticProvider:
    def __init__(self, lookup: RateLookup):
        self.lookup = lookup
        self.quarters: list[str] = []

    def get_rates(self, quarter: str) -> RateLookup:
        self.quarters.append(quarter)
        return self.lookup


def _rows(text: str) -> list[TripRow]:
    return parse_trip_data(text).rows


# ── Totals ───────────────────────────────────────────────────────────


def test_paid_scenario_totals(table: RateTable):
    agg = aggregate(_rows(SCENARIO_TEXT), table, math.inf)
    result = agg.result
    assert result.total_miles == 1700
    assert result.total_gallons == pytest.approx(180.19268, abs=1e-9)
    assert result.tax_owed == pytest.approx(130 * 0.20 + 190 * GALLONS_PER_LITRE * 0.427, abs=1e-9)
    assert result.tax_owed == pytest.approx(47.43, abs=0.01)
    assert result.mpg == pytest.approx(1700 / 180.19268)
    assert agg.cap_warning is None


def test_two_rows_fit_the_free_cap(table: RateTable):
    agg = aggregate(_rows(SCENARIO_TEXT), table, AccessTier.ANONYMOUS.row_cap)
    assert len(agg.included_rows) == 2
    assert agg.excluded_for_cap == []
    assert agg.cap_warning is None


def test_province_gallons_converted(table: RateTable):
    agg = aggregate(_rows("ON,0,375.5"), table)
    assert agg.result.total_gallons == pytest.approx(375.5 * 0.264172, abs=1e-9)
    assert agg.line_items[0].gallons == pytest.approx(375.5 * 0.264172, abs=1e-9)


def test_total_miles_independent_of_order(table: RateTable):
    rows = _rows("TX,100.5,10\nON,200.25,40\nOK,300,30\nOR,50,5")
    shuffled = list(rows)
    random.Random(7).shuffle(shuffled)
    assert aggregate(rows, table).result.total_miles == pytest.approx(650.75)
    assert aggregate(shuffled, table).result.total_miles == pytest.approx(650.75)


def test_oregon_counts_miles_and_fuel_but_no_tax(table: RateTable):
    agg = aggregate(_rows("OR,500,50"), table)
    assert agg.result.total_miles == 500
    assert agg.result.total_gallons == 50
    assert agg.result.tax_owed == 0
    assert agg.unknown_jurisdiction_rows == []


def test_empty_rows_give_zero_result(table: RateTable):
    agg = aggregate([], table)
    assert agg.result == CalculationResult()


# ── Row cap ──────────────────────────────────────────────────────────


def test_cap_keeps_first_rows(table: RateTable):
    rows = _rows("TX,100,10\nON,200,40\nOK,300,30")
    agg = aggregate(rows, table, 2)
    assert agg.displayed_rows == rows[:2]
    assert agg.excluded_for_cap == rows[2:]
    assert agg.result.total_miles == 300
    assert agg.truncated
    assert "1 row(s)" in agg.cap_warning


def test_cap_is_prefix_stable_regardless_of_content(table: RateTable):
    rows = _rows("ZZ,1,1\nOR,0,0\nTX,100,10\nON,5,5")
    agg = aggregate(rows, table, 2)
    assert [r.source_line for r in agg.displayed_rows] == [1, 2]


def test_infinite_cap_never_truncates(table: RateTable):
    rows = [TripRow("TX", 1.0, 1.0, i) for i in range(1, 501)]
    agg = aggregate(rows, table, math.inf)
    assert len(agg.included_rows) == 500
    assert agg.cap_warning is None


def test_negative_cap_rejected(table: RateTable):
    with pytest.raises(ValueError):
        aggregate([], table, -1)


# ── Unknown jurisdictions ────────────────────────────────────────────


def test_unknown_jurisdiction_excluded_but_listed(table: RateTable):
    agg = aggregate(_rows("ZZ,100,10"), table)
    assert [r.jurisdiction for r in agg.unknown_jurisdiction_rows] == ["ZZ"]
    assert [r.jurisdiction for r in agg.displayed_rows] == ["ZZ"]
    assert agg.result.total_miles == 0
    assert agg.result.total_gallons == 0
    assert agg.result.tax_owed == 0
    assert agg.result.mpg == 0


def test_unknown_miles_not_added(table: RateTable):
    agg = aggregate(_rows("TX,100,10\nZZ,900,90"), table)
    assert agg.result.total_miles == 100
    assert agg.result.mpg == 10


def test_unknown_codes_deduplicated(table: RateTable):
    agg = aggregate(_rows("ZZ,1,1\nXX,1,1\nZZ,2,2"), table)
    assert agg.unknown_jurisdictions == ["ZZ", "XX"]


# ── Pipeline ─────────────────────────────────────────────────────────


def test_pipeline_paid_tier(calc: IftaCalculator):
    outcome = calc.calculate(SCENARIO_TEXT, "2025-Q3", AccessTier.AUTHENTICATED_PAID)
    assert outcome.rate_source == "builtin"
    assert outcome.result.total_miles == 1700
    assert outcome.result.tax_owed == pytest.approx(47.43, abs=0.01)
    assert outcome.errors == []
    assert outcome.warnings == []


def test_pipeline_anonymous_cap_advisory(calc: IftaCalculator):
    outcome = calc.calculate("TX,100,10\nON,200,40\nOK,300,30", "2025-Q3")
    assert len(outcome.rows) == 2
    assert outcome.result.total_miles == 300
    assert any("Row limit of 2" in w for w in outcome.warnings)
    assert AccessTier.ANONYMOUS.limit_message in outcome.warnings


def test_pipeline_unpaid_copy(calc: IftaCalculator):
    outcome = calc.calculate("TX,1,1\nTX,1,1\nTX,1,1", "2025-Q3", AccessTier.AUTHENTICATED_UNPAID)
    assert AccessTier.AUTHENTICATED_UNPAID.limit_message in outcome.warnings


def test_pipeline_reports_parse_errors(calc: IftaCalculator):
    outcome = calc.calculate("TX,abc,10", "2025-Q3")
    assert outcome.rows == []
    assert outcome.errors == ["Row 1: Invalid miles value"]
    assert outcome.result.mpg == 0


def test_pipeline_unknown_jurisdiction_advisory(calc: IftaCalculator):
    outcome = calc.calculate("ZZ,100,10", "2025-Q3")
    assert outcome.warnings == [
        "Unknown jurisdictions: ZZ. These will be excluded from calculations."
    ]


def test_pipeline_surfaces_rate_fallback_warning(table: RateTable):
    provider = StaticProvider(
        RateLookup(table=table, source="fallback", warning="Failed to load live rates")
    )
    outcome = IftaCalculator(provider).calculate(SCENARIO_TEXT, "2025-Q1")
    assert provider.quarters == ["2025-Q1"]
    assert outcome.warnings[0] == "Failed to load live rates"
    assert outcome.result.total_miles == 1700


def test_pipeline_is_deterministic(calc: IftaCalculator):
    text = "TX,1200.7,130.3\nON,500.1,190.9\nOK,12,3"
    first = calc.calculate(text, "2025-Q3", AccessTier.AUTHENTICATED_PAID)
    second = calc.calculate(text, "2025-Q3", AccessTier.AUTHENTICATED_PAID)
    assert first.result == second.result
    assert first.rows == second.rows
