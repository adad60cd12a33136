"""
IFTA aggregation engine.

Handles:
- Row-cap truncation by access tier
- Unknown jurisdiction exclusion
- Liter to gallon normalization for Canadian provinces
- Mileage, fuel, mpg and tax totals
- The end-to-end text -> results pipeline
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ifta_calc.access import AccessTier
from ifta_calc.parser import TripRow, parse_trip_data
from ifta_calc.rates import RateTable, RateTableProvider, normalize_quantity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationResult:
    """Totals over the rows that have a known rate."""

    total_miles: float = 0.0
    total_gallons: float = 0.0
    mpg: float = 0.0
    tax_owed: float = 0.0


@dataclass(frozen=True)
class LineItem:
    """Per-row contribution to the totals."""

    row: TripRow
    gallons: float
    rate: float

    @property
    def tax(self) -> float:
        return self.gallons * self.rate


@dataclass
class Aggregation:
    """Totals plus how every input row was classified."""

    result: CalculationResult
    displayed_rows: list[TripRow]
    included_rows: list[TripRow]
    excluded_for_cap: list[TripRow]
    unknown_jurisdiction_rows: list[TripRow]
    line_items: list[LineItem] = field(default_factory=list)
    cap_warning: Optional[str] = None

    @property
    def truncated(self) -> bool:
        return bool(self.excluded_for_cap)

    @property
    def unknown_jurisdictions(self) -> list[str]:
        """Distinct unknown codes in first-seen order."""
        return list(dict.fromkeys(r.jurisdiction for r in self.unknown_jurisdiction_rows))


def aggregate(
    rows: Sequence[TripRow],
    rate_table: RateTable,
    cap: float = math.inf,
) -> Aggregation:
    """
    Aggregate trip rows against a rate table.

    Only the first ``cap`` rows are processed. Rows whose jurisdiction is
    missing from the table stay visible but add nothing to any total.
    """
    if cap < 0:
        raise ValueError(f"Row cap must be non-negative, got {cap}")

    rows = list(rows)
    cap_warning = None
    if len(rows) > cap:
        limit = int(cap)
        displayed, dropped = rows[:limit], rows[limit:]
        cap_warning = (
            f"Row limit of {limit} reached: {len(dropped)} row(s) "
            "excluded from the calculation."
        )
    else:
        displayed, dropped = rows, []

    included: list[TripRow] = []
    unknown: list[TripRow] = []
    line_items: list[LineItem] = []
    total_miles = 0.0
    total_gallons = 0.0
    tax_owed = 0.0

    for row in displayed:
        rate = rate_table.get(row.jurisdiction)
        if rate is None:
            unknown.append(row)
            continue

        gallons = normalize_quantity(row.jurisdiction, row.quantity)
        item = LineItem(row=row, gallons=gallons, rate=rate)
        included.append(row)
        line_items.append(item)
        total_miles += row.miles
        total_gallons += gallons
        tax_owed += item.tax

    mpg = total_miles / total_gallons if total_gallons > 0 else 0.0

    return Aggregation(
        result=CalculationResult(
            total_miles=total_miles,
            total_gallons=total_gallons,
            mpg=mpg,
            tax_owed=tax_owed,
        ),
        displayed_rows=displayed,
        included_rows=included,
        excluded_for_cap=dropped,
        unknown_jurisdiction_rows=unknown,
        line_items=line_items,
        cap_warning=cap_warning,
    )


@dataclass
class CalculationOutcome:
    """Everything a caller needs to render one calculation."""

    quarter: str
    tier: AccessTier
    rate_source: str
    rate_table: RateTable
    aggregation: Aggregation
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def rows(self) -> list[TripRow]:
        return self.aggregation.displayed_rows

    @property
    def result(self) -> CalculationResult:
        return self.aggregation.result


class IftaCalculator:
    """
    Pure pipeline from (text, quarter, tier) to results.

    Nothing is kept between calls; the caller re-runs ``calculate`` whenever
    the text, quarter or tier changes.
    """

    def __init__(self, provider: Optional[RateTableProvider] = None) -> None:
        self.provider = provider or RateTableProvider()

    def calculate(
        self,
        raw_text: str,
        quarter: str,
        tier: AccessTier = AccessTier.ANONYMOUS,
    ) -> CalculationOutcome:
        parsed = parse_trip_data(raw_text)
        lookup = self.provider.get_rates(quarter)
        aggregation = aggregate(parsed.rows, lookup.table, tier.row_cap)

        warnings: list[str] = []
        if lookup.warning:
            warnings.append(lookup.warning)
        if aggregation.cap_warning:
            warnings.append(aggregation.cap_warning)
            if tier.limit_message:
                warnings.append(tier.limit_message)
        if aggregation.unknown_jurisdictions:
            warnings.append(
                f"Unknown jurisdictions: {', '.join(aggregation.unknown_jurisdictions)}. "
                "These will be excluded from calculations."
            )

        logger.debug(
            "Calculated %s for %s tier: %d included, %d unknown, %d capped",
            quarter,
            tier.value,
            len(aggregation.included_rows),
            len(aggregation.unknown_jurisdiction_rows),
            len(aggregation.excluded_for_cap),
        )

        return CalculationOutcome(
            quarter=quarter,
            tier=tier,
            rate_source=lookup.source,
            rate_table=lookup.table,
            aggregation=aggregation,
            errors=list(parsed.errors),
            warnings=warnings,
        )
