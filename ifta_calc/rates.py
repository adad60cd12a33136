"""
IFTA fuel tax rate tables.

Covers the 48 contiguous US states, DC and the 10 Canadian provinces that
participate in IFTA. Rates are dollars per gallon for a reporting quarter.
Live tables can be pulled from a configured URL; the bundled table is used
whenever that is not possible.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

import requests

logger = logging.getLogger(__name__)

QUARTERS: tuple[str, ...] = ("2025-Q1", "2025-Q2", "2025-Q3", "2025-Q4")
DEFAULT_QUARTER = "2025-Q3"

GALLONS_PER_LITRE = 0.264172

CANADIAN_PROVINCES: frozenset[str] = frozenset(
    {"AB", "BC", "MB", "NB", "NL", "NS", "ON", "PE", "QC", "SK"}
)


@dataclass(frozen=True)
class Jurisdiction:
    """Reference data for a single IFTA member jurisdiction."""

    code: str
    name: str
    country: str  # "US" or "CA"

    @property
    def fuel_unit(self) -> str:
        return "liters" if self.code in CANADIAN_PROVINCES else "gallons"


# ---------------------------------------------------------------------------
# Bundled fallback table: code -> (name, country, rate per gallon)
# ---------------------------------------------------------------------------

_JURISDICTION_DATA: dict[str, tuple[str, str, float]] = {
    "AL": ("Alabama", "US", 0.29),
    "AZ": ("Arizona", "US", 0.26),
    "AR": ("Arkansas", "US", 0.285),
    "CA": ("California", "US", 0.439),
    "CO": ("Colorado", "US", 0.22),
    "CT": ("Connecticut", "US", 0.394),
    "DE": ("Delaware", "US", 0.23),
    "FL": ("Florida", "US", 0.219),
    "GA": ("Georgia", "US", 0.312),
    "ID": ("Idaho", "US", 0.32),
    "IL": ("Illinois", "US", 0.392),
    "IN": ("Indiana", "US", 0.55),
    "IA": ("Iowa", "US", 0.325),
    "KS": ("Kansas", "US", 0.24),
    "KY": ("Kentucky", "US", 0.334),
    "LA": ("Louisiana", "US", 0.2),
    "ME": ("Maine", "US", 0.312),
    "MD": ("Maryland", "US", 0.347),
    "MA": ("Massachusetts", "US", 0.29),
    "MI": ("Michigan", "US", 0.326),
    "MN": ("Minnesota", "US", 0.285),
    "MS": ("Mississippi", "US", 0.18),
    "MO": ("Missouri", "US", 0.17),
    "MT": ("Montana", "US", 0.289),
    "NE": ("Nebraska", "US", 0.297),
    "NV": ("Nevada", "US", 0.27),
    "NH": ("New Hampshire", "US", 0.222),
    "NJ": ("New Jersey", "US", 0.383),
    "NM": ("New Mexico", "US", 0.21),
    "NY": ("New York", "US", 0.33),
    "NC": ("North Carolina", "US", 0.38),
    "ND": ("North Dakota", "US", 0.23),
    "OH": ("Ohio", "US", 0.47),
    "OK": ("Oklahoma", "US", 0.2),
    # Oregon collects a weight-mile tax instead of a diesel fuel tax
    "OR": ("Oregon", "US", 0.0),
    "PA": ("Pennsylvania", "US", 0.409),
    "RI": ("Rhode Island", "US", 0.34),
    "SC": ("South Carolina", "US", 0.28),
    "SD": ("South Dakota", "US", 0.28),
    "TN": ("Tennessee", "US", 0.27),
    "TX": ("Texas", "US", 0.2),
    "UT": ("Utah", "US", 0.285),
    "VT": ("Vermont", "US", 0.32),
    "VA": ("Virginia", "US", 0.282),
    "WA": ("Washington", "US", 0.494),
    "WV": ("West Virginia", "US", 0.357),
    "WI": ("Wisconsin", "US", 0.329),
    "WY": ("Wyoming", "US", 0.24),
    "DC": ("District of Columbia", "US", 0.325),
    "AB": ("Alberta", "CA", 0.389),
    "BC": ("British Columbia", "CA", 0.502),
    "MB": ("Manitoba", "CA", 0.372),
    "NB": ("New Brunswick", "CA", 0.38),
    "NL": ("Newfoundland and Labrador", "CA", 0.407),
    "NS": ("Nova Scotia", "CA", 0.428),
    "ON": ("Ontario", "CA", 0.427),
    "PE": ("Prince Edward Island", "CA", 0.396),
    "QC": ("Quebec", "CA", 0.435),
    "SK": ("Saskatchewan", "CA", 0.399),
}

FALLBACK_RATES: Mapping[str, float] = MappingProxyType(
    {code: data[2] for code, data in _JURISDICTION_DATA.items()}
)

JURISDICTIONS: Mapping[str, Jurisdiction] = MappingProxyType(
    {
        code: Jurisdiction(code=code, name=data[0], country=data[1])
        for code, data in _JURISDICTION_DATA.items()
    }
)


def normalize_quantity(jurisdiction: str, quantity: float) -> float:
    """Convert a fuel quantity to gallons (provinces report liters)."""
    if jurisdiction in CANADIAN_PROVINCES:
        return quantity * GALLONS_PER_LITRE
    return quantity


@dataclass(frozen=True)
class RateTable:
    """
    Per-gallon tax rates for one reporting quarter.

    A jurisdiction missing from the table is unknown, which is not the
    same thing as a jurisdiction taxed at 0.
    """

    quarter: str
    rates: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        cleaned: dict[str, float] = {}
        for code, rate in self.rates.items():
            rate = float(rate)
            if not math.isfinite(rate) or rate < 0:
                raise ValueError(f"Invalid rate for {code}: {rate}")
            cleaned[code.strip().upper()] = rate
        object.__setattr__(self, "rates", MappingProxyType(cleaned))

    def get(self, jurisdiction: str) -> Optional[float]:
        return self.rates.get(jurisdiction)

    def __contains__(self, jurisdiction: object) -> bool:
        return jurisdiction in self.rates

    def __len__(self) -> int:
        return len(self.rates)

    def jurisdictions(self) -> list[str]:
        """Return jurisdiction codes sorted alphabetically."""
        return sorted(self.rates)

    @classmethod
    def fallback(cls, quarter: str) -> "RateTable":
        return cls(quarter=quarter, rates=FALLBACK_RATES)


@dataclass(frozen=True)
class RateLookup:
    """Outcome of a rate fetch: always carries a usable table."""

    table: RateTable
    source: str  # live, fallback, builtin
    warning: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"


class RateTableError(ValueError):
    """Raised when a live rate payload cannot be turned into a RateTable."""


def _table_from_payload(quarter: str, payload: Any) -> RateTable:
    if isinstance(payload, dict) and isinstance(payload.get("rates"), dict):
        payload = payload["rates"]
    if not isinstance(payload, dict) or not payload:
        raise RateTableError("Rate payload is not a non-empty object")

    rates: dict[str, float] = {}
    for code, rate in payload.items():
        if not isinstance(code, str) or not code.strip():
            raise RateTableError(f"Invalid jurisdiction code: {code!r}")
        # bool is an int subclass; reject it explicitly
        if isinstance(rate, bool) or not isinstance(rate, (int, float)):
            raise RateTableError(f"Non-numeric rate for {code}: {rate!r}")
        rates[code] = rate
    try:
        return RateTable(quarter=quarter, rates=rates)
    except ValueError as e:
        raise RateTableError(str(e)) from e


class RateTableProvider:
    """
    Supplies the rate table for a reporting quarter.

    With a ``rates_url`` the provider issues one GET per quarter and caches
    the table it gets back. Any failure falls back to the bundled table and
    reports a warning instead of raising.
    """

    def __init__(
        self,
        rates_url: Optional[str] = None,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.rates_url = rates_url
        self.timeout = timeout
        self._session = session
        self._cache: dict[str, RateTable] = {}

    def _fetch(self, quarter: str) -> RateTable:
        session = self._session or requests
        response = session.get(
            self.rates_url, params={"quarter": quarter}, timeout=self.timeout
        )
        response.raise_for_status()
        return _table_from_payload(quarter, response.json())

    def get_rates(self, quarter: str) -> RateLookup:
        if not self.rates_url:
            return RateLookup(table=RateTable.fallback(quarter), source="builtin")

        cached = self._cache.get(quarter)
        if cached is not None:
            return RateLookup(table=cached, source="live")

        try:
            table = self._fetch(quarter)
        except (requests.RequestException, ValueError) as e:
            # RateTableError and JSON decode errors are both ValueErrors
            logger.warning("Live rate fetch for %s failed: %s", quarter, e)
            return RateLookup(
                table=RateTable.fallback(quarter),
                source="fallback",
                warning=f"Failed to load live rates for {quarter}; using fallback rates.",
            )

        logger.debug("Loaded %d live rates for %s", len(table), quarter)
        self._cache[quarter] = table
        return RateLookup(table=table, source="live")
