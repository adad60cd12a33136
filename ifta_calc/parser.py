"""
Trip data parser.

Turns pasted or uploaded text into validated trip rows. Each line is
``jurisdiction, miles, quantity[, date]`` separated by commas or tabs.
Bad lines produce a row-numbered message and are skipped; the rest of the
batch is still parsed.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"\r?\n")
_FIELD_SPLIT = re.compile(r"[,\t]")
_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class TripRow:
    """A single validated trip record."""

    jurisdiction: str
    miles: float
    quantity: float  # gallons for US/DC, liters for provinces
    source_line: int
    trip_date: Optional[str] = None  # display only


@dataclass
class ParseResult:
    rows: list[TripRow] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rows and not self.errors


def _parse_number(text: str) -> Optional[float]:
    # Leading numeric prefix wins: "1200 mi" -> 1200, "1200.5.3" -> 1200.5
    match = _NUMBER.match(text.strip())
    if match is None:
        return None
    value = float(match.group())
    return value if math.isfinite(value) else None


def _parse_line(line: str, line_no: int) -> tuple[Optional[TripRow], Optional[str]]:
    parts = _FIELD_SPLIT.split(line)
    if len(parts) < 3:
        return None, (
            f"Row {line_no}: Missing required columns (jurisdiction, miles, quantity)"
        )

    jurisdiction = parts[0].strip().upper()
    if not jurisdiction:
        return None, f"Row {line_no}: Missing jurisdiction"

    miles = _parse_number(parts[1])
    if miles is None or miles < 0:
        return None, f"Row {line_no}: Invalid miles value"

    quantity = _parse_number(parts[2])
    if quantity is None or quantity < 0:
        return None, f"Row {line_no}: Invalid quantity value"

    trip_date = (parts[3].strip() or None) if len(parts) > 3 else None

    return (
        TripRow(
            jurisdiction=jurisdiction,
            miles=miles,
            quantity=quantity,
            source_line=line_no,
            trip_date=trip_date,
        ),
        None,
    )


def parse_trip_data(raw_text: str) -> ParseResult:
    """
    Parse raw trip text into rows and row-level error messages.

    Whitespace-only input yields an empty result. Line numbers count
    physical lines after the surrounding whitespace is stripped, so a blank
    line in the middle still advances the numbering.
    """
    result = ParseResult()
    if not raw_text or not raw_text.strip():
        return result

    for index, line in enumerate(_LINE_SPLIT.split(raw_text.strip()), start=1):
        if not line.strip():
            continue
        row, error = _parse_line(line, index)
        if error:
            result.errors.append(error)
        else:
            result.rows.append(row)

    logger.debug(
        "Parsed %d rows with %d errors", len(result.rows), len(result.errors)
    )
    return result
