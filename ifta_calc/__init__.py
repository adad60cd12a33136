"""
IFTA QuickCalc
==============

Fuel tax estimates for International Fuel Tax Agreement reporting from
pasted or uploaded trip data.

Modules:
    rates            - Jurisdiction rate tables and the live/fallback provider
    parser           - Trip data parsing and row validation
    access           - Access tiers and row caps
    calculator       - Aggregation engine and calculation pipeline
    report_generator - Quarter summaries with JSON export
    config           - Environment settings
    cli              - Command-line interface
"""

__version__ = "1.0.0"

from ifta_calc.access import AccessTier
from ifta_calc.calculator import IftaCalculator, aggregate
from ifta_calc.parser import parse_trip_data
from ifta_calc.rates import RateTable, RateTableProvider
from ifta_calc.report_generator import ReportGenerator

__all__ = [
    "AccessTier",
    "IftaCalculator",
    "aggregate",
    "parse_trip_data",
    "RateTable",
    "RateTableProvider",
    "ReportGenerator",
]
