#!/usr/bin/env python3
"""
Quick Start Example
===================

Runs the IFTA calculation for two trips (Texas in gallons, Ontario in
liters) as a paid user, then the same input with three rows as an
anonymous user to show the row cap.

Usage:
    python examples/quick_start.py
"""

from ifta_calc.access import AccessTier
from ifta_calc.calculator import IftaCalculator


def main() -> None:
    calculator = IftaCalculator()

    # Paid tier: every row is processed
    outcome = calculator.calculate(
        "TX,1200,130,2025-07-12\nON,500,190,2025-08-01",
        quarter="2025-Q3",
        tier=AccessTier.AUTHENTICATED_PAID,
    )
    result = outcome.result
    print(f"Quarter:        {outcome.quarter}")
    print(f"Rows:           {len(outcome.rows)}")
    print(f"Total Miles:    {result.total_miles:,.1f}")
    print(f"Total Gallons:  {result.total_gallons:,.2f}")
    print(f"Fuel Economy:   {result.mpg:.1f} MPG")
    print(f"Tax Owed:       ${result.tax_owed:.2f}")

    # Anonymous tier: only the first two rows count
    print("\n--- Anonymous Preview ---")
    preview = calculator.calculate(
        "TX,1200,130\nON,500,190\nOK,640,88",
        quarter="2025-Q3",
        tier=AccessTier.ANONYMOUS,
    )
    print(f"Rows processed: {len(preview.rows)}")
    print(f"Tax Owed:       ${preview.result.tax_owed:.2f}")
    for warning in preview.warnings:
        print(f"Warning:        {warning}")


if __name__ == "__main__":
    main()
