#!/usr/bin/env python3
"""
IFTA QuickCalc - Entry Point

Estimates IFTA fuel tax from trip data: total miles, gallons, fuel
economy and tax owed per jurisdiction rate table.

Usage:
    python main.py calculate --text "TX,1200,130\nON,500,190" --tier paid
    python main.py calculate --file data/trips.csv --quarter 2025-Q2
    python main.py calculate --file data/trips.csv --tier paid --export-json q3.json
    python main.py rates --quarter 2025-Q3 --jurisdiction ON
"""

from ifta_calc.cli import main

if __name__ == "__main__":
    main()
