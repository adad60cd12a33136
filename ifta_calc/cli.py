"""
Command-line interface for IFTA QuickCalc.

Provides subcommands for trip calculation and rate table lookup.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.panel import Panel
from rich import box
from rich.markup import escape

from ifta_calc.access import AccessTier
from ifta_calc.calculator import CalculationOutcome, IftaCalculator
from ifta_calc.config import Settings
from ifta_calc.rates import JURISDICTIONS, QUARTERS, RateTableProvider
from ifta_calc.report_generator import ReportGenerator

console = Console()
logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _provider(settings: Settings) -> RateTableProvider:
    return RateTableProvider(
        rates_url=settings.rates_url, timeout=settings.rates_timeout
    )


def _read_input(args: argparse.Namespace) -> str:
    if args.text is not None:
        return args.text.replace("\\n", "\n")

    path = Path(args.file)
    if not path.exists():
        console.print(f"[red]File not found: {args.file}[/red]")
        sys.exit(1)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Cannot read {escape(args.file)}: {escape(str(e))}[/red]")
        sys.exit(1)


def _print_outcome(outcome: CalculationOutcome) -> None:
    table_rates = outcome.rate_table
    if outcome.rows:
        table = Table(
            title=f"Trip Data Preview ({outcome.quarter})",
            box=box.ROUNDED,
        )
        table.add_column("Line", style="dim", justify="right")
        table.add_column("Jurisdiction", style="bold")
        table.add_column("Miles", justify="right")
        table.add_column("Quantity", justify="right")
        table.add_column("Tax Rate", justify="right")
        table.add_column("Date")

        for row in outcome.rows:
            rate = table_rates.get(row.jurisdiction)
            table.add_row(
                str(row.source_line),
                escape(row.jurisdiction),
                f"{row.miles:,.1f}",
                f"{row.quantity:,.2f}",
                f"{rate:.3f}" if rate is not None else "Unknown",
                escape(row.trip_date or "-"),
                style="red" if rate is None else "",
            )
        console.print(table)

    result = outcome.result
    console.print(
        Panel(
            f"[bold]Total Miles:[/bold] {result.total_miles:,.1f}\n"
            f"[bold]Total Gallons:[/bold] {result.total_gallons:,.2f}\n"
            f"[bold]Fuel Economy:[/bold] {result.mpg:.1f} MPG\n"
            f"[bold]Tax Owed:[/bold] ${result.tax_owed:,.2f}",
            title="Calculation Results",
            border_style="green",
        )
    )

    for e in outcome.errors:
        console.print(f"[red]{escape(e)}[/red]")
    for w in outcome.warnings:
        console.print(f"[yellow]Warning: {escape(w)}[/yellow]")


# -----------------------------------------------------------------------
# Subcommand: calculate
# -----------------------------------------------------------------------


def cmd_calculate(args: argparse.Namespace, settings: Settings) -> None:
    """Calculate IFTA totals for pasted text or a trip data file."""
    tier = AccessTier(args.tier)
    if args.export_json and not tier.can_export_reports:
        console.print("[red]Report export requires the paid tier[/red]")
        sys.exit(1)

    raw_text = _read_input(args)
    logger.debug("Read %d characters of trip data", len(raw_text))
    quarter = args.quarter or settings.default_quarter
    calc = IftaCalculator(_provider(settings))
    outcome = calc.calculate(raw_text, quarter, tier)

    _print_outcome(outcome)

    if args.text_report or args.export_json:
        rg = ReportGenerator(args.output_dir or "reports")
        report = rg.summary_report(outcome)
        if args.text_report:
            console.print(rg.format_text(report), markup=False)
        if args.export_json:
            rg.to_json(report, args.export_json)
            console.print(f"[green]JSON exported to {rg.output_dir / args.export_json}[/green]")


# -----------------------------------------------------------------------
# Subcommand: rates
# -----------------------------------------------------------------------


def cmd_rates(args: argparse.Namespace, settings: Settings) -> None:
    """Display the rate table for a quarter."""
    quarter = args.quarter or settings.default_quarter
    lookup = _provider(settings).get_rates(quarter)
    if lookup.warning:
        console.print(f"[yellow]Warning: {lookup.warning}[/yellow]")

    codes = lookup.table.jurisdictions()
    if args.jurisdiction:
        code = args.jurisdiction.strip().upper()
        if code not in lookup.table:
            console.print(f"[red]Unknown jurisdiction: {args.jurisdiction}[/red]")
            sys.exit(1)
        codes = [code]

    table = Table(
        title=f"IFTA Fuel Tax Rates - {quarter} ({lookup.source})",
        box=box.ROUNDED,
    )
    table.add_column("Code", style="bold")
    table.add_column("Name")
    table.add_column("Fuel Unit")
    table.add_column("Rate ($/gal)", justify="right")

    for code in codes:
        info = JURISDICTIONS.get(code)
        rate = lookup.table.get(code)
        table.add_row(
            code,
            info.name if info else "-",
            info.fuel_unit if info else "gallons",
            f"{rate:.3f}",
            style="dim" if rate == 0 else "",
        )
    console.print(table)


# -----------------------------------------------------------------------
# Argument parser
# -----------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ifta-calc",
        description="IFTA QuickCalc - fuel tax estimates from trip data",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: IFTA_LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Shortcut for --log-level DEBUG"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # calculate
    calc_p = subparsers.add_parser("calculate", help="Calculate IFTA totals")
    source = calc_p.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", "-f", help="CSV or text file with trip data")
    source.add_argument(
        "--text", "-t", help="Trip data inline; separate rows with \\n"
    )
    calc_p.add_argument("--quarter", "-q", help=f"Reporting quarter ({', '.join(QUARTERS)})")
    calc_p.add_argument(
        "--tier",
        choices=[t.value for t in AccessTier],
        default=AccessTier.ANONYMOUS.value,
        help="Access tier (default: anonymous)",
    )
    calc_p.add_argument("--text-report", action="store_true", help="Print a text summary report")
    calc_p.add_argument("--export-json", help="Export the summary report to JSON (paid tier)")
    calc_p.add_argument("--output-dir", help="Output directory for exports")
    calc_p.set_defaults(func=cmd_calculate)

    # rates
    rates_p = subparsers.add_parser("rates", help="View the fuel tax rate table")
    rates_p.add_argument("--quarter", "-q", help="Reporting quarter")
    rates_p.add_argument("--jurisdiction", "-j", help="Jurisdiction code to look up")
    rates_p.set_defaults(func=cmd_rates)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    try:
        settings = Settings()
    except ValueError as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        sys.exit(1)

    _setup_logging("DEBUG" if args.verbose else args.log_level or settings.log_level)
    args.func(args, settings)
