"""
Quarterly IFTA report generator.

Produces:
- Per-jurisdiction miles, fuel and tax breakdowns
- Quarter summary reports
- JSON export
- Console-friendly text
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from ifta_calc.calculator import Aggregation, CalculationOutcome

DISCLAIMER = (
    "Estimates for review only. Not an authoritative IFTA filing."
)

_BREAKDOWN_COLUMNS = ["jurisdiction", "rows", "miles", "gallons", "rate", "tax"]


class ReportGenerator:
    """
    Builds quarter reports from calculation outcomes.

    Reports are plain dicts that can be rendered to text or written to
    JSON in ``output_dir``.
    """

    def __init__(self, output_dir: Optional[str] = None) -> None:
        self.output_dir = Path(output_dir) if output_dir else Path("reports")

    # ------------------------------------------------------------------
    # Jurisdiction breakdown
    # ------------------------------------------------------------------

    def jurisdiction_breakdown(self, aggregation: Aggregation) -> pd.DataFrame:
        """Group included rows by jurisdiction, sorted by code."""
        if not aggregation.line_items:
            return pd.DataFrame(columns=_BREAKDOWN_COLUMNS)

        df = pd.DataFrame(
            [
                {
                    "jurisdiction": item.row.jurisdiction,
                    "miles": item.row.miles,
                    "gallons": item.gallons,
                    "rate": item.rate,
                    "tax": item.tax,
                }
                for item in aggregation.line_items
            ]
        )
        grouped = (
            df.groupby("jurisdiction", sort=True)
            .agg(
                rows=("miles", "size"),
                miles=("miles", "sum"),
                gallons=("gallons", "sum"),
                rate=("rate", "first"),
                tax=("tax", "sum"),
            )
            .reset_index()
        )
        return grouped[_BREAKDOWN_COLUMNS]

    # ------------------------------------------------------------------
    # Quarter summary
    # ------------------------------------------------------------------

    def summary_report(self, outcome: CalculationOutcome) -> dict[str, Any]:
        """Generate a quarter summary from a calculation outcome."""
        result = outcome.result
        breakdown = self.jurisdiction_breakdown(outcome.aggregation)

        return {
            "report_type": "ifta_quarter_summary",
            "period": outcome.quarter,
            "generated_date": date.today().isoformat(),
            "access_tier": outcome.tier.value,
            "rate_source": outcome.rate_source,
            "summary": {
                "rows_processed": len(outcome.rows),
                "rows_included": len(outcome.aggregation.included_rows),
                "rows_excluded_by_limit": len(outcome.aggregation.excluded_for_cap),
                "total_miles": result.total_miles,
                "total_gallons": result.total_gallons,
                "mpg": result.mpg,
                "tax_owed": result.tax_owed,
            },
            "jurisdiction_breakdown": [
                {
                    "jurisdiction": r.jurisdiction,
                    "rows": int(r.rows),
                    "miles": float(r.miles),
                    "gallons": float(r.gallons),
                    "rate": float(r.rate),
                    "tax": float(r.tax),
                }
                for r in breakdown.itertuples(index=False)
            ],
            "unknown_jurisdictions": outcome.aggregation.unknown_jurisdictions,
            "errors": list(outcome.errors),
            "warnings": list(outcome.warnings),
            "disclaimer": DISCLAIMER,
        }

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_json(
        self,
        report: dict[str, Any],
        filename: Optional[str] = None,
    ) -> str:
        """Export a report to JSON. Returns the JSON string."""
        json_str = json.dumps(report, indent=2)

        if filename:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = self.output_dir / filename
            path.write_text(json_str, encoding="utf-8")

        return json_str

    # ------------------------------------------------------------------
    # Console-formatted text output
    # ------------------------------------------------------------------

    def format_text(self, report: dict[str, Any]) -> str:
        """Format a report as human-readable text for console output."""
        lines: list[str] = []
        report_type = report.get("report_type", "report").replace("_", " ").upper()
        lines.append(f"{'=' * 60}")
        lines.append(f"  {report_type}")
        lines.append(f"  Generated: {report.get('generated_date', '')}")
        if report.get("period"):
            lines.append(f"  Period: {report['period']}")
        lines.append(f"{'=' * 60}")
        lines.append("")

        summary = report.get("summary", {})
        if summary:
            lines.append("SUMMARY")
            lines.append("-" * 40)
            for key, value in summary.items():
                label = key.replace("_", " ").title()
                if key == "tax_owed":
                    lines.append(f"  {label}: ${value:,.2f}")
                elif key == "mpg":
                    lines.append(f"  {label}: {value:.1f}")
                elif isinstance(value, float):
                    lines.append(f"  {label}: {value:,.2f}")
                else:
                    lines.append(f"  {label}: {value}")
            lines.append("")

        breakdown = report.get("jurisdiction_breakdown", [])
        if breakdown:
            lines.append("JURISDICTION BREAKDOWN")
            lines.append("-" * 40)
            for jd in breakdown:
                lines.append(
                    f"  {jd['jurisdiction']}: {jd['miles']:>10,.1f} mi | "
                    f"{jd['gallons']:>9,.2f} gal | ${jd['tax']:>9,.2f} tax"
                )
            lines.append("")

        for heading, key in (("ERRORS", "errors"), ("WARNINGS", "warnings")):
            entries = report.get(key, [])
            if entries:
                lines.append(heading)
                lines.append("-" * 40)
                for entry in entries:
                    lines.append(f"  * {entry}")
                lines.append("")

        if report.get("disclaimer"):
            lines.append(report["disclaimer"])

        return "\n".join(lines)
