#!/usr/bin/env python3
"""
Script to export an analytics report.

Usage:
    python scripts/analytics_report.py
    python scripts/analytics_report.py --period weekly --output data/reports
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shopbot.core.analytics import AnalyticsRecorder, report_exporter
from shopbot.db.sqlite import db


async def main(period: str, output_dir: str | None = None) -> None:
    """Build report for the period and export it."""
    await db.init()

    try:
        report = await AnalyticsRecorder(db).build_report(period)

        print(f"Analytics report ({period})")
        print("-" * 50)
        print(f"   Period: {report.start:%Y-%m-%d %H:%M} to {report.end:%Y-%m-%d %H:%M} UTC")
        print(f"   Interactions: {report.total_interactions}")
        print(f"   Unique users: {report.unique_users}")
        print(f"   Product views: {report.product_views}")
        print(f"   Cart additions: {report.cart_additions}")
        print(f"   Checkouts: {report.checkouts}")
        print(f"   Searches: {report.searches}")

        path = report_exporter.export(report, Path(output_dir) if output_dir else None)
        print(f"✅ Report saved to {path}")
    finally:
        await db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Export analytics report to XLSX")
    parser.add_argument(
        "--period",
        "-p",
        choices=["daily", "weekly", "monthly"],
        default="daily",
        help="Reporting period",
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Output directory (default: data/reports)",
        default=None,
    )

    args = parser.parse_args()
    asyncio.run(main(args.period, args.output))
