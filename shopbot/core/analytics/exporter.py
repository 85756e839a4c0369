"""
Export analytics reports to XLSX format.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill

from shopbot.core.analytics.report import AnalyticsReport

logger = logging.getLogger(__name__)


class AnalyticsReportExporter:
    """Export analytics reports to XLSX format."""

    # Styles
    HEADER_FONT = Font(bold=True, size=14)
    SUBHEADER_FONT = Font(bold=True, size=11)

    HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    HEADER_FONT_WHITE = Font(bold=True, size=11, color="FFFFFF")

    ALT_ROW_FILL = PatternFill(start_color="D9E2F3", end_color="D9E2F3", fill_type="solid")

    THIN_BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    CENTER_ALIGN = Alignment(horizontal='center', vertical='center')
    LEFT_ALIGN = Alignment(horizontal='left', vertical='center')
    RIGHT_ALIGN = Alignment(horizontal='right', vertical='center')

    def export(self, report: AnalyticsReport, output_dir: Optional[Path] = None) -> Path:
        """
        Export report to XLSX file.

        Args:
            report: Report to export
            output_dir: Directory for output file (default: data/reports/)

        Returns:
            Path to created XLSX file
        """
        if output_dir is None:
            output_dir = Path("data/reports")

        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = output_dir / f"analytics_{report.period}_{timestamp}.xlsx"

        wb = Workbook()
        ws = wb.active
        ws.title = f"Analytics ({report.period})"

        ws.column_dimensions['A'].width = 6
        ws.column_dimensions['B'].width = 32
        ws.column_dimensions['C'].width = 16
        ws.column_dimensions['D'].width = 24

        row = 1

        # === HEADER ===
        ws.merge_cells(f'A{row}:D{row}')
        cell = ws.cell(row=row, column=1, value=f"ANALYTICS REPORT ({report.period.upper()})")
        cell.font = self.HEADER_FONT
        cell.alignment = self.CENTER_ALIGN
        row += 1

        ws.merge_cells(f'A{row}:D{row}')
        cell = ws.cell(
            row=row,
            column=1,
            value=(
                f"{report.start.strftime('%Y-%m-%d %H:%M')} to "
                f"{report.end.strftime('%Y-%m-%d %H:%M')} UTC"
            ),
        )
        cell.alignment = self.CENTER_ALIGN
        row += 2

        # === SUMMARY ===
        ws.cell(row=row, column=1, value="SUMMARY:").font = self.SUBHEADER_FONT
        row += 1

        summary = [
            ("Total interactions", report.total_interactions),
            ("Unique users", report.unique_users),
            ("Product views", report.product_views),
            ("Cart additions", report.cart_additions),
            ("Checkouts", report.checkouts),
            ("Searches", report.searches),
        ]
        for label, value in summary:
            ws.cell(row=row, column=2, value=label).border = self.THIN_BORDER
            cell = ws.cell(row=row, column=3, value=value)
            cell.border = self.THIN_BORDER
            cell.alignment = self.RIGHT_ALIGN
            row += 1
        row += 1

        # === TOP PRODUCTS ===
        ws.cell(row=row, column=1, value="TOP PRODUCTS:").font = self.SUBHEADER_FONT
        row += 1
        row = self._write_table(
            ws, row,
            headers=["#", "Product ID", "Views"],
            rows=[[i, product_id, views] for i, (product_id, views) in enumerate(report.top_products, 1)],
        )
        row += 1

        # === RECENT SEARCHES ===
        ws.cell(row=row, column=1, value="RECENT SEARCHES:").font = self.SUBHEADER_FONT
        row += 1
        self._write_table(
            ws, row,
            headers=["#", "Keyword", "Results", "Time"],
            rows=[
                [i, s.get("keyword"), s.get("resultsCount"), s.get("timestamp")]
                for i, s in enumerate(report.recent_searches, 1)
            ],
        )

        wb.save(filepath)
        logger.info(f"Analytics report exported to {filepath}")

        return filepath

    def _write_table(self, ws, row: int, headers: list, rows: list[list]) -> int:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = self.HEADER_FONT_WHITE
            cell.fill = self.HEADER_FILL
            cell.border = self.THIN_BORDER
            cell.alignment = self.CENTER_ALIGN
        row += 1

        for i, values in enumerate(rows, 1):
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = self.THIN_BORDER
                cell.alignment = self.CENTER_ALIGN if col == 1 else self.LEFT_ALIGN
                if i % 2 == 0:
                    cell.fill = self.ALT_ROW_FILL
            row += 1
        return row


# Singleton instance
report_exporter = AnalyticsReportExporter()
