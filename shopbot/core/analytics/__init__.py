"""
Analytics: interaction recording, reports and export.
"""

from shopbot.core.analytics.recorder import AnalyticsRecorder
from shopbot.core.analytics.report import AnalyticsReport, RecordedEvent, build_report, period_start
from shopbot.core.analytics.exporter import AnalyticsReportExporter, report_exporter

__all__ = [
    "AnalyticsRecorder",
    "AnalyticsReport",
    "RecordedEvent",
    "build_report",
    "period_start",
    "AnalyticsReportExporter",
    "report_exporter",
]
