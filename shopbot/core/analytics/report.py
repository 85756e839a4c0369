"""
Analytics report model and period arithmetic.
"""

import calendar
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Literal

ReportPeriod = Literal["daily", "weekly", "monthly"]

TOP_PRODUCTS_LIMIT = 5
RECENT_SEARCHES_LIMIT = 5


@dataclass
class RecordedEvent:
    """Interaction as read back from storage."""
    user_id: str
    action: str
    details: dict
    timestamp: datetime


@dataclass
class AnalyticsReport:
    """Aggregated interactions for a period."""
    period: str
    start: datetime
    end: datetime
    total_interactions: int = 0
    unique_users: int = 0
    product_views: int = 0
    cart_additions: int = 0
    checkouts: int = 0
    searches: int = 0
    top_products: list[tuple[str, int]] = field(default_factory=list)
    recent_searches: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "period": {
                "type": self.period,
                "start": self.start.isoformat(),
                "end": self.end.isoformat(),
            },
            "summary": {
                "totalInteractions": self.total_interactions,
                "uniqueUsers": self.unique_users,
                "productViews": self.product_views,
                "cartAdditions": self.cart_additions,
                "checkouts": self.checkouts,
                "searches": self.searches,
            },
            "topProducts": [list(item) for item in self.top_products],
            "recentSearches": self.recent_searches,
        }


def _month_back(moment: datetime) -> datetime:
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(period: ReportPeriod, end: datetime) -> datetime:
    """Start of the reporting window ending at ``end``."""
    if period == "weekly":
        return end - timedelta(days=7)
    if period == "monthly":
        return _month_back(end)
    if period == "daily":
        return end.replace(hour=0, minute=0, second=0, microsecond=0)
    raise ValueError(f"Unknown report period: {period}")


def build_report(
    events: list[RecordedEvent],
    period: ReportPeriod,
    start: datetime,
    end: datetime,
) -> AnalyticsReport:
    """Aggregate events (already filtered to the window, oldest first)."""
    report = AnalyticsReport(period=period, start=start, end=end)
    report.total_interactions = len(events)
    report.unique_users = len({e.user_id for e in events})

    views: Counter = Counter()
    searches = []
    for event in events:
        if event.action == "product_view":
            report.product_views += 1
            views[str(event.details.get("productId"))] += 1
        elif event.action == "cart_add":
            report.cart_additions += 1
        elif event.action == "checkout":
            report.checkouts += 1
        elif event.action == "search":
            report.searches += 1
            searches.append({
                "keyword": event.details.get("keyword"),
                "resultsCount": event.details.get("resultsCount"),
                "timestamp": event.timestamp.isoformat(),
            })

    report.top_products = views.most_common(TOP_PRODUCTS_LIMIT)
    report.recent_searches = searches[-RECENT_SEARCHES_LIMIT:]
    return report
