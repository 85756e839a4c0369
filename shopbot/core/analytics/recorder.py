"""
Analytics sink: best-effort recording of user interactions.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from shopbot.core.analytics.report import (
    AnalyticsReport,
    RecordedEvent,
    ReportPeriod,
    build_report,
    period_start,
)
from shopbot.db.models import InteractionEvent
from shopbot.db.sqlite import Database

logger = logging.getLogger(__name__)


def _as_utc(moment: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class AnalyticsRecorder:
    """Stores interaction events and builds reports from them."""

    def __init__(self, database: Database):
        self.database = database

    async def record(
        self,
        user_id: str,
        action: str,
        details: Optional[dict] = None,
        timestamp: Optional[datetime] = None,
    ) -> bool:
        """
        Record an interaction.

        Never raises: failures are logged and reported as False so the
        conversation is not affected.
        """
        try:
            event = InteractionEvent(
                user_id=user_id,
                action=action,
                details=json.dumps(details or {}, ensure_ascii=False, default=str),
                created_at=_as_utc(timestamp or datetime.now(timezone.utc)),
            )
            async with self.database.session() as session:
                session.add(event)
        except (SQLAlchemyError, TypeError, ValueError) as e:
            logger.warning(f"Error recording {action} for {user_id}: {e}")
            return False
        return True

    async def fetch_events(self, start: datetime, end: datetime) -> list[RecordedEvent]:
        """Events within [start, end], oldest first."""
        query = (
            select(InteractionEvent)
            .where(InteractionEvent.created_at >= _as_utc(start))
            .where(InteractionEvent.created_at <= _as_utc(end))
            .order_by(InteractionEvent.created_at, InteractionEvent.id)
        )
        async with self.database.session() as session:
            rows = (await session.execute(query)).scalars().all()

        events = []
        for row in rows:
            try:
                details = json.loads(row.details or "{}")
            except json.JSONDecodeError:
                details = {}
            events.append(RecordedEvent(
                user_id=row.user_id,
                action=row.action,
                details=details,
                timestamp=_as_utc(row.created_at),
            ))
        return events

    async def build_report(
        self,
        period: ReportPeriod = "daily",
        end: Optional[datetime] = None,
    ) -> AnalyticsReport:
        """Build report for the period ending at ``end`` (default: now)."""
        end = _as_utc(end or datetime.now(timezone.utc))
        start = period_start(period, end)
        events = await self.fetch_events(start, end)
        return build_report(events, period, start, end)
