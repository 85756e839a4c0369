"""
SQLAlchemy models for the shop bot.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


# =============================================================================
# CONVERSATION SESSIONS
# =============================================================================


class UserSession(Base):
    """Persisted conversation session, one row per user."""

    __tablename__ = "user_sessions"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    data: Mapped[str] = mapped_column(Text, nullable=False)  # JSON session record

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<UserSession(user_id='{self.user_id}')>"


# =============================================================================
# ANALYTICS
# =============================================================================


class InteractionEvent(Base):
    """Recorded user interaction (product_view, cart_add, checkout, search)."""

    __tablename__ = "interaction_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    details: Mapped[str] = mapped_column(Text, default="{}")  # JSON

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        Index("ix_interaction_events_created", "created_at"),
        Index("ix_interaction_events_action", "action"),
    )

    def __repr__(self) -> str:
        return f"<InteractionEvent(id={self.id}, action='{self.action}')>"
