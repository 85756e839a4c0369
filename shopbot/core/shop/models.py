"""
Session and cart models for the shopping conversation.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from shopbot.core.shop.states import SessionState, TempState

DEFAULT_SIZE = "Standard"
DEFAULT_COLOR = "Default"


@dataclass(frozen=True)
class CartLine:
    """Single product selection in the cart."""
    product_id: str
    quantity: int
    size: str = DEFAULT_SIZE
    color: str = DEFAULT_COLOR

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "productId": self.product_id,
            "quantity": self.quantity,
            "size": self.size,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        quantity = int(data["quantity"])
        if quantity <= 0:
            raise ValueError(f"Cart quantity must be positive: {quantity}")
        return cls(
            product_id=str(data["productId"]),
            quantity=quantity,
            size=data.get("size") or DEFAULT_SIZE,
            color=data.get("color") or DEFAULT_COLOR,
        )


@dataclass(frozen=True)
class Session:
    """
    Conversation state of one user.

    Sessions are immutable values: every transition builds a new one with
    ``evolve`` and the caller commits it as a whole.
    """
    state: SessionState = SessionState.INITIAL
    last_state: SessionState = SessionState.INITIAL
    temp_state: Optional[TempState] = None
    current_category: Optional[str] = None
    current_item: Optional[str] = None
    cart: tuple[CartLine, ...] = ()
    search_results: tuple[str, ...] = ()
    last_interaction: Optional[datetime] = None

    def evolve(self, **changes) -> "Session":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def add_line(self, line: CartLine) -> "Session":
        """Append a line, keeping insertion order."""
        return self.evolve(cart=self.cart + (line,))

    def to_dict(self) -> dict:
        """Convert to the persisted record layout."""
        return {
            "state": self.state.value,
            "lastState": self.last_state.value,
            "tempState": self.temp_state.value if self.temp_state else None,
            "currentCategory": self.current_category,
            "currentItem": self.current_item,
            "cart": [line.to_dict() for line in self.cart],
            "searchResults": list(self.search_results),
            "lastInteraction": (
                self.last_interaction.isoformat() if self.last_interaction else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """
        Restore a session from its persisted record.

        Raises ValueError/KeyError/TypeError on records that cannot be decoded.
        """
        state = SessionState(data.get("state", SessionState.INITIAL.value))
        last_state = SessionState(data.get("lastState") or state.value)
        temp_state = TempState(data["tempState"]) if data.get("tempState") else None
        last_interaction = None
        if data.get("lastInteraction"):
            last_interaction = datetime.fromisoformat(data["lastInteraction"])
            if last_interaction.tzinfo is None:
                last_interaction = last_interaction.replace(tzinfo=timezone.utc)
        return cls(
            state=state,
            last_state=last_state,
            temp_state=temp_state,
            current_category=data.get("currentCategory"),
            current_item=data.get("currentItem"),
            cart=tuple(CartLine.from_dict(line) for line in data.get("cart") or []),
            search_results=tuple(str(i) for i in data.get("searchResults") or []),
            last_interaction=last_interaction,
        )


@dataclass(frozen=True)
class OutboundMessage:
    """
    Reply ready for delivery.

    ``image`` is a reference (URL or path); the sender resolves it to bytes
    and falls back to plain text when it cannot.
    """
    text: str
    image: Optional[str] = None
    quick_replies: tuple[str, ...] = ()


@dataclass(frozen=True)
class AnalyticsEvent:
    """Interaction worth recording for analytics."""
    action: str
    details: dict = field(default_factory=dict)


@dataclass(frozen=True)
class DeferredMenu:
    """Request to show the main menu after a delay."""
    delay_seconds: float


@dataclass(frozen=True)
class Transition:
    """Result of processing one inbound message."""
    session: Session
    replies: tuple[OutboundMessage, ...] = ()
    events: tuple[AnalyticsEvent, ...] = ()
    deferred: Optional[DeferredMenu] = None
