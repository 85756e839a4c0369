"""
Shopping conversation: session model, state machine and rendering.
"""

from shopbot.core.shop.models import (
    AnalyticsEvent,
    CartLine,
    DeferredMenu,
    OutboundMessage,
    Session,
    Transition,
)
from shopbot.core.shop.states import SessionState, TempState
from shopbot.core.shop.cart import compute_cart_total, compute_line_total, format_money
from shopbot.core.shop.renderer import RenderConfig, ResponseRenderer
from shopbot.core.shop.engine import ConversationEngine

__all__ = [
    # Models
    "AnalyticsEvent",
    "CartLine",
    "DeferredMenu",
    "OutboundMessage",
    "Session",
    "Transition",
    # States
    "SessionState",
    "TempState",
    # Cart
    "compute_cart_total",
    "compute_line_total",
    "format_money",
    # Rendering
    "RenderConfig",
    "ResponseRenderer",
    # Engine
    "ConversationEngine",
]
