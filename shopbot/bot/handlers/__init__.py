"""
Bot handlers registration.
"""

from aiogram import Dispatcher

from shopbot.bot.handlers.start import router as start_router
from shopbot.bot.handlers.shop import router as shop_router


def register_handlers(dp: Dispatcher) -> None:
    """Register all handlers to dispatcher."""
    # Order matters! Commands first, then the catch-all text handler
    dp.include_router(start_router)
    dp.include_router(shop_router)
