"""
Message handler - routes every text message through the shop service.
"""

import logging

from aiogram import F, Router
from aiogram.types import Message

from shopbot.bot.handlers.start import sender_name
from shopbot.bot.keyboards.shop import parse_button
from shopbot.core.shop.service import ShopService

router = Router(name="shop")
logger = logging.getLogger(__name__)


@router.message(F.text)
async def handle_message(message: Message, shop_service: ShopService) -> None:
    """Handle user text messages."""
    text = message.text.strip()

    if not text:
        return

    user_id = str(message.chat.id)
    user_name = sender_name(message)

    logger.info(f"User {user_id} ({user_name}): {text[:50]}")

    # The service answers the user itself, errors included
    await shop_service.handle_message(user_id, user_name, parse_button(text))
