"""
Telegram implementation of the outbound transport.
"""

import logging

from aiogram import Bot
from aiogram.enums import ChatAction
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import BufferedInputFile

from shopbot.bot.keyboards.shop import get_quick_reply_keyboard
from shopbot.core.shop.models import OutboundMessage
from shopbot.core.shop.transport import MessageSender

logger = logging.getLogger(__name__)

# Telegram limit for photo captions
CAPTION_LIMIT = 1024


class TelegramSender(MessageSender):
    """Sends replies through the Telegram Bot API."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send(
        self,
        user_id: str,
        message: OutboundMessage,
        image: bytes | None = None,
    ) -> None:
        chat_id = int(user_id)
        keyboard = get_quick_reply_keyboard(message.quick_replies)

        if image and len(message.text) <= CAPTION_LIMIT:
            try:
                await self.bot.send_photo(
                    chat_id=chat_id,
                    photo=BufferedInputFile(image, filename="image.jpg"),
                    caption=message.text,
                    reply_markup=keyboard,
                )
                return
            except TelegramBadRequest as e:
                logger.warning(f"Photo rejected for chat {chat_id}, sending text: {e}")

        await self.bot.send_message(chat_id=chat_id, text=message.text, reply_markup=keyboard)

    async def typing(self, user_id: str) -> None:
        await self.bot.send_chat_action(chat_id=int(user_id), action=ChatAction.TYPING)
