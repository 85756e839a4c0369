"""
Start, help and clear command handlers.
"""

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from shopbot.bot.keyboards.shop import get_quick_reply_keyboard
from shopbot.core.shop.renderer import MENU_REPLIES
from shopbot.core.shop.service import ShopService

router = Router(name="start")


HELP_MESSAGE = """🤖 <b>How to shop with me:</b>

<b>Browse:</b>
• Send a category number or name from the menu
• Then send a product number or name

<b>Search:</b>
• Type «search» and then a keyword

<b>Buy:</b>
• On a product page send quantity, size and color: «2,L,blue»
• In the cart type «checkout», then «confirm»

<b>Commands:</b>
menu - back to the main menu (clears the cart)
/clear - forget our conversation and start over
/help - this help"""


def sender_name(message: Message) -> str:
    user = message.from_user
    if user is None:
        return "User"
    return user.full_name or user.username or "User"


@router.message(CommandStart())
async def handle_start(message: Message, shop_service: ShopService) -> None:
    """Handle /start command: show the main menu."""
    await shop_service.handle_message(str(message.chat.id), sender_name(message), "menu")


@router.message(Command("help"))
async def handle_help(message: Message) -> None:
    """Handle /help command."""
    await message.answer(HELP_MESSAGE, reply_markup=get_quick_reply_keyboard(MENU_REPLIES))


@router.message(Command("clear"))
async def handle_clear(message: Message, shop_service: ShopService) -> None:
    """Forget the session; the next message starts from the beginning."""
    await shop_service.reset(str(message.chat.id))
    await message.answer(
        "🔄 Your session has been cleared. Send any message to start again.",
        reply_markup=get_quick_reply_keyboard(("menu",)),
    )
