"""
Reply keyboards for the shopping flow.
"""

from aiogram.types import KeyboardButton, ReplyKeyboardMarkup, ReplyKeyboardRemove
from aiogram.utils.keyboard import ReplyKeyboardBuilder

# Labels shown on buttons for quick replies that are not self-explanatory
BUTTON_LABELS = {
    "1": "1. Continue",
    "2": "2. Start Over",
}


def button_text(reply: str) -> str:
    return BUTTON_LABELS.get(reply, reply)


def parse_button(text: str) -> str:
    """Map a pressed button label back to the command it stands for."""
    for reply, label in BUTTON_LABELS.items():
        if text == label:
            return reply
    return text


def get_quick_reply_keyboard(replies: tuple[str, ...]) -> ReplyKeyboardMarkup | ReplyKeyboardRemove:
    """Keyboard with one button per suggested reply."""
    if not replies:
        return ReplyKeyboardRemove()

    builder = ReplyKeyboardBuilder()
    for reply in replies:
        builder.add(KeyboardButton(text=button_text(reply)))
    builder.adjust(2)
    return builder.as_markup(
        resize_keyboard=True,
        input_field_placeholder="Type a number or a command...",
    )
