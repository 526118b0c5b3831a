from __future__ import annotations

from typing import Optional

from telegram import (
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardButton,
    ReplyKeyboardMarkup,
)

from logic.render import Layout


MAIN_MENU_ROWS = (
    ("/newgame", "/listgames"),
    ("/board", "/moves"),
    ("/draw", "/resign"),
)


def inline_keyboard(layout: Optional[Layout]) -> Optional[InlineKeyboardMarkup]:
    """Convert a button layout into Telegram inline markup.

    Each button's action token becomes its ``callback_data`` so that pressing
    it feeds the token back through the command parser.
    """
    if not layout:
        return None
    keyboard: list[list[InlineKeyboardButton]] = []
    for row in layout:
        keyboard.append(
            [InlineKeyboardButton(button.text, callback_data=button.action) for button in row]
        )
    return InlineKeyboardMarkup(keyboard)


def main_menu_keyboard() -> ReplyKeyboardMarkup:
    """Return the static reply keyboard shown after /start."""
    keyboard = [[KeyboardButton(label) for label in row] for row in MAIN_MENU_ROWS]
    return ReplyKeyboardMarkup(keyboard, resize_keyboard=True, selective=True)
