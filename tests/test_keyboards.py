from telegram import InlineKeyboardMarkup, ReplyKeyboardMarkup

from handlers.keyboards import inline_keyboard, main_menu_keyboard
from logic.render import build_interactive_layout
from logic.board import starting_grid
from models import PlayerColor


def test_layout_becomes_inline_markup():
    layout = build_interactive_layout(starting_grid(), PlayerColor.WHITE, {"e2": ["e2e4"]})
    markup = inline_keyboard(layout)

    assert isinstance(markup, InlineKeyboardMarkup)
    rows = markup.inline_keyboard
    assert len(rows) == 9
    assert rows[6][4].callback_data == "select:e2"
    assert rows[6][4].text == "♙"
    assert rows[-1][0].callback_data == "refresh_board"


def test_no_layout_gives_no_markup():
    assert inline_keyboard(None) is None
    assert inline_keyboard([]) is None


def test_main_menu_keyboard():
    markup = main_menu_keyboard()

    assert isinstance(markup, ReplyKeyboardMarkup)
    labels = [[button.text for button in row] for row in markup.keyboard]
    assert labels == [
        ["/newgame", "/listgames"],
        ["/board", "/moves"],
        ["/draw", "/resign"],
    ]
    assert markup.resize_keyboard is True
