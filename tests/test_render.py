import pytest

from logic.board import build_move_index, parse_board, starting_grid
from logic.render import (
    CELL_WIDTH,
    EMPTY_GLYPH,
    build_interactive_layout,
    build_move_selection,
    control_row,
    format_cell,
    glyph_for,
    render,
    render_interactive,
)
from logic.board import Piece
from models import PlayerColor


def _lines(text):
    assert text.startswith("<pre>") and text.endswith("</pre>")
    return text[len("<pre>"):-len("</pre>")].split("\n")


def test_white_sees_eighth_rank_on_top():
    rendered = render(starting_grid(), PlayerColor.WHITE)
    lines = _lines(rendered.text)

    assert len(lines) == 9
    assert lines[0].split() == ["8", "♜", "♞", "♝", "♛", "♚", "♝", "♞", "♜"]
    assert lines[6].split() == ["2"] + ["♙"] * 8
    assert lines[3].split() == ["5"] + [EMPTY_GLYPH] * 8
    assert lines[-1].split() == list("abcdefgh")
    assert rendered.cells[0][0].square == "a8"
    assert rendered.cells[7][7].square == "h1"


def test_black_sees_board_mirrored():
    rendered = render(starting_grid(), PlayerColor.BLACK)
    lines = _lines(rendered.text)

    assert lines[0].split() == ["1", "♖", "♘", "♗", "♔", "♕", "♗", "♘", "♖"]
    assert lines[-1].split() == list("hgfedcba")
    assert rendered.cells[0][0].square == "h1"
    assert rendered.cells[7][7].square == "a8"


def test_orientations_are_point_reflections():
    grid = parse_board("r3k2r/pp3ppp/2n5/3pP3/8/5N2/PPP2PPP/R3K2R w - - 0 1")
    white = render(grid, PlayerColor.WHITE).cells
    black = render(grid, PlayerColor.BLACK).cells

    for r in range(8):
        for c in range(8):
            assert black[r][c] == white[7 - r][7 - c]


def test_unknown_viewer_renders_as_white():
    grid = starting_grid()
    assert render(grid, PlayerColor.UNKNOWN).text == render(grid, PlayerColor.WHITE).text


def test_unknown_symbol_renders_empty_glyph():
    assert glyph_for(Piece.from_symbol("x")) == EMPTY_GLYPH
    assert glyph_for(None) == EMPTY_GLYPH
    assert glyph_for(Piece.from_symbol("Q")) == "♕"


def test_format_cell_pads_to_cell_width():
    assert format_cell("a") == " a"
    assert len(format_cell("♙")) == CELL_WIDTH
    assert format_cell("<b>x</b>") == " <b>x</b>"


def test_only_origin_squares_are_selectable():
    grid = starting_grid()
    index = build_move_index(["e2e4", "e2e3", "g1f3"])
    layout = build_interactive_layout(grid, PlayerColor.WHITE, index)

    assert len(layout) == 9
    assert all(len(row) == 8 for row in layout[:8])
    assert layout[6][4].action == "select:e2"
    assert layout[7][6].action == "select:g1"
    assert layout[5][0].action == "none"
    assert layout[0][0].action == "none"
    assert layout[6][4].text == "♙"


def test_black_layout_keeps_square_names():
    grid = starting_grid()
    index = build_move_index(["e7e5"])
    layout = build_interactive_layout(grid, PlayerColor.BLACK, index)

    # e7 is grid (1, 4); mirrored it shows at (6, 3)
    assert layout[6][3].action == "select:e7"
    selectable = [b for row in layout[:8] for b in row if b.action != "none"]
    assert len(selectable) == 1


def test_control_row_is_last():
    layout = build_interactive_layout(starting_grid(), PlayerColor.WHITE, {})
    assert layout[-1] == control_row()
    assert [b.action for b in layout[-1]] == [
        "refresh_board",
        "show_legal_moves",
        "offer_draw",
    ]


def test_render_interactive_without_moves_is_inert():
    text, layout = render_interactive(None, PlayerColor.WHITE, None)

    assert _lines(text)[0].startswith("8")
    assert {b.action for row in layout[:8] for b in row} == {"none"}


def test_move_selection_rows_of_four_and_cancel():
    moves = ["b1a3", "b1c3", "b1d2", "b1d4", "b1x"]
    layout = build_move_selection("b1", moves)

    assert [len(row) for row in layout] == [4, 1]
    assert layout[0][0].text == "➡️ a3"
    assert layout[0][0].action == "move:b1a3"
    assert layout[-1][0].action == "cancel_move"


@pytest.mark.parametrize("count, rows", [(0, 1), (4, 2), (5, 3), (8, 3)])
def test_move_selection_row_count(count, rows):
    moves = [f"a2a{n}" for n in range(count)]
    assert len(build_move_selection("a2", moves)) == rows
