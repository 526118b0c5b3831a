from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple
import re

from wcwidth import wcswidth

from models import PlayerColor
from logic.board import (
    BOARD_SIZE,
    FILES,
    BoardGrid,
    MoveIndex,
    Piece,
    build_move_index,
    parse_board,
    square_label,
)
from logic.commands import (
    ACTION_CANCEL_MOVE,
    ACTION_LEGAL_MOVES,
    ACTION_MOVE,
    ACTION_NONE,
    ACTION_OFFER_DRAW,
    ACTION_REFRESH,
    ACTION_SELECT,
)

# fixed-width layout for board cells inside <pre>
CELL_WIDTH = 2

EMPTY_GLYPH = "·"

PIECE_GLYPHS = {
    "K": "♔",
    "Q": "♕",
    "R": "♖",
    "B": "♗",
    "N": "♘",
    "P": "♙",
    "k": "♚",
    "q": "♛",
    "r": "♜",
    "b": "♝",
    "n": "♞",
    "p": "♟",
    ".": EMPTY_GLYPH,
}

REFRESH_LABEL = "🔄 Обновить"
LEGAL_MOVES_LABEL = "📋 Все ходы"
OFFER_DRAW_LABEL = "🤝 Ничья"
CANCEL_LABEL = "❌ Отмена"
MOVES_PER_ROW = 4


@dataclass(frozen=True)
class CellView:
    square: str
    piece: Optional[Piece]
    glyph: str


@dataclass(frozen=True)
class Button:
    text: str
    action: str


Layout = List[List[Button]]


@dataclass(frozen=True)
class RenderedBoard:
    text: str
    cells: List[List[CellView]]


def format_cell(symbol: str) -> str:
    """Pad cell contents so that the board remains aligned.

    ``symbol`` may contain HTML tags, which are ignored when measuring.  If
    ``wcswidth`` cannot measure the text the symbol is returned unchanged.
    """
    visible = re.sub(r"<[^>]+>", "", symbol)
    width = wcswidth(visible)
    if width < 0 or width >= CELL_WIDTH:
        return symbol
    slack = CELL_WIDTH - width
    left_pad = (slack + 1) // 2
    right_pad = slack - left_pad
    return (" " * left_pad) + symbol + (" " * right_pad)


def glyph_for(piece: Optional[Piece]) -> str:
    if piece is None:
        return EMPTY_GLYPH
    return PIECE_GLYPHS.get(piece.symbol, EMPTY_GLYPH)


def _flipped(viewer: PlayerColor) -> bool:
    return PlayerColor.parse(viewer) is PlayerColor.BLACK


def oriented_cells(grid: BoardGrid, viewer: PlayerColor) -> Iterator[Tuple[int, int, int, int]]:
    """Yield ``(display_row, display_col, rank, file)`` for all 64 cells.

    White sees the grid as stored (8th rank on top, a-file on the left);
    Black sees both axes mirrored.
    """
    flip = _flipped(viewer)
    last = BOARD_SIZE - 1
    for r in range(BOARD_SIZE):
        for c in range(BOARD_SIZE):
            if flip:
                yield r, c, last - r, last - c
            else:
                yield r, c, r, c


def render(grid: BoardGrid, viewer: PlayerColor) -> RenderedBoard:
    cells: List[List[CellView]] = [[] for _ in range(BOARD_SIZE)]
    for r, _c, rank, file in oriented_cells(grid, viewer):
        piece = grid[rank][file]
        cells[r].append(CellView(square_label(rank, file), piece, glyph_for(piece)))

    lines = []
    for row in cells:
        rank_label = row[0].square[1]
        lines.append(f"{rank_label} " + "".join(format_cell(cell.glyph) for cell in row))
    files = FILES[::-1] if _flipped(viewer) else FILES
    lines.append("  " + "".join(format_cell(f) for f in files))
    text = "<pre>" + "\n".join(lines) + "</pre>"
    return RenderedBoard(text=text, cells=cells)


def control_row() -> List[Button]:
    return [
        Button(REFRESH_LABEL, ACTION_REFRESH),
        Button(LEGAL_MOVES_LABEL, ACTION_LEGAL_MOVES),
        Button(OFFER_DRAW_LABEL, ACTION_OFFER_DRAW),
    ]


def build_interactive_layout(
    grid: BoardGrid,
    viewer: PlayerColor,
    move_index: MoveIndex,
) -> Layout:
    """Return 8 rows of board buttons plus the control row.

    A cell is selectable when at least one legal move starts on it.
    """
    layout: Layout = [[] for _ in range(BOARD_SIZE)]
    for r, _c, rank, file in oriented_cells(grid, viewer):
        square = square_label(rank, file)
        if move_index.get(square):
            action = f"{ACTION_SELECT}{square}"
        else:
            action = ACTION_NONE
        layout[r].append(Button(glyph_for(grid[rank][file]), action))
    layout.append(control_row())
    return layout


def render_interactive(
    notation: Optional[str],
    viewer: PlayerColor,
    legal_moves: Optional[Sequence[str]],
) -> Tuple[str, Layout]:
    """Parse ``notation`` and return the text board and its keyboard."""
    grid = parse_board(notation)
    rendered = render(grid, viewer)
    layout = build_interactive_layout(grid, viewer, build_move_index(legal_moves))
    return rendered.text, layout


def build_move_selection(square: str, moves: Sequence[str]) -> Layout:
    """Buttons for every destination reachable from ``square``."""
    layout: Layout = []
    row: List[Button] = []
    for move in moves:
        if len(move) < 4:
            continue
        row.append(Button(f"➡️ {move[2:4]}", f"{ACTION_MOVE}{move}"))
        if len(row) >= MOVES_PER_ROW:
            layout.append(row)
            row = []
    if row:
        layout.append(row)
    layout.append([Button(CANCEL_LABEL, ACTION_CANCEL_MOVE)])
    return layout


__all__ = [
    "CELL_WIDTH",
    "EMPTY_GLYPH",
    "PIECE_GLYPHS",
    "CellView",
    "Button",
    "Layout",
    "RenderedBoard",
    "format_cell",
    "glyph_for",
    "oriented_cells",
    "render",
    "control_row",
    "build_interactive_layout",
    "render_interactive",
    "build_move_selection",
]
