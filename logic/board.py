"""Board notation parsing and square coordinates."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from models import PlayerColor


logger = logging.getLogger(__name__)

BOARD_SIZE = 8
FILES = "abcdefgh"
STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

_RANK_SEPARATOR = re.compile(r"[/-]")
_DIGITS = "0123456789"


@dataclass(frozen=True)
class Piece:
    kind: str
    side: PlayerColor

    @staticmethod
    def from_symbol(symbol: str) -> 'Piece':
        side = PlayerColor.WHITE if symbol.isupper() else PlayerColor.BLACK
        return Piece(kind=symbol.lower(), side=side)

    @property
    def symbol(self) -> str:
        return self.kind.upper() if self.side is PlayerColor.WHITE else self.kind


# grid[rank][file]; rank 0 is the 8th rank, file 0 is the a-file
BoardGrid = List[List[Optional[Piece]]]
MoveIndex = Dict[str, List[str]]


def empty_grid() -> BoardGrid:
    return [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]


def _fill_rank(row: List[Optional[Piece]], group: str) -> None:
    col = 0
    for ch in group:
        if ch in _DIGITS:
            col += int(ch)
        else:
            if col >= BOARD_SIZE:
                logger.warning("Rank %r overflows the board, rest ignored", group)
                break
            row[col] = Piece.from_symbol(ch)
            col += 1
        if col > BOARD_SIZE:
            logger.warning("Rank %r overflows the board, rest ignored", group)
            break


def _parse_placement(placement: str) -> Optional[BoardGrid]:
    groups = _RANK_SEPARATOR.split(placement)
    if len(groups) != BOARD_SIZE:
        return None
    grid = empty_grid()
    for rank, group in enumerate(groups):
        _fill_rank(grid[rank], group)
    return grid


def starting_grid() -> BoardGrid:
    grid = _parse_placement(STARTING_PLACEMENT)
    assert grid is not None
    return grid


def parse_board(notation: Optional[str]) -> BoardGrid:
    """Parse the piece-placement part of ``notation`` into a grid.

    Malformed input never raises: anything that does not split into exactly
    eight rank groups yields the starting position.
    """
    placement = (notation or "").strip().split(" ", 1)[0]
    grid = _parse_placement(placement)
    if grid is None:
        logger.warning(
            "Board notation %r does not have %d ranks, using starting position",
            notation,
            BOARD_SIZE,
        )
        return starting_grid()
    return grid


def square_label(rank: int, file: int) -> str:
    """Return the algebraic name of grid cell ``(rank, file)``, e.g. ``(6, 4)`` → ``e2``."""
    return f"{FILES[file]}{BOARD_SIZE - rank}"


def build_move_index(moves: Optional[Iterable[str]]) -> MoveIndex:
    """Group moves like ``e2e4`` by their origin square."""
    index: MoveIndex = {}
    for move in moves or ():
        if not isinstance(move, str) or len(move) < 4:
            continue
        index.setdefault(move[:2], []).append(move)
    return index


__all__ = [
    "BOARD_SIZE",
    "FILES",
    "STARTING_PLACEMENT",
    "Piece",
    "BoardGrid",
    "MoveIndex",
    "empty_grid",
    "starting_grid",
    "parse_board",
    "square_label",
    "build_move_index",
]
