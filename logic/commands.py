"""Parsing of chat text and button payloads into commands.

Typed text and callback payloads go through the same :func:`parse_command`.
Commands are matched against an explicit table of prefixes; when several
prefixes match, the longest one wins (``/moves`` is not swallowed by
``/move``).  The table refuses duplicate prefixes when it is built, so a
shadowed entry breaks the import instead of turning into dead code.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union


# action tokens carried by inline buttons
ACTION_NONE = "none"
ACTION_SELECT = "select:"
ACTION_MOVE = "move:"
ACTION_REFRESH = "refresh_board"
ACTION_LEGAL_MOVES = "show_legal_moves"
ACTION_OFFER_DRAW = "offer_draw"
ACTION_CANCEL_MOVE = "cancel_move"


class AmbiguousCommandTable(ValueError):
    """Raised when two table entries share a prefix."""


class DrawAction(str, Enum):
    OFFER = "offer"
    ACCEPT = "accept"
    DECLINE = "decline"


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Help:
    pass


@dataclass(frozen=True)
class NewGame:
    pass


@dataclass(frozen=True)
class ListGames:
    pass


@dataclass(frozen=True)
class JoinGame:
    game_id: str = ""


@dataclass(frozen=True)
class Move:
    notation: str = ""


@dataclass(frozen=True)
class Board:
    pass


@dataclass(frozen=True)
class Status:
    pass


@dataclass(frozen=True)
class Resign:
    pass


@dataclass(frozen=True)
class LegalMoves:
    pass


@dataclass(frozen=True)
class Draw:
    # ``None`` when the argument is not one of the known actions
    action: Optional[DrawAction] = DrawAction.OFFER
    raw: str = ""


@dataclass(frozen=True)
class SelectSquare:
    square: str = ""


@dataclass(frozen=True)
class Noop:
    pass


@dataclass(frozen=True)
class Unknown:
    raw_text: str = ""


Command = Union[
    Start, Help, NewGame, ListGames, JoinGame, Move, Board, Status, Resign,
    LegalMoves, Draw, SelectSquare, Noop, Unknown,
]

Builder = Callable[[str], Command]


@dataclass(frozen=True)
class CommandRule:
    prefix: str
    build: Builder
    exact: bool = False

    def matches(self, text: str) -> bool:
        return text == self.prefix if self.exact else text.startswith(self.prefix)


def _first_arg(rest: str) -> str:
    parts = rest.split()
    return parts[0] if parts else ""


def _draw(rest: str) -> Draw:
    arg = _first_arg(rest).lower()
    if not arg:
        return Draw(DrawAction.OFFER)
    if arg in (DrawAction.ACCEPT.value, DrawAction.DECLINE.value):
        return Draw(DrawAction(arg))
    return Draw(None, raw=arg)


class CommandTable:
    def __init__(self, rules: Iterable[CommandRule]) -> None:
        self.rules: Tuple[CommandRule, ...] = tuple(rules)
        seen: set[str] = set()
        for rule in self.rules:
            if rule.prefix in seen:
                raise AmbiguousCommandTable(f"Duplicate command prefix {rule.prefix!r}")
            seen.add(rule.prefix)

    def prefixes(self) -> List[str]:
        return [rule.prefix for rule in self.rules]

    def match(self, lowered: str) -> Optional[CommandRule]:
        best: Optional[CommandRule] = None
        for rule in self.rules:
            if rule.matches(lowered) and (best is None or len(rule.prefix) > len(best.prefix)):
                best = rule
        return best


COMMANDS = CommandTable([
    CommandRule("/start", lambda rest: Start()),
    CommandRule("/help", lambda rest: Help()),
    CommandRule("/newgame", lambda rest: NewGame()),
    CommandRule("/listgames", lambda rest: ListGames()),
    CommandRule("/joingame", lambda rest: JoinGame(_first_arg(rest))),
    CommandRule("/move", lambda rest: Move(rest.strip())),
    CommandRule("/moves", lambda rest: LegalMoves()),
    CommandRule("/board", lambda rest: Board()),
    CommandRule("/status", lambda rest: Status()),
    CommandRule("/resign", lambda rest: Resign()),
    CommandRule("/draw", _draw),
    CommandRule(ACTION_SELECT, lambda rest: SelectSquare(rest.strip().lower())),
    CommandRule(ACTION_MOVE, lambda rest: Move(rest.strip())),
    CommandRule(ACTION_REFRESH, lambda rest: Board(), exact=True),
    CommandRule(ACTION_LEGAL_MOVES, lambda rest: LegalMoves(), exact=True),
    CommandRule(ACTION_OFFER_DRAW, lambda rest: Draw(DrawAction.OFFER), exact=True),
    CommandRule(ACTION_CANCEL_MOVE, lambda rest: Board(), exact=True),
    CommandRule(ACTION_NONE, lambda rest: Noop(), exact=True),
])


def _strip_bot_mention(rest: str) -> str:
    # "/joingame@ChessBot abc" in group chats
    if rest.startswith("@"):
        parts = rest.split(maxsplit=1)
        return parts[1] if len(parts) > 1 else ""
    return rest


def parse_command(text: Optional[str], table: CommandTable = COMMANDS) -> Command:
    """Turn raw chat text or a callback payload into a :data:`Command`.

    The whole text is lower-cased, arguments included, so game ids and move
    notation reach the game service in lower case.  Unrecognised input is
    echoed back as typed.
    """
    stripped = (text or "").strip()
    lowered = stripped.lower()
    rule = table.match(lowered)
    if rule is None:
        return Unknown(stripped)
    rest = _strip_bot_mention(lowered[len(rule.prefix):])
    return rule.build(rest)


def command_name(command: Command) -> str:
    return type(command).__name__


def known_commands(table: CommandTable = COMMANDS) -> Sequence[str]:
    return [p for p in table.prefixes() if p.startswith("/")]


__all__ = [
    "ACTION_NONE",
    "ACTION_SELECT",
    "ACTION_MOVE",
    "ACTION_REFRESH",
    "ACTION_LEGAL_MOVES",
    "ACTION_OFFER_DRAW",
    "ACTION_CANCEL_MOVE",
    "AmbiguousCommandTable",
    "DrawAction",
    "Command",
    "CommandRule",
    "CommandTable",
    "COMMANDS",
    "Start",
    "Help",
    "NewGame",
    "ListGames",
    "JoinGame",
    "Move",
    "Board",
    "Status",
    "Resign",
    "LegalMoves",
    "Draw",
    "SelectSquare",
    "Noop",
    "Unknown",
    "parse_command",
    "command_name",
    "known_commands",
]
