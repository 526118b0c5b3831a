from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PlayerColor(str, Enum):
    WHITE = "WHITE"
    BLACK = "BLACK"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: object) -> 'PlayerColor':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.UNKNOWN


class GameStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CHECK = "CHECK"
    CHECKMATE = "CHECKMATE"
    STALEMATE = "STALEMATE"
    DRAW = "DRAW"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: object) -> 'GameStatus':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.UNKNOWN

    @property
    def ongoing(self) -> bool:
        return self in (GameStatus.ACTIVE, GameStatus.CHECK)


@dataclass
class Session:
    """Which game a chat is playing, with which color and in what state."""

    game_id: str
    chat_id: int
    player_id: int
    player_color: PlayerColor = PlayerColor.UNKNOWN
    opponent_name: Optional[str] = None
    game_status: GameStatus = GameStatus.UNKNOWN
    last_activity: datetime = field(default_factory=utcnow)

    @property
    def active(self) -> bool:
        return self.game_status.ongoing


# ---------------------------------------------------------------------------
# Remote game service payloads
# ---------------------------------------------------------------------------

def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _opt_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class PlayerInfo:
    id: Optional[int] = None
    name: str = ""
    color: Optional[str] = None
    rating: Optional[int] = None

    @staticmethod
    def from_payload(data: Any) -> Optional['PlayerInfo']:
        if not isinstance(data, dict):
            return None
        return PlayerInfo(
            id=_opt_int(data.get("id")),
            name=str(data.get("name") or ""),
            color=_opt_str(data.get("color")),
            rating=_opt_int(data.get("rating")),
        )


@dataclass
class GameResponse:
    success: bool = False
    game_id: Optional[str] = None
    status: Optional[str] = None
    message: Optional[str] = None
    board: Optional[str] = None
    current_turn: Optional[str] = None
    white_player: Optional[PlayerInfo] = None
    black_player: Optional[PlayerInfo] = None
    additional_info: Dict[str, Any] = field(default_factory=dict)

    @property
    def game_status(self) -> GameStatus:
        return GameStatus.parse(self.status)

    @staticmethod
    def from_payload(data: Any) -> 'GameResponse':
        """Build a response from decoded JSON.

        Anything that is not an object is reported as a failed response rather
        than raising, matching how the service's errors are surfaced.
        """
        if not isinstance(data, dict):
            return GameResponse.failure("Некорректный ответ сервера")
        info = data.get("additionalInfo")
        return GameResponse(
            success=data.get("success") is True,
            game_id=_opt_str(data.get("gameId")),
            status=_opt_str(data.get("status")),
            message=_opt_str(data.get("message")),
            board=_opt_str(data.get("board")),
            current_turn=_opt_str(data.get("currentTurn")),
            white_player=PlayerInfo.from_payload(data.get("whitePlayer")),
            black_player=PlayerInfo.from_payload(data.get("blackPlayer")),
            additional_info=info if isinstance(info, dict) else {},
        )

    @staticmethod
    def failure(message: str) -> 'GameResponse':
        return GameResponse(success=False, message=message)


@dataclass
class WaitingGame:
    game_id: str
    white_player_name: str = ""
    created_at: str = ""

    @staticmethod
    def from_payload(data: Any) -> Optional['WaitingGame']:
        if not isinstance(data, dict) or not data.get("gameId"):
            return None
        return WaitingGame(
            game_id=str(data["gameId"]),
            white_player_name=str(data.get("whitePlayerName") or ""),
            created_at=str(data.get("createdAt") or ""),
        )


def extract_legal_moves(additional_info: Any) -> Optional[List[str]]:
    """Return ``additionalInfo["legalMoves"]`` or ``None`` when it is unusable."""
    if not isinstance(additional_info, dict):
        return None
    moves = additional_info.get("legalMoves")
    if not isinstance(moves, list):
        return None
    return [m for m in moves if isinstance(m, str)]
