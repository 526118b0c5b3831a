"""Command dispatcher: turns a chat command into a reply.

The dispatcher owns no state itself.  It reads and writes the
:class:`storage.SessionStore` it is given and talks to the remote service
through :class:`chess_api.ChessApiClient`.  The store is only touched before
and after remote calls, never across an ``await``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, List, Optional, Tuple

from chess_api import ChessApiClient, ChessApiError
from logic import commands as cmd
from logic.board import build_move_index, parse_board
from logic.render import Button, Layout, build_move_selection, render, render_interactive
from models import GameResponse, GameStatus, PlayerColor, PlayerInfo, Session
from storage import SessionStore

from . import messages


logger = logging.getLogger(__name__)


class UserInputError(ValueError):
    """A command argument is missing or malformed."""


class ConflictError(RuntimeError):
    """The chat already plays a game."""

    def __init__(self, game_id: str) -> None:
        super().__init__(game_id)
        self.game_id = game_id


class CollaboratorFailure(RuntimeError):
    """The remote service failed or rejected the request."""

    def __init__(self, title: str, message: Optional[str] = None) -> None:
        super().__init__(title)
        self.title = title
        self.message = message


@dataclass
class Notification:
    chat_id: int
    text: str
    keyboard: Optional[Layout] = None


@dataclass
class Reply:
    text: str
    keyboard: Optional[Layout] = None
    main_menu: bool = False
    notifications: List[Notification] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.text and self.keyboard is None


def _draw_keyboard() -> Layout:
    return [[
        Button("🤝 Принять ничью", "/draw accept"),
        Button("❌ Отклонить", "/draw decline"),
    ]]


def player_color_for(response: GameResponse, player_id: int) -> PlayerColor:
    white = response.white_player
    if white is not None and white.id is not None:
        return PlayerColor.WHITE if white.id == player_id else PlayerColor.BLACK
    return PlayerColor.WHITE


def session_status(response: GameResponse) -> GameStatus:
    # a game the service reports in a state we do not know (e.g. waiting for
    # the second player) still occupies the chat
    status = response.game_status
    return GameStatus.ACTIVE if status is GameStatus.UNKNOWN else status


def _opponent_of(response: GameResponse, player_id: int) -> Tuple[Optional[PlayerInfo], PlayerColor]:
    for player, color in (
        (response.white_player, PlayerColor.WHITE),
        (response.black_player, PlayerColor.BLACK),
    ):
        if player is not None and player.id is not None and player.id != player_id:
            return player, color
    return None, PlayerColor.UNKNOWN


def _player_name(response: GameResponse, player_id: int) -> str:
    for player in (response.white_player, response.black_player):
        if player is not None and player.id == player_id and player.name:
            return player.name
    return "Соперник"


class CommandDispatcher:
    def __init__(self, store: SessionStore, api: ChessApiClient) -> None:
        self.store = store
        self.api = api

    async def handle(self, chat_id: int, text: str, user_name: str = "") -> Reply:
        """Parse ``text`` and execute it.  Never raises."""
        command = cmd.parse_command(text)
        logger.info(
            "Command %s from chat_id=%s user=%s",
            cmd.command_name(command),
            chat_id,
            user_name,
        )
        try:
            return await self.execute(chat_id, command, user_name)
        except UserInputError as exc:
            return Reply(str(exc))
        except ConflictError as exc:
            return Reply(messages.active_game_conflict(exc.game_id))
        except CollaboratorFailure as exc:
            return Reply(messages.collaborator_error(exc.title, exc.message))
        except Exception:
            logger.exception("Unhandled error for chat_id=%s text=%r", chat_id, text)
            return Reply(messages.GENERIC_APOLOGY)

    async def execute(self, chat_id: int, command: cmd.Command, user_name: str) -> Reply:
        if isinstance(command, cmd.Start):
            return Reply(messages.start_text(user_name), main_menu=True)
        if isinstance(command, cmd.Help):
            return Reply(messages.HELP_TEXT)
        if isinstance(command, cmd.NewGame):
            return await self.new_game(chat_id, user_name)
        if isinstance(command, cmd.ListGames):
            return await self.list_games()
        if isinstance(command, cmd.JoinGame):
            return await self.join_game(chat_id, command.game_id, user_name)
        if isinstance(command, cmd.Move):
            return await self.move(chat_id, command.notation)
        if isinstance(command, cmd.Board):
            return await self.board(chat_id)
        if isinstance(command, cmd.LegalMoves):
            return await self.legal_moves(chat_id)
        if isinstance(command, cmd.Status):
            return await self.status()
        if isinstance(command, cmd.Resign):
            return Reply(messages.RESIGN_NOT_IMPLEMENTED)
        if isinstance(command, cmd.Draw):
            return await self.draw(chat_id, command, user_name)
        if isinstance(command, cmd.SelectSquare):
            return await self.select_square(chat_id, command.square)
        if isinstance(command, cmd.Noop):
            return Reply("")
        return Reply(messages.unknown_command(getattr(command, "raw_text", "")))

    # -- helpers -------------------------------------------------------------

    def _require_session(self, chat_id: int) -> Session:
        session = self.store.get(chat_id)
        if session is None:
            raise UserInputError(messages.NO_ACTIVE_GAME)
        return session

    def _require_no_active_game(self, chat_id: int) -> None:
        if self.store.has_active_game(chat_id):
            session = self.store.get(chat_id)
            raise ConflictError(session.game_id if session else "")

    async def _call(self, title: str, call: Awaitable[GameResponse]) -> GameResponse:
        try:
            response = await call
        except ChessApiError as exc:
            raise CollaboratorFailure(title, str(exc)) from exc
        if response is None or not response.success:
            raise CollaboratorFailure(title, response.message if response else None)
        return response

    def _opponent_chats(self, session: Session, response: GameResponse) -> List[int]:
        opponent, _ = _opponent_of(response, session.player_id)
        if opponent is not None:
            return [opponent.id]
        return [s.chat_id for s in self.store.others_in_game(session.game_id, session.chat_id)]

    async def _legal_moves_or_empty(self, session: Session) -> List[str]:
        try:
            moves = await self.api.get_legal_moves(session.game_id, session.player_id)
        except ChessApiError:
            logger.warning("Legal moves unavailable for game %s", session.game_id)
            return []
        return moves or []

    # -- commands ------------------------------------------------------------

    async def new_game(self, chat_id: int, user_name: str) -> Reply:
        self._require_no_active_game(chat_id)
        response = await self._call(
            "Ошибка создания игры!", self.api.create_game(chat_id, user_name)
        )
        if not response.game_id:
            raise CollaboratorFailure("Ошибка создания игры!", "Сервер не вернул ID игры")
        self.store.create(response.game_id, chat_id, chat_id)
        self.store.update(chat_id, PlayerColor.WHITE, session_status(response))
        return Reply(messages.game_created(response.game_id, user_name, response.status))

    async def list_games(self) -> Reply:
        try:
            games = await self.api.list_waiting_games()
        except ChessApiError as exc:
            raise CollaboratorFailure("Ошибка получения списка игр!", str(exc)) from exc
        if not games:
            return Reply(messages.NO_WAITING_GAMES)
        return Reply(messages.waiting_games(games))

    async def join_game(self, chat_id: int, game_id: str, user_name: str) -> Reply:
        game_id = game_id.strip()
        if not game_id:
            raise UserInputError(messages.MISSING_GAME_ID)
        self._require_no_active_game(chat_id)
        response = await self._call(
            "Ошибка присоединения к игре!", self.api.join_game(game_id, chat_id, user_name)
        )
        color = player_color_for(response, chat_id)
        self.store.create(game_id, chat_id, chat_id)
        self.store.update(chat_id, color, session_status(response))
        reply = Reply(messages.joined_game(game_id, color.value, response))
        opponent, _ = _opponent_of(response, chat_id)
        if opponent is not None:
            self.store.set_opponent(chat_id, opponent.name or None)
            reply.notifications.append(
                Notification(opponent.id, messages.opponent_joined(game_id, user_name))
            )
        return reply

    async def move(self, chat_id: int, notation: str) -> Reply:
        session = self._require_session(chat_id)
        notation = notation.strip()
        if not notation:
            raise UserInputError(messages.MISSING_MOVE)
        response = await self._call(
            "Ошибка выполнения хода!",
            self.api.make_move(session.game_id, session.player_id, notation),
        )
        self.store.update(chat_id, session.player_color, session_status(response))
        if response.game_id is None:
            response.game_id = session.game_id
        opponent, opponent_color = _opponent_of(response, session.player_id)
        if opponent is not None:
            self.store.set_opponent(chat_id, opponent.name or None)
        grid = parse_board(response.board)
        reply = Reply(
            messages.move_result(notation, response, render(grid, session.player_color).text)
        )

        if opponent is not None:
            reply.notifications.append(
                Notification(
                    opponent.id,
                    messages.opponent_moved(
                        response,
                        notation,
                        _player_name(response, session.player_id),
                        render(grid, opponent_color).text,
                    ),
                )
            )
        return reply

    async def board(self, chat_id: int) -> Reply:
        session = self._require_session(chat_id)
        response = await self._call(
            "Ошибка получения доски!",
            self.api.get_game_state(session.game_id, session.player_id),
        )
        self.store.update(chat_id, session.player_color, session_status(response))
        if response.game_id is None:
            response.game_id = session.game_id
        opponent, _ = _opponent_of(response, session.player_id)
        if opponent is not None:
            self.store.set_opponent(chat_id, opponent.name or None)
        moves = []
        if response.game_status.ongoing:
            moves = await self._legal_moves_or_empty(session)
        text, layout = render_interactive(response.board, session.player_color, moves)
        return Reply(messages.board_state(response, text), keyboard=layout)

    async def legal_moves(self, chat_id: int) -> Reply:
        session = self._require_session(chat_id)
        try:
            moves = await self.api.get_legal_moves(session.game_id, session.player_id)
        except ChessApiError as exc:
            raise CollaboratorFailure("Ошибка получения возможных ходов!", str(exc)) from exc
        if not moves:
            return Reply(messages.NO_LEGAL_MOVES)
        return Reply(messages.legal_moves(moves))

    async def status(self) -> Reply:
        try:
            api_status = messages.api_online(await self.api.ping())
        except Exception as exc:
            logger.warning("Liveness probe failed: %s", exc)
            api_status = messages.api_offline(str(exc))
        return Reply(messages.status_text(api_status, self.store.count()))

    async def draw(self, chat_id: int, command: cmd.Draw, user_name: str = "") -> Reply:
        session = self._require_session(chat_id)
        if command.action is None:
            raise UserInputError(messages.BAD_DRAW_ACTION)
        if command.action is cmd.DrawAction.OFFER:
            response = await self._call(
                "Не удалось предложить ничью!",
                self.api.offer_draw(session.game_id, session.player_id),
            )
            reply = Reply(messages.draw_offered(response))
            for chat in self._opponent_chats(session, response):
                reply.notifications.append(
                    Notification(
                        chat,
                        messages.draw_offer_received(session.game_id, user_name),
                        keyboard=_draw_keyboard(),
                    )
                )
            return reply

        accept = command.action is cmd.DrawAction.ACCEPT
        response = await self._call(
            "Ошибка обработки ничьи!",
            self.api.respond_to_draw(session.game_id, session.player_id, accept),
        )
        if accept:
            self.store.remove(chat_id)
            return Reply(messages.draw_accepted(response))
        return Reply(messages.draw_declined(response))

    async def select_square(self, chat_id: int, square: str) -> Reply:
        session = self._require_session(chat_id)
        moves = await self._legal_moves_or_empty(session)
        from_square = build_move_index(moves).get(square, [])
        if not from_square:
            return Reply(messages.square_moves(square, []))
        return Reply(
            messages.square_moves(square, from_square),
            keyboard=build_move_selection(square, from_square),
        )


__all__ = [
    "CommandDispatcher",
    "Reply",
    "Notification",
    "UserInputError",
    "ConflictError",
    "CollaboratorFailure",
    "player_color_for",
]
