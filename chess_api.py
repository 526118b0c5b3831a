"""HTTP client for the remote chess game service."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from models import GameResponse, WaitingGame, extract_legal_moves


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/api/games"
DEFAULT_TIMEOUT = 30.0


class ChessApiError(RuntimeError):
    """The service could not be reached or answered with something unusable."""


class ChessApiClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, url, json=json, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            # the service reports business errors with a JSON body too
            body = _decode(exc.response)
            if isinstance(body, dict) and "success" in body:
                return exc.response
            logger.error("%s %s failed with status %s", method, url, exc.response.status_code)
            raise ChessApiError(f"Сервер ответил {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise ChessApiError(f"Сервер недоступен: {exc}") from exc
        return response

    async def _game_call(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> GameResponse:
        response = await self._request(method, path, json=json, params=params)
        payload = _decode(response)
        if payload is None:
            raise ChessApiError("Некорректный ответ сервера")
        game = GameResponse.from_payload(payload)
        logger.info(
            "%s %s -> success=%s status=%s", method, path, game.success, game.status
        )
        return game

    async def create_game(self, player_id: int, player_name: str) -> GameResponse:
        logger.info("Creating game for player %s", player_id)
        return await self._game_call(
            "POST", "", json={"playerId": player_id, "playerName": player_name}
        )

    async def list_waiting_games(self) -> List[WaitingGame]:
        response = await self._request("GET", "/waiting")
        payload = _decode(response)
        if not isinstance(payload, list):
            raise ChessApiError("Некорректный ответ сервера")
        games = [g for g in (WaitingGame.from_payload(item) for item in payload) if g]
        logger.info("Fetched %d waiting game(s)", len(games))
        return games

    async def join_game(self, game_id: str, player_id: int, player_name: str) -> GameResponse:
        logger.info("Player %s joining game %s", player_id, game_id)
        return await self._game_call(
            "POST",
            _game_path(game_id, "join"),
            json={"playerId": player_id, "playerName": player_name},
        )

    async def make_move(self, game_id: str, player_id: int, notation: str) -> GameResponse:
        logger.info("Move %s in game %s by player %s", notation, game_id, player_id)
        return await self._game_call(
            "POST",
            _game_path(game_id, "move"),
            json={"playerId": player_id, "notation": notation},
        )

    async def get_game_state(self, game_id: str, player_id: int) -> GameResponse:
        return await self._game_call(
            "GET", _game_path(game_id), params={"playerId": player_id}
        )

    async def get_legal_moves(self, game_id: str, player_id: int) -> Optional[List[str]]:
        """Return the legal moves, or ``None`` when the service sent none."""
        state = await self.get_game_state(game_id, player_id)
        moves = extract_legal_moves(state.additional_info) if state.success else None
        if moves is None:
            logger.warning("No legal moves in state of game %s", game_id)
        return moves

    async def offer_draw(self, game_id: str, player_id: int) -> GameResponse:
        logger.info("Draw offered in game %s by player %s", game_id, player_id)
        return await self._game_call(
            "POST", _game_path(game_id, "draw", "offer"), params={"playerId": player_id}
        )

    async def respond_to_draw(self, game_id: str, player_id: int, accept: bool) -> GameResponse:
        logger.info("Draw response in game %s by player %s: %s", game_id, player_id, accept)
        return await self._game_call(
            "POST",
            _game_path(game_id, "draw", "respond"),
            params={"playerId": player_id, "accept": "true" if accept else "false"},
        )

    async def ping(self) -> str:
        response = await self._request("GET", "/test")
        return response.text.strip()


def _game_path(game_id: str, *parts: str) -> str:
    # game ids come from chat input; keep them inside a single path segment
    segment = quote(game_id, safe="")
    if segment in (".", ".."):
        segment = segment.replace(".", "%2E")
    return "/" + "/".join((segment,) + parts)


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


__all__ = ["ChessApiClient", "ChessApiError", "DEFAULT_BASE_URL", "DEFAULT_TIMEOUT"]
