from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

from models import GameResponse, PlayerInfo


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def game(success=True, **kwargs):
    return GameResponse(success=success, **kwargs)


def player(pid, name, rating=None):
    return PlayerInfo(id=pid, name=name, rating=rating)


def fake_api(**overrides):
    api = SimpleNamespace(
        create_game=AsyncMock(return_value=game(game_id="g1", status="WAITING")),
        list_waiting_games=AsyncMock(return_value=[]),
        join_game=AsyncMock(return_value=game(status="ACTIVE")),
        make_move=AsyncMock(return_value=game(status="ACTIVE")),
        get_game_state=AsyncMock(return_value=game(status="ACTIVE")),
        get_legal_moves=AsyncMock(return_value=[]),
        offer_draw=AsyncMock(return_value=game(status="ACTIVE", message="offered")),
        respond_to_draw=AsyncMock(return_value=game(status="DRAW", message="done")),
        ping=AsyncMock(return_value="pong"),
    )
    for key, value in overrides.items():
        setattr(api, key, value)
    return api
