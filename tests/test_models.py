import pytest

from models import (
    GameResponse,
    GameStatus,
    PlayerColor,
    Session,
    WaitingGame,
    extract_legal_moves,
)


def test_game_response_reads_camel_case():
    response = GameResponse.from_payload({
        "success": True,
        "gameId": 42,
        "status": "CHECK",
        "currentTurn": "BLACK",
        "board": "8/8/8/8/8/8/8/8",
        "blackPlayer": {"id": "9", "name": "bob"},
        "additionalInfo": {"legalMoves": []},
    })

    assert response.game_id == "42"
    assert response.game_status is GameStatus.CHECK
    assert response.black_player.id == 9
    assert response.white_player is None
    assert response.additional_info == {"legalMoves": []}


@pytest.mark.parametrize("payload", [None, [], "text", 5])
def test_non_object_payload_is_failure(payload):
    response = GameResponse.from_payload(payload)
    assert response.success is False
    assert response.message


def test_success_must_be_true():
    assert GameResponse.from_payload({"success": "yes"}).success is False


@pytest.mark.parametrize(
    "raw, status",
    [("active", GameStatus.ACTIVE), ("CHECKMATE", GameStatus.CHECKMATE), ("WAITING", GameStatus.UNKNOWN), (None, GameStatus.UNKNOWN)],
)
def test_status_parse(raw, status):
    assert GameStatus.parse(raw) is status


def test_color_parse():
    assert PlayerColor.parse("black") is PlayerColor.BLACK
    assert PlayerColor.parse("purple") is PlayerColor.UNKNOWN


def test_session_active_only_while_ongoing():
    session = Session(game_id="g1", chat_id=1, player_id=1)
    assert not session.active
    session.game_status = GameStatus.CHECK
    assert session.active
    session.game_status = GameStatus.STALEMATE
    assert not session.active


def test_waiting_game_requires_id():
    assert WaitingGame.from_payload({"whitePlayerName": "a"}) is None
    assert WaitingGame.from_payload({"gameId": "g"}).game_id == "g"


@pytest.mark.parametrize(
    "info, moves",
    [
        ({"legalMoves": ["e2e4"]}, ["e2e4"]),
        ({"legalMoves": "e2e4"}, None),
        ({}, None),
        (None, None),
    ],
)
def test_extract_legal_moves(info, moves):
    assert extract_legal_moves(info) == moves
