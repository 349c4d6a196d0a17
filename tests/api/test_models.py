"""Unit tests for /src/api/models.py"""

import pytest
from pydantic import ValidationError

from src.api.models import (
    ActionRequest,
    CreateGameRequest,
    GameStateResponse,
    JoinGameRequest,
    MoveActionModel,
)
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Phase
from src.jarls.actions import MoveAction, PassAction, ResignAction, TimerExpiryAction
from src.jarls.game import create_game, join_game
from src.jarls.hex import Hex
from src.jarls.setup import config_for_player_count


# -- Validation - CreateGameRequest --
def test_create_request_from_camel_case() -> None:
    request = CreateGameRequest.model_validate({"playerCount": 3, "turnTimerMs": 30000})
    assert request.player_count == 3
    assert request.turn_timer_ms == 30000
    assert not request.is_custom


def test_custom_create_request() -> None:
    request = CreateGameRequest(player_count=2, board_radius=4, shield_count=3, warrior_count=3)
    assert request.is_custom


@pytest.mark.parametrize("field", ["board_radius", "shield_count", "warrior_count", "inactivity_limit", "turn_timer_ms"])
def test_create_request_rejects_non_positive_values(field: str) -> None:
    with pytest.raises(InvalidRequestError):
        CreateGameRequest(player_count=2, **{field: 0})


# -- Validation - JoinGameRequest --
def test_join_request_strips_player_id() -> None:
    request = JoinGameRequest.model_validate({"gameId": "g1", "playerId": "  alice "})
    assert request.player_id == "alice"
    assert request.player_name is None


def test_join_request_with_blank_player_id() -> None:
    with pytest.raises(InvalidRequestError):
        JoinGameRequest(game_id="g1", player_id="   ")


# -- Validation - ActionRequest --
def test_move_action_request() -> None:
    request = ActionRequest.model_validate(
        {
            "gameId": "g1",
            "action": {
                "type": "move",
                "playerId": "alice",
                "pieceId": "alice-warrior-1",
                "target": {"q": 1, "r": -1},
            },
        }
    )
    assert isinstance(request.action, MoveActionModel)
    assert request.action.to_action() == MoveAction("alice", "alice-warrior-1", Hex(1, -1))


@pytest.mark.parametrize(
    "kind, expected",
    [
        ("pass", PassAction("bob")),
        ("resign", ResignAction("bob")),
        ("timerExpiry", TimerExpiryAction("bob")),
    ],
)
def test_other_action_requests(kind: str, expected: object) -> None:
    request = ActionRequest.model_validate({"gameId": "g1", "action": {"type": kind, "playerId": "bob"}})
    assert request.action.to_action() == expected


@pytest.mark.parametrize(
    "action",
    [
        {"type": "teleport", "playerId": "bob"},
        {"type": "move", "playerId": "bob", "pieceId": "bob-warrior-1"},
        {"type": "move", "playerId": "bob", "pieceId": "bob-warrior-1", "target": {"q": "x", "r": 0}},
        {"playerId": "bob"},
    ],
)
def test_malformed_action_requests(action: dict) -> None:
    with pytest.raises(ValidationError):
        ActionRequest.model_validate({"gameId": "g1", "action": action})


# -- GameStateResponse --
def test_state_response_roundtrip() -> None:
    """The response carries the full snapshot: converting back yields the same GameModel."""
    lobby = create_game(config_for_player_count(2), game_id="g1")
    started = join_game(join_game(lobby, "alice"), "bob", now=7)
    model = started.to_model()

    response = GameStateResponse.from_model(model)
    assert response.phase == Phase.ACTIVE
    assert response.current_player_id == "alice"
    assert len(response.pieces) == 20
    assert response.to_model() == model


def test_state_response_uses_camel_case() -> None:
    lobby = create_game(config_for_player_count(2), game_id="g1")
    data = GameStateResponse.from_model(join_game(lobby, "alice").to_model()).model_dump(
        by_alias=True, mode="json"
    )
    assert data["currentPlayerId"] is None
    assert data["config"]["boardRadius"] == 3
    assert data["players"][0]["isEliminated"] is False
    assert data["phase"] == "lobby"
    assert data["winCondition"] is None
