"""Unit tests for /src/services/jarls_service.py"""

import logging
import threading

import pytest

from src.api.models import (
    ActionRequest,
    CreateGameRequest,
    DeleteGameRequest,
    GameStateResponse,
    GetGameRequest,
    JoinGameRequest,
    LeaveGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
)
from src.core.config import Settings
from src.core.exceptions import (
    GameError,
    InvalidConfigError,
    InvalidRequestError,
    NotYourTurnError,
    RepositoryError,
)
from src.core.shared_types import Phase, WinCondition
from src.db.memory_repository import InMemoryGameRepository
from src.services.jarls_service import JarlsService


# --- MOCK DEPENDENCIES ----
class FakeClock:
    """Milliseconds that only move when the test says so."""

    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1_000)


@pytest.fixture
def service(memory_repository: InMemoryGameRepository, clock: FakeClock) -> JarlsService:
    return JarlsService(memory_repository, clock=clock)


def start_two_player_game(service: JarlsService, **options) -> str:
    created = service.create_game(CreateGameRequest(player_count=2, **options))
    service.join_game(JoinGameRequest(game_id=created.id, player_id="alice"))
    service.join_game(JoinGameRequest(game_id=created.id, player_id="bob"))
    return created.id


def action(game_id: str, **action_data) -> ActionRequest:
    return ActionRequest.model_validate({"gameId": game_id, "action": action_data})


# --- SERVICE - CREATE / JOIN / LEAVE ----
def test_create_a_new_game(service: JarlsService, memory_repository: InMemoryGameRepository) -> None:
    response = service.create_game(CreateGameRequest(player_count=2))

    assert isinstance(response, GameStateResponse)
    assert response.phase == Phase.LOBBY
    assert response.config.board_radius == 3
    assert response.players == []

    stored = memory_repository.get_game(response.id)
    assert stored is not None
    assert stored.phase == "lobby"


def test_create_custom_game(service: JarlsService) -> None:
    response = service.create_game(
        CreateGameRequest(player_count=2, board_radius=4, shield_count=2, warrior_count=3, inactivity_limit=5)
    )
    assert response.config.board_radius == 4
    assert response.config.warrior_count == 3
    assert response.config.inactivity_limit == 5


def test_create_incomplete_custom_game(service: JarlsService) -> None:
    with pytest.raises(InvalidRequestError):
        service.create_game(CreateGameRequest(player_count=2, board_radius=4))


def test_create_invalid_game(service: JarlsService) -> None:
    """Make sure service propagates the exceptions."""
    with pytest.raises(InvalidConfigError):
        service.create_game(CreateGameRequest(player_count=9))


def test_default_timer_from_settings(memory_repository: InMemoryGameRepository, clock: FakeClock) -> None:
    service = JarlsService(memory_repository, clock=clock, settings=Settings(turn_timer_ms=20_000))
    assert service.create_game(CreateGameRequest(player_count=2)).config.turn_timer_ms == 20_000
    assert service.create_game(CreateGameRequest(player_count=2, turn_timer_ms=5_000)).config.turn_timer_ms == 5_000


def test_zero_timer_is_rejected(memory_repository: InMemoryGameRepository, clock: FakeClock) -> None:
    """0 is not "no timer": it never falls back to the settings."""
    service = JarlsService(memory_repository, clock=clock, settings=Settings(turn_timer_ms=20_000))
    with pytest.raises(InvalidRequestError):
        service.create_game(CreateGameRequest(player_count=2, turn_timer_ms=0))
    with pytest.raises(InvalidRequestError):
        service.create_game(CreateGameRequest(player_count=2, inactivity_limit=0))


def test_packed_custom_game_ends_on_the_last_join(service: JarlsService) -> None:
    created = service.create_game(
        CreateGameRequest(player_count=2, board_radius=2, shield_count=5, warrior_count=4)
    )
    service.join_game(JoinGameRequest(game_id=created.id, player_id="alice"))
    response = service.join_game(JoinGameRequest(game_id=created.id, player_id="bob"))
    assert response.phase == Phase.FINISHED
    assert response.winner_id == "bob"
    assert response.win_condition == WinCondition.STALEMATE
    assert created.id not in service._locks


def test_join_starts_the_game(service: JarlsService, clock: FakeClock) -> None:
    created = service.create_game(CreateGameRequest(player_count=2))
    first = service.join_game(JoinGameRequest(game_id=created.id, player_id="alice", player_name="Alice"))
    assert first.phase == Phase.LOBBY

    clock.now = 2_000
    second = service.join_game(JoinGameRequest(game_id=created.id, player_id="bob"))
    assert second.phase == Phase.ACTIVE
    assert second.current_player_id == "alice"
    assert second.turn_started_at == 2_000
    assert len(second.pieces) == 20
    assert service.get_game_state(GetGameRequest(game_id=created.id)) == second


def test_leave_game(service: JarlsService) -> None:
    created = service.create_game(CreateGameRequest(player_count=3))
    service.join_game(JoinGameRequest(game_id=created.id, player_id="alice"))
    service.join_game(JoinGameRequest(game_id=created.id, player_id="bob"))

    response = service.leave_game(LeaveGameRequest(game_id=created.id, player_id="alice"))
    assert [player.id for player in response.players] == ["bob"]


def test_unknown_game(service: JarlsService) -> None:
    with pytest.raises(RepositoryError):
        service.get_game_state(GetGameRequest(game_id="nope"))
    with pytest.raises(RepositoryError):
        service.join_game(JoinGameRequest(game_id="nope", player_id="alice"))


def test_unknown_games_leave_no_locks_behind(service: JarlsService) -> None:
    for number in range(50):
        with pytest.raises(RepositoryError):
            service.join_game(JoinGameRequest(game_id=f"missing-{number}", player_id="alice"))
        with pytest.raises(RepositoryError):
            service.submit_action(action(f"missing-{number}", type="pass", playerId="alice"))
    assert service._locks == {}


# --- SERVICE - ACTIONS ----
def test_legal_moves(service: JarlsService) -> None:
    game_id = start_two_player_game(service)
    response = service.legal_moves(LegalMovesRequest(game_id=game_id, player_id="alice"))
    assert isinstance(response, LegalMovesResponse)
    assert len(response.legal_moves) == 10
    assert any(response.legal_moves.values())

    with pytest.raises(NotYourTurnError):
        service.legal_moves(LegalMovesRequest(game_id=game_id, player_id="bob"))


def test_submit_move(service: JarlsService, clock: FakeClock) -> None:
    game_id = start_two_player_game(service)
    moves = service.legal_moves(LegalMovesRequest(game_id=game_id, player_id="alice")).legal_moves
    piece_id, targets = next((piece_id, targets) for piece_id, targets in sorted(moves.items()) if targets)

    clock.now = 3_000
    response = service.submit_action(
        action(game_id, type="move", playerId="alice", pieceId=piece_id, target=targets[0].model_dump())
    )
    assert response.current_player_id == "bob"
    assert response.turn_number == 2
    assert response.turn_started_at == 3_000
    moved = next(piece for piece in response.pieces if piece.id == piece_id)
    assert moved.position == targets[0]


def test_rejected_action_leaves_the_game_untouched(
    service: JarlsService, caplog: pytest.LogCaptureFixture
) -> None:
    game_id = start_two_player_game(service)
    before = service.get_game_state(GetGameRequest(game_id=game_id))

    with caplog.at_level(logging.WARNING, logger="src.services.jarls_service"):
        with pytest.raises(NotYourTurnError):
            service.submit_action(action(game_id, type="pass", playerId="bob"))

    assert service.get_game_state(GetGameRequest(game_id=game_id)) == before
    assert "NotYourTurn" in caplog.text


def test_resignation_ends_the_game(service: JarlsService) -> None:
    game_id = start_two_player_game(service)
    response = service.submit_action(action(game_id, type="resign", playerId="bob"))
    assert response.phase == Phase.FINISHED
    assert response.winner_id == "alice"
    assert response.win_condition == WinCondition.RESIGNATION
    assert response.current_player_id is None

    # Test any top-level custom exception is raised (specific exception types are responsibility of other layers)
    with pytest.raises(GameError):
        service.submit_action(action(game_id, type="pass", playerId="alice"))


def test_finished_game_releases_its_lock(service: JarlsService) -> None:
    game_id = start_two_player_game(service)
    service.submit_action(action(game_id, type="pass", playerId="alice"))
    assert game_id in service._locks

    service.submit_action(action(game_id, type="resign", playerId="alice"))
    assert game_id not in service._locks
    # polling a finished game does not bring it back
    service.check_timer(GetGameRequest(game_id=game_id))
    assert game_id not in service._locks


def test_check_timer(service: JarlsService, clock: FakeClock) -> None:
    game_id = start_two_player_game(service, turn_timer_ms=10_000)

    clock.now = 5_000
    still_running = service.check_timer(GetGameRequest(game_id=game_id))
    assert still_running.phase == Phase.ACTIVE

    clock.now = 11_000
    expired = service.check_timer(GetGameRequest(game_id=game_id))
    assert expired.phase == Phase.FINISHED
    assert expired.winner_id == "bob"
    assert expired.win_condition == WinCondition.TIMEOUT


def test_check_timer_untimed_game(service: JarlsService, clock: FakeClock) -> None:
    game_id = start_two_player_game(service)
    clock.now = 10**12
    assert service.check_timer(GetGameRequest(game_id=game_id)).phase == Phase.ACTIVE


def test_delete_game_from_repository(service: JarlsService, memory_repository: InMemoryGameRepository) -> None:
    game_id = start_two_player_game(service)
    service.delete_game(DeleteGameRequest(game_id=game_id))
    assert memory_repository.get_game(game_id) is None
    with pytest.raises(RepositoryError):
        service.delete_game(DeleteGameRequest(game_id=game_id))


def test_concurrent_passes_are_serialized(service: JarlsService) -> None:
    """
    Many threads try to pass for alice at the same time. Exactly one of them gets through:
    once it is applied it is bob's turn, and every other attempt is rejected.
    """
    game_id = start_two_player_game(service)
    accepted: list[GameStateResponse] = []
    rejected: list[GameError] = []

    def attempt() -> None:
        try:
            accepted.append(service.submit_action(action(game_id, type="pass", playerId="alice")))
        except GameError as exc:
            rejected.append(exc)

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(accepted) == 1
    assert len(rejected) == 7
    assert all(isinstance(exc, NotYourTurnError) for exc in rejected)
    assert service.get_game_state(GetGameRequest(game_id=game_id)).turn_number == 2
