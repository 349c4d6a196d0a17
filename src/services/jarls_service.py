"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Iterator, Optional

from src.api.models import (
    ActionRequest,
    CreateGameRequest,
    DeleteGameRequest,
    GameStateResponse,
    GetGameRequest,
    HexModel,
    JoinGameRequest,
    LeaveGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
)
from src.core.config import Settings
from src.core.exceptions import GameError, InvalidRequestError, RepositoryError
from src.core.models import GameModel
from src.core.shared_types import Phase
from src.db.repository import GameRepository
from src.jarls import game as engine
from src.jarls.actions import TimerExpiryAction
from src.jarls.setup import config_for_player_count
from src.jarls.state import DEFAULT_INACTIVITY_LIMIT, GameConfig, GameState

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class JarlsService:
    """
    Orchestration of layers for Jarls games.
    ---
    Every request touching a game runs under that game's lock: actions on one game are applied one at a time,
    different games proceed in parallel.
    """

    def __init__(
        self,
        repository: GameRepository,
        clock: Optional[Clock] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.repo = repository
        self.clock = clock or wall_clock_ms
        self.settings = settings or Settings()
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # -- API routes logic ---
    def create_game(self, request: CreateGameRequest) -> GameStateResponse:
        """A new game in the lobby, waiting for players."""
        config = self._build_config(request)
        state = engine.create_game(config)
        stored = self.repo.create_game(state.to_model())
        logger.info(
            "Game %s created for %d players (board radius %d)",
            state.id,
            config.player_count,
            config.board_radius,
        )
        return GameStateResponse.from_model(stored)

    def join_game(self, request: JoinGameRequest) -> GameStateResponse:
        """Seat a player. The last seat to fill starts the game."""
        with self._game_lock(request.game_id):
            state = self._load_state(request.game_id)
            joined = self._attempt(
                request.game_id,
                lambda: engine.join_game(
                    state, request.player_id, request.player_name, now=self.clock()
                ),
            )
            logger.info("Player %s joined game %s", request.player_id, request.game_id)
            if joined.phase == Phase.ACTIVE and state.phase == Phase.LOBBY:
                logger.info("Game %s started", request.game_id)
            return self._store(joined)

    def leave_game(self, request: LeaveGameRequest) -> GameStateResponse:
        with self._game_lock(request.game_id):
            state = self._load_state(request.game_id)
            left = self._attempt(
                request.game_id, lambda: engine.leave_game(state, request.player_id)
            )
            logger.info("Player %s left game %s", request.player_id, request.game_id)
            return self._store(left)

    def get_game_state(self, request: GetGameRequest) -> GameStateResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        return GameStateResponse.from_model(self._fetch_game(request.game_id))

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """retrieve the legal targets of every piece of the player to move."""
        state = self._load_state(request.game_id)
        legal_moves = engine.legal_moves_for(state, request.player_id)
        return LegalMovesResponse(
            game_id=request.game_id,
            player_id=request.player_id,
            legal_moves={
                piece_id: [HexModel.from_hex(cell) for cell in targets]
                for piece_id, targets in legal_moves.items()
            },
        )

    def submit_action(self, request: ActionRequest) -> GameStateResponse:
        """Apply one action. A rejected action leaves the stored game untouched."""
        action = request.action.to_action()
        with self._game_lock(request.game_id):
            state = self._load_state(request.game_id)
            after = self._attempt(
                request.game_id, lambda: engine.apply_action(state, action, self.clock())
            )
            self._log_finish(after)
            return self._store(after)

    def check_timer(self, request: GetGameRequest) -> GameStateResponse:
        """
        Called periodically by the server: if the current player's turn timer ran out, apply the expiry.
        Otherwise the game is returned unchanged.
        """
        with self._game_lock(request.game_id):
            state = self._load_state(request.game_id)
            now = self.clock()
            if not engine.is_timer_expired(state, now):
                return GameStateResponse.from_model(state.to_model())

            assert state.current_player_id is not None
            logger.info(
                "Turn timer of %s expired in game %s", state.current_player_id, state.id
            )
            after = engine.apply_action(state, TimerExpiryAction(state.current_player_id), now)
            self._log_finish(after)
            return self._store(after)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        with self._game_lock(request.game_id):
            if self.repo.delete_game(request.game_id) is None:
                raise RepositoryError(f"Game with game_id={request.game_id!r} not found.")
        self._drop_lock(request.game_id)
        logger.info("Game %s deleted", request.game_id)

    # -- Internal helpers --
    def _build_config(self, request: CreateGameRequest) -> GameConfig:
        """Recommended setup for the player count, unless the request defines the whole board itself."""
        timer = request.turn_timer_ms
        if timer is None:
            timer = self.settings.turn_timer_ms
        inactivity_limit = request.inactivity_limit
        if inactivity_limit is None:
            inactivity_limit = DEFAULT_INACTIVITY_LIMIT

        if not request.is_custom:
            preset = config_for_player_count(request.player_count, turn_timer_ms=timer)
            return replace(preset, inactivity_limit=inactivity_limit)

        if None in (request.board_radius, request.shield_count, request.warrior_count):
            raise InvalidRequestError(
                "A custom game needs boardRadius, shieldCount and warriorCount."
            )
        return GameConfig(
            player_count=request.player_count,
            board_radius=request.board_radius,
            shield_count=request.shield_count,
            warrior_count=request.warrior_count,
            turn_timer_ms=timer,
            inactivity_limit=inactivity_limit,
        )

    def _attempt(self, game_id: str, step: Callable[[], GameState]) -> GameState:
        """Run an engine call, logging rejections before passing them on to the caller."""
        try:
            return step()
        except GameError as exc:
            logger.warning("Rejected in game %s: %s (%s)", game_id, exc.message, exc.kind)
            raise

    def _log_finish(self, state: GameState) -> None:
        if state.is_draw:
            logger.info("Game %s ended in a draw (%s)", state.id, state.win_condition)
        elif state.phase == Phase.FINISHED:
            logger.info(
                "Game %s finished: winner=%s, condition=%s",
                state.id,
                state.winner_id,
                state.win_condition,
            )

    def _store(self, state: GameState) -> GameStateResponse:
        stored = self.repo.update_game(state.id, state.to_model())
        if stored is None:
            raise RepositoryError(f"Game with game_id={state.id!r} not found.")
        if state.phase == Phase.FINISHED:
            self._drop_lock(state.id)
        return GameStateResponse.from_model(stored)

    def _load_state(self, game_id: str) -> GameState:
        return GameState.from_model(self._fetch_game(game_id))

    def _fetch_game(self, game_id: str) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model

    @contextmanager
    def _game_lock(self, game_id: str) -> Iterator[None]:
        """
        Serialize the requests on one game.
        ---
        Unknown games raise before a lock exists. Finished games cannot change any more, so they get none.
        """
        if self._fetch_game(game_id).phase == Phase.FINISHED:
            yield
            return
        with self._locks_guard:
            lock = self._locks.setdefault(game_id, threading.Lock())
        with lock:
            try:
                yield
            except RepositoryError:
                # deleted meanwhile
                self._drop_lock(game_id)
                raise

    def _drop_lock(self, game_id: str) -> None:
        with self._locks_guard:
            self._locks.pop(game_id, None)
