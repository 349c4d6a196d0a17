"""
The entrypoint into the domain layer for the service layer.

The module level functions (create_game, join_game, leave_game, apply_action, ...) take a GameState snapshot and return a new one.
The Game class is responsible for orchestrating all the business logic of a single accepted action:
validate, apply, advance the turn/round counters, and check for the end of the game.

Nothing here reads a clock: timestamps (milliseconds) are always passed in by the caller.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional
from uuid import uuid4

from src.core.exceptions import (
    AlreadyJoinedError,
    GameFullError,
    GameOverError,
    IllegalMoveError,
    InvalidRequestError,
)
from src.core.shared_types import Phase, Role, WinCondition
from src.jarls.actions import (
    Action,
    MoveAction,
    PassAction,
    ResignAction,
    TimerExpiryAction,
)
from src.jarls.hex import Hex
from src.jarls.moves import (
    apply_move,
    has_legal_moves,
    legal_targets,
    require_active,
    require_current_player,
    require_player,
    validate_move,
)
from src.jarls.pieces import PLAYER_COLORS, Player, pieces_of
from src.jarls.setup import place
from src.jarls.state import GameConfig, GameState, MoveRecord
from src.jarls.victory import Verdict, evaluate

logger = logging.getLogger(__name__)


# --- DOMAIN LAYER API CALLED BY SERVICE ---
def create_game(config: GameConfig, game_id: Optional[str] = None) -> GameState:
    """A new game waits in the lobby: no players, no pieces."""
    config.validate()
    state = GameState(id=game_id or uuid4().hex, phase=Phase.LOBBY, config=config)
    logger.debug("game %s created: %s", state.id, config)
    return state


def join_game(
    state: GameState, player_id: str, name: Optional[str] = None, now: int = 0
) -> GameState:
    """
    Seat a player. The join that fills the last seat starts the game.
    ---
    `now` becomes the start time of the first turn (only matters for timed games).
    """
    if state.phase == Phase.FINISHED:
        raise GameOverError(f"Game {state.id} is over.")
    if state.player(player_id) is not None:
        raise AlreadyJoinedError(f"Player {player_id!r} already joined game {state.id}.")
    if state.phase != Phase.LOBBY or len(state.players) >= state.config.player_count:
        raise GameFullError(
            f"Cannot join game {state.id}. All {state.config.player_count} seats are taken."
        )

    player = Player.seated(player_id, seat=len(state.players), name=name)
    joined = state.evolve(players=state.players + (player,))
    logger.debug("game %s: %s joined on seat %d", state.id, player_id, player.seat)

    if len(joined.players) == joined.config.player_count:
        return _start(joined, now)
    return joined


def leave_game(state: GameState, player_id: str) -> GameState:
    """Leaving is only possible in the lobby. The remaining players move up a seat. (In a running game: resign.)"""
    if state.phase == Phase.FINISHED:
        raise GameOverError(f"Game {state.id} is over.")
    if state.phase != Phase.LOBBY:
        raise IllegalMoveError("The game already started. Resign instead of leaving.")
    require_player(state, player_id)

    remaining = [player for player in state.players if player.id != player_id]
    players = tuple(
        replace(player, seat=seat, color=PLAYER_COLORS[seat % len(PLAYER_COLORS)])
        for seat, player in enumerate(remaining)
    )
    return state.evolve(players=players)


def apply_action(state: GameState, action: Action, now: int) -> GameState:
    """The single mutation entry point: returns the next snapshot, or raises and leaves `state` as it was."""
    game = Game(state, now)
    game.play(action)
    return game.state


def is_timer_expired(state: GameState, now: int) -> bool:
    """Has the current player's turn timer run out at time `now`? Always False for untimed games."""
    timer = state.config.turn_timer_ms
    if state.phase != Phase.ACTIVE or timer is None or state.turn_started_at is None:
        return False
    return now - state.turn_started_at >= timer


def legal_moves_for(state: GameState, player_id: str) -> dict[str, list[Hex]]:
    """
    Legal targets per piece for the player to move.
    ----
    These can be used to display to the user. Only the player whose turn it is gets an answer.
    """
    require_active(state)
    require_current_player(state, player_id)
    return {
        piece.id: legal_targets(state, piece)
        for piece in pieces_of(state.pieces, player_id)
    }


def _start(state: GameState, now: int) -> GameState:
    """lobby -> active: place the pieces, first seat to move."""
    pieces = place(state.config, state.players)
    logger.debug("game %s starts with %d pieces", state.id, len(pieces))
    started = state.evolve(
        phase=Phase.ACTIVE,
        pieces=tuple(pieces),
        current_player_id=state.players[0].id,
        turn_number=1,
        round_number=1,
        rounds_since_elimination=0,
        turn_started_at=now,
    )
    # a crowded board can leave the first seat without a single move
    game = Game(started, now)
    game.open()
    return game.state


@dataclass
class Game:
    """Working copy for one action. Only ever swaps in new frozen snapshots, never edits one."""

    state: GameState
    now: int
    # ids of all pieces that left the board during this action
    removed: list[str] = field(default_factory=list)

    def open(self) -> None:
        """The opening position is judged like any other: blocked sides drop out, and the end is checked."""
        self._drop_blocked_sides()
        self._check_for_end()

    def play(self, action: Action) -> None:
        """
        Dispatch on the action kind
        -----

        1. validate (raises before any new snapshot exists)
        2. apply the action
        3. advance turn / round counters (unless the action ended the game)
        4. check the win conditions
        """
        require_active(self.state)

        if isinstance(action, MoveAction):
            self._play_move(action)
        elif isinstance(action, PassAction):
            self._play_pass(action)
        elif isinstance(action, ResignAction):
            self._play_resign(action)
        elif isinstance(action, TimerExpiryAction):
            self._play_timer_expiry(action)
        else:
            raise InvalidRequestError(f"Unknown action: {action!r}")

    # -- ACTIONS ---
    def _play_move(self, action: MoveAction) -> None:
        plan = validate_move(self.state, action)

        self.state = apply_move(self.state, plan)
        if plan.captured:
            self._pieces_removed(piece.id for piece in plan.captured)
        self._record(
            MoveRecord(
                turn_number=self.state.turn_number,
                player_id=action.player_id,
                kind=action.kind,
                piece_id=plan.piece.id,
                origin=plan.origin,
                target=plan.target,
                captured=tuple(piece.id for piece in plan.captured),
            )
        )

        # a side without warriors is out of the game
        for player in self.state.active_players():
            if not pieces_of(self.state.pieces, player.id, Role.WARRIOR):
                self._eliminate(player.id)

        self._end_turn()

    def _play_pass(self, action: PassAction) -> None:
        require_current_player(self.state, action.player_id)
        self._record(
            MoveRecord(self.state.turn_number, action.player_id, action.kind)
        )
        self._end_turn()

    def _play_resign(self, action: ResignAction) -> None:
        """Any player still in the game may resign, whether it is their turn or not."""
        player = require_player(self.state, action.player_id)
        if player.is_eliminated:
            raise IllegalMoveError(f"Player {player.id!r} is already out of the game.")

        self._record(
            MoveRecord(self.state.turn_number, action.player_id, action.kind)
        )
        self._forfeit(player.id, WinCondition.RESIGNATION)

    def _play_timer_expiry(self, action: TimerExpiryAction) -> None:
        """Timer policy: running out of time forfeits the game for that player."""
        require_current_player(self.state, action.player_id)
        if self.state.config.turn_timer_ms is None:
            raise IllegalMoveError(f"Game {self.state.id} is untimed.")
        if not is_timer_expired(self.state, self.now):
            raise IllegalMoveError(f"The turn timer of {action.player_id!r} has not expired yet.")

        self._record(
            MoveRecord(self.state.turn_number, action.player_id, action.kind)
        )
        self._forfeit(action.player_id, WinCondition.TIMEOUT)

    # -- PRIVATE HELPERS ---
    def _forfeit(self, player_id: str, condition: WinCondition) -> None:
        """Take the player out. If that leaves a single side, it wins with the given condition."""
        was_current = player_id == self.state.current_player_id
        self._eliminate(player_id)

        remaining = self.state.active_players()
        if len(remaining) == 1:
            self._finish(Verdict(remaining[0].id, condition))
            return

        if was_current:
            self._end_turn()
        else:
            self._check_for_end()

    def _eliminate(self, player_id: str) -> None:
        """Mark the player as out and take all of their remaining pieces off the board."""
        leaving = pieces_of(self.state.pieces, player_id)
        self.state = self.state.evolve(
            players=tuple(
                replace(player, is_eliminated=True) if player.id == player_id else player
                for player in self.state.players
            ),
            pieces=tuple(piece for piece in self.state.pieces if piece.owner_id != player_id),
        )
        if leaving:
            self._pieces_removed(piece.id for piece in leaving)
        logger.debug("game %s: %s eliminated", self.state.id, player_id)

    def _pieces_removed(self, piece_ids: Iterable[str]) -> None:
        """Any piece leaving the board resets the inactivity counter."""
        self.removed.extend(piece_ids)
        self.state = self.state.evolve(rounds_since_elimination=0)

    def _end_turn(self) -> None:
        # a single side left (e.g. the last enemy warrior was just captured): no one to hand the turn to
        if len(self.state.active_players()) < 2:
            self._check_for_end()
            return

        self._advance(count_turn=True)
        self._drop_blocked_sides()
        self._check_for_end()

    def _drop_blocked_sides(self) -> None:
        """With more than two sides left, a side that cannot move drops out and is skipped."""
        while len(self.state.active_players()) > 2 and not has_legal_moves(
            self.state, self.state.current_player_id
        ):
            self._eliminate(self.state.current_player_id)
            self._advance(count_turn=False)

    def _advance(self, count_turn: bool) -> None:
        """
        Hand the turn to the next seat still in the game.
        ---

        * wrapping around to a lower seat completes a round.
        * rounds_since_elimination: 0 if any piece left the board during this action, +1 per completed round otherwise.
        """
        state = self.state
        current = state.player(state.current_player_id)
        assert current is not None

        active = state.active_players()
        later_seats = [player for player in active if player.seat > current.seat]
        next_player = later_seats[0] if later_seats else active[0]
        completes_round = not later_seats

        rounds_since_elimination = state.rounds_since_elimination
        if completes_round and not self.removed:
            rounds_since_elimination += 1

        self.state = state.evolve(
            current_player_id=next_player.id,
            turn_number=state.turn_number + 1 if count_turn else state.turn_number,
            round_number=state.round_number + 1 if completes_round else state.round_number,
            rounds_since_elimination=rounds_since_elimination,
            turn_started_at=self.now,
        )

    def _check_for_end(self) -> None:
        verdict = evaluate(self.state)
        if verdict is not None:
            self._finish(verdict)

    def _finish(self, verdict: Verdict) -> None:
        """active -> finished. Terminal: no more turns, no current player."""
        self.state = self.state.evolve(
            phase=Phase.FINISHED,
            winner_id=verdict.winner_id,
            win_condition=verdict.win_condition,
            current_player_id=None,
            turn_started_at=None,
        )
        logger.debug(
            "game %s finished: winner=%s condition=%s",
            self.state.id,
            verdict.winner_id,
            verdict.win_condition,
        )

    def _record(self, record: MoveRecord) -> None:
        self.state = self.state.evolve(history=self.state.history + (record,))
