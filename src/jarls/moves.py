"""
Movement, capture and legality rules

Key idea: Use strategy pattern to define the movement of each piece role.

* Warriors slide any distance along one of the six hex directions, through empty cells only, and never onto or across the throne.
* Shields step a single cell in any direction. The throne is open to them.
* Only a warrior that just moved captures (custodial capture):
    an enemy warrior is captured between the mover and any friendly piece or the empty throne,
    an enemy shield only between the mover and a friendly warrior.

Validation never changes anything. Applying a validated plan returns a new snapshot.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Mapping

from src.core.exceptions import (
    GameOverError,
    IllegalMoveError,
    NotFoundError,
    NotYourTurnError,
)
from src.core.shared_types import Phase, Role
from src.jarls.actions import MoveAction
from src.jarls.board import THRONE, Board
from src.jarls.hex import DIRECTIONS, Hex
from src.jarls.pieces import Piece, Player, occupancy, pieces_of
from src.jarls.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MovePlan:
    """The outcome of a validated move, computed before anything is applied."""

    piece: Piece
    target: Hex
    captured: tuple[Piece, ...] = ()

    @property
    def origin(self) -> Hex:
        return self.piece.position


# --- PHASE AND TURN CHECKS ---
def require_active(state: GameState) -> None:
    if state.phase == Phase.FINISHED:
        raise GameOverError(f"Game {state.id} is over. No further actions are accepted.")
    if state.phase != Phase.ACTIVE:
        raise IllegalMoveError(f"Game {state.id} has not started yet. phase: {state.phase}")


def require_player(state: GameState, player_id: str) -> Player:
    player = state.player(player_id)
    if player is None:
        raise NotFoundError(f"Player {player_id!r} is not part of game {state.id}.")
    return player


def require_current_player(state: GameState, player_id: str) -> Player:
    """You must wait for your turn before making a move."""
    player = require_player(state, player_id)
    if player_id != state.current_player_id:
        raise NotYourTurnError(
            f"It is not your turn. Waiting for player {state.current_player_id} to make a move first."
        )
    return player


# --- MOVEMENT RULES: VALIDATION ---
MovementCheckFn = Callable[[Piece, Hex, Board, Mapping[Hex, Piece]], None]


def check_warrior_move(
    piece: Piece, target: Hex, board: Board, occupied: Mapping[Hex, Piece]
) -> None:
    between = board.path(piece.position, target)
    if between is None:
        raise IllegalMoveError("Warriors move along a straight line.")
    if not board.is_path_clear(piece.position, target, occupied):
        raise IllegalMoveError("Path blocked.")
    if target == THRONE or THRONE in between:
        raise IllegalMoveError("Warriors cannot enter or cross the throne.")
    if target in occupied:
        raise IllegalMoveError("Target cell is occupied.")


def check_shield_move(
    piece: Piece, target: Hex, board: Board, occupied: Mapping[Hex, Piece]
) -> None:
    if not board.is_adjacent(piece.position, target):
        raise IllegalMoveError("Shields move a single cell at a time.")
    if target in occupied:
        raise IllegalMoveError("Target cell is occupied.")


MOVEMENT_CHECKS: dict[Role, MovementCheckFn] = {
    Role.WARRIOR: check_warrior_move,
    Role.SHIELD: check_shield_move,
}


# --- MOVEMENT RULES: CANDIDATE TARGETS ---
def warrior_targets(piece: Piece, board: Board, occupied: Mapping[Hex, Piece]) -> list[Hex]:
    """
    Raycasting
    ---
    Walk every direction until the edge of the board, a piece, or the throne stops the warrior.
    """
    targets: list[Hex] = []
    for direction in range(len(DIRECTIONS)):
        for cell in board.ray(piece.position, direction):
            if cell in occupied or cell == THRONE:
                break
            targets.append(cell)
    return targets


def shield_targets(piece: Piece, board: Board, occupied: Mapping[Hex, Piece]) -> list[Hex]:
    return [cell for cell in board.neighbors(piece.position) if cell not in occupied]


CandidateTargetsFn = Callable[[Piece, Board, Mapping[Hex, Piece]], list[Hex]]
MOVEMENT_RULES: dict[Role, CandidateTargetsFn] = {
    Role.WARRIOR: warrior_targets,
    Role.SHIELD: shield_targets,
}


def legal_targets(state: GameState, piece: Piece) -> list[Hex]:
    rule = MOVEMENT_RULES[piece.role]
    return rule(piece, state.board, occupancy(state.pieces))


def has_legal_moves(state: GameState, player_id: str) -> bool:
    return any(legal_targets(state, piece) for piece in pieces_of(state.pieces, player_id))


# --- CAPTURE RULES ---
def _is_sandwiched(target: Piece, anvil: Piece | None, anvil_cell: Hex, mover: Piece) -> bool:
    if target.is_shield:
        return anvil is not None and anvil.owner_id == mover.owner_id and anvil.is_warrior
    if anvil is None:
        return anvil_cell == THRONE
    return anvil.owner_id == mover.owner_id


def find_captures(occupied: Mapping[Hex, Piece], mover: Piece) -> list[Piece]:
    """
    Enemy pieces caught between the piece that just moved and an anvil on the far side.

    NOTE occupied must already reflect the move (the mover standing on its new cell).
    """
    if not mover.is_warrior:
        return []

    captured: list[Piece] = []
    for direction in range(len(DIRECTIONS)):
        target = occupied.get(mover.position.neighbor(direction))
        if target is None or target.owner_id == mover.owner_id:
            continue
        anvil_cell = mover.position.neighbor(direction, 2)
        if _is_sandwiched(target, occupied.get(anvil_cell), anvil_cell, mover):
            captured.append(target)
    return captured


# --- VALIDATE / APPLY ---
def validate_move(state: GameState, action: MoveAction) -> MovePlan:
    """
    Checks, in order:
    ----

    1. the game is active
    2. the actor is a player of this game, and it is their turn
    3. the piece exists and belongs to the actor
    4. the target lies on the board and differs from the origin
    5. the role's movement rule allows the move (line of sight for warriors, single step for shields)
    6. restricted cells: the throne is closed to warriors, the target must be empty
    """
    require_active(state)
    require_current_player(state, action.player_id)

    piece = state.piece(action.piece_id)
    if piece is None:
        raise NotFoundError(f"Piece {action.piece_id!r} is not on the board.")
    if piece.owner_id != action.player_id:
        raise IllegalMoveError(f"Piece {piece.id!r} does not belong to {action.player_id!r}.")

    board = state.board
    board.require(action.target)
    if action.target == piece.position:
        raise IllegalMoveError("A move must leave the origin cell.")

    occupied = occupancy(state.pieces)
    MOVEMENT_CHECKS[piece.role](piece, action.target, board, occupied)

    moved = piece.moved_to(action.target)
    after_move = dict(occupied)
    del after_move[piece.position]
    after_move[moved.position] = moved
    captured = find_captures(after_move, moved)
    return MovePlan(piece=piece, target=action.target, captured=tuple(captured))


def apply_move(state: GameState, plan: MovePlan) -> GameState:
    """Relocate the piece and take the captured pieces off the board. Counters are the state machine's business."""
    captured_ids = {piece.id for piece in plan.captured}
    if captured_ids:
        logger.debug("game %s: %s captures %s", state.id, plan.piece.id, sorted(captured_ids))
    pieces = tuple(
        piece.moved_to(plan.target) if piece.id == plan.piece.id else piece
        for piece in state.pieces
        if piece.id not in captured_ids
    )
    return state.evolve(pieces=pieces)
