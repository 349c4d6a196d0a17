"""
Win-condition evaluator.

Checked after every accepted action, in priority order. Only the first match is reported.
Every check is a plain query over the snapshot, so evaluation always terminates.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from src.core.shared_types import Role, WinCondition
from src.jarls.board import THRONE
from src.jarls.moves import has_legal_moves
from src.jarls.pieces import pieces_of
from src.jarls.state import GameState


@dataclass(frozen=True)
class Verdict:
    """How the game ended. winner_id None means a draw."""

    winner_id: Optional[str]
    win_condition: WinCondition


def check_elimination(state: GameState) -> Optional[Verdict]:
    """Only one side still has warriors left: that side wins."""
    armed = [
        player
        for player in state.active_players()
        if pieces_of(state.pieces, player.id, Role.WARRIOR)
    ]
    if len(armed) == 1:
        return Verdict(armed[0].id, WinCondition.ELIMINATION)
    return None


def check_escape(state: GameState) -> Optional[Verdict]:
    """A shield made it onto the throne."""
    for piece in state.pieces:
        if piece.is_shield and piece.position == THRONE:
            return Verdict(piece.owner_id, WinCondition.ESCAPE)
    return None


def check_stalemate(state: GameState) -> Optional[Verdict]:
    """
    The player to move cannot move any piece: they lose.

    NOTE With more than two sides left the state machine removes the blocked side and play goes on,
    so only the two-sided case ends the game here.
    """
    if state.current_player_id is None:
        return None
    if has_legal_moves(state, state.current_player_id):
        return None
    others = [player for player in state.active_players() if player.id != state.current_player_id]
    if len(others) == 1:
        return Verdict(others[0].id, WinCondition.STALEMATE)
    return None


def check_inactivity(state: GameState) -> Optional[Verdict]:
    """Too many rounds without any piece leaving the board: draw."""
    if state.rounds_since_elimination >= state.config.inactivity_limit:
        return Verdict(None, WinCondition.INACTIVITY)
    return None


# --- PRIORITY ORDER ---
WinCheckFn = Callable[[GameState], Optional[Verdict]]
WIN_CHECKS: tuple[WinCheckFn, ...] = (
    check_elimination,
    check_escape,
    check_stalemate,
    check_inactivity,
)


def evaluate(state: GameState) -> Optional[Verdict]:
    for check in WIN_CHECKS:
        verdict = check(state)
        if verdict is not None:
            return verdict
    return None
