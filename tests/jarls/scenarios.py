"""
Hand-built game states for the rules tests.

All scenarios are played on a radius 3 board by two (or three) players: alice (seat 0), bob (seat 1) and carol (seat 2).
Pieces are given as {piece_id: (role, q, r)}, the owner is the part of the id before the first dash.
"""

from typing import Callable, Optional

from src.core.shared_types import Phase, Role
from src.jarls.hex import Hex
from src.jarls.pieces import Piece, Player
from src.jarls.state import GameConfig, GameState

W = Role.WARRIOR
S = Role.SHIELD

PieceLayout = dict[str, tuple[Role, int, int]]
StateFactory = Callable[..., GameState]


def build_state(
    layout: PieceLayout,
    players: tuple[str, ...] = ("alice", "bob"),
    current: Optional[str] = None,
    turn_timer_ms: Optional[int] = None,
    inactivity_limit: int = 10,
    turn_started_at: Optional[int] = None,
) -> GameState:
    config = GameConfig(
        player_count=len(players),
        board_radius=3,
        shield_count=1,
        warrior_count=2,
        turn_timer_ms=turn_timer_ms,
        inactivity_limit=inactivity_limit,
    )
    return GameState(
        id="test-game",
        phase=Phase.ACTIVE,
        config=config,
        players=tuple(Player.seated(player_id, seat) for seat, player_id in enumerate(players)),
        pieces=tuple(
            Piece(id=piece_id, owner_id=piece_id.split("-")[0], role=role, position=Hex(q, r))
            for piece_id, (role, q, r) in layout.items()
        ),
        current_player_id=current or players[0],
        turn_number=1,
        round_number=1,
        rounds_since_elimination=0,
        turn_started_at=turn_started_at,
    )
