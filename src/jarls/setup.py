"""
Board setup: scaling presets per player count and the deterministic starting placement.

Every seat gets a home cell on the edge of the board, equally spaced around the centre.
Starting from the home cell, the seat claims the nearest free cells for its pieces:
warriors take the claimed cells closest to the throne (the front line), shields stay behind them.
"""

import math
from typing import Optional, Sequence

from src.core.exceptions import InvalidConfigError
from src.core.shared_types import Role
from src.jarls.board import THRONE, Board
from src.jarls.hex import Hex
from src.jarls.pieces import Piece, Player, piece_id
from src.jarls.state import MAX_PLAYERS, MIN_PLAYERS, GameConfig

# Players -> (board radius, shields per side, warriors per side)
PLAYER_SCALING: dict[int, tuple[int, int, int]] = {
    2: (3, 5, 5),
    3: (5, 5, 5),
    4: (6, 4, 4),
    5: (7, 4, 4),
    6: (8, 4, 4),
}


def config_for_player_count(
    player_count: int, turn_timer_ms: Optional[int] = None
) -> GameConfig:
    """Recommended configuration for a given number of players."""
    if player_count not in PLAYER_SCALING:
        raise InvalidConfigError(
            f"Invalid player count: {player_count}. Must be between {MIN_PLAYERS} and {MAX_PLAYERS}."
        )
    radius, shields, warriors = PLAYER_SCALING[player_count]
    return GameConfig(
        player_count=player_count,
        board_radius=radius,
        shield_count=shields,
        warrior_count=warriors,
        turn_timer_ms=turn_timer_ms,
    )


def _angle_gap(a: float, b: float) -> float:
    """Smallest angle between two directions, wrapping around at +-pi. Rounded so that equal gaps compare equal."""
    gap = abs(a - b) % (2 * math.pi)
    return round(min(gap, 2 * math.pi - gap), 9)


def home_cells(player_count: int, radius: int) -> list[Hex]:
    """
    Edge cell per seat, seat i aiming at angle 2*pi*i/N (counter-clockwise, starting East).
    ---
    For 2 players this puts the homes directly opposite each other (East and West).
    Ties are broken by board order (q, then r), so the result is always the same.
    """
    edge = Board(radius).edge_cells()
    homes: list[Hex] = []
    for seat in range(player_count):
        target_angle = 2 * math.pi * seat / player_count
        candidates = [cell for cell in edge if cell not in homes]
        homes.append(min(candidates, key=lambda cell: _angle_gap(cell.angle(), target_angle)))
    return homes


def place(config: GameConfig, players: Sequence[Player]) -> list[Piece]:
    """
    Initial placement of every side's pieces.
    ---

    1. Seats claim cells in seat order, nearest to their home first (ties: closest in angle to the home, then q, then r).
    2. The throne is never claimed.
    3. Of the claimed cells, the ones nearest the throne hold the warriors, the others the shields.
    """
    board = config.board
    taken: set[Hex] = {THRONE}
    pieces: list[Piece] = []

    for player, home in zip(players, home_cells(config.player_count, config.board_radius)):
        home_angle = home.angle()
        free = [cell for cell in board.cells if cell not in taken]
        claimed = sorted(
            free,
            key=lambda cell: (
                cell.distance(home),
                _angle_gap(cell.angle(), home_angle),
                cell.q,
                cell.r,
            ),
        )[: config.pieces_per_side]
        if len(claimed) < config.pieces_per_side:
            raise InvalidConfigError(
                f"Not enough free cells left to place the pieces of {player.id!r}."
            )
        taken.update(claimed)

        front_to_back = sorted(claimed, key=lambda cell: (cell.length(), cell.q, cell.r))
        warrior_cells = front_to_back[: config.warrior_count]
        shield_cells = front_to_back[config.warrior_count :]

        pieces.extend(
            Piece(piece_id(player.id, Role.WARRIOR, n), player.id, Role.WARRIOR, cell)
            for n, cell in enumerate(warrior_cells, start=1)
        )
        pieces.extend(
            Piece(piece_id(player.id, Role.SHIELD, n), player.id, Role.SHIELD, cell)
            for n, cell in enumerate(shield_cells, start=1)
        )

    return pieces
