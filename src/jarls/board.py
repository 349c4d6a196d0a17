"""The game board implements the geometry of the hexagonal playing field: which cells exist and how they line up."""

from dataclasses import dataclass
from functools import cached_property
from typing import Collection, Optional

from src.core.exceptions import OutOfBoundsError
from src.jarls.hex import DIRECTIONS, Hex, line_direction

THRONE = Hex(0, 0)


def cell_count(radius: int) -> int:
    """3r² + 3r + 1: radius 0 -> 1 cell, radius 1 -> 7, radius 3 -> 37"""
    return 3 * radius * radius + 3 * radius + 1


@dataclass(frozen=True)
class Board:
    radius: int

    @cached_property
    def cells(self) -> tuple[Hex, ...]:
        """
        All cells of the hexagon, ordered by q, then by r.

        A cell belongs to the board when all three cube coordinates lie within [-radius, radius].
        For a given q that leaves r in [max(-radius, -q - radius), min(radius, -q + radius)].
        """
        radius = self.radius
        return tuple(
            Hex(q, r)
            for q in range(-radius, radius + 1)
            for r in range(max(-radius, -q - radius), min(radius, -q + radius) + 1)
        )

    def contains(self, cell: Hex) -> bool:
        return cell.length() <= self.radius

    def require(self, cell: Hex) -> Hex:
        """Guard used by every query: coordinates outside the radius are an error, not an empty answer."""
        if not self.contains(cell):
            raise OutOfBoundsError(
                f"Cell ({cell.q}, {cell.r}) lies outside a board of radius {self.radius}."
            )
        return cell

    def edge_cells(self) -> list[Hex]:
        return [cell for cell in self.cells if cell.length() == self.radius]

    def neighbors(self, cell: Hex) -> list[Hex]:
        """Adjacent cells that are still on the board, in direction order."""
        self.require(cell)
        return [
            cell.neighbor(direction)
            for direction in range(len(DIRECTIONS))
            if self.contains(cell.neighbor(direction))
        ]

    def is_adjacent(self, a: Hex, b: Hex) -> bool:
        self.require(a)
        self.require(b)
        return a.distance(b) == 1

    def ray(self, origin: Hex, direction: int) -> list[Hex]:
        """Cells along a direction, starting next to the origin and stopping at the edge of the board."""
        self.require(origin)
        cells: list[Hex] = []
        cell = origin.neighbor(direction)
        while self.contains(cell):
            cells.append(cell)
            cell = cell.neighbor(direction)
        return cells

    def path(self, origin: Hex, target: Hex) -> Optional[list[Hex]]:
        """
        Cells strictly in between origin and target.
        ---
        None if the two cells do not lie on one straight hex line (or are the same cell).
        """
        self.require(origin)
        self.require(target)
        direction = line_direction(origin, target)
        if direction is None:
            return None
        steps = origin.distance(target)
        return [origin.neighbor(direction, n) for n in range(1, steps)]

    def is_path_clear(self, origin: Hex, target: Hex, occupied: Collection[Hex]) -> bool:
        """Line of sight: straight line and nothing standing in between. The target cell itself is not checked."""
        between = self.path(origin, target)
        if between is None:
            return False
        return not any(cell in occupied for cell in between)
