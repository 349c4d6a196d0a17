"""
A cell on the hexagonal board

(placed in its own module as multiple other modules need to import it)

Axial coordinates (q, r). The third cube coordinate s = -q - r is derived.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

Vector = tuple[int, int]

# Direction 0 is East, then counter-clockwise: NE, NW, W, SW, SE
DIRECTIONS: tuple[Vector, ...] = (
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, 0),
    (-1, 1),
    (0, 1),
)


@dataclass(frozen=True, order=True)
class Hex:
    q: int
    r: int

    @property
    def s(self) -> int:
        return -self.q - self.r

    @classmethod
    def from_dict(cls, data: dict[str, int]) -> Hex:
        return cls(int(data["q"]), int(data["r"]))

    def to_dict(self) -> dict[str, int]:
        return {"q": self.q, "r": self.r}

    def neighbor(self, direction: int, steps: int = 1) -> Hex:
        dq, dr = DIRECTIONS[direction]
        return Hex(self.q + dq * steps, self.r + dr * steps)

    def distance(self, other: Hex) -> int:
        dq = self.q - other.q
        dr = self.r - other.r
        return max(abs(dq), abs(dr), abs(dq + dr))

    def length(self) -> int:
        """Distance to the centre of the board"""
        return max(abs(self.q), abs(self.r), abs(self.s))

    def angle(self) -> float:
        """Angle (radians, -pi..pi) of the cell centre seen from the board centre, pointy-top layout, 0 = East."""
        x = math.sqrt(3) * self.q + math.sqrt(3) / 2 * self.r
        # screen y grows downwards, so flip it to keep counter-clockwise angles positive
        y = 1.5 * -self.r
        return math.atan2(y, x)


def line_direction(origin: Hex, target: Hex) -> Optional[int]:
    """
    Direction index of the straight hex line running from origin to target.
    None if both are the same cell or if they do not share a line.
    """
    dq = target.q - origin.q
    dr = target.r - origin.r
    if dq == 0 and dr == 0:
        return None
    if not (dq == 0 or dr == 0 or dq == -dr):
        return None
    steps = origin.distance(target)
    unit = (dq // steps, dr // steps)
    return DIRECTIONS.index(unit)
