"""Defines the pieces and the players that own them"""

from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional, Self

from src.core.shared_types import Role
from src.jarls.hex import Hex

# One colour per seat, up to six players
PLAYER_COLORS: tuple[str, ...] = (
    "#E53935",  # Red
    "#1E88E5",  # Blue
    "#43A047",  # Green
    "#FB8C00",  # Orange
    "#8E24AA",  # Purple
    "#00ACC1",  # Cyan
)


@dataclass(frozen=True)
class Piece:
    id: str
    owner_id: str
    role: Role
    position: Hex

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=data["id"],
            owner_id=data["ownerId"],
            role=Role(data["role"]),
            position=Hex.from_dict(data["position"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "role": self.role.value,
            "position": self.position.to_dict(),
        }

    def moved_to(self, cell: Hex) -> Self:
        return replace(self, position=cell)

    @property
    def is_warrior(self) -> bool:
        return self.role == Role.WARRIOR

    @property
    def is_shield(self) -> bool:
        return self.role == Role.SHIELD


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    seat: int
    color: str
    is_eliminated: bool = False
    # NOTE: managed by the transport layer. The rules never look at it.
    connected: bool = True

    @classmethod
    def seated(cls, player_id: str, seat: int, name: Optional[str] = None) -> Self:
        return cls(
            id=player_id,
            name=name or player_id,
            seat=seat,
            color=PLAYER_COLORS[seat % len(PLAYER_COLORS)],
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=data["id"],
            name=data["name"],
            seat=data["seat"],
            color=data["color"],
            is_eliminated=data["isEliminated"],
            connected=data["connected"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "seat": self.seat,
            "color": self.color,
            "isEliminated": self.is_eliminated,
            "connected": self.connected,
        }


def piece_id(player_id: str, role: Role, number: int) -> str:
    return f"{player_id}-{role.value}-{number}"


def occupancy(pieces: Iterable[Piece]) -> dict[Hex, Piece]:
    """Look up pieces by the cell they stand on."""
    return {piece.position: piece for piece in pieces}


def pieces_of(
    pieces: Iterable[Piece], player_id: str, role: Optional[Role] = None
) -> list[Piece]:
    return [
        piece
        for piece in pieces
        if piece.owner_id == player_id and (role is None or piece.role == role)
    ]
