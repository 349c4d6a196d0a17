"""
Action definitions for the game.
Actions are immutable, deterministic instructions: a closed set of tagged variants.
"""

from dataclasses import dataclass
from typing import ClassVar

from src.core.shared_types import ActionKind
from src.jarls.hex import Hex


@dataclass(frozen=True)
class MoveAction:
    kind: ClassVar[ActionKind] = ActionKind.MOVE

    player_id: str
    piece_id: str
    target: Hex


@dataclass(frozen=True)
class PassAction:
    kind: ClassVar[ActionKind] = ActionKind.PASS

    player_id: str


@dataclass(frozen=True)
class ResignAction:
    kind: ClassVar[ActionKind] = ActionKind.RESIGN

    player_id: str


@dataclass(frozen=True)
class TimerExpiryAction:
    """Sent by the server when the current player's turn timer ran out."""

    kind: ClassVar[ActionKind] = ActionKind.TIMER_EXPIRY

    player_id: str


Action = MoveAction | PassAction | ResignAction | TimerExpiryAction
