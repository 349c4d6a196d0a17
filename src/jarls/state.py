"""
Contract for the Service layer.

Domain level data model of a Jarls game: the immutable GameState snapshot (aggregate root) and its parts.
Every accepted action produces a new snapshot, nothing in here is ever mutated in place.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional, Self

from src.core.exceptions import GameError, InvalidConfigError
from src.core.models import GameModel
from src.core.shared_types import ActionKind, Phase, WinCondition
from src.jarls.board import Board, cell_count
from src.jarls.hex import Hex
from src.jarls.pieces import Piece, Player

MIN_PLAYERS = 2
MAX_PLAYERS = 6
DEFAULT_INACTIVITY_LIMIT = 10


@dataclass(frozen=True)
class GameConfig:
    player_count: int
    board_radius: int
    shield_count: int
    warrior_count: int
    turn_timer_ms: Optional[int] = None
    inactivity_limit: int = DEFAULT_INACTIVITY_LIMIT

    @property
    def pieces_per_side(self) -> int:
        return self.shield_count + self.warrior_count

    @property
    def board(self) -> Board:
        return Board(self.board_radius)

    def validate(self) -> None:
        """Raise InvalidConfigError for anything the engine cannot set up a game with."""
        if not MIN_PLAYERS <= self.player_count <= MAX_PLAYERS:
            raise InvalidConfigError(
                f"player_count must be between {MIN_PLAYERS} and {MAX_PLAYERS}, got {self.player_count}."
            )
        if self.board_radius < 1:
            raise InvalidConfigError(f"board_radius must be positive, got {self.board_radius}.")
        if self.shield_count <= 0 or self.warrior_count <= 0:
            raise InvalidConfigError(
                f"Piece counts must be positive, got {self.shield_count} shields and {self.warrior_count} warriors."
            )
        if self.turn_timer_ms is not None and self.turn_timer_ms <= 0:
            raise InvalidConfigError(f"turn_timer_ms must be positive or None, got {self.turn_timer_ms}.")
        if self.inactivity_limit <= 0:
            raise InvalidConfigError(f"inactivity_limit must be positive, got {self.inactivity_limit}.")

        # The throne always stays empty at setup
        playable_cells = cell_count(self.board_radius) - 1
        required = self.player_count * self.pieces_per_side
        if required > playable_cells:
            raise InvalidConfigError(
                f"A board of radius {self.board_radius} has {playable_cells} free cells, "
                f"but {self.player_count} players need {required}."
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            player_count=data["playerCount"],
            board_radius=data["boardRadius"],
            shield_count=data["shieldCount"],
            warrior_count=data["warriorCount"],
            turn_timer_ms=data.get("turnTimerMs"),
            inactivity_limit=data.get("inactivityLimit", DEFAULT_INACTIVITY_LIMIT),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "playerCount": self.player_count,
            "boardRadius": self.board_radius,
            "shieldCount": self.shield_count,
            "warriorCount": self.warrior_count,
            "turnTimerMs": self.turn_timer_ms,
            "inactivityLimit": self.inactivity_limit,
        }


@dataclass(frozen=True)
class MoveRecord:
    """One accepted action, as kept in the game's history."""

    turn_number: int
    player_id: str
    kind: ActionKind
    piece_id: Optional[str] = None
    origin: Optional[Hex] = None
    target: Optional[Hex] = None
    captured: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            turn_number=data["turnNumber"],
            player_id=data["playerId"],
            kind=ActionKind(data["kind"]),
            piece_id=data.get("pieceId"),
            origin=Hex.from_dict(data["origin"]) if data.get("origin") else None,
            target=Hex.from_dict(data["target"]) if data.get("target") else None,
            captured=tuple(data.get("captured", [])),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "turnNumber": self.turn_number,
            "playerId": self.player_id,
            "kind": self.kind.value,
            "pieceId": self.piece_id,
            "origin": self.origin.to_dict() if self.origin else None,
            "target": self.target.to_dict() if self.target else None,
            "captured": list(self.captured),
        }


@dataclass(frozen=True)
class GameState:
    id: str
    phase: Phase
    config: GameConfig
    players: tuple[Player, ...] = ()
    pieces: tuple[Piece, ...] = ()
    current_player_id: Optional[str] = None
    turn_number: int = 0
    round_number: int = 0
    rounds_since_elimination: int = 0
    winner_id: Optional[str] = None
    win_condition: Optional[WinCondition] = None
    turn_started_at: Optional[int] = None
    history: tuple[MoveRecord, ...] = field(default_factory=tuple)

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Define how to construct a GameState from the information the Service layer actually has"""

        # Validation
        if model.phase not in [phase.value for phase in Phase]:
            raise GameError(
                f"Invalid phase: {model.phase!r}. \nPick one from {','.join(phase.value for phase in Phase)}"
            )

        return cls(
            id=model.id,
            phase=Phase(model.phase),
            config=GameConfig.from_dict(model.config),
            players=tuple(Player.from_dict(player) for player in model.players),
            pieces=tuple(Piece.from_dict(piece) for piece in model.pieces),
            current_player_id=model.current_player_id,
            turn_number=model.turn_number,
            round_number=model.round_number,
            rounds_since_elimination=model.rounds_since_elimination,
            winner_id=model.winner_id,
            win_condition=WinCondition(model.win_condition) if model.win_condition else None,
            turn_started_at=model.turn_started_at,
            history=tuple(MoveRecord.from_dict(record) for record in model.history),
        )

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            id=self.id,
            phase=self.phase.value,
            config=self.config.to_dict(),
            players=[player.to_dict() for player in self.players],
            pieces=[piece.to_dict() for piece in self.pieces],
            current_player_id=self.current_player_id,
            turn_number=self.turn_number,
            round_number=self.round_number,
            rounds_since_elimination=self.rounds_since_elimination,
            winner_id=self.winner_id,
            win_condition=self.win_condition.value if self.win_condition else None,
            turn_started_at=self.turn_started_at,
            history=[record.to_dict() for record in self.history],
        )

    # -- QUERIES ---
    @property
    def board(self) -> Board:
        return self.config.board

    @property
    def is_draw(self) -> bool:
        return self.phase == Phase.FINISHED and self.winner_id is None

    def player(self, player_id: str) -> Optional[Player]:
        return next((player for player in self.players if player.id == player_id), None)

    def piece(self, piece_id: str) -> Optional[Piece]:
        return next((piece for piece in self.pieces if piece.id == piece_id), None)

    def active_players(self) -> list[Player]:
        """Players still in the game, in seat order."""
        return [player for player in self.players if not player.is_eliminated]

    def evolve(self, **changes: Any) -> Self:
        """New snapshot with the given fields replaced."""
        return replace(self, **changes)
