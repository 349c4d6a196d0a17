"""Requests and Response models

The response models are the wire format of the game: camelCase JSON, a full snapshot after every accepted action.
"""

from typing import Annotated, Literal, Optional, Self, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.models import GameModel
from src.core.shared_types import ActionKind, Phase, Role, WinCondition
from src.jarls.actions import (
    Action,
    MoveAction,
    PassAction,
    ResignAction,
    TimerExpiryAction,
)
from src.jarls.hex import Hex

PieceId = str
PlayerId = str


class WireModel(BaseModel):
    """Accept both the python field names and the camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


class HexModel(WireModel):
    q: int
    r: int

    def to_hex(self) -> Hex:
        return Hex(self.q, self.r)

    @classmethod
    def from_hex(cls, cell: Hex) -> Self:
        return cls(q=cell.q, r=cell.r)


def _validate_identifier(value: str) -> str:
    value = value.strip()
    if not value:
        raise InvalidRequestError("Identifiers cannot be empty.")
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(WireModel):
    """
    Either only the player count (the recommended board size and piece counts are used),
    or a full custom configuration.
    """

    player_count: int = Field(alias="playerCount")
    board_radius: Optional[int] = Field(default=None, alias="boardRadius")
    shield_count: Optional[int] = Field(default=None, alias="shieldCount")
    warrior_count: Optional[int] = Field(default=None, alias="warriorCount")
    turn_timer_ms: Optional[int] = Field(default=None, alias="turnTimerMs")
    inactivity_limit: Optional[int] = Field(default=None, alias="inactivityLimit")

    @field_validator(
        "board_radius", "shield_count", "warrior_count", "turn_timer_ms", "inactivity_limit"
    )
    @classmethod
    def validate_positive(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise InvalidRequestError(f"Sizes and limits must be positive, got {value}.")
        return value

    @property
    def is_custom(self) -> bool:
        return any(
            value is not None
            for value in (self.board_radius, self.shield_count, self.warrior_count)
        )


class JoinGameRequest(WireModel):
    game_id: str = Field(alias="gameId")
    player_id: PlayerId = Field(alias="playerId")
    player_name: Optional[str] = Field(default=None, alias="playerName")

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, value: str) -> str:
        return _validate_identifier(value)


class LeaveGameRequest(WireModel):
    game_id: str = Field(alias="gameId")
    player_id: PlayerId = Field(alias="playerId")


class GetGameRequest(WireModel):
    game_id: str = Field(alias="gameId")


class DeleteGameRequest(WireModel):
    game_id: str = Field(alias="gameId")


class LegalMovesRequest(WireModel):
    game_id: str = Field(alias="gameId")
    player_id: PlayerId = Field(alias="playerId")


class MoveActionModel(WireModel):
    type: Literal["move"]
    player_id: PlayerId = Field(alias="playerId")
    piece_id: PieceId = Field(alias="pieceId")
    target: HexModel

    def to_action(self) -> Action:
        return MoveAction(self.player_id, self.piece_id, self.target.to_hex())


class PassActionModel(WireModel):
    type: Literal["pass"]
    player_id: PlayerId = Field(alias="playerId")

    def to_action(self) -> Action:
        return PassAction(self.player_id)


class ResignActionModel(WireModel):
    type: Literal["resign"]
    player_id: PlayerId = Field(alias="playerId")

    def to_action(self) -> Action:
        return ResignAction(self.player_id)


class TimerExpiryActionModel(WireModel):
    type: Literal["timerExpiry"]
    player_id: PlayerId = Field(alias="playerId")

    def to_action(self) -> Action:
        return TimerExpiryAction(self.player_id)


ActionModel = Annotated[
    Union[MoveActionModel, PassActionModel, ResignActionModel, TimerExpiryActionModel],
    Field(discriminator="type"),
]


class ActionRequest(WireModel):
    game_id: str = Field(alias="gameId")
    action: ActionModel


# --- RESPONSE MODELS ---
class GameConfigModel(WireModel):
    player_count: int = Field(alias="playerCount")
    board_radius: int = Field(alias="boardRadius")
    shield_count: int = Field(alias="shieldCount")
    warrior_count: int = Field(alias="warriorCount")
    turn_timer_ms: Optional[int] = Field(alias="turnTimerMs")
    inactivity_limit: int = Field(alias="inactivityLimit")


class PlayerModel(WireModel):
    id: PlayerId
    name: str
    seat: int
    color: str
    is_eliminated: bool = Field(alias="isEliminated")
    connected: bool


class PieceModel(WireModel):
    id: PieceId
    owner_id: PlayerId = Field(alias="ownerId")
    role: Role
    position: HexModel


class MoveRecordModel(WireModel):
    turn_number: int = Field(alias="turnNumber")
    player_id: PlayerId = Field(alias="playerId")
    kind: ActionKind
    piece_id: Optional[PieceId] = Field(default=None, alias="pieceId")
    origin: Optional[HexModel] = None
    target: Optional[HexModel] = None
    captured: list[PieceId] = Field(default_factory=list)


class GameStateResponse(WireModel):
    """The snapshot broadcast to every client after each accepted action."""

    id: str
    phase: Phase
    config: GameConfigModel
    players: list[PlayerModel]
    pieces: list[PieceModel]
    current_player_id: Optional[PlayerId] = Field(alias="currentPlayerId")
    turn_number: int = Field(alias="turnNumber")
    round_number: int = Field(alias="roundNumber")
    rounds_since_elimination: int = Field(alias="roundsSinceElimination")
    winner_id: Optional[PlayerId] = Field(alias="winnerId")
    win_condition: Optional[WinCondition] = Field(alias="winCondition")
    turn_started_at: Optional[int] = Field(default=None, alias="turnStartedAt")
    history: list[MoveRecordModel] = Field(default_factory=list)

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """The GameModel records already use the camelCase keys of the wire format."""
        return cls(
            id=model.id,
            phase=Phase(model.phase),
            config=GameConfigModel.model_validate(model.config),
            players=[PlayerModel.model_validate(player) for player in model.players],
            pieces=[PieceModel.model_validate(piece) for piece in model.pieces],
            current_player_id=model.current_player_id,
            turn_number=model.turn_number,
            round_number=model.round_number,
            rounds_since_elimination=model.rounds_since_elimination,
            winner_id=model.winner_id,
            win_condition=WinCondition(model.win_condition) if model.win_condition else None,
            turn_started_at=model.turn_started_at,
            history=[MoveRecordModel.model_validate(record) for record in model.history],
        )

    def to_model(self) -> GameModel:
        return GameModel(
            id=self.id,
            phase=self.phase.value,
            config=self.config.model_dump(by_alias=True),
            players=[player.model_dump(by_alias=True) for player in self.players],
            pieces=[piece.model_dump(by_alias=True, mode="json") for piece in self.pieces],
            current_player_id=self.current_player_id,
            turn_number=self.turn_number,
            round_number=self.round_number,
            rounds_since_elimination=self.rounds_since_elimination,
            winner_id=self.winner_id,
            win_condition=self.win_condition.value if self.win_condition else None,
            turn_started_at=self.turn_started_at,
            history=[record.model_dump(by_alias=True, mode="json") for record in self.history],
        )


class LegalMovesResponse(WireModel):
    game_id: str = Field(alias="gameId")
    player_id: PlayerId = Field(alias="playerId")
    legal_moves: dict[PieceId, list[HexModel]] = Field(alias="legalMoves")
