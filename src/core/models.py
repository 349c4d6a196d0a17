"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from typing import Any, Optional

# Type aliases to make GameModel easier to read
PlayerId = str
JSONRecord = dict[str, Any]


@dataclass
class GameModel:
    """Transport-safe representation of a Jarls game: only plain str/int/list/dict values, safe to dump as JSON."""

    id: str
    phase: str
    config: JSONRecord
    players: list[JSONRecord]
    pieces: list[JSONRecord]
    current_player_id: Optional[PlayerId]
    turn_number: int
    round_number: int
    rounds_since_elimination: int
    winner_id: Optional[PlayerId]
    win_condition: Optional[str]
    turn_started_at: Optional[int] = None
    history: list[JSONRecord] = field(default_factory=list)
