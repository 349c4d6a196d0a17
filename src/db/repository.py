"""Protocol repository: the game store holding in-flight snapshots, keyed by game id."""

from typing import Protocol

from src.core.models import GameModel


class GameRepository(Protocol):
    """Persistence layer orchestration"""

    def get_game(self, game_id: str) -> GameModel | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(self, game: GameModel) -> GameModel:
        """Store a new game under its own id and return the stored data."""
        ...

    def update_game(self, game_id: str, game: GameModel) -> GameModel | None:
        """Replace the snapshot of an existing record."""
        ...

    def delete_game(self, game_id: str) -> GameModel | None:
        """Remove a game's record."""
        ...
