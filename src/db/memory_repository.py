"""Implementation of (Game)Repository keeping the snapshots in a dictionary. For a single server process and for tests."""

from copy import deepcopy

from src.core.exceptions import RepositoryError
from src.core.models import GameModel


class InMemoryGameRepository:
    """Games are stored as deep copies, so callers can never alter a stored snapshot by accident."""

    def __init__(self) -> None:
        self._games: dict[str, GameModel] = {}

    def get_game(self, game_id: str) -> GameModel | None:
        game = self._games.get(game_id)
        return deepcopy(game) if game is not None else None

    def create_game(self, game: GameModel) -> GameModel:
        if game.id in self._games:
            raise RepositoryError(f"Game with id {game.id!r} already exists.")
        self._games[game.id] = deepcopy(game)
        return deepcopy(game)

    def update_game(self, game_id: str, game: GameModel) -> GameModel | None:
        if game_id not in self._games:
            return None
        self._games[game_id] = deepcopy(game)
        return deepcopy(game)

    def delete_game(self, game_id: str) -> GameModel | None:
        return self._games.pop(game_id, None)

    def clear(self) -> None:
        self._games.clear()
