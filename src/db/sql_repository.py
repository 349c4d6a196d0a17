"""Implementation of (Game)Repository using SQLAlchemy"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.core.exceptions import RepositoryError
from src.core.models import GameModel
from src.db.schema import DBGame


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: str) -> GameModel | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_model(game_db)
        return None

    def create_game(self, game: GameModel) -> GameModel:
        """Store new game and return the stored data."""
        if self._fetch_game(game.id) is not None:
            raise RepositoryError(f"Game with id {game.id!r} already exists.")
        game_db = DBGame(id=game.id)
        self._copy_into(game_db, game)
        self.db.add(game_db)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise RepositoryError(f"Game with id {game.id!r} already exists.") from exc
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def update_game(self, game_id: str, game: GameModel) -> GameModel | None:
        """Replace the stored snapshot."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        self._copy_into(game_db, game)
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def delete_game(self, game_id: str) -> GameModel | None:
        """Remove a game's record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_model = self._to_model(game_db)
        self.db.delete(game_db)
        self.db.commit()
        return game_model

    def _fetch_game(self, game_id: str) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    def _copy_into(self, game_db: DBGame, game: GameModel) -> None:
        """
        NOTE JSON columns are assigned fresh lists/dicts, so SQLAlchemy notices the change
        (in-place mutation of a JSON value is not tracked).
        """
        game_db.phase = game.phase
        game_db.config = dict(game.config)
        game_db.players = [dict(player) for player in game.players]
        game_db.pieces = [dict(piece) for piece in game.pieces]
        game_db.current_player_id = game.current_player_id
        game_db.turn_number = game.turn_number
        game_db.round_number = game.round_number
        game_db.rounds_since_elimination = game.rounds_since_elimination
        game_db.winner_id = game.winner_id
        game_db.win_condition = game.win_condition
        game_db.turn_started_at = game.turn_started_at
        game_db.history = [dict(record) for record in game.history]

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            id=game_db.id,
            phase=game_db.phase,
            config=game_db.config,
            players=game_db.players,
            pieces=game_db.pieces,
            current_player_id=game_db.current_player_id,
            turn_number=game_db.turn_number,
            round_number=game_db.round_number,
            rounds_since_elimination=game_db.rounds_since_elimination,
            winner_id=game_db.winner_id,
            win_condition=game_db.win_condition,
            turn_started_at=game_db.turn_started_at,
            history=game_db.history,
        )
