"""Implementation of (Game)Repository using SQLAlchemy"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import RepositoryError
from src.core.models import GameRecord
from src.db.schema import DBGame


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, key: str) -> GameRecord | None:
        """Get game by key, if record exists."""
        game_db = self._fetch_game(key)
        if game_db:
            return self._to_record(game_db)
        return None

    def save(self, game: GameRecord) -> GameRecord:
        """Insert or replace the record stored for game.key."""
        try:
            game_db = self._fetch_game(game.key)
            if game_db is None:
                game_db = DBGame(key=game.key)
                self.db.add(game_db)
            game_db.channel_name = game.channel_name
            game_db.current_fen = game.current_fen
            game_db.white_team = list(game.white_team)
            game_db.black_team = list(game.black_team)
            game_db.move_count = game.move_count
            game_db.move_history = list(game.move_history)
            game_db.captured_pieces = dict(game.captured_pieces)
            game_db.pacing = dict(game.pacing)
            game_db.round_end_time_ms = game.round_end_time_ms
            game_db.last_message_id = game.last_message_id
            self.db.commit()
            self.db.refresh(game_db)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError(f"Could not save game {game.key!r}.") from exc
        return self._to_record(game_db)

    def delete_game(self, key: str) -> GameRecord | None:
        """Remove a game's record."""
        try:
            game_db = self._fetch_game(key)
            if not game_db:
                return None
            game_record = self._to_record(game_db)
            self.db.delete(game_db)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError(f"Could not delete game {key!r}.") from exc
        return game_record

    def list_games(self) -> list[GameRecord]:
        query = select(DBGame).order_by(DBGame.updated_at.desc())
        try:
            return [self._to_record(game_db) for game_db in self.db.scalars(query)]
        except SQLAlchemyError as exc:
            raise RepositoryError("Could not list stored games.") from exc

    def _fetch_game(self, key: str) -> DBGame | None:
        query = select(DBGame).where(DBGame.key == key)
        return self.db.scalar(query)

    def _to_record(self, game_db: DBGame) -> GameRecord:
        """Convert SQLAlchemy model to data transfer model."""
        return GameRecord(
            key=game_db.key,
            current_fen=game_db.current_fen,
            white_team=list(game_db.white_team),
            black_team=list(game_db.black_team),
            move_count=game_db.move_count,
            channel_name=game_db.channel_name,
            move_history=list(game_db.move_history),
            captured_pieces=dict(game_db.captured_pieces),
            pacing=dict(game_db.pacing),
            round_end_time_ms=game_db.round_end_time_ms,
            last_message_id=game_db.last_message_id,
        )
