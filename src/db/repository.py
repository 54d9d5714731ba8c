"""Protocol repository (SQLAlchemy implementation in sql_repository.py, dictionaries in the tests)"""

from typing import Protocol

from src.core.models import GameRecord


class GameRepository(Protocol):
    """Persistence layer orchestration. Records are keyed by the game key (the channel)."""

    def get_game(self, key: str) -> GameRecord | None:
        """Get game by key, if record exists."""
        ...

    def save(self, game: GameRecord) -> GameRecord:
        """Insert a new record or replace the existing one for the same key."""
        ...

    def delete_game(self, key: str) -> GameRecord | None:
        """Remove a game's record."""
        ...

    def list_games(self) -> list[GameRecord]:
        """All stored games, most recently updated first."""
        ...
