"""Authoritative store of live game sessions, one per key."""

import asyncio
from typing import Optional

from src.chess.oracle import RulesOracle
from src.core.exceptions import (
    AlreadyExistsError,
    RepositoryError,
    SessionNotFoundError,
)
from src.core.logging import get_logger
from src.db.repository import GameRepository
from src.game.session import ChannelBinding, GameSession, PacingConfig

logger = get_logger(__name__)


class SessionRegistry:
    """
    In-memory map of key -> GameSession.
    ----

    Owned by the application context (not a module level singleton), so every test can build a fresh one.
    Channel-bound sessions are mirrored to the repository, if one is given.
    """

    def __init__(
        self, oracle: RulesOracle, repository: Optional[GameRepository] = None
    ) -> None:
        self.oracle = oracle
        self.repo = repository
        self._sessions: dict[str, GameSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def create_session(
        self,
        key: str,
        pacing: PacingConfig,
        channel_binding: Optional[ChannelBinding] = None,
    ) -> GameSession:
        if key in self._sessions:
            raise AlreadyExistsError(
                f"There is already an active game for {key!r}. Join the current game instead."
            )
        session = GameSession(
            key=key,
            position=self.oracle.new_position(),
            pacing=pacing,
            channel_binding=channel_binding,
        )
        self._sessions[key] = session
        logger.info("session_created", key=key, channel_bound=session.is_channel_bound)
        return session

    def add(self, session: GameSession) -> None:
        """Register an already built session (restored from persistence)."""
        if session.key in self._sessions:
            raise AlreadyExistsError(f"Session {session.key!r} is already live.")
        self._sessions[session.key] = session

    def get(self, key: str) -> GameSession:
        session = self._sessions.get(key)
        if session is None:
            raise SessionNotFoundError(f"No active game found for {key!r}.")
        return session

    def contains(self, key: str) -> bool:
        return key in self._sessions

    def keys(self) -> list[str]:
        return list(self._sessions.keys())

    def sessions(self) -> list[GameSession]:
        return list(self._sessions.values())

    def remove(self, key: str) -> Optional[GameSession]:
        """Idempotent. Also drops the persisted copy of a channel-bound session."""
        session = self._sessions.pop(key, None)
        if session is None:
            return None
        logger.info("session_removed", key=key, moves=session.move_number)
        self.discard_lock(key)
        if session.is_channel_bound and self.repo is not None:
            try:
                self.repo.delete_game(key)
            except RepositoryError:
                logger.exception("persistence_delete_failed", key=key)
        return session

    def lock(self, key: str) -> asyncio.Lock:
        """Per key lock: every mutating action on a session runs while holding it."""
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def discard_lock(self, key: str) -> None:
        """Drop the lock of a key that has no live session. A held lock stays until its holder is done."""
        lock = self._locks.get(key)
        if lock is not None and not lock.locked() and key not in self._sessions:
            del self._locks[key]

    def persist(self, session: GameSession) -> bool:
        """
        Mirror a channel-bound session to the repository.

        Returns False when the write failed. The in-memory state stays the source of truth either way.
        """
        if not session.is_channel_bound or self.repo is None:
            return True
        try:
            self.repo.save(session.to_record(self.oracle))
        except RepositoryError:
            logger.exception("persistence_failed", key=session.key)
            return False
        return True
