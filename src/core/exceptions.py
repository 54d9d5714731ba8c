"""
Exceptions raised by the domain / persistence layers.

Every exception carries an ErrorKind, so the service layer can turn it into a typed result
without inspecting messages.
"""

from typing import Any

from src.core.shared_types import ErrorKind


class GameError(Exception):
    """Top-level custom exception. Anything below is recoverable at the action level."""

    kind: ErrorKind = ErrorKind.INVALID_REQUEST


class AlreadyExistsError(GameError):
    kind = ErrorKind.ALREADY_EXISTS


class SessionNotFoundError(GameError):
    kind = ErrorKind.NOT_FOUND


class NotOnAnyTeamError(GameError):
    kind = ErrorKind.NOT_ON_ANY_TEAM


class WrongTeamError(GameError):
    kind = ErrorKind.WRONG_TEAM


class PacingBlockedError(GameError):
    kind = ErrorKind.PACING_BLOCKED

    def __init__(self, remaining_seconds: int) -> None:
        super().__init__(
            f"Round cooldown active. Next move allowed in {remaining_seconds}s."
        )
        self.remaining_seconds = remaining_seconds


class IllegalMoveError(GameError):
    kind = ErrorKind.ILLEGAL_MOVE


class SessionTerminalError(GameError):
    kind = ErrorKind.SESSION_TERMINAL


class AlreadyVotedError(GameError):
    """Duplicate resign vote. Not a hard failure: the unchanged tally travels along."""

    kind = ErrorKind.ALREADY_VOTED

    def __init__(self, message: str, tally: Any = None) -> None:
        super().__init__(message)
        self.tally = tally


class GameStateError(GameError):
    """Stored or requested state cannot be turned into a game."""

    kind = ErrorKind.INVALID_REQUEST


class InvalidRequestError(GameError):
    kind = ErrorKind.INVALID_REQUEST


class RepositoryError(GameError):
    kind = ErrorKind.REPOSITORY


class NotificationError(GameError):
    kind = ErrorKind.NOTIFICATION
