"""
Type definitions used across layers
"""

from enum import StrEnum


class Team(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Team":
        return Team.BLACK if self is Team.WHITE else Team.WHITE


class ResultKind(StrEnum):
    CHECKMATE = "checkmate"
    DRAW = "draw"
    STALEMATE = "stalemate"
    RESIGNED = "resigned"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


# --- used for the score line under the board
PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 0,
}


class ErrorKind(StrEnum):
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    NOT_ON_ANY_TEAM = "not_on_any_team"
    WRONG_TEAM = "wrong_team"
    PACING_BLOCKED = "pacing_blocked"
    ILLEGAL_MOVE = "illegal_move"
    SESSION_TERMINAL = "session_terminal"
    ALREADY_VOTED = "already_voted"
    INVALID_REQUEST = "invalid_request"
    REPOSITORY = "repository"
    NOTIFICATION = "notification"
