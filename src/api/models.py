"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, field_validator

from src.core.exceptions import AlreadyVotedError, GameError, InvalidRequestError, PacingBlockedError
from src.core.shared_types import ErrorKind, Team

ActorId = str
PieceName = str

_MAX_NOTATION_LENGTH = 10


# --- REQUEST MODELS ---
class PacingRequest(BaseModel):
    enabled: bool = True
    base_delay_seconds: int = 900
    increment_seconds: int = 900

    @field_validator("base_delay_seconds", "increment_seconds")
    @classmethod
    def validate_non_negative(cls, value: int) -> int:
        if value < 0:
            raise InvalidRequestError(f"Delays cannot be negative, got {value}.")
        return value


class CreateGameRequest(BaseModel):
    key: str
    channel_name: Optional[str] = None
    bind_channel: bool = True
    pacing: Optional[PacingRequest] = None

    @field_validator("key")
    @classmethod
    def validate_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("A game key cannot be empty.")
        return value


class JoinTeamRequest(BaseModel):
    actor_id: ActorId
    team: Optional[Team] = None


class ActorRequest(BaseModel):
    actor_id: ActorId


class MoveRequest(BaseModel):
    actor_id: ActorId
    notation: str

    @field_validator("notation")
    @classmethod
    def validate_notation(cls, value: str) -> str:
        value = value.strip()
        if not value or len(value) > _MAX_NOTATION_LENGTH or " " in value:
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a move. Use e.g. e2e4, e7e8=q or Nf3."
            )
        return value


class CallbackRequest(BaseModel):
    actor_id: ActorId
    chat_id: str
    data: str


class CommandRequest(BaseModel):
    actor_id: ActorId
    chat_id: str
    text: str


# --- RESPONSE MODELS ---
class MoveEntry(BaseModel):
    sequence: int
    actor: ActorId
    from_square: str
    to_square: str
    san: str
    captured: Optional[PieceName] = None
    promotion: Optional[PieceName] = None
    timestamp_ms: int


class MoveResponse(BaseModel):
    move: MoveEntry
    is_check: bool
    game_over: bool


class GameStateResponse(BaseModel):
    key: str
    fen: str
    side_to_move: Team
    white_team: list[ActorId]
    black_team: list[ActorId]
    move_number: int
    round_end_time_ms: Optional[int]
    captured_pieces: dict[Team, list[PieceName]]
    channel_bound: bool
    result: Optional[str] = None
    winner: Optional[Team] = None


class VoteResponse(BaseModel):
    team: Team
    votes: int
    needed: int
    resigned: bool


class HistoryResponse(BaseModel):
    key: str
    moves: list[MoveEntry]


class ActionResult(BaseModel):
    """Either a success payload or one of the named failure kinds. Never a raw exception."""

    ok: bool
    error: Optional[ErrorKind] = None
    message: Optional[str] = None
    remaining_seconds: Optional[int] = None
    delivery_degraded: bool = False
    state: Optional[GameStateResponse] = None
    move: Optional[MoveResponse] = None
    vote: Optional[VoteResponse] = None
    history: Optional[HistoryResponse] = None
    games: Optional[list[GameStateResponse]] = None
    legal_moves: Optional[list[str]] = None

    @classmethod
    def failure(cls, exc: GameError) -> "ActionResult":
        result = cls(ok=False, error=exc.kind, message=str(exc))
        if isinstance(exc, PacingBlockedError):
            result.remaining_seconds = exc.remaining_seconds
        if isinstance(exc, AlreadyVotedError) and exc.tally is not None:
            result.vote = VoteResponse(
                team=exc.tally.team,
                votes=exc.tally.votes,
                needed=exc.tally.needed,
                resigned=exc.tally.resigned,
            )
        return result
