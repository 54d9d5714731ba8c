"""
The GameSession is the unit of a team chess match: one position, two teams of actors, and the
ledgers (moves, captures, resign votes) that go with it.

Every field is always present. Empty collections / None timers are the defaults, never missing attributes.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Self

from src.chess.oracle import GameResult, Position, RulesOracle
from src.core.config import Settings
from src.core.exceptions import GameStateError
from src.core.models import GameRecord
from src.core.shared_types import PieceType, Team


@dataclass
class PacingConfig:
    enabled: bool = True
    base_delay_seconds: int = 900
    increment_seconds: int = 900

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        return cls(
            enabled=settings.pacing_enabled,
            base_delay_seconds=settings.pacing_base_delay_seconds,
            increment_seconds=settings.pacing_increment_seconds,
        )


@dataclass
class ChannelBinding:
    """Public read-only view of the game, edited in place after each move."""

    channel_key: str
    channel_name: Optional[str] = None
    last_rendered_message_id: Optional[str] = None


@dataclass(frozen=True)
class MoveRecord:
    sequence: int
    actor: str
    from_square: str
    to_square: str
    san: str
    captured: Optional[PieceType]
    promotion: Optional[PieceType]
    timestamp_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "actor": self.actor,
            "from_square": self.from_square,
            "to_square": self.to_square,
            "san": self.san,
            "captured": self.captured.value if self.captured else None,
            "promotion": self.promotion.value if self.promotion else None,
            "timestamp_ms": self.timestamp_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            sequence=data["sequence"],
            actor=data["actor"],
            from_square=data["from_square"],
            to_square=data["to_square"],
            san=data["san"],
            captured=PieceType(data["captured"]) if data.get("captured") else None,
            promotion=PieceType(data["promotion"]) if data.get("promotion") else None,
            timestamp_ms=data["timestamp_ms"],
        )


def _empty_votes() -> dict[Team, set[str]]:
    return {Team.WHITE: set(), Team.BLACK: set()}


def _empty_captures() -> dict[Team, list[PieceType]]:
    return {Team.WHITE: [], Team.BLACK: []}


@dataclass
class GameSession:
    key: str
    position: Position
    pacing: PacingConfig = field(default_factory=PacingConfig)
    white_team: list[str] = field(default_factory=list)
    black_team: list[str] = field(default_factory=list)
    resign_votes: dict[Team, set[str]] = field(default_factory=_empty_votes)
    # keyed by the side that LOST the piece
    captured_pieces: dict[Team, list[PieceType]] = field(default_factory=_empty_captures)
    move_history: list[MoveRecord] = field(default_factory=list)
    move_number: int = 0
    round_end_time_ms: Optional[int] = None
    channel_binding: Optional[ChannelBinding] = None
    attached_actors: list[str] = field(default_factory=list)
    result: Optional[GameResult] = None

    @property
    def is_channel_bound(self) -> bool:
        return self.channel_binding is not None

    @property
    def is_terminated(self) -> bool:
        return self.result is not None

    def members(self, team: Team) -> list[str]:
        return self.white_team if team == Team.WHITE else self.black_team

    def team_of(self, actor_id: str) -> Optional[Team]:
        if actor_id in self.white_team:
            return Team.WHITE
        if actor_id in self.black_team:
            return Team.BLACK
        return None

    def attach(self, actor_id: str) -> None:
        if actor_id not in self.attached_actors:
            self.attached_actors.append(actor_id)

    # --- persistence boundary ---
    def to_record(self, oracle: RulesOracle) -> GameRecord:
        binding = self.channel_binding
        return GameRecord(
            key=self.key,
            current_fen=oracle.serialize(self.position),
            white_team=list(self.white_team),
            black_team=list(self.black_team),
            move_count=self.move_number,
            channel_name=binding.channel_name if binding else None,
            move_history=[move.to_dict() for move in self.move_history],
            captured_pieces={
                team.value: [piece.value for piece in pieces]
                for team, pieces in self.captured_pieces.items()
            },
            pacing={
                "enabled": self.pacing.enabled,
                "base_delay_seconds": self.pacing.base_delay_seconds,
                "increment_seconds": self.pacing.increment_seconds,
            },
            round_end_time_ms=self.round_end_time_ms,
            last_message_id=binding.last_rendered_message_id if binding else None,
        )

    @classmethod
    def from_record(cls, record: GameRecord, oracle: RulesOracle) -> Self:
        """Rebuild a channel-bound session from its stored record."""

        history = [MoveRecord.from_dict(move) for move in record.move_history]
        if len(history) != record.move_count:
            raise GameStateError(
                f"Stored game {record.key!r} has {len(history)} moves recorded but move count {record.move_count}."
            )

        overlap = set(record.white_team) & set(record.black_team)
        if overlap:
            raise GameStateError(
                f"Stored game {record.key!r} has actors on both teams: {sorted(overlap)}"
            )

        captured = _empty_captures()
        for team_name, pieces in record.captured_pieces.items():
            captured[Team(team_name)] = [PieceType(piece) for piece in pieces]

        round_end = record.round_end_time_ms
        if record.move_count == 0 or record.move_count % 2 == 1:
            round_end = None

        session = cls(
            key=record.key,
            position=oracle.deserialize(record.current_fen),
            pacing=PacingConfig(**record.pacing) if record.pacing else PacingConfig(),
            white_team=list(record.white_team),
            black_team=list(record.black_team),
            captured_pieces=captured,
            move_history=history,
            move_number=record.move_count,
            round_end_time_ms=round_end,
            channel_binding=ChannelBinding(
                channel_key=record.key,
                channel_name=record.channel_name,
                last_rendered_message_id=record.last_message_id,
            ),
        )
        for actor_id in [*session.white_team, *session.black_team]:
            session.attach(actor_id)
        return session
