"""
Boundary layer data model(s).

These objects are used to communicate between the Service and the persistence layer.
(Decouples the data model specific to the DB layer from the in-memory GameSession)
"""

from dataclasses import dataclass, field
from typing import Any, Optional

# Type aliases to make GameRecord easier to read
TeamName = str
ActorId = str
PieceName = str


@dataclass
class GameRecord:
    """Transport-safe representation of a stored game session."""

    key: str
    current_fen: str
    white_team: list[ActorId]
    black_team: list[ActorId]
    move_count: int
    channel_name: Optional[str] = None
    move_history: list[dict[str, Any]] = field(default_factory=list)
    captured_pieces: dict[TeamName, list[PieceName]] = field(default_factory=dict)
    pacing: dict[str, Any] = field(default_factory=dict)
    round_end_time_ms: Optional[int] = None
    last_message_id: Optional[str] = None
