"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBGame(Base):
    __tablename__ = "games"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(unique=True, index=True)
    channel_name: Mapped[Optional[str]]
    current_fen: Mapped[str]
    white_team: Mapped[list[str]] = mapped_column(JSON, default=list)
    black_team: Mapped[list[str]] = mapped_column(JSON, default=list)
    move_count: Mapped[int] = mapped_column(default=0)
    move_history: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    captured_pieces: Mapped[dict[str, list[str]]] = mapped_column(JSON, default=dict)
    pacing: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    round_end_time_ms: Mapped[Optional[int]]
    last_message_id: Mapped[Optional[str]]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
