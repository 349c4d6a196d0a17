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
    """One row per game. Nested records (config, players, pieces, history) are stored as JSON."""

    __tablename__ = "games"
    id: Mapped[str] = mapped_column(primary_key=True)
    phase: Mapped[str]
    config: Mapped[dict[str, Any]] = mapped_column(JSON)
    players: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    pieces: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    current_player_id: Mapped[Optional[str]]
    turn_number: Mapped[int] = mapped_column(default=0)
    round_number: Mapped[int] = mapped_column(default=0)
    rounds_since_elimination: Mapped[int] = mapped_column(default=0)
    winner_id: Mapped[Optional[str]]
    win_condition: Mapped[Optional[str]]
    turn_started_at: Mapped[Optional[int]]
    history: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
