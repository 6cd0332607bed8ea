"""
SQLAlchemy ORM models.

Tables:
- saved_games: one row per unfinished game (versioned snapshot stored as JSON)
- game_history: one row per finished/abandoned game (the CSV history line)
- history_meta: single row holding the running game counter, so sequence
  numbers keep growing after old history rows are evicted
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class SavedGame(Base):
    __tablename__ = "saved_games"

    # UUIDs generated in code; stored as strings
    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # GameSnapshot.to_dict()
    snapshot: Mapped[dict] = mapped_column(JSON, nullable=False)
    hard: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class HistoryLine(Base):
    __tablename__ = "game_history"

    # insertion order == history order
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    line: Mapped[str] = mapped_column(String(255), nullable=False)


# For simplicity: store exactly one row with id=1.
class HistoryMeta(Base):
    __tablename__ = "history_meta"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    game_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
