"""
DB-backed persistence for games and history.

Public methods:
- save_game(game_id, game) -> None
- load_game(game_id, ...) -> Game | None   (finished games are never resumed)
- delete_game(game_id) -> None
- append_history(line, game_count, capacity) -> None
- load_history(capacity) -> StatisticsLog
- clear_history() -> None

The live games stay in memory (GameStore); this class only saves and
restores them, and mirrors the statistics history.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from .color_source import ColorSource
from .events import Listener
from .game import Game, GameSnapshot, resume_saved_game
from .models import HistoryLine, HistoryMeta, SavedGame
from .statistics import HISTORY_CAPACITY, StatisticsLog

logger = logging.getLogger(__name__)


class DBGameRepository:
    def __init__(self, db: Session):
        self.db = db

    # --- Meta helpers ---

    def _get_or_create_meta(self) -> HistoryMeta:
        meta = self.db.get(HistoryMeta, 1)
        if not meta:
            meta = HistoryMeta(id=1, game_count=0)
            self.db.add(meta)
            self.db.commit()
            self.db.refresh(meta)
        return meta

    # --- Saved games ---

    def save_game(self, game_id: str, game: Game) -> None:
        now = datetime.utcnow()
        row = self.db.get(SavedGame, game_id)
        if row is None:
            row = SavedGame(id=game_id, created_at=now)
            self.db.add(row)
        row.snapshot = game.snapshot().to_dict()
        row.hard = game.hard
        row.updated_at = now
        self.db.commit()

    def load_game(
        self,
        game_id: str,
        source: Optional[ColorSource] = None,
        listener: Optional[Listener] = None,
    ) -> Optional[Game]:
        row = self.db.get(SavedGame, game_id)
        if row is None:
            return None

        try:
            snapshot = GameSnapshot.from_dict(row.snapshot)
        except ValueError as exc:
            logger.warning("Saved game %s could not be read: %s", game_id, exc)
            return None

        return resume_saved_game(snapshot, source=source, listener=listener)

    def delete_game(self, game_id: str) -> None:
        self.db.execute(delete(SavedGame).where(SavedGame.id == game_id))
        self.db.commit()

    # --- History ---

    def append_history(self, line: str, game_count: int, capacity: int = HISTORY_CAPACITY) -> None:
        self.db.add(HistoryLine(line=line))
        meta = self._get_or_create_meta()
        meta.game_count = max(meta.game_count, game_count)
        self.db.flush()

        # Evict the oldest rows past capacity
        total = self.db.execute(select(func.count(HistoryLine.id))).scalar_one()
        excess = total - capacity
        if excess > 0:
            oldest = (
                self.db.execute(select(HistoryLine.id).order_by(HistoryLine.id.asc()).limit(excess))
                .scalars()
                .all()
            )
            self.db.execute(delete(HistoryLine).where(HistoryLine.id.in_(oldest)))

        self.db.commit()

    def load_history(self, capacity: int = HISTORY_CAPACITY) -> StatisticsLog:
        lines = self.db.execute(select(HistoryLine.line).order_by(HistoryLine.id.asc())).scalars().all()
        meta = self._get_or_create_meta()

        log = StatisticsLog(capacity=capacity, game_count=meta.game_count)
        for line in lines:
            log.add_line(line)
        logger.info("Loaded %s history line(s), game count=%s", len(log), meta.game_count)
        return log

    def clear_history(self) -> None:
        # The game counter is kept so sequence numbers never repeat
        self.db.execute(delete(HistoryLine))
        self.db.commit()
