"""
In-memory store
Holds the live games by id plus the statistics history.
Every finished or abandoned game is added to the history exactly once.
"""

import logging
from dataclasses import dataclass, field
from threading import RLock
from time import time
from typing import Dict, Optional, Tuple
from uuid import uuid4

from .color_source import ColorSource
from .events import Listener
from .game import Game
from .statistics import GameRecord, StatisticsLog, StatisticsSnapshot
from .types import Color

logger = logging.getLogger(__name__)


@dataclass
class LiveGame:
    id: str
    game: Game
    created_at: float = field(default_factory=time)
    updated_at: float = field(default_factory=time)
    # set once the game has been written to the history
    record: Optional[GameRecord] = None


class GameStore:
    def __init__(
        self,
        source: Optional[ColorSource] = None,
        log: Optional[StatisticsLog] = None,
        listener: Optional[Listener] = None,
    ) -> None:
        self._games: Dict[str, LiveGame] = {}
        self._lock = RLock()
        self._source = source or ColorSource()
        self._log = log if log is not None else StatisticsLog()
        self._listener = listener
        self.history_loaded = False

    @property
    def source(self) -> ColorSource:
        return self._source

    @property
    def listener(self) -> Optional[Listener]:
        return self._listener

    @property
    def log(self) -> StatisticsLog:
        return self._log

    # --- Games ---

    def create(self, sequence_length: int, hard: bool = False) -> LiveGame:
        game = Game(sequence_length, source=self._source, listener=self._listener, hard=hard)
        live = LiveGame(id=str(uuid4()), game=game)
        with self._lock:
            self._games[live.id] = live
        logger.info("Game %s created (length=%s, hard=%s)", live.id, game.sequence_length, hard)
        return live

    def adopt(self, game_id: str, game: Game) -> LiveGame:
        """Put a restored game back under its old id."""
        live = LiveGame(id=game_id, game=game)
        with self._lock:
            self._games[game_id] = live
        logger.info("Game %s restored at try %s", game_id, game.current_try)
        return live

    def get(self, game_id: str) -> Optional[LiveGame]:
        with self._lock:
            return self._games.get(game_id)

    def add_color(self, game_id: str, color: Color) -> Optional[bool]:
        with self._lock:
            live = self._games.get(game_id)
            if live is None:
                return None
            accepted = live.game.add_guess(color)
            live.updated_at = time()
            return accepted

    def remove_last(self, game_id: str) -> Optional[bool]:
        with self._lock:
            live = self._games.get(game_id)
            if live is None:
                return None
            removed = live.game.remove_last_guess()
            live.updated_at = time()
            return removed

    def submit(self, game_id: str) -> Optional[bool]:
        with self._lock:
            live = self._games.get(game_id)
            if live is None:
                return None

            submitted = live.game.submit_guess()
            live.updated_at = time()

            # Record exactly once, on the transition into won/lost
            if submitted and live.game.is_over and live.record is None:
                live.record = self._log.add_record(live.game)
            return submitted

    def pause(self, game_id: str) -> Optional[LiveGame]:
        with self._lock:
            live = self._games.get(game_id)
            if live is None:
                return None
            live.game.pause()
            return live

    def resume(self, game_id: str) -> Optional[LiveGame]:
        with self._lock:
            live = self._games.get(game_id)
            if live is None:
                return None
            live.game.resume()
            return live

    def abandon(self, game_id: str) -> Tuple[str, Optional[GameRecord]]:
        """
        Returns ("ok", record) when an unfinished game was recorded as a quit,
        ("discarded", None) when it was dropped without any entry or was
        already recorded, ("not_found", None) for an unknown id.
        """
        with self._lock:
            live = self._games.pop(game_id, None)
            if live is None:
                return ("not_found", None)

            game = live.game
            touched = game.current_try > 0 or game.current_slot > 0
            if live.record is None and not game.is_over and touched:
                live.record = self._log.add_record(game, outcome="Quit")
                return ("ok", live.record)
            return ("discarded", None)

    # --- Statistics ---

    def get_stats(self) -> StatisticsSnapshot:
        return self._log.snapshot()

    def history_csv(self) -> str:
        return self._log.report_history_csv()

    def reset_stats(self) -> None:
        self._log.clear()

    def load_history(self, log: StatisticsLog) -> None:
        """Swap in a history restored from storage."""
        with self._lock:
            self._log = log
            self.history_loaded = True
