"""
Game history and the statistics derived from it.

Every finished (or abandoned) game becomes one CSV line:

    7,'false',5,83125,1,3,3,6,'Win'
    |  |       | |     |       |
    |  |       | |     |       outcome: Win, Lose, Quit or Unknown
    |  |       | |     revealed sequence, one color code per field
    |  |       | elapsed milliseconds
    |  |       tries taken
    |  hard mode flag
    sequence number

The log keeps the newest 300 lines. The statistics snapshot is rebuilt from
the lines only when something was appended since the last read, so the
exported text and the numbers on screen always come from the same parser.

Older builds wrote lines without the trailing quoted outcome. Those are
skipped entirely when aggregating.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, Iterable, List, Optional, Tuple

from .types import Color, Outcome

logger = logging.getLogger(__name__)

HISTORY_CAPACITY = 300
QUOTE = "'"

# Field positions in a history line
INDEX_SEQUENCE_NUMBER = 0
INDEX_MODE_HARD = 1
INDEX_NUM_TRIES = 2
INDEX_GAME_TIME_MS = 3
INDEX_COLORS_START = 4


def _zero_color_counts() -> Dict[Color, int]:
    return {color: 0 for color in Color}


@dataclass(frozen=True)
class GameRecord:
    sequence_number: int
    hard: bool
    tries: int
    elapsed_ms: int
    sequence: Tuple[Color, ...]
    outcome: str

    @classmethod
    def from_game(cls, sequence_number: int, game, hard: Optional[bool] = None,
                  outcome: Optional[Outcome] = None) -> GameRecord:
        if outcome is None:
            outcome = "Win" if game.is_winner else "Lose" if game.is_loser else "Unknown"
        return cls(
            sequence_number=sequence_number,
            hard=game.hard if hard is None else hard,
            tries=game.current_try,
            elapsed_ms=game.elapsed_ms,
            sequence=tuple(game.answer()),
            outcome=outcome,
        )

    def to_csv_line(self) -> str:
        buffer = io.StringIO()
        # Numbers stay bare, the two text fields get single quotes
        writer = csv.writer(buffer, quotechar=QUOTE, quoting=csv.QUOTE_NONNUMERIC, lineterminator="")
        writer.writerow(
            [self.sequence_number, "true" if self.hard else "false", self.tries, self.elapsed_ms]
            + [int(color) for color in self.sequence]
            + [self.outcome]
        )
        return buffer.getvalue()

    @classmethod
    def from_csv_line(cls, line: str) -> GameRecord:
        """Raises ValueError (or IndexError) when the line cannot be parsed."""
        fields = next(csv.reader([line.strip()], quotechar=QUOTE))
        if len(fields) <= INDEX_COLORS_START:
            raise ValueError(f"Expected at least {INDEX_COLORS_START + 1} fields, got {len(fields)}")

        return cls(
            sequence_number=int(fields[INDEX_SEQUENCE_NUMBER]),
            hard=fields[INDEX_MODE_HARD].strip().lower() != "false",
            tries=int(fields[INDEX_NUM_TRIES]),
            elapsed_ms=int(fields[INDEX_GAME_TIME_MS]),
            sequence=tuple(Color(int(code)) for code in fields[INDEX_COLORS_START:-1]),
            outcome=fields[-1],
        )


def is_current_format(line: str) -> bool:
    """Current lines end with the quoted outcome tag; legacy lines do not."""
    return line.rstrip().endswith(QUOTE)


@dataclass(frozen=True)
class StatisticsSnapshot:
    color_counts: Dict[Color, int] = field(default_factory=_zero_color_counts)
    wins: int = 0
    losses: int = 0
    quits: int = 0
    easy: int = 0
    hard: int = 0
    total_tries: int = 0
    total_win_ms: int = 0
    total_lose_ms: int = 0
    error: Optional[str] = None

    @property
    def games(self) -> int:
        return self.wins + self.losses + self.quits

    @property
    def average_tries(self) -> int:
        return self.total_tries // self.games if self.games else 0

    @property
    def average_win_ms(self) -> int:
        return self.total_win_ms // self.wins if self.wins else 0

    @property
    def average_lose_ms(self) -> int:
        return self.total_lose_ms // self.losses if self.losses else 0


def aggregate_history(lines: Iterable[str]) -> StatisticsSnapshot:
    """
    One pass over the history lines.
    - unknown outcome tags count as quits
    - legacy lines (no outcome tag) and blank lines are skipped
    - any malformed line throws away everything counted so far and the
      snapshot carries the error text instead
    """
    color_counts = _zero_color_counts()
    wins = losses = quits = easy = hard = 0
    total_tries = total_win_ms = total_lose_ms = 0

    try:
        for line in lines:
            if not line.strip() or not is_current_format(line):
                continue

            record = GameRecord.from_csv_line(line)
            outcome = record.outcome.lower()

            if outcome == "win":
                wins += 1
                total_win_ms += record.elapsed_ms
            elif outcome == "lose":
                losses += 1
                total_lose_ms += record.elapsed_ms
            else:
                quits += 1

            if record.hard:
                hard += 1
            else:
                easy += 1

            total_tries += record.tries

            for color in record.sequence:
                color_counts[color] += 1
    except (ValueError, IndexError, csv.Error) as exc:
        error = f"{type(exc).__name__}: {exc}"
        logger.warning("Statistics aggregation failed: %s", error)
        return StatisticsSnapshot(error=error)

    return StatisticsSnapshot(
        color_counts=color_counts,
        wins=wins,
        losses=losses,
        quits=quits,
        easy=easy,
        hard=hard,
        total_tries=total_tries,
        total_win_ms=total_win_ms,
        total_lose_ms=total_lose_ms,
    )


class StatisticsLog:
    """
    Bounded, append-only history with a memoized snapshot.

    The snapshot is computed outside the lock into a local value and only
    published if nothing was appended meanwhile, so readers never see a
    half-built result.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY, game_count: int = 0) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1.")
        self._capacity = capacity
        self._lines: List[str] = []
        self._game_count = game_count
        self._version = 0
        self._snapshot: Optional[StatisticsSnapshot] = None
        self._lock = Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def game_count(self) -> int:
        """Total games ever recorded; keeps growing after old lines are evicted."""
        return self._game_count

    def __len__(self) -> int:
        return len(self._lines)

    def add_record(self, game, hard: Optional[bool] = None, outcome: Optional[Outcome] = None) -> GameRecord:
        with self._lock:
            self._game_count += 1
            record = GameRecord.from_game(self._game_count, game, hard=hard, outcome=outcome)
            self._append(record.to_csv_line())
        logger.info("Added game %s (%s), history size=%s", record.sequence_number, record.outcome, len(self))
        return record

    def add_line(self, line: str) -> None:
        """Append a raw history line as-is, e.g. one restored from storage."""
        with self._lock:
            self._append(line.rstrip("\r\n"))

    def _append(self, line: str) -> None:
        # FIFO eviction once full
        while len(self._lines) >= self._capacity:
            self._lines.pop(0)
        self._lines.append(line)
        self._version += 1
        self._snapshot = None

    def snapshot(self) -> StatisticsSnapshot:
        with self._lock:
            if self._snapshot is not None:
                return self._snapshot
            lines = list(self._lines)
            version = self._version

        computed = aggregate_history(lines)

        with self._lock:
            if self._version == version:
                self._snapshot = computed
        return computed

    def lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def records(self) -> List[GameRecord]:
        """
        Parsed current-format records. Legacy lines are left out, and so are
        lines that fail to parse (snapshot() reports those through .error).
        """
        parsed = []
        for line in self.lines():
            if not line.strip() or not is_current_format(line):
                continue
            try:
                parsed.append(GameRecord.from_csv_line(line))
            except (ValueError, IndexError, csv.Error) as exc:
                logger.warning("Skipping unreadable history line %r: %s", line, exc)
        return parsed

    def report_history_csv(self) -> str:
        """One line per game, newline terminated."""
        return "".join(line + "\n" for line in self.lines())

    def clear(self) -> None:
        with self._lock:
            self._lines = []
            self._version += 1
            self._snapshot = None

    @classmethod
    def from_csv(cls, text: str, capacity: int = HISTORY_CAPACITY,
                 game_count: Optional[int] = None) -> StatisticsLog:
        log = cls(capacity=capacity)
        highest = 0
        for line in text.splitlines():
            if not line.strip():
                continue
            log.add_line(line)
            first = line.split(",", 1)[0].strip()
            if first.isdigit():
                highest = max(highest, int(first))
        log._game_count = highest if game_count is None else game_count
        return log
