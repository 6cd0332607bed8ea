"""
One game of Sequence Hunt.

Holds the hidden sequence, every guessed row and its clues, the try/slot
cursors, the timer and the win flag. The host only talks to it through:
- add_guess(color) / remove_last_guess() / submit_guess()
- pause() / resume()
- the read-only accessors

A rejected move returns False, emits GameEvent.REJECTED and leaves the
state untouched. A color code outside the palette raises ValueError, also
before anything changes.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from .color_source import ColorSource
from .engine import EMPTY_CLUE, Clue, compute_clues, shuffle_clues, try_score
from .events import GameEvent, Listener
from .formatting import answer_text
from .timer import Clock, GameTimer, TimerState
from .types import ClueKind, Code, Color, GuessRow, UNSELECTED

logger = logging.getLogger(__name__)

MAX_TRIES = 10
DEFAULT_SEQUENCE_LENGTH = 4
MINIMUM_SEQUENCE_LENGTH = 4
MAXIMUM_SEQUENCE_LENGTH = 8

SNAPSHOT_VERSION = 1


def normalize_sequence_length(length: Any) -> int:
    """Out of range (or non-integer) lengths fall back to the default."""
    if (isinstance(length, int) and not isinstance(length, bool)
            and MINIMUM_SEQUENCE_LENGTH <= length <= MAXIMUM_SEQUENCE_LENGTH):
        return length
    logger.debug("Ignored sequence length %r, using default %s", length, DEFAULT_SEQUENCE_LENGTH)
    return DEFAULT_SEQUENCE_LENGTH


class Game:
    def __init__(
        self,
        sequence_length: int = DEFAULT_SEQUENCE_LENGTH,
        source: Optional[ColorSource] = None,
        listener: Optional[Listener] = None,
        hard: bool = False,
        clock: Optional[Clock] = None,
        sequence: Optional[Code] = None,
    ) -> None:
        self._source = source or ColorSource()
        self._listener = listener
        self.hard = hard

        if sequence is not None:
            if not MINIMUM_SEQUENCE_LENGTH <= len(sequence) <= MAXIMUM_SEQUENCE_LENGTH:
                raise ValueError(
                    f"Sequence must have {MINIMUM_SEQUENCE_LENGTH} to {MAXIMUM_SEQUENCE_LENGTH} colors."
                )
            self._sequence: Code = [Color(c) for c in sequence]
        else:
            self._sequence = self._source.draw(normalize_sequence_length(sequence_length))

        length = len(self._sequence)
        # Rows for every try are allocated up front; the cursors enforce bounds
        self._guesses: List[GuessRow] = [[None] * length for _ in range(MAX_TRIES)]
        self._clues: List[List[Clue]] = [[EMPTY_CLUE] * length for _ in range(MAX_TRIES)]

        self._current_try = 0
        self._current_slot = 0
        self._winner = False
        self._previous_try_score = 0
        self._latest_try_score = 0
        self._timer = GameTimer(clock)

        logger.debug("New game with sequence length %s (hard=%s)", length, hard)

    # --- Guess entry ---

    def add_guess(self, color: Color) -> bool:
        """Put a color in the next free slot of the current row."""
        # ValueError on an unknown code, before any state changes
        color = Color(color)

        if not self._timer.started:
            self._timer.start()
        elif self._timer.state == TimerState.PAUSED:
            # entering a color means the board is visible again
            self._timer.resume()
        self._timer.update()

        if self.is_over or self._current_slot >= self.sequence_length:
            self._emit(GameEvent.REJECTED)
            return False

        self._guesses[self._current_try][self._current_slot] = color
        self._current_slot += 1
        self._emit(GameEvent.ENTRY)
        return True

    def remove_last_guess(self) -> bool:
        if self.is_over or self._current_slot == 0:
            self._emit(GameEvent.REJECTED)
            return False

        self._current_slot -= 1
        self._guesses[self._current_try][self._current_slot] = None
        self._emit(GameEvent.BACKOUT)
        return True

    def submit_guess(self) -> bool:
        """Score the current row. Only a completely filled row can be submitted."""
        if self.is_over or self._current_slot != self.sequence_length:
            self._emit(GameEvent.REJECTED)
            return False

        self._calc_clues()
        self._current_try += 1
        self._current_slot = 0

        self._emit(GameEvent.GUESS)
        if self.try_progress < 0:
            self._emit(GameEvent.FEWER_CORRECT)

        if self._winner:
            logger.info("Game won in %s tries (%sms)", self._current_try, self._timer.elapsed_ms)
            self._emit(GameEvent.WIN)
        elif self.is_loser:
            logger.info("Game lost after %s tries (%sms)", self._current_try, self._timer.elapsed_ms)
            self._emit(GameEvent.LOSS)
        return True

    def _calc_clues(self) -> None:
        row = self._guesses[self._current_try]
        result = compute_clues(self._sequence, row)

        # Track whether this try is better than the last one
        self._previous_try_score = self._latest_try_score
        self._latest_try_score = try_score(result.correct_positions, result.correct_colors)

        if result.correct_positions == self.sequence_length:
            self._timer.stop()
            self._winner = True
        elif self._current_try + 1 >= MAX_TRIES:
            self._timer.stop()

        self._clues[self._current_try] = shuffle_clues(
            result.clues, result.correct_positions, result.correct_colors, self._source
        )
        logger.debug(
            "Try %s: %s correct position(s), %s correct color(s)",
            self._current_try + 1, result.correct_positions, result.correct_colors,
        )

    def _emit(self, event: GameEvent) -> None:
        if self._listener is not None:
            self._listener(event)

    # --- Visibility signals ---

    def pause(self) -> None:
        self._timer.pause()

    def resume(self) -> None:
        self._timer.resume()

    # --- Accessors ---

    @property
    def sequence_length(self) -> int:
        return len(self._sequence)

    @property
    def max_tries(self) -> int:
        return MAX_TRIES

    @property
    def current_try(self) -> int:
        return self._current_try

    @property
    def current_slot(self) -> int:
        return self._current_slot

    @property
    def is_winner(self) -> bool:
        return self._winner

    @property
    def is_loser(self) -> bool:
        return not self._winner and self._current_try >= MAX_TRIES

    @property
    def is_over(self) -> bool:
        return self._winner or self._current_try >= MAX_TRIES

    @property
    def elapsed_ms(self) -> int:
        return self._timer.elapsed_ms

    @property
    def timer_state(self) -> TimerState:
        return self._timer.state

    @property
    def try_progress(self) -> int:
        """Above 0: the latest row did better than the one before it."""
        return self._latest_try_score - self._previous_try_score

    def guess_color(self, row: int, slot: int) -> Optional[Color]:
        return self._guesses[row][slot]

    def has_guess_color(self, row: int, slot: int) -> bool:
        return self._guesses[row][slot] is not None

    def guess_row(self, row: int) -> GuessRow:
        return list(self._guesses[row])

    def clue(self, row: int, slot: int) -> Clue:
        if row >= self._current_try:
            return EMPTY_CLUE
        return self._clues[row][slot]

    def clue_row(self, row: int) -> List[Clue]:
        return [self.clue(row, slot) for slot in range(self.sequence_length)]

    def visible_clue(self, row: int, slot: int) -> Clue:
        """Hard mode keeps the clue kind but withholds its color."""
        found = self.clue(row, slot)
        if self.hard and found.kind != ClueKind.NONE:
            return Clue(found.kind)
        return found

    def has_clue_incorrect(self, row: int, slot: int) -> bool:
        """A submitted slot that earned no clue at all."""
        return row < self._current_try and self._clues[row][slot].kind == ClueKind.NONE

    def revealed_answer(self) -> Optional[Code]:
        if not self.is_over:
            return None
        return list(self._sequence)

    def answer(self) -> Code:
        """The hidden sequence, for history records. Displays use revealed_answer()."""
        return list(self._sequence)

    def answer_value(self) -> str:
        return ",".join(str(int(color)) for color in self._sequence)

    def answer_text(self) -> str:
        return answer_text(self._sequence)

    # --- Save / restore ---

    def snapshot(self) -> "GameSnapshot":
        return GameSnapshot(
            sequence=[int(c) for c in self._sequence],
            guesses=[[UNSELECTED if c is None else int(c) for c in row] for row in self._guesses],
            clues=[[[int(clue.kind), int(clue.color or UNSELECTED)] for clue in row] for row in self._clues],
            current_try=self._current_try,
            current_slot=self._current_slot,
            winner=self._winner,
            previous_try_score=self._previous_try_score,
            latest_try_score=self._latest_try_score,
            timer_state=self._timer.state.value,
            elapsed_ms=self._timer.elapsed_ms,
            hard=self.hard,
        )

    @classmethod
    def restore(
        cls,
        snapshot: "GameSnapshot",
        source: Optional[ColorSource] = None,
        listener: Optional[Listener] = None,
        clock: Optional[Clock] = None,
    ) -> "Game":
        game = cls(
            source=source,
            listener=listener,
            hard=snapshot.hard,
            clock=clock,
            sequence=[Color(c) for c in snapshot.sequence],
        )
        game._guesses = [[None if c == UNSELECTED else Color(c) for c in row] for row in snapshot.guesses]
        game._clues = [
            [Clue(ClueKind(kind), None if color == UNSELECTED else Color(color)) for kind, color in row]
            for row in snapshot.clues
        ]
        game._current_try = snapshot.current_try
        game._current_slot = snapshot.current_slot
        game._winner = snapshot.winner
        game._previous_try_score = snapshot.previous_try_score
        game._latest_try_score = snapshot.latest_try_score
        game._timer = GameTimer(clock, TimerState(snapshot.timer_state), snapshot.elapsed_ms)
        return game


def resume_saved_game(
    snapshot: "GameSnapshot",
    source: Optional[ColorSource] = None,
    listener: Optional[Listener] = None,
    clock: Optional[Clock] = None,
) -> Optional[Game]:
    """A finished game is never resumed; the caller starts a new one instead."""
    if snapshot.finished:
        logger.debug("Saved game already finished, not resuming")
        return None
    return Game.restore(snapshot, source=source, listener=listener, clock=clock)


def _strict_bool(value: Any, name: str) -> bool:
    # JSON booleans only
    if not isinstance(value, bool):
        raise ValueError(f"Snapshot field {name!r} must be a boolean, got {value!r}")
    return value


@dataclass
class GameSnapshot:
    """
    Versioned, plain-data copy of a game.
    Colors are stored as their ordinals, 0 = unselected. Clues are
    [kind, color] pairs. The timer's resume timestamp is deliberately absent.
    """
    sequence: List[int]
    guesses: List[List[int]]
    clues: List[List[List[int]]]
    current_try: int = 0
    current_slot: int = 0
    winner: bool = False
    previous_try_score: int = 0
    latest_try_score: int = 0
    timer_state: str = TimerState.NOT_STARTED.value
    elapsed_ms: int = 0
    hard: bool = False
    version: int = SNAPSHOT_VERSION

    @property
    def finished(self) -> bool:
        return self.winner or self.current_try >= MAX_TRIES

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameSnapshot":
        try:
            version = data.get("version")
            if version != SNAPSHOT_VERSION:
                raise ValueError(f"Unsupported snapshot version: {version!r}")

            snapshot = cls(
                sequence=[int(c) for c in data["sequence"]],
                guesses=[[int(c) for c in row] for row in data["guesses"]],
                clues=[[[int(kind), int(color)] for kind, color in row] for row in data["clues"]],
                current_try=int(data["current_try"]),
                current_slot=int(data["current_slot"]),
                winner=_strict_bool(data["winner"], "winner"),
                previous_try_score=int(data["previous_try_score"]),
                latest_try_score=int(data["latest_try_score"]),
                timer_state=str(data["timer_state"]),
                elapsed_ms=int(data["elapsed_ms"]),
                hard=_strict_bool(data.get("hard", False), "hard"),
                version=version,
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValueError(f"Malformed game snapshot: {exc}") from exc

        snapshot._validate()
        return snapshot

    def _validate(self) -> None:
        length = len(self.sequence)
        if not MINIMUM_SEQUENCE_LENGTH <= length <= MAXIMUM_SEQUENCE_LENGTH:
            raise ValueError(f"Snapshot sequence length {length} is out of range.")
        if len(self.guesses) != MAX_TRIES or len(self.clues) != MAX_TRIES:
            raise ValueError(f"Snapshot must hold {MAX_TRIES} rows of guesses and clues.")
        if any(len(row) != length for row in self.guesses) or any(len(row) != length for row in self.clues):
            raise ValueError("Snapshot rows do not match the sequence length.")
        if not 0 <= self.current_try <= MAX_TRIES or not 0 <= self.current_slot <= length:
            raise ValueError("Snapshot cursors are out of range.")
        if self.elapsed_ms < 0:
            raise ValueError("Snapshot elapsed time is negative.")

        # Raise ValueError on unknown codes
        for code in self.sequence:
            Color(code)
        for row in self.guesses:
            for code in row:
                if code != UNSELECTED:
                    Color(code)
        for row in self.clues:
            for kind, code in row:
                ClueKind(kind)
                if code != UNSELECTED:
                    Color(code)
        TimerState(self.timer_state)
