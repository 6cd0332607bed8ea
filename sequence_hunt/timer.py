"""
Game timer.

Only time while the game is actually visible counts:

    NOT_STARTED --start--> RUNNING --pause--> PAUSED --resume--> RUNNING
    RUNNING/PAUSED --stop--> ENDED   (final)

The last-resume timestamp is never saved. A timer restored while running
comes back PAUSED and waits for the host to resume it.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class TimerState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    PAUSED = "paused"
    ENDED = "ended"


class GameTimer:
    def __init__(self, clock: Optional[Clock] = None, state: TimerState = TimerState.NOT_STARTED,
                 elapsed_ms: int = 0) -> None:
        self._clock = clock or monotonic_ms
        self._elapsed_ms = elapsed_ms
        self._last_resume: Optional[int] = None
        # A running timer cannot be rebuilt without its resume timestamp
        if state == TimerState.RUNNING:
            state = TimerState.PAUSED
        self._state = state

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def started(self) -> bool:
        return self._state != TimerState.NOT_STARTED

    @property
    def elapsed_ms(self) -> int:
        """Elapsed play time, brought up to date first when running."""
        self.update()
        return self._elapsed_ms

    def start(self) -> None:
        if self._state == TimerState.NOT_STARTED:
            self._state = TimerState.RUNNING
            self._last_resume = self._clock()
            logger.debug("Timer started at %s", self._last_resume)

    def update(self) -> None:
        if self._state == TimerState.RUNNING and self._last_resume is not None:
            now = self._clock()
            self._elapsed_ms += now - self._last_resume
            self._last_resume = now

    def pause(self) -> None:
        if self._state == TimerState.RUNNING:
            self.update()
            self._state = TimerState.PAUSED
            self._last_resume = None
            logger.debug("Timer paused, elapsed=%sms", self._elapsed_ms)

    def resume(self) -> None:
        if self._state == TimerState.PAUSED:
            self._state = TimerState.RUNNING
            self._last_resume = self._clock()
            logger.debug("Timer resumed, elapsed=%sms", self._elapsed_ms)

    def stop(self) -> None:
        if self._state in (TimerState.RUNNING, TimerState.PAUSED):
            self.update()
            self._state = TimerState.ENDED
            self._last_resume = None
            logger.debug("Timer stopped, elapsed=%sms", self._elapsed_ms)
