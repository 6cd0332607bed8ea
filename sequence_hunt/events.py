"""
Game events and the sound service.

The game never plays anything itself. It calls a listener with a
GameEvent; the host decides what that means. SoundManager is one such
listener: configured once with an event -> sound mapping, switched on or
off, and handed a player callable that does the real playback.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


class GameEvent(str, Enum):
    ENTRY = "entry"                  # a color was accepted into the row
    BACKOUT = "backout"              # the last color was removed
    GUESS = "guess"                  # a row was submitted
    FEWER_CORRECT = "fewer_correct"  # the new row scored below the previous one
    REJECTED = "rejected"            # row full, nothing to remove, row incomplete, game over
    WIN = "win"
    LOSS = "loss"


Listener = Callable[[GameEvent], None]
Player = Callable[[str], None]

# Sound resources shipped with the original game
DEFAULT_SOUNDS: Dict[GameEvent, str] = {
    GameEvent.ENTRY: "entry",
    GameEvent.BACKOUT: "backout",
    GameEvent.GUESS: "guess",
    GameEvent.FEWER_CORRECT: "fewercorrect",
    GameEvent.REJECTED: "fewercorrect",
}


class SoundManager:
    def __init__(self, player: Optional[Player] = None, enabled: bool = False) -> None:
        self._player = player
        self._enabled = enabled
        self._sounds: Optional[Dict[GameEvent, str]] = None

    def configure(self, sounds: Dict[GameEvent, str]) -> None:
        if self._sounds is not None:
            raise RuntimeError("SoundManager is already configured.")
        self._sounds = dict(sounds)
        logger.debug("Sounds configured for %s", sorted(e.value for e in self._sounds))

    @property
    def configured(self) -> bool:
        return self._sounds is not None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = bool(value)

    def play(self, event: GameEvent) -> bool:
        """Returns True when a sound was handed to the player."""
        if not self._enabled or self._player is None or not self._sounds:
            return False
        sound = self._sounds.get(event)
        if sound is None:
            return False
        self._player(sound)
        return True

    # lets the manager be passed straight to Game(listener=...)
    def __call__(self, event: GameEvent) -> None:
        self.play(event)
