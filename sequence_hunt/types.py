"""
Labels for clarity.

Colors keep fixed ordinals (1..6) because the statistics history and saved
games store them as numbers. 0 is reserved for an unselected slot.
"""

from enum import IntEnum
from typing import List, Literal, Optional


class Color(IntEnum):
    RED = 1
    GREEN = 2
    BLUE = 3
    YELLOW = 4
    WHITE = 5
    BLACK = 6


class ClueKind(IntEnum):
    # NONE must stay 0, it is the value of a fresh clue slot
    NONE = 0
    COLOR_CORRECT = 1      # right color, wrong position
    POSITION_CORRECT = 2   # right color, right position


UNSELECTED = 0

PALETTE: List[Color] = list(Color)

Code = List[Color]  # the hidden sequence, 4 -> 8 colors
GuessRow = List[Optional[Color]]
Outcome = Literal["Win", "Lose", "Quit", "Unknown"]
