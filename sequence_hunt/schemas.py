"""
Explicit validation & Pydantic models
- Defines the structure of API requests and responses.
- Colors travel as lowercase names ("red", "green", ...).
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .types import Color

ColorName = Literal["red", "green", "blue", "yellow", "white", "black"]
ClueName = Literal["none", "color_correct", "position_correct"]


def color_to_name(color: Optional[Color]) -> Optional[str]:
    return None if color is None else Color(color).name.lower()


def name_to_color(name: str) -> Color:
    return Color[name.upper()]


# 1. Player adds a color to the current row
class ColorRequest(BaseModel):
    color: ColorName = Field(..., description="Color to place in the next free slot")

    @field_validator("color", mode="before")
    @classmethod
    def lower_case(cls, value):
        return value.lower() if isinstance(value, str) else value

    model_config = {
        "json_schema_extra": {
            "examples": [{"color": "red"}, {"color": "black"}]
        }
    }


# 2. One clue peg
class ClueOut(BaseModel):
    kind: ClueName = Field(..., description="Clue type")
    color: Optional[ColorName] = Field(None, description="Color the clue refers to (hidden in hard mode)")


# 3. One row on the board
class RowOut(BaseModel):
    guess: List[Optional[ColorName]] = Field(..., description="Guessed colors, null = empty slot")
    clues: List[ClueOut] = Field(..., description="Clues for a submitted row, all 'none' otherwise")


# 4. Represents the overall state of the game
class GameStateOut(BaseModel):
    game_id: str = Field(..., description="Unique ID for the game")
    sequence_length: int = Field(..., description="Number of colors in the hidden sequence")
    max_tries: int = Field(..., description="How many rows may be submitted")
    current_try: int = Field(..., description="Rows submitted so far")
    current_slot: int = Field(..., description="Slots filled in the current row")
    hard: bool = Field(..., description="Hard mode hides clue colors")
    status: Literal["in_progress", "won", "lost"] = Field(..., description="Current state of the game")
    elapsed_ms: int = Field(..., description="Active play time in milliseconds")
    elapsed: str = Field(..., description="Active play time as HH:MM:SS")
    try_progress: int = Field(..., description="Latest row score minus the previous row score")
    rows: List[RowOut] = Field(..., description="Submitted rows plus the row being filled")
    answer: Optional[List[ColorName]] = Field(None, description="The sequence (only revealed once the game is over)")
    answer_text: Optional[str] = Field(None, description="Readable sequence (only once the game is over)")


class QuitResponse(BaseModel):
    recorded: bool = Field(..., description="True when the game was added to the history as a quit")
    note: str


# 5. Statistics snapshot
class StatsOut(BaseModel):
    games: int = Field(..., description="Games counted (wins + losses + quits)")
    wins: int
    losses: int
    quits: int
    easy: int = Field(..., description="Games played in normal mode")
    hard: int = Field(..., description="Games played in hard mode")
    total_tries: int
    total_win_ms: int
    total_lose_ms: int
    average_tries: int = Field(..., description="Floored; 0 when no games")
    average_win_ms: int = Field(..., description="Floored; 0 when no wins")
    average_lose_ms: int = Field(..., description="Floored; 0 when no losses")
    color_counts: Dict[ColorName, int] = Field(..., description="How often each color appeared in sequences")
    error: Optional[str] = Field(None, description="Set when the history could not be parsed")
