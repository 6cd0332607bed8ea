"""
Text helpers for the host: timer display and the revealed answer.
"""

from datetime import datetime, timezone
from typing import Iterable

from .types import Color

COLOR_NAMES = {
    Color.RED: "Red",
    Color.GREEN: "Green",
    Color.BLUE: "Blue",
    Color.YELLOW: "Yellow",
    Color.WHITE: "White",
    Color.BLACK: "Black",
}


def format_timer(milliseconds: int) -> str:
    """
    HH:MM:SS on a UTC clock face, so it wraps back to 00:00:00 after a day.
      format_timer(3723000) -> "01:02:03"
    """
    moment = datetime.fromtimestamp(max(milliseconds, 0) / 1000, tz=timezone.utc)
    return moment.strftime("%H:%M:%S")


def color_name(color) -> str:
    try:
        return COLOR_NAMES[Color(color)]
    except ValueError:
        return f"Unknown ({color})"


def answer_text(colors: Iterable) -> str:
    return ", ".join(color_name(c) for c in colors)
