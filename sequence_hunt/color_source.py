"""
Random colors for the hidden sequence and for the clue shuffle.

The generator is injected so tests can seed it. Without a seed we fall
back to the OS-backed SystemRandom, same idea as the secure fallback the
game has always used.
"""

import logging
import random
from typing import List, MutableSequence, Optional

from .types import Code, Color, PALETTE

logger = logging.getLogger(__name__)


class ColorSource:
    """Uniform picks from the 6-color palette."""

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None) -> None:
        if rng is not None:
            self._rng = rng
        elif seed is not None:
            self._rng = random.Random(seed)
        else:
            self._rng = random.SystemRandom()

    def pick(self) -> Color:
        return PALETTE[self._rng.randrange(len(PALETTE))]

    def draw(self, length: int) -> Code:
        # Independent picks: duplicates are legal and expected
        colors: List[Color] = []
        k = 0
        while k < length:
            colors.append(self.pick())
            k += 1
        return colors

    def shuffle(self, items: MutableSequence) -> None:
        self._rng.shuffle(items)


def make_color_source(seed: Optional[int] = None) -> ColorSource:
    if seed is not None:
        logger.debug("Using seeded color source (seed=%s)", seed)
    return ColorSource(seed=seed)
