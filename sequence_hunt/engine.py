"""
Pure clue logic (no timer, no storage, no events).

For each submitted row we emit up to L clues:
- POSITION_CORRECT: the color is right and in the right slot
- COLOR_CORRECT: the color is in the sequence but at another unmatched slot

Clues come back as one list: all exact clues first, then the color-only
clues, then NONE for whatever is left. Duplicates are allowed in both the
sequence and the guess, each sequence slot is matched at most once.
"""

from dataclasses import dataclass
from typing import List, Optional

from .types import ClueKind, Code, Color, GuessRow, UNSELECTED

SCORE_PER_CORRECT_POSITION = 10


@dataclass(frozen=True)
class Clue:
    kind: ClueKind = ClueKind.NONE
    color: Optional[Color] = None


EMPTY_CLUE = Clue()


@dataclass
class ClueResult:
    clues: List[Clue]
    correct_positions: int
    correct_colors: int


def compute_clues(sequence: Code, guess: GuessRow) -> ClueResult:
    """
    Example:
      sequence = [RED, RED, BLUE, GREEN]
      guess    = [RED, BLUE, RED, YELLOW]
      slot 0 is an exact match (RED)
      sequence slot 1 (RED) finds guess slot 2, sequence slot 2 (BLUE) finds
      guess slot 1, sequence slot 3 (GREEN) finds nothing
      -> 1 POSITION_CORRECT, 2 COLOR_CORRECT, 1 NONE
    """

    # 0. Validate lengths match
    n = len(sequence)
    if n == 0 or len(guess) != n:
        raise ValueError("Sequence and guess must be the same non-zero length.")

    clues: List[Clue] = []

    # Scratch copy of the guess; consumed slots are zeroed out
    scratch = [UNSELECTED if color is None else int(color) for color in guess]

    # 1. Exact matches -> correct_positions
    correct_positions = 0
    i = 0
    while i < n:
        if scratch[i] == sequence[i]:
            clues.append(Clue(ClueKind.POSITION_CORRECT, sequence[i]))
            scratch[i] = UNSELECTED
            correct_positions += 1
        i += 1

    # 2. Color-only matches for the sequence slots left over.
    #    First unconsumed scratch entry wins.
    correct_colors = 0
    if correct_positions < n:
        for i, wanted in enumerate(sequence):
            if guess[i] == wanted:
                continue
            for j, candidate in enumerate(scratch):
                if candidate == wanted:
                    clues.append(Clue(ClueKind.COLOR_CORRECT, wanted))
                    scratch[j] = UNSELECTED
                    correct_colors += 1
                    break

    # 3. Pad with "no clue"
    while len(clues) < n:
        clues.append(EMPTY_CLUE)

    return ClueResult(clues=clues, correct_positions=correct_positions, correct_colors=correct_colors)


def try_score(correct_positions: int, correct_colors: int) -> int:
    """Relative score of a row, only used to tell better/same/worse."""
    return SCORE_PER_CORRECT_POSITION * correct_positions + correct_colors


def shuffle_clues(clues: List[Clue], correct_positions: int, correct_colors: int, source) -> List[Clue]:
    """
    Shuffle which color sits on which clue, separately inside the exact block
    and inside the color-only block. Kinds never move.

    Without this the order of the exact clues would tell the player which of
    their guessed positions is the locked-in one.
    """
    shuffled = list(clues)

    blocks = (
        (0, correct_positions),
        (correct_positions, correct_positions + correct_colors),
    )
    for start, end in blocks:
        if end - start <= 1:
            continue
        colors = [clue.color for clue in shuffled[start:end]]
        source.shuffle(colors)
        for offset, color in enumerate(colors):
            shuffled[start + offset] = Clue(shuffled[start + offset].kind, color)

    return shuffled

