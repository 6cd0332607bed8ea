"""
Testing one game: entry contract, win/loss, timer, events, save/restore.
"""

import pytest

from conftest import FakeClock, FixedColorSource
from sequence_hunt.color_source import ColorSource
from sequence_hunt.engine import Clue
from sequence_hunt.events import GameEvent
from sequence_hunt.game import (
    DEFAULT_SEQUENCE_LENGTH,
    MAX_TRIES,
    Game,
    GameSnapshot,
    resume_saved_game,
)
from sequence_hunt.timer import TimerState
from sequence_hunt.types import ClueKind, Color

R, G, B, Y, W, K = Color.RED, Color.GREEN, Color.BLUE, Color.YELLOW, Color.WHITE, Color.BLACK


def enter_row(game, colors):
    for color in colors:
        assert game.add_guess(color)


def play_row(game, colors):
    enter_row(game, colors)
    return game.submit_guess()


@pytest.mark.parametrize("length", [4, 5, 6, 7, 8])
def test_new_game_for_valid_lengths(length):
    game = Game(length, source=ColorSource(seed=length))

    assert game.sequence_length == length
    assert len(game.answer()) == length
    assert game.current_try == 0
    assert game.is_winner is False
    assert game.is_loser is False
    assert game.timer_state == TimerState.NOT_STARTED


@pytest.mark.parametrize("length", [-1, 0, 3, 9, 100, "6", None, True])
def test_invalid_length_falls_back_to_default(length):
    game = Game(length, source=ColorSource(seed=1))

    assert game.sequence_length == DEFAULT_SEQUENCE_LENGTH


def test_add_and_remove_guess(clock):
    game = Game(sequence=[R, G, B, Y], clock=clock)

    assert game.remove_last_guess() is False
    assert game.add_guess(W)
    assert game.add_guess(K)
    assert game.guess_row(0) == [W, K, None, None]

    assert game.remove_last_guess()
    assert game.current_slot == 1
    assert game.has_guess_color(0, 1) is False
    assert game.guess_color(0, 0) == W


def test_unknown_color_code_changes_nothing(clock):
    game = Game(sequence=[R, R, R, R], clock=clock)

    with pytest.raises(ValueError):
        game.add_guess(9)

    assert game.timer_state == TimerState.NOT_STARTED
    assert game.current_slot == 0
    assert game.guess_row(0) == [None] * 4


def test_row_full_and_incomplete_submit_are_rejected(clock):
    game = Game(sequence=[R, G, B, Y], clock=clock)

    enter_row(game, [W, W, W])
    assert game.submit_guess() is False
    assert game.current_try == 0

    assert game.add_guess(W)
    assert game.add_guess(K) is False
    assert game.guess_row(0) == [W, W, W, W]


def test_winning_row():
    game = Game(sequence=[R, R, B, G], source=ColorSource(seed=2), clock=FakeClock())

    assert play_row(game, [R, R, B, G])
    assert game.is_winner
    assert game.is_loser is False
    assert [clue.kind for clue in game.clue_row(0)] == [ClueKind.POSITION_CORRECT] * 4
    assert game.revealed_answer() == [R, R, B, G]
    assert game.answer_text() == "Red, Red, Blue, Green"
    assert game.answer_value() == "1,1,3,2"

    # Terminal: nothing else is accepted
    assert game.add_guess(R) is False
    assert game.remove_last_guess() is False
    assert game.submit_guess() is False
    assert game.current_try == 1


def test_example_row_clues():
    game = Game(sequence=[R, R, B, G], source=ColorSource(seed=4), clock=FakeClock())

    assert play_row(game, [R, B, R, Y])
    row = game.clue_row(0)

    assert [clue.kind for clue in row] == [
        ClueKind.POSITION_CORRECT, ClueKind.COLOR_CORRECT, ClueKind.COLOR_CORRECT, ClueKind.NONE,
    ]
    assert row[0].color == R
    assert sorted([row[1].color, row[2].color]) == sorted([R, B])
    assert game.has_clue_incorrect(0, 3)
    assert game.has_clue_incorrect(0, 0) is False


def test_ten_misses_lose_and_eleventh_is_rejected(clock):
    game = Game(sequence=[R, R, R, R], clock=clock)

    for _ in range(MAX_TRIES):
        assert game.is_loser is False
        assert play_row(game, [G, G, G, G])

    assert game.is_loser
    assert game.is_winner is False
    assert game.revealed_answer() == [R, R, R, R]

    before = game.snapshot().to_dict()
    assert game.add_guess(G) is False
    assert game.submit_guess() is False
    assert game.snapshot().to_dict() == before


def test_last_row_still_gets_color_clues(clock):
    game = Game(sequence=[R, G, B, Y], clock=clock)
    for _ in range(MAX_TRIES - 1):
        play_row(game, [W, W, W, W])

    assert play_row(game, [G, R, W, W])
    assert game.is_loser
    kinds = [clue.kind for clue in game.clue_row(MAX_TRIES - 1)]
    assert kinds.count(ClueKind.COLOR_CORRECT) == 2


def test_answer_hidden_while_playing(clock):
    game = Game(sequence=[R, G, B, Y], clock=clock)
    play_row(game, [W, W, W, W])

    assert game.revealed_answer() is None


def test_unsubmitted_rows_have_no_clues(clock):
    game = Game(sequence=[R, G, B, Y], clock=clock)
    enter_row(game, [R, G, B, Y])

    assert game.clue_row(0) == [Clue()] * 4


def test_hard_mode_hides_clue_colors(clock):
    game = Game(sequence=[R, G, B, Y], hard=True, clock=clock)
    play_row(game, [R, B, W, W])

    visible = [game.visible_clue(0, slot) for slot in range(4)]
    assert [c.kind for c in visible] == [
        ClueKind.POSITION_CORRECT, ClueKind.COLOR_CORRECT, ClueKind.NONE, ClueKind.NONE,
    ]
    assert all(c.color is None for c in visible)
    # the real clue still carries its color
    assert game.clue(0, 0).color == R


def test_try_progress_and_fewer_correct_event(clock):
    events = []
    game = Game(sequence=[R, G, B, Y], listener=events.append, clock=clock)

    play_row(game, [R, G, W, W])   # 20
    assert game.try_progress == 20
    play_row(game, [R, W, W, G])   # 11
    assert game.try_progress == -9
    assert events.count(GameEvent.FEWER_CORRECT) == 1


def test_events_emitted(clock):
    events = []
    game = Game(sequence=[R, G, B, Y], listener=events.append, clock=clock)

    game.remove_last_guess()
    enter_row(game, [R, G, B])
    game.remove_last_guess()
    enter_row(game, [B, Y])
    game.submit_guess()

    assert events == [
        GameEvent.REJECTED,
        GameEvent.ENTRY, GameEvent.ENTRY, GameEvent.ENTRY,
        GameEvent.BACKOUT,
        GameEvent.ENTRY, GameEvent.ENTRY,
        GameEvent.GUESS,
        GameEvent.WIN,
    ]


def test_loss_event(clock):
    events = []
    game = Game(sequence=[R, R, R, R], listener=events.append, clock=clock)
    for _ in range(MAX_TRIES):
        play_row(game, [G, G, G, G])

    assert events[-1] == GameEvent.LOSS
    assert GameEvent.WIN not in events


# --- Timer ---

def test_timer_starts_on_first_guess(clock):
    game = Game(sequence=[R, G, B, Y], clock=clock)
    clock.advance(5_000)
    assert game.elapsed_ms == 0

    game.add_guess(R)
    clock.advance(1_500)
    assert game.elapsed_ms == 1_500


def test_paused_time_is_not_counted(clock):
    game = Game(sequence=[R, G, B, Y], clock=clock)
    game.add_guess(R)
    clock.advance(1_000)

    game.pause()
    clock.advance(60_000)
    game.resume()

    assert game.elapsed_ms == 1_000
    clock.advance(250)
    assert game.elapsed_ms == 1_250


def test_adding_a_color_while_paused_resumes(clock):
    game = Game(sequence=[R, G, B, Y], clock=clock)
    game.add_guess(R)
    game.pause()
    clock.advance(10_000)

    game.add_guess(G)
    clock.advance(400)
    assert game.timer_state == TimerState.RUNNING
    assert game.elapsed_ms == 400


def test_timer_frozen_after_win(clock):
    game = Game(sequence=[R, G, B, Y], clock=clock)
    enter_row(game, [R, G, B, Y])
    clock.advance(2_000)
    game.submit_guess()

    assert game.timer_state == TimerState.ENDED
    clock.advance(9_000)
    game.resume()
    game.pause()
    assert game.elapsed_ms == 2_000


def test_timer_frozen_after_loss(clock):
    game = Game(sequence=[R, R, R, R], clock=clock)
    for _ in range(MAX_TRIES):
        enter_row(game, [G, G, G, G])
        clock.advance(100)
        game.submit_guess()

    assert game.elapsed_ms == 1_000
    clock.advance(5_000)
    assert game.elapsed_ms == 1_000


# --- Save / restore ---

def test_snapshot_round_trip_keeps_board(clock):
    game = Game(sequence=[R, G, B, Y, K], source=FixedColorSource([]), hard=True, clock=clock)
    play_row(game, [R, B, W, W, K])
    enter_row(game, [Y, Y])
    clock.advance(3_000)

    data = game.snapshot().to_dict()
    assert data["version"] == 1
    assert data["timer_state"] == "running"

    restored = Game.restore(GameSnapshot.from_dict(data), clock=clock)

    assert restored.answer() == [R, G, B, Y, K]
    assert restored.current_try == 1
    assert restored.current_slot == 2
    assert restored.guess_row(0) == [R, B, W, W, K]
    assert restored.guess_row(1) == [Y, Y, None, None, None]
    assert restored.clue_row(0) == game.clue_row(0)
    assert restored.hard is True
    # resume timestamp is not saved: comes back paused
    assert restored.timer_state == TimerState.PAUSED
    clock.advance(10_000)
    assert restored.elapsed_ms == 3_000
    restored.resume()
    clock.advance(500)
    assert restored.elapsed_ms == 3_500


def test_finished_game_is_not_resumed(clock):
    game = Game(sequence=[R, G, B, Y], clock=clock)
    play_row(game, [R, G, B, Y])

    assert resume_saved_game(game.snapshot()) is None


def test_unfinished_game_is_resumed(clock):
    game = Game(sequence=[R, G, B, Y], clock=clock)
    play_row(game, [W, W, W, W])

    resumed = resume_saved_game(game.snapshot(), clock=clock)
    assert resumed is not None
    assert resumed.current_try == 1


@pytest.mark.parametrize("mutate", [
    lambda d: d.update(version=99),
    lambda d: d.pop("sequence"),
    lambda d: d.update(sequence=[1, 2, 3]),
    lambda d: d.update(sequence=[1, 2, 3, 9]),
    lambda d: d.update(current_try=11),
    lambda d: d.update(timer_state="sleeping"),
    lambda d: d["guesses"].pop(),
    lambda d: d.update(winner="false"),
    lambda d: d.update(winner=1),
    lambda d: d.update(hard="yes"),
])
def test_bad_snapshots_are_rejected(mutate, clock):
    data = Game(sequence=[R, G, B, Y], clock=clock).snapshot().to_dict()
    mutate(data)

    with pytest.raises(ValueError):
        GameSnapshot.from_dict(data)
