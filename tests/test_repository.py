from conftest import FakeClock
from sequence_hunt.game import Game, MAX_TRIES
from sequence_hunt.models import SavedGame
from sequence_hunt.repository import DBGameRepository
from sequence_hunt.statistics import StatisticsLog
from sequence_hunt.types import Color

R, G, B, Y, W = Color.RED, Color.GREEN, Color.BLUE, Color.YELLOW, Color.WHITE


def test_save_and_load_unfinished_game(db_session):
    repo = DBGameRepository(db_session)
    clock = FakeClock()

    game = Game(sequence=[R, G, B, Y], clock=clock)
    for color in (W, W, W, W):
        game.add_guess(color)
    game.submit_guess()
    game.add_guess(R)
    clock.advance(1_200)
    game.pause()

    repo.save_game("g-1", game)
    loaded = repo.load_game("g-1")

    assert loaded is not None
    assert loaded.answer() == [R, G, B, Y]
    assert loaded.current_try == 1
    assert loaded.guess_row(1)[0] == R
    assert loaded.elapsed_ms == 1_200


def test_finished_game_is_not_loaded(db_session):
    repo = DBGameRepository(db_session)
    game = Game(sequence=[R, G, B, Y], clock=FakeClock())
    for _ in range(MAX_TRIES):
        for color in (W, W, W, W):
            game.add_guess(color)
        game.submit_guess()

    repo.save_game("g-2", game)

    assert repo.load_game("g-2") is None
    assert repo.load_game("missing") is None


def test_corrupt_snapshot_is_treated_as_missing(db_session):
    db_session.add(SavedGame(id="g-3", snapshot={"version": 1, "sequence": "oops"}, hard=False))
    db_session.commit()

    assert DBGameRepository(db_session).load_game("g-3") is None


def test_delete_game(db_session):
    repo = DBGameRepository(db_session)
    repo.save_game("g-4", Game(sequence=[R, G, B, Y]))

    repo.delete_game("g-4")

    assert repo.load_game("g-4") is None


def test_history_append_evict_and_load(db_session):
    repo = DBGameRepository(db_session)
    log = StatisticsLog(capacity=3)

    for _ in range(5):
        record = log.add_record(Game(sequence=[R, R, G, G]), outcome="Quit")
        repo.append_history(record.to_csv_line(), log.game_count, capacity=3)

    loaded = repo.load_history(capacity=3)

    assert loaded.lines() == log.lines()
    assert loaded.game_count == 5
    assert [r.sequence_number for r in loaded.records()] == [3, 4, 5]
    assert loaded.snapshot() == log.snapshot()


def test_clear_history_keeps_counter(db_session):
    repo = DBGameRepository(db_session)
    repo.append_history("1,'false',0,0,1,1,1,1,'Quit'", 1)

    repo.clear_history()
    loaded = repo.load_history()

    assert len(loaded) == 0
    assert loaded.game_count == 1
