'''
Sequence Hunt API

Endpoints:
POST   /games                      -> start a game (?length=4..8&hard=false)
GET    /games/{id}                 -> board, clues, timer
POST   /games/{id}/colors          -> add a color to the current row
DELETE /games/{id}/colors/last     -> take the last color back
POST   /games/{id}/submit          -> submit the current row
POST   /games/{id}/pause           -> stop the clock (game saved)
POST   /games/{id}/resume          -> start the clock again
POST   /games/{id}/quit            -> abandon the game (recorded as a quit)

Statistics:
GET  /stats                        -> snapshot of the history
GET  /stats/history                -> raw history as CSV text
POST /stats/reset                  -> clear the history

Live games are kept in memory; paused games and the history are saved
through the DB repository.
'''

import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from . import config
from .bootstrap_db import create_all    # dev-only: create tables
from .color_source import make_color_source
from .db import get_db
from .events import DEFAULT_SOUNDS, SoundManager
from .formatting import answer_text, format_timer
from .repository import DBGameRepository
from .schemas import (
    ClueOut,
    ColorRequest,
    GameStateOut,
    QuitResponse,
    RowOut,
    StatsOut,
    color_to_name,
    name_to_color,
)
from .statistics import StatisticsLog, StatisticsSnapshot
from .store import GameStore, LiveGame

settings = config.get_settings()
config.configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def _log_sound(sound: str) -> None:
    # no speakers on a server; the client plays sounds itself
    logger.debug("sound: %s", sound)


sounds = SoundManager(player=_log_sound, enabled=settings.SOUND_ENABLED)
sounds.configure(DEFAULT_SOUNDS)

store = GameStore(
    source=make_color_source(settings.RANDOM_SEED),
    log=StatisticsLog(capacity=settings.STATS_CAPACITY),
    listener=sounds,
)

app = FastAPI(title="Sequence Hunt API", version="1.0.0")

# Allow everything in dev so the docs and a local front-end work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# --- Dev convenience: auto-create tables locally ---
if settings.APP_ENV == "local":
    @app.on_event("startup")
    def _dev_create_tables():
        create_all()


# Small factories so routes get a per-request repository (bound to the current DB session)
def get_repository(session=Depends(get_db)) -> DBGameRepository:
    return DBGameRepository(session)


def get_store(repo: DBGameRepository = Depends(get_repository)) -> GameStore:
    # First request pulls the saved history into memory
    if not store.history_loaded:
        store.load_history(repo.load_history(capacity=store.log.capacity))
    return store


# ---------------- Helpers ----------------

def _status(live: LiveGame) -> str:
    if live.game.is_winner:
        return "won"
    if live.game.is_loser:
        return "lost"
    return "in_progress"


def _to_state(live: LiveGame) -> GameStateOut:
    game = live.game
    visible_rows = game.current_try if game.is_over else game.current_try + 1

    rows = []
    for row in range(visible_rows):
        rows.append(RowOut(
            guess=[color_to_name(c) for c in game.guess_row(row)],
            clues=[
                ClueOut(kind=clue.kind.name.lower(), color=color_to_name(clue.color))
                for clue in (game.visible_clue(row, slot) for slot in range(game.sequence_length))
            ],
        ))

    answer = game.revealed_answer()
    elapsed = game.elapsed_ms
    return GameStateOut(
        game_id=live.id,
        sequence_length=game.sequence_length,
        max_tries=game.max_tries,
        current_try=game.current_try,
        current_slot=game.current_slot,
        hard=game.hard,
        status=_status(live),
        elapsed_ms=elapsed,
        elapsed=format_timer(elapsed),
        try_progress=game.try_progress,
        rows=rows,
        answer=[color_to_name(c) for c in answer] if answer else None,
        answer_text=answer_text(answer) if answer else None,
    )


def _to_stats(snapshot: StatisticsSnapshot) -> StatsOut:
    return StatsOut(
        games=snapshot.games,
        wins=snapshot.wins,
        losses=snapshot.losses,
        quits=snapshot.quits,
        easy=snapshot.easy,
        hard=snapshot.hard,
        total_tries=snapshot.total_tries,
        total_win_ms=snapshot.total_win_ms,
        total_lose_ms=snapshot.total_lose_ms,
        average_tries=snapshot.average_tries,
        average_win_ms=snapshot.average_win_ms,
        average_lose_ms=snapshot.average_lose_ms,
        color_counts={color_to_name(c): n for c, n in snapshot.color_counts.items()},
        error=snapshot.error,
    )


def _find_live(game_id: str, store: GameStore, repo: DBGameRepository) -> LiveGame:
    live = store.get(game_id)
    if live is None:
        # Maybe a paused game saved before a restart
        restored = repo.load_game(game_id, source=store.source, listener=store.listener)
        if restored is None:
            raise HTTPException(status_code=404, detail="Game not found")
        live = store.adopt(game_id, restored)
    return live


def _record_if_finished(live: LiveGame, store: GameStore, repo: DBGameRepository) -> None:
    if live.record is not None:
        repo.append_history(live.record.to_csv_line(), store.log.game_count, store.log.capacity)
        repo.delete_game(live.id)


# ---------------- Routes ----------------

@app.post("/games", response_model=GameStateOut, summary="Start a new game")
def start_game(
    length: Optional[int] = None,
    hard: bool = False,
    store: GameStore = Depends(get_store),
) -> GameStateOut:
    """
    length: 4..8 colors; anything else falls back to 4.
    hard: clue colors are withheld, only the clue kinds are shown.
    """
    live = store.create(settings.SEQUENCE_LENGTH if length is None else length, hard=hard)
    return _to_state(live)


@app.get("/games/{game_id}", response_model=GameStateOut, summary="Get current game state")
def get_game(
    game_id: str,
    store: GameStore = Depends(get_store),
    repo: DBGameRepository = Depends(get_repository),
) -> GameStateOut:
    return _to_state(_find_live(game_id, store, repo))


@app.post("/games/{game_id}/colors", response_model=GameStateOut, summary="Add a color to the current row")
def add_color(
    game_id: str,
    payload: ColorRequest,
    store: GameStore = Depends(get_store),
    repo: DBGameRepository = Depends(get_repository),
) -> GameStateOut:
    live = _find_live(game_id, store, repo)
    if not store.add_color(game_id, name_to_color(payload.color)):
        raise HTTPException(status_code=409, detail="Row is full or the game is over.")
    return _to_state(live)


@app.delete("/games/{game_id}/colors/last", response_model=GameStateOut, summary="Remove the last color")
def remove_color(
    game_id: str,
    store: GameStore = Depends(get_store),
    repo: DBGameRepository = Depends(get_repository),
) -> GameStateOut:
    live = _find_live(game_id, store, repo)
    if not store.remove_last(game_id):
        raise HTTPException(status_code=409, detail="Nothing to remove.")
    return _to_state(live)


@app.post("/games/{game_id}/submit", response_model=GameStateOut, summary="Submit the current row")
def submit_row(
    game_id: str,
    store: GameStore = Depends(get_store),
    repo: DBGameRepository = Depends(get_repository),
) -> GameStateOut:
    live = _find_live(game_id, store, repo)
    if not store.submit(game_id):
        raise HTTPException(status_code=409, detail="Row is incomplete or the game is over.")
    _record_if_finished(live, store, repo)
    return _to_state(live)


@app.post("/games/{game_id}/pause", response_model=GameStateOut, summary="Pause the game clock")
def pause_game(
    game_id: str,
    store: GameStore = Depends(get_store),
    repo: DBGameRepository = Depends(get_repository),
) -> GameStateOut:
    live = _find_live(game_id, store, repo)
    store.pause(game_id)
    if not live.game.is_over:
        repo.save_game(game_id, live.game)
    return _to_state(live)


@app.post("/games/{game_id}/resume", response_model=GameStateOut, summary="Resume the game clock")
def resume_game(
    game_id: str,
    store: GameStore = Depends(get_store),
    repo: DBGameRepository = Depends(get_repository),
) -> GameStateOut:
    live = _find_live(game_id, store, repo)
    store.resume(game_id)
    return _to_state(live)


@app.post("/games/{game_id}/quit", response_model=QuitResponse, summary="Abandon a game")
def quit_game(
    game_id: str,
    store: GameStore = Depends(get_store),
    repo: DBGameRepository = Depends(get_repository),
) -> QuitResponse:
    _find_live(game_id, store, repo)
    status, record = store.abandon(game_id)
    repo.delete_game(game_id)
    if status == "ok":
        repo.append_history(record.to_csv_line(), store.log.game_count, store.log.capacity)
        return QuitResponse(recorded=True, note="Game recorded as a quit.")
    return QuitResponse(recorded=False, note="Game discarded.")


@app.get("/stats", response_model=StatsOut, summary="Get statistics")
def get_stats(store: GameStore = Depends(get_store)) -> StatsOut:
    return _to_stats(store.get_stats())


@app.get("/stats/history", response_class=PlainTextResponse, summary="Export the history as CSV")
def get_history(store: GameStore = Depends(get_store)) -> str:
    return store.history_csv()


@app.post("/stats/reset", summary="Clear the history")
def reset_stats(
    store: GameStore = Depends(get_store),
    repo: DBGameRepository = Depends(get_repository),
) -> dict:
    store.reset_stats()
    repo.clear_history()
    return {"message": "Stats reset."}
