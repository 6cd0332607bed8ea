"""
Settings read from the environment (or a local .env in dev).

APP_ENV          local -> create tables at startup
DATABASE_URL     SQLAlchemy URL, required by db.py
SEQUENCE_LENGTH  default length for new games (4..8, anything else -> 4)
SOUND_ENABLED    true turns the sound service on
RANDOM_SEED      optional int, makes sequences and clue shuffles repeatable
STATS_CAPACITY   how many games the history keeps (default 300)
LOG_LEVEL        logging level name (default INFO)
"""

import logging
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_ENV: str = "local"
    DATABASE_URL: Optional[str] = None

    # Game
    SEQUENCE_LENGTH: int = 4
    SOUND_ENABLED: bool = False
    RANDOM_SEED: Optional[int] = None
    STATS_CAPACITY: int = 300

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if not _settings:
        _settings = Settings()
    return _settings


def configure_logging(level: Optional[str] = None) -> None:
    """Install one console handler for the package loggers."""
    name = (level or get_settings().LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
