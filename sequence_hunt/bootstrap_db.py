"""
Dev convenience: create the saved-game and history tables if they don't exist.
Call this at startup in local/dev only.
"""

import logging

from .db import engine, Base
from . import models  # noqa: F401  (registers the tables on Base)

logger = logging.getLogger(__name__)


def create_all():
    Base.metadata.create_all(bind=engine)
    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))
