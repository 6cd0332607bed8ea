"""
- Spins up a temp SQLite test DB
- Create tables before tests run
- Provide a db_session fixture and override FastAPI's get_db so routes use the test session.
- Provide a client fixture (TestClient(app)) with a fresh in-memory store per test.
- Provide fake clocks / fixed color sources for the engine tests.
"""
import os
import random
from typing import Generator, List

import pytest

# Ensure the app does NOT run dev-only startup hooks, and db.py has a URL to bind
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sequence_hunt.db import Base, get_db
from sequence_hunt.main import app
from sequence_hunt import models  # noqa: F401
from sequence_hunt.color_source import ColorSource
from sequence_hunt.types import Color

# Use SQLite in-memory for tests (fast, isolated)
TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, start: int = 1_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FixedColorSource(ColorSource):
    """Hands out a known sequence; the clue shuffle still uses a seeded generator."""

    def __init__(self, colors: List[Color], seed: int = 7) -> None:
        super().__init__(rng=random.Random(seed))
        self._colors = list(colors)

    def draw(self, length: int) -> List[Color]:
        if length <= len(self._colors):
            return list(self._colors[:length])
        # pad with red so any length works
        return list(self._colors) + [Color.RED] * (length - len(self._colors))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="session")
def engine():
    # StaticPool + check_same_thread=False lets Starlette's TestClient and SQLAlchemy
    # share ONE in-memory SQLite database across threads.
    engine = create_engine(
        TEST_DATABASE_URL,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine) -> Generator:
    """Provide a clean session per test with rollback."""
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSessionLocal()
    try:
        yield db
        db.rollback()
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _clean_db(engine):
    """The repository commits inside requests, so wipe rows before each test."""
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM saved_games"))
        conn.execute(text("DELETE FROM game_history"))
        conn.execute(text("DELETE FROM history_meta"))
    yield


@pytest.fixture(autouse=True)
def override_dep(db_session):
    """Force the app to use our test session for every request."""
    def _get_db_for_tests():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_for_tests
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)
