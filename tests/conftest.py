"""
Pytest fixtures for QuizWordz tests.
"""

import os
import tempfile

# Keep test logs out of the working tree; must run before quizwordz is imported
os.environ.setdefault('LOG_DIR', os.path.join(tempfile.gettempdir(), 'quizwordz-test-logs'))

import pytest

from quizwordz import create_app
from quizwordz.config import TestingConfig
from quizwordz.services import game_service as game_service_module
from quizwordz.services.game_service import GameService
from quizwordz.services.store import InMemorySessionStore


class FakeClock:
    """Deterministic millisecond clock advancing one second per call."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def service(store, clock) -> GameService:
    """A game service with 5-letter words and 6 attempts."""
    return GameService(store, word_length=5, max_attempts=6, clock=clock)


@pytest.fixture
def playing_session(service):
    """A CRANE game with two joined players, already started."""
    session_id = service.create_session("host", "crane")
    service.join_session(session_id, "alice", "Alice")
    service.join_session(session_id, "bob", "Bob")
    service.start_session(session_id)
    return session_id


@pytest.fixture
def app(service, monkeypatch):
    """Flask app wired to the test game service."""
    monkeypatch.setattr(game_service_module, '_game_service', service)
    app, socketio = create_app(TestingConfig)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
