"""
Shared pytest fixtures for backend tests.
Uses a temp-file SQLite database and a scripted completion client for isolation.
"""
import pytest
import sqlite3
import sys
import os

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import database
from completion import TransportError


class FakeCompleter:
    """
    Stand-in for TextCompletionClient.
    Answers come from `responder(prompt)` when given, else from the scripted
    `responses` in order, else `default`. Exceptions are raised instead of returned.
    """

    def __init__(self, *responses, responder=None, default=TransportError("offline")):
        self.responses = list(responses)
        self.responder = responder
        self.default = default
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.responder is not None:
            answer = self.responder(prompt)
        elif self.responses:
            answer = self.responses.pop(0)
        else:
            answer = self.default
        if isinstance(answer, BaseException):
            raise answer
        return answer


@pytest.fixture
def fake_completer():
    return FakeCompleter()


@pytest.fixture
def test_db(monkeypatch, tmp_path):
    """
    Create an isolated test database for each test.
    Uses a temp file (not :memory:) because database.py opens new connections per operation.
    """
    db_path = str(tmp_path / "test.db")
    monkeypatch.setattr(database, "DATABASE_PATH", db_path)

    # Create tables directly (skip alembic for tests)
    conn = sqlite3.connect(db_path)
    conn.executescript("""
        CREATE TABLE todos (
            id TEXT PRIMARY KEY,
            text TEXT NOT NULL,
            completed INTEGER DEFAULT 0,
            category TEXT,
            priority TEXT,
            owner_id TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            scheduled_date TEXT,
            scheduled_time TEXT
        );
    """)
    conn.commit()
    conn.close()

    yield db_path


@pytest.fixture
def app_client(test_db, monkeypatch, fake_completer):
    """
    Create a test client for the FastAPI app.
    Skips alembic, swaps in the fake completer and removes apply pacing.
    """
    from fastapi.testclient import TestClient
    import main

    # Skip alembic in tests - tables already created by test_db fixture
    monkeypatch.setattr(main, "init_db", lambda: None)
    monkeypatch.setattr(main, "completer", fake_completer)
    for name in (
        "SCHEDULE_APPLY_PACING_S",
        "SCHEDULE_APPLY_COMPLETION_PAUSE_S",
        "BREAKDOWN_APPLY_PACING_S",
        "BREAKDOWN_APPLY_COMPLETION_PAUSE_S",
    ):
        monkeypatch.setattr(main, name, 0)
    main.apply_runs.clear()
    main.drafts.clear()

    with TestClient(main.app) as client:
        yield client

    main.apply_runs.clear()
    main.drafts.clear()
