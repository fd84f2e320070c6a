from datetime import date, datetime, timezone

import pytest

from dashboard.data.journal import JournalSession
from dashboard.data.models import JournalEntry
from dashboard.data.store import MemoryStore

USER_ID = "alice"
BACKEND_TOKEN = "test-secret"


def make_entry(entry_id, day, mood="happy", user_id=USER_ID, title=None, content="Some thoughts", time="09:00"):
    return JournalEntry(
        id=entry_id,
        title=title or f"Entry {entry_id}",
        content=content,
        mood=mood,
        date=day if isinstance(day, date) else date.fromisoformat(day),
        time=time,
        created_at=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
        user_id=user_id,
    )


def make_record(day, mood="happy", user_id=USER_ID, title="A title", content="Some content"):
    return {
        "title": title,
        "content": content,
        "mood": mood,
        "date": day,
        "time": "08:30",
        "createdAt": "2024-01-01T08:30:00+00:00",
        "userId": user_id,
    }


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def session(store):
    journal = JournalSession(USER_ID, store)
    yield journal
    journal.close()


@pytest.fixture()
def backend_client(tmp_path, monkeypatch):
    from fastapi.testclient import TestClient

    from backend import db
    from backend.main import create_app
    from backend.settings import reset_settings

    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    monkeypatch.setenv("BACKEND_SESSION_SECRET", BACKEND_TOKEN)
    monkeypatch.delenv("ALLOWED_USERS", raising=False)
    reset_settings()
    monkeypatch.setattr(db, "_engine", None)
    monkeypatch.setattr(db, "_session_factory", None)
    with TestClient(create_app()) as client:
        yield client
    reset_settings()


def auth_headers(user_id=USER_ID, token=BACKEND_TOKEN):
    return {"X-User-Id": user_id, "X-Backend-Token": token}
