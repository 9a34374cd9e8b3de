"""Shared fixtures for history bridge tests."""

import json
import sqlite3
from datetime import datetime, timezone

import pytest

UTC = timezone.utc


def create_store(db_path):
    conn = sqlite3.connect(db_path)
    conn.execute(
        """
        CREATE TABLE conversations (
            id TEXT PRIMARY KEY,
            title TEXT,
            updated_at TEXT NOT NULL,
            messages TEXT
        )
        """
    )
    conn.commit()
    conn.close()


def insert_conversation(db_path, conv_id, updated_at, messages=None, title=None):
    payload = None if messages is None else json.dumps(messages)
    conn = sqlite3.connect(db_path)
    conn.execute(
        "INSERT INTO conversations (id, title, updated_at, messages) VALUES (?, ?, ?, ?)",
        (conv_id, title, updated_at, payload),
    )
    conn.commit()
    conn.close()


class FixedClock:
    """Callable clock whose current time tests can move."""

    def __init__(self, moment):
        self.moment = moment

    def __call__(self):
        return self.moment


@pytest.fixture
def store_path(tmp_path):
    """Path to an empty conversations database."""
    path = tmp_path / "conversations.db"
    create_store(path)
    return path


@pytest.fixture
def history_dir(tmp_path):
    return tmp_path / "pai" / "history" / "sessions"


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 10, 19, 9, 30, tzinfo=UTC))


@pytest.fixture
def epoch():
    """A watermark start well before any inserted test conversation."""
    return datetime(2026, 10, 19, 0, 0, tzinfo=UTC)
