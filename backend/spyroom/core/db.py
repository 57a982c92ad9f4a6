"""SQLite connection helpers for backend persistence."""

from __future__ import annotations

import sqlite3

DEFAULT_BUSY_TIMEOUT_SECONDS = 5.0


def create_sqlite_connection(path: str, *, timeout: float = DEFAULT_BUSY_TIMEOUT_SECONDS) -> sqlite3.Connection:
    """Create a SQLite connection with foreign key enforcement enabled."""
    conn = sqlite3.connect(path, timeout=timeout)
    conn.execute("PRAGMA foreign_keys=ON")
    return conn
