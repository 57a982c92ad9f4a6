"""SQLite helper and room store persistence tests."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import pytest

from room_testkit import FIXED_PATTERN
from room_testkit import FIXED_WORDS
from spyroom.core.db import create_sqlite_connection
from spyroom.rooms.store import SqliteRoomStore
from wordgrid.errors import InternalError
from wordgrid.errors import RoomCodeTakenError
from wordgrid.errors import RoomNotFoundError
from wordgrid.grid import TileGrid
from wordgrid.models import Room
from wordgrid.models import TileColor


def _room(code: str = "ROOM1") -> Room:
    return Room(code=code, grid=TileGrid.generate(FIXED_WORDS, FIXED_PATTERN).tiles)


def test_sqlite_foreign_keys_enabled() -> None:
    conn = create_sqlite_connection(":memory:")
    conn.executescript(
        """
        CREATE TABLE parent (id INTEGER PRIMARY KEY);
        CREATE TABLE child (id INTEGER PRIMARY KEY, parent_id INTEGER NOT NULL REFERENCES parent(id));
        """
    )

    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("INSERT INTO child (parent_id) VALUES (?)", (999,))


def test_store_rejects_in_memory_path() -> None:
    with pytest.raises(ValueError):
        SqliteRoomStore(":memory:")


def test_insert_load_and_duplicate_code(sqlite_store: SqliteRoomStore) -> None:
    inserted = sqlite_store.insert(_room())

    loaded = sqlite_store.load("ROOM1")

    assert inserted.version == 1
    assert loaded == inserted
    with pytest.raises(RoomCodeTakenError):
        sqlite_store.insert(_room())


def test_apply_mutation_commits_and_bumps_version(sqlite_store: SqliteRoomStore) -> None:
    sqlite_store.insert(_room())

    def _reveal_first(room: Room) -> None:
        room.grid[0].revealed = True

    updated = sqlite_store.apply_mutation("ROOM1", _reveal_first)

    assert updated.version == 2
    assert sqlite_store.load("ROOM1").grid[0].revealed is True


def test_apply_mutation_failure_leaves_document_untouched(sqlite_store: SqliteRoomStore) -> None:
    sqlite_store.insert(_room())

    def _broken(room: Room) -> None:
        room.grid[0].revealed = True
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        sqlite_store.apply_mutation("ROOM1", _broken)

    stored = sqlite_store.load("ROOM1")
    assert stored.grid[0].revealed is False
    assert stored.version == 1


def test_missing_room_and_delete(sqlite_store: SqliteRoomStore) -> None:
    with pytest.raises(RoomNotFoundError):
        sqlite_store.load("NOPE")
    with pytest.raises(RoomNotFoundError):
        sqlite_store.apply_mutation("NOPE", lambda room: None)

    sqlite_store.insert(_room("ROOM2"))
    sqlite_store.insert(_room("ROOM1"))
    assert sqlite_store.list_codes() == ["ROOM1", "ROOM2"]
    assert sqlite_store.delete("ROOM1") is True
    assert sqlite_store.delete("ROOM1") is False
    assert sqlite_store.list_codes() == ["ROOM2"]


def test_storage_failure_surfaces_as_internal_error(tmp_path: Path) -> None:
    store = SqliteRoomStore(str(tmp_path / "never-initialized.sqlite3"))
    with pytest.raises(InternalError):
        store.list_codes()


def test_legacy_documents_are_migrated_once(sqlite_store: SqliteRoomStore) -> None:
    sqlite_store.insert(_room("MODERN"))
    sqlite_store.put_raw_document(
        "LEGACY1",
        {
            "roomCode": "legacy1",
            "wordSet": FIXED_WORDS,
            "patterns": ["grey"] * 7 + ["red"] * 9 + ["blue"] * 8 + ["black"],
            "revealedTiles": [False] * 25,
            "players": [{"username": "alice", "role": "Spymaster", "team": "Red"}],
            "gameState": "waiting",
            "version": 3,
        },
    )

    assert sqlite_store.migrate_legacy_documents() == 1
    assert sqlite_store.migrate_legacy_documents() == 0

    room = sqlite_store.load("LEGACY1")
    assert room.grid[0].color is TileColor.NEUTRAL
    assert room.version == 4
    assert room.players[0].username == "alice"
    assert sqlite_store.load("MODERN").version == 1


def test_documents_are_stored_as_json(sqlite_store: SqliteRoomStore, tmp_path: Path) -> None:
    sqlite_store.insert(_room())

    conn = create_sqlite_connection(str(tmp_path / "rooms.sqlite3"))
    try:
        raw, version = conn.execute("SELECT document, version FROM rooms WHERE code = ?", ("ROOM1",)).fetchone()
    finally:
        conn.close()

    assert version == 1
    assert json.loads(raw)["grid"][1]["color"] == "black"
