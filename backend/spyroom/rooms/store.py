"""Room persistence gateways.

A store keeps one JSON document per room and offers an atomic
read-modify-write primitive; the registry relies on it to make tile reveal a
single check-and-set.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Callable
from collections.abc import Iterator
from contextlib import contextmanager
from copy import deepcopy
from typing import Any
from typing import Protocol

from spyroom.core.db import create_sqlite_connection
from spyroom.rooms.locks import RoomLocks
from wordgrid.errors import InternalError
from wordgrid.errors import RoomCodeTakenError
from wordgrid.errors import RoomNotFoundError
from wordgrid.models import Room
from wordgrid.serializer import dump_room
from wordgrid.serializer import is_legacy_document
from wordgrid.serializer import load_room
from wordgrid.serializer import migrate_legacy_document
from wordgrid.timer import to_utc_iso
from wordgrid.timer import utc_now

logger = logging.getLogger(__name__)

Mutation = Callable[[Room], None]


class RoomStore(Protocol):
    def load(self, code: str) -> Room: ...

    def insert(self, room: Room) -> Room: ...

    def apply_mutation(self, code: str, mutation: Mutation) -> Room: ...

    def delete(self, code: str) -> bool: ...

    def list_codes(self) -> list[str]: ...


def _not_found(code: str) -> RoomNotFoundError:
    return RoomNotFoundError(f"room {code} not found", room_code=code)


class InMemoryRoomStore:
    """Process-local store; documents are copied on every read and write."""

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self._guard = threading.Lock()
        self._room_locks = RoomLocks()

    def load(self, code: str) -> Room:
        with self._guard:
            document = self._documents.get(code)
            if document is None:
                raise _not_found(code)
            return load_room(deepcopy(document))

    def insert(self, room: Room) -> Room:
        with self._guard:
            if room.code in self._documents:
                raise RoomCodeTakenError(f"room {room.code} already exists", room_code=room.code)
            room.version = 1
            self._documents[room.code] = dump_room(room)
        return room

    def apply_mutation(self, code: str, mutation: Mutation) -> Room:
        with self._room_locks.hold(code):
            with self._guard:
                document = self._documents.get(code)
                if document is None:
                    raise _not_found(code)
                room = load_room(deepcopy(document))
            mutation(room)
            room.version += 1
            with self._guard:
                if code not in self._documents:
                    raise _not_found(code)
                self._documents[code] = dump_room(room)
            return room

    def delete(self, code: str) -> bool:
        with self._guard:
            return self._documents.pop(code, None) is not None

    def list_codes(self) -> list[str]:
        with self._guard:
            return sorted(self._documents)


CREATE_ROOMS_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS rooms (
    code TEXT PRIMARY KEY,
    document TEXT NOT NULL,
    version INTEGER NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class SqliteRoomStore:
    """SQLite-backed store; read-modify-write runs inside BEGIN IMMEDIATE."""

    def __init__(self, path: str) -> None:
        if path == ":memory:":
            raise ValueError("SqliteRoomStore needs a file path; use InMemoryRoomStore instead")
        self._path = path

    def init_schema(self) -> None:
        with self._storage_errors("init schema"):
            conn = create_sqlite_connection(self._path)
            try:
                conn.executescript(CREATE_ROOMS_SCHEMA_SQL)
                conn.commit()
            finally:
                conn.close()

    @contextmanager
    def _storage_errors(self, action: str, code: str | None = None) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as exc:
            logger.exception("room store failed to %s (room=%s)", action, code)
            raise InternalError(f"room store failed to {action}", room_code=code) from exc

    def load(self, code: str) -> Room:
        with self._storage_errors("load room", code):
            conn = create_sqlite_connection(self._path)
            try:
                row = conn.execute("SELECT document FROM rooms WHERE code = ?", (code,)).fetchone()
            finally:
                conn.close()
        if row is None:
            raise _not_found(code)
        return load_room(json.loads(row[0]))

    def insert(self, room: Room) -> Room:
        room.version = 1
        document = json.dumps(dump_room(room))
        with self._storage_errors("insert room", room.code):
            conn = create_sqlite_connection(self._path)
            try:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    conn.execute(
                        """
                        INSERT INTO rooms (code, document, version, updated_at)
                        VALUES (?, ?, ?, ?)
                        """,
                        (room.code, document, room.version, to_utc_iso(utc_now())),
                    )
                except sqlite3.IntegrityError as exc:
                    conn.rollback()
                    raise RoomCodeTakenError(
                        f"room {room.code} already exists", room_code=room.code
                    ) from exc
                conn.commit()
            except Exception:
                if conn.in_transaction:
                    conn.rollback()
                raise
            finally:
                conn.close()
        return room

    def apply_mutation(self, code: str, mutation: Mutation) -> Room:
        with self._storage_errors("apply mutation", code):
            conn = create_sqlite_connection(self._path)
            try:
                conn.execute("BEGIN IMMEDIATE")
                row = conn.execute("SELECT document FROM rooms WHERE code = ?", (code,)).fetchone()
                if row is None:
                    raise _not_found(code)
                room = load_room(json.loads(row[0]))
                mutation(room)
                room.version += 1
                conn.execute(
                    """
                    UPDATE rooms
                    SET document = ?, version = ?, updated_at = ?
                    WHERE code = ?
                    """,
                    (json.dumps(dump_room(room)), room.version, to_utc_iso(utc_now()), code),
                )
                conn.commit()
                return room
            except Exception:
                if conn.in_transaction:
                    conn.rollback()
                raise
            finally:
                conn.close()

    def delete(self, code: str) -> bool:
        with self._storage_errors("delete room", code):
            conn = create_sqlite_connection(self._path)
            try:
                cursor = conn.execute("DELETE FROM rooms WHERE code = ?", (code,))
                conn.commit()
                return cursor.rowcount > 0
            finally:
                conn.close()

    def list_codes(self) -> list[str]:
        with self._storage_errors("list rooms"):
            conn = create_sqlite_connection(self._path)
            try:
                rows = conn.execute("SELECT code FROM rooms ORDER BY code").fetchall()
            finally:
                conn.close()
        return [str(row[0]) for row in rows]

    def put_raw_document(self, code: str, document: dict[str, Any]) -> None:
        """Write a document verbatim, bypassing the codec (imports and migrations)."""
        with self._storage_errors("write raw document", code):
            conn = create_sqlite_connection(self._path)
            try:
                conn.execute(
                    """
                    INSERT INTO rooms (code, document, version, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(code) DO UPDATE SET
                        document = excluded.document,
                        version = excluded.version,
                        updated_at = excluded.updated_at
                    """,
                    (code, json.dumps(document), int(document.get("version", 0)), to_utc_iso(utc_now())),
                )
                conn.commit()
            finally:
                conn.close()

    def migrate_legacy_documents(self) -> int:
        """Rewrite every legacy-layout document in the canonical layout once."""
        migrated = 0
        with self._storage_errors("migrate legacy documents"):
            conn = create_sqlite_connection(self._path)
            try:
                conn.execute("BEGIN IMMEDIATE")
                rows = conn.execute("SELECT code, document FROM rooms").fetchall()
                for code, raw_document in rows:
                    document = json.loads(raw_document)
                    if not is_legacy_document(document):
                        continue
                    upgraded = migrate_legacy_document(document)
                    upgraded["version"] = int(document.get("version", 0)) + 1
                    if upgraded["code"] != code:
                        logger.warning("legacy room %s stored under key %s; keeping key", upgraded["code"], code)
                        upgraded["code"] = code
                    conn.execute(
                        "UPDATE rooms SET document = ?, version = ?, updated_at = ? WHERE code = ?",
                        (json.dumps(upgraded), upgraded["version"], to_utc_iso(utc_now()), code),
                    )
                    migrated += 1
                conn.commit()
            except Exception:
                if conn.in_transaction:
                    conn.rollback()
                raise
            finally:
                conn.close()
        if migrated:
            logger.info("migrated %d legacy room documents", migrated)
        return migrated


__all__ = [
    "CREATE_ROOMS_SCHEMA_SQL",
    "InMemoryRoomStore",
    "Mutation",
    "RoomStore",
    "SqliteRoomStore",
]
