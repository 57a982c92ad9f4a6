"""Concurrent room actions stay serialized per room."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

import wordgrid.machine as machine_module
from room_testkit import ManualClock
from room_testkit import NEUTRAL_INDEX
from room_testkit import RED_INDEXES
from room_testkit import fixed_content
from spyroom.rooms.registry import RoomRegistry
from spyroom.rooms.store import InMemoryRoomStore
from spyroom.rooms.store import SqliteRoomStore
from wordgrid.errors import GameError
from wordgrid.errors import RoleConflictError
from wordgrid.models import Role
from wordgrid.models import Team


def _registries(tmp_path: Path) -> list[RoomRegistry]:
    sqlite_store = SqliteRoomStore(str(tmp_path / "cc.sqlite3"))
    sqlite_store.init_schema()
    return [
        RoomRegistry(InMemoryRoomStore(), content=fixed_content(), clock=ManualClock()),
        RoomRegistry(sqlite_store, content=fixed_content(), clock=ManualClock()),
    ]


def _slow_apply_reveal_effect(monkeypatch: pytest.MonkeyPatch) -> None:
    original = machine_module.apply_reveal_effect

    def _slow(*args, **kwargs):
        # Widen the window between reading and writing the tile.
        time.sleep(0.02)
        return original(*args, **kwargs)

    monkeypatch.setattr(machine_module, "apply_reveal_effect", _slow)


@pytest.mark.parametrize("store_kind", [0, 1], ids=["memory", "sqlite"])
def test_concurrent_reveals_of_one_tile_apply_one_effect(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    store_kind: int,
) -> None:
    """Contract: N concurrent reveals of one neutral tile switch the turn exactly once."""
    registry = _registries(tmp_path)[store_kind]
    registry.create("RACE1", "bob", "Agent", "Red")
    registry.start("RACE1", "bob")
    _slow_apply_reveal_effect(monkeypatch)

    workers = 6
    start_barrier = threading.Barrier(workers)

    def _reveal_worker(_: int) -> str:
        start_barrier.wait()
        try:
            result = registry.reveal("RACE1", index=NEUTRAL_INDEX, username="bob")
        except GameError as exc:
            return exc.code
        return "already" if result.reveal.already_revealed else "fresh"

    with ThreadPoolExecutor(max_workers=workers) as executor:
        outcomes = list(executor.map(_reveal_worker, range(workers)))

    room = registry.find("RACE1")
    assert outcomes.count("fresh") == 1
    assert set(outcomes) <= {"fresh", "already", "INVALID_STATE"}
    assert room.current_turn_team is Team.BLUE
    assert [record.kind for record in room.turn_history] == ["start", "reveal"]


def test_concurrent_spymaster_joins_keep_one_per_team(tmp_path: Path) -> None:
    """Contract: concurrent Spymaster joins for one team admit exactly one."""
    registry = _registries(tmp_path)[1]
    registry.create("RACE2", "host", "Agent", "Red")

    workers = 8
    start_barrier = threading.Barrier(workers)

    def _join_worker(index: int) -> str:
        start_barrier.wait()
        try:
            registry.join("RACE2", f"spy{index}", "Spymaster", "Red")
        except RoleConflictError:
            return "conflict"
        return "ok"

    with ThreadPoolExecutor(max_workers=workers) as executor:
        outcomes = list(executor.map(_join_worker, range(workers)))

    room = registry.find("RACE2")
    spymasters = [p for p in room.players if p.team is Team.RED and p.role is Role.SPYMASTER]
    assert outcomes.count("ok") == 1
    assert len(spymasters) == 1


def test_rooms_do_not_block_each_other(tmp_path: Path) -> None:
    registry = _registries(tmp_path)[0]
    for code in ("ROOMA", "ROOMB"):
        registry.create(code, "bob", "Agent", "Red")
        registry.start(code, "bob")

    with registry.lock_room("ROOMA"):
        with ThreadPoolExecutor(max_workers=1) as executor:
            future = executor.submit(registry.reveal, "ROOMB", index=RED_INDEXES[0], username="bob")
            result = future.result(timeout=2.0)

    assert result.reveal.already_revealed is False
