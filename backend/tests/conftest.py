"""Shared fixtures for service tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from room_testkit import ManualClock
from room_testkit import fixed_content
from spyroom.core.config import Settings
from spyroom.main import create_app
from spyroom.rooms.registry import RoomRegistry
from spyroom.rooms.store import InMemoryRoomStore
from spyroom.rooms.store import SqliteRoomStore


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def registry(clock: ManualClock) -> RoomRegistry:
    return RoomRegistry(InMemoryRoomStore(), content=fixed_content(), clock=clock)


@pytest.fixture
def sqlite_store(tmp_path: Path) -> SqliteRoomStore:
    store = SqliteRoomStore(str(tmp_path / "rooms.sqlite3"))
    store.init_schema()
    return store


@pytest.fixture
def settings() -> Settings:
    return Settings(spyroom_store="memory", spyroom_log_level="DEBUG")


@pytest.fixture
def client(settings: Settings, clock: ManualClock):
    app = create_app(settings, content=fixed_content(), clock=clock)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def full_room(registry: RoomRegistry) -> str:
    """Waiting room ABC12 with a spymaster and an agent on each team."""
    registry.create("ABC12", "alice", "Spymaster", "Red")
    registry.join("ABC12", "bob", "Agent", "Red")
    registry.join("ABC12", "carol", "Spymaster", "Blue")
    registry.join("ABC12", "dave", "Agent", "Blue")
    return "ABC12"
