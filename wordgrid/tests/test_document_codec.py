"""Room document codec and legacy layout migration."""

from __future__ import annotations

from datetime import timedelta

import pytest

from grid_testkit import NOW
from grid_testkit import RED_INDEXES
from grid_testkit import active_room
from wordgrid import machine
from wordgrid.models import GameState
from wordgrid.models import Team
from wordgrid.models import TileColor
from wordgrid.serializer import SCHEMA_VERSION
from wordgrid.serializer import dump_room
from wordgrid.serializer import is_legacy_document
from wordgrid.serializer import load_room
from wordgrid.serializer import migrate_legacy_document


def _legacy_document() -> dict[str, object]:
    colors = ["grey", "assassin"] + ["red"] * 9 + ["blue"] * 8 + ["gray"] * 6
    return {
        "roomCode": "old1",
        "wordSet": [f"W{index}" for index in range(25)],
        "patterns": colors,
        "revealedTiles": [True, False, True],
        "players": [
            {"username": "alice", "role": "Spymaster", "team": "Red"},
            {"username": "bob", "role": "Agent", "team": "Red"},
        ],
        "currentTurnTeam": "Blue",
        "gameState": "active",
        "timerStartTime": "2024-05-01T10:00:00.000Z",
        "tileActions": [
            {"index": 0, "clickedBy": "bob", "timestamp": "2024-05-01T09:59:00Z"},
            {"index": 2, "clickedBy": "bob"},
        ],
    }


def test_dump_then_load_preserves_room_state() -> None:
    room = active_room()
    machine.reveal(room, RED_INDEXES[0], Team.RED, now=NOW + timedelta(seconds=3), actor="bob")
    room.version = 7

    document = dump_room(room)
    restored = load_room(document)

    assert document["schema_version"] == SCHEMA_VERSION
    assert document["grid"][RED_INDEXES[0]] == {"word": "WORD02", "color": "red", "revealed": True}
    assert restored == room


def test_load_refuses_legacy_layout() -> None:
    with pytest.raises(ValueError):
        load_room(_legacy_document())


def test_legacy_document_is_detected_and_migrated() -> None:
    legacy = _legacy_document()
    assert is_legacy_document(legacy)

    migrated = migrate_legacy_document(legacy)
    room = load_room(migrated)

    assert not is_legacy_document(migrated)
    assert room.code == "OLD1"
    assert room.grid[0].color is TileColor.NEUTRAL
    assert room.grid[1].color is TileColor.BLACK
    assert [tile.revealed for tile in room.grid[:4]] == [True, False, True, False]
    assert room.game_state is GameState.ACTIVE
    assert room.current_turn_team is Team.BLUE
    assert [player.username for player in room.players] == ["alice", "bob"]
    assert len(room.turn_history) == 1
    assert room.turn_history[0].actor == "bob"
    assert room.turn_history[0].tile_index == 0


def test_migration_drops_turn_team_outside_active_state() -> None:
    legacy = _legacy_document()
    legacy["gameState"] = "waiting"

    room = load_room(migrate_legacy_document(legacy))

    assert room.current_turn_team is None
