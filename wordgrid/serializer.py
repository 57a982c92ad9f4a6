"""Room document codec and the one-time migration from the legacy layout."""

from __future__ import annotations

from typing import Any

from wordgrid.grid import TileGrid
from wordgrid.models import DEFAULT_MAX_PLAYERS
from wordgrid.models import GRID_SIZE
from wordgrid.models import GameState
from wordgrid.models import Player
from wordgrid.models import Role
from wordgrid.models import Room
from wordgrid.models import Team
from wordgrid.models import Tile
from wordgrid.models import TileColor
from wordgrid.models import TurnRecord
from wordgrid.timer import parse_utc_iso
from wordgrid.timer import to_utc_iso

SCHEMA_VERSION = 2
_LEGACY_KEYS = frozenset({"wordSet", "patterns", "revealedTiles"})
_LEGACY_COLOR_ALIASES = {"grey": "neutral", "gray": "neutral", "assassin": "black"}


def _iso_or_none(value) -> str | None:
    return to_utc_iso(value) if value is not None else None


def _datetime_or_none(value: Any):
    if value is None or value == "":
        return None
    return parse_utc_iso(str(value))


def _team_or_none(value: Any) -> Team | None:
    if value is None:
        return None
    return Team.parse(value, field_name="team")


def dump_record(record: TurnRecord) -> dict[str, Any]:
    return {
        "kind": record.kind,
        "team": record.team.value if record.team is not None else None,
        "at": to_utc_iso(record.at),
        "actor": record.actor,
        "tile_index": record.tile_index,
        "outcome": record.outcome,
    }


def load_record(payload: dict[str, Any]) -> TurnRecord:
    tile_index = payload.get("tile_index")
    return TurnRecord(
        kind=str(payload["kind"]),
        team=_team_or_none(payload.get("team")),
        at=parse_utc_iso(str(payload["at"])),
        actor=payload.get("actor"),
        tile_index=int(tile_index) if tile_index is not None else None,
        outcome=payload.get("outcome"),
    )


def dump_room(room: Room) -> dict[str, Any]:
    """Serialize a room into its canonical persisted document."""
    return {
        "schema_version": SCHEMA_VERSION,
        "code": room.code,
        "grid": [
            {"word": tile.word, "color": tile.color.value, "revealed": tile.revealed}
            for tile in room.grid
        ],
        "players": [
            {"username": player.username, "role": player.role.value, "team": player.team.value}
            for player in room.players
        ],
        "current_turn_team": room.current_turn_team.value if room.current_turn_team else None,
        "game_state": room.game_state.value,
        "timer_start_time": _iso_or_none(room.timer_start_time),
        "winner": room.winner.value if room.winner else None,
        "end_reason": room.end_reason,
        "turn_history": [dump_record(record) for record in room.turn_history],
        "max_players": room.max_players,
        "created_at": _iso_or_none(room.created_at),
        "last_activity": _iso_or_none(room.last_activity),
        "version": room.version,
    }


def load_room(document: dict[str, Any]) -> Room:
    """Rebuild a room from a canonical document."""
    if is_legacy_document(document):
        raise ValueError("legacy room document must be migrated before loading")

    grid = TileGrid(
        [
            Tile(
                word=str(item["word"]),
                color=TileColor.parse(item["color"], field_name="color"),
                revealed=bool(item.get("revealed", False)),
            )
            for item in document["grid"]
        ]
    )
    players = [
        Player(
            username=str(item["username"]),
            role=Role.parse(item["role"], field_name="role"),
            team=Team.parse(item["team"], field_name="team"),
        )
        for item in document.get("players", [])
    ]
    return Room(
        code=str(document["code"]),
        grid=grid.tiles,
        players=players,
        current_turn_team=_team_or_none(document.get("current_turn_team")),
        game_state=GameState.parse(document.get("game_state", "waiting"), field_name="game_state"),
        timer_start_time=_datetime_or_none(document.get("timer_start_time")),
        winner=_team_or_none(document.get("winner")),
        end_reason=document.get("end_reason"),
        turn_history=[load_record(item) for item in document.get("turn_history", [])],
        max_players=int(document.get("max_players", DEFAULT_MAX_PLAYERS)),
        created_at=_datetime_or_none(document.get("created_at")),
        last_activity=_datetime_or_none(document.get("last_activity")),
        version=int(document.get("version", 0)),
    )


def is_legacy_document(document: dict[str, Any]) -> bool:
    """Detect the three-parallel-array layout (wordSet/patterns/revealedTiles)."""
    return "grid" not in document and bool(_LEGACY_KEYS & set(document))


def _legacy_color(raw: Any) -> str:
    text = str(raw).strip().lower()
    return _LEGACY_COLOR_ALIASES.get(text, text)


def migrate_legacy_document(document: dict[str, Any]) -> dict[str, Any]:
    """Convert one legacy document to the canonical layout.

    Parallel arrays are zipped into tiles; ``tileActions`` become reveal records.
    """
    words = list(document.get("wordSet") or [])
    patterns = [_legacy_color(color) for color in document.get("patterns") or []]
    revealed = list(document.get("revealedTiles") or [])
    revealed += [False] * (GRID_SIZE - len(revealed))

    grid = TileGrid.generate(words, patterns)
    for tile, flag in zip(grid, revealed):
        tile.revealed = bool(flag)

    game_state = GameState.parse(document.get("gameState") or "waiting", field_name="gameState")
    current_turn = document.get("currentTurnTeam") if game_state is GameState.ACTIVE else None

    history: list[dict[str, Any]] = []
    for action in document.get("tileActions") or []:
        if not isinstance(action, dict) or action.get("timestamp") is None:
            continue
        history.append(
            {
                "kind": "reveal",
                "team": None,
                "at": str(action["timestamp"]),
                "actor": action.get("clickedBy"),
                "tile_index": action.get("index"),
                "outcome": None,
            }
        )

    room = Room(
        code=str(document["roomCode"]).strip().upper(),
        grid=grid.tiles,
        players=[
            Player(
                username=str(item["username"]),
                role=Role.parse(item.get("role"), field_name="role"),
                team=Team.parse(item.get("team"), field_name="team"),
            )
            for item in document.get("players") or []
        ],
        current_turn_team=_team_or_none(current_turn),
        game_state=game_state,
        timer_start_time=_datetime_or_none(document.get("timerStartTime")),
        max_players=int(document.get("maxPlayers") or DEFAULT_MAX_PLAYERS),
        last_activity=_datetime_or_none(document.get("lastActivity")),
    )
    migrated = dump_room(room)
    migrated["turn_history"] = history
    return migrated


__all__ = [
    "SCHEMA_VERSION",
    "dump_record",
    "dump_room",
    "is_legacy_document",
    "load_record",
    "load_room",
    "migrate_legacy_document",
]
