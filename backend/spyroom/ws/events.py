"""Translate committed room actions into push events."""

from __future__ import annotations

from typing import Any

from spyroom.api.room_views import grid_view
from spyroom.api.room_views import player_view
from spyroom.api.room_views import scores_view
from spyroom.api.room_views import turn_view
from spyroom.rooms.registry import ActionResult

PLAYERS_UPDATED = "PLAYERS_UPDATED"
GRID_UPDATED = "GRID_UPDATED"
TURN_SWITCHED = "TURN_SWITCHED"
GAME_STARTED = "GAME_STARTED"
GAME_ENDED = "GAME_ENDED"
ROOM_DELETED = "ROOM_DELETED"


def events_for_result(result: ActionResult, *, turn_duration_seconds: int = 0) -> list[tuple[str, dict[str, Any]]]:
    """Build the ordered events for one action; grid changes precede turn/game changes."""
    if result.room_deleted or result.room is None:
        if result.room_deleted:
            return [(ROOM_DELETED, {"room_code": result.code})]
        return []

    room = result.room
    events: list[tuple[str, dict[str, Any]]] = []
    if result.players_changed:
        events.append(
            (
                PLAYERS_UPDATED,
                {"room_code": room.code, "players": [player_view(player) for player in room.players]},
            )
        )
    if result.game_started:
        events.append(
            (
                GAME_STARTED,
                {"room_code": room.code, **turn_view(room, turn_duration_seconds=turn_duration_seconds)},
            )
        )
    if result.grid_changed:
        tile = result.reveal
        events.append(
            (
                GRID_UPDATED,
                {
                    "room_code": room.code,
                    "tile": {"index": tile.index, "color": tile.color.value} if tile else None,
                    "grid": grid_view(room),
                    "scores": scores_view(room),
                },
            )
        )
    if result.game_ended and room.winner is not None:
        events.append(
            (
                GAME_ENDED,
                {
                    "room_code": room.code,
                    "winner": room.winner.value,
                    "reason": room.end_reason,
                    "message": _end_message(room.winner.value, room.end_reason),
                    "grid": grid_view(room, show_colors=True),
                },
            )
        )
    elif result.turn_switched:
        events.append(
            (
                TURN_SWITCHED,
                {"room_code": room.code, **turn_view(room, turn_duration_seconds=turn_duration_seconds)},
            )
        )
    return events


def _end_message(winner: str, reason: str | None) -> str:
    if reason == "black_tile":
        return f"{winner} wins! Black tile guessed."
    if reason == "all_tiles_revealed":
        return f"{winner} wins! All {winner} tiles revealed."
    return f"{winner} wins!"
