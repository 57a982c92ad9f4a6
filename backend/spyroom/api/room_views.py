"""Room view builders used by REST and WS responses."""

from __future__ import annotations

from wordgrid.grid import TileGrid
from wordgrid.models import GameState
from wordgrid.models import Player
from wordgrid.models import Role
from wordgrid.models import Room
from wordgrid.models import Team
from wordgrid.models import Tile
from wordgrid.roster import find_player
from wordgrid.serializer import dump_record
from wordgrid.timer import to_utc_iso
from wordgrid.timer import turn_deadline


def _iso(value) -> str | None:
    return to_utc_iso(value) if value is not None else None


def tile_view(index: int, tile: Tile, *, show_color: bool) -> dict[str, object]:
    """Hidden colors are reported as None until the tile is revealed."""
    return {
        "index": index,
        "word": tile.word,
        "revealed": tile.revealed,
        "color": tile.color.value if (show_color or tile.revealed) else None,
    }


def grid_view(room: Room, *, show_colors: bool = False) -> list[dict[str, object]]:
    return [tile_view(index, tile, show_color=show_colors) for index, tile in enumerate(room.grid)]


def player_view(player: Player) -> dict[str, object]:
    return {
        "username": player.username,
        "role": player.role.value,
        "team": player.team.value,
    }


def scores_view(room: Room) -> dict[str, dict[str, int]]:
    grid = TileGrid(room.grid)
    return {
        team.value: {"revealed": grid.revealed_count(team), "remaining": grid.remaining(team)}
        for team in Team
    }


def turn_view(room: Room, *, turn_duration_seconds: int = 0) -> dict[str, object]:
    return {
        "current_turn_team": room.current_turn_team.value if room.current_turn_team else None,
        "timer_start_time": _iso(room.timer_start_time),
        "turn_duration_seconds": turn_duration_seconds or None,
        "turn_deadline": _iso(turn_deadline(room, turn_duration_seconds)),
    }


def viewer_sees_colors(room: Room, viewer: str | None) -> bool:
    if room.game_state is GameState.ENDED:
        return True
    if viewer is None:
        return False
    player = find_player(room, viewer)
    return player is not None and player.role is Role.SPYMASTER


def room_detail(
    room: Room,
    *,
    viewer: str | None = None,
    turn_duration_seconds: int = 0,
) -> dict[str, object]:
    return {
        "room_code": room.code,
        "game_state": room.game_state.value,
        **turn_view(room, turn_duration_seconds=turn_duration_seconds),
        "winner": room.winner.value if room.winner else None,
        "end_reason": room.end_reason,
        "players": [player_view(player) for player in room.players],
        "max_players": room.max_players,
        "grid": grid_view(room, show_colors=viewer_sees_colors(room, viewer)),
        "scores": scores_view(room),
        "turn_history": [dump_record(record) for record in room.turn_history],
        "version": room.version,
        "created_at": _iso(room.created_at),
        "last_activity": _iso(room.last_activity),
    }
