"""Room membership rules: unique usernames and one spymaster per team."""

from __future__ import annotations

from wordgrid.errors import RoleConflictError
from wordgrid.errors import RoomFullError
from wordgrid.errors import UsernameTakenError
from wordgrid.models import Player
from wordgrid.models import Role
from wordgrid.models import Room
from wordgrid.models import Team
from wordgrid.usernames import normalize_and_validate_username


def build_player(username: object, role: object, team: object) -> Player:
    """Validate raw membership fields and build a player."""
    return Player(
        username=normalize_and_validate_username(username),
        role=Role.parse(role, field_name="role"),
        team=Team.parse(team, field_name="team"),
    )


def find_player(room: Room, username: str) -> Player | None:
    for player in room.players:
        if player.username == username:
            return player
    return None


def spymaster_for(room: Room, team: Team) -> Player | None:
    for player in room.players:
        if player.team is team and player.role is Role.SPYMASTER:
            return player
    return None


def join(room: Room, player: Player) -> Player:
    """Append ``player`` after enforcing membership constraints."""
    if find_player(room, player.username) is not None:
        raise UsernameTakenError(
            f"username {player.username!r} is already in room {room.code}",
            username=player.username,
        )
    if player.role is Role.SPYMASTER and spymaster_for(room, player.team) is not None:
        raise RoleConflictError(
            f"team {player.team.value} already has a spymaster",
            team=player.team.value,
        )
    if len(room.players) >= room.max_players:
        raise RoomFullError(
            f"room {room.code} is full",
            max_players=room.max_players,
        )
    room.players.append(player)
    return player


def leave(room: Room, username: str) -> bool:
    """Remove ``username`` if present; return True when the roster is now empty."""
    room.players = [player for player in room.players if player.username != username]
    return not room.players


def team_members(room: Room, team: Team) -> list[Player]:
    return [player for player in room.players if player.team is team]


__all__ = [
    "build_player",
    "find_player",
    "join",
    "leave",
    "spymaster_for",
    "team_members",
]
