"""Room, tile and player state tracked by the rules package."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from enum import Enum

from wordgrid.errors import GameValidationError

GRID_SIZE = 25
GRID_SIDE = 5
DEFAULT_MAX_PLAYERS = 10


class _ParsableEnum(str, Enum):
    @classmethod
    def parse(cls, value: object, *, field_name: str):
        """Resolve a client-supplied value, case-insensitively, to a member."""
        if isinstance(value, cls):
            return value
        if value is None or (isinstance(value, str) and not value.strip()):
            raise GameValidationError(f"{field_name} is required", field=field_name)
        text = str(value).strip().casefold()
        for member in cls:
            if member.value.casefold() == text:
                return member
        allowed = ", ".join(member.value for member in cls)
        raise GameValidationError(
            f"{field_name} must be one of: {allowed}",
            field=field_name,
            value=str(value),
        )


class Team(_ParsableEnum):
    RED = "Red"
    BLUE = "Blue"

    @property
    def opponent(self) -> "Team":
        return Team.BLUE if self is Team.RED else Team.RED

    @property
    def color(self) -> "TileColor":
        return TileColor.RED if self is Team.RED else TileColor.BLUE


class Role(_ParsableEnum):
    SPYMASTER = "Spymaster"
    AGENT = "Agent"


class TileColor(_ParsableEnum):
    RED = "red"
    BLUE = "blue"
    NEUTRAL = "neutral"
    BLACK = "black"

    @property
    def team(self) -> Team | None:
        """Team owning this color, or None for neutral/black."""
        if self is TileColor.RED:
            return Team.RED
        if self is TileColor.BLUE:
            return Team.BLUE
        return None


class GameState(_ParsableEnum):
    WAITING = "waiting"
    ACTIVE = "active"
    ENDED = "ended"


@dataclass(slots=True)
class Tile:
    word: str
    color: TileColor
    revealed: bool = False


@dataclass(slots=True)
class Player:
    username: str
    role: Role
    team: Team


@dataclass(frozen=True, slots=True)
class TurnRecord:
    """One audited action in a room's history."""

    kind: str
    team: Team | None
    at: datetime
    actor: str | None = None
    tile_index: int | None = None
    outcome: str | None = None


@dataclass(slots=True)
class Room:
    """Room aggregate state."""

    code: str
    grid: list[Tile]
    players: list[Player] = field(default_factory=list)
    current_turn_team: Team | None = None
    game_state: GameState = GameState.WAITING
    timer_start_time: datetime | None = None
    winner: Team | None = None
    end_reason: str | None = None
    turn_history: list[TurnRecord] = field(default_factory=list)
    max_players: int = DEFAULT_MAX_PLAYERS
    created_at: datetime | None = None
    last_activity: datetime | None = None
    version: int = 0


__all__ = [
    "DEFAULT_MAX_PLAYERS",
    "GRID_SIDE",
    "GRID_SIZE",
    "GameState",
    "Player",
    "Role",
    "Room",
    "Team",
    "Tile",
    "TileColor",
    "TurnRecord",
]
