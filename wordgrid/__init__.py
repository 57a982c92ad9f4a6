"""Rules for the team word-grid game: tiles, roster and room state machine."""

from wordgrid.content import ContentSource
from wordgrid.content import FixedContentSource
from wordgrid.content import RandomContentSource
from wordgrid.grid import RevealResult
from wordgrid.grid import TileGrid
from wordgrid.machine import RevealEffect
from wordgrid.machine import RuleSet
from wordgrid.models import GameState
from wordgrid.models import Player
from wordgrid.models import Role
from wordgrid.models import Room
from wordgrid.models import Team
from wordgrid.models import Tile
from wordgrid.models import TileColor
from wordgrid.models import TurnRecord

__all__ = [
    "ContentSource",
    "FixedContentSource",
    "GameState",
    "Player",
    "RandomContentSource",
    "RevealEffect",
    "RevealResult",
    "Role",
    "Room",
    "RuleSet",
    "Team",
    "Tile",
    "TileColor",
    "TileGrid",
    "TurnRecord",
]
