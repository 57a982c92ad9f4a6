"""Grid content: word selection and color pattern generation."""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol

from wordgrid.models import GRID_SIZE
from wordgrid.models import TileColor
from wordgrid.policies import FIRST_TURN_TEAM

DEFAULT_WORDS: tuple[str, ...] = (
    "AFRICA", "AGENT", "AIR", "ALIEN", "AMAZON", "ANGEL", "ANTARCTICA", "APPLE",
    "ARM", "BACK", "BAND", "BANK", "BARK", "BEACH", "BELT", "BERLIN",
    "BERRY", "BOARD", "BOND", "BOOM", "BOW", "BOX", "BUG", "CANADA",
    "CAPITAL", "CELL", "CENTER", "CHINA", "CHOCOLATE", "CIRCLE", "CLUB", "COMPOUND",
    "COPPER", "CRASH", "CRICKET", "CROSS", "DEATH", "DICE", "DINOSAUR", "DOCTOR",
    "DOG", "DRESS", "DWARF", "EAGLE", "ENGINE", "FAIR", "FALL", "FIELD",
    "FIRE", "FISH", "FLUTE", "FLY", "FOOT", "FORK", "GAME", "GHOST",
    "GIANT", "GLASS", "GLOVE", "GOLD", "GRASS", "GREECE", "HAND", "HAWK",
    "HEAD", "HEART", "HOLE", "HORSE", "HOSPITAL", "ICE", "IRON", "JACK",
    "KEY", "KING", "KNIFE", "LAB", "LEMON", "LIGHT", "LINE", "LOCK",
    "MAPLE", "MARCH", "MERCURY", "MOON", "MOUNT", "NEEDLE", "NET", "NIGHT",
    "NURSE", "OCTOPUS", "OIL", "OLIVE", "ORANGE", "PALM", "PAN", "PAPER",
    "PARK", "PIANO", "PILOT", "PIPE", "PIRATE", "PITCH", "PLANE", "POINT",
    "POLE", "PRESS", "QUEEN", "RING", "ROBOT", "ROCK", "ROUND", "SATURN",
    "SCHOOL", "SHIP", "SHOE", "SPRING", "SQUARE", "STAR", "STRING", "TABLE",
    "TOWER", "TRAIN", "TRIANGLE", "UNICORN", "VAN", "WATCH", "WHALE", "WIND",
)

FIRST_TEAM_TILES = 9
SECOND_TEAM_TILES = 8
BLACK_TILES = 1
NEUTRAL_TILES = GRID_SIZE - FIRST_TEAM_TILES - SECOND_TEAM_TILES - BLACK_TILES


class ContentSource(Protocol):
    """Supplies the words and colors of a new grid."""

    def words(self) -> list[str]: ...

    def color_pattern(self) -> list[TileColor]: ...


class RandomContentSource:
    """Draw 25 distinct words and a shuffled standard color distribution."""

    def __init__(self, words: Sequence[str] = DEFAULT_WORDS, *, seed: int | None = None) -> None:
        unique_words = list(dict.fromkeys(word.strip().upper() for word in words if word.strip()))
        if len(unique_words) < GRID_SIZE:
            raise ValueError(f"word list must contain at least {GRID_SIZE} distinct words")
        self._words = unique_words
        self._rng = random.Random(seed)

    def words(self) -> list[str]:
        return self._rng.sample(self._words, GRID_SIZE)

    def color_pattern(self) -> list[TileColor]:
        first = FIRST_TURN_TEAM.color
        second = FIRST_TURN_TEAM.opponent.color
        pattern = (
            [first] * FIRST_TEAM_TILES
            + [second] * SECOND_TEAM_TILES
            + [TileColor.NEUTRAL] * NEUTRAL_TILES
            + [TileColor.BLACK] * BLACK_TILES
        )
        self._rng.shuffle(pattern)
        return pattern


class FixedContentSource:
    """Serve the same words and pattern for every room; used by tests and demos."""

    def __init__(self, words: Sequence[str], color_pattern: Sequence[TileColor | str]) -> None:
        self._words = list(words)
        self._pattern = [TileColor.parse(color, field_name="color") for color in color_pattern]

    def words(self) -> list[str]:
        return list(self._words)

    def color_pattern(self) -> list[TileColor]:
        return list(self._pattern)


__all__ = [
    "BLACK_TILES",
    "ContentSource",
    "DEFAULT_WORDS",
    "FIRST_TEAM_TILES",
    "FixedContentSource",
    "NEUTRAL_TILES",
    "RandomContentSource",
    "SECOND_TEAM_TILES",
]
