"""Tile grid construction and idempotent tile reveal."""

from __future__ import annotations

from collections.abc import Iterator
from collections.abc import Sequence
from dataclasses import dataclass

from wordgrid.errors import InvalidIndexError
from wordgrid.errors import InvalidPatternError
from wordgrid.models import GRID_SIDE
from wordgrid.models import GRID_SIZE
from wordgrid.models import Team
from wordgrid.models import Tile
from wordgrid.models import TileColor


@dataclass(frozen=True, slots=True)
class RevealResult:
    """Outcome of one reveal attempt.

    ``already_revealed`` means nothing was mutated and callers must not
    re-trigger any side effect for this attempt.
    """

    index: int
    color: TileColor
    already_revealed: bool = False


class TileGrid:
    """Mutable view over a room's 25 tiles."""

    def __init__(self, tiles: list[Tile]) -> None:
        if len(tiles) != GRID_SIZE:
            raise InvalidPatternError(
                f"grid must contain exactly {GRID_SIZE} tiles",
                tile_count=len(tiles),
            )
        self._tiles = tiles

    @classmethod
    def generate(cls, words: Sequence[str], color_pattern: Sequence[object]) -> "TileGrid":
        """Zip words with a color pattern into fresh, unrevealed tiles."""
        if len(color_pattern) != GRID_SIZE:
            raise InvalidPatternError(
                f"color pattern must have exactly {GRID_SIZE} entries",
                pattern_length=len(color_pattern),
            )
        if len(words) != GRID_SIZE:
            raise InvalidPatternError(
                f"word set must have exactly {GRID_SIZE} entries",
                word_count=len(words),
            )
        tiles = [
            Tile(word=str(word), color=TileColor.parse(color, field_name="color"))
            for word, color in zip(words, color_pattern)
        ]
        return cls(tiles)

    @property
    def tiles(self) -> list[Tile]:
        return self._tiles

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[Tile]:
        return iter(self._tiles)

    def __getitem__(self, index: int) -> Tile:
        return self._tiles[self._check_index(index)]

    @staticmethod
    def _check_index(index: object) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidIndexError("tile index must be an integer", index=index)
        if index < 0 or index >= GRID_SIZE:
            raise InvalidIndexError(
                f"tile index must be within [0, {GRID_SIZE - 1}]",
                index=index,
            )
        return index

    @staticmethod
    def index_of(row: object, col: object) -> int:
        """Convert row/col coordinates to a flat tile index."""
        for name, value in (("row", row), ("col", col)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidIndexError(f"{name} must be an integer", **{name: value})
            if value < 0 or value >= GRID_SIDE:
                raise InvalidIndexError(
                    f"{name} must be within [0, {GRID_SIDE - 1}]",
                    **{name: value},
                )
        return row * GRID_SIDE + col

    def reveal(self, index: int) -> RevealResult:
        """Check-and-set the revealed flag of one tile."""
        tile = self._tiles[self._check_index(index)]
        if tile.revealed:
            return RevealResult(index=index, color=tile.color, already_revealed=True)
        tile.revealed = True
        return RevealResult(index=index, color=tile.color)

    def remaining(self, team: Team) -> int:
        """Count unrevealed tiles that belong to ``team``."""
        return sum(1 for tile in self._tiles if tile.color is team.color and not tile.revealed)

    def revealed_count(self, team: Team) -> int:
        return sum(1 for tile in self._tiles if tile.color is team.color and tile.revealed)

    def rows(self) -> list[list[Tile]]:
        return [self._tiles[start : start + GRID_SIDE] for start in range(0, GRID_SIZE, GRID_SIDE)]


__all__ = ["RevealResult", "TileGrid"]
