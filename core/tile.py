"""Terrain states and the immutable :class:`Tile` value."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Union

import constants


class TerrainType(IntEnum):
    """Terrain states of the mining layer.

    Background layers reuse ``EMPTY`` (0) as their default state and ``1`` as
    their active state.
    """

    EMPTY = 0
    DIGGABLE = 1
    UNDIGGABLE = 2


def _default_hit_points(state: int) -> int:
    return constants.DIGGABLE_HIT_POINTS if state == TerrainType.DIGGABLE else 0


@dataclass(frozen=True)
class Tile:
    """A single logical cell.

    Tiles are plain values: changing a cell always means replacing its tile
    with a new one.  ``hit_points`` only matter for diggable tiles, which take
    several hits before they break.
    """

    state: int
    max_hit_points: int = field(default=-1)
    hit_points: int = field(default=-1)

    def __post_init__(self) -> None:
        object.__setattr__(self, "state", int(self.state))
        if self.state < 0:
            raise ValueError(f"Terrain state must be non-negative, got {self.state}")
        if self.max_hit_points < 0:
            object.__setattr__(self, "max_hit_points", _default_hit_points(self.state))
        if self.hit_points < 0:
            object.__setattr__(self, "hit_points", self.max_hit_points)

    @property
    def terrain_type(self) -> TerrainType:
        return TerrainType(self.state)

    @property
    def is_diggable(self) -> bool:
        return self.state == TerrainType.DIGGABLE

    @property
    def is_destroyed(self) -> bool:
        return self.is_diggable and self.hit_points <= 0

    @property
    def health_percent(self) -> float:
        if self.max_hit_points == 0:
            return 0.0
        return self.hit_points / self.max_hit_points

    def damaged(self, damage: int = 1) -> "Tile":
        """Return a copy of this tile after taking ``damage`` hits.

        Non-diggable tiles ignore damage and are returned unchanged.
        """
        if not self.is_diggable:
            return self
        return replace(self, hit_points=max(0, self.hit_points - damage))

    def repaired(self) -> "Tile":
        return Tile(self.state)


TileLike = Union[Tile, int]


def as_tile(value: TileLike) -> Tile:
    """Return ``value`` as a :class:`Tile`, wrapping bare terrain states."""
    if isinstance(value, Tile):
        return value
    return Tile(int(value))


# Returned for every read outside the grid so edges never need special cases
OUT_OF_BOUNDS_TILE = Tile(TerrainType.UNDIGGABLE)

__all__ = ["TerrainType", "Tile", "TileLike", "as_tile", "OUT_OF_BOUNDS_TILE"]
