"""Ordered generation passes run by :class:`mapgen.generator.MapGenerator`.

Each strategy mutates a grid through its silent setter only and draws every
random number from the ``rng`` handed to :meth:`execute`.  The usual order is
fill, blobs, border and entrance: the border pass runs after the blobs so it
can seal whatever they carved into the edge, and the entrance runs last so it
always punches through the border.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Protocol, Sequence

from core.grid import GridStore
from core.tile import TerrainType, Tile
from mapgen.blobs import BlobGenerator
from mapgen.spawner import BlobSpawnConfig, BlobSpawner, GenerationConfigError

logger = logging.getLogger(__name__)


class MapStrategy(Protocol):
    def execute(self, grid: GridStore, rng: random.Random) -> None: ...


class FillStrategy:
    """Set every cell to one terrain state."""

    def __init__(self, state: int = TerrainType.DIGGABLE) -> None:
        self.state = state

    def execute(self, grid: GridStore, rng: random.Random) -> None:
        grid.fill(Tile(self.state))
        logger.debug("Filled %s with state %d", grid.name, self.state)


class BlobGenerationStrategy:
    """Spawn the configured blobs with a single spawner.

    The spawner is shared by every config so later configs keep their
    distance from blobs placed by earlier ones.
    """

    def __init__(
        self,
        configs: Sequence[BlobSpawnConfig],
        generators: Optional[Dict[str, BlobGenerator]] = None,
    ) -> None:
        self.configs: List[BlobSpawnConfig] = list(configs)
        self.generators = generators

    def execute(self, grid: GridStore, rng: random.Random) -> None:
        spawner = BlobSpawner(grid, rng, self.generators)
        for config in self.configs:
            placed = spawner.spawn_blobs(config)
            logger.debug("Config '%s' placed %d blobs", config.name, placed)


class BorderStrategy:
    """Force the outer ring of the grid to an impassable state."""

    def __init__(self, state: int = TerrainType.UNDIGGABLE) -> None:
        self.state = state

    def execute(self, grid: GridStore, rng: random.Random) -> None:
        tile = Tile(self.state)
        w, h = grid.width, grid.height
        for x in range(w):
            grid.set_silent(x, 0, tile)
            grid.set_silent(x, h - 1, tile)
        for y in range(h):
            grid.set_silent(0, y, tile)
            grid.set_silent(w - 1, y, tile)


class EntranceStrategy:
    """Carve the spawn platform and the diggable neck below it.

    The platform spans the top ``spawn_area_height`` rows and opens the
    border so the player can enter.  The neck continues ``neck_length`` rows
    further down as diggable terrain, always leaving the bottom row and the
    side columns of the border intact.
    """

    def __init__(self, neck_width: int = 2, neck_length: int = 3, spawn_area_height: int = 2) -> None:
        if neck_width < 1 or neck_length < 0 or spawn_area_height < 0:
            raise GenerationConfigError(
                "Invalid entrance settings: "
                f"width={neck_width} length={neck_length} spawn_height={spawn_area_height}"
            )
        self.neck_width = neck_width
        self.neck_length = neck_length
        self.spawn_area_height = spawn_area_height

    def columns(self, width: int) -> range:
        """Columns covered by the entrance, clipped to the grid."""
        first = width // 2 - self.neck_width // 2
        return range(max(0, first), min(width, first + self.neck_width))

    def execute(self, grid: GridStore, rng: random.Random) -> None:
        w, h = grid.width, grid.height
        top = h - 1
        neck_start = top - self.spawn_area_height
        neck_end = neck_start - self.neck_length
        columns = self.columns(w)

        empty = Tile(TerrainType.EMPTY)
        for y in range(top, max(neck_start, -1), -1):
            for x in columns:
                grid.set_silent(x, y, empty)

        diggable = Tile(TerrainType.DIGGABLE)
        for y in range(neck_start, max(neck_end, 0), -1):
            for x in columns:
                if 0 < x < w - 1:
                    grid.set_silent(x, y, diggable)

        logger.debug(
            "Entrance on %s: columns %d..%d, platform rows %d..%d, neck rows %d..%d",
            grid.name,
            columns.start,
            columns.stop - 1,
            neck_start + 1,
            top,
            max(neck_end + 1, 1),
            neck_start,
        )


__all__ = [
    "MapStrategy",
    "FillStrategy",
    "BlobGenerationStrategy",
    "BorderStrategy",
    "EntranceStrategy",
]
