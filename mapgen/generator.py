"""Gameplay (mining) layer generation.

``MapGenerator`` runs an ordered list of strategies against one grid with a
single seeded random generator, then finalizes the grid so that it is
rendered once and announces completion.  Equal seeds always yield equal
grids.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from core.grid import GridStore
from core.tile import TerrainType
from mapgen.spawner import BlobSpawnConfig
from mapgen.strategies import (
    BlobGenerationStrategy,
    BorderStrategy,
    EntranceStrategy,
    FillStrategy,
    MapStrategy,
)

logger = logging.getLogger(__name__)


def default_blob_configs() -> List[BlobSpawnConfig]:
    """Open caverns, then rock pockets, then the occasional grand cavern."""
    return [
        BlobSpawnConfig(
            name="Caverns",
            terrain_state=TerrainType.EMPTY,
            min_count=3,
            max_count=5,
            min_spacing=6,
            spawn_probability=1.0,
            generator_weights={"large": 0.6, "snake": 0.4},
        ),
        BlobSpawnConfig(
            name="Rock Pockets",
            terrain_state=TerrainType.UNDIGGABLE,
            min_count=2,
            max_count=4,
            min_spacing=4,
            spawn_probability=0.8,
            generator_weights={"large": 0.3, "snake": 0.7},
        ),
        BlobSpawnConfig(
            name="Grand Cavern",
            terrain_state=TerrainType.EMPTY,
            min_count=1,
            max_count=1,
            min_spacing=8,
            spawn_probability=0.25,
            generator_weights={"large": 1.0, "snake": 0.0},
        ),
    ]


@dataclass
class MapGeneratorSettings:
    fill_state: int = TerrainType.DIGGABLE
    blob_configs: List[BlobSpawnConfig] = field(default_factory=default_blob_configs)
    border_state: int = TerrainType.UNDIGGABLE
    neck_width: int = 2
    neck_length: int = 3
    spawn_area_height: int = 2


class MapGenerator:
    """Generate the mining layer of a world."""

    def __init__(
        self,
        grid: GridStore,
        strategies: Optional[Sequence[MapStrategy]] = None,
        settings: Optional[MapGeneratorSettings] = None,
    ) -> None:
        self.grid = grid
        self.settings = settings or MapGeneratorSettings()
        self._strategies = list(strategies) if strategies is not None else None
        self.last_seed: Optional[int] = None

    def build_pipeline(self) -> List[MapStrategy]:
        """Return the strategies in execution order."""
        if self._strategies is not None:
            return list(self._strategies)
        s = self.settings
        return [
            FillStrategy(s.fill_state),
            BlobGenerationStrategy(s.blob_configs),
            BorderStrategy(s.border_state),
            EntranceStrategy(s.neck_width, s.neck_length, s.spawn_area_height),
        ]

    def generate_map(self, seed: int) -> GridStore:
        logger.info("Generating %s (seed %d)", self.grid.name, seed)
        rng = random.Random(seed)
        self.grid.reset_initialization()
        for strategy in self.build_pipeline():
            logger.debug("Running %s", type(strategy).__name__)
            strategy.execute(self.grid, rng)
        self.last_seed = seed
        self.grid.complete_initialization()
        logger.info("Generation of %s complete", self.grid.name)
        return self.grid

    # Uniform entry point used by the world director
    generate = generate_map


__all__ = ["MapGenerator", "MapGeneratorSettings", "default_blob_configs"]
