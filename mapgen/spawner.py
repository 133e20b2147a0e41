"""Placement of blobs on a grid from declarative spawn configurations."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Dict, Optional, Set

import constants
from core.grid import Cell, GridStore, is_interior
from core.tile import TerrainType, Tile
from mapgen.blobs import BlobGenerator, default_generators

logger = logging.getLogger(__name__)


class GenerationConfigError(ValueError):
    """Raised for generation settings that cannot produce a map."""


def _default_weights() -> Dict[str, float]:
    return {"large": 0.5, "snake": 0.5}


@dataclass(frozen=True)
class BlobSpawnConfig:
    name: str = "Unnamed Config"
    terrain_state: int = TerrainType.EMPTY
    min_count: int = 3
    max_count: int = 6
    min_spacing: int = 4
    spawn_probability: float = 1.0
    generator_weights: Dict[str, float] = field(default_factory=_default_weights)

    def validate(self) -> None:
        if self.min_count < 0 or self.max_count < self.min_count:
            raise GenerationConfigError(
                f"{self.name}: invalid blob count range {self.min_count}..{self.max_count}"
            )
        if not 0.0 <= self.spawn_probability <= 1.0:
            raise GenerationConfigError(
                f"{self.name}: spawn probability {self.spawn_probability} outside [0, 1]"
            )
        if any(w < 0 for w in self.generator_weights.values()):
            raise GenerationConfigError(f"{self.name}: generator weights must be >= 0")


class BlobSpawner:
    """Place blobs from a weighted mix of generators.

    Positions claimed by committed blobs are remembered for the lifetime of
    the spawner (or until :meth:`clear_occupied`) so later blobs keep their
    distance.  All randomness comes from ``rng``.
    """

    def __init__(
        self,
        grid: GridStore,
        rng: random.Random,
        generators: Optional[Dict[str, BlobGenerator]] = None,
        max_attempts: int = constants.BLOB_PLACEMENT_ATTEMPTS,
    ) -> None:
        self.grid = grid
        self.rng = rng
        self.max_attempts = max_attempts
        self._generators: Dict[str, BlobGenerator] = (
            dict(generators) if generators is not None else default_generators()
        )
        self._occupied: Set[Cell] = set()

    # ------------------------------------------------------------------
    def register_generator(self, name: str, generator: BlobGenerator) -> None:
        self._generators[name] = generator

    @property
    def generators(self) -> Dict[str, BlobGenerator]:
        return dict(self._generators)

    @property
    def occupied(self) -> Set[Cell]:
        return set(self._occupied)

    def clear_occupied(self) -> None:
        """Forget claimed positions (call between independent phases)."""
        self._occupied.clear()

    # ------------------------------------------------------------------
    def spawn_blobs(self, config: BlobSpawnConfig) -> int:
        """Spawn the blobs described by ``config`` and return how many landed."""
        config.validate()
        if not self._generators:
            raise GenerationConfigError("BlobSpawner has no registered generators")

        if self.rng.random() > config.spawn_probability:
            logger.debug("Skipping '%s' (probability check)", config.name)
            return 0

        count = self.rng.randint(config.min_count, config.max_count)
        logger.debug(
            "Spawning %d blobs for '%s' (state %d)", count, config.name, config.terrain_state
        )
        placed = 0
        for i in range(count):
            positions = self._try_spawn_blob(config)
            if positions is None:
                logger.debug(
                    "Failed to place blob %d/%d for '%s' after %d attempts",
                    i + 1,
                    count,
                    config.name,
                    self.max_attempts,
                )
                continue
            placed += 1
            logger.debug("Spawned blob %d/%d with %d tiles", i + 1, count, len(positions))
        return placed

    def _try_spawn_blob(self, config: BlobSpawnConfig) -> Optional[Set[Cell]]:
        width, height = self.grid.width, self.grid.height
        margin = constants.BLOB_START_MARGIN
        if width - 2 * margin <= 0 or height - 2 * margin <= 0:
            return None
        for _ in range(self.max_attempts):
            start = (
                self.rng.randrange(margin, width - margin),
                self.rng.randrange(margin, height - margin),
            )
            if not self._is_valid_spawn_position(start, config.min_spacing):
                continue
            generator = self._select_generator(config)
            positions = generator.generate(start, config.terrain_state, width, height, self.rng)
            if positions:
                return self._commit(positions, config.terrain_state)
        return None

    def _select_generator(self, config: BlobSpawnConfig) -> BlobGenerator:
        names = list(self._generators)
        weights = [max(0.0, config.generator_weights.get(n, 0.0)) for n in names]
        total = sum(weights)
        if total <= 0:
            return self._generators[names[0]]
        roll = self.rng.random() * total
        for name, weight in zip(names, weights):
            if roll < weight:
                return self._generators[name]
            roll -= weight
        # Floating point leftovers land on the last weighted generator
        return self._generators[[n for n, w in zip(names, weights) if w > 0][-1]]

    def _is_valid_spawn_position(self, position: Cell, min_spacing: float) -> bool:
        px, py = position
        for ox, oy in self._occupied:
            if math.hypot(px - ox, py - oy) < min_spacing:
                return False
        return True

    def _commit(self, positions: Set[Cell], terrain_state: int) -> Set[Cell]:
        width, height = self.grid.width, self.grid.height
        tile = Tile(terrain_state)
        committed = {p for p in positions if is_interior(p[0], p[1], width, height)}
        for x, y in sorted(committed):
            self.grid.set_silent(x, y, tile)
        self._occupied.update(committed)
        return committed


__all__ = ["BlobSpawnConfig", "BlobSpawner", "GenerationConfigError"]
