"""Layers derived from the mining layer.

These generators read a finished *source* grid and write a two-state
*target* grid: the foreground occludes solid rock, decorations overlay
diggable or undiggable terrain and the distant decoration simply covers the
whole map.  They run after the mining layer in the world director.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from core.grid import GridStore
from core.tile import TerrainType, Tile

logger = logging.getLogger(__name__)


def _pick_seed(seed: Optional[int], own_seed: int, use_director_seed: bool) -> int:
    return seed if use_director_seed and seed is not None else own_seed


class ForegroundMapGenerator:
    """Mark foreground tiles where the source holds ``trigger_state``.

    ``coverage_ratio`` below ``1.0`` leaves random gaps for a worn look.
    """

    def __init__(
        self,
        source: GridStore,
        target: GridStore,
        trigger_state: int = TerrainType.UNDIGGABLE,
        active_state: int = 1,
        empty_state: int = 0,
        coverage_ratio: float = 1.0,
        seed: int = 12345,
        use_director_seed: bool = True,
    ) -> None:
        self.source = source
        self.target = target
        self.trigger_state = trigger_state
        self.active_state = active_state
        self.empty_state = empty_state
        self.coverage_ratio = coverage_ratio
        self.seed = seed
        self.use_director_seed = use_director_seed

    def generate(self, seed: Optional[int] = None) -> GridStore:
        current_seed = _pick_seed(seed, self.seed, self.use_director_seed)
        rng = random.Random(current_seed)
        logger.info("Generating foreground layer %s (seed %d)", self.target.name, current_seed)
        active, empty = Tile(self.active_state), Tile(self.empty_state)
        self.target.reset_initialization()
        for y in range(self.target.height):
            for x in range(self.target.width):
                tile = empty
                if self.source.in_bounds(x, y) and self.source.state(x, y) == self.trigger_state:
                    if rng.random() <= self.coverage_ratio:
                        tile = active
                self.target.set_silent(x, y, tile)
        self.target.complete_initialization()
        return self.target


class DecorationMapGenerator:
    """Overlay decorations on diggable and/or undiggable source terrain."""

    def __init__(
        self,
        source: GridStore,
        target: GridStore,
        overlay_diggable: bool = True,
        overlay_undiggable: bool = True,
        active_state: int = 1,
        empty_state: int = 0,
    ) -> None:
        self.source = source
        self.target = target
        self.overlay_diggable = overlay_diggable
        self.overlay_undiggable = overlay_undiggable
        self.active_state = active_state
        self.empty_state = empty_state

    def _decorates(self, state: int) -> bool:
        return (self.overlay_diggable and state == TerrainType.DIGGABLE) or (
            self.overlay_undiggable and state == TerrainType.UNDIGGABLE
        )

    def generate(self, seed: Optional[int] = None) -> GridStore:
        # The layout is fully determined by the source; ``seed`` is only logged
        logger.info("Generating decoration layer %s (seed %s)", self.target.name, seed)
        active, empty = Tile(self.active_state), Tile(self.empty_state)
        self.target.reset_initialization()
        for y in range(self.target.height):
            for x in range(self.target.width):
                decorated = self.source.in_bounds(x, y) and self._decorates(self.source.state(x, y))
                self.target.set_silent(x, y, active if decorated else empty)
        self.target.complete_initialization()
        return self.target


class DistantDecorationMapGenerator:
    """Fill the target with ``decoration_state`` over the source's extent."""

    def __init__(self, source: GridStore, target: GridStore, decoration_state: int = 1) -> None:
        self.source = source
        self.target = target
        self.decoration_state = decoration_state

    def generate(self, seed: Optional[int] = None) -> GridStore:
        logger.info(
            "Filling %s with state %d", self.target.name, self.decoration_state
        )
        tile = Tile(self.decoration_state)
        self.target.reset_initialization()
        for y in range(self.source.height):
            for x in range(self.source.width):
                self.target.set_silent(x, y, tile)
        self.target.complete_initialization()
        return self.target


__all__ = [
    "DecorationMapGenerator",
    "DistantDecorationMapGenerator",
    "ForegroundMapGenerator",
]
