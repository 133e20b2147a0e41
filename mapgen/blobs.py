"""Shape generators producing one organic terrain feature ("blob").

Every generator exposes ``generate(start, terrain_state, width, height, rng)``
and returns the set of grid positions making up the blob.  Positions are
always strictly interior (never on the outer ring, which the border pass
owns) and the result only depends on the state of ``rng``.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Set

from core.grid import Cell, is_interior

DIRECTIONS: List[Cell] = [(0, 1), (0, -1), (-1, 0), (1, 0)]  # up, down, left, right


class BlobGenerator(Protocol):
    name: str

    def generate(
        self,
        start: Cell,
        terrain_state: int,
        width: int,
        height: int,
        rng: random.Random,
    ) -> Set[Cell]: ...


# ---------------------------------------------------------------------------
# Large, rounded blobs
# ---------------------------------------------------------------------------
@dataclass
class LargeBlobSettings:
    min_radius: int = 3
    max_radius: int = 6
    fill_ratio: float = 0.7
    smoothing_iterations: int = 2


def _count_filled_neighbours(pos: Cell, filled: Set[Cell]) -> int:
    x, y = pos
    count = 0
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            if (x + dx, y + dy) in filled:
                count += 1
    return count


class LargeBlobGenerator:
    """Rounded cavern-like blobs.

    A disc of radius ``r`` is sampled with a fill chance that falls off
    towards the rim, then a few cellular automata passes round off the
    sampling noise.
    """

    name = "large"

    def __init__(self, settings: Optional[LargeBlobSettings] = None) -> None:
        self.settings = settings or LargeBlobSettings()

    def generate(
        self,
        start: Cell,
        terrain_state: int,
        width: int,
        height: int,
        rng: random.Random,
    ) -> Set[Cell]:
        s = self.settings
        radius = rng.randint(s.min_radius, s.max_radius)
        sx, sy = start
        filled: Set[Cell] = set()
        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                x, y = sx + dx, sy + dy
                if not is_interior(x, y, width, height):
                    continue
                distance = math.hypot(dx, dy)
                if distance > radius:
                    continue
                chance = s.fill_ratio * (1.2 - distance / radius) if radius else 1.0
                chance = min(1.0, max(0.0, chance))
                if rng.random() < chance:
                    filled.add((x, y))
        return self._smooth(filled, start, radius, width, height)

    def _smooth(
        self, filled: Set[Cell], center: Cell, radius: int, width: int, height: int
    ) -> Set[Cell]:
        cx, cy = center
        for _ in range(self.settings.smoothing_iterations):
            smoothed: Set[Cell] = set()
            for dy in range(-radius - 1, radius + 2):
                for dx in range(-radius - 1, radius + 2):
                    pos = (cx + dx, cy + dy)
                    if not is_interior(pos[0], pos[1], width, height):
                        continue
                    neighbours = _count_filled_neighbours(pos, filled)
                    if neighbours >= 5 or (pos in filled and neighbours >= 4):
                        smoothed.add(pos)
            filled = smoothed
        return filled


# ---------------------------------------------------------------------------
# Snake-like winding blobs
# ---------------------------------------------------------------------------
@dataclass
class SnakeSettings:
    min_length: int = 8
    max_length: int = 16
    # Half width of the body: 0 = single tile, 1 = 3 tiles wide, ...
    width: int = 1
    direction_change_chance: float = 0.3
    max_branches: int = 2
    # Heading of the main walk; ``None`` picks a random cardinal direction
    initial_direction: Optional[Cell] = None


class SnakeBlobGenerator:
    """Narrow winding tunnels built from a random walk with short branches."""

    name = "snake"

    def __init__(self, settings: Optional[SnakeSettings] = None) -> None:
        self.settings = settings or SnakeSettings()

    def generate(
        self,
        start: Cell,
        terrain_state: int,
        width: int,
        height: int,
        rng: random.Random,
    ) -> Set[Cell]:
        s = self.settings
        positions: Set[Cell] = set()
        length = rng.randint(s.min_length, s.max_length)
        self._walk(start, length, positions, width, height, rng, s.initial_direction)

        # Sorted so branch starts do not depend on set iteration order
        branch_starts = sorted(positions)
        branch_count = rng.randint(0, s.max_branches) if s.max_branches > 0 else 0
        for _ in range(min(branch_count, len(branch_starts))):
            branch_start = branch_starts[rng.randrange(len(branch_starts))]
            self._walk(branch_start, length // 2, positions, width, height, rng)
        return positions

    def _walk(
        self,
        start: Cell,
        length: int,
        positions: Set[Cell],
        width: int,
        height: int,
        rng: random.Random,
        direction: Optional[Cell] = None,
    ) -> None:
        s = self.settings
        x, y = start
        dx, dy = direction if direction is not None else rng.choice(DIRECTIONS)
        for _ in range(length):
            self._stamp((x, y), positions, width, height)
            if s.direction_change_chance > 0 and rng.random() < s.direction_change_chance:
                dx, dy = rng.choice(DIRECTIONS)
            nx, ny = x + dx, y + dy
            if not is_interior(nx, ny, width, height):
                # Hit the boundary: one alternate direction, otherwise stop
                dx, dy = rng.choice(DIRECTIONS)
                nx, ny = x + dx, y + dy
                if not is_interior(nx, ny, width, height):
                    break
            x, y = nx, ny

    def _stamp(self, center: Cell, positions: Set[Cell], width: int, height: int) -> None:
        w = self.settings.width
        cx, cy = center
        for dy in range(-w, w + 1):
            for dx in range(-w, w + 1):
                x, y = cx + dx, cy + dy
                if is_interior(x, y, width, height):
                    positions.add((x, y))


def default_generators() -> Dict[str, BlobGenerator]:
    """Return the standard registry; ``"large"`` is the default entry."""
    return {
        LargeBlobGenerator.name: LargeBlobGenerator(),
        SnakeBlobGenerator.name: SnakeBlobGenerator(),
    }


__all__ = [
    "BlobGenerator",
    "DIRECTIONS",
    "LargeBlobGenerator",
    "LargeBlobSettings",
    "SnakeBlobGenerator",
    "SnakeSettings",
    "default_generators",
]
