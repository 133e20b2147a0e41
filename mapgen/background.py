"""Two-state background layers (distant and mid background).

Each algorithm returns the set of *active* positions for a ``width`` x
``height`` grid.  :class:`BackgroundMapGenerator` writes state ``1`` on
active cells and ``0`` everywhere else, then finalizes the layer.
"""

from __future__ import annotations

import logging
import math
import random
import zlib
from enum import IntEnum
from typing import Optional, Protocol, Set

import numpy as np

from core.grid import Cell, GridStore
from core.tile import Tile

logger = logging.getLogger(__name__)

ACTIVE_STATE = 1
DEFAULT_STATE = 0


class BackgroundGenerator(Protocol):
    name: str

    def generate(self, width: int, height: int, rng: random.Random) -> Set[Cell]: ...


def _mask_to_set(mask: np.ndarray) -> Set[Cell]:
    ys, xs = np.nonzero(mask)
    return {(int(x), int(y)) for x, y in zip(xs, ys)}


def _neighbour_count(mask: np.ndarray) -> np.ndarray:
    """Number of active 8-neighbours per cell; outside the map counts as empty."""
    padded = np.pad(mask.astype(np.int32), 1)
    h, w = mask.shape
    total = np.zeros((h, w), dtype=np.int32)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            total += padded[1 + dy:1 + dy + h, 1 + dx:1 + dx + w]
    return total


class CellularAutomataGenerator:
    """Organic blobs: random fill followed by majority smoothing."""

    name = "Cellular Automata"

    def __init__(self, iterations: int = 5, fill_percent: float = 0.45) -> None:
        self.iterations = iterations
        self.fill_percent = fill_percent

    def generate(self, width: int, height: int, rng: random.Random) -> Set[Cell]:
        threshold = self.fill_percent * 100
        mask = np.array(
            [[rng.randrange(100) < threshold for _ in range(width)] for _ in range(height)],
            dtype=bool,
        ).reshape(height, width)
        for _ in range(self.iterations):
            neighbours = _neighbour_count(mask)
            # more than 4 live neighbours -> active, fewer -> empty, exactly 4 -> unchanged
            mask = np.where(neighbours > 4, True, np.where(neighbours < 4, False, mask))
        return _mask_to_set(mask)


def _fade(t: np.ndarray) -> np.ndarray:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def perlin_noise(width: int, height: int, scale: float, rng: random.Random) -> np.ndarray:
    """Gradient noise sampled at ``(x * scale, y * scale)``.

    Returns a ``(height, width)`` array with values in ``[0, 1]`` centred on
    ``0.5``.  The permutation table, gradients and sampling offset all come
    from ``rng``.
    """
    order = list(range(256))
    rng.shuffle(order)
    perm = np.array(order + order, dtype=np.int64)
    angles = np.array([rng.random() * 2.0 * math.pi for _ in range(256)])
    grad_x, grad_y = np.cos(angles), np.sin(angles)
    offset_x, offset_y = rng.random() * 256.0, rng.random() * 256.0

    xs = np.arange(width, dtype=np.float64) * scale + offset_x
    ys = np.arange(height, dtype=np.float64) * scale + offset_y
    px, py = np.meshgrid(xs, ys)
    x0 = np.floor(px)
    y0 = np.floor(py)
    fx, fy = px - x0, py - y0
    xi = x0.astype(np.int64) & 255
    yi = y0.astype(np.int64) & 255

    def corner(ix: np.ndarray, iy: np.ndarray, dx: np.ndarray, dy: np.ndarray) -> np.ndarray:
        h = perm[perm[ix] + iy] & 255
        return grad_x[h] * dx + grad_y[h] * dy

    n00 = corner(xi, yi, fx, fy)
    n10 = corner(xi + 1, yi, fx - 1.0, fy)
    n01 = corner(xi, yi + 1, fx, fy - 1.0)
    n11 = corner(xi + 1, yi + 1, fx - 1.0, fy - 1.0)
    u, v = _fade(fx), _fade(fy)
    bottom = n00 + u * (n10 - n00)
    top = n01 + u * (n11 - n01)
    value = bottom + v * (top - bottom)
    return np.clip((value + 1.0) * 0.5, 0.0, 1.0)


class PerlinNoiseGenerator:
    """Large soft regions (clouds, distant rock) from thresholded noise."""

    name = "Perlin Noise"

    def __init__(self, scale: float = 0.1, threshold: float = 0.5) -> None:
        self.scale = scale
        self.threshold = threshold

    def generate(self, width: int, height: int, rng: random.Random) -> Set[Cell]:
        noise = perlin_noise(width, height, self.scale, rng)
        return _mask_to_set(noise > self.threshold)


class RandomWalkGenerator:
    """Thin veins left behind by a few drunk walkers."""

    name = "Random Walk"

    def __init__(self, walker_count: int = 5, steps: int = 50) -> None:
        self.walker_count = walker_count
        self.steps = steps

    def generate(self, width: int, height: int, rng: random.Random) -> Set[Cell]:
        active: Set[Cell] = set()
        for _ in range(self.walker_count):
            x, y = rng.randrange(width), rng.randrange(height)
            for _ in range(self.steps):
                active.add((x, y))
                dx, dy = ((0, 1), (0, -1), (-1, 0), (1, 0))[rng.randrange(4)]
                if 0 <= x + dx < width and 0 <= y + dy < height:
                    x, y = x + dx, y + dy
        return active


class ClusterGenerator:
    """Scattered filled circles."""

    name = "Cluster Spawner"

    def __init__(self, cluster_count: int = 10, min_radius: int = 2, max_radius: int = 4) -> None:
        self.cluster_count = cluster_count
        self.min_radius = min_radius
        self.max_radius = max(min_radius, max_radius)

    def generate(self, width: int, height: int, rng: random.Random) -> Set[Cell]:
        active: Set[Cell] = set()
        for _ in range(self.cluster_count):
            cx, cy = rng.randrange(width), rng.randrange(height)
            r = rng.randint(self.min_radius, self.max_radius)
            for y in range(max(0, cy - r), min(height, cy + r + 1)):
                for x in range(max(0, cx - r), min(width, cx + r + 1)):
                    if math.hypot(x - cx, y - cy) <= r:
                        active.add((x, y))
        return active


class BackgroundAlgorithm(IntEnum):
    CELLULAR_AUTOMATA = 0
    PERLIN_NOISE = 1
    RANDOM_WALK = 2
    CLUSTERS = 3


def _name_salt(name: str) -> int:
    # Must be identical across interpreter runs
    return zlib.crc32(name.encode("utf-8")) % 100


class BackgroundMapGenerator:
    """Fill a two-state layer using one of the background algorithms.

    The layer seed is ``seed + algorithm + salt`` so two background layers
    driven by the same world seed still look different.  ``salt`` defaults
    to a stable value derived from the grid name.
    """

    def __init__(
        self,
        grid: GridStore,
        algorithm: BackgroundAlgorithm = BackgroundAlgorithm.CELLULAR_AUTOMATA,
        density: float = 0.45,
        size: int = 5,
        noise_scale: float = 0.1,
        salt: Optional[int] = None,
        seed: int = 12345,
    ) -> None:
        self.grid = grid
        self.algorithm = BackgroundAlgorithm(algorithm)
        self.density = density
        self.size = size
        self.noise_scale = noise_scale
        self.salt = _name_salt(grid.name) if salt is None else salt
        self.seed = seed

    def create_generator(self) -> BackgroundGenerator:
        algo = self.algorithm
        if algo is BackgroundAlgorithm.CELLULAR_AUTOMATA:
            return CellularAutomataGenerator(5, self.density)
        if algo is BackgroundAlgorithm.PERLIN_NOISE:
            return PerlinNoiseGenerator(self.noise_scale, self.density)
        if algo is BackgroundAlgorithm.RANDOM_WALK:
            return RandomWalkGenerator(5, self.size * 10)
        return ClusterGenerator(10, 2, self.size)

    def layer_seed(self, seed: int) -> int:
        return seed + int(self.algorithm) + self.salt

    def generate(self, seed: Optional[int] = None) -> GridStore:
        """Generate the layer; ``seed`` is the world seed, if any."""
        layer_seed = self.layer_seed(seed) if seed is not None else self.seed
        generator = self.create_generator()
        logger.info(
            "BG generator (%s): running %s with seed %d", self.grid.name, generator.name, layer_seed
        )
        active = generator.generate(self.grid.width, self.grid.height, random.Random(layer_seed))

        self.grid.reset_initialization()
        on, off = Tile(ACTIVE_STATE), Tile(DEFAULT_STATE)
        for x, y, _ in list(self.grid.iter_cells()):
            self.grid.set_silent(x, y, on if (x, y) in active else off)
        self.grid.complete_initialization()
        logger.debug("%s: %d active cells", self.grid.name, len(active))
        return self.grid


__all__ = [
    "ACTIVE_STATE",
    "BackgroundAlgorithm",
    "BackgroundGenerator",
    "BackgroundMapGenerator",
    "CellularAutomataGenerator",
    "ClusterGenerator",
    "PerlinNoiseGenerator",
    "RandomWalkGenerator",
    "perlin_noise",
]
