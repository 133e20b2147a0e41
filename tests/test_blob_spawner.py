import logging
import random

import pytest

from core.grid import GridStore
from core.tile import TerrainType
from mapgen.spawner import BlobSpawnConfig, BlobSpawner, GenerationConfigError


class PointGenerator:
    """Returns its start cell plus any extra cells, recording every call."""

    def __init__(self, name, extra=()):
        self.name = name
        self.extra = list(extra)
        self.starts = []

    def generate(self, start, terrain_state, width, height, rng):
        self.starts.append(start)
        return {start, *self.extra}


def _config(**overrides):
    values = dict(
        name="test",
        terrain_state=TerrainType.EMPTY,
        min_count=1,
        max_count=1,
        min_spacing=0,
        spawn_probability=1.0,
        generator_weights={"a": 1.0},
    )
    values.update(overrides)
    return BlobSpawnConfig(**values)


def test_zero_probability_skips_config(rng):
    grid = GridStore(10, 10, default=TerrainType.DIGGABLE)
    gen = PointGenerator("a")
    spawner = BlobSpawner(grid, rng, {"a": gen})
    assert spawner.spawn_blobs(_config(spawn_probability=0.0, min_count=3, max_count=3)) == 0
    assert gen.starts == []
    assert grid.positions_with_state(TerrainType.EMPTY) == []


def test_start_positions_keep_margin(rng):
    grid = GridStore(10, 10, default=TerrainType.DIGGABLE)
    gen = PointGenerator("a")
    spawner = BlobSpawner(grid, rng, {"a": gen})
    assert spawner.spawn_blobs(_config(min_count=40, max_count=40)) == 40
    assert all(2 <= x <= 7 and 2 <= y <= 7 for x, y in gen.starts)
    for x, y in gen.starts:
        assert grid.state(x, y) == TerrainType.EMPTY


def test_min_spacing_rejects_crowded_blobs(rng, caplog):
    grid = GridStore(20, 20)
    gen = PointGenerator("a")
    spawner = BlobSpawner(grid, rng, {"a": gen})
    with caplog.at_level(logging.DEBUG, logger="mapgen.spawner"):
        placed = spawner.spawn_blobs(_config(min_count=3, max_count=3, min_spacing=100))
    assert placed == 1
    assert len(gen.starts) == 1
    assert "Failed to place blob 2/3" in caplog.text


def test_spacing_applies_across_configs(rng):
    grid = GridStore(20, 20)
    gen = PointGenerator("a")
    spawner = BlobSpawner(grid, rng, {"a": gen})
    spawner.spawn_blobs(_config())
    assert spawner.spawn_blobs(_config(min_spacing=100)) == 0
    spawner.clear_occupied()
    assert spawner.spawn_blobs(_config(min_spacing=100)) == 1


def test_weights_choose_generator(rng):
    grid = GridStore(12, 12)
    a, b = PointGenerator("a"), PointGenerator("b")
    spawner = BlobSpawner(grid, rng, {"a": a, "b": b})
    spawner.spawn_blobs(_config(min_count=10, max_count=10, generator_weights={"a": 0.0, "b": 2.0}))
    assert a.starts == []
    assert len(b.starts) == 10


def test_all_zero_weights_fall_back_to_first_generator(rng):
    grid = GridStore(12, 12)
    a, b = PointGenerator("a"), PointGenerator("b")
    spawner = BlobSpawner(grid, rng, {"a": a, "b": b})
    spawner.spawn_blobs(_config(min_count=4, max_count=4, generator_weights={}))
    assert len(a.starts) == 4
    assert b.starts == []


def test_register_generator_adds_to_registry(rng):
    spawner = BlobSpawner(GridStore(10, 10), rng, {})
    gen = PointGenerator("dot")
    spawner.register_generator("dot", gen)
    assert spawner.spawn_blobs(_config(generator_weights={"dot": 1.0})) == 1
    assert "dot" in spawner.generators


def test_commit_clips_to_interior(rng):
    grid = GridStore(10, 10, default=TerrainType.DIGGABLE)
    gen = PointGenerator("a", extra=[(0, 4), (9, 9), (4, 0)])
    spawner = BlobSpawner(grid, rng, {"a": gen})
    spawner.spawn_blobs(_config())
    assert grid.state(0, 4) == TerrainType.DIGGABLE
    assert grid.state(9, 9) == TerrainType.DIGGABLE
    assert grid.state(4, 0) == TerrainType.DIGGABLE
    assert spawner.occupied == {gen.starts[0]}


def test_occupied_is_a_copy(rng):
    spawner = BlobSpawner(GridStore(10, 10), rng, {"a": PointGenerator("a")})
    spawner.spawn_blobs(_config())
    snapshot = spawner.occupied
    snapshot.clear()
    assert len(spawner.occupied) == 1


def test_grid_too_small_places_nothing(rng):
    spawner = BlobSpawner(GridStore(4, 4), rng, {"a": PointGenerator("a")})
    assert spawner.spawn_blobs(_config(min_count=2, max_count=2)) == 0


def test_empty_registry_is_a_configuration_error(rng):
    spawner = BlobSpawner(GridStore(10, 10), rng, {})
    with pytest.raises(GenerationConfigError):
        spawner.spawn_blobs(_config())


@pytest.mark.parametrize(
    "overrides",
    [
        {"min_count": 5, "max_count": 2},
        {"spawn_probability": 1.5},
        {"generator_weights": {"a": -1.0}},
    ],
)
def test_invalid_configs_are_rejected(rng, overrides):
    spawner = BlobSpawner(GridStore(10, 10), rng, {"a": PointGenerator("a")})
    with pytest.raises(GenerationConfigError):
        spawner.spawn_blobs(_config(**overrides))


def test_spawning_is_deterministic():
    results = []
    for _ in range(2):
        grid = GridStore(30, 30, default=TerrainType.DIGGABLE)
        BlobSpawner(grid, random.Random(11)).spawn_blobs(_config(min_count=4, max_count=4, min_spacing=5,
                                                                   generator_weights={"large": 1, "snake": 1}))
        results.append(grid.states())
    assert results[0] == results[1]
