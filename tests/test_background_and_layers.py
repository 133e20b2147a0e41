import random

import numpy as np
import pytest

from core.grid import GridStore
from core.tile import TerrainType
from mapgen.background import (
    BackgroundAlgorithm,
    BackgroundMapGenerator,
    CellularAutomataGenerator,
    ClusterGenerator,
    PerlinNoiseGenerator,
    RandomWalkGenerator,
    perlin_noise,
)
from mapgen.layers import DecorationMapGenerator, DistantDecorationMapGenerator, ForegroundMapGenerator
from state.event_bus import ON_GRID_INITIALIZED

E, D, U = TerrainType.EMPTY, TerrainType.DIGGABLE, TerrainType.UNDIGGABLE


@pytest.mark.parametrize(
    "generator",
    [
        CellularAutomataGenerator(),
        PerlinNoiseGenerator(),
        RandomWalkGenerator(),
        ClusterGenerator(),
    ],
    ids=lambda g: g.name,
)
def test_background_generators_are_bounded_and_deterministic(generator):
    first = generator.generate(25, 15, random.Random(8))
    second = generator.generate(25, 15, random.Random(8))
    assert first == second
    assert all(0 <= x < 25 and 0 <= y < 15 for x, y in first)


def test_perlin_noise_range_and_shape():
    noise = perlin_noise(40, 30, 0.1, random.Random(2))
    assert noise.shape == (30, 40)
    assert float(noise.min()) >= 0.0
    assert float(noise.max()) <= 1.0
    # neighbouring samples at a small scale are close together
    assert float(np.abs(np.diff(noise, axis=1)).max()) < 0.5


def test_empty_fill_stays_empty():
    assert CellularAutomataGenerator(fill_percent=0.0).generate(10, 10, random.Random(1)) == set()


def test_random_walk_visits_at_most_steps_cells():
    active = RandomWalkGenerator(walker_count=2, steps=7).generate(50, 50, random.Random(3))
    assert 1 <= len(active) <= 14


def test_clusters_are_discs():
    active = ClusterGenerator(cluster_count=1, min_radius=0, max_radius=0).generate(9, 9, random.Random(0))
    assert len(active) == 1


@pytest.mark.parametrize("algorithm", list(BackgroundAlgorithm))
def test_background_layer_writes_two_states(algorithm):
    grid = GridStore(20, 14, name="mid_background")
    seen = []
    grid.subscribe(ON_GRID_INITIALIZED, seen.append)
    BackgroundMapGenerator(grid, algorithm).generate(321)
    assert {s for row in grid.states() for s in row} <= {0, 1}
    assert grid.is_initialized
    assert seen == [grid]


def test_background_layer_seed_is_salted():
    grid = GridStore(10, 10, name="distant")
    gen = BackgroundMapGenerator(grid, BackgroundAlgorithm.RANDOM_WALK, salt=7)
    assert gen.layer_seed(100) == 100 + 2 + 7
    default_salt = BackgroundMapGenerator(GridStore(10, 10, name="distant")).salt
    assert default_salt == BackgroundMapGenerator(GridStore(4, 4, name="distant")).salt
    assert 0 <= default_salt < 100


def test_background_layer_is_reproducible():
    grids = [GridStore(24, 24, name="bg") for _ in range(2)]
    for grid in grids:
        BackgroundMapGenerator(grid, BackgroundAlgorithm.PERLIN_NOISE, density=0.5).generate(77)
    assert grids[0].states() == grids[1].states()


def _source():
    source = GridStore(4, 3)
    source.set_silent(0, 0, U)
    source.set_silent(1, 0, D)
    source.set_silent(2, 1, U)
    source.set_silent(3, 2, D)
    return source


def test_foreground_marks_trigger_cells():
    target = GridStore(4, 3)
    ForegroundMapGenerator(_source(), target).generate(5)
    assert sorted(target.positions_with_state(1)) == [(0, 0), (2, 1)]
    assert target.is_initialized


def test_foreground_coverage_zero_leaves_nothing():
    target = GridStore(4, 3)
    ForegroundMapGenerator(_source(), target, coverage_ratio=0.0).generate(5)
    assert target.positions_with_state(1) == []


def test_foreground_partial_coverage_is_seeded():
    source = GridStore(30, 30, default=U)
    results = []
    for _ in range(2):
        target = GridStore(30, 30)
        ForegroundMapGenerator(source, target, coverage_ratio=0.5).generate(12)
        results.append(target.states())
    assert results[0] == results[1]
    active = sum(s for row in results[0] for s in row)
    assert 0 < active < 900


def test_foreground_uses_own_seed_when_director_seed_disabled():
    source = GridStore(20, 20, default=U)
    a, b = GridStore(20, 20), GridStore(20, 20)
    ForegroundMapGenerator(source, a, coverage_ratio=0.5, seed=3, use_director_seed=False).generate(1)
    ForegroundMapGenerator(source, b, coverage_ratio=0.5, seed=3, use_director_seed=False).generate(2)
    assert a.states() == b.states()


def test_decoration_overlays_selected_terrain():
    target = GridStore(4, 3)
    DecorationMapGenerator(_source(), target).generate(1)
    assert sorted(target.positions_with_state(1)) == [(0, 0), (1, 0), (2, 1), (3, 2)]

    rock_only = GridStore(4, 3)
    DecorationMapGenerator(_source(), rock_only, overlay_diggable=False).generate(1)
    assert sorted(rock_only.positions_with_state(1)) == [(0, 0), (2, 1)]


def test_decoration_ignores_cells_outside_source():
    target = GridStore(6, 3)
    DecorationMapGenerator(_source(), target).generate()
    assert target.state(5, 0) == 0


def test_distant_decoration_fills_source_extent():
    target = GridStore(4, 3)
    DistantDecorationMapGenerator(_source(), target, decoration_state=1).generate()
    assert target.states() == [[1] * 4] * 3
    assert target.is_initialized
