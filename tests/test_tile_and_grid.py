from core.grid import GridStore, is_interior
from core.tile import OUT_OF_BOUNDS_TILE, TerrainType, Tile, as_tile
from state.event_bus import ON_GRID_INITIALIZED, ON_TILE_CHANGED


def test_diggable_tile_takes_three_hits():
    tile = Tile(TerrainType.DIGGABLE)
    assert tile.max_hit_points == 3
    once = tile.damaged()
    assert once.hit_points == 2
    assert tile.hit_points == 3  # original untouched
    assert not once.is_destroyed
    assert once.damaged(2).is_destroyed


def test_non_diggable_tiles_ignore_damage():
    rock = Tile(TerrainType.UNDIGGABLE)
    assert rock.max_hit_points == 0
    assert rock.damaged(5) is rock
    assert not rock.is_destroyed


def test_tiles_compare_by_value():
    assert Tile(1) == Tile(TerrainType.DIGGABLE)
    assert as_tile(2) == Tile(TerrainType.UNDIGGABLE)
    assert Tile(1).damaged() != Tile(1)


def test_out_of_bounds_reads_return_undiggable_sentinel():
    grid = GridStore(4, 3)
    for x, y in [(-1, 0), (0, -1), (4, 0), (0, 3), (100, 100)]:
        assert grid.get(x, y) is OUT_OF_BOUNDS_TILE
        assert grid.state(x, y) == TerrainType.UNDIGGABLE
    assert grid.get(3, 2).state == TerrainType.EMPTY


def test_grid_starts_fully_populated_with_default():
    grid = GridStore(3, 2, default=TerrainType.DIGGABLE)
    assert grid.states() == [[1, 1, 1], [1, 1, 1]]
    assert len(list(grid.iter_cells())) == 6


def test_silent_set_does_not_notify():
    grid = GridStore(3, 3)
    calls = []
    grid.subscribe(ON_TILE_CHANGED, lambda *args: calls.append(args))
    grid.set_silent(1, 1, TerrainType.DIGGABLE)
    assert grid.state(1, 1) == TerrainType.DIGGABLE
    assert calls == []


def test_set_publishes_tile_changed():
    grid = GridStore(3, 3)
    calls = []
    grid.subscribe(ON_TILE_CHANGED, lambda *args: calls.append(args))
    grid.set(2, 1, TerrainType.UNDIGGABLE)
    assert calls == [(2, 1, Tile(TerrainType.UNDIGGABLE))]


def test_out_of_bounds_writes_are_ignored():
    grid = GridStore(3, 3)
    calls = []
    grid.subscribe(ON_TILE_CHANGED, lambda *args: calls.append(args))
    grid.set(5, 5, TerrainType.DIGGABLE)
    grid.set_silent(-1, 0, TerrainType.DIGGABLE)
    assert calls == []
    assert grid.positions_with_state(TerrainType.DIGGABLE) == []


def test_states_snapshot_is_indexed_by_row():
    grid = GridStore(3, 2)
    grid.set_silent(2, 0, TerrainType.UNDIGGABLE)
    grid.set_silent(0, 1, TerrainType.DIGGABLE)
    assert grid.states() == [[0, 0, 2], [1, 0, 0]]
    assert grid.to_ascii() == "#..\n..X"


def test_completion_notification_fires_once_per_pass():
    grid = GridStore(2, 2)
    seen = []
    grid.subscribe(ON_GRID_INITIALIZED, seen.append)
    assert not grid.is_initialized
    grid.complete_initialization()
    grid.complete_initialization()
    assert grid.is_initialized
    assert seen == [grid]
    grid.reset_initialization()
    assert not grid.is_initialized
    grid.complete_initialization()
    assert seen == [grid, grid]


def test_unsubscribe_stops_notifications():
    grid = GridStore(2, 2)
    calls = []

    def listener(*args):
        calls.append(args)

    grid.subscribe(ON_TILE_CHANGED, listener)
    grid.unsubscribe(ON_TILE_CHANGED, listener)
    grid.set(0, 0, 1)
    assert calls == []


def test_is_interior_excludes_outer_ring():
    assert is_interior(1, 1, 4, 4)
    assert not is_interior(0, 2, 4, 4)
    assert not is_interior(3, 2, 4, 4)
    assert not is_interior(2, 3, 4, 4)
