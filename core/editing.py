"""Runtime edits of the mining layer and player spawn placement.

All edits go through :meth:`core.grid.GridStore.set` so the affected visual
tiles are refreshed and dependent layers are notified.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from core.grid import Cell, GridStore
from core.tile import TerrainType, Tile
from state.event_bus import ON_GRID_INITIALIZED

logger = logging.getLogger(__name__)

_CYCLE = {
    TerrainType.EMPTY: TerrainType.DIGGABLE,
    TerrainType.DIGGABLE: TerrainType.UNDIGGABLE,
    TerrainType.UNDIGGABLE: TerrainType.EMPTY,
}


def cycle_tile_at(grid: GridStore, x: int, y: int) -> Optional[Tile]:
    """Advance the cell to the next terrain type (Empty -> Diggable -> Undiggable)."""
    if not grid.in_bounds(x, y):
        return None
    current = grid.state(x, y)
    next_state = _CYCLE.get(current, TerrainType.EMPTY)
    tile = Tile(next_state)
    grid.set(x, y, tile)
    return tile


def paint_tile_at(grid: GridStore, x: int, y: int, state: int) -> None:
    grid.set(x, y, Tile(state))


def dig_at(grid: GridStore, x: int, y: int, damage: int = 1) -> bool:
    """Hit the diggable tile at ``(x, y)``.

    Returns ``True`` when the hit broke the tile, which turns the cell
    empty.  Non-diggable cells are left alone.
    """
    tile = grid.get(x, y)
    if not grid.in_bounds(x, y) or not tile.is_diggable:
        return False
    hit = tile.damaged(damage)
    if hit.is_destroyed:
        logger.debug("Tile (%d, %d) on %s destroyed", x, y, grid.name)
        grid.set(x, y, Tile(TerrainType.EMPTY))
        return True
    grid.set(x, y, hit)
    return False


def _is_spawnable(grid: GridStore, x: int, y: int) -> bool:
    return grid.in_bounds(x, y) and grid.state(x, y) == TerrainType.EMPTY


def find_spawn_position(grid: GridStore, prefer_top: bool = True) -> Cell:
    """Return an empty cell for the player to start in.

    With ``prefer_top`` the centre columns are scanned from the top row
    down first, which finds the entrance platform.  Otherwise (or when that
    fails) the whole grid is scanned top-down.  The grid centre is the last
    resort.
    """
    if prefer_top:
        cx = grid.width // 2
        for y in range(grid.height - 1, -1, -1):
            for x in (cx, cx - 1, cx + 1):
                if _is_spawnable(grid, x, y):
                    logger.debug("Spawn found at entrance area (%d, %d)", x, y)
                    return x, y
    for y in range(grid.height - 1, -1, -1):
        for x in range(grid.width):
            if _is_spawnable(grid, x, y):
                return x, y
    centre = (grid.width // 2, grid.height // 2)
    logger.warning("No empty cell on %s, spawning at centre %s", grid.name, centre)
    return centre


class SpawnLocator:
    """Report the spawn position once the grid has been generated.

    ``callback(position)`` fires right away when the grid is already
    initialized, otherwise on its completion notification.  Later passes
    fire it again.
    """

    def __init__(
        self,
        grid: GridStore,
        callback: Callable[[Cell], None],
        prefer_top: bool = True,
    ) -> None:
        self.grid = grid
        self.callback = callback
        self.prefer_top = prefer_top
        self.position: Optional[Cell] = None
        grid.subscribe(ON_GRID_INITIALIZED, self._on_grid_initialized)
        if grid.is_initialized:
            self._locate()

    def _on_grid_initialized(self, grid: GridStore) -> None:
        self._locate()

    def _locate(self) -> None:
        self.position = find_spawn_position(self.grid, self.prefer_top)
        logger.info("Player spawn on %s at %s", self.grid.name, self.position)
        self.callback(self.position)

    def detach(self) -> None:
        self.grid.unsubscribe(ON_GRID_INITIALIZED, self._on_grid_initialized)
