"""Dense storage of the logical (base) grid of a layer."""

from __future__ import annotations

import logging
from typing import Iterator, List, Protocol, Tuple

from core.tile import OUT_OF_BOUNDS_TILE, TerrainType, Tile, TileLike, as_tile
from state.event_bus import EventBus, EventCallback, ON_GRID_INITIALIZED, ON_TILE_CHANGED

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


class GridView(Protocol):
    """Anything that mirrors a grid visually (normally a dual-grid renderer)."""

    def refresh_affected(self, base_x: int, base_y: int) -> None: ...

    def refresh_all(self) -> None: ...


class GridStore:
    """Fixed size ``width`` x ``height`` array of :class:`Tile`.

    Cells are stored row-major in a flat list and are always populated.  Reads
    outside the grid return :data:`core.tile.OUT_OF_BOUNDS_TILE`, writes
    outside it are ignored.

    Two setters are offered.  :meth:`set_silent` only stores the tile and is
    used by generation passes.  :meth:`set` additionally refreshes the visual
    cells touching ``(x, y)`` on every attached view and publishes
    :data:`~state.event_bus.ON_TILE_CHANGED` on the grid's own bus so that
    dependent layers can react.
    """

    def __init__(
        self,
        width: int,
        height: int,
        default: TileLike = TerrainType.EMPTY,
        name: str = "grid",
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self._width = width
        self._height = height
        self.name = name
        default_tile = as_tile(default)
        self._cells: List[Tile] = [default_tile] * (width * height)
        self.events = EventBus()
        self._views: List[GridView] = []
        self._initialized = False

    # ------------------------------------------------------------------
    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def is_initialized(self) -> bool:
        """``True`` once a generation pass finished and the grid was rendered."""
        return self._initialized

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    # ------------------------------------------------------------------
    def get(self, x: int, y: int) -> Tile:
        if not self.in_bounds(x, y):
            return OUT_OF_BOUNDS_TILE
        return self._cells[y * self._width + x]

    def state(self, x: int, y: int) -> int:
        return self.get(x, y).state

    def set_silent(self, x: int, y: int, tile: TileLike) -> None:
        """Store ``tile`` at ``(x, y)`` without any side effect."""
        if not self.in_bounds(x, y):
            return
        self._cells[y * self._width + x] = as_tile(tile)

    def set(self, x: int, y: int, tile: TileLike) -> None:
        """Store ``tile`` at ``(x, y)``, refresh views and notify listeners."""
        if not self.in_bounds(x, y):
            return
        new_tile = as_tile(tile)
        self._cells[y * self._width + x] = new_tile
        for view in list(self._views):
            view.refresh_affected(x, y)
        self.events.publish(ON_TILE_CHANGED, x, y, new_tile)

    def fill(self, tile: TileLike) -> None:
        fill_tile = as_tile(tile)
        self._cells = [fill_tile] * (self._width * self._height)

    # ------------------------------------------------------------------
    def iter_cells(self) -> Iterator[Tuple[int, int, Tile]]:
        """Yield ``(x, y, tile)`` for every cell, row by row from ``y == 0``."""
        for y in range(self._height):
            row_start = y * self._width
            for x in range(self._width):
                yield x, y, self._cells[row_start + x]

    def states(self) -> List[List[int]]:
        """Return a snapshot of the terrain states, indexed ``[y][x]``."""
        return [
            [tile.state for tile in self._cells[y * self._width:(y + 1) * self._width]]
            for y in range(self._height)
        ]

    def positions_with_state(self, state: int) -> List[Cell]:
        return [(x, y) for x, y, tile in self.iter_cells() if tile.state == state]

    def to_ascii(self, symbols: str = ".#X") -> str:
        """Return the grid as text with the top row (highest ``y``) first."""
        lines = []
        for y in range(self._height - 1, -1, -1):
            row = self._cells[y * self._width:(y + 1) * self._width]
            lines.append(
                "".join(symbols[t.state] if t.state < len(symbols) else "?" for t in row)
            )
        return "\n".join(lines)

    # ------------------------------------------------------------------
    def attach_view(self, view: GridView) -> None:
        if view not in self._views:
            self._views.append(view)

    def detach_view(self, view: GridView) -> None:
        if view in self._views:
            self._views.remove(view)

    def subscribe(self, event: str, callback: EventCallback) -> None:
        self.events.subscribe(event, callback)

    def unsubscribe(self, event: str, callback: EventCallback) -> None:
        self.events.unsubscribe(event, callback)

    def reset_initialization(self) -> None:
        """Re-arm the completion notification before a new generation pass."""
        self._initialized = False

    def complete_initialization(self) -> None:
        """Render the grid once and announce that generation finished.

        Calling this again without :meth:`reset_initialization` is a no-op so
        that the completion notification is raised exactly once per pass.
        """
        if self._initialized:
            logger.debug("Grid %s already initialized", self.name)
            return
        self._initialized = True
        for view in list(self._views):
            view.refresh_all()
        logger.debug("Grid %s initialization finalized", self.name)
        self.events.publish(ON_GRID_INITIALIZED, self)


def is_interior(x: int, y: int, width: int, height: int) -> bool:
    return 0 < x < width - 1 and 0 < y < height - 1


__all__ = ["GridStore", "GridView", "Cell", "is_interior"]
