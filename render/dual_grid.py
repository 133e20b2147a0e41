"""Dual-grid rendering of a logical :class:`~core.grid.GridStore`.

The visual grid is offset from the logical grid by half a cell on both axes:
every visual cell sits on the shared corner of four logical cells and its
tile is chosen purely from their terrain states::

    (vx, vy+1) ---- (vx+1, vy+1)        top-left      top-right
        |    visual     |
        |  (vx, vy)     |
    (vx, vy)   ---- (vx+1, vy)          bottom-left   bottom-right

A ``W`` x ``H`` logical grid therefore has ``(W-1)`` x ``(H-1)`` visual cells.
The resolved asset index is handed to a *sink*, any object with
``set_cell_asset(x, y, asset)`` and ``clear()`` such as
:class:`render.tilemap.TilemapPainter`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Set, Tuple

from core.grid import GridStore
from loaders.pattern_table import Pattern, PatternTable, pattern_key

logger = logging.getLogger(__name__)


class TileSink(Protocol):
    def set_cell_asset(self, x: int, y: int, asset: Optional[int]) -> None: ...

    def clear(self) -> None: ...


class DualGridRenderer:
    """Resolve visual tiles for a grid and forward them to a sink.

    The renderer registers itself as a view of ``grid`` so that the grid's
    notifying setter triggers :meth:`refresh_affected` and
    :meth:`~core.grid.GridStore.complete_initialization` triggers
    :meth:`refresh_all`.

    ``pattern_table`` may be ``None`` when the layer's manifest failed to
    load.  The layer then renders nothing; the grid itself keeps working.
    """

    def __init__(
        self,
        grid: GridStore,
        pattern_table: Optional[PatternTable],
        sink: TileSink,
        fallback_asset: Optional[int] = None,
        origin: Tuple[float, float] = (0.0, 0.0),
        tile_size: float = 1.0,
    ) -> None:
        self.grid = grid
        self.pattern_table = pattern_table
        self.sink = sink
        self.fallback_asset = fallback_asset
        self.origin = origin
        self.tile_size = tile_size
        self._warned_patterns: Set[Pattern] = set()
        self._reported_missing_table = False
        grid.attach_view(self)

    # ------------------------------------------------------------------
    @property
    def visual_width(self) -> int:
        return self.grid.width - 1

    @property
    def visual_height(self) -> int:
        return self.grid.height - 1

    def corners(self, vx: int, vy: int) -> Pattern:
        """Return ``(top_left, top_right, bottom_left, bottom_right)`` states."""
        get = self.grid.get
        return (
            get(vx, vy + 1).state,
            get(vx + 1, vy + 1).state,
            get(vx, vy).state,
            get(vx + 1, vy).state,
        )

    def resolve(self, vx: int, vy: int) -> Optional[int]:
        """Return the asset index for visual cell ``(vx, vy)``.

        ``None`` means "no tile": either the reserved all-zero pattern or a
        pattern missing from the table (in which case :attr:`fallback_asset`
        is used and a warning is logged once per pattern).
        """
        table = self.pattern_table
        if table is None:
            return None
        pattern = self.corners(vx, vy)
        entry = table.lookup(*pattern)
        if entry is not None:
            return entry.index
        if table.is_reserved(pattern):
            return None
        if pattern not in self._warned_patterns:
            self._warned_patterns.add(pattern)
            logger.warning(
                "%s: no tile for pattern %s at visual cell (%d, %d)",
                self.grid.name,
                pattern_key(pattern),
                vx,
                vy,
            )
        return self.fallback_asset

    # ------------------------------------------------------------------
    def _can_render(self) -> bool:
        if self.pattern_table is not None:
            return True
        if not self._reported_missing_table:
            self._reported_missing_table = True
            logger.error("%s: no pattern table, layer will not be rendered", self.grid.name)
        return False

    def refresh_one(self, vx: int, vy: int) -> None:
        if not self._can_render():
            return
        self.sink.set_cell_asset(vx, vy, self.resolve(vx, vy))

    def refresh_affected(self, base_x: int, base_y: int) -> None:
        """Recompute the (up to four) visual cells that use ``(base_x, base_y)``."""
        if not self._can_render():
            return
        max_vx = self.visual_width - 1
        max_vy = self.visual_height - 1
        for vx in range(base_x - 1, base_x + 1):
            for vy in range(base_y - 1, base_y + 1):
                if 0 <= vx <= max_vx and 0 <= vy <= max_vy:
                    self.refresh_one(vx, vy)

    def refresh_all(self) -> None:
        if not self._can_render():
            return
        self.sink.clear()
        for vy in range(self.visual_height):
            for vx in range(self.visual_width):
                self.refresh_one(vx, vy)
        logger.debug(
            "Refreshed %dx%d visual tiles on %s",
            self.visual_width,
            self.visual_height,
            self.grid.name,
        )

    def detach(self) -> None:
        self.grid.detach_view(self)

    # ------------------------------------------------------------------
    def world_to_base_grid(self, px: float, py: float) -> Tuple[int, int]:
        """Return the logical cell addressed by the world point ``(px, py)``.

        The point is first located in a visual cell.  Its fractional offset
        inside that cell then selects, per axis, either the visual cell's own
        corner (offset below one half) or the next logical column/row.
        """
        ox, oy = self.origin
        lx = (px - ox) / self.tile_size
        ly = (py - oy) / self.tile_size
        vx = math.floor(lx)
        vy = math.floor(ly)
        x = vx + 1 if lx - vx >= 0.5 else vx
        y = vy + 1 if ly - vy >= 0.5 else vy
        return x, y

    def base_grid_to_world(self, x: int, y: int) -> Tuple[float, float]:
        """Return the world position of logical cell ``(x, y)``.

        Logical cells are centred on the shared corner of their four visual
        cells.
        """
        ox, oy = self.origin
        return ox + x * self.tile_size, oy + y * self.tile_size


class RecordingSink:
    """Sink that simply remembers the last asset set on every visual cell."""

    def __init__(self) -> None:
        self.cells: dict[Tuple[int, int], Optional[int]] = {}
        self.clear_count = 0
        self.writes = 0

    def set_cell_asset(self, x: int, y: int, asset: Optional[int]) -> None:
        self.cells[(x, y)] = asset
        self.writes += 1

    def clear(self) -> None:
        self.cells.clear()
        self.clear_count += 1


@dataclass
class DualGridLayer:
    """A logical grid bundled with its renderer and tile sink."""

    name: str
    grid: GridStore
    renderer: DualGridRenderer
    sink: Any

    @classmethod
    def create(
        cls,
        name: str,
        width: int,
        height: int,
        pattern_table: Optional[PatternTable],
        sink: Optional[TileSink] = None,
        **renderer_kwargs: Any,
    ) -> "DualGridLayer":
        grid = GridStore(width, height, name=name)
        sink = sink if sink is not None else RecordingSink()
        renderer = DualGridRenderer(grid, pattern_table, sink, **renderer_kwargs)
        return cls(name, grid, renderer, sink)

    @property
    def is_initialized(self) -> bool:
        return self.grid.is_initialized


__all__ = ["DualGridRenderer", "DualGridLayer", "RecordingSink", "TileSink"]
