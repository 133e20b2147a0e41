"""Keep a dependent layer in step with the layer it decorates."""

from __future__ import annotations

from core.grid import GridStore
from core.tile import TerrainType, Tile
from state.event_bus import ON_TILE_CHANGED


class GridDependency:
    """Clear ``target`` cells when the matching ``source`` cell is emptied.

    Typical use links the decoration or foreground layer to the mining
    layer so dug out rock loses its overlay.  The link holds its callback
    weakly on the source bus; keep a reference to the dependency for as long
    as it should stay active.
    """

    def __init__(self, source: GridStore, target: GridStore, clear_on_source_empty: bool = True) -> None:
        self.source = source
        self.target = target
        self.clear_on_source_empty = clear_on_source_empty
        self.source.subscribe(ON_TILE_CHANGED, self._on_source_tile_changed)

    def _on_source_tile_changed(self, x: int, y: int, tile: Tile) -> None:
        if self.clear_on_source_empty and tile.state == TerrainType.EMPTY:
            self.target.set(x, y, Tile(TerrainType.EMPTY))

    def detach(self) -> None:
        self.source.unsubscribe(ON_TILE_CHANGED, self._on_source_tile_changed)
