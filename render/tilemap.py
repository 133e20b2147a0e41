"""Paint resolved dual-grid tiles with pygame.

``TilemapPainter`` is the tile sink used by the interactive viewer.  It
stores the asset index chosen for every visual cell and blits the matching
atlas tile when drawing.  The visual grid sits half a tile away from the
logical grid, so the painted map is one tile smaller than the logical grid
on each axis and starts half a tile into it.

Example integration::

    table = PatternTable.load(ctx, "patterns/mining_3state.json")
    atlas = load_atlas("assets/tiles/mining.png", 200, 8, 10)
    painter = TilemapPainter(table, atlas, tile_size=48)
    layer = DualGridLayer.create("mining", 32, 24, table, sink=painter)
    ...
    painter.draw(screen, (ox, oy), layer.renderer.visual_height)
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

import pygame

import constants
from core.grid import GridStore
from loaders.pattern_table import PatternTable

Atlas = Dict[Tuple[int, int], pygame.Surface]


class TilemapPainter:
    """Tile sink that draws atlas tiles onto a pygame surface."""

    def __init__(
        self,
        pattern_table: Optional[PatternTable],
        atlas: Optional[Atlas] = None,
        tile_size: int = constants.TILE_SIZE,
    ) -> None:
        self.pattern_table = pattern_table
        self.atlas: Atlas = atlas or {}
        self.tile = tile_size
        self.cells: Dict[Tuple[int, int], Optional[int]] = {}
        self._cache: Dict[int, pygame.Surface] = {}

    # ---------- Sink interface ----------
    def set_cell_asset(self, x: int, y: int, asset: Optional[int]) -> None:
        if asset is None:
            self.cells.pop((x, y), None)
        else:
            self.cells[(x, y)] = asset

    def clear(self) -> None:
        self.cells.clear()

    # ---------- Image lookup ----------
    def surface_for(self, asset: int) -> pygame.Surface:
        """Return the scaled atlas tile for ``asset`` or a placeholder."""
        if asset in self._cache:
            return self._cache[asset]
        surf: Optional[pygame.Surface] = None
        entry = self.pattern_table.entry_for_index(asset) if self.pattern_table else None
        if entry is not None:
            surf = self.atlas.get((entry.column, entry.row))
        if surf is None:
            surf = self._placeholder()
        elif surf.get_size() != (self.tile, self.tile):
            surf = pygame.transform.scale(surf, (self.tile, self.tile))
        self._cache[asset] = surf
        return surf

    def _placeholder(self) -> pygame.Surface:
        s = pygame.Surface((self.tile, self.tile), pygame.SRCALPHA)
        s.fill((*constants.MAGENTA, 140))
        pygame.draw.rect(s, (*constants.BLACK, 180), s.get_rect(), 2)
        return s

    # ---------- Rendering ----------
    def visual_to_screen(
        self, origin: Tuple[int, int], vx: int, vy: int, visual_height: int
    ) -> Tuple[int, int]:
        """Screen position of visual cell ``(vx, vy)``; ``y`` grows upwards in
        grid space and downwards on screen."""
        ox, oy = origin
        half = self.tile // 2
        return ox + half + vx * self.tile, oy + half + (visual_height - 1 - vy) * self.tile

    def draw(self, surface: pygame.Surface, origin: Tuple[int, int], visual_height: int) -> None:
        """Blit every painted cell (no culling)."""
        for (vx, vy), asset in self.cells.items():
            if asset is None:
                continue
            surface.blit(self.surface_for(asset), self.visual_to_screen(origin, vx, vy, visual_height))


def draw_debug_overlay(
    surface: pygame.Surface,
    grid: GridStore,
    tile_size: int,
    origin: Tuple[int, int] = (0, 0),
) -> None:
    """Tint every logical cell of ``grid`` by its terrain state."""
    ox, oy = origin
    tints: Dict[int, pygame.Surface] = {}
    for x, y, tile in grid.iter_cells():
        colour = constants.DEBUG_STATE_COLOURS.get(tile.state)
        if colour is None:
            continue
        tint = tints.get(tile.state)
        if tint is None:
            tint = pygame.Surface((tile_size, tile_size), pygame.SRCALPHA)
            tint.fill(colour)
            tints[tile.state] = tint
        surface.blit(tint, (ox + x * tile_size, oy + (grid.height - 1 - y) * tile_size))
