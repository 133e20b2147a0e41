"""Utility helpers for working with tile atlases."""
from __future__ import annotations

from typing import Dict, Sequence, Tuple

import pygame

import constants
from loaders.pattern_table import PatternTable, all_patterns


def _convert(surface: pygame.Surface) -> pygame.Surface:
    # ``convert_alpha`` needs an initialised display; headless tools skip it
    if pygame.display.get_init() and pygame.display.get_surface() is not None:
        return surface.convert_alpha()
    return surface


def load_atlas(
    sheet_path: str, tile_size: int, columns: int, rows: int
) -> Dict[Tuple[int, int], pygame.Surface]:
    """Load an atlas image and slice it into individual tiles.

    Parameters
    ----------
    sheet_path: str
        Path to the atlas image file.
    tile_size: int
        Width and height of a single tile in pixels.
    columns, rows: int
        Layout of the atlas.  Cells that fall outside the image are skipped.

    Returns
    -------
    Dict[Tuple[int, int], pygame.Surface]
        Tiles keyed by ``(column, row)`` with row ``0`` at the top of the
        image, matching the pattern manifests.
    """
    return slice_atlas(_convert(pygame.image.load(sheet_path)), tile_size, columns, rows)


def slice_atlas(
    sheet: pygame.Surface, tile_size: int, columns: int, rows: int
) -> Dict[Tuple[int, int], pygame.Surface]:
    """Cut an already loaded atlas surface into tiles (see :func:`load_atlas`)."""
    sheet_rect = sheet.get_rect()
    tiles: Dict[Tuple[int, int], pygame.Surface] = {}
    for row in range(rows):
        for col in range(columns):
            x, y = col * tile_size, row * tile_size
            if x + tile_size > sheet_rect.width or y + tile_size > sheet_rect.height:
                continue
            tile = pygame.Surface((tile_size, tile_size), pygame.SRCALPHA)
            tile.blit(sheet, (0, 0), pygame.Rect(x, y, tile_size, tile_size))
            tiles[(col, row)] = tile
    return tiles


def _state_colour(state: int) -> Tuple[int, int, int]:
    return constants.TEMPLATE_STATE_COLOURS.get(state, constants.TEMPLATE_OTHER_COLOUR)


def _draw_pattern_tile(
    surface: pygame.Surface, pattern: Sequence[int], ox: int, oy: int, tile_size: int
) -> None:
    tl, tr, bl, br = pattern
    half = tile_size // 2
    quadrants = (
        (tl, ox, oy),
        (tr, ox + half, oy),
        (bl, ox, oy + half),
        (br, ox + half, oy + half),
    )
    for state, qx, qy in quadrants:
        pygame.draw.rect(surface, _state_colour(state), pygame.Rect(qx, qy, half, half))
    pygame.draw.rect(surface, constants.BLACK, pygame.Rect(ox, oy, tile_size, tile_size), 2)


def render_template(state_count: int, columns: int, tile_size: int) -> pygame.Surface:
    """Draw the systematic artist template for ``state_count`` states.

    Every pattern gets one tile split into four quadrants coloured by the
    state of the matching corner.  Tiles are ordered like
    :func:`loaders.pattern_table.systematic_entries` and read left-to-right,
    top-to-bottom so the artist can paint directly over the reference.
    """
    total = state_count ** 4
    rows = -(-total // columns)
    surface = pygame.Surface((columns * tile_size, rows * tile_size), pygame.SRCALPHA)
    surface.fill(constants.BACKGROUND_COLOUR)
    for i, pattern in enumerate(all_patterns(state_count)):
        _draw_pattern_tile(surface, pattern, (i % columns) * tile_size, (i // columns) * tile_size, tile_size)
    return surface


def render_preview_atlas(table: PatternTable, tile_size: int) -> Dict[Tuple[int, int], pygame.Surface]:
    """Quadrant tiles for every entry of ``table``, keyed like a real atlas.

    Used by the viewer when no painted atlas is available.
    """
    tiles: Dict[Tuple[int, int], pygame.Surface] = {}
    for entry in table:
        tile = pygame.Surface((tile_size, tile_size), pygame.SRCALPHA)
        _draw_pattern_tile(tile, entry.pattern, 0, 0, tile_size)
        tiles[(entry.column, entry.row)] = tile
    return tiles


def save_template(path: str, state_count: int, columns: int = constants.TEMPLATE_COLUMNS,
                  tile_size: int = constants.SOURCE_TILE_SIZE) -> None:
    """Render the artist template and write it to ``path``."""
    pygame.image.save(render_template(state_count, columns, tile_size), path)
