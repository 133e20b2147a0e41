"""
Shared configuration for the dual-grid mining world.

This module defines constants used throughout the project, such as grid
dimensions, terrain state counts, atlas layout and debug colours.  Keeping
these values in one place makes it easy to tweak the look of the world or
adjust the generation limits.  Values that players may want to override at
runtime live in :mod:`settings` instead.
"""

from typing import Dict, Tuple

import settings

# ---------------------------------------------------------------------------
# Grid dimensions
# ---------------------------------------------------------------------------
# Default size of every layer grid.  The original prototype used a tiny
# 10x10 map which remains the fallback when no setting is given.
GRID_WIDTH = settings.GRID_WIDTH
GRID_HEIGHT = settings.GRID_HEIGHT

# ---------------------------------------------------------------------------
# Terrain states
# ---------------------------------------------------------------------------
# Number of terrain states on the gameplay (mining) layer: Empty, Diggable,
# Undiggable.  Background and decoration layers only use two states.
TERRAIN_TYPE_COUNT = 3
BACKGROUND_STATE_COUNT = 2

# 3^4 corner combinations including the all-empty pattern
TOTAL_POSSIBLE_PATTERNS = TERRAIN_TYPE_COUNT ** 4

# Hit points of a freshly placed diggable tile (one hit per beat)
DIGGABLE_HIT_POINTS = 3

# ---------------------------------------------------------------------------
# Tile and atlas layout
# ---------------------------------------------------------------------------
# Size in pixels of a single tile inside the artist's atlas
SOURCE_TILE_SIZE = 200
# Size in pixels of a rendered tile on screen
TILE_SIZE = settings.TILE_SIZE

# Artist atlas layout for the 3-state mining tileset
TILEMAP_COLUMNS = 8
TILEMAP_ROWS = 10

# Columns used when laying out a systematic artist template (3x3 groups)
TEMPLATE_COLUMNS = 9

# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------
# Attempts made by the blob spawner to place a single blob before giving up
BLOB_PLACEMENT_ATTEMPTS = 50

# Margin kept between a blob start position and the outer ring
BLOB_START_MARGIN = 2

# Upper bound (exclusive) for seeds picked by the world director
MAX_RANDOM_SEED = 100000

# Layer identifiers, in the order the world director generates them
LAYER_DISTANT_BACKGROUND = "distant_background"
LAYER_MID_BACKGROUND = "mid_background"
LAYER_MINING = "mining"
LAYER_DECORATION = "decoration"
LAYER_FOREGROUND = "foreground"

LAYER_ORDER = [
    LAYER_DISTANT_BACKGROUND,
    LAYER_MID_BACKGROUND,
    LAYER_MINING,
    LAYER_DECORATION,
    LAYER_FOREGROUND,
]

# Pattern manifests shipped under ``assets/patterns``
MINING_PATTERN_FILE = "patterns/mining_3state.json"
BACKGROUND_PATTERN_FILE = "patterns/background_2state.json"

# ---------------------------------------------------------------------------
# Colours
# ---------------------------------------------------------------------------
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
MAGENTA = (255, 0, 255)
BACKGROUND_COLOUR = (51, 51, 51)

# Debug overlay tint per terrain state (RGBA)
DEBUG_STATE_COLOURS: Dict[int, Tuple[int, int, int, int]] = {
    0: (255, 255, 255, 77),
    1: (128, 128, 255, 77),
    2: (255, 0, 0, 77),
}

# Colours used by the systematic artist template, per corner state
TEMPLATE_STATE_COLOURS: Dict[int, Tuple[int, int, int]] = {
    0: (242, 242, 242),
    1: (102, 153, 255),
    2: (204, 51, 51),
}
TEMPLATE_OTHER_COLOUR = (128, 128, 128)
