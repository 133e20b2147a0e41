"""Entry point for the dual-grid mining world.

Builds the five world layers, generates them from one seed and either
prints the mining layer as text (``--ascii``) or opens a pygame window:

* left click digs the clicked cell, right click cycles its terrain type
* ``R`` generates a new world, ``D`` toggles the debug overlay
* ``Esc`` quits
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import pygame

import constants
import settings
from core.dependency import GridDependency
from core.editing import SpawnLocator, cycle_tile_at, dig_at
from graphics.spritesheet import load_atlas, render_preview_atlas
from loaders.core import Context, default_context, find_file
from loaders.pattern_table import PatternTable, load_pattern_table
from mapgen.background import BackgroundAlgorithm, BackgroundMapGenerator
from mapgen.director import WorldGenerationDirector
from mapgen.generator import MapGenerator
from mapgen.layers import DecorationMapGenerator, ForegroundMapGenerator
from render.dual_grid import DualGridLayer, DualGridRenderer
from render.tilemap import Atlas, TilemapPainter, draw_debug_overlay

logger = logging.getLogger(__name__)


@dataclass
class World:
    layers: Dict[str, DualGridLayer]
    director: WorldGenerationDirector
    dependencies: List[GridDependency] = field(default_factory=list)
    spawn: Optional[Tuple[int, int]] = None

    @property
    def mining(self) -> DualGridLayer:
        return self.layers[constants.LAYER_MINING]

    def ordered_layers(self) -> List[DualGridLayer]:
        return [self.layers[name] for name in constants.LAYER_ORDER]


def _atlas_for(ctx: Context, name: str, table: Optional[PatternTable], tile_size: int) -> Atlas:
    """Painted atlas ``tiles/<layer>.png`` if present, quadrant previews otherwise."""
    if table is None:
        return {}
    columns = max((e.column for e in table), default=0) + 1
    rows = max((e.row for e in table), default=0) + 1
    try:
        path = find_file(ctx, f"tiles/{name}.png")
    except FileNotFoundError:
        logger.debug("No atlas for %s, using pattern previews", name)
        return render_preview_atlas(table, tile_size)
    return load_atlas(path, constants.SOURCE_TILE_SIZE, columns, rows)


def build_world(
    width: int = constants.GRID_WIDTH,
    height: int = constants.GRID_HEIGHT,
    ctx: Optional[Context] = None,
    painters: bool = False,
    tile_size: int = constants.TILE_SIZE,
    seed: Optional[int] = None,
    randomize_seed: bool = True,
) -> World:
    """Create every layer, its generator and the cross-layer links."""
    ctx = ctx or default_context()
    mining_table = load_pattern_table(ctx, constants.MINING_PATTERN_FILE)
    background_table = load_pattern_table(ctx, constants.BACKGROUND_PATTERN_FILE)

    layers: Dict[str, DualGridLayer] = {}
    for name in constants.LAYER_ORDER:
        table = mining_table if name == constants.LAYER_MINING else background_table
        sink = TilemapPainter(table, _atlas_for(ctx, name, table, tile_size), tile_size) if painters else None
        layers[name] = DualGridLayer.create(
            name,
            width,
            height,
            table,
            sink=sink,
            origin=(tile_size / 2, tile_size / 2),
            tile_size=tile_size,
        )

    mining = layers[constants.LAYER_MINING].grid
    decoration = layers[constants.LAYER_DECORATION].grid
    foreground = layers[constants.LAYER_FOREGROUND].grid
    director = WorldGenerationDirector(
        distant_bg=BackgroundMapGenerator(
            layers[constants.LAYER_DISTANT_BACKGROUND].grid,
            BackgroundAlgorithm.PERLIN_NOISE,
            density=0.5,
        ),
        mid_bg=BackgroundMapGenerator(
            layers[constants.LAYER_MID_BACKGROUND].grid,
            BackgroundAlgorithm.CELLULAR_AUTOMATA,
        ),
        mining=MapGenerator(mining),
        decoration=DecorationMapGenerator(mining, decoration, overlay_diggable=False),
        foreground=ForegroundMapGenerator(mining, foreground, coverage_ratio=0.9),
        seed=seed,
        randomize_seed=randomize_seed,
    )
    dependencies = [GridDependency(mining, decoration), GridDependency(mining, foreground)]
    return World(layers, director, dependencies)


# ---------------------------------------------------------------------------
# Viewer
# ---------------------------------------------------------------------------
def screen_to_cell(pos: Tuple[int, int], renderer: DualGridRenderer) -> Tuple[int, int]:
    """Logical cell under a screen pixel.

    The pixel centre is flipped into world space (``y`` grows upwards) and
    resolved by the layer renderer.
    """
    mx, my = pos
    top = renderer.grid.height * renderer.tile_size
    return renderer.world_to_base_grid(mx + 0.5, top - my - 0.5)


def draw_world(screen: pygame.Surface, world: World, tile_size: int, show_overlay: bool) -> None:
    screen.fill(constants.BACKGROUND_COLOUR)
    for layer in world.ordered_layers():
        if isinstance(layer.sink, TilemapPainter):
            layer.sink.draw(screen, (0, 0), layer.renderer.visual_height)
    if show_overlay:
        draw_debug_overlay(screen, world.mining.grid, tile_size)
    if world.spawn is not None:
        sx, sy = world.spawn
        centre = (sx * tile_size + tile_size // 2, (world.mining.grid.height - 1 - sy) * tile_size + tile_size // 2)
        pygame.draw.circle(screen, constants.WHITE, centre, max(2, tile_size // 4))


def run_viewer(world: World, tile_size: int, show_overlay: bool) -> Optional[int]:
    """Run the interactive viewer and return the seed of the last world shown."""
    grid = world.mining.grid
    pygame.init()
    screen = pygame.display.set_mode((grid.width * tile_size, grid.height * tile_size))

    def on_spawn(position: Tuple[int, int]) -> None:
        world.spawn = position

    locator = SpawnLocator(grid, on_spawn)
    seed = world.director.generate_world()
    pygame.display.set_caption(f"Dual grid world (seed {seed})")

    clock = pygame.time.Clock()
    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_r:
                    seed = world.director.generate_world()
                    pygame.display.set_caption(f"Dual grid world (seed {seed})")
                elif event.key == pygame.K_d:
                    show_overlay = not show_overlay
            elif event.type == pygame.MOUSEBUTTONDOWN:
                x, y = screen_to_cell(event.pos, world.mining.renderer)
                if event.button == 1:
                    dig_at(grid, x, y)
                elif event.button == 3:
                    cycle_tile_at(grid, x, y)
        draw_world(screen, world, tile_size, show_overlay)
        pygame.display.flip()
        clock.tick(60)
    locator.detach()
    pygame.quit()
    return seed


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--seed", type=int, default=settings.WORLD_SEED)
    parser.add_argument("--width", type=int, default=constants.GRID_WIDTH)
    parser.add_argument("--height", type=int, default=constants.GRID_HEIGHT)
    parser.add_argument("--tile-size", type=int, default=constants.TILE_SIZE)
    parser.add_argument("--ascii", action="store_true",
                        help="print the mining layer instead of opening a window")
    parser.add_argument("--debug-overlay", action="store_true", default=settings.SHOW_DEBUG_OVERLAY)
    parser.add_argument("--save-seed", action="store_true",
                        help="store the seed of the generated world in settings.json")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    randomize = settings.RANDOMIZE_SEED and args.seed is None
    world = build_world(
        args.width,
        args.height,
        painters=not args.ascii,
        tile_size=args.tile_size,
        seed=args.seed,
        randomize_seed=randomize,
    )
    if args.ascii:
        seed = world.director.generate_world()
        print(f"seed {seed}")
        print(world.mining.grid.to_ascii())
    else:
        seed = run_viewer(world, args.tile_size, args.debug_overlay)
    if args.save_seed and seed is not None:
        settings.save_settings(seed=seed)
        logger.info("Saved seed %d to %s", seed, settings.SETTINGS_FILE)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
