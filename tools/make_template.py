#!/usr/bin/env python3
"""Write the systematic artist template for a tile set.

The template has one tile per corner pattern, split into four quadrants
coloured by corner state, laid out in the order used by
:func:`loaders.pattern_table.systematic_entries`.
"""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

import pygame

import constants
from graphics.spritesheet import save_template


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("output", help="PNG file to write")
    parser.add_argument("--states", type=int, default=constants.TERRAIN_TYPE_COUNT)
    parser.add_argument("--columns", type=int, default=constants.TEMPLATE_COLUMNS)
    parser.add_argument("--tile-size", type=int, default=constants.SOURCE_TILE_SIZE)
    args = parser.parse_args(argv)

    pygame.init()
    try:
        save_template(args.output, args.states, args.columns, args.tile_size)
    finally:
        pygame.quit()
    print(f"Wrote {args.states ** 4} pattern template to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
