#!/usr/bin/env python3
"""Check that pattern manifests cover every corner combination.

This script loads `assets/patterns/*.json` (or the manifests given on the
command line, relative to the asset search paths) and reports every
`[tl, tr, bl, br]` pattern that has no tile.  The all-zero pattern is only
required when a manifest sets `allow_zero_pattern`.

Missing patterns or loading errors are printed to stdout.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional, Sequence

from loaders.core import Context, default_context
from loaders.pattern_table import PatternTable, PatternTableError


def _shipped_manifests(ctx: Context) -> List[str]:
    root = Path(ctx.repo_root, "assets")
    return sorted(str(p.relative_to(root)) for p in root.glob("patterns/*.json"))


def check_manifest(ctx: Context, rel_path: str) -> List[str]:
    """Return problems found in one manifest (empty when complete)."""

    try:
        table = PatternTable.load(ctx, rel_path)
    except PatternTableError as exc:
        return [str(exc)]
    return [f"{rel_path}: missing pattern {key}" for key in table.validate()]


def main(argv: Optional[Sequence[str]] = None, ctx: Optional[Context] = None) -> int:
    ctx = ctx or default_context()
    args = list(sys.argv[1:] if argv is None else argv)
    manifests = args or _shipped_manifests(ctx)
    if not manifests:
        print("No pattern manifests found")
        return 1

    problems: List[str] = []
    for rel_path in manifests:
        problems.extend(check_manifest(ctx, rel_path))

    if problems:
        print("Pattern problems:")
        for item in problems:
            print(" -", item)
        return 1

    print(f"All {len(manifests)} pattern manifests are complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
