from __future__ import annotations

"""World configuration loaded from environment variables and ``settings.json``.

The module provides a central location for runtime options.  Environment
variables take precedence over values stored in the JSON file found next to
this module.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

# Path to the JSON configuration file bundled with the game
SETTINGS_FILE = Path(__file__).with_name("settings.json")

try:
    with SETTINGS_FILE.open("r", encoding="utf-8") as f:
        _FILE_SETTINGS: Dict[str, Any] = json.load(f)
except (OSError, ValueError):
    # If the settings file is missing or invalid, fall back to defaults
    _FILE_SETTINGS = {}


def _get_bool(env_var: str, key: str, default: bool = False) -> bool:
    """Return a boolean setting from ``env_var`` or ``key`` in the JSON file."""
    value = os.environ.get(env_var)
    if value is not None:
        return value.lower() not in ("0", "false", "")
    return bool(_FILE_SETTINGS.get(key, default))


def _get_str(env_var: str, key: str, default: str) -> str:
    """Return a string setting from ``env_var`` or ``key`` in the JSON file."""
    value = os.environ.get(env_var)
    if value is not None:
        return value
    return str(_FILE_SETTINGS.get(key, default))


def _get_int(env_var: str, key: str, default: int) -> int:
    """Return an integer setting from environment or JSON."""
    value = os.environ.get(env_var)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            return default
    try:
        return int(_FILE_SETTINGS.get(key, default))
    except (TypeError, ValueError):
        return default


def _get_optional_int(env_var: str, key: str) -> Optional[int]:
    """Return an integer setting or ``None`` when it is not configured."""
    value = os.environ.get(env_var)
    if value is None:
        value = _FILE_SETTINGS.get(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Public settings
# ---------------------------------------------------------------------------
# Size of every layer grid, in logical cells
GRID_WIDTH: int = _get_int("DD_GRID_WIDTH", "grid_width", 10)
GRID_HEIGHT: int = _get_int("DD_GRID_HEIGHT", "grid_height", 10)

# Fixed world seed for reproducible worlds; ``None`` lets the director pick
WORLD_SEED: Optional[int] = _get_optional_int("DD_SEED", "seed")

# Pick a fresh seed for every generated world unless a seed is fixed
RANDOMIZE_SEED: bool = _get_bool("DD_RANDOMIZE_SEED", "randomize_seed", True)

# Tint logical cells by terrain state on top of the rendered tiles
SHOW_DEBUG_OVERLAY: bool = _get_bool("DD_DEBUG_OVERLAY", "show_debug_overlay", False)

# Size in pixels of a rendered tile in the viewer
TILE_SIZE: int = _get_int("DD_TILE_SIZE", "tile_size", 48)

# Logging level name passed to :func:`logging.basicConfig`
LOG_LEVEL: str = _get_str("DD_LOG_LEVEL", "log_level", "INFO").upper()


def save_settings(**kwargs: Any) -> None:
    """Persist ``kwargs`` to :data:`SETTINGS_FILE`."""
    data: Dict[str, Any] = {}
    if SETTINGS_FILE.exists():
        try:
            with SETTINGS_FILE.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            data = {}
    data.update(kwargs)
    with SETTINGS_FILE.open("w", encoding="utf-8") as f:
        json.dump(data, f)


__all__ = [
    "GRID_WIDTH",
    "GRID_HEIGHT",
    "WORLD_SEED",
    "RANDOMIZE_SEED",
    "SHOW_DEBUG_OVERLAY",
    "TILE_SIZE",
    "LOG_LEVEL",
    "save_settings",
]
