"""Corner pattern → tile asset lookup used by the dual-grid renderer.

A pattern table maps every ``(top_left, top_right, bottom_left,
bottom_right)`` combination of terrain states to an asset index and to the
``(column, row)`` of that tile inside the artist's atlas.  Tables are built
once from a JSON manifest::

    {
        "state_count": 3,
        "allow_zero_pattern": false,
        "patterns": [
            {"index": 0, "col": 0, "row": 0, "pattern": [1, 0, 0, 0]},
            ...
        ]
    }

A bare list of entries is accepted too.  Unless ``allow_zero_pattern`` is set
the all-zero pattern is reserved: it stands for fully open space and always
resolves to "no tile".
"""
from __future__ import annotations

from dataclasses import dataclass
from itertools import product
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple
import logging

from .core import Context, read_json, require_keys

logger = logging.getLogger(__name__)

Pattern = Tuple[int, int, int, int]
ZERO_PATTERN: Pattern = (0, 0, 0, 0)


class PatternTableError(ValueError):
    """Raised when a pattern manifest is missing or malformed."""


@dataclass(frozen=True)
class PatternEntry:
    index: int
    column: int
    row: int
    pattern: Pattern


def pattern_key(pattern: Sequence[int]) -> str:
    return ",".join(str(int(v)) for v in pattern)


def all_patterns(state_count: int) -> Iterator[Pattern]:
    """Yield every corner pattern for ``state_count`` states in template order.

    The order matches the artist template: the top-left corner changes
    fastest, the bottom-right corner slowest.
    """
    for br, bl, tr, tl in product(range(state_count), repeat=4):
        yield (tl, tr, bl, br)


def systematic_entries(state_count: int, columns: int) -> List[PatternEntry]:
    """Return entries laid out as ``index = tl + tr*S + bl*S^2 + br*S^3``."""
    if columns <= 0:
        raise PatternTableError("Template needs at least one column")
    entries = []
    for i, pattern in enumerate(all_patterns(state_count)):
        entries.append(PatternEntry(i, i % columns, i // columns, pattern))
    return entries


class PatternTable:
    """Immutable lookup from corner pattern to :class:`PatternEntry`."""

    def __init__(
        self,
        entries: Iterable[PatternEntry],
        state_count: int,
        allow_zero_pattern: bool = False,
        name: str = "patterns",
    ) -> None:
        if state_count < 1:
            raise PatternTableError(f"{name}: state_count must be positive")
        self.name = name
        self._state_count = state_count
        self._allow_zero = allow_zero_pattern
        lookup: Dict[Pattern, PatternEntry] = {}
        for entry in entries:
            if len(entry.pattern) != 4:
                raise PatternTableError(f"{name}: pattern {entry.pattern} must have 4 corners")
            if any(not 0 <= v < state_count for v in entry.pattern):
                raise PatternTableError(
                    f"{name}: pattern {pattern_key(entry.pattern)} uses a state outside 0..{state_count - 1}"
                )
            if entry.pattern in lookup:
                logger.warning(
                    "%s: duplicate entry for pattern %s, keeping index %d",
                    name,
                    pattern_key(entry.pattern),
                    lookup[entry.pattern].index,
                )
                continue
            lookup[entry.pattern] = entry
        self._lookup: Mapping[Pattern, PatternEntry] = MappingProxyType(lookup)

    # ------------------------------------------------------------------
    @property
    def state_count(self) -> int:
        return self._state_count

    @property
    def allow_zero_pattern(self) -> bool:
        return self._allow_zero

    def __len__(self) -> int:
        return len(self._lookup)

    def __iter__(self) -> Iterator[PatternEntry]:
        return iter(self._lookup.values())

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._lookup

    def is_reserved(self, pattern: Pattern) -> bool:
        return not self._allow_zero and pattern == ZERO_PATTERN

    # ------------------------------------------------------------------
    def lookup(self, tl: int, tr: int, bl: int, br: int) -> Optional[PatternEntry]:
        """Return the entry for a corner pattern or ``None``.

        ``None`` is returned both for the reserved all-zero pattern and for
        patterns missing from the table; use :meth:`is_reserved` to tell them
        apart.
        """
        pattern = (tl, tr, bl, br)
        if self.is_reserved(pattern):
            return None
        return self._lookup.get(pattern)

    def asset_index(self, tl: int, tr: int, bl: int, br: int) -> Optional[int]:
        entry = self.lookup(tl, tr, bl, br)
        return entry.index if entry else None

    def atlas_position(self, tl: int, tr: int, bl: int, br: int) -> Optional[Tuple[int, int]]:
        entry = self.lookup(tl, tr, bl, br)
        return (entry.column, entry.row) if entry else None

    def entry_for_index(self, index: int) -> Optional[PatternEntry]:
        for entry in self._lookup.values():
            if entry.index == index:
                return entry
        return None

    # ------------------------------------------------------------------
    def missing_patterns(self) -> List[Pattern]:
        """Enumerate all ``K^4`` patterns and return those with no entry."""
        return [
            p
            for p in all_patterns(self._state_count)
            if not self.is_reserved(p) and p not in self._lookup
        ]

    def validate(self) -> List[str]:
        """Return the keys of missing patterns, logging a warning for each."""
        missing = [pattern_key(p) for p in self.missing_patterns()]
        for key in missing:
            logger.warning("%s: missing pattern %s", self.name, key)
        if not missing:
            logger.info(
                "%s: all %d patterns covered (%d-state)",
                self.name,
                self._state_count ** 4 - (0 if self._allow_zero else 1),
                self._state_count,
            )
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing_patterns()

    # ------------------------------------------------------------------
    @classmethod
    def from_data(
        cls,
        data: Any,
        state_count: Optional[int] = None,
        allow_zero_pattern: Optional[bool] = None,
        name: str = "patterns",
    ) -> "PatternTable":
        """Build a table from decoded manifest ``data``."""
        if isinstance(data, dict):
            raw_entries = data.get("patterns")
            if state_count is None:
                state_count = data.get("state_count")
            if allow_zero_pattern is None:
                allow_zero_pattern = data.get("allow_zero_pattern")
        else:
            raw_entries = data
        if not isinstance(raw_entries, list):
            raise PatternTableError(f"{name}: no pattern list found")

        entries: List[PatternEntry] = []
        for raw in raw_entries:
            if not isinstance(raw, dict):
                raise PatternTableError(f"{name}: invalid entry {raw!r}: expected an object")
            try:
                require_keys(raw, ["index", "pattern"])
            except KeyError as exc:
                raise PatternTableError(f"{name}: invalid entry {raw!r}: {exc}") from exc
            column = raw.get("col", raw.get("column", 0))
            pattern = raw["pattern"]
            if not isinstance(pattern, (list, tuple)) or len(pattern) != 4:
                raise PatternTableError(f"{name}: entry {raw['index']} must list 4 corners")
            try:
                entries.append(
                    PatternEntry(
                        index=int(raw["index"]),
                        column=int(column),
                        row=int(raw.get("row", 0)),
                        pattern=tuple(int(v) for v in pattern),  # type: ignore[arg-type]
                    )
                )
            except (TypeError, ValueError) as exc:
                raise PatternTableError(f"{name}: invalid entry {raw!r}: {exc}") from exc

        if state_count is None:
            highest = max((max(e.pattern) for e in entries), default=0)
            state_count = highest + 1
        try:
            state_count = int(state_count)
        except (TypeError, ValueError) as exc:
            raise PatternTableError(f"{name}: invalid state_count {state_count!r}") from exc
        return cls(entries, state_count, bool(allow_zero_pattern), name=name)

    @classmethod
    def load(
        cls,
        ctx: Context,
        rel_path: str,
        state_count: Optional[int] = None,
        allow_zero_pattern: Optional[bool] = None,
    ) -> "PatternTable":
        """Load a manifest through ``ctx``; raises :class:`PatternTableError`."""
        try:
            data = read_json(ctx, rel_path)
        except FileNotFoundError as exc:
            raise PatternTableError(f"Pattern manifest not found: {rel_path}") from exc
        except ValueError as exc:
            raise PatternTableError(f"Pattern manifest {rel_path} is not valid JSON: {exc}") from exc
        table = cls.from_data(data, state_count, allow_zero_pattern, name=rel_path)
        logger.info(
            "%s: loaded %d patterns (%d-state, zero pattern allowed: %s)",
            rel_path,
            len(table),
            table.state_count,
            table.allow_zero_pattern,
        )
        return table

    @classmethod
    def systematic(
        cls, state_count: int, columns: int, allow_zero_pattern: bool = False
    ) -> "PatternTable":
        """Return a table following the algorithmic artist template layout."""
        return cls(
            systematic_entries(state_count, columns),
            state_count,
            allow_zero_pattern,
            name=f"systematic-{state_count}",
        )


def load_pattern_table(ctx: Context, rel_path: str, **kwargs: Any) -> Optional[PatternTable]:
    """Load a table, logging and returning ``None`` on configuration errors."""
    try:
        return PatternTable.load(ctx, rel_path, **kwargs)
    except PatternTableError as exc:
        logger.error("Failed to load pattern table: %s", exc)
        return None


__all__ = [
    "Pattern",
    "PatternEntry",
    "PatternTable",
    "PatternTableError",
    "ZERO_PATTERN",
    "all_patterns",
    "load_pattern_table",
    "pattern_key",
    "systematic_entries",
]
