import json
import logging

import pytest

import constants
from loaders.core import Context
from loaders.pattern_table import (
    PatternEntry,
    PatternTable,
    PatternTableError,
    load_pattern_table,
    systematic_entries,
)


def _write(tmp_path, name, text):
    (tmp_path / name).write_text(text, encoding="utf-8")
    return Context(repo_root=str(tmp_path), search_paths=[str(tmp_path)])


def test_systematic_layout_follows_template_order():
    entries = systematic_entries(3, 9)
    assert len(entries) == 81
    by_pattern = {e.pattern: e for e in entries}
    entry = by_pattern[(2, 1, 0, 1)]
    assert entry.index == 2 + 1 * 3 + 0 * 9 + 1 * 27
    assert (entry.column, entry.row) == (entry.index % 9, entry.index // 9)


def test_zero_pattern_is_reserved_by_default(pattern_table_3):
    assert pattern_table_3.lookup(0, 0, 0, 0) is None
    assert pattern_table_3.is_reserved((0, 0, 0, 0))
    assert pattern_table_3.asset_index(1, 0, 0, 0) == 1
    assert pattern_table_3.atlas_position(0, 0, 0, 1) == (27 % 9, 27 // 9)


def test_zero_pattern_can_be_allowed():
    table = PatternTable.systematic(2, 4, allow_zero_pattern=True)
    assert table.asset_index(0, 0, 0, 0) == 0


def test_missing_patterns_are_reported(caplog):
    entries = [e for e in systematic_entries(2, 4) if e.pattern != (1, 1, 0, 0)]
    table = PatternTable(entries, 2)
    with caplog.at_level(logging.WARNING, logger="loaders.pattern_table"):
        missing = table.validate()
    assert missing == ["1,1,0,0"]
    assert not table.is_complete
    assert any("missing pattern 1,1,0,0" in rec.message for rec in caplog.records)


def test_zero_pattern_not_required_when_reserved():
    entries = [e for e in systematic_entries(2, 4) if e.pattern != (0, 0, 0, 0)]
    table = PatternTable(entries, 2)
    assert table.is_complete
    allowed = PatternTable(entries, 2, allow_zero_pattern=True)
    assert allowed.missing_patterns() == [(0, 0, 0, 0)]


def test_states_outside_range_are_rejected():
    with pytest.raises(PatternTableError):
        PatternTable([PatternEntry(0, 0, 0, (3, 0, 0, 0))], 3)


def test_duplicate_entry_keeps_first(caplog):
    entries = [PatternEntry(4, 0, 0, (1, 0, 0, 0)), PatternEntry(9, 1, 0, (1, 0, 0, 0))]
    with caplog.at_level(logging.WARNING):
        table = PatternTable(entries, 2)
    assert table.asset_index(1, 0, 0, 0) == 4
    assert len(table) == 1
    assert "duplicate" in caplog.text


def test_load_manifest_with_comments(tmp_path):
    ctx = _write(
        tmp_path,
        "tiles.json",
        """{
            // two-state tiles
            "state_count": 2,
            "patterns": [
                {"index": 7, "col": 3, "row": 1, "pattern": [1, 0, 0, 0]},
                {"index": 8, "column": 0, "row": 2, "pattern": [1, 1, 1, 1]}
            ]
        }""",
    )
    table = PatternTable.load(ctx, "tiles.json")
    assert table.state_count == 2
    assert table.atlas_position(1, 0, 0, 0) == (3, 1)
    assert table.atlas_position(1, 1, 1, 1) == (0, 2)
    assert table.entry_for_index(8).pattern == (1, 1, 1, 1)


def test_bare_list_manifest_infers_state_count(tmp_path):
    data = [{"index": 0, "col": 0, "row": 0, "pattern": [2, 0, 0, 1]}]
    ctx = _write(tmp_path, "list.json", json.dumps(data))
    table = PatternTable.load(ctx, "list.json")
    assert table.state_count == 3
    assert table.asset_index(2, 0, 0, 1) == 0


def test_load_errors_raise_pattern_table_error(tmp_path):
    ctx = _write(tmp_path, "broken.json", "{not json")
    with pytest.raises(PatternTableError):
        PatternTable.load(ctx, "broken.json")
    with pytest.raises(PatternTableError):
        PatternTable.load(ctx, "absent.json")
    ctx = _write(tmp_path, "short.json", '[{"index": 0, "pattern": [1, 0]}]')
    with pytest.raises(PatternTableError):
        PatternTable.load(ctx, "short.json")


@pytest.mark.parametrize(
    "text",
    [
        '[{"index": 0, "pattern": [0, 0, 0, "x"]}]',
        '[{"index": "first", "pattern": [1, 0, 0, 0]}]',
        '[{"index": 0, "col": null, "pattern": [1, 0, 0, 0]}]',
        '["index pattern"]',
        '{"state_count": "two", "patterns": [{"index": 0, "pattern": [1, 0, 0, 0]}]}',
    ],
)
def test_malformed_entries_raise_pattern_table_error(tmp_path, text):
    ctx = _write(tmp_path, "bad.json", text)
    with pytest.raises(PatternTableError):
        PatternTable.load(ctx, "bad.json")
    assert load_pattern_table(ctx, "bad.json") is None


def test_load_pattern_table_logs_and_returns_none(tmp_path, caplog):
    ctx = Context(repo_root=str(tmp_path), search_paths=[str(tmp_path)])
    with caplog.at_level(logging.ERROR, logger="loaders.pattern_table"):
        assert load_pattern_table(ctx, "missing.json") is None
    assert "Failed to load pattern table" in caplog.text


def test_shipped_manifests_are_complete(repo_context):
    mining = PatternTable.load(repo_context, constants.MINING_PATTERN_FILE)
    assert mining.state_count == constants.TERRAIN_TYPE_COUNT
    assert len(mining) == constants.TOTAL_POSSIBLE_PATTERNS - 1
    assert mining.is_complete
    assert mining.atlas_position(1, 0, 0, 0) == (0, 0)
    assert max(e.row for e in mining) < constants.TILEMAP_ROWS
    assert max(e.column for e in mining) < constants.TILEMAP_COLUMNS

    background = PatternTable.load(repo_context, constants.BACKGROUND_PATTERN_FILE)
    assert background.state_count == constants.BACKGROUND_STATE_COUNT
    assert background.is_complete
