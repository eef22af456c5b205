from __future__ import annotations

import math

import pytest

from roster_sync.errors import StoreError, ValidationError
from roster_sync.models.config_models import SourceConfig
from roster_sync.services.consolidator import (
    ColumnSelection,
    consolidate_rows,
    consolidate_sheet,
    has_value,
    identifier_key,
)
from roster_sync.stores.memory import MemoryStore

HEADER = ["ID", "Name", "Term", "G1", "G2"]


def test_later_non_empty_wins_and_blank_never_overwrites():
    grid = [HEADER, ["1", "Ann", "F24", "B", ""], ["1", "Ann", "F24", "", ""], ["1", "Ann", "F24", "A", ""]]
    result = consolidate_rows(grid, id_col=0, start=3, end=3)
    assert result.rows == [["1", "Ann", "F24", "A"]]


def test_blank_does_not_clear_previous_value():
    grid = [HEADER, ["1", "Ann", "F24", "B", "C"], ["1", "Ann", "F24", "", None]]
    result = consolidate_rows(grid, id_col=0, start=3, end=4)
    assert result.rows == [["1", "Ann", "F24", "B", "C"]]


def test_rows_without_identifier_are_skipped():
    result = consolidate_rows([HEADER, ["", "X"]], id_col=0, start=3, end=4)
    assert result.rows == []
    assert result.skipped_rows == 1
    assert result.grid == [HEADER]


def test_missing_identifier_cell_is_skipped():
    result = consolidate_rows([HEADER, []], id_col=0, start=3, end=4)
    assert result.rows == []
    assert result.source_rows == 1


def test_leading_columns_come_from_first_occurrence():
    grid = [HEADER, ["7", "First", "F24", "", "B"], ["7", "Second", "S25", "A", ""]]
    result = consolidate_rows(grid, id_col=0, start=3, end=4)
    assert result.rows == [["7", "First", "F24", "A", "B"]]


def test_first_seen_order_is_kept():
    grid = [HEADER, ["3", "C"], ["1", "A"], ["3", "C2"], ["2", "B"]]
    result = consolidate_rows(grid, id_col=0, start=3, end=4)
    assert [r[0] for r in result.rows] == ["3", "1", "2"]


def test_header_is_truncated_or_padded_to_range_end():
    grid = [HEADER, ["1", "A", "F", "x", "y"]]
    assert consolidate_rows(grid, 0, 1, 2).header == ["ID", "Name", "Term"]
    assert consolidate_rows(grid, 0, 3, 6).header == HEADER + ["", ""]
    assert consolidate_rows(grid, 0, 3, 6).rows == [["1", "A", "F", "x", "y", "", ""]]


def test_numeric_identifiers_group_with_text_identifiers():
    grid = [HEADER, [1001.0, "A", "", "B", ""], ["1001", "A", "", "", "C"], [1001, "A", "", "", ""]]
    result = consolidate_rows(grid, 0, 3, 4)
    assert len(result.rows) == 1
    assert result.rows[0][3:] == ["B", "C"]


def test_zero_grade_counts_as_a_value():
    grid = [HEADER, ["1", "A", "", 3.5, ""], ["1", "A", "", 0, ""]]
    assert consolidate_rows(grid, 0, 3, 4).rows[0][3] == 0


def test_identifier_inside_grade_range():
    grid = [["G0", "ID"], ["a", "9"], ["b", "9"]]
    result = consolidate_rows(grid, id_col=1, start=0, end=1)
    assert result.rows == [["b", "9"]]


def test_empty_grid_yields_padded_header_only():
    result = consolidate_rows([], 0, 0, 1)
    assert result.grid == [["", ""]]


def test_invalid_indices_rejected():
    with pytest.raises(ValidationError):
        consolidate_rows([HEADER], 0, 3, 2)


@pytest.mark.parametrize(
    "value,expected",
    [(None, False), ("", False), ("  ", False), (math.nan, False), ("0", True), (0, True), (False, True), ("A", True)],
)
def test_has_value(value, expected):
    assert has_value(value) is expected


def test_identifier_key_normalizes():
    assert identifier_key(12.0) == "12"
    assert identifier_key(" 12 ") == "12"
    assert identifier_key("") is None


def test_column_selection_from_labels():
    sel = ColumnSelection.from_labels("A", "D", "E")
    assert (sel.id_col, sel.start, sel.end) == (0, 3, 4)
    assert sel.describe() == "id=A grades=D:E"


def test_column_selection_rejects_end_before_start():
    with pytest.raises(ValidationError):
        ColumnSelection.from_labels("A", "E", "D")
    with pytest.raises(ValidationError):
        ColumnSelection.from_labels("a", "D", "E")


def test_consolidate_sheet_replaces_output_and_is_idempotent():
    store = MemoryStore()
    store.seed("roster", "Responses", [HEADER, ["1", "A", "F", "B", ""], ["1", "A", "F", "", "C"]])
    source = SourceConfig(book="roster", sheet="Responses")
    sel = ColumnSelection.from_labels("A", "D", "E")

    first = consolidate_sheet(store, source, sel, "Consolidated")
    out1 = store.open("roster").find_sheet("Consolidated").read_values()
    second = consolidate_sheet(store, source, sel, "Consolidated")
    out2 = store.open("roster").find_sheet("Consolidated").read_values()

    assert out1 == out2 == [HEADER, ["1", "A", "F", "B", "C"]]
    assert first.output_sheet == second.output_sheet == "Consolidated"
    assert store.open("roster").titles() == ["Responses", "Consolidated"]


def test_consolidate_sheet_missing_source():
    with pytest.raises(StoreError):
        consolidate_sheet(MemoryStore(), SourceConfig("roster", "Nope"), ColumnSelection(0, 1, 1), "Out")


def test_consolidate_sheet_refuses_to_overwrite_source():
    store = MemoryStore()
    store.seed("roster", "Responses", [HEADER])
    with pytest.raises(ValidationError):
        consolidate_sheet(store, SourceConfig("roster", "Responses"), ColumnSelection(0, 3, 4), "Responses")
