from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any

from ..errors import StoreError, ValidationError
from ..models.config_models import SourceConfig
from ..models.processing_result import ConsolidationResult
from ..stores.base import SpreadsheetStore, find_sheet_casefold
from .columns import column_index, column_label
from .naming import titles_match

"""Row consolidation: one output row per student ID.

Rows sharing an identifier are merged into a single row. Columns before the
grade range come from the first occurrence; grade-range columns use a sparse
union where the last present value wins and blanks never overwrite.
"""

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnSelection:
    """Validated 0-based column indices for a consolidation run."""
    id_col: int
    start: int
    end: int

    @classmethod
    def from_labels(cls, id_label: str, start_label: str, end_label: str) -> ColumnSelection:
        """Resolve user-supplied labels, rejecting an end before the start.

        Raises:
            ValidationError: on any invalid label; nothing has been written yet.
        """
        id_col = column_index(id_label)
        start = column_index(start_label)
        end = column_index(end_label, lower_bound=start)
        return cls(id_col=id_col - 1, start=start - 1, end=end - 1)

    def describe(self) -> str:
        return (
            f"id={column_label(self.id_col + 1)} "
            f"grades={column_label(self.start + 1)}:{column_label(self.end + 1)}"
        )


def has_value(value: Any) -> bool:
    """Merge predicate: True for any present cell value.

    None, NaN and empty / whitespace-only strings are absent. Numbers
    (including 0) and booleans are present.
    """
    if value is None:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def identifier_key(value: Any) -> str | None:
    """Normalize an identifier cell so 1001, 1001.0 and "1001" group together."""
    if not has_value(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _cell(row: list[Any], index: int) -> Any:
    return row[index] if index < len(row) else None


def _fit_header(header: list[Any], width: int) -> list[Any]:
    fitted = list(header[:width])
    fitted.extend([""] * (width - len(fitted)))
    return fitted


def consolidate_rows(
    grid: list[list[Any]], id_col: int, start: int, end: int
) -> ConsolidationResult:
    """Merge rows of grid (row 0 = header) into one row per identifier.

    Args:
        grid: Source values, header first
        id_col: 0-based identifier column
        start: 0-based first grade-range column
        end: 0-based last grade-range column (inclusive, >= start)

    Returns:
        ConsolidationResult whose rows keep first-seen identifier order
    """
    if start < 0 or id_col < 0 or end < start:
        raise ValidationError(f"invalid column selection id={id_col} start={start} end={end}")

    start_time = datetime.now(UTC)
    width = end + 1
    header = _fit_header(grid[0] if grid else [], width)

    merged: dict[str, list[Any]] = {}
    skipped = 0
    data_rows = grid[1:]
    for row in data_rows:
        key = identifier_key(_cell(row, id_col))
        if key is None:
            skipped += 1
            continue
        out = merged.get(key)
        if out is None:
            out = [_cell(row, c) if c < start else "" for c in range(width)]
            # missing leading cells become "" rather than None
            out = ["" if v is None else v for v in out]
            merged[key] = out
        for c in range(start, width):
            value = _cell(row, c)
            if has_value(value):
                out[c] = value

    logger.debug(f"consolidated {len(data_rows)} rows into {len(merged)} students (skipped={skipped})")
    return ConsolidationResult(
        header=header,
        rows=list(merged.values()),
        source_rows=len(data_rows),
        skipped_rows=skipped,
        start_time=start_time,
        end_time=datetime.now(UTC),
    )


def consolidate_sheet(
    store: SpreadsheetStore,
    source: SourceConfig,
    selection: ColumnSelection,
    output_sheet: str,
) -> ConsolidationResult:
    """Read the source sheet, merge it, and replace output_sheet with the result.

    The output sheet lives in the same book as the source and is fully
    replaced, so repeated runs produce the same output.
    """
    book = store.open(source.book)
    sheet = book.find_sheet(source.sheet)
    if sheet is None:
        raise StoreError(f"source sheet not found: {source.book}/{source.sheet}")
    if titles_match(sheet.title, output_sheet):
        raise ValidationError(f"output sheet must differ from the source sheet: {output_sheet!r}")
    # spreadsheet tab names are unique ignoring case; reuse the existing spelling
    existing = find_sheet_casefold(book, output_sheet)
    if existing is not None:
        output_sheet = existing.title

    grid = sheet.read_values()
    logger.info(f"consolidating {source.sheet} ({max(len(grid) - 1, 0)} rows) {selection.describe()}")
    result = consolidate_rows(grid, selection.id_col, selection.start, selection.end)

    out = book.replace_sheet(output_sheet)
    out.write_block(1, 1, result.grid)
    book.save()
    logger.info(f"wrote {result.students} students to {output_sheet}")
    return replace(result, output_sheet=output_sheet)
