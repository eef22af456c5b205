from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pandas as pd

"""Grid normalization helpers built on pandas.

Every backend hands rows to the services as plain lists of Python values:
- NaN / NaT become None
- numpy scalars become their Python equivalents
- trailing rows that are entirely empty are dropped
- row 1 is the header; no header detection is attempted
"""

__all__ = [
    "SheetHeaderError",
    "frame_to_grid",
    "normalize_grid",
    "grid_to_frame",
]


class SheetHeaderError(Exception):
    """Raised when a sheet has no header row."""


def _python_value(val: Any) -> Any:
    if val is None:
        return None
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):  # list-like cells
        return val
    if hasattr(val, "item") and not isinstance(val, (str, bytes)):
        # numpy scalar -> python scalar
        return val.item()
    return val


def frame_to_grid(df: pd.DataFrame) -> list[list[Any]]:
    """Convert a header-less DataFrame into a list of rows."""
    rows: list[list[Any]] = [[_python_value(v) for v in raw] for raw in df.itertuples(index=False, name=None)]
    while rows and all(v is None or (isinstance(v, str) and v.strip() == "") for v in rows[-1]):
        rows.pop()
    return rows


def normalize_grid(values: Iterable[Iterable[Any]]) -> list[list[Any]]:
    """Normalize raw cell values (openpyxl / gspread) through a DataFrame."""
    df = pd.DataFrame(list(values), dtype=object)
    return frame_to_grid(df)


def grid_to_frame(grid: list[list[Any]], sheet_name: str = "") -> pd.DataFrame:
    """Build a DataFrame with row 1 as column names (used for previews)."""
    if not grid:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no header row")
    header = [str(c).strip() if c is not None else "" for c in grid[0]]
    width = len(header)
    body = [list(r[:width]) + [None] * (width - len(r)) for r in grid[1:]]
    return pd.DataFrame(body, columns=header)
