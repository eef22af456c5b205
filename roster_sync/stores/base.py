from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from ..models.config_models import ImageAsset
from ..services.naming import titles_match

"""Spreadsheet store interfaces.

A store opens books (spreadsheets / workbooks) by a stable key; a book holds
named sheets. Coordinates are 1-based (row 1, column 1 is A1) like every
spreadsheet API the backends wrap.
"""

__all__ = [
    "CellWrite",
    "SheetHandle",
    "Book",
    "SpreadsheetStore",
    "find_sheet_casefold",
]


@dataclass(frozen=True)
class CellWrite:
    """One value or formula destined for (row, col)."""
    row: int
    col: int
    value: Any


class SheetHandle(Protocol):
    @property
    def title(self) -> str: ...

    def read_values(self) -> list[list[Any]]: ...

    def write_block(self, row: int, col: int, values: Sequence[Sequence[Any]]) -> None: ...

    def write_cells(self, cells: Sequence[CellWrite]) -> None: ...

    def insert_image(self, asset: ImageAsset, row: int, col: int) -> None: ...


class Book(Protocol):
    @property
    def key(self) -> str: ...

    def sheets(self) -> list[SheetHandle]: ...

    def find_sheet(self, title: str) -> SheetHandle | None: ...

    def add_sheet(self, title: str) -> SheetHandle: ...

    def replace_sheet(self, title: str) -> SheetHandle: ...

    def reorder(self, titles: Sequence[str]) -> None: ...

    def save(self) -> None: ...


class SpreadsheetStore(Protocol):
    def open(self, key: str) -> Book: ...


def find_sheet_casefold(book: Book, title: str) -> SheetHandle | None:
    """Return the sheet whose title equals title ignoring case, if any."""
    for sheet in book.sheets():
        if titles_match(sheet.title, title):
            return sheet
    return None
