from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..errors import StoreError
from ..models.config_models import ImageAsset
from .base import CellWrite

"""In-process spreadsheet store.

Used by tests and by --dry-run, where the real source grid is copied in and
every write stays in memory.
"""

__all__ = [
    "MemorySheet",
    "MemoryBook",
    "MemoryStore",
]


class MemorySheet:
    def __init__(self, title: str) -> None:
        self._title = title
        self.cells: dict[tuple[int, int], Any] = {}
        self.images: list[tuple[ImageAsset, int, int]] = []
        self.write_calls = 0

    @property
    def title(self) -> str:
        return self._title

    def read_values(self) -> list[list[Any]]:
        if not self.cells:
            return []
        max_row = max(r for r, _ in self.cells)
        max_col = max(c for _, c in self.cells)
        return [
            [self.cells.get((r, c), "") for c in range(1, max_col + 1)]
            for r in range(1, max_row + 1)
        ]

    def write_block(self, row: int, col: int, values: Sequence[Sequence[Any]]) -> None:
        self.write_calls += 1
        for r_off, line in enumerate(values):
            for c_off, value in enumerate(line):
                self.cells[(row + r_off, col + c_off)] = value

    def write_cells(self, cells: Sequence[CellWrite]) -> None:
        self.write_calls += 1
        for cell in cells:
            self.cells[(cell.row, cell.col)] = cell.value

    def insert_image(self, asset: ImageAsset, row: int, col: int) -> None:
        self.images.append((asset, row, col))

    def value(self, row: int, col: int) -> Any:
        return self.cells.get((row, col), "")


class MemoryBook:
    def __init__(self, key: str) -> None:
        self._key = key
        self._sheets: list[MemorySheet] = []
        self.reorder_calls = 0
        self.saves = 0

    @property
    def key(self) -> str:
        return self._key

    def sheets(self) -> list[MemorySheet]:
        return list(self._sheets)

    def titles(self) -> list[str]:
        return [s.title for s in self._sheets]

    def find_sheet(self, title: str) -> MemorySheet | None:
        for sheet in self._sheets:
            if sheet.title == title:
                return sheet
        return None

    def add_sheet(self, title: str) -> MemorySheet:
        if self.find_sheet(title) is not None:
            raise StoreError(f"sheet already exists: {self._key}/{title}")
        sheet = MemorySheet(title)
        self._sheets.append(sheet)
        return sheet

    def replace_sheet(self, title: str) -> MemorySheet:
        existing = self.find_sheet(title)
        sheet = MemorySheet(title)
        if existing is None:
            self._sheets.append(sheet)
        else:
            self._sheets[self._sheets.index(existing)] = sheet
        return sheet

    def reorder(self, titles: Sequence[str]) -> None:
        by_title = {s.title: s for s in self._sheets}
        if set(by_title) != set(titles) or len(titles) != len(self._sheets):
            raise StoreError(f"reorder must list every sheet of {self._key} exactly once")
        self.reorder_calls += 1
        self._sheets = [by_title[t] for t in titles]

    def save(self) -> None:
        self.saves += 1


class MemoryStore:
    """Books are created on first open unless strict=True."""

    def __init__(self, strict: bool = False) -> None:
        self.books: dict[str, MemoryBook] = {}
        self.strict = strict

    def open(self, key: str) -> MemoryBook:
        book = self.books.get(key)
        if book is None:
            if self.strict:
                raise StoreError(f"book not found: {key}")
            book = MemoryBook(key)
            self.books[key] = book
        return book

    def seed(self, key: str, title: str, values: Sequence[Sequence[Any]]) -> MemorySheet:
        """Create (or replace) a sheet pre-filled with values at A1."""
        sheet = self.open(key).replace_sheet(title)
        if values:
            sheet.write_block(1, 1, values)
        sheet.write_calls = 0
        return sheet
