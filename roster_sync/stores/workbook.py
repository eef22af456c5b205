from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from ..errors import StoreError
from ..excel.reader import normalize_grid
from ..models.config_models import ImageAsset
from .base import CellWrite, find_sheet_casefold

"""Local .xlsx backend: one workbook file per store key.

<directory>/<key>.xlsx is loaded on open (or started empty) and written back on
save(). Images are placed with an IMAGE() formula so the file stays
self-contained.
"""

__all__ = [
    "WorkbookSheet",
    "WorkbookBook",
    "WorkbookStore",
]

# Excel rejects tab names longer than this; openpyxl only warns
MAX_SHEET_TITLE = 31


def _image_formula(asset: ImageAsset) -> str:
    # IMAGE(source, alt_text, sizing=3 custom, height, width)
    return f'=IMAGE("{asset.url}","{asset.alt_text}",3,{asset.height},{asset.width})'


class WorkbookSheet:
    def __init__(self, ws: Worksheet) -> None:
        self._ws = ws

    @property
    def title(self) -> str:
        return self._ws.title

    def read_values(self) -> list[list[Any]]:
        return normalize_grid(self._ws.iter_rows(values_only=True))

    def write_block(self, row: int, col: int, values: Sequence[Sequence[Any]]) -> None:
        for r_off, line in enumerate(values):
            for c_off, value in enumerate(line):
                self._ws.cell(row=row + r_off, column=col + c_off, value=value)

    def write_cells(self, cells: Sequence[CellWrite]) -> None:
        for cell in cells:
            self._ws.cell(row=cell.row, column=cell.col, value=cell.value)

    def insert_image(self, asset: ImageAsset, row: int, col: int) -> None:
        self._ws.cell(row=row, column=col, value=_image_formula(asset))


class WorkbookBook:
    def __init__(self, key: str, path: Path) -> None:
        self._key = key
        self.path = path
        self._placeholder: Worksheet | None = None
        if path.exists():
            try:
                self._wb = load_workbook(path)
            except Exception as e:
                raise StoreError(f"cannot open workbook {path}: {e}") from e
        else:
            self._wb = Workbook()
            # openpyxl always starts with one sheet; drop it once a real one exists
            self._placeholder = self._wb.active

    @property
    def key(self) -> str:
        return self._key

    def sheets(self) -> list[WorkbookSheet]:
        return [WorkbookSheet(ws) for ws in self._wb.worksheets if ws is not self._placeholder]

    def find_sheet(self, title: str) -> WorkbookSheet | None:
        if title in self._wb.sheetnames and self._wb[title] is not self._placeholder:
            return WorkbookSheet(self._wb[title])
        return None

    def _drop_placeholder(self) -> None:
        if self._placeholder is not None:
            self._wb.remove(self._placeholder)
            self._placeholder = None

    def add_sheet(self, title: str) -> WorkbookSheet:
        # openpyxl treats titles differing only in case as duplicates
        if find_sheet_casefold(self, title) is not None:
            raise StoreError(f"sheet already exists: {self._key}/{title}")
        if len(title) > MAX_SHEET_TITLE:
            raise StoreError(
                f"sheet title longer than {MAX_SHEET_TITLE} characters: {self._key}/{title}"
            )
        ws = self._wb.create_sheet(title)
        self._drop_placeholder()
        return WorkbookSheet(ws)

    def replace_sheet(self, title: str) -> WorkbookSheet:
        existing = self.find_sheet(title)
        if existing is None:
            return self.add_sheet(title)
        index = self._wb.sheetnames.index(title)
        self._wb.remove(self._wb[title])
        return WorkbookSheet(self._wb.create_sheet(title, index))

    def reorder(self, titles: Sequence[str]) -> None:
        current = [s.title for s in self.sheets()]
        if sorted(current) != sorted(titles):
            raise StoreError(f"reorder must list every sheet of {self._key} exactly once")
        for target, title in enumerate(titles):
            ws = self._wb[title]
            self._wb.move_sheet(ws, offset=target - self._wb.index(ws))

    def save(self) -> None:
        if self._placeholder is not None:
            return  # nothing written yet
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._wb.save(self.path)


class WorkbookStore:
    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)
        self._books: dict[str, WorkbookBook] = {}

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.xlsx"

    def open(self, key: str) -> WorkbookBook:
        book = self._books.get(key)
        if book is None:
            book = WorkbookBook(key, self.path_for(key))
            self._books[key] = book
        return book
