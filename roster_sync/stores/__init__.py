"""Spreadsheet store backends."""

from .base import Book, CellWrite, SheetHandle, SpreadsheetStore, find_sheet_casefold
from .memory import MemoryBook, MemorySheet, MemoryStore

__all__ = [
    "Book",
    "CellWrite",
    "SheetHandle",
    "SpreadsheetStore",
    "find_sheet_casefold",
    "MemoryBook",
    "MemorySheet",
    "MemoryStore",
    "build_store",
]


def build_store(backend: str, workbook_directory: str = "./data") -> SpreadsheetStore:
    """Instantiate the configured backend, importing heavy deps lazily."""
    if backend == "workbook":
        from .workbook import WorkbookStore

        return WorkbookStore(workbook_directory)
    if backend == "gsheets":
        from .gsheets import GoogleSheetsStore

        return GoogleSheetsStore()
    raise ValueError(f"unknown backend: {backend}")
