from __future__ import annotations

import base64
import json
import logging
import os
from collections.abc import Sequence
from typing import Any

import gspread
import gspread.exceptions
from google.oauth2 import service_account
from gspread.cell import Cell
from gspread.utils import rowcol_to_a1

from ..errors import StoreError
from ..excel.reader import normalize_grid
from ..models.config_models import ImageAsset
from .base import CellWrite

"""Google Sheets backend (gspread).

Store keys are spreadsheet ids. Credentials are resolved in this order:
SERVICE_ACCOUNT_BASE64, SERVICE_ACCOUNT_JSON, then the file at
GOOGLE_SERVICE_ACCOUNT_PATH (default ./service_account.json).
"""

__all__ = [
    "GoogleSheet",
    "GoogleBook",
    "GoogleSheetsStore",
    "build_client",
]

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

# New student sheets start small; the template fits well inside this.
NEW_SHEET_ROWS = 100
NEW_SHEET_COLS = 26


def build_client() -> gspread.Client:
    """Authorize a gspread client with service account credentials."""
    service_account_base64 = os.getenv("SERVICE_ACCOUNT_BASE64")
    service_account_json = os.getenv("SERVICE_ACCOUNT_JSON")
    try:
        if service_account_base64:
            info = json.loads(base64.b64decode(service_account_base64).decode("utf-8"))
            credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        elif service_account_json:
            info = json.loads(service_account_json)
            credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        else:
            path = os.getenv("GOOGLE_SERVICE_ACCOUNT_PATH", "./service_account.json")
            if not os.path.exists(path):
                raise StoreError(
                    f"Service account file not found: {path}. "
                    "Set SERVICE_ACCOUNT_JSON / SERVICE_ACCOUNT_BASE64 or provide a valid file path."
                )
            credentials = service_account.Credentials.from_service_account_file(path, scopes=SCOPES)
    except (ValueError, json.JSONDecodeError) as e:
        raise StoreError(f"invalid service account credentials: {e}") from e

    client = gspread.authorize(credentials)
    logger.debug("Google Sheets client initialized")
    return client


def _image_formula(asset: ImageAsset) -> str:
    # mode 4 = custom size (height, width in pixels)
    return f'=IMAGE("{asset.url}", 4, {asset.height}, {asset.width})'


class GoogleSheet:
    def __init__(self, ws: gspread.Worksheet) -> None:
        self._ws = ws

    @property
    def title(self) -> str:
        return self._ws.title

    @property
    def worksheet(self) -> gspread.Worksheet:
        return self._ws

    def read_values(self) -> list[list[Any]]:
        return normalize_grid(self._ws.get_all_values())

    def write_block(self, row: int, col: int, values: Sequence[Sequence[Any]]) -> None:
        if not values:
            return
        self._ws.update(
            range_name=rowcol_to_a1(row, col),
            values=[list(line) for line in values],
            value_input_option="USER_ENTERED",
        )

    def write_cells(self, cells: Sequence[CellWrite]) -> None:
        if not cells:
            return
        batch = [Cell(c.row, c.col, "" if c.value is None else c.value) for c in cells]
        self._ws.update_cells(batch, value_input_option="USER_ENTERED")

    def insert_image(self, asset: ImageAsset, row: int, col: int) -> None:
        self.write_cells([CellWrite(row, col, _image_formula(asset))])


class GoogleBook:
    def __init__(self, spreadsheet: gspread.Spreadsheet) -> None:
        self._sh = spreadsheet

    @property
    def key(self) -> str:
        return self._sh.id

    def sheets(self) -> list[GoogleSheet]:
        return [GoogleSheet(ws) for ws in self._sh.worksheets()]

    def find_sheet(self, title: str) -> GoogleSheet | None:
        try:
            return GoogleSheet(self._sh.worksheet(title))
        except gspread.exceptions.WorksheetNotFound:
            return None

    def add_sheet(self, title: str) -> GoogleSheet:
        ws = self._sh.add_worksheet(title=title, rows=NEW_SHEET_ROWS, cols=NEW_SHEET_COLS)
        return GoogleSheet(ws)

    def replace_sheet(self, title: str) -> GoogleSheet:
        existing = self.find_sheet(title)
        if existing is None:
            return self.add_sheet(title)
        existing.worksheet.clear()
        return existing

    def reorder(self, titles: Sequence[str]) -> None:
        by_title = {ws.title: ws for ws in self._sh.worksheets()}
        if set(by_title) != set(titles):
            raise StoreError(f"reorder must list every sheet of {self.key} exactly once")
        # one batchUpdate with an index assignment per sheet
        self._sh.reorder_worksheets([by_title[t] for t in titles])

    def save(self) -> None:
        """Writes are applied immediately; nothing to flush."""


class GoogleSheetsStore:
    def __init__(self, client: gspread.Client | None = None) -> None:
        self._client = client
        self._books: dict[str, GoogleBook] = {}

    @property
    def client(self) -> gspread.Client:
        if self._client is None:
            self._client = build_client()
        return self._client

    def open(self, key: str) -> GoogleBook:
        book = self._books.get(key)
        if book is None:
            try:
                book = GoogleBook(self.client.open_by_key(key))
            except gspread.exceptions.SpreadsheetNotFound as e:
                raise StoreError(f"Spreadsheet not found: {key}") from e
            self._books[key] = book
        return book
