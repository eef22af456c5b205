from __future__ import annotations

import string
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

"""Config dataclasses for the roster tool.

These are the typed, immutable objects the loader in roster_sync/config/loader.py
produces from YAML. Services receive them as constructor arguments; nothing
reads configuration from module globals.
"""

__all__ = [
    "PARTITION_LETTERS",
    "PartitionMap",
    "ColumnLayout",
    "ImageAsset",
    "SmtpConfig",
    "NotifyConfig",
    "SourceConfig",
    "RosterConfig",
]

PARTITION_LETTERS = tuple(string.ascii_uppercase)

DRIVE_VIEW_URL = "https://drive.google.com/uc?export=view&id={asset_id}"


class PartitionMap(Mapping[str, str]):
    """Immutable letter -> partition key lookup.

    Every letter A-Z must map to exactly one partition key (a spreadsheet id
    for the Google backend, a workbook name for the workbook backend).
    """

    def __init__(self, mapping: Mapping[str, str]) -> None:
        normalized = {str(k).strip().upper(): str(v) for k, v in mapping.items()}
        missing = [letter for letter in PARTITION_LETTERS if not normalized.get(letter)]
        extra = sorted(set(normalized) - set(PARTITION_LETTERS))
        if missing:
            raise ValueError(f"partition map missing letters: {missing}")
        if extra:
            raise ValueError(f"partition map has unknown keys: {extra}")
        self._data = MappingProxyType({letter: normalized[letter] for letter in PARTITION_LETTERS})

    def __getitem__(self, letter: str) -> str:
        return self._data[letter]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"PartitionMap({dict(self._data)!r})"

    @classmethod
    def uniform(cls, key: str) -> PartitionMap:
        """Route every letter to the same partition (single-book setups, tests)."""
        return cls({letter: key for letter in PARTITION_LETTERS})


@dataclass(frozen=True)
class ColumnLayout:
    """0-based column offsets of the fields extracted from a source row."""
    email: int
    full_name: int
    student_id: int
    program_response: int


@dataclass(frozen=True)
class ImageAsset:
    """Static image anchored into every student sheet."""
    asset_id: str
    width: int = 120
    height: int = 120
    alt_text: str = "logo"

    @property
    def url(self) -> str:
        return DRIVE_VIEW_URL.format(asset_id=self.asset_id)


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int = 587
    username: str | None = None
    password: str | None = None  # normally supplied via SMTP_PASSWORD
    use_starttls: bool = True
    use_ssl: bool = False
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class NotifyConfig:
    to_address: str
    from_address: str = "roster-sync@localhost"
    smtp: SmtpConfig | None = None


@dataclass(frozen=True)
class SourceConfig:
    book: str  # store key of the source spreadsheet
    sheet: str  # worksheet holding the responses


@dataclass(frozen=True)
class RosterConfig:
    """Root configuration object for both pipelines."""
    backend: str  # "workbook" | "gsheets"
    source: SourceConfig
    output_sheet: str
    columns: ColumnLayout
    partitions: PartitionMap
    notify: NotifyConfig
    workbook_directory: str = "./data"
    image: ImageAsset | None = None
