from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

"""Processing result models for both pipelines.

Per-item outcomes are collected instead of letting one row's failure abort a
batch; the run-level results feed the SUMMARY line and the CLI exit code.
"""

__all__ = [
    "ItemStatus",
    "ItemOutcome",
    "RoutingResult",
    "ConsolidationResult",
]


class ItemStatus(Enum):
    """Outcome of processing one source row.

    - ROUTED: sheet found or created and populated
    - SKIPPED: row deliberately not processed (missing field, no partition)
    - FAILED: unexpected error while routing
    """
    ROUTED = "routed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ItemOutcome:
    row_number: int
    status: ItemStatus
    title: str | None = None  # destination sheet title when known
    partition: str | None = None  # partition key when known
    created: bool = False  # True when a new sheet was added
    error_type: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ItemStatus.ROUTED


@dataclass(frozen=True)
class RoutingResult:
    """Aggregated results of one routing run."""
    outcomes: list[ItemOutcome]
    start_time: datetime
    end_time: datetime

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    @property
    def routed(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def created(self) -> int:
        return sum(1 for o in self.outcomes if o.ok and o.created)

    @property
    def failures(self) -> list[ItemOutcome]:
        return [o for o in self.outcomes if not o.ok]


@dataclass(frozen=True)
class ConsolidationResult:
    """Merged output grid plus the counters reported in the summary."""
    header: list[object]
    rows: list[list[object]]
    source_rows: int  # data rows read (header excluded)
    skipped_rows: int  # rows without an identifier
    start_time: datetime | None = None
    end_time: datetime | None = None
    output_sheet: str | None = None

    @property
    def students(self) -> int:
        return len(self.rows)

    @property
    def grid(self) -> list[list[object]]:
        """Header followed by the merged rows, ready to write at A1."""
        return [list(self.header)] + [list(r) for r in self.rows]

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
