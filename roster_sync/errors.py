from __future__ import annotations

"""Exception taxonomy shared by the consolidation and routing pipelines.

- ValidationError: bad user input (column label, range order). Aborts a whole run.
- MissingFieldError: a source row lacks name / ID / email. Skips that row only.
- NoPartitionError: last name initial has no partition. Skips that student only.
- StoreError: the spreadsheet backend could not satisfy a request.
"""

__all__ = [
    "RosterError",
    "ValidationError",
    "MissingFieldError",
    "NoPartitionError",
    "StoreError",
]


class RosterError(Exception):
    """Base exception for roster processing errors."""
    pass


class ValidationError(RosterError):
    """Raised when a column selection or range is invalid."""


class MissingFieldError(RosterError):
    """Raised when a source row lacks a required field."""

    def __init__(self, row_number: int, fields: list[str]) -> None:
        self.row_number = row_number
        self.fields = list(fields)
        super().__init__(f"row {row_number}: missing {', '.join(self.fields)}")


class NoPartitionError(RosterError):
    """Raised when a last name does not start with a letter A-Z."""

    def __init__(self, last_name: str) -> None:
        self.last_name = last_name
        super().__init__(f"no partition for last name {last_name!r}")


class StoreError(RosterError):
    """Raised when a spreadsheet store cannot open, read or write a sheet."""
