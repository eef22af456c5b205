from __future__ import annotations

from dataclasses import dataclass

"""StudentRecord and StudentName domain models.

A StudentRecord is built once per processed source row and handed straight to
the router; nothing retains it after routing.
"""

__all__ = [
    "StudentRecord",
    "StudentName",
]


@dataclass(frozen=True)
class StudentRecord:
    """Fields extracted from one source row."""
    student_id: str
    full_name: str
    email: str
    program_response: str
    row_number: int = -1  # 1-based sheet row, -1 when unknown


@dataclass(frozen=True)
class StudentName:
    """A full name split into first / middle / last parts."""
    first: str
    middle: str
    last: str

    @property
    def display_key(self) -> str:
        """Canonical "Last, First Middle" form (middle omitted when empty)."""
        key = f"{self.last}, {self.first}"
        if self.middle:
            key += f" {self.middle}"
        return key
