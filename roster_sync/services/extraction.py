from __future__ import annotations

from typing import Any

from ..errors import MissingFieldError
from ..models.config_models import ColumnLayout
from ..models.student_record import StudentRecord

"""Student record extraction from a single source row."""

__all__ = [
    "NOT_ENROLLED_RESPONSE",
    "extract_student",
]

# Stands in for a blank program answer; classifies as SELF.
NOT_ENROLLED_RESPONSE = "Not enrolled in any program"


def _text(row: list[Any], index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    value = row[index]
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def extract_student(row: list[Any], row_number: int, layout: ColumnLayout) -> StudentRecord:
    """Pull the four routed fields out of row.

    Raises:
        MissingFieldError: full name, student ID or email is empty.
    """
    full_name = _text(row, layout.full_name)
    student_id = _text(row, layout.student_id)
    email = _text(row, layout.email)
    program = _text(row, layout.program_response)

    missing = [
        name
        for name, value in (("full name", full_name), ("student ID", student_id), ("email", email))
        if not value
    ]
    if missing:
        raise MissingFieldError(row_number, missing)

    return StudentRecord(
        student_id=student_id,
        full_name=full_name,
        email=email,
        program_response=program or NOT_ENROLLED_RESPONSE,
        row_number=row_number,
    )
