from __future__ import annotations

import re

from ..models.student_record import StudentName

"""Name parsing and sheet-title sanitization.

A student's sheet title is the sanitized "Last, First Middle" key. Titles are
compared case-insensitively so "Santos, Maria" and "SANTOS, MARIA" name the
same sheet.
"""

__all__ = [
    "MAX_TITLE_LENGTH",
    "parse_full_name",
    "sanitize_sheet_title",
    "student_sheet_title",
    "titles_match",
]

MAX_TITLE_LENGTH = 100

# control characters plus characters spreadsheets reject in tab names
_DISALLOWED_RE = re.compile(r"[\x00-\x1f\x7f-\x9f:\\/?*\[\]]")


def parse_full_name(raw: str) -> StudentName:
    """Split a full name on whitespace into first / middle / last.

    >>> parse_full_name("Maria de la Cruz Santos")
    StudentName(first='Maria', middle='de la Cruz', last='Santos')
    """
    tokens = (raw or "").split()
    if not tokens:
        raise ValueError("full name is empty")
    return StudentName(first=tokens[0], middle=" ".join(tokens[1:-1]), last=tokens[-1])


def sanitize_sheet_title(text: str) -> str:
    cleaned = _DISALLOWED_RE.sub("", text or "").strip()
    return cleaned[:MAX_TITLE_LENGTH]


def student_sheet_title(name: StudentName) -> str:
    return sanitize_sheet_title(name.display_key)


def titles_match(a: str, b: str) -> bool:
    return a.lower() == b.lower()
