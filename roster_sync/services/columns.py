from __future__ import annotations

import logging
import re

from ..errors import ValidationError

"""Column label and row-number parsing.

Column labels use the spreadsheet convention: a bijective base-26 numeral
where A=1 ... Z=26, AA=27, AB=28 ... (there is no zero digit).
"""

__all__ = [
    "column_index",
    "column_label",
    "parse_row_spec",
]

logger = logging.getLogger(__name__)

_LABEL_RE = re.compile(r"^[A-Z]+$")
_RANGE_RE = re.compile(r"^(\d+)\s*-\s*(\d+)$")

# Row 1 holds the header
FIRST_DATA_ROW = 2


def column_index(label: str, lower_bound: int | None = None) -> int:
    """Convert a column label to its 1-based index.

    Args:
        label: Uppercase column letters ("A", "AA"). Surrounding whitespace is
            ignored; anything else that is not A-Z is rejected.
        lower_bound: When given, a resulting index strictly below it is
            rejected (used to keep a range end at or after its start).

    Raises:
        ValidationError: Label is not a sequence of uppercase letters, or the
            index is below lower_bound.

    Examples:
        >>> column_index("A"), column_index("Z"), column_index("AA"), column_index("AB")
        (1, 26, 27, 28)
    """
    text = (label or "").strip()
    if not _LABEL_RE.match(text):
        raise ValidationError(f"invalid column label: {label!r} (expected letters A-Z)")
    index = 0
    for ch in text:
        index = index * 26 + (ord(ch) - ord("A") + 1)
    if lower_bound is not None and index < lower_bound:
        raise ValidationError(
            f"column {text} ({index}) must not come before column {column_label(lower_bound)} ({lower_bound})"
        )
    return index


def column_label(index: int) -> str:
    """Inverse of column_index: 1 -> "A", 27 -> "AA"."""
    if index < 1:
        raise ValueError(f"column index must be >= 1, got {index}")
    letters = []
    while index > 0:
        index, rem = divmod(index - 1, 26)
        letters.append(chr(ord("A") + rem))
    return "".join(reversed(letters))


def parse_row_spec(spec: str, max_row: int | None = None) -> list[int]:
    """Parse a row selection like "2,3,5-7" into sorted unique row numbers.

    Ranges are inclusive; a reversed range ("10-8") contributes nothing. Row
    numbers below 2 are dropped because row 1 is the header. Tokens that are
    neither an integer nor a range are logged and ignored. With max_row, a
    range ending past it is cut at max_row; single row numbers are kept as
    given.
    """
    rows: set[int] = set()
    for token in (spec or "").split(","):
        token = token.strip()
        if not token:
            continue
        if token.isdecimal():
            rows.add(int(token))
            continue
        m = _RANGE_RE.match(token)
        if m:
            start, end = int(m.group(1)), int(m.group(2))
            if max_row is not None and end > max_row:
                logger.warning(f"row range {token!r} cut at the last row ({max_row})")
                end = max_row
            rows.update(range(start, end + 1))
            continue
        logger.warning(f"ignoring invalid row token: {token!r}")
    return sorted(r for r in rows if r >= FIRST_DATA_ROW)
