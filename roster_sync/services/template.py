from __future__ import annotations

from dataclasses import dataclass

from ..models.config_models import ImageAsset
from ..models.student_record import StudentRecord
from ..stores.base import CellWrite, SheetHandle
from .naming import parse_full_name

"""Per-student sheet template.

Layout (1-based rows/cols):

    A1:B11  key/value block   Name, Student ID, Email, Payor, unit and GPA
                              formulas, blank fields for manual entry
    D1:G13  organization table  Code | Units | Grade | Points, one row per code
    I1:J6   grade legend       letter grade -> grade points
    I9      logo image

Only the name, ID, email and payor values change between students; every
other cell, including all formulas, is identical. Manual-entry cells (units,
grades, counselor, notes, last updated) are never written, so re-routing a
student keeps what staff typed into an existing sheet.
"""

__all__ = [
    "ORGANIZATION_CODES",
    "GRADE_LEGEND",
    "IMAGE_ANCHOR",
    "TemplateBlock",
    "build_template",
    "populate_sheet",
]

ORGANIZATION_CODES = (
    "ASB",
    "PTK",
    "MESA",
    "PUENTE",
    "UMOJA",
    "HONORS",
    "STEM",
    "ATHL",
    "MUSIC",
    "DRAMA",
    "DEBATE",
    "SERVICE",
)

GRADE_LEGEND = (
    ("A", 4),
    ("B", 3),
    ("C", 2),
    ("D", 1),
    ("F", 0),
)

TABLE_HEADER = ("Code", "Units", "Grade", "Points")
TABLE_COL = 4  # D
LEGEND_COL = 9  # I
IMAGE_ANCHOR = (9, LEGEND_COL)  # I9

_FIRST_CODE_ROW = 2
_LAST_CODE_ROW = _FIRST_CODE_ROW + len(ORGANIZATION_CODES) - 1
_LEGEND_LAST_ROW = 1 + len(GRADE_LEGEND)
_LEGEND_RANGE = f"$I$2:$J${_LEGEND_LAST_ROW}"


def _points_formula(row: int) -> str:
    return (
        f'=IF(OR(E{row}="",F{row}=""),"",'
        f"E{row}*IFERROR(VLOOKUP(F{row},{_LEGEND_RANGE},2,FALSE),0))"
    )


_UNITS = f"E{_FIRST_CODE_ROW}:E{_LAST_CODE_ROW}"
_GRADES = f"F{_FIRST_CODE_ROW}:F{_LAST_CODE_ROW}"
_POINTS = f"G{_FIRST_CODE_ROW}:G{_LAST_CODE_ROW}"

# (label, value) rows of the key/value block; None values are filled per student,
# "" marks a manual-entry cell that is left untouched
_KEY_VALUE_ROWS: tuple[tuple[str, str | None], ...] = (
    ("Name", None),
    ("Student ID", None),
    ("Email", None),
    ("Payor", None),
    ("Units Attempted", f"=SUM({_UNITS})"),
    ("Units Graded", f'=SUMPRODUCT(({_GRADES}<>"")*({_POINTS}<>""),{_UNITS})'),
    ("Grade Points", f"=SUM({_POINTS})"),
    ("GPA", '=IF(B6=0,"",ROUND(B7/B6,2))'),
    ("Counselor", ""),
    ("Notes", ""),
    ("Last Updated", ""),
)


@dataclass(frozen=True)
class TemplateBlock:
    cells: tuple[CellWrite, ...]
    image: ImageAsset | None = None
    image_anchor: tuple[int, int] = IMAGE_ANCHOR


def _key_value_cells(record: StudentRecord, membership: str) -> list[CellWrite]:
    name = parse_full_name(record.full_name)
    personal = {
        "Name": name.display_key,
        "Student ID": record.student_id,
        "Email": record.email,
        "Payor": membership,
    }
    cells = []
    for row, (label, value) in enumerate(_KEY_VALUE_ROWS, start=1):
        cells.append(CellWrite(row, 1, label))
        if value is None:
            cells.append(CellWrite(row, 2, personal[label]))
        elif value:
            cells.append(CellWrite(row, 2, value))
    return cells


def _organization_cells() -> list[CellWrite]:
    cells = [CellWrite(1, TABLE_COL + i, h) for i, h in enumerate(TABLE_HEADER)]
    for row, code in enumerate(ORGANIZATION_CODES, start=_FIRST_CODE_ROW):
        cells.append(CellWrite(row, TABLE_COL, code))
        cells.append(CellWrite(row, TABLE_COL + 3, _points_formula(row)))
    return cells


def _legend_cells() -> list[CellWrite]:
    cells = [CellWrite(1, LEGEND_COL, "Grade"), CellWrite(1, LEGEND_COL + 1, "Points")]
    for row, (grade, points) in enumerate(GRADE_LEGEND, start=2):
        cells.append(CellWrite(row, LEGEND_COL, grade))
        cells.append(CellWrite(row, LEGEND_COL + 1, points))
    return cells


def build_template(
    record: StudentRecord, membership: str, image: ImageAsset | None = None
) -> TemplateBlock:
    cells = _key_value_cells(record, membership) + _organization_cells() + _legend_cells()
    return TemplateBlock(cells=tuple(cells), image=image)


def populate_sheet(sheet: SheetHandle, block: TemplateBlock) -> None:
    """Write the whole block in one batch, then anchor the image.

    Writes are not rolled back if the image insert fails afterwards.
    """
    sheet.write_cells(block.cells)
    if block.image is not None:
        row, col = block.image_anchor
        sheet.insert_image(block.image, row, col)
