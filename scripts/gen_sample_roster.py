#!/usr/bin/env python3
"""Sample roster generation for manual end-to-end runs.

Writes <directory>/<book>.xlsx with a "Form Responses 1" sheet shaped like the
default column layout:
- Row 1: header (Timestamp, Email Address, Full Name, Student ID, Program, grade columns)
- Row 2+: responses, several per student, with blank grades sprinkled in

Run `roster-sync consolidate --id-column D --grade-start F --grade-end K` and
`roster-sync route --rows 2-20` against the result.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

FIRST_NAMES = ["Maria", "James", "Aiyana", "Wei", "Fatima", "Luis", "Olivia", "Noah", "Priya", "Kofi"]
MIDDLE_NAMES = ["", "", "", "de la Cruz", "Ann", "J.", ""]
LAST_NAMES = ["Santos", "O'Brien", "Nguyen", "Okafor", "Smith", "garcia", "Zhang", "Patel", "Ávila", "Young"]
PROGRAMS = [
    "I am in the EOPS program",
    "CARE",
    "none of the above",
    "",
    "NextUp / foster youth",
    "TRIO SSS",
    "Veterans Resource Center",
]
GRADES = ["A", "B", "C", "D", "F", "", ""]
GRADE_COLUMNS = [f"Course {i}" for i in range(1, 7)]
HEADER = ["Timestamp", "Email Address", "Full Name", "Student ID", "Program"] + GRADE_COLUMNS


def generate_responses(students: int, max_dupes: int, seed: int = 42) -> pd.DataFrame:
    """Build a response sheet with 1..max_dupes rows per student."""
    rng = np.random.default_rng(seed)
    rows: list[list[Any]] = []
    for i in range(students):
        first = FIRST_NAMES[i % len(FIRST_NAMES)]
        middle = MIDDLE_NAMES[int(rng.integers(len(MIDDLE_NAMES)))]
        last = LAST_NAMES[int(rng.integers(len(LAST_NAMES)))]
        full_name = " ".join(p for p in (first, middle, last) if p)
        student_id = 100000 + i
        email = f"{first.lower()}.{i}@students.example.edu"
        program = PROGRAMS[int(rng.integers(len(PROGRAMS)))]
        for n in range(int(rng.integers(1, max_dupes + 1))):
            stamp = pd.Timestamp("2024-08-19 09:00") + pd.Timedelta(minutes=int(rng.integers(0, 60 * 24 * 90)))
            grades = [GRADES[int(rng.integers(len(GRADES)))] for _ in GRADE_COLUMNS]
            rows.append([stamp, email, full_name, student_id, program] + grades)
    # blank-ID row exercises the skip path
    rows.append([pd.Timestamp("2024-09-01 10:00"), "", "", "", ""] + [""] * len(GRADE_COLUMNS))
    rng.shuffle(rows)
    return pd.DataFrame(rows, columns=HEADER)


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Generate a sample roster workbook")
    p.add_argument("--directory", default="./data", help="Workbook directory (workbook backend)")
    p.add_argument("--book", default="roster", help="Workbook name without .xlsx")
    p.add_argument("--sheet", default="Form Responses 1", help="Sheet name")
    p.add_argument("--students", type=int, default=25, help="Number of distinct students")
    p.add_argument("--max-dupes", type=int, default=3, help="Maximum rows per student")
    p.add_argument("--seed", type=int, default=42, help="Random seed")
    args = p.parse_args(argv)

    if args.students < 1 or args.max_dupes < 1:
        print("students and max-dupes must be positive", file=sys.stderr)
        return 1

    df = generate_responses(args.students, args.max_dupes, seed=args.seed)
    out = Path(args.directory) / f"{args.book}.xlsx"
    out.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=args.sheet, index=False)
    print(f"wrote {len(df)} rows for {args.students} students to {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
