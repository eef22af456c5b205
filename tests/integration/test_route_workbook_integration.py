from __future__ import annotations

from pathlib import Path

from openpyxl import load_workbook

from roster_sync.logging.error_log import ErrorLogBuffer
from roster_sync.models.config_models import ImageAsset
from roster_sync.services.router import RosterRouter
from roster_sync.stores.workbook import WorkbookStore

"""Routing against real .xlsx partition workbooks, across store reopen."""


def test_route_rows_then_reroute_after_reopen(
    tmp_path: Path, split_partitions, notifier, layout, response_grid
):
    image = ImageAsset(asset_id="logo123")
    router = RosterRouter(WorkbookStore(tmp_path), split_partitions, notifier, image=image)
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    result = router.route_rows(response_grid, [2, 3, 4, 5, 6], layout, sheet_name="Responses", error_log=buf)

    assert result.routed == 3
    assert result.created == 3
    assert [o.error_type for o in result.failures] == ["MISSING_FIELD", "NO_PARTITION"]
    assert len(notifier.sent) == 1

    wb = load_workbook(tmp_path / "roster-n-z.xlsx")
    assert wb.sheetnames == ["O'Brien, Sean", "Santos, Maria de la Cruz", "Zhang, Amy"]
    ws = wb["O'Brien, Sean"]
    assert ws["A1"].value == "Name"
    assert ws["B2"].value == "1002"
    assert ws["B4"].value == "SELF"
    assert ws["I9"].value.startswith('=IMAGE("https://drive.google.com/uc?export=view&id=logo123"')

    # a fresh process sees the saved books; a case variant reuses the sheet
    rerouter = RosterRouter(WorkbookStore(tmp_path), split_partitions, notifier)
    grid = [response_grid[0], ["2024-09-01", "sean@example.edu", "SEAN O'BRIEN", "1002", "CalWorks"]]
    again = rerouter.route_rows(grid, [2], layout)
    assert again.routed == 1
    assert again.created == 0

    wb = load_workbook(tmp_path / "roster-n-z.xlsx")
    assert len(wb.sheetnames) == 3
    assert wb["O'Brien, Sean"]["B4"].value == "CALWORKS"


def test_long_title_fails_row_and_manual_entries_survive(tmp_path: Path, split_partitions, notifier, layout):
    header = ["Timestamp", "Email Address", "Full Name", "Student ID", "Program"]
    grid = [
        header,
        ["2024-08-19", "maria@example.edu", "Maria Santos", "1001", "EOPS"],
        ["2024-08-19", "lupe@example.edu", "Maria Guadalupe de la Cruz Hernandez Santos", "1006", "EOPS"],
    ]
    router = RosterRouter(WorkbookStore(tmp_path), split_partitions, notifier)
    result = router.route_rows(grid, [2, 3], layout)
    assert result.routed == 1
    assert [(o.row_number, o.error_type) for o in result.failures] == [(3, "STORE_ERROR")]

    path = tmp_path / "roster-n-z.xlsx"
    wb = load_workbook(path)
    assert wb.sheetnames == ["Santos, Maria"]
    ws = wb["Santos, Maria"]
    ws["E2"] = 4
    ws["F2"] = "A"
    ws["B9"] = "Dr. Who"
    wb.save(path)

    again = RosterRouter(WorkbookStore(tmp_path), split_partitions, notifier).route_rows(grid, [2], layout)
    assert again.created == 0
    ws = load_workbook(path)["Santos, Maria"]
    assert (ws["E2"].value, ws["F2"].value, ws["B9"].value) == (4, "A", "Dr. Who")
