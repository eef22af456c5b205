from __future__ import annotations

from pathlib import Path

from openpyxl import Workbook, load_workbook

from roster_sync.cli import main
from roster_sync.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL

GRADES = [
    ["ID", "Name", "G1", "G2"],
    [1001, "Ann", "A", None],
    [1002, "Bo", None, "B"],
    [1001, "Ann B", None, "C"],
    [None, "nobody", "F", "F"],
]


def _write_source(path: Path, rows: list[list[object]], title: str = "Responses") -> None:
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(row)
    wb.save(path)


def test_missing_config_is_fatal(temp_workdir: Path, capsys):
    code = main(["--config", "config/absent.yml", "route", "--rows", "2"])
    assert code == EXIT_FATAL
    assert "ERROR config: config file not found" in capsys.readouterr().out


def test_consolidate_writes_output_sheet(write_config: Path, temp_workdir: Path, capsys):
    _write_source(temp_workdir / "data" / "roster.xlsx", GRADES)

    code = main(["consolidate", "--id-column", "A", "--grade-start", "C", "--grade-end", "D"])

    assert code == EXIT_SUCCESS_ALL
    out = capsys.readouterr().out
    assert "SUMMARY source_rows=4 skipped_rows=1 students=2" in out
    ws = load_workbook(temp_workdir / "data" / "roster.xlsx")["Consolidated"]
    assert [ws.cell(row=1, column=c).value for c in range(1, 5)] == ["ID", "Name", "G1", "G2"]
    assert [ws.cell(row=2, column=c).value for c in (1, 2, 3, 4)] == [1001, "Ann", "A", "C"]
    assert ws.cell(row=3, column=1).value == 1002
    assert ws.cell(row=3, column=4).value == "B"
    assert ws.max_row == 3


def test_consolidate_rejects_end_before_start(write_config: Path, temp_workdir: Path, capsys):
    _write_source(temp_workdir / "data" / "roster.xlsx", GRADES)

    code = main(["consolidate", "--id-column", "A", "--grade-start", "D", "--grade-end", "C"])

    assert code == EXIT_FATAL
    assert "ERROR columns:" in capsys.readouterr().out
    assert load_workbook(temp_workdir / "data" / "roster.xlsx").sheetnames == ["Responses"]


def test_consolidate_prompts_for_missing_labels(write_config: Path, temp_workdir: Path, monkeypatch, capsys):
    _write_source(temp_workdir / "data" / "roster.xlsx", GRADES)
    answers = iter(["A", "C", "D"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(answers))

    assert main(["consolidate"]) == EXIT_SUCCESS_ALL
    assert "students=2" in capsys.readouterr().out


def test_route_partial_failure(write_config: Path, temp_workdir: Path, response_grid, capsys):
    _write_source(temp_workdir / "data" / "roster.xlsx", response_grid)

    code = main(["route", "--rows", "2-6"])

    assert code == EXIT_PARTIAL_FAILURE
    out = capsys.readouterr().out
    assert "SUMMARY rows=5 routed=3 created=3 failed=2" in out
    assert "WARN notify to=admin@example.edu" in out

    book = load_workbook(temp_workdir / "data" / "roster-n-z.xlsx")
    assert book.sheetnames == ["O'Brien, Sean", "Santos, Maria de la Cruz", "Zhang, Amy"]
    assert book["Zhang, Amy"]["B4"].value == "TRIO"
    assert not (temp_workdir / "data" / "roster-a-m.xlsx").exists()

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    assert len(logs[0].read_text(encoding="utf-8").splitlines()) == 2


def test_route_dry_run_writes_nothing(write_config: Path, temp_workdir: Path, response_grid, capsys):
    _write_source(temp_workdir / "data" / "roster.xlsx", response_grid)

    code = main(["--dry-run", "route", "--rows", "2,3"])

    assert code == EXIT_SUCCESS_ALL
    assert "routed=2" in capsys.readouterr().out
    assert not (temp_workdir / "data" / "roster-n-z.xlsx").exists()


def test_route_empty_selection_is_fatal(write_config: Path, temp_workdir: Path, response_grid, monkeypatch, capsys):
    _write_source(temp_workdir / "data" / "roster.xlsx", response_grid)
    monkeypatch.setattr("builtins.input", lambda prompt: "1, abc")

    assert main(["route"]) == EXIT_FATAL
    assert "no rows selected" in capsys.readouterr().out


def test_route_missing_source_sheet(write_config: Path, temp_workdir: Path, capsys):
    _write_source(temp_workdir / "data" / "roster.xlsx", [["x"]], title="Other")

    assert main(["route", "--rows", "2"]) == EXIT_FATAL
    assert "source sheet not found: roster/Responses" in capsys.readouterr().out


def test_inspect_prints_preview(write_config: Path, temp_workdir: Path, response_grid, capsys):
    _write_source(temp_workdir / "data" / "roster.xlsx", response_grid)

    assert main(["inspect", "--limit", "2"]) == EXIT_SUCCESS_ALL
    out = capsys.readouterr().out
    assert "SHEET: roster/Responses rows=5" in out
    assert "Maria de la Cruz Santos" in out
    assert "Amy Zhang" not in out
