# Shared pytest fixtures
from __future__ import annotations
import string
import tempfile
from pathlib import Path

import pytest

from roster_sync.logging.init import reset_logging
from roster_sync.models.config_models import ColumnLayout, PartitionMap
from roster_sync.stores.memory import MemoryStore


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


def _partition_lines() -> str:
    lines = []
    for letter in string.ascii_uppercase:
        key = "roster-a-m" if letter <= "M" else "roster-n-z"
        lines.append(f"    {letter}: {key}")
    return "\n".join(lines)


@pytest.fixture()
def sample_config_yaml() -> str:
    return f"""backend: workbook
workbook_directory: ./data
source:
  book: roster
  sheet: Responses
consolidate:
  output_sheet: Consolidated
roster:
  columns:
    email: B
    full_name: C
    student_id: D
    program_response: E
  partitions:
{_partition_lines()}
notify:
  to: admin@example.edu
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "roster.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def split_partitions() -> PartitionMap:
    return PartitionMap(
        {letter: ("roster-a-m" if letter <= "M" else "roster-n-z") for letter in string.ascii_uppercase}
    )


@pytest.fixture()
def layout() -> ColumnLayout:
    # Timestamp | Email | Full name | Student ID | Program
    return ColumnLayout(email=1, full_name=2, student_id=3, program_response=4)


@pytest.fixture()
def memory_store() -> MemoryStore:
    return MemoryStore()


class CapturingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def send(self, subject: str, body: str) -> None:
        self.sent.append((subject, body))


@pytest.fixture()
def notifier() -> CapturingNotifier:
    return CapturingNotifier()


@pytest.fixture()
def response_grid() -> list[list[object]]:
    return [
        ["Timestamp", "Email Address", "Full Name", "Student ID", "Program"],
        ["2024-08-19", "maria@example.edu", "Maria de la Cruz Santos", "1001", "I am in the EOPS program"],
        ["2024-08-19", "sean@example.edu", "Sean O'Brien", "1002", ""],
        ["2024-08-20", "", "No Email", "1003", "CARE"],
        ["2024-08-20", "jose@example.edu", "José Ávila", "1004", "none of the above"],
        ["2024-08-21", "amy@example.edu", "Amy Zhang", "1005", "TRIO / SSS"],
    ]


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()
