from __future__ import annotations

import json
from pathlib import Path

from roster_sync.logging.error_log import ErrorLogBuffer
from roster_sync.services.router import RosterRouter

"""Error log contract: one JSON object per line with a fixed key set."""

EXPECTED_KEYS = {"timestamp", "sheet", "row", "error_type", "message"}
KNOWN_TYPES = {"ROW_OUT_OF_RANGE", "MISSING_FIELD", "NO_PARTITION", "STORE_ERROR", "UNEXPECTED_ERROR"}


def test_routing_failures_follow_error_log_contract(
    tmp_path: Path, memory_store, split_partitions, notifier, layout, response_grid
):
    router = RosterRouter(memory_store, split_partitions, notifier)
    buf = ErrorLogBuffer(logs_dir=tmp_path)
    router.route_rows(response_grid, [4, 5, 40], layout, sheet_name="Responses", error_log=buf)

    path = buf.flush()
    entries = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [e["row"] for e in entries] == [4, 5, 40]
    for entry in entries:
        assert set(entry) == EXPECTED_KEYS
        assert entry["sheet"] == "Responses"
        assert entry["error_type"] in KNOWN_TYPES
        assert entry["timestamp"].endswith("Z")
    assert [e["error_type"] for e in entries] == ["MISSING_FIELD", "NO_PARTITION", "ROW_OUT_OF_RANGE"]
