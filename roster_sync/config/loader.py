from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError as SchemaValidationError

from roster_sync.errors import ValidationError
from roster_sync.models.config_models import (
    ColumnLayout,
    ImageAsset,
    NotifyConfig,
    PartitionMap,
    RosterConfig,
    SmtpConfig,
    SourceConfig,
)
from roster_sync.services.columns import column_index

"""Config loader.

Responsibilities:
- Load YAML (default config/roster.yml)
- Validate against the bundled JSON schema (config_schema.json)
- Apply defaults (output sheet, column layout, workbook directory)
- Pull secrets from the environment (SMTP_PASSWORD)
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/roster.yml")

DEFAULT_OUTPUT_SHEET = "Consolidated"
# Form responses layout: Timestamp | Email | Full name | Student ID | Program
DEFAULT_COLUMNS = {
    "email": "B",
    "full_name": "C",
    "student_id": "D",
    "program_response": "E",
}


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: If the schema file is missing or unreadable, or the
            config data fails schema validation.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except SchemaValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _column_layout(raw: dict[str, str] | None) -> ColumnLayout:
    labels = {**DEFAULT_COLUMNS, **(raw or {})}
    try:
        # config labels are case-insensitive; CLI labels are not
        offsets = {name: column_index(label.upper()) - 1 for name, label in labels.items()}
    except ValidationError as e:
        raise ConfigError(f"invalid column in roster.columns: {e}") from e
    return ColumnLayout(**offsets)


def _notify_config(raw: dict[str, Any]) -> NotifyConfig:
    smtp_raw = raw.get("smtp")
    smtp = None
    if smtp_raw:
        smtp = SmtpConfig(
            host=smtp_raw["host"],
            port=smtp_raw.get("port", 587),
            username=smtp_raw.get("username") or os.getenv("SMTP_USERNAME"),
            password=os.getenv("SMTP_PASSWORD"),
            use_starttls=smtp_raw.get("use_starttls", True),
            use_ssl=smtp_raw.get("use_ssl", False),
            timeout_seconds=smtp_raw.get("timeout_seconds", 30.0),
        )
    return NotifyConfig(
        to_address=raw["to"],
        from_address=raw.get("from", "roster-sync@localhost"),
        smtp=smtp,
    )


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> RosterConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    roster = data["roster"]
    try:
        partitions = PartitionMap(roster["partitions"])
    except ValueError as e:
        raise ConfigError(f"invalid roster.partitions: {e}") from e

    image_raw = roster.get("image")
    image = None
    if image_raw:
        image = ImageAsset(
            asset_id=image_raw["asset_id"],
            width=image_raw.get("width", 120),
            height=image_raw.get("height", 120),
            alt_text=image_raw.get("alt_text", "logo"),
        )

    return RosterConfig(
        backend=data["backend"],
        source=SourceConfig(book=data["source"]["book"], sheet=data["source"]["sheet"]),
        output_sheet=(data.get("consolidate") or {}).get("output_sheet", DEFAULT_OUTPUT_SHEET),
        columns=_column_layout(roster.get("columns")),
        partitions=partitions,
        notify=_notify_config(data["notify"]),
        workbook_directory=data.get("workbook_directory", "./data"),
        image=image,
    )
