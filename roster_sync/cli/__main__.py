from __future__ import annotations

import argparse
import locale
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from roster_sync.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from roster_sync.errors import RosterError, StoreError, ValidationError
from roster_sync.excel.reader import SheetHeaderError, grid_to_frame
from roster_sync.logging.error_log import ErrorLogBuffer
from roster_sync.logging.init import log_summary, setup_logging
from roster_sync.models.config_models import RosterConfig
from roster_sync.notify.notifier import build_notifier
from roster_sync.services.columns import parse_row_spec
from roster_sync.services.consolidator import ColumnSelection, consolidate_sheet
from roster_sync.services.router import RosterRouter
from roster_sync.services.summary import render_consolidation_summary, render_routing_summary
from roster_sync.stores import MemoryStore, SpreadsheetStore, build_store

"""CLI entrypoint.

Sub-commands:
- consolidate: merge duplicate student rows into the output sheet
- route: provision / update per-student sheets for selected rows
- inspect: print the source header and first rows then exit

Column labels and row selections not given as options are prompted for.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

# strip "SUMMARY " since log_summary adds the label
_SUMMARY_PREFIX_LEN = len("SUMMARY ")


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so credentials and SMTP secrets come from the environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _init_collation(logger: logging.Logger) -> None:
    # sheet re-sorting compares titles with the user's collation
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.debug(f"locale collation unavailable, using code point order: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="roster-sync", description="Roster spreadsheet bookkeeping")
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="YAML config path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Read the real source sheet but keep every write in memory",
    )
    sub = p.add_subparsers(dest="command", required=True)

    c = sub.add_parser("consolidate", help="Merge duplicate student rows into one row per ID")
    c.add_argument("--id-column", help="Column holding the student ID (e.g. A)")
    c.add_argument("--grade-start", help="First grade column (e.g. F)")
    c.add_argument("--grade-end", help="Last grade column, inclusive (e.g. K)")
    c.add_argument("--output-sheet", help="Output sheet name (default from config)")

    r = sub.add_parser("route", help="Create or update per-student sheets")
    r.add_argument("--rows", help='Row numbers, e.g. "2,3,5-7"')

    i = sub.add_parser("inspect", help="Print the source header and first rows")
    i.add_argument("--limit", type=int, default=5, help="Number of data rows to show")
    return p.parse_args(argv)


def _prompt(value: str | None, question: str) -> str:
    if value is not None:
        return value
    return input(f"{question}: ").strip()


def _open_store(cfg: RosterConfig, dry_run: bool, logger: logging.Logger) -> SpreadsheetStore:
    store = build_store(cfg.backend, cfg.workbook_directory)
    if not dry_run:
        return store
    source = store.open(cfg.source.book).find_sheet(cfg.source.sheet)
    if source is None:
        raise StoreError(f"source sheet not found: {cfg.source.book}/{cfg.source.sheet}")
    memory = MemoryStore()
    memory.seed(cfg.source.book, cfg.source.sheet, source.read_values())
    logger.info("dry run: writes stay in memory")
    return memory


def _read_source(store: SpreadsheetStore, cfg: RosterConfig) -> list[list[object]]:
    sheet = store.open(cfg.source.book).find_sheet(cfg.source.sheet)
    if sheet is None:
        raise StoreError(f"source sheet not found: {cfg.source.book}/{cfg.source.sheet}")
    return sheet.read_values()


def _run_consolidate(args: argparse.Namespace, cfg: RosterConfig, store: SpreadsheetStore, logger: logging.Logger) -> int:
    try:
        selection = ColumnSelection.from_labels(
            _prompt(args.id_column, "Student ID column"),
            _prompt(args.grade_start, "First grade column"),
            _prompt(args.grade_end, "Last grade column"),
        )
    except ValidationError as e:
        logger.error(f"columns: {e}")
        return EXIT_FATAL

    output_sheet = args.output_sheet or cfg.output_sheet
    try:
        result = consolidate_sheet(store, cfg.source, selection, output_sheet)
    except (StoreError, ValidationError) as e:
        logger.error(f"consolidate: {e}")
        return EXIT_FATAL

    log_summary(render_consolidation_summary(result)[_SUMMARY_PREFIX_LEN:])
    return EXIT_SUCCESS_ALL


def _run_route(args: argparse.Namespace, cfg: RosterConfig, store: SpreadsheetStore, logger: logging.Logger) -> int:
    try:
        grid = _read_source(store, cfg)
    except StoreError as e:
        logger.error(f"route: {e}")
        return EXIT_FATAL

    rows = parse_row_spec(_prompt(args.rows, "Rows to process (e.g. 2,3,5-7)"), max_row=len(grid))
    if not rows:
        logger.error("route: no rows selected (row 1 is the header)")
        return EXIT_FATAL

    router = RosterRouter(store, cfg.partitions, build_notifier(cfg.notify), image=cfg.image)
    error_log = ErrorLogBuffer()
    result = router.route_rows(grid, rows, cfg.columns, sheet_name=cfg.source.sheet, error_log=error_log)

    try:
        path = error_log.flush()
    except OSError as e:
        logger.warning(f"could not write error log: {e}")
    else:
        if path is not None:
            logger.info(f"error details written to {path}")

    log_summary(render_routing_summary(result)[_SUMMARY_PREFIX_LEN:])
    return EXIT_PARTIAL_FAILURE if result.failures else EXIT_SUCCESS_ALL


def _run_inspect(args: argparse.Namespace, cfg: RosterConfig, store: SpreadsheetStore) -> int:
    try:
        grid = _read_source(store, cfg)
        frame = grid_to_frame(grid, cfg.source.sheet)
    except (StoreError, SheetHeaderError) as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"SHEET: {cfg.source.book}/{cfg.source.sheet} rows={len(frame)} cols={list(frame.columns)}")
    print(frame.head(args.limit).to_string(index=False))
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # only read sys.argv when no list was given (main([]) must not see pytest's args)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(Path(args.config))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    _init_collation(logger)

    try:
        store = _open_store(cfg, args.dry_run, logger)
    except RosterError as e:
        logger.error(f"store: {e}")
        return EXIT_FATAL

    if args.command == "consolidate":
        return _run_consolidate(args, cfg, store, logger)
    if args.command == "route":
        return _run_route(args, cfg, store, logger)
    return _run_inspect(args, cfg, store)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
