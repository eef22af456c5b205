from __future__ import annotations

import locale
import logging
import string
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from ..errors import MissingFieldError, NoPartitionError, StoreError
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ColumnLayout, ImageAsset, PartitionMap
from ..models.error_record import ErrorRecord
from ..models.processing_result import ItemOutcome, ItemStatus, RoutingResult
from ..models.student_record import StudentName, StudentRecord
from ..notify.notifier import Notifier
from ..stores.base import Book, SheetHandle, SpreadsheetStore, find_sheet_casefold
from .extraction import extract_student
from .membership import MEMBERSHIP_RULES, MembershipRule, classify_membership
from .naming import parse_full_name, student_sheet_title
from .progress import ProgressTracker
from .template import build_template, populate_sheet

"""Roster routing: one sheet per student, partitioned by last-name initial.

For each selected source row:
1. extract the StudentRecord
2. derive the sanitized "Last, First Middle" title
3. pick the partition book from the last name's initial
4. reuse the sheet whose title matches ignoring case, or add a new one
5. write the template in one batch
6. re-sort every sheet in the partition book and save

The find-or-create / write / re-sort sequence is not atomic and assumes a
single writer per partition.
"""

__all__ = [
    "SORT_MARKER",
    "RouteOutcome",
    "RosterRouter",
    "partition_letter",
    "sheet_sort_key",
    "sort_sheet_titles",
]

logger = logging.getLogger(__name__)

# Optional prefix that flags a sheet without affecting its sort position
SORT_MARKER = "* "


def partition_letter(last_name: str) -> str:
    """Uppercase initial of last_name, which must be an ASCII letter."""
    initial = (last_name or "")[:1]
    # checked before upper(): "ſ".upper() == "S"
    if len(initial) != 1 or initial not in string.ascii_letters:
        raise NoPartitionError(last_name)
    return initial.upper()


def sheet_sort_key(title: str) -> tuple[str, str]:
    stripped = title[len(SORT_MARKER):] if title.startswith(SORT_MARKER) else title
    return (locale.strxfrm(stripped.casefold()), title)


def sort_sheet_titles(titles: Sequence[str]) -> list[str]:
    """Total order of all titles: marker-insensitive, case-insensitive, locale-aware."""
    return sorted(titles, key=sheet_sort_key)


@dataclass(frozen=True)
class RouteOutcome:
    title: str
    partition: str
    created: bool


class RosterRouter:
    """Routes student records into per-student sheets of partition books."""

    def __init__(
        self,
        store: SpreadsheetStore,
        partitions: PartitionMap,
        notifier: Notifier,
        image: ImageAsset | None = None,
        rules: Sequence[MembershipRule] = MEMBERSHIP_RULES,
    ) -> None:
        self.store = store
        self.partitions = partitions
        self.notifier = notifier
        self.image = image
        self.rules = tuple(rules)

    def _notify_no_partition(self, record: StudentRecord, name: StudentName) -> None:
        subject = f"Roster: no partition for {name.display_key}"
        body = (
            f"Could not route row {record.row_number}: last name {name.last!r} "
            f"does not start with a letter A-Z.\n"
            f"Student ID: {record.student_id}\n"
            f"Email: {record.email}\n"
            f"Full name: {record.full_name}\n"
            "No sheet was created; please add it manually."
        )
        try:
            self.notifier.send(subject, body)
        except Exception:  # notifications never abort routing
            logger.exception(f"notification failed for row {record.row_number}")

    def find_or_create(self, book: Book, title: str) -> tuple[SheetHandle, bool]:
        existing = find_sheet_casefold(book, title)
        if existing is not None:
            return existing, False
        return book.add_sheet(title), True

    def resort(self, book: Book) -> list[str]:
        ordered = sort_sheet_titles([s.title for s in book.sheets()])
        book.reorder(ordered)
        return ordered

    def route(self, record: StudentRecord) -> RouteOutcome:
        """Provision or update the sheet for one student.

        Raises:
            NoPartitionError: last name initial is not A-Z (after notifying).
        """
        name = parse_full_name(record.full_name)
        try:
            letter = partition_letter(name.last)
        except NoPartitionError:
            self._notify_no_partition(record, name)
            raise
        title = student_sheet_title(name)
        partition = self.partitions[letter]

        book = self.store.open(partition)
        sheet, created = self.find_or_create(book, title)
        membership = classify_membership(record.program_response, self.rules)
        block = build_template(record, membership, self.image)
        try:
            populate_sheet(sheet, block)
        except Exception:
            logger.exception(f"template population failed for {sheet.title!r} in {partition}")
            raise
        self.resort(book)
        book.save()

        action = "created" if created else "updated"
        logger.info(f"row {record.row_number}: {action} {sheet.title!r} in partition {letter} ({membership})")
        return RouteOutcome(title=sheet.title, partition=partition, created=created)

    def route_rows(
        self,
        grid: list[list[Any]],
        row_numbers: Sequence[int],
        layout: ColumnLayout,
        sheet_name: str = "",
        error_log: ErrorLogBuffer | None = None,
    ) -> RoutingResult:
        """Route each selected row, isolating failures per row.

        Row numbers are 1-based sheet rows (row 1 is the header).
        """
        start_time = datetime.now(UTC)
        outcomes: list[ItemOutcome] = []

        def fail(row_number: int, status: ItemStatus, error_type: str, message: str) -> None:
            outcomes.append(ItemOutcome(row_number, status, error_type=error_type, message=message))
            if error_log is not None:
                error_log.append(ErrorRecord.create(sheet_name, row_number, error_type, message))

        with ProgressTracker(len(row_numbers), description="Routing rows", unit="row") as progress:
            for row_number in row_numbers:
                progress.start_item(f"row {row_number}")
                if row_number < 1 or row_number > len(grid):
                    logger.warning(f"row {row_number}: beyond the last row ({len(grid)})")
                    fail(row_number, ItemStatus.SKIPPED, "ROW_OUT_OF_RANGE", f"no row {row_number}")
                    progress.finish_item(success=False)
                    continue
                try:
                    record = extract_student(grid[row_number - 1], row_number, layout)
                    outcome = self.route(record)
                except MissingFieldError as e:
                    logger.warning(str(e))
                    fail(row_number, ItemStatus.SKIPPED, "MISSING_FIELD", str(e))
                except NoPartitionError as e:
                    logger.warning(f"row {row_number}: {e}")
                    fail(row_number, ItemStatus.SKIPPED, "NO_PARTITION", str(e))
                except StoreError as e:
                    logger.error(f"row {row_number}: {e}")
                    fail(row_number, ItemStatus.FAILED, "STORE_ERROR", str(e))
                except Exception as e:
                    logger.error(f"row {row_number}: unexpected error: {e}")
                    fail(row_number, ItemStatus.FAILED, "UNEXPECTED_ERROR", f"{type(e).__name__}: {e}")
                else:
                    outcomes.append(
                        ItemOutcome(
                            row_number,
                            ItemStatus.ROUTED,
                            title=outcome.title,
                            partition=outcome.partition,
                            created=outcome.created,
                        )
                    )
                progress.finish_item(success=bool(outcomes) and outcomes[-1].ok)
                progress.set_postfix(
                    routed=sum(1 for o in outcomes if o.ok),
                    failed=sum(1 for o in outcomes if not o.ok),
                )

        return RoutingResult(outcomes=outcomes, start_time=start_time, end_time=datetime.now(UTC))
