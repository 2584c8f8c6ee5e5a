"""Atomic replacement of a sheet through a hidden shadow copy.

Google Sheets has no transactions, but it applies a ``batchUpdate`` either
completely or not at all. A snapshot duplicates the target sheet into a hidden
sheet, every insert/delete/sort goes to that copy, and the commit swaps the
copy into place with a single batch:

1. delete all rows of the original sheet
2. copy the shadow sheet over the original
3. delete the shadow sheet

Readers of the original sheet only ever see the old content or the new one.
A rollback deletes the shadow sheet and leaves the original untouched.

Example:
    >>> def refresh(snapshot: Snapshot) -> None:
    ...     snapshot.delete()
    ...     snapshot.insert(InsertQuery().into("A").values("v"))
    >>> run_with_snapshot(client, "1BxiMV...", "Reviews", refresh)
"""

import logging
from enum import Enum
from typing import Any, Callable, TypeVar

from watcher.shared.exceptions import SnapshotCreateFailed, SnapshotStateError
from watcher.shared.utils import random_sheet_id, random_sheet_name

from .cells import DEFAULT_PALETTE, Palette
from .client import SheetsClient
from .queries import (
    DeleteQuery,
    InsertQuery,
    SortQuery,
    execute_delete,
    execute_insert,
    execute_sort,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SnapshotState(str, Enum):
    OPEN = "open"
    COMMITTING = "committing"
    COMMITTED = "committed"
    ROLLING_BACK = "rolling_back"
    ROLLED_BACK = "rolled_back"


class Snapshot:
    """Hidden working copy of a sheet, owned by one transaction.

    Attributes:
        spreadsheet_id: Spreadsheet holding both sheets.
        original_sheet_name: Name of the sheet being replaced.
        original_sheet_id: Backend id of the sheet being replaced.
        temp_sheet_name: Name of the hidden shadow sheet.
        temp_sheet_id: Backend id of the hidden shadow sheet.
        state: Current lifecycle state.
    """

    def __init__(
        self,
        client: SheetsClient,
        spreadsheet_id: str,
        original_sheet_name: str,
        original_sheet_id: int,
        temp_sheet_name: str,
        temp_sheet_id: int,
        palette: Palette = DEFAULT_PALETTE,
    ) -> None:
        self.client = client
        self.spreadsheet_id = spreadsheet_id
        self.original_sheet_name = original_sheet_name
        self.original_sheet_id = original_sheet_id
        self.temp_sheet_name = temp_sheet_name
        self.temp_sheet_id = temp_sheet_id
        self.palette = palette
        self.state = SnapshotState.OPEN

    def __repr__(self) -> str:
        return (
            f"Snapshot({self.original_sheet_name!r} -> {self.temp_sheet_name!r}, "
            f"{self.state.value})"
        )

    def __ensure_open(self) -> None:
        if self.state is not SnapshotState.OPEN:
            raise SnapshotStateError(
                f"Snapshot of {self.original_sheet_name} is {self.state.value}"
            )

    def __batch(self, requests: list[dict[str, Any]]) -> None:
        self.client.batch_update(self.spreadsheet_id, requests)

    def insert(self, query: InsertQuery) -> None:
        self.__ensure_open()
        execute_insert(
            self.client,
            self.spreadsheet_id,
            self.temp_sheet_name,
            query,
            sheet_id=self.temp_sheet_id,
            palette=self.palette,
        )

    def delete(self, query: DeleteQuery | None = None) -> None:
        self.__ensure_open()
        execute_delete(self.client, self.spreadsheet_id, self.temp_sheet_name, query)

    def sort(self, query: SortQuery) -> None:
        self.__ensure_open()
        execute_sort(
            self.client,
            self.spreadsheet_id,
            self.temp_sheet_name,
            query,
            sheet_id=self.temp_sheet_id,
        )

    def commit(self) -> None:
        """Swap the shadow sheet into the original in one batch.

        On failure the snapshot stays in COMMITTING and the shadow sheet is
        left as the failed batch left it.
        """
        self.__ensure_open()
        self.state = SnapshotState.COMMITTING
        self.__batch(
            [
                {
                    "deleteRange": {
                        "range": {"sheetId": self.original_sheet_id},
                        "shiftDimension": "ROWS",
                    }
                },
                {
                    "copyPaste": {
                        "source": {"sheetId": self.temp_sheet_id},
                        "destination": {"sheetId": self.original_sheet_id},
                        "pasteType": "PASTE_NORMAL",
                    }
                },
                {"deleteSheet": {"sheetId": self.temp_sheet_id}},
            ]
        )
        self.state = SnapshotState.COMMITTED
        logger.debug(f"Committed snapshot of {self.original_sheet_name}")

    def rollback(self) -> None:
        """Delete the shadow sheet, leaving the original untouched."""
        self.__ensure_open()
        self.state = SnapshotState.ROLLING_BACK
        self.__batch([{"deleteSheet": {"sheetId": self.temp_sheet_id}}])
        self.state = SnapshotState.ROLLED_BACK
        logger.debug(f"Rolled back snapshot of {self.original_sheet_name}")


def begin_snapshot(
    client: SheetsClient,
    spreadsheet_id: str,
    sheet_name: str,
    palette: Palette = DEFAULT_PALETTE,
) -> Snapshot:
    """Duplicate a sheet into a new hidden sheet.

    Raises:
        UnknownSheet: If the sheet does not exist. Nothing is created.
        SnapshotCreateFailed: If the duplicate batch is rejected.
    """
    original_sheet_id = client.find_sheet_id(spreadsheet_id, sheet_name)

    snapshot = Snapshot(
        client=client,
        spreadsheet_id=spreadsheet_id,
        original_sheet_name=sheet_name,
        original_sheet_id=original_sheet_id,
        temp_sheet_name=random_sheet_name(),
        temp_sheet_id=random_sheet_id(),
        palette=palette,
    )

    try:
        client.batch_update(
            spreadsheet_id,
            [
                {
                    "duplicateSheet": {
                        "sourceSheetId": snapshot.original_sheet_id,
                        "newSheetId": snapshot.temp_sheet_id,
                        "newSheetName": snapshot.temp_sheet_name,
                    }
                },
                {
                    "updateSheetProperties": {
                        "properties": {
                            "sheetId": snapshot.temp_sheet_id,
                            "hidden": True,
                        },
                        "fields": "hidden",
                    }
                },
            ],
        )
    except Exception as e:
        logger.error(f"Failed to create snapshot of {sheet_name}: {e}")
        raise SnapshotCreateFailed(
            f"Failed to create snapshot of {sheet_name}: {e}"
        ) from e

    logger.debug(f"Created snapshot {snapshot.temp_sheet_name} of {sheet_name}")
    return snapshot


def run_with_snapshot(
    client: SheetsClient,
    spreadsheet_id: str,
    sheet_name: str,
    body: Callable[[Snapshot], T],
    palette: Palette = DEFAULT_PALETTE,
) -> T:
    """Run body against a snapshot of the sheet, then commit or roll back.

    If body raises, the snapshot is rolled back and the exception from body is
    re-raised; a failing rollback is only logged. If body returns, the
    snapshot is committed and commit errors propagate.
    """
    snapshot = begin_snapshot(client, spreadsheet_id, sheet_name, palette)

    try:
        result = body(snapshot)
    except Exception:
        try:
            snapshot.rollback()
        except Exception:
            logger.exception(
                f"Rollback failed, shadow sheet {snapshot.temp_sheet_name} may remain"
            )
        raise

    try:
        snapshot.commit()
    except Exception:
        logger.error(
            f"Commit of {sheet_name} failed, shadow sheet "
            f"{snapshot.temp_sheet_name} may remain"
        )
        raise

    return result
