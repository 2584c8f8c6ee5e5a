"""Insert, delete and sort operations on a single sheet.

A query is a plain pydantic model describing the intent; the ``execute_*``
functions apply it to a sheet. Each execution is at most one write to the
backend, so a query is either fully applied or not applied at all.

Example:
    >>> query = InsertQuery().into("Student", "Task").values("Ivan Ivanov", "1/hello")
    >>> execute_insert(client, "1BxiMV...", "Merge Requests", query)
    >>> execute_sort(client, "1BxiMV...", "Merge Requests", SortQuery(by=["Student"]))
"""

import logging
from typing import Any, Self

from gspread.utils import absolute_range_name
from pydantic import BaseModel, Field

from watcher.shared.exceptions import RowShapeMismatch, UnknownSortColumn

from .cells import DEFAULT_PALETTE, Palette, encode_cell
from .client import SheetsClient
from .schema import ensure_schema, resolve_schema

logger = logging.getLogger(__name__)


class InsertQuery(BaseModel):
    fields: list[str] = Field(default_factory=list)
    rows: list[list[Any]] = Field(default_factory=list)

    def into(self, *fields: str) -> Self:
        self.fields = list(fields)
        return self

    def values(self, *values: Any) -> Self:
        self.rows.append(list(values))
        return self

    def extend(self, rows: list[list[Any]]) -> Self:
        self.rows.extend(list(row) for row in rows)
        return self


class DeleteQuery(BaseModel):
    pass


class SortQuery(BaseModel):
    by: list[str] = Field(default_factory=list)


def _sheet_id(
    client: SheetsClient, spreadsheet_id: str, sheet_name: str, sheet_id: int | None
) -> int:
    if sheet_id is not None:
        return sheet_id
    return client.find_sheet_id(spreadsheet_id, sheet_name)


def execute_insert(
    client: SheetsClient,
    spreadsheet_id: str,
    sheet_name: str,
    query: InsertQuery,
    sheet_id: int | None = None,
    palette: Palette = DEFAULT_PALETTE,
) -> None:
    """Append the query rows to the sheet in one request.

    Rows are validated before anything is sent; the header row is extended
    with unknown fields, then every row is spread over the full schema width.

    Raises:
        RowShapeMismatch: If a row length differs from the number of fields.
        UnknownSheet: If sheet_id is not given and the sheet does not exist.
        SchemaCorrupt, SchemaMappingFailed: On header problems.
        APIError: If the append request fails.
    """
    if not query.rows:
        return

    for i, row in enumerate(query.rows):
        if len(row) != len(query.fields):
            raise RowShapeMismatch(i, len(query.fields), len(row))

    if not query.fields:
        return

    target_sheet_id = _sheet_id(client, spreadsheet_id, sheet_name, sheet_id)
    schema = ensure_schema(client, spreadsheet_id, sheet_name, query.fields)

    rows = []
    for row in query.rows:
        cells = [encode_cell(None, palette) for _ in range(schema.width)]
        for field, value in zip(query.fields, row):
            cells[schema[field]] = encode_cell(value, palette)
        rows.append({"values": cells})

    try:
        client.batch_update(
            spreadsheet_id,
            [
                {
                    "appendCells": {
                        "sheetId": target_sheet_id,
                        "rows": rows,
                        "fields": "*",
                    }
                }
            ],
        )
    except Exception:
        logger.exception(f"Failed to append {len(rows)} rows to {sheet_name}")
        raise

    logger.debug(f"Appended {len(rows)} rows to {sheet_name}")


def execute_delete(
    client: SheetsClient,
    spreadsheet_id: str,
    sheet_name: str,
    query: DeleteQuery | None = None,
) -> None:
    """Clear every value of the sheet, header row included."""
    client.values_clear(spreadsheet_id, absolute_range_name(sheet_name))
    logger.debug(f"Cleared {sheet_name}")


def execute_sort(
    client: SheetsClient,
    spreadsheet_id: str,
    sheet_name: str,
    query: SortQuery,
    sheet_id: int | None = None,
) -> None:
    """Sort data rows ascending by the query columns, header row excluded.

    Raises:
        UnknownSortColumn: If a column is not part of the schema.
        UnknownSheet: If sheet_id is not given and the sheet does not exist.
    """
    if not query.by:
        return

    target_sheet_id = _sheet_id(client, spreadsheet_id, sheet_name, sheet_id)
    schema = resolve_schema(client, spreadsheet_id, sheet_name)

    specs = []
    for column in query.by:
        if schema is None or column not in schema:
            raise UnknownSortColumn(column)
        specs.append({"dimensionIndex": schema[column], "sortOrder": "ASCENDING"})

    client.batch_update(
        spreadsheet_id,
        [
            {
                "sortRange": {
                    "range": {"sheetId": target_sheet_id, "startRowIndex": 1},
                    "sortSpecs": specs,
                }
            }
        ],
    )
    logger.debug(f"Sorted {sheet_name} by {query.by}")
