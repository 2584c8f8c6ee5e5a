"""Column schema stored as the header row of a sheet.

Column indices are append-only: once a name is assigned an index it keeps it
for the lifetime of the sheet, so rows written earlier stay aligned when new
columns are added.
"""

import logging
from typing import Iterable

from gspread.utils import absolute_range_name

from watcher.shared.exceptions import SchemaCorrupt, SchemaMappingFailed

from .client import SheetsClient

logger = logging.getLogger(__name__)

HEADER_RANGE = "1:1"


class ColumnSchema:
    """Name to column index mapping of a sheet."""

    def __init__(self) -> None:
        self.width = 0
        self.column_to_index: dict[str, int] = {}

    @classmethod
    def from_fields(cls, fields: Iterable[str]) -> "ColumnSchema":
        schema = cls()
        for field in fields:
            schema.add(field)
        return schema

    @classmethod
    def from_header(cls, header: list) -> "ColumnSchema":
        """Build a schema from the literal header row.

        Empty header cells keep their position but are not addressable.

        Raises:
            SchemaCorrupt: If a cell is not a string or a name is duplicated.
        """
        schema = cls()
        for index, name in enumerate(header):
            if not isinstance(name, str):
                raise SchemaCorrupt(f"Header values should be strings, got {name!r}")
            if name in schema.column_to_index:
                raise SchemaCorrupt(f"Duplicated header column: {name}")
            if name:
                schema.column_to_index[name] = index
        schema.width = len(header)
        return schema

    def __contains__(self, field: str) -> bool:
        return field in self.column_to_index

    def __getitem__(self, field: str) -> int:
        return self.column_to_index[field]

    def add(self, field: str) -> int:
        if field in self.column_to_index:
            return self.column_to_index[field]
        index = self.width
        self.width += 1
        self.column_to_index[field] = index
        return index

    def header(self) -> list[str]:
        row = [""] * self.width
        for field, index in self.column_to_index.items():
            row[index] = field
        return row


def resolve_schema(
    client: SheetsClient, spreadsheet_id: str, sheet_name: str
) -> ColumnSchema | None:
    """Read the header row of a sheet.

    Returns:
        The schema, or None when the first row is empty.

    Raises:
        SchemaCorrupt: If the header can not be parsed.
    """
    values = client.values_get(
        spreadsheet_id, absolute_range_name(sheet_name, HEADER_RANGE)
    )

    if len(values) == 0 or len(values[0]) == 0:
        return None

    if len(values) != 1:
        logger.error(f"Failed to get first row of {sheet_name}")
        raise SchemaCorrupt(f"Expected exactly one header row, not {len(values)}")

    return ColumnSchema.from_header(values[0])


def write_schema(
    client: SheetsClient, spreadsheet_id: str, sheet_name: str, schema: ColumnSchema
) -> None:
    client.values_update(
        spreadsheet_id,
        absolute_range_name(sheet_name, HEADER_RANGE),
        [schema.header()],
    )


def ensure_schema(
    client: SheetsClient, spreadsheet_id: str, sheet_name: str, fields: list[str]
) -> ColumnSchema:
    """Make sure every field has a column, appending missing ones at the end.

    Raises:
        SchemaCorrupt: If the existing header can not be parsed.
        SchemaMappingFailed: If a fresh header does not give every field its
            own column.
    """
    schema = resolve_schema(client, spreadsheet_id, sheet_name)

    if schema is None:
        schema = ColumnSchema.from_fields(fields)
        if schema.width != len(fields):
            raise SchemaMappingFailed(
                f"Failed to map columns: {len(fields)} fields, {schema.width} columns"
            )
        write_schema(client, spreadsheet_id, sheet_name, schema)
        logger.info(f"Created schema of {sheet_name}: {schema.header()}")
        return schema

    missing = [field for field in dict.fromkeys(fields) if field not in schema]
    if missing:
        for field in missing:
            schema.add(field)
        write_schema(client, spreadsheet_id, sheet_name, schema)
        logger.info(f"Added columns {missing} to schema of {sheet_name}")

    return schema
