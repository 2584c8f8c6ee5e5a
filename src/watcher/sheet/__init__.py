from .cells import (
    DEFAULT_PALETTE,
    Cell,
    CellStatus,
    Color,
    Palette,
    encode_cell,
    parse_hex_color,
)
from .client import SheetsClient
from .queries import (
    DeleteQuery,
    InsertQuery,
    SortQuery,
    execute_delete,
    execute_insert,
    execute_sort,
)
from .schema import ColumnSchema, ensure_schema, resolve_schema
from .snapshot import Snapshot, SnapshotState, begin_snapshot, run_with_snapshot

__all__ = [
    # Cells
    "DEFAULT_PALETTE",
    "Cell",
    "CellStatus",
    "Color",
    "Palette",
    "encode_cell",
    "parse_hex_color",
    # Backend
    "SheetsClient",
    # Schema
    "ColumnSchema",
    "ensure_schema",
    "resolve_schema",
    # Queries
    "DeleteQuery",
    "InsertQuery",
    "SortQuery",
    "execute_delete",
    "execute_insert",
    "execute_sort",
    # Snapshots
    "Snapshot",
    "SnapshotState",
    "begin_snapshot",
    "run_with_snapshot",
]
