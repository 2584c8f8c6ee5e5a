class SheetError(Exception):
    pass


class UnknownSheet(SheetError):
    def __init__(self, spreadsheet_id: str, sheet_name: str):
        super().__init__(f"Unknown sheet: {spreadsheet_id} - {sheet_name}")
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name


class SchemaCorrupt(SheetError):
    """Header row of a sheet can not be read as a column schema."""


class SchemaMappingFailed(SheetError):
    """Written header does not map every requested field to its own column."""


class RowShapeMismatch(SheetError):
    def __init__(self, row_index: int, expected: int, actual: int):
        super().__init__(
            f"Mismatched numbers of values and fields in row {row_index}: "
            f"expected {expected}, got {actual}"
        )
        self.row_index = row_index
        self.expected = expected
        self.actual = actual


class UnknownSortColumn(SheetError):
    def __init__(self, column: str):
        super().__init__(f"Unknown sort column: {column}")
        self.column = column


class SnapshotCreateFailed(SheetError):
    pass


class SnapshotStateError(SheetError):
    pass


class GitLabError(Exception):
    def __init__(self, errors: list[dict]):
        messages = "; ".join(str(error.get("message", error)) for error in errors)
        super().__init__(f"GitLab GraphQL errors: {messages}")
        self.errors = errors


class DeadlinesError(Exception):
    pass
