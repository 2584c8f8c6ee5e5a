"""
Shared test fixtures and configuration for pytest.

Provides an in-memory stand-in for a gspread Spreadsheet that understands the
values and batchUpdate calls used by the sheet engine. Batches are applied to
a copy and swapped in only when every request succeeds, like the real API.
"""

import copy
import sys
from pathlib import Path
from typing import Any
from unittest.mock import Mock, patch

import pytest
from gspread.exceptions import APIError

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from watcher.sheet.client import SheetsClient  # noqa: E402


def make_api_error(code: int = 400, message: str = "Invalid requests") -> APIError:
    response = Mock()
    response.status_code = code
    response.text = message
    response.json.return_value = {
        "error": {"code": code, "message": message, "status": "INVALID_ARGUMENT"}
    }
    return APIError(response)


def cell_text(cell: dict | None) -> str:
    if not cell:
        return ""
    value = cell.get("userEnteredValue") or {}
    return value.get("formulaValue") or value.get("stringValue") or ""


def text_cell(text: str) -> dict:
    return {"userEnteredValue": {"stringValue": text}, "userEnteredFormat": {}}


class FakeSheet:
    def __init__(self, sheet_id: int, title: str, rows: list[list[dict]] | None = None):
        self.sheet_id = sheet_id
        self.title = title
        self.hidden = False
        self.rows: list[list[dict]] = rows or []

    def values(self) -> list[list[str]]:
        return [[cell_text(cell) for cell in row] for row in self.rows]


class FakeSpreadsheet:
    """In-memory spreadsheet with the gspread Spreadsheet call surface."""

    def __init__(self, spreadsheet_id: str = "spreadsheet"):
        self.id = spreadsheet_id
        self.sheets: dict[int, FakeSheet] = {}
        self.calls: list[tuple[str, Any]] = []
        self.fail_on: set[str] = set()

    # Helpers

    def add_sheet(self, sheet_id: int, title: str, values: list[list[str]] | None = None) -> FakeSheet:
        rows = [[text_cell(v) for v in row] for row in (values or [])]
        self.sheets[sheet_id] = FakeSheet(sheet_id, title, rows)
        return self.sheets[sheet_id]

    def by_title(self, title: str) -> FakeSheet:
        for sheet in self.sheets.values():
            if sheet.title == title:
                return sheet
        raise make_api_error(400, f"Unable to parse range: {title}")

    def write_calls(self) -> list[tuple[str, Any]]:
        return [c for c in self.calls if c[0] != "values_get" and c[0] != "fetch_sheet_metadata"]

    @staticmethod
    def _parse_range(a1_range: str) -> tuple[str, str | None]:
        name, _, cells = a1_range.partition("!")
        if name.startswith("'") and name.endswith("'"):
            name = name[1:-1].replace("''", "'")
        return name, cells or None

    # gspread Spreadsheet API

    def fetch_sheet_metadata(self, params=None) -> dict:
        self.calls.append(("fetch_sheet_metadata", params))
        return {
            "sheets": [
                {"properties": {"sheetId": s.sheet_id, "title": s.title, "hidden": s.hidden}}
                for s in self.sheets.values()
            ]
        }

    def values_get(self, range, params=None) -> dict:
        self.calls.append(("values_get", range))
        name, cells = self._parse_range(range)
        values = self.by_title(name).values()
        if cells == "1:1":
            values = values[:1]

        trimmed = []
        for row in values:
            while row and row[-1] == "":
                row = row[:-1]
            trimmed.append(row)
        while trimmed and not trimmed[-1]:
            trimmed.pop()

        res = {"range": range, "majorDimension": "ROWS"}
        if trimmed:
            res["values"] = trimmed
        return res

    def values_update(self, range, params=None, body=None) -> dict:
        self.calls.append(("values_update", range))
        name, cells = self._parse_range(range)
        sheet = self.by_title(name)
        start = int(cells.split(":")[0]) - 1 if cells else 0
        for offset, row in enumerate(body["values"]):
            while len(sheet.rows) <= start + offset:
                sheet.rows.append([])
            sheet.rows[start + offset] = [text_cell(v) for v in row]
        return {"updatedRange": range}

    def values_clear(self, range) -> dict:
        self.calls.append(("values_clear", range))
        name, _ = self._parse_range(range)
        self.by_title(name).rows = []
        return {"clearedRange": range}

    def batch_update(self, body) -> dict:
        requests = body["requests"]
        self.calls.append(("batch_update", [next(iter(r)) for r in requests]))

        sheets = copy.deepcopy(self.sheets)
        for request in requests:
            kind, payload = next(iter(request.items()))
            if kind in self.fail_on:
                raise make_api_error(500, f"Injected failure on {kind}")
            getattr(self, f"_apply_{kind}")(sheets, payload)

        self.sheets = sheets
        return {"spreadsheetId": self.id, "replies": [{} for _ in requests]}

    # batchUpdate requests

    @staticmethod
    def _sheet(sheets: dict[int, FakeSheet], sheet_id: int) -> FakeSheet:
        if sheet_id not in sheets:
            raise make_api_error(400, f"No grid with id: {sheet_id}")
        return sheets[sheet_id]

    def _apply_duplicateSheet(self, sheets, payload):
        source = self._sheet(sheets, payload["sourceSheetId"])
        new_id = payload["newSheetId"]
        if new_id in sheets or any(s.title == payload["newSheetName"] for s in sheets.values()):
            raise make_api_error(400, "A sheet with this id or name already exists")
        sheets[new_id] = FakeSheet(new_id, payload["newSheetName"], copy.deepcopy(source.rows))

    def _apply_updateSheetProperties(self, sheets, payload):
        properties = payload["properties"]
        sheet = self._sheet(sheets, properties["sheetId"])
        if "hidden" in payload["fields"]:
            sheet.hidden = properties["hidden"]

    def _apply_deleteRange(self, sheets, payload):
        self._sheet(sheets, payload["range"]["sheetId"]).rows = []

    def _apply_copyPaste(self, sheets, payload):
        source = self._sheet(sheets, payload["source"]["sheetId"])
        destination = self._sheet(sheets, payload["destination"]["sheetId"])
        destination.rows = copy.deepcopy(source.rows)

    def _apply_deleteSheet(self, sheets, payload):
        self._sheet(sheets, payload["sheetId"])
        del sheets[payload["sheetId"]]

    def _apply_appendCells(self, sheets, payload):
        sheet = self._sheet(sheets, payload["sheetId"])
        while sheet.rows and not any(cell_text(c) for c in sheet.rows[-1]):
            sheet.rows.pop()
        for row in payload["rows"]:
            sheet.rows.append(copy.deepcopy(row["values"]))

    def _apply_sortRange(self, sheets, payload):
        grid = payload["range"]
        sheet = self._sheet(sheets, grid["sheetId"])
        start = grid.get("startRowIndex", 0)

        def key(row):
            return tuple(
                cell_text(row[spec["dimensionIndex"]]) if spec["dimensionIndex"] < len(row) else ""
                for spec in payload["sortSpecs"]
            )

        sheet.rows = sheet.rows[:start] + sorted(sheet.rows[start:], key=key)


class FakeGspreadClient:
    def __init__(self, spreadsheets: dict[str, FakeSpreadsheet]):
        self.spreadsheets = spreadsheets

    def open_by_key(self, key: str) -> FakeSpreadsheet:
        if key not in self.spreadsheets:
            raise make_api_error(404, f"Requested entity was not found: {key}")
        return self.spreadsheets[key]


@pytest.fixture
def keys_dir(tmp_path) -> Path:
    keys = tmp_path / "keys"
    keys.mkdir()
    (keys / "key-1.json").write_text("{}")
    return keys


@pytest.fixture
def spreadsheet() -> FakeSpreadsheet:
    return FakeSpreadsheet("spreadsheet")


@pytest.fixture
def client(keys_dir, spreadsheet):
    gspread_client = FakeGspreadClient({spreadsheet.id: spreadsheet})
    with patch("watcher.sheet.client.service_account", return_value=gspread_client):
        yield SheetsClient(keys_dir)
