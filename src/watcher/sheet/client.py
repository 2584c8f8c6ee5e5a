"""Google Sheets backend client.

This module wraps the handful of Sheets API primitives the table-update engine
relies on:

- read a literal cell range (``values_get``)
- write the header row (``values_update``)
- clear a sheet (``values_clear``)
- submit a batch of structural requests (``batch_update``), which the API
  applies all-or-nothing

Every call goes through a retry loop that rotates between the service account
keys found in the keys directory when the API reports a rate limit.

Example:
    >>> client = SheetsClient(Path("keys"))
    >>> client.find_sheet_id("1BxiMV...", "Reviews")
    1834592
"""

import logging
import random
import time
from pathlib import Path
from typing import Any

from gspread import service_account
from gspread.client import Client
from gspread.exceptions import APIError
from gspread.spreadsheet import Spreadsheet
from gspread.utils import ValueInputOption

from watcher.shared.exceptions import UnknownSheet

logger = logging.getLogger(__name__)


class SheetsClient:
    """Sheets API access with service account key rotation.

    Attributes:
        keys_dir: Directory containing Google Service Account JSON key files.
        keys: List of available key files.
        max_retries: Maximum number of attempts on rate limit errors.
    """

    def __init__(self, keys_dir: Path, max_retries: int = 3) -> None:
        """Initialize the client.

        Raises:
            FileNotFoundError: If the keys directory does not exist.
            ValueError: If no JSON key files are found or max_retries is below 1.
        """
        if max_retries < 1:
            raise ValueError(f"max_retries should be at least 1, got {max_retries}")

        self.keys_dir = keys_dir
        self.max_retries = max_retries
        self._gspread_client: Client | None = None
        self._current_key_index: int | None = None
        self._failed_keys: set[int] = set()
        self._spreadsheets: dict[str, Spreadsheet] = {}

        self.__load_keys()

    def __load_keys(self) -> None:
        if not self.keys_dir.exists():
            raise FileNotFoundError(f"Keys directory does not exist: {self.keys_dir}")

        self.keys = sorted(
            f for f in self.keys_dir.iterdir() if f.is_file() and f.suffix == ".json"
        )

        if not self.keys:
            raise ValueError(f"No JSON key files found in {self.keys_dir}")

        logger.info(f"Loaded {len(self.keys)} service account key(s)")

    def __select_random_key(self) -> None:
        """Select a random key from available keys, excluding failed ones."""
        available_indices = [
            i for i in range(len(self.keys)) if i not in self._failed_keys
        ]

        if not available_indices:
            logger.warning("All keys have failed, resetting failed keys list")
            self._failed_keys.clear()
            available_indices = list(range(len(self.keys)))

        self._current_key_index = random.choice(available_indices)

    def __get_gspread_client(self) -> Client:
        if self._gspread_client is None:
            self.__select_random_key()
            assert self._current_key_index is not None
            key_path = self.keys[self._current_key_index]
            logger.info(f"Using key: {key_path.name}")
            self._gspread_client = service_account(filename=str(key_path))
        return self._gspread_client

    def __rotate_key(self) -> None:
        if self._current_key_index is not None:
            self._failed_keys.add(self._current_key_index)
            logger.warning(
                f"Marking key {self.keys[self._current_key_index].name} as failed"
            )

        # Spreadsheets are bound to the client they were opened with
        self._gspread_client = None
        self._spreadsheets.clear()
        self.__get_gspread_client()

    def __is_rate_limit_error(self, error: APIError) -> bool:
        if getattr(error, "response", None) is None:
            return False

        # 429 = Too Many Requests, 403 can also indicate quota exceeded
        if error.response.status_code in (429, 403):
            return True

        error_message = str(error).lower()
        rate_limit_keywords = [
            "rate limit",
            "quota",
            "too many requests",
        ]
        return any(keyword in error_message for keyword in rate_limit_keywords)

    def __execute_with_retry(self, operation, *args, **kwargs):
        """Run operation, rotating keys with exponential backoff on rate limits.

        Raises:
            APIError: On a non rate limit error, or when retries are exhausted.
        """
        for attempt in range(self.max_retries):
            try:
                return operation(*args, **kwargs)
            except APIError as e:
                if not self.__is_rate_limit_error(e):
                    logger.error(f"API error (non-rate-limit): {e}")
                    raise

                logger.warning(
                    f"Rate limit error on attempt {attempt + 1}/{self.max_retries}: {e}"
                )
                if attempt == self.max_retries - 1:
                    logger.error("Max retries reached, all keys exhausted")
                    raise

                self.__rotate_key()
                wait_time = 2**attempt
                logger.info(f"Waiting {wait_time}s before retry...")
                time.sleep(wait_time)

    def spreadsheet(self, spreadsheet_id: str) -> Spreadsheet:
        if spreadsheet_id not in self._spreadsheets:
            self._spreadsheets[spreadsheet_id] = (
                self.__get_gspread_client().open_by_key(spreadsheet_id)
            )
        return self._spreadsheets[spreadsheet_id]

    def values_get(self, spreadsheet_id: str, a1_range: str) -> list[list[Any]]:
        """Return the literal values of a range, trailing empty rows omitted."""

        def _get():
            return self.spreadsheet(spreadsheet_id).values_get(a1_range)

        res = self.__execute_with_retry(_get)
        return res.get("values", [])

    def values_update(
        self, spreadsheet_id: str, a1_range: str, values: list[list[Any]]
    ) -> None:
        def _update():
            return self.spreadsheet(spreadsheet_id).values_update(
                a1_range,
                params={"valueInputOption": ValueInputOption.raw},
                body={"values": values},
            )

        self.__execute_with_retry(_update)

    def values_clear(self, spreadsheet_id: str, a1_range: str) -> None:
        def _clear():
            return self.spreadsheet(spreadsheet_id).values_clear(a1_range)

        self.__execute_with_retry(_clear)

    def batch_update(
        self, spreadsheet_id: str, requests: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """Submit structural requests as one batch.

        The API applies either every request of the batch or none of them.
        """

        def _batch():
            return self.spreadsheet(spreadsheet_id).batch_update(
                {"requests": requests}
            )

        return self.__execute_with_retry(_batch)

    def find_sheet_id(self, spreadsheet_id: str, sheet_name: str) -> int:
        """Resolve a sheet name to its backend sheet id.

        Raises:
            UnknownSheet: If no sheet has that name.
        """

        def _fetch():
            return self.spreadsheet(spreadsheet_id).fetch_sheet_metadata(
                params={"fields": "sheets.properties"}
            )

        metadata = self.__execute_with_retry(_fetch)

        for sheet in metadata.get("sheets", []):
            properties = sheet["properties"]
            if properties["title"] == sheet_name:
                return properties["sheetId"]

        raise UnknownSheet(spreadsheet_id, sheet_name)
