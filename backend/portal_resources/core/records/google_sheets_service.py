"""Google Sheets tabular store over the Sheets v4 REST API."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

from ...config import settings
from ..auth.google_token_manager import GoogleTokenManager
from ..errors import NotFoundError, UpstreamTransportFailure

logger = logging.getLogger("portal_resources.google_sheets")


def column_letter(col_index: int) -> str:
    """0-based column index to A1 letters (0 -> A, 25 -> Z, 26 -> AA)."""
    letters = ""
    n = col_index + 1
    while n > 0:
        n, remainder = divmod(n - 1, 26)
        letters = chr(65 + remainder) + letters
    return letters


def a1_range(table: str, row_index: Optional[int] = None, col_index: int = 0) -> str:
    """A1 notation for a whole tab, or for the cell at 0-based (row, col)."""
    quoted = "'" + table.replace("'", "''") + "'"
    if row_index is None:
        return quoted
    return f"{quoted}!{column_letter(col_index)}{row_index + 1}"


class GoogleSheetsService:
    """
    Spreadsheet-backed tabular store.

    Each table is a tab of one spreadsheet. Row indexes are 0-based positions
    in ``read_all_rows`` output and map to sheet row ``index + 1``. Values are
    written RAW so ids and timestamps are stored exactly as given.
    """

    def __init__(
        self,
        token_manager: GoogleTokenManager,
        spreadsheet_id: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        base_url: Optional[str] = None,
    ):
        self.token_manager = token_manager
        self.spreadsheet_id = spreadsheet_id or settings.spreadsheet_id
        self.base_url = (base_url or settings.sheets_base_url).rstrip("/")
        self._client = client or httpx.Client(timeout=settings.google_http_timeout)

    def close(self) -> None:
        self._client.close()

    @property
    def _spreadsheet_url(self) -> str:
        return f"{self.base_url}/spreadsheets/{self.spreadsheet_id}"

    def _values_url(self, a1: str, suffix: str = "") -> str:
        return f"{self._spreadsheet_url}/values/{quote(a1, safe='')}{suffix}"

    def _request(self, method: str, url: str, table: str, **kwargs) -> httpx.Response:
        if not self.spreadsheet_id:
            raise UpstreamTransportFailure("SPREADSHEET_ID is not configured")
        try:
            response = self._client.request(
                method, url, headers=self.token_manager.get_headers(self._client), **kwargs
            )
        except httpx.HTTPError as e:
            logger.error(f"Sheets request failed ({method} {table}): {e}")
            raise UpstreamTransportFailure(f"Sheets request failed: {e}") from e

        if response.status_code == 400 and "Unable to parse range" in response.text:
            raise NotFoundError(f"{table} sheet not found")
        if response.status_code == 404:
            raise NotFoundError(f"Spreadsheet {self.spreadsheet_id} not found")
        if response.status_code >= 300:
            logger.error(f"Sheets {method} on {table} failed: HTTP {response.status_code} {response.text}")
            raise UpstreamTransportFailure(
                f"Sheets request failed: HTTP {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        return response

    # =========================================================================
    # TABULAR STORE CONTRACT
    # =========================================================================

    def read_all_rows(self, table: str) -> List[List[Any]]:
        response = self._request(
            "GET",
            self._values_url(a1_range(table)),
            table,
            params={"valueRenderOption": "FORMATTED_VALUE", "majorDimension": "ROWS"},
        )
        return response.json().get("values", [])

    def append_row(self, table: str, row: Sequence[Any]) -> None:
        self._request(
            "POST",
            self._values_url(a1_range(table), ":append"),
            table,
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"values": [list(row)]},
        )

    def write_row(self, table: str, row_index: int, row: Sequence[Any]) -> None:
        self._request(
            "PUT",
            self._values_url(a1_range(table, row_index, 0)),
            table,
            params={"valueInputOption": "RAW"},
            json={"values": [list(row)]},
        )

    def write_cell(self, table: str, row_index: int, col_index: int, value: Any) -> None:
        self._request(
            "PUT",
            self._values_url(a1_range(table, row_index, col_index)),
            table,
            params={"valueInputOption": "RAW"},
            json={"values": [[value]]},
        )

    # =========================================================================
    # SETUP
    # =========================================================================

    def list_tables(self) -> List[str]:
        response = self._request(
            "GET", self._spreadsheet_url, "spreadsheet", params={"fields": "sheets.properties.title"}
        )
        sheets: List[Dict[str, Any]] = response.json().get("sheets", [])
        return [s.get("properties", {}).get("title", "") for s in sheets]

    def create_table(self, table: str, header: Sequence[Any]) -> None:
        """Add ``table`` as a new tab if missing, then write ``header`` when the tab is empty."""
        if table not in self.list_tables():
            self._request(
                "POST",
                f"{self._spreadsheet_url}:batchUpdate",
                table,
                json={"requests": [{"addSheet": {"properties": {"title": table}}}]},
            )
            logger.info(f"Created sheet '{table}'")
        if not self.read_all_rows(table):
            self.write_row(table, 0, header)
            logger.info(f"Wrote header to '{table}'")

    def has_table(self, table: str) -> bool:
        return table in self.list_tables()
