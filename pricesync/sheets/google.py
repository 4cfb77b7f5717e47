"""
Google Sheets sink backed by gspread and a service account.

gspread is synchronous, so each call runs in a worker thread to keep the
event loop free for concurrent page fetches.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

import gspread

from pricesync.core.errors import SheetError
from pricesync.sheets.base import SheetSink, flatten_column
from pricesync.utils.logger import get_logger

log = get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class GoogleSheetSink(SheetSink):
    def __init__(
        self,
        spreadsheet_id: str,
        credentials_info: Optional[Dict[str, Any]] = None,
        client: Optional[gspread.Client] = None,
        value_input_option: str = "RAW",
    ):
        if client is None and credentials_info is None:
            raise ValueError("GoogleSheetSink needs either credentials_info or a gspread client")
        self.spreadsheet_id = spreadsheet_id
        self.value_input_option = value_input_option
        self._credentials_info = credentials_info
        self._client = client
        self._spreadsheet: Optional[gspread.Spreadsheet] = None

    def _open(self) -> gspread.Spreadsheet:
        if self._spreadsheet is None:
            if self._client is None:
                self._client = gspread.service_account_from_dict(self._credentials_info, scopes=SCOPES)
            self._spreadsheet = self._client.open_by_key(self.spreadsheet_id)
        return self._spreadsheet

    def _read(self, range_name: str) -> List[str]:
        response = self._open().values_get(range_name)
        return flatten_column(response.get("values", []))

    def _write(self, range_name: str, values: Sequence[Any]) -> None:
        rows = [["" if value is None else value] for value in values]
        self._open().values_update(
            range_name,
            params={"valueInputOption": self.value_input_option},
            body={"values": rows},
        )

    async def read_column(self, range_name: str) -> List[str]:
        try:
            values = await asyncio.to_thread(self._read, range_name)
        except Exception as e:
            raise SheetError(f"Failed to read {range_name}: {e}", range_name=range_name, operation="read") from e
        log.debug(f"Read {len(values)} rows from {range_name}")
        return values

    async def write_column(self, range_name: str, values: Sequence[Any]) -> None:
        try:
            await asyncio.to_thread(self._write, range_name, list(values))
        except Exception as e:
            raise SheetError(f"Failed to write {range_name}: {e}", range_name=range_name, operation="write") from e
        log.debug(f"Wrote {len(values)} rows to {range_name}")


__all__ = ["GoogleSheetSink", "SCOPES"]
