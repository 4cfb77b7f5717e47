"""
Spreadsheet sink contract: the sheet is both where symbols come from and
where prices and timestamps go. Ranges are A1 notation strings such as
``Sheet1!B2:B``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Sequence


def flatten_column(rows: Sequence[Sequence[Any]]) -> List[str]:
    """First cell of each row as a string; blank rows stay as ``""`` so rows keep their position."""
    return ["" if not row or row[0] is None else str(row[0]) for row in rows]


class SheetSink(ABC):
    @abstractmethod
    async def read_column(self, range_name: str) -> List[str]:
        """Return the cell values of a single-column range, top to bottom."""
        ...

    @abstractmethod
    async def write_column(self, range_name: str, values: Sequence[Any]) -> None:
        """Overwrite a single-column range starting at its first row with ``values``."""
        ...
