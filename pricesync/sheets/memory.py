"""In-memory sink used for dry runs."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from pricesync.sheets.base import SheetSink


class MemorySheetSink(SheetSink):
    def __init__(self, columns: Optional[Dict[str, Sequence[Any]]] = None):
        self.columns: Dict[str, List[Any]] = {name: list(values) for name, values in (columns or {}).items()}
        self.writes: List[tuple] = []

    async def read_column(self, range_name: str) -> List[str]:
        return ["" if value is None else str(value) for value in self.columns.get(range_name, [])]

    async def write_column(self, range_name: str, values: Sequence[Any]) -> None:
        self.columns[range_name] = list(values)
        self.writes.append((range_name, list(values)))
