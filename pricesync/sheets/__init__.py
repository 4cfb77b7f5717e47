"""Spreadsheet sinks."""

from .base import SheetSink, flatten_column
from .memory import MemorySheetSink

__all__ = ["SheetSink", "flatten_column", "MemorySheetSink"]
