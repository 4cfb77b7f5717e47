"""Core processing modules exposed for external consumers."""

from .errors import ConfigError, FetchError, PriceSyncError, SheetError
from .reconcile import SheetRanges, reconcile
from .timestamps import format_run_timestamp, run_timestamp

__all__ = [
    "ConfigError",
    "FetchError",
    "PriceSyncError",
    "SheetError",
    "SheetRanges",
    "reconcile",
    "format_run_timestamp",
    "run_timestamp",
]
