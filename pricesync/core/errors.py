"""
PriceSync error hierarchy for clear classification in logs and HTTP responses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class PriceSyncError(Exception):
    """Base class for all PriceSync errors."""

    def __init__(
        self,
        message: str,
        *,
        symbol: Optional[str] = None,
        phase: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.symbol = symbol
        self.phase = phase
        self.details = details or {}

    def as_dict(self) -> Dict[str, Any]:
        """Serializable representation for logs/API."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "symbol": self.symbol,
            "phase": self.phase,
            "details": self.details,
        }


class FetchError(PriceSyncError):
    """Raised inside a price fetcher (navigation, selector, HTTP, parsing)."""

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ) -> None:
        kwargs.setdefault("phase", "fetch")
        super().__init__(message, **kwargs)
        self.source = source
        self.status_code = status_code
        if source is not None:
            self.details["source"] = source
        if status_code is not None:
            self.details["status_code"] = status_code


class SheetError(PriceSyncError):
    """Raised when reading from or writing to the spreadsheet fails."""

    def __init__(
        self,
        message: str,
        *,
        range_name: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ) -> None:
        kwargs.setdefault("phase", "sheet")
        super().__init__(message, **kwargs)
        self.range_name = range_name
        self.operation = operation
        if range_name is not None:
            self.details["range"] = range_name
        if operation is not None:
            self.details["operation"] = operation


class ConfigError(PriceSyncError):
    """Raised on missing/invalid configuration values."""

    def __init__(
        self,
        message: str,
        *,
        key: Optional[str] = None,
        section: Optional[str] = None,
        **kwargs,
    ) -> None:
        kwargs.setdefault("phase", "config")
        super().__init__(message, **kwargs)
        self.key = key
        self.section = section
        if key is not None:
            self.details["key"] = key
        if section is not None:
            self.details["section"] = section
