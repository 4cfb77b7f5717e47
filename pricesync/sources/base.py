"""
Price fetcher contract.
Implementations turn one ticker into a float price or ``None``; they log and
swallow their own failures so one bad symbol never aborts a batch.
"""

from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod
from typing import Any, Optional

_CURRENCY_PREFIX = re.compile(r"^(?:[A-Za-z]{1,3}\.?|[$€£¥₹])\s*")
_THOUSANDS_SEPARATOR = re.compile(r"(?<=\d)[,\s](?=\d{3}(?:\D|$))")
_NUMBER = re.compile(r"[+-]?\d+(?:\.\d+)?")


def parse_price(raw: Any) -> Optional[float]:
    """
    Parse a displayed price into a float.

    Accepts numbers and strings such as ``"1,234.50"``, ``"LKR 98.20"`` or
    ``" 12.5 "``: whitespace, thousands separators and a currency prefix are
    stripped and the rest must be a plain decimal. Returns ``None`` for
    anything else, and for values that are not finite.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip().replace("−", "-")
        text = _CURRENCY_PREFIX.sub("", text)
        text = _THOUSANDS_SEPARATOR.sub("", text)
        if not _NUMBER.fullmatch(text):
            return None
        value = float(text)
    return value if math.isfinite(value) else None


class PriceFetcher(ABC):
    #: Written in the timestamp column for rows whose price could not be fetched.
    error_marker: str = "Error"

    @abstractmethod
    async def fetch_price(self, symbol: str) -> Optional[float]:
        """Return the current price for ``symbol``, or ``None`` on any failure."""
        ...
