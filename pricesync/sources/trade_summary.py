"""
Trade Summary Price Source
==========================

Looks a symbol up in the exchange's JSON trade summary. One POST per lookup,
no retries; any HTTP, JSON or lookup failure yields ``None``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from pricesync.core.errors import FetchError
from pricesync.core.settings import DEFAULT_TRADE_SUMMARY_URL
from pricesync.sources.base import PriceFetcher, parse_price
from pricesync.utils.logger import get_logger

log = get_logger(__name__)


class TradeSummaryPriceFetcher(PriceFetcher):
    """Price fetcher backed by a trade-summary endpoint."""

    error_marker = "API Error"

    def __init__(
        self,
        endpoint: str = DEFAULT_TRADE_SUMMARY_URL,
        array_field: str = "reqTradeSummery",
        price_field: str = "closingPrice",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint
        self.array_field = array_field
        self.price_field = price_field
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )

    async def close(self):
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def fetch_summary(self) -> List[Dict[str, Any]]:
        """POST the endpoint and return its trade entries."""
        try:
            response = await self.client.post(self.endpoint)
        except httpx.RequestError as e:
            raise FetchError(f"Request to {self.endpoint} failed: {e}", source="trade_summary") from e

        if response.status_code != 200:
            raise FetchError(
                f"Trade summary returned HTTP {response.status_code}",
                source="trade_summary",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError("Trade summary body is not JSON", source="trade_summary") from e

        entries = payload.get(self.array_field) if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            raise FetchError(f"Trade summary has no '{self.array_field}' array", source="trade_summary")
        return entries

    def find_price(self, entries: List[Dict[str, Any]], symbol: str) -> Optional[float]:
        for entry in entries:
            if isinstance(entry, dict) and entry.get("symbol") == symbol:
                return parse_price(entry.get(self.price_field))
        return None

    async def fetch_price(self, symbol: str) -> Optional[float]:
        try:
            entries = await self.fetch_summary()
        except FetchError as e:
            log.error(f"API error fetching price for {symbol}: {e.message}")
            return None
        except Exception as e:
            log.exception(f"Unexpected error fetching price for {symbol}: {e}")
            return None

        price = self.find_price(entries, symbol)
        if price is None:
            log.warning(f"No price for {symbol} in trade summary")
            return None

        log.info(f"Price for {symbol}: {price}")
        return price


__all__ = ["TradeSummaryPriceFetcher"]
