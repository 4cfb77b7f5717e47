"""Domain models for one price update run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class PriceRecord:
    """A ticker mapped to the price fetched for it, if any."""

    symbol: str
    price: Optional[float]

    @property
    def ok(self) -> bool:
        return self.price is not None


@dataclass
class ReconcileResult:
    """Row-aligned output of one reconciliation run.

    ``prices[i]`` and ``markers[i]`` belong to ``symbols[i]``.
    """

    symbols: List[str]
    prices: List[Optional[float]]
    markers: List[str]
    run_timestamp: str
    fetched: List[PriceRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.symbols)

    @property
    def succeeded(self) -> int:
        return sum(1 for price in self.prices if price is not None)

    @property
    def failed(self) -> int:
        return sum(1 for symbol, price in zip(self.symbols, self.prices) if symbol and price is None)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "run_timestamp": self.run_timestamp,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "fetches": len(self.fetched),
            "rows": [
                {"symbol": symbol, "price": price, "marker": marker}
                for symbol, price, marker in zip(self.symbols, self.prices, self.markers)
            ],
        }


__all__ = ["PriceRecord", "ReconcileResult"]
