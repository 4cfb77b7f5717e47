"""
Reconciliation: read symbols from the sheet, price them, write prices and
timestamps back row for row.

Failure policy is abort: if the sheet cannot be read nothing is written, and
a failed write is raised to the trigger. Per-symbol fetch failures only blank
that symbol's price and put the fetcher's error marker in its timestamp cell.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from pricesync.core.errors import SheetError
from pricesync.models import PriceRecord, ReconcileResult
from pricesync.sheets.base import SheetSink
from pricesync.sources.base import PriceFetcher
from pricesync.utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class SheetRanges:
    symbols: str = "Sheet1!B2:B"
    prices: str = "Sheet1!H2:H"
    timestamps: str = "Sheet1!L2:L"


def unique_symbols(symbols: Sequence[str]) -> List[str]:
    """Distinct non-blank symbols in first-seen order."""
    seen: Dict[str, None] = {}
    for symbol in symbols:
        if symbol and symbol not in seen:
            seen[symbol] = None
    return list(seen)


async def _safe_fetch(fetcher: PriceFetcher, symbol: str) -> Optional[float]:
    try:
        return await fetcher.fetch_price(symbol)
    except Exception as e:
        log.exception(f"Fetcher raised for {symbol}: {e}")
        return None


async def fetch_prices(
    fetcher: PriceFetcher,
    symbols: Sequence[str],
    max_concurrency: int = 1,
) -> List[PriceRecord]:
    """
    Fetch every symbol in ``symbols``; the result is aligned with the input.

    With ``max_concurrency == 1`` symbols are processed one after another,
    otherwise at most ``max_concurrency`` fetches run at once.
    """
    if max_concurrency <= 1:
        records = []
        for symbol in symbols:
            records.append(PriceRecord(symbol, await _safe_fetch(fetcher, symbol)))
        return records

    semaphore = asyncio.Semaphore(max_concurrency)

    async def bounded_fetch(symbol: str) -> PriceRecord:
        async with semaphore:
            return PriceRecord(symbol, await _safe_fetch(fetcher, symbol))

    return list(await asyncio.gather(*(bounded_fetch(s) for s in symbols)))


def build_markers(
    symbols: Sequence[str],
    prices: Sequence[Optional[float]],
    run_timestamp: str,
    error_marker: str,
) -> List[str]:
    markers = []
    for symbol, price in zip(symbols, prices):
        if not symbol:
            markers.append("")
        elif price is None:
            markers.append(error_marker)
        else:
            markers.append(run_timestamp)
    return markers


async def reconcile(
    sink: SheetSink,
    fetcher: PriceFetcher,
    ranges: SheetRanges,
    run_timestamp: str,
    *,
    deduplicate: bool = True,
    max_concurrency: int = 1,
) -> ReconcileResult:
    """Run one full read → fetch → write cycle against ``sink``."""
    log.info("Fetching stock symbols...")
    try:
        raw_symbols = await sink.read_column(ranges.symbols)
    except SheetError:
        raise
    except Exception as e:
        raise SheetError(f"Failed to read {ranges.symbols}: {e}", range_name=ranges.symbols, operation="read") from e

    symbols = [symbol.strip() for symbol in raw_symbols]
    targets = unique_symbols(symbols) if deduplicate else [s for s in symbols if s]
    log.info(f"Read {len(symbols)} rows, fetching {len(targets)} symbols (deduplicate={deduplicate})")

    fetched = await fetch_prices(fetcher, targets, max_concurrency=max_concurrency)

    if deduplicate:
        by_symbol = {record.symbol: record.price for record in fetched}
        prices = [by_symbol.get(symbol) if symbol else None for symbol in symbols]
    else:
        remaining = iter(fetched)
        prices = [next(remaining).price if symbol else None for symbol in symbols]

    markers = build_markers(symbols, prices, run_timestamp, fetcher.error_marker)
    result = ReconcileResult(
        symbols=symbols,
        prices=prices,
        markers=markers,
        run_timestamp=run_timestamp,
        fetched=fetched,
    )

    for range_name, values in ((ranges.prices, prices), (ranges.timestamps, markers)):
        try:
            await sink.write_column(range_name, values)
        except SheetError:
            raise
        except Exception as e:
            raise SheetError(f"Failed to write {range_name}: {e}", range_name=range_name, operation="write") from e

    log.info(f"Stock prices updated successfully, {result.succeeded} of {result.succeeded + result.failed} rows priced")
    return result


__all__ = ["SheetRanges", "reconcile", "fetch_prices", "unique_symbols", "build_markers"]
