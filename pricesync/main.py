"""
Update stock prices in the spreadsheet once.

Usage:
    python -m pricesync.main                         # Use configured strategy and sheet
    python -m pricesync.main --strategy api          # Force the trade-summary source
    python -m pricesync.main --dry-run --symbols JKH.N0000,COMB.N0000
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, List, Optional

from pricesync.core.errors import PriceSyncError
from pricesync.core.reconcile import SheetRanges, reconcile
from pricesync.core.settings import FETCH_STRATEGIES, Settings, get_settings
from pricesync.core.timestamps import run_timestamp
from pricesync.models import ReconcileResult
from pricesync.sheets.base import SheetSink
from pricesync.sheets.google import GoogleSheetSink
from pricesync.sheets.memory import MemorySheetSink
from pricesync.sources.base import PriceFetcher
from pricesync.sources.browser import BrowserPriceFetcher, BrowserSession
from pricesync.sources.trade_summary import TradeSummaryPriceFetcher
from pricesync.utils.logger import get_logger, log_execution_time, setup_logging

log = get_logger(__name__)


def build_sink(settings: Settings) -> SheetSink:
    return GoogleSheetSink(settings.require_spreadsheet_id(), settings.credentials_info())


def sheet_ranges(settings: Settings) -> SheetRanges:
    return SheetRanges(
        symbols=settings.symbols_range,
        prices=settings.prices_range,
        timestamps=settings.timestamps_range,
    )


@asynccontextmanager
async def open_fetcher(settings: Settings) -> AsyncIterator[PriceFetcher]:
    """Price fetcher for the configured strategy, with its resources scoped to the block."""
    if settings.fetch_strategy == "api":
        async with TradeSummaryPriceFetcher(
            endpoint=settings.trade_summary_url,
            array_field=settings.trade_summary_field,
            price_field=settings.trade_summary_price_field,
            timeout=settings.api_timeout_seconds,
        ) as fetcher:
            yield fetcher
        return

    async with BrowserSession(headless=settings.headless) as session:
        yield BrowserPriceFetcher(
            session,
            url_template=settings.url_template,
            price_selector=settings.price_selector,
            navigation_timeout_ms=settings.navigation_timeout_ms,
            retry_attempts=settings.retry_attempts,
            retry_delay=settings.retry_delay_seconds,
        )


@log_execution_time
async def run_price_update(
    settings: Optional[Settings] = None,
    *,
    sink: Optional[SheetSink] = None,
    now: Optional[datetime] = None,
) -> ReconcileResult:
    """Public entry point used by the HTTP trigger, the scheduler and the CLI."""
    settings = settings or get_settings()
    sink = sink or build_sink(settings)
    stamp = run_timestamp(settings.timezone, now)

    log.info(f"Starting price update with {settings.fetch_strategy} strategy at {stamp}")
    async with open_fetcher(settings) as fetcher:
        return await reconcile(
            sink,
            fetcher,
            sheet_ranges(settings),
            stamp,
            deduplicate=settings.deduplicate,
            max_concurrency=settings.max_concurrency,
        )


def _parse_symbols(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Update stock prices in the spreadsheet")
    parser.add_argument("--strategy", choices=sorted(FETCH_STRATEGIES), help="Override FETCH_STRATEGY")
    parser.add_argument("--dry-run", action="store_true", help="Price --symbols without touching the sheet")
    parser.add_argument("--symbols", type=_parse_symbols, default=[], help="Comma separated tickers for --dry-run")
    args = parser.parse_args(argv)

    setup_logging()

    if args.dry_run and not args.symbols:
        parser.error("--dry-run requires --symbols")

    try:
        settings = get_settings()
        if args.strategy and args.strategy != settings.fetch_strategy:
            settings = Settings()
            settings.fetch_strategy = args.strategy

        sink = None
        if args.dry_run:
            sink = MemorySheetSink({settings.symbols_range: args.symbols})

        result = asyncio.run(run_price_update(settings, sink=sink))
    except PriceSyncError as e:
        log.error(f"Price update failed: {e.message}")
        print(json.dumps(e.as_dict(), indent=2))
        return 1

    print(json.dumps(result.as_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
