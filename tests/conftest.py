import asyncio

import pytest

from pricesync.core.config import Config
from pricesync.core.settings import get_settings
from pricesync.sources.base import PriceFetcher

SETTINGS_ENV_VARS = [
    "PRICESYNC_CONFIG",
    "SPREADSHEET_ID",
    "GOOGLE_CREDENTIALS_FILE",
    "GOOGLE_CREDENTIALS_JSON",
    "SYMBOLS_RANGE",
    "PRICES_RANGE",
    "TIMESTAMPS_RANGE",
    "FETCH_STRATEGY",
    "DEDUPLICATE",
    "MAX_CONCURRENCY",
    "BROWSER_URL_TEMPLATE",
    "PRICE_SELECTOR",
    "NAVIGATION_TIMEOUT_MS",
    "SELECTOR_RETRY_ATTEMPTS",
    "SELECTOR_RETRY_DELAY",
    "BROWSER_HEADLESS",
    "TRADE_SUMMARY_URL",
    "TRADE_SUMMARY_FIELD",
    "TRADE_SUMMARY_PRICE_FIELD",
    "API_TIMEOUT_SECONDS",
    "UPDATE_CRON",
    "UPDATE_TIMEZONE",
    "SCHEDULER_ENABLED",
    "MISFIRE_GRACE_SECONDS",
]


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test against built-in defaults, not the developer's .env or settings.yaml."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PRICESYNC_CONFIG", str(tmp_path / "missing-settings.yaml"))
    Config.reset()
    get_settings.cache_clear()
    yield
    Config.reset()
    get_settings.cache_clear()


class FakeFetcher(PriceFetcher):
    """Returns canned prices and records every symbol it was asked for."""

    def __init__(self, prices, error_marker="Error", fail_on=(), delay=0.0):
        self.prices = dict(prices)
        self.error_marker = error_marker
        self.fail_on = set(fail_on)
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_price(self, symbol):
        self.calls.append(symbol)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if symbol in self.fail_on:
                raise RuntimeError(f"fetcher blew up on {symbol}")
            return self.prices.get(symbol)
        finally:
            self.in_flight -= 1


@pytest.fixture
def make_fetcher():
    return FakeFetcher
