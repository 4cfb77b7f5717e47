"""
Browser Price Source
====================

Reads the displayed last price from a symbol detail page with a headless
Chromium driven by Playwright.

- One ``BrowserSession`` per update run, never shared between runs
- Page open/close serialized on the session, pages may overlap
- Selector text re-read while empty (bounded retry)
- Failures logged and reported as ``None``
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from urllib.parse import quote

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pricesync.core.retry import SleepFn, retry_while_empty
from pricesync.core.settings import DEFAULT_PRICE_SELECTOR, DEFAULT_URL_TEMPLATE
from pricesync.sources.base import PriceFetcher, parse_price
from pricesync.utils.logger import get_logger

log = get_logger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)


class BrowserSession:
    """
    Headless browser owned by a single update run.

    Usage:
        async with BrowserSession() as session:
            async with session.page() as page:
                await page.goto(url)
    """

    def __init__(self, headless: bool = True, user_agent: str = DEFAULT_USER_AGENT):
        self.headless = headless
        self.user_agent = user_agent
        self._lock = asyncio.Lock()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self) -> "BrowserSession":
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=["--disable-blink-features=AutomationControlled", "--disable-dev-shm-usage"],
            )
            self._context = await self._browser.new_context(
                user_agent=self.user_agent,
                viewport={"width": 1280, "height": 800},
                locale="en-US",
            )
        except Exception:
            await self.close()
            raise
        log.info(f"Browser session started (headless={self.headless})")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        if self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
            log.info("Browser session closed")

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        if self._context is None:
            raise RuntimeError("BrowserSession is not open; use it as an async context manager")

        async with self._lock:
            page = await self._context.new_page()
        try:
            yield page
        finally:
            async with self._lock:
                await page.close()


class BrowserPriceFetcher(PriceFetcher):
    """Price fetcher that scrapes the symbol page of a charting website."""

    error_marker = "Error"

    def __init__(
        self,
        session: BrowserSession,
        url_template: str = DEFAULT_URL_TEMPLATE,
        price_selector: str = DEFAULT_PRICE_SELECTOR,
        navigation_timeout_ms: int = 60000,
        retry_attempts: int = 3,
        retry_delay: float = 3.0,
        wait_until: str = "networkidle",
        sleep: Optional[SleepFn] = None,
    ):
        self.session = session
        self.url_template = url_template
        self.price_selector = price_selector
        self.navigation_timeout_ms = navigation_timeout_ms
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.wait_until = wait_until
        self._sleep = sleep

    def url_for(self, symbol: str) -> str:
        return self.url_template.format(symbol=quote(symbol, safe=".-_"))

    async def _read_text(self, page: Page) -> str:
        text = await page.text_content(self.price_selector)
        return (text or "").strip()

    async def fetch_price(self, symbol: str) -> Optional[float]:
        url = self.url_for(symbol)
        try:
            async with self.session.page() as page:
                await page.goto(url, wait_until=self.wait_until, timeout=self.navigation_timeout_ms)
                await page.wait_for_selector(self.price_selector, timeout=self.navigation_timeout_ms)
                text = await retry_while_empty(
                    self._read_text,
                    page,
                    attempts=self.retry_attempts,
                    delay=self.retry_delay,
                    sleep=self._sleep,
                    label=symbol,
                )
        except PlaywrightTimeoutError as e:
            log.error(f"Timed out fetching price for {symbol} from {url}: {e}")
            return None
        except Exception as e:
            log.error(f"Error fetching price for {symbol}: {e}")
            return None

        price = parse_price(text)
        if price is None:
            log.error(f"Could not parse price for {symbol} from {text!r}")
            return None

        log.info(f"Price for {symbol}: {price}")
        return price


__all__ = ["BrowserSession", "BrowserPriceFetcher", "DEFAULT_USER_AGENT"]
