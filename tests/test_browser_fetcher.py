import asyncio
from contextlib import asynccontextmanager

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pricesync.core.settings import DEFAULT_PRICE_SELECTOR
from pricesync.sources.browser import BrowserPriceFetcher, BrowserSession


class FakePage:
    def __init__(self, texts=("",), goto_error=None, selector_error=None):
        self.texts = list(texts)
        self.goto_error = goto_error
        self.selector_error = selector_error
        self.visited = []
        self.selectors = []
        self.reads = 0
        self.closed = False

    async def goto(self, url, wait_until=None, timeout=None):
        self.visited.append((url, wait_until, timeout))
        if self.goto_error:
            raise self.goto_error

    async def wait_for_selector(self, selector, timeout=None):
        self.selectors.append(selector)
        if self.selector_error:
            raise self.selector_error

    async def text_content(self, selector):
        self.reads += 1
        if len(self.texts) > 1:
            return self.texts.pop(0)
        return self.texts[0]


class FakeSession:
    def __init__(self, page):
        self._page = page
        self.opened = 0

    @asynccontextmanager
    async def page(self):
        self.opened += 1
        try:
            yield self._page
        finally:
            self._page.closed = True


class FakeClock:
    def __init__(self):
        self.sleeps = []

    async def sleep(self, seconds):
        self.sleeps.append(seconds)


def make_fetcher(page, clock=None):
    clock = clock or FakeClock()
    return BrowserPriceFetcher(FakeSession(page), sleep=clock.sleep), clock


def test_reads_and_parses_displayed_price():
    page = FakePage(texts=[" 1,234.50 "])
    fetcher, clock = make_fetcher(page)

    price = asyncio.run(fetcher.fetch_price("JKH.N0000"))

    assert price == 1234.5
    assert page.visited == [("https://www.tradingview.com/symbols/CSELK-JKH.N0000/", "networkidle", 60000)]
    assert page.selectors == [DEFAULT_PRICE_SELECTOR]
    assert page.reads == 1
    assert page.closed
    assert clock.sleeps == []


def test_retries_while_selector_text_is_empty():
    page = FakePage(texts=["", "", "98.20"])
    fetcher, clock = make_fetcher(page)

    assert asyncio.run(fetcher.fetch_price("COMB.N0000")) == 98.2
    assert page.reads == 3
    assert clock.sleeps == [3.0, 3.0]


def test_returns_none_when_text_stays_empty():
    page = FakePage(texts=[""])
    fetcher, clock = make_fetcher(page)

    assert asyncio.run(fetcher.fetch_price("COMB.N0000")) is None
    assert page.reads == 3
    assert page.closed


def test_selector_timeout_returns_none_and_releases_page():
    page = FakePage(selector_error=PlaywrightTimeoutError("Timeout 60000ms exceeded."))
    fetcher, _ = make_fetcher(page)

    assert asyncio.run(fetcher.fetch_price("HNB.N0000")) is None
    assert page.reads == 0
    assert page.closed


def test_navigation_error_returns_none():
    page = FakePage(goto_error=RuntimeError("net::ERR_NAME_NOT_RESOLVED"))
    fetcher, _ = make_fetcher(page)

    assert asyncio.run(fetcher.fetch_price("HNB.N0000")) is None
    assert page.closed


def test_unparseable_text_returns_none():
    page = FakePage(texts=["—"])
    fetcher, _ = make_fetcher(page)

    assert asyncio.run(fetcher.fetch_price("HNB.N0000")) is None


def test_custom_url_template_and_error_marker():
    page = FakePage(texts=["10"])
    fetcher = BrowserPriceFetcher(FakeSession(page), url_template="https://example.test/q/{symbol}")

    asyncio.run(fetcher.fetch_price("ABC"))

    assert page.visited[0][0] == "https://example.test/q/ABC"
    assert fetcher.error_marker == "Error"


class RecordingPage:
    def __init__(self, number, events):
        self.number = number
        self.events = events

    async def close(self):
        self.events.append(("close-start", self.number))
        await asyncio.sleep(0)
        self.events.append(("close-end", self.number))


class RecordingContext:
    def __init__(self):
        self.events = []
        self.created = 0

    async def new_page(self):
        self.created += 1
        number = self.created
        self.events.append(("open-start", number))
        await asyncio.sleep(0)
        self.events.append(("open-end", number))
        return RecordingPage(number, self.events)


def open_session(context):
    session = BrowserSession()
    session._context = context
    return session


def test_session_serializes_page_open_and_close_but_pages_overlap():
    context = RecordingContext()
    session = open_session(context)
    inside = []

    async def use_page():
        async with session.page() as page:
            inside.append(page.number)
            while len(inside) < 3:
                await asyncio.sleep(0)

    async def scenario():
        await asyncio.gather(use_page(), use_page(), use_page())

    asyncio.run(scenario())

    events = context.events
    assert len(events) == 12
    for start, end in zip(events[::2], events[1::2]):
        assert start[0].endswith("-start")
        assert end == (start[0].replace("-start", "-end"), start[1])
    opened = [number for kind, number in events if kind == "open-end"]
    first_close = events.index(next(event for event in events if event[0] == "close-start"))
    assert sorted(opened) == [1, 2, 3]
    assert all(events.index(("open-end", number)) < first_close for number in opened)


def test_session_closes_page_when_body_raises():
    context = RecordingContext()
    session = open_session(context)

    async def scenario():
        async with session.page():
            raise ValueError("selector detached")

    with pytest.raises(ValueError):
        asyncio.run(scenario())

    assert context.events[-1] == ("close-end", 1)


def test_session_page_requires_open_session():
    async def scenario():
        async with BrowserSession().page():
            pass

    with pytest.raises(RuntimeError):
        asyncio.run(scenario())


def test_session_close_releases_everything_once():
    closed = []

    class Closable:
        def __init__(self, name):
            self.name = name

        async def close(self):
            closed.append(self.name)

        async def stop(self):
            closed.append(self.name)

    session = BrowserSession()
    session._context = Closable("context")
    session._browser = Closable("browser")
    session._playwright = Closable("playwright")

    asyncio.run(session.close())
    asyncio.run(session.close())

    assert closed == ["context", "browser", "playwright"]
    assert session._context is None and session._browser is None and session._playwright is None
