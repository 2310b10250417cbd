"""
Shared fixtures: an in-memory site served by a fake Playwright page, and a
fake browser session, so crawler tests never touch the network or a real
browser.
"""

import pytest


class FakeResponse:
    def __init__(self, status: int = 200):
        self.status = status


class FakePage:
    """
    Mimics the slice of ``playwright.async_api.Page`` the fetcher uses.

    Args:
        site: url -> HTML served after a successful navigation
        failures: url -> number of navigations that raise before succeeding
            (``float('inf')`` for a page that always times out)
        statuses: url -> HTTP status returned by ``goto``
    """

    def __init__(self, site=None, failures=None, statuses=None):
        self.site = dict(site or {})
        self.failures = dict(failures or {})
        self.statuses = dict(statuses or {})
        self.goto_calls = []
        self.waits = []
        self._current = None

    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append((url, wait_until, timeout))
        remaining = self.failures.get(url, 0)
        if remaining:
            self.failures[url] = remaining - 1
            raise TimeoutError(f"Timeout {timeout}ms exceeded navigating to {url}")
        self._current = url
        return FakeResponse(self.statuses.get(url, 200))

    async def wait_for_timeout(self, ms):
        self.waits.append(ms)

    async def content(self):
        return self.site.get(self._current, "<html><body></body></html>")

    def visited(self):
        return [call[0] for call in self.goto_calls]


class FakeSession:
    """Async context manager standing in for ``BrowserSession``."""

    def __init__(self, page, fail_on_enter: Exception = None):
        self.page = page
        self.fail_on_enter = fail_on_enter
        self.enter_count = 0
        self.close_count = 0

    async def __aenter__(self):
        self.enter_count += 1
        if self.fail_on_enter is not None:
            raise self.fail_on_enter
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close_count += 1


class SleepRecorder:
    """Drop-in for ``asyncio.sleep`` that records delays instead of waiting."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def doc_page(title: str, links=(), body: str = "") -> str:
    anchors = "".join(f'<a href="{href}">{href}</a>' for href in links)
    return (
        f"<html lang=\"en\"><head><title>{title}</title></head>"
        f"<body><h1>{title}</h1><p>{title} documentation.</p>{body}"
        f"<nav>{anchors}</nav></body></html>"
    )


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def make_page():
    return FakePage


@pytest.fixture
def make_session():
    return FakeSession
