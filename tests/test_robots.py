"""
Tests for the optional robots.txt policy (no network: HTTP is faked).
"""

import requests

from dscrawler.robots import RobotsPolicy

ROBOTS_TXT = """
User-agent: *
Disallow: /docs/internal/
Crawl-delay: 4
"""


class FakeResponse:
    def __init__(self, status_code, text=""):
        self.status_code = status_code
        self.text = text


class FakeHttp:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, headers=None, timeout=None, allow_redirects=True):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.response


class TestRobotsPolicy:

    def test_disallowed_path(self):
        policy = RobotsPolicy(http=FakeHttp(FakeResponse(200, ROBOTS_TXT)))
        assert policy.can_fetch("https://example.com/docs/button")
        assert not policy.can_fetch("https://example.com/docs/internal/tokens")

    def test_crawl_delay(self):
        policy = RobotsPolicy(http=FakeHttp(FakeResponse(200, ROBOTS_TXT)))
        assert policy.crawl_delay("https://example.com/docs/") == 4.0

    def test_fetched_once_per_origin(self):
        http = FakeHttp(FakeResponse(200, ROBOTS_TXT))
        policy = RobotsPolicy(http=http)
        policy.can_fetch("https://example.com/docs/a")
        policy.can_fetch("https://example.com/docs/b")
        policy.crawl_delay("https://example.com/docs/c")
        policy.can_fetch("https://other.com/docs/a")
        assert http.calls == ["https://example.com/robots.txt", "https://other.com/robots.txt"]

    def test_missing_robots_allows_everything(self):
        policy = RobotsPolicy(http=FakeHttp(FakeResponse(404)))
        assert policy.can_fetch("https://example.com/docs/internal/x")
        assert policy.crawl_delay("https://example.com/") is None

    def test_network_error_allows_everything(self):
        policy = RobotsPolicy(http=FakeHttp(error=requests.ConnectionError("refused")))
        assert policy.can_fetch("https://example.com/docs/")

    def test_clear(self):
        http = FakeHttp(FakeResponse(404))
        policy = RobotsPolicy(http=http)
        policy.can_fetch("https://example.com/docs/")
        policy.clear()
        policy.can_fetch("https://example.com/docs/")
        assert len(http.calls) == 2
