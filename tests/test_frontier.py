"""
Tests for the URL frontier.
"""

import pytest

from dscrawler.frontier import Frontier


class TestFrontier:

    def test_seed_normalized_and_queued(self):
        frontier = Frontier("HTTPS://Example.com:443/docs#intro")
        assert frontier.seed_url == "https://example.com/docs"
        assert frontier.pop() == "https://example.com/docs"
        assert frontier.pop() is None

    def test_invalid_seed(self):
        with pytest.raises(ValueError, match="Invalid URL"):
            Frontier("ftp://example.com/docs/")

    def test_fifo_order(self):
        frontier = Frontier("https://example.com/docs/")
        frontier.pop()
        frontier.extend(["https://example.com/docs/a", "https://example.com/docs/b"])
        frontier.add("https://example.com/docs/c")
        assert [frontier.pop(), frontier.pop(), frontier.pop()] == [
            "https://example.com/docs/a",
            "https://example.com/docs/b",
            "https://example.com/docs/c",
        ]

    def test_seen_urls_not_requeued(self):
        frontier = Frontier("https://example.com/docs/")
        seed = frontier.pop()
        assert not frontier.add(seed)
        assert frontier.add("https://example.com/docs/a")
        assert not frontier.add("https://example.com/docs/a")
        assert frontier.extend(["https://example.com/docs/a", "https://example.com/docs/b"]) == 1
        assert frontier.pending == 2

    def test_bound_refuses_new_work(self):
        frontier = Frontier("https://example.com/docs/", max_pages=3)
        added = frontier.extend(f"https://example.com/docs/{i}" for i in range(10))
        assert added == 2
        assert frontier.is_full
        popped = []
        while frontier:
            popped.append(frontier.pop())
        assert len(popped) == 3

    def test_visited_and_totals(self):
        frontier = Frontier("https://example.com/docs/")
        frontier.add("https://example.com/docs/a")
        frontier.pop()
        assert frontier.visited == ["https://example.com/docs/"]
        assert frontier.total_known == 2
        assert len(frontier) == 1
        assert "https://example.com/docs/a" in frontier
        assert "https://example.com/docs/z" not in frontier
