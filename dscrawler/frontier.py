"""
URL Frontier
Breadth-first queue of URLs still to visit for one crawl run.
"""

import logging
from collections import deque
from typing import Deque, Iterable, List, Optional, Set
from urllib.parse import urljoin

from .scope_filter import LinkPolicy
from .utils import normalize_url

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 50

_SKIP_HREF_PREFIXES = ('javascript:', 'mailto:', 'tel:', 'data:', '#')


def discover_links(
    hrefs: Iterable[str],
    page_url: str,
    policy: LinkPolicy,
) -> List[str]:
    """
    Resolve raw ``href`` values against *page_url* and keep the ones the
    policy accepts.

    Unresolvable hrefs are dropped silently. Returns unique, normalised
    URLs in document order.
    """
    found: List[str] = []
    seen: Set[str] = set()

    for href in hrefs:
        href = (href or '').strip()
        if not href or href.lower().startswith(_SKIP_HREF_PREFIXES):
            continue
        try:
            absolute = urljoin(page_url, href)
        except ValueError:
            continue
        url = policy.filter_and_clean(absolute)
        if url is None or url in seen:
            continue
        seen.add(url)
        found.append(url)

    return found


class Frontier:
    """
    Ordered queue plus the set of every URL ever queued.

    The set is keyed by normalised URL string, so a URL is yielded at most
    once.  Once ``max_pages`` distinct URLs are known, new URLs are refused;
    work already queued still drains, so ``pop`` never yields more than
    ``max_pages`` URLs in total.
    """

    def __init__(self, seed_url: str, max_pages: int = DEFAULT_MAX_PAGES):
        self.max_pages = max_pages
        self._queue: Deque[str] = deque()
        self._seen: Set[str] = set()
        self._visited: List[str] = []
        self.seed_url = normalize_url(seed_url, keep_fragment=False)
        self.add(self.seed_url)

    def add(self, url: str) -> bool:
        """Queue *url* unless it was seen before or the bound is reached."""
        if url in self._seen:
            return False
        if len(self._seen) >= self.max_pages:
            return False
        self._seen.add(url)
        self._queue.append(url)
        return True

    def extend(self, urls: Iterable[str]) -> int:
        """Queue several URLs; returns how many were new."""
        return sum(1 for url in urls if self.add(url))

    def pop(self) -> Optional[str]:
        """Next URL breadth-first, marked visited. None when drained."""
        if not self._queue:
            return None
        url = self._queue.popleft()
        self._visited.append(url)
        return url

    @property
    def visited(self) -> List[str]:
        return list(self._visited)

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def total_known(self) -> int:
        """Visited + queued; the running estimate of total pages."""
        return len(self._seen)

    @property
    def is_full(self) -> bool:
        return len(self._seen) >= self.max_pages

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)

    def __contains__(self, url: str) -> bool:
        return url in self._seen
