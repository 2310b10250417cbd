"""
Utility Functions
Text normalization, URL normalization and progress tracking helpers.
"""

import logging
import posixpath
import re
import time
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r'\s+')

# Schemes that never point at a crawlable document
_NON_NAVIGABLE_PREFIXES = ('javascript:', 'mailto:', 'tel:', 'data:', '#')


def clean_text(text: str) -> str:
    """Trim and collapse internal whitespace runs to single spaces."""
    if not text:
        return ""

    # Replace multiple whitespace with single space
    text = _WHITESPACE_RE.sub(' ', text)

    # Remove leading/trailing whitespace
    return text.strip()


def truncate_text(text: str, limit: int) -> str:
    """Clean *text* and cut it to at most *limit* characters."""
    return clean_text(text)[:limit]


def _strip_default_port(netloc: str, scheme: str) -> str:
    """Remove ``:80`` for http and ``:443`` for https from *netloc*."""
    if ":" not in netloc or netloc.endswith("]"):
        return netloc
    host, _, port = netloc.rpartition(":")
    if scheme == "http" and port == "80":
        return host
    if scheme == "https" and port == "443":
        return host
    return netloc


def _resolve_dot_segments(path: str) -> str:
    """Resolve ``.`` and ``..`` segments, keeping a trailing slash."""
    if not path:
        return '/'
    if '/.' not in path:
        return path
    resolved = posixpath.normpath(path)
    if not resolved.startswith('/'):
        resolved = '/' + resolved.lstrip('.')
    if path.endswith(('/', '/.', '/..')) and not resolved.endswith('/'):
        resolved += '/'
    return resolved


def normalize_url(url: str, keep_fragment: bool = True) -> str:
    """
    Parse and re-serialize an absolute http(s) URL.

    Scheme and host are lower-cased, default ports dropped, dot-segments
    resolved and an empty path becomes ``/``.

    Raises:
        ValueError: if *url* is not a valid absolute http(s) URL
    """
    candidate = (url or "").strip()
    try:
        parts = urlsplit(candidate)
        # Accessing .port validates the port component
        parts.port
    except ValueError:
        raise ValueError(f"Invalid URL: {url}") from None

    scheme = parts.scheme.lower()
    if scheme not in ('http', 'https') or not parts.hostname:
        raise ValueError(f"Invalid URL: {url}")

    netloc = _strip_default_port(parts.netloc.lower(), scheme)
    path = _resolve_dot_segments(parts.path)
    fragment = parts.fragment if keep_fragment else ''

    return urlunsplit((scheme, netloc, path, parts.query, fragment))


def try_normalize_url(url: str, keep_fragment: bool = True) -> Optional[str]:
    """Like :func:`normalize_url` but returns None instead of raising."""
    if not url or url.strip().lower().startswith(_NON_NAVIGABLE_PREFIXES):
        return None
    try:
        return normalize_url(url, keep_fragment=keep_fragment)
    except ValueError:
        return None


def url_origin(url: str) -> str:
    """Return ``scheme://host[:port]`` for an absolute URL."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    return f"{scheme}://{_strip_default_port(parts.netloc.lower(), scheme)}"


class ProgressTracker:
    """
    Tracks crawling progress for reporting.
    """

    def __init__(self):
        self.pages_crawled = 0
        self.pages_failed = 0
        self.pages_skipped = 0
        self.start_time = None
        self.end_time = None

    def start(self) -> None:
        """Mark crawl start."""
        self.start_time = time.time()
        self.end_time = None

    def finish(self) -> None:
        """Mark crawl end."""
        self.end_time = time.time()

    def increment_crawled(self) -> int:
        self.pages_crawled += 1
        return self.pages_crawled

    def increment_failed(self) -> int:
        self.pages_failed += 1
        return self.pages_failed

    def increment_skipped(self) -> int:
        self.pages_skipped += 1
        return self.pages_skipped

    @property
    def total_processed(self) -> int:
        """Total pages processed."""
        return self.pages_crawled + self.pages_failed + self.pages_skipped

    @property
    def elapsed_time(self) -> float:
        """Elapsed time in seconds."""
        if self.start_time is None:
            return 0
        end = self.end_time or time.time()
        return end - self.start_time

    @property
    def pages_per_second(self) -> float:
        """Crawling rate."""
        elapsed = self.elapsed_time
        if elapsed == 0:
            return 0
        return self.total_processed / elapsed

    def get_stats(self) -> dict:
        """Get current statistics."""
        return {
            'pages_crawled': self.pages_crawled,
            'pages_failed': self.pages_failed,
            'pages_skipped': self.pages_skipped,
            'total_processed': self.total_processed,
            'elapsed_time': round(self.elapsed_time, 2),
            'pages_per_second': round(self.pages_per_second, 2)
        }
