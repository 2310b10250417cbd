"""
Link Policy
===========
Decides which discovered URLs are worth visiting during a crawl.

A candidate is accepted only when **all** of these hold:

- Same origin as the seed (scheme + host + port, default ports stripped)
- Path does not end in a non-document extension (images, styles, scripts...)
- Path contains no ``/api/`` segment
- Optionally, path contains a documentation marker (``/docs/``,
  ``/components/``, ``/design-system/``, ``/ui/``, ``/patterns/``, ``/guide/``)
- Optionally, no query string
- No configured deny-pattern matches

The documentation-path allow-list and the query rule are explicit switches
so callers choose between a docs-focused crawl and a whole-origin crawl.

Public API
----------
- ``LinkPolicy``                : stateful, per-crawl policy
- ``is_document_path(path)``    : extension / ``/api/`` checks on their own
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlsplit

from .utils import try_normalize_url, url_origin

logger = logging.getLogger(__name__)


DOC_PATH_MARKERS = (
    '/docs/',
    '/components/',
    '/design-system/',
    '/ui/',
    '/patterns/',
    '/guide/',
)

# Non-document resources (images, styles, scripts, fonts, media, archives)
SKIP_EXTENSIONS = frozenset({
    '.jpg', '.jpeg', '.png', '.gif', '.bmp', '.svg', '.webp', '.ico', '.avif',
    '.css', '.scss', '.less', '.js', '.mjs', '.cjs', '.map', '.json', '.xml',
    '.rss', '.atom', '.txt',
    '.woff', '.woff2', '.ttf', '.eot', '.otf',
    '.mp3', '.mp4', '.avi', '.mov', '.wmv', '.flv', '.webm',
    '.pdf', '.zip', '.rar', '.tar', '.gz', '.7z',
})

API_SEGMENT = '/api/'


def _with_trailing_slash(path: str) -> str:
    return path if path.endswith('/') else path + '/'


def is_document_path(path: str) -> bool:
    """True if *path* is not an API endpoint and has no asset extension."""
    lowered = (path or '/').lower()
    if API_SEGMENT in _with_trailing_slash(lowered):
        return False
    last_segment = lowered.rsplit('/', 1)[-1]
    if '.' in last_segment:
        extension = last_segment[last_segment.rindex('.'):]
        if extension in SKIP_EXTENSIONS:
            return False
    return True


@dataclass
class LinkPolicy:
    """
    Per-crawl link filter.

    Parameters
    ----------
    root_url : str
        The seed URL; its origin is the only origin accepted.
    require_doc_path : bool
        Only accept paths containing one of ``doc_path_markers``.
    doc_path_markers : list[str]
        Path fragments marking documentation subtrees.
    exclude_query_urls : bool
        Reject URLs that carry a query string.
    deny_patterns : list[str]
        Regex patterns; any URL whose full string matches is rejected.
        Invalid patterns are logged and skipped.
    """

    root_url: str = ""
    require_doc_path: bool = True
    doc_path_markers: List[str] = field(default_factory=lambda: list(DOC_PATH_MARKERS))
    exclude_query_urls: bool = True
    deny_patterns: List[str] = field(default_factory=list)

    _origin: Optional[str] = field(init=False, repr=False, default=None)
    _compiled_deny: List[re.Pattern] = field(init=False, repr=False, default_factory=list)

    def __post_init__(self):
        root = try_normalize_url(self.root_url)
        if root is not None:
            self._origin = url_origin(root)
        elif self.root_url:
            logger.warning(f"[SCOPE] Could not normalise root URL: {self.root_url}")

        self._compiled_deny = []
        for pat in self.deny_patterns:
            try:
                self._compiled_deny.append(re.compile(pat, re.IGNORECASE))
            except re.error as exc:
                logger.warning(f"[SCOPE] Invalid deny-pattern '{pat}': {exc}")

    # ------------------------------------------------------------------
    # Primary API
    # ------------------------------------------------------------------

    def clean(self, candidate_url: str) -> Optional[str]:
        """Normalise *candidate_url* and drop its fragment; None if invalid."""
        return try_normalize_url(candidate_url, keep_fragment=False)

    def accept(self, candidate_url: str) -> bool:
        """Return True if *candidate_url* passes every rule."""
        if self._origin is None:
            return False

        url = self.clean(candidate_url)
        if url is None:
            return False

        if url_origin(url) != self._origin:
            return False

        parts = urlsplit(url)
        if not is_document_path(parts.path):
            return False

        if self.exclude_query_urls and parts.query:
            return False

        if self.require_doc_path and not self._has_doc_marker(parts.path):
            return False

        for rx in self._compiled_deny:
            if rx.search(url):
                return False

        return True

    def filter_and_clean(self, candidate_url: str) -> Optional[str]:
        """Normalise and check in one call. Returns the clean URL or None."""
        url = self.clean(candidate_url)
        if url is None or not self.accept(url):
            return None
        return url

    def _has_doc_marker(self, path: str) -> bool:
        lowered = _with_trailing_slash(path.lower())
        return any(marker in lowered for marker in self.doc_path_markers)

    # ------------------------------------------------------------------
    # Logging / introspection
    # ------------------------------------------------------------------

    @property
    def scope_description(self) -> str:
        origin = self._origin or "(unknown)"
        if self.require_doc_path:
            return f"Documentation paths on {origin}"
        return f"Entire origin: {origin}"

    def log_scope(self) -> None:
        """Emit policy information to the logger."""
        logger.info(f"[SCOPE] {self.scope_description}")
        if self.require_doc_path:
            logger.info(f"[SCOPE] Path markers: {', '.join(self.doc_path_markers)}")
        if self.exclude_query_urls:
            logger.info("[SCOPE] Query-string URLs: excluded")
        if self._compiled_deny:
            logger.info(f"[SCOPE] Deny patterns: {len(self._compiled_deny)}")
