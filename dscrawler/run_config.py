"""
Run Configuration
=================
Single source of truth for crawler defaults and runtime limits.

The CLI, the environment (``DSCRAWLER_*`` variables) and library callers
all populate the same ``CrawlerRunConfig``; the retry policy and link
policy used by a crawl are built *from* it via factory methods.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from typing import List, Mapping, Optional

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Canonical defaults: the ONLY place these numbers live
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "max_pages": 50,
    "rate_delay": 1.0,               # seconds between pages
    "max_retries": 3,                # attempts per page, first one included
    "retry_delay": None,             # seconds between attempts (None = rate_delay)
    "retry_backoff": 1.0,            # 1.0 = fixed delay
    "navigation_timeout_ms": 30000,
    "settle_delay_ms": 1000,         # wait after network idle
    "min_detect_length": 20,         # chars before the classifier runs
    "min_relevance": 5.0,            # classifier relevance to accept a guess
    "require_doc_path": True,
    "exclude_query_urls": True,
    "respect_robots": False,
    "headless": True,
    "viewport_width": 1200,
    "viewport_height": 800,
    "output_json": None,
    "user_agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
    ),
}

ENV_PREFIX = "DSCRAWLER_"

# Type samples for fields whose default is None
_UNSET_FIELD_TYPES = {"retry_delay": 0.0}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _coerce(raw: str, default):
    """Convert an environment string to the type of *default*."""
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"Expected a boolean, got {raw!r}")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


@dataclass
class CrawlerRunConfig:
    """
    Configuration consumed by every crawler subsystem.

    Populate via:
      - ``CrawlerRunConfig()``                 → all defaults
      - ``CrawlerRunConfig(max_pages=10)``      → override one value
      - ``CrawlerRunConfig.from_cli_args(ns)``  → from argparse Namespace
      - ``CrawlerRunConfig.from_env()``         → from ``DSCRAWLER_*`` variables
    """

    # ---- Crawl limits ----
    max_pages: int = _DEFAULTS["max_pages"]
    rate_delay: float = _DEFAULTS["rate_delay"]

    # ---- Fetch / retry ----
    max_retries: int = _DEFAULTS["max_retries"]
    retry_delay: Optional[float] = _DEFAULTS["retry_delay"]
    retry_backoff: float = _DEFAULTS["retry_backoff"]
    navigation_timeout_ms: int = _DEFAULTS["navigation_timeout_ms"]
    settle_delay_ms: int = _DEFAULTS["settle_delay_ms"]

    # ---- Code-sample language detection ----
    min_detect_length: int = _DEFAULTS["min_detect_length"]
    min_relevance: float = _DEFAULTS["min_relevance"]

    # ---- Scope filtering ----
    require_doc_path: bool = _DEFAULTS["require_doc_path"]
    exclude_query_urls: bool = _DEFAULTS["exclude_query_urls"]
    deny_patterns: List[str] = field(default_factory=list)
    respect_robots: bool = _DEFAULTS["respect_robots"]

    # ---- Browser ----
    headless: bool = _DEFAULTS["headless"]
    viewport_width: int = _DEFAULTS["viewport_width"]
    viewport_height: int = _DEFAULTS["viewport_height"]
    user_agent: str = _DEFAULTS["user_agent"]

    # ---- Output path (None = skip) ----
    output_json: Optional[str] = _DEFAULTS["output_json"]

    # -----------------------------------------------------------------------
    # Factory helpers
    # -----------------------------------------------------------------------
    @classmethod
    def from_cli_args(cls, args, base: "CrawlerRunConfig" = None) -> "CrawlerRunConfig":
        """
        Build config from an argparse Namespace (``__main__.py``).

        Flags left unset (``None``) keep the value from *base*, so CLI
        flags override environment settings which override defaults.
        """
        cfg = base or cls()
        timeout = getattr(args, "timeout", None)
        overrides = {
            "max_pages": getattr(args, "pages", None),
            "rate_delay": getattr(args, "rate", None),
            "retry_delay": getattr(args, "retry_delay", None),
            "max_retries": getattr(args, "retries", None),
            "settle_delay_ms": getattr(args, "settle_ms", None),
            "navigation_timeout_ms": int(timeout * 1000) if timeout is not None else None,
            "output_json": getattr(args, "output_json", None),
        }
        for name, value in overrides.items():
            if value is not None:
                setattr(cfg, name, value)

        if getattr(args, "all_paths", False):
            cfg.require_doc_path = False
        if getattr(args, "allow_query", False):
            cfg.exclude_query_urls = False
        if getattr(args, "respect_robots", False):
            cfg.respect_robots = True
        if getattr(args, "headful", False):
            cfg.headless = False
        deny = getattr(args, "deny_pattern", None) or []
        if deny:
            cfg.deny_patterns = list(cfg.deny_patterns) + list(deny)
        return cfg

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> "CrawlerRunConfig":
        """
        Build config from ``DSCRAWLER_<FIELD>`` environment variables.

        ``DSCRAWLER_DENY_PATTERNS`` is a comma-separated list. Values that
        cannot be converted are logged and ignored.
        """
        environ = os.environ if environ is None else environ
        cfg = cls()
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            if f.name == "deny_patterns":
                cfg.deny_patterns = [p.strip() for p in raw.split(",") if p.strip()]
                continue
            default = _DEFAULTS.get(f.name, "")
            if default is None:
                default = _UNSET_FIELD_TYPES.get(f.name, "")
            try:
                setattr(cfg, f.name, _coerce(raw, default))
            except ValueError as e:
                logger.warning(f"Ignoring {ENV_PREFIX}{f.name.upper()}={raw!r}: {e}")
        return cfg

    # -----------------------------------------------------------------------
    # Converters to subsystem objects
    # -----------------------------------------------------------------------
    def retry_policy(self):
        """Return the ``RetryPolicy`` for the fetch controller."""
        from .fetcher import RetryPolicy
        return RetryPolicy(
            max_attempts=max(1, self.max_retries),
            delay=self.rate_delay if self.retry_delay is None else self.retry_delay,
            backoff=self.retry_backoff,
        )

    def link_policy(self, root_url: str):
        """Return the ``LinkPolicy`` for a crawl seeded at *root_url*."""
        from .scope_filter import LinkPolicy
        return LinkPolicy(
            root_url=root_url,
            require_doc_path=self.require_doc_path,
            exclude_query_urls=self.exclude_query_urls,
            deny_patterns=list(self.deny_patterns),
        )

    # -----------------------------------------------------------------------
    # Logging helper
    # -----------------------------------------------------------------------
    def log_summary(self, url: str) -> None:
        """Emit a structured summary to the logger."""
        logger.info("=" * 60)
        logger.info("CRAWL RUN CONFIG")
        logger.info("=" * 60)
        logger.info(f"  URL:              {url}")
        logger.info(f"  Max Pages:        {self.max_pages}")
        logger.info(f"  Timeout:          {self.navigation_timeout_ms}ms per navigation")
        logger.info(f"  Settle Delay:     {self.settle_delay_ms}ms")
        logger.info(f"  Attempts:         {self.max_retries} per page")
        if self.retry_delay is not None:
            logger.info(f"  Retry Delay:      {self.retry_delay}s")
        logger.info(f"  Rate Delay:       {self.rate_delay}s between pages")
        logger.info(f"  Scope:            {'docs paths only' if self.require_doc_path else 'entire origin'}")
        if not self.exclude_query_urls:
            logger.info("  Query Strings:    allowed")
        if self.deny_patterns:
            logger.info(f"  Deny Patterns:    {len(self.deny_patterns)} configured")
        if self.respect_robots:
            logger.info("  Robots.txt:       respected")
        logger.info(f"  Headless:         {self.headless}")
        logger.info("=" * 60)
