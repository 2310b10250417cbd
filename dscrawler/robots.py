"""
Robots.txt Policy
Optional politeness layer: allow checks and crawl-delay per origin.
"""

import logging
from typing import Dict, Optional
from urllib.robotparser import RobotFileParser

import requests

from .utils import url_origin

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)


class RobotsPolicy:
    """
    Fetches robots.txt once per origin and answers allow / crawl-delay
    questions from the cached parser.

    A missing or unreachable robots.txt allows everything.

    Args:
        user_agent: Agent string matched against robots.txt groups
        timeout: Seconds to wait for robots.txt
        http: Object with a ``get(url, headers=, timeout=, allow_redirects=)``
            method; defaults to a ``requests.Session``
    """

    def __init__(self, user_agent: str = None, timeout: int = 10, http=None):
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.timeout = timeout
        self._http = http or requests.Session()
        self._parsers: Dict[str, Optional[RobotFileParser]] = {}

    def _parser_for(self, url: str) -> Optional[RobotFileParser]:
        origin = url_origin(url)
        if origin in self._parsers:
            return self._parsers[origin]

        robots_url = f"{origin}/robots.txt"
        parser = None
        try:
            logger.info(f"[ROBOTS] Fetching {robots_url}")
            response = self._http.get(
                robots_url,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
                allow_redirects=True,
            )
            if response.status_code == 200:
                parser = RobotFileParser()
                parser.set_url(robots_url)
                parser.parse(response.text.splitlines())
            else:
                logger.info(f"[ROBOTS] No robots.txt for {origin} (status: {response.status_code})")
        except requests.RequestException as e:
            logger.warning(f"[ROBOTS] Failed to fetch robots.txt for {origin}: {e}")

        self._parsers[origin] = parser
        return parser

    def can_fetch(self, url: str) -> bool:
        """True unless robots.txt for the URL's origin disallows it."""
        parser = self._parser_for(url)
        if parser is None:
            return True
        allowed = parser.can_fetch(self.user_agent, url)
        if not allowed:
            logger.info(f"[ROBOTS] Disallowed: {url}")
        return allowed

    def crawl_delay(self, url: str) -> Optional[float]:
        """Crawl-delay in seconds declared for our agent, if any."""
        parser = self._parser_for(url)
        if parser is None:
            return None
        delay = parser.crawl_delay(self.user_agent)
        return float(delay) if delay else None

    def clear(self) -> None:
        self._parsers.clear()
