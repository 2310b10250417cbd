"""
Design System Crawler
Drives one sequential crawl: seed validation, browser session lifecycle,
frontier loop, politeness delay, progress events and cooperative
cancellation.

Per-page failures become error records; only an invalid seed URL or a
browser launch failure reach the caller.
"""

import asyncio
import logging
import threading
from typing import Callable, List, Optional, Set

from .browser import BrowserSession
from .code_samples import CodeSampleDetector
from .fetcher import PageFetcher
from .frontier import Frontier, discover_links
from .models import CrawlProgress, CrawlSummary, ExtractedPage, new_id
from .robots import RobotsPolicy
from .run_config import CrawlerRunConfig
from .scraper import PageScraper
from .utils import ProgressTracker, normalize_url

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[CrawlProgress], None]


class CancellationToken:
    """
    Cooperative cancellation flag shared by the caller and the crawl.

    Thread-safe, so a UI thread or signal handler may cancel a crawl
    running on an event loop elsewhere.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class DesignSystemCrawler:
    """
    Crawls a design-system documentation site and returns one
    ``ExtractedPage`` per visited URL, in visit order.

    Args:
        config: Run configuration (defaults if None)
        session_factory: Zero-argument callable returning an async context
            manager whose value exposes ``.page``; defaults to a
            ``BrowserSession`` built from *config*
        robots: Robots policy used when ``config.respect_robots`` is set
        sleep: Coroutine used for rate-limit and retry delays
    """

    def __init__(
        self,
        config: CrawlerRunConfig = None,
        session_factory: Callable = None,
        robots: RobotsPolicy = None,
        sleep=asyncio.sleep,
    ):
        self.config = config or CrawlerRunConfig()
        self._session_factory = session_factory or self._browser_session
        self._robots = robots
        self._sleep = sleep
        self._cancel_token: Optional[CancellationToken] = None
        self.progress = ProgressTracker()

    def _browser_session(self) -> BrowserSession:
        cfg = self.config
        return BrowserSession(
            headless=cfg.headless,
            user_agent=cfg.user_agent,
            viewport_width=cfg.viewport_width,
            viewport_height=cfg.viewport_height,
            default_timeout_ms=cfg.navigation_timeout_ms,
        )

    def _scraper(self) -> PageScraper:
        return PageScraper(CodeSampleDetector(
            min_detect_length=self.config.min_detect_length,
            min_relevance=self.config.min_relevance,
        ))

    def stop(self) -> None:
        """Request graceful cancellation of the running crawl."""
        if self._cancel_token is not None:
            self._cancel_token.cancel()

    @staticmethod
    def _emit(on_progress: Optional[ProgressCallback], progress: CrawlProgress) -> None:
        if on_progress is None:
            return
        try:
            on_progress(progress)
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")

    async def _robots_setup(self, seed: str, rate_delay: float):
        if not self.config.respect_robots:
            return None, rate_delay
        robots = self._robots or RobotsPolicy(user_agent=self.config.user_agent)
        loop = asyncio.get_running_loop()
        crawl_delay = await loop.run_in_executor(None, robots.crawl_delay, seed)
        if crawl_delay and crawl_delay > rate_delay:
            logger.info(f"[ROBOTS] Crawl-delay {crawl_delay}s raises rate delay from {rate_delay}s")
            rate_delay = crawl_delay
        return robots, rate_delay

    async def _robots_allowed(self, robots, links: List[str], frontier: Frontier,
                              blocked: Set[str]) -> List[str]:
        """Drop links robots.txt disallows so they never take a frontier slot."""
        fresh = [link for link in links if link not in frontier and link not in blocked]
        if not fresh:
            return []
        loop = asyncio.get_running_loop()
        verdicts = await loop.run_in_executor(None, lambda: [robots.can_fetch(u) for u in fresh])
        allowed = []
        for link, ok in zip(fresh, verdicts):
            if ok:
                allowed.append(link)
            else:
                blocked.add(link)
                self.progress.increment_skipped()
        return allowed

    async def crawl(
        self,
        seed_url: str,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
        source_id: str = None,
    ) -> List[ExtractedPage]:
        """
        Crawl breadth-first from *seed_url*.

        Raises:
            ValueError: if *seed_url* is not a valid absolute http(s) URL
        """
        seed = normalize_url(seed_url, keep_fragment=False)
        cfg = self.config
        token = cancel_token or CancellationToken()
        self._cancel_token = token
        source_id = source_id or new_id("source")

        frontier = Frontier(seed, max_pages=cfg.max_pages)
        policy = cfg.link_policy(seed)
        records: List[ExtractedPage] = []
        blocked: Set[str] = set()

        logger.info("=" * 60)
        logger.info(f"Starting crawl: {seed}")
        logger.info("=" * 60)
        policy.log_scope()

        robots, rate_delay = await self._robots_setup(seed, cfg.rate_delay)
        loop = asyncio.get_running_loop()
        self.progress = ProgressTracker()
        self.progress.start()

        try:
            async with self._session_factory() as session:
                fetcher = PageFetcher(
                    session.page,
                    scraper=self._scraper(),
                    retry_policy=cfg.retry_policy(),
                    navigation_timeout_ms=cfg.navigation_timeout_ms,
                    settle_delay_ms=cfg.settle_delay_ms,
                    sleep=self._sleep,
                )

                while not token.cancelled:
                    url = frontier.pop()
                    if url is None:
                        break

                    if robots is not None:
                        allowed = await loop.run_in_executor(None, robots.can_fetch, url)
                        if not allowed:
                            self.progress.increment_skipped()
                            continue

                    logger.info(f"[FRONTIER] ({len(records) + 1}/{frontier.total_known}) {url}")
                    result = await fetcher.fetch(url, token)
                    if result.cancelled:
                        break

                    record = result.to_record()
                    records.append(record)
                    if record.ok:
                        self.progress.increment_crawled()
                    else:
                        self.progress.increment_failed()

                    if result.ok:
                        links = discover_links(result.links, url, policy)
                        if robots is not None:
                            links = await self._robots_allowed(robots, links, frontier, blocked)
                        added = frontier.extend(links)
                        if added:
                            logger.debug(f"[FRONTIER] +{added} new URLs ({frontier.pending} pending)")

                    self._emit(on_progress, CrawlProgress(
                        source_id=source_id,
                        pages_processed=len(records),
                        total_pages=frontier.total_known,
                        current_page=url,
                        components_found=self.progress.pages_crawled,
                    ))

                    if frontier and not token.cancelled and rate_delay > 0:
                        await self._sleep(rate_delay)
        finally:
            self.progress.finish()
            self._cancel_token = None

        stats = self.progress.get_stats()
        logger.info("=" * 60)
        if token.cancelled:
            logger.info("Crawl cancelled")
        logger.info(
            f"Crawl finished: {stats['pages_crawled']} ok, {stats['pages_failed']} failed, "
            f"{stats['pages_skipped']} skipped in {stats['elapsed_time']}s"
        )
        logger.info("=" * 60)
        return records

    def run(
        self,
        seed_url: str,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[ExtractedPage]:
        """Synchronous wrapper around :meth:`crawl`."""
        return asyncio.run(self.crawl(seed_url, on_progress, cancel_token))


async def crawl(
    seed_url: str,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    config: CrawlerRunConfig = None,
) -> List[ExtractedPage]:
    """Crawl *seed_url* with a fresh :class:`DesignSystemCrawler`."""
    return await DesignSystemCrawler(config).crawl(seed_url, on_progress, cancel_token)


def summarize(pages: List[ExtractedPage]) -> CrawlSummary:
    """Aggregate totals, detected languages and errors over crawl output."""
    return CrawlSummary.from_pages(pages)
