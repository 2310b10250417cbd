"""
Page Fetch/Retry Controller
Renders one URL in the shared browser page, runs the scraper over the
rendered DOM and retries failed attempts up to a fixed bound.

Per-page failures never raise: the caller always gets a ``PageResult``.
"""

import asyncio
import logging
import time
from dataclasses import dataclass

from .models import ExtractedPage, PageError, PageResult, new_id
from .scraper import PageScraper

logger = logging.getLogger(__name__)

# HTTP status codes that count as a failed attempt
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attempt bound and delay schedule.

    ``backoff == 1`` gives a fixed delay between attempts; larger values
    grow it exponentially.
    """
    max_attempts: int = 3
    delay: float = 1.0
    backoff: float = 1.0

    def delay_before(self, attempt: int) -> float:
        """Seconds to wait before *attempt* (1-indexed; the first is immediate)."""
        if attempt <= 1:
            return 0.0
        return max(0.0, self.delay * (self.backoff ** (attempt - 2)))


class PageFetcher:
    """
    Fetches and extracts one URL at a time with bounded retries.

    Args:
        page: Playwright page (or any object with ``goto``,
            ``wait_for_timeout`` and ``content`` coroutines)
        scraper: Extractor pipeline run over the rendered HTML
        retry_policy: Attempt bound and delay schedule
        navigation_timeout_ms: Hard bound per navigation attempt
        settle_delay_ms: Extra wait after network idle for late DOM updates
        sleep: Coroutine used for retry delays
    """

    def __init__(
        self,
        page,
        scraper: PageScraper = None,
        retry_policy: RetryPolicy = None,
        navigation_timeout_ms: int = 30000,
        settle_delay_ms: int = 1000,
        sleep=asyncio.sleep,
    ):
        self.page = page
        self.scraper = scraper or PageScraper()
        self.retry_policy = retry_policy or RetryPolicy()
        self.navigation_timeout_ms = navigation_timeout_ms
        self.settle_delay_ms = settle_delay_ms
        self._sleep = sleep

    async def _render(self, url: str) -> str:
        response = await self.page.goto(
            url,
            wait_until="networkidle",
            timeout=self.navigation_timeout_ms,
        )
        status = getattr(response, 'status', None)
        if status in RETRYABLE_STATUS_CODES:
            raise RuntimeError(f"HTTP {status} for {url}")
        if self.settle_delay_ms > 0:
            await self.page.wait_for_timeout(self.settle_delay_ms)
        return await self.page.content()

    async def fetch(self, url: str, cancel_token=None) -> PageResult:
        """
        Render and extract *url*.

        Returns a successful ``PageResult``, one carrying a ``PageError``
        after the last attempt failed, or a cancelled one if the token was
        set before a retry.
        """
        policy = self.retry_policy
        start = time.monotonic()
        last_error = "Unknown error"

        for attempt in range(1, policy.max_attempts + 1):
            if attempt > 1:
                if cancel_token is not None and cancel_token.cancelled:
                    logger.info(f"[FETCH] Cancelled before retry: {url[:80]}")
                    return PageResult(url=url, attempts=attempt - 1, cancelled=True)
                delay = policy.delay_before(attempt)
                if delay > 0:
                    await self._sleep(delay)
                logger.info(f"[RETRY] {url[:60]} — attempt {attempt}/{policy.max_attempts}")

            try:
                html = await self._render(url)
                content = self.scraper.scrape(html, url)
            except Exception as e:
                last_error = str(e) or type(e).__name__
                logger.warning(
                    f"[FETCH] Attempt {attempt}/{policy.max_attempts} failed for "
                    f"{url[:80]}: {last_error[:200]}"
                )
                continue

            render_time = int((time.monotonic() - start) * 1000)
            page = ExtractedPage(
                id=new_id("page"),
                url=url,
                text_content=content.text_content,
                semantic_content=content.semantic_content,
                metadata=content.metadata,
                code_samples=content.code_samples,
                render_time=render_time,
            )
            logger.debug(f"[FETCH] {url[:80]} rendered in {render_time}ms")
            return PageResult(url=url, page=page, links=content.links, attempts=attempt)

        logger.error(f"[FETCH] Giving up on {url[:80]} after {policy.max_attempts} attempts")
        return PageResult(
            url=url,
            error=PageError(url=url, message=last_error, attempts=policy.max_attempts),
            attempts=policy.max_attempts,
        )
