"""
Browser Session
One headless Chromium browser, context and page shared by a whole crawl.
"""

import logging

from playwright.async_api import async_playwright

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    '--disable-gpu',
    '--no-sandbox',
    '--disable-dev-shm-usage',
    '--disable-background-networking',
    '--disable-default-apps',
    '--disable-extensions',
    '--disable-sync',
    '--disable-translate',
    '--no-first-run',
]


class BrowserSession:
    """
    Async context manager around a Playwright browser.

    ``open()`` launches the browser; launch errors propagate to the caller.
    ``close()`` is idempotent, so the session is torn down exactly once
    however the crawl ends.

    Usage::

        async with BrowserSession(headless=True) as session:
            await session.page.goto(url)
    """

    def __init__(
        self,
        headless: bool = True,
        user_agent: str = None,
        viewport_width: int = 1200,
        viewport_height: int = 800,
        default_timeout_ms: int = 30000,
    ):
        self.headless = headless
        self.user_agent = user_agent
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.default_timeout_ms = default_timeout_ms

        self._playwright = None
        self._browser = None
        self._context = None
        self.page = None
        self._closed = False

    async def open(self) -> "BrowserSession":
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=LAUNCH_ARGS,
            )
            ctx_kwargs = dict(
                viewport={'width': self.viewport_width, 'height': self.viewport_height},
            )
            if self.user_agent:
                ctx_kwargs['user_agent'] = self.user_agent
            self._context = await self._browser.new_context(**ctx_kwargs)
            self._context.set_default_timeout(self.default_timeout_ms)
            self.page = await self._context.new_page()
        except Exception:
            await self.close()
            raise

        logger.info(
            f"Playwright browser initialized (headless={self.headless}, "
            f"viewport={self.viewport_width}x{self.viewport_height})"
        )
        return self

    async def close(self) -> None:
        """Close page, context, browser and Playwright. Safe to call twice."""
        if self._closed:
            return
        self._closed = True

        for name in ('page', '_context', '_browser'):
            resource = getattr(self, name)
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.debug(f"Error closing {name.strip('_')}: {e}")
            setattr(self, name, None)

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.debug(f"Error stopping Playwright: {e}")
            self._playwright = None

        logger.info("Browser closed")

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> "BrowserSession":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
