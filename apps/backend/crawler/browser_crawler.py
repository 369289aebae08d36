"""
Browser-based fetch using Playwright for JavaScript-rendered job pages.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional
from playwright.async_api import async_playwright, Page, Error as PlaywrightError

from core.errors import WorkerError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)
DEFAULT_TIMEOUT_MS = 30000


class BrowserCrawler:
    """Use a headless browser for pages that block plain HTTP fetches"""

    def __init__(
        self,
        playwright_factory: Optional[Callable] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_ms: int = DEFAULT_TIMEOUT_MS
    ):
        """
        Args:
            playwright_factory: Returns an async context manager yielding a
                Playwright instance (defaults to async_playwright)
            user_agent: User agent for the browser context
            timeout_ms: Navigation timeout in milliseconds
        """
        self.playwright_factory = playwright_factory or async_playwright
        self.user_agent = user_agent
        self.timeout_ms = timeout_ms

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Page]:
        """
        Launch a fresh browser and page for one request.

        Page, context and browser are closed on every exit path.
        """
        async with self.playwright_factory() as p:
            browser = await p.chromium.launch(headless=True)
            try:
                context = await browser.new_context(
                    user_agent=self.user_agent,
                    extra_http_headers={
                        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
                        'Accept-Language': 'en-US,en;q=0.9'
                    }
                )
                try:
                    page = await context.new_page()
                    try:
                        yield page
                    finally:
                        await page.close()
                finally:
                    await context.close()
            finally:
                await browser.close()
                logger.debug("[browser] Browser closed")

    async def fetch_html(self, url: str) -> str:
        """
        Fetch fully rendered HTML.

        Raises:
            WorkerError: if the browser cannot launch or navigation fails
        """
        try:
            async with self.open_page() as page:
                # Navigate with networkidle wait
                await page.goto(url, wait_until='networkidle', timeout=self.timeout_ms)
                html = await page.content()
        except PlaywrightError as e:
            logger.error(f"[browser] Browser fetch failed for {url}: {e}")
            raise WorkerError(str(e)) from e

        logger.info(f"[browser] Rendered {len(html)} characters from {url}")
        return html
