"""
Browser-based renderer using Playwright.

This module provides a BrowserRenderer class that renders pages with or without
JavaScript execution. Each render runs in its own isolated browser context,
which is closed on every exit path.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Literal, Optional

from ssr_audit.browser_config import DEFAULT_CONFIG, BrowserConfig
from ssr_audit.constants import ROOT_RELATIVE_LINK_SELECTOR
from ssr_audit.exceptions import RenderError
from ssr_audit.models import RenderCapture
from ssr_audit.text_extraction import extract_visible_text

logger = logging.getLogger(__name__)

WaitUntil = Literal["load", "domcontentloaded", "networkidle", "commit"]

# Collects root-relative anchors from the live DOM, deduplicated in order
SCRAPE_LINKS_SCRIPT = """
(selector) => {
    const seen = new Set();
    const links = [];
    for (const a of document.querySelectorAll(selector)) {
        const href = new URL(a.getAttribute('href'), window.location.origin).href;
        if (!seen.has(href)) {
            seen.add(href);
            links.push(href);
        }
    }
    return links;
}
"""


class BrowserRenderer:
    """
    Playwright-based renderer for scripted and non-scripted page captures.

    This class is designed to be used as an async context manager, managing
    its own browser lifecycle:

        async with BrowserRenderer(config) as renderer:
            capture = await renderer.render("https://example.com")
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        """
        Initialize the renderer.

        Args:
            config: BrowserConfig instance; DEFAULT_CONFIG when omitted
        """
        self._config = config or DEFAULT_CONFIG
        self._playwright = None
        self._browser = None

        logger.debug(f"BrowserRenderer initialized with config: {self._config}")

    @property
    def config(self) -> BrowserConfig:
        return self._config

    async def __aenter__(self) -> "BrowserRenderer":
        """Enter async context manager, launching browser."""
        from playwright.async_api import async_playwright

        logger.info(f"Launching {self._config.browser_type} browser (headless={self._config.headless})")

        self._playwright = await async_playwright().start()
        browser_launcher = getattr(self._playwright, self._config.browser_type)

        launch_options = {"headless": self._config.headless}
        if self._config.launch_args:
            launch_options["args"] = self._config.launch_args

        self._browser = await browser_launcher.launch(**launch_options)

        logger.info("Browser launched successfully")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager, closing browser."""
        if self._browser:
            logger.info("Closing browser")
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    @asynccontextmanager
    async def open_page(
        self,
        url: Optional[str] = None,
        javascript_enabled: bool = True,
        wait_until: WaitUntil = "networkidle",
    ) -> AsyncIterator:
        """
        Open a page in a fresh context, optionally navigating to a URL.

        The context is closed when the block exits, whether or not it raised.

        Raises:
            RuntimeError: If browser is not running (not in context manager)
            RenderError: If navigation fails
        """
        if not self._browser:
            raise RuntimeError(
                "Browser is not running. Use BrowserRenderer as an async context manager: "
                "async with BrowserRenderer(config) as renderer:"
            )

        context = await self._browser.new_context(
            **self._config.context_options(javascript_enabled)
        )
        try:
            page = await context.new_page()
            if url is not None:
                try:
                    await page.goto(url, wait_until=wait_until, timeout=self._config.timeout)
                except Exception as e:
                    raise RenderError(url, e) from e
            yield page
        finally:
            await context.close()

    async def render(
        self,
        url: str,
        javascript_enabled: bool = True,
        wait_until: WaitUntil = "networkidle",
        settle_delay_ms: int = 0,
        capture_title: bool = False,
    ) -> RenderCapture:
        """
        Render a URL and capture its HTML and visible text.

        Args:
            url: URL to render
            javascript_enabled: Whether scripts run in the page
            wait_until: Navigation wait condition
            settle_delay_ms: Extra wait after navigation completes
            capture_title: Also read document.title

        Returns:
            RenderCapture with the serialized DOM

        Raises:
            RenderError: If navigation or capture fails
        """
        mode = "with" if javascript_enabled else "without"
        logger.info(f"Rendering {url} {mode} JavaScript")

        async with self.open_page(url, javascript_enabled, wait_until) as page:
            try:
                if settle_delay_ms:
                    await asyncio.sleep(settle_delay_ms / 1000)
                html = await page.content()
                title = await page.title() if capture_title else None
            except Exception as e:
                raise RenderError(url, e) from e

        return RenderCapture(
            url=url,
            html=html,
            text=extract_visible_text(html),
            javascript_enabled=javascript_enabled,
            title=title,
        )

    async def scrape_links(self, url: str) -> List[str]:
        """
        Collect root-relative links from the fully rendered page.

        Catches links injected by client-side scripts that a static fetch misses.

        Raises:
            RenderError: If navigation or evaluation fails
        """
        async with self.open_page(url, javascript_enabled=True, wait_until="networkidle") as page:
            try:
                links = await page.evaluate(SCRAPE_LINKS_SCRIPT, ROOT_RELATIVE_LINK_SELECTOR)
            except Exception as e:
                raise RenderError(url, e) from e

        logger.info(f"Scraped {len(links)} internal links from {url}")
        return list(links)
