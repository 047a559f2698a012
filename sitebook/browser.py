"""
Browser Session
===============
Owns the shared Playwright browser for one run.

- One browser, one ``BrowserContext``; every document gets its own page
- Route-based blocking of images, stylesheets, fonts and media (load speed
  only — the DOM that results is unchanged)
- ``page()`` is a scoped acquisition: the page is closed on every exit path
- ``navigate()`` maps Playwright navigation errors onto result kinds
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from .errors import ErrorKind, Result

if TYPE_CHECKING:
    from .run_config import RunConfig

logger = logging.getLogger(__name__)

_LAUNCH_ARGS = [
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


async def navigate(page: Page, url: str, timeout_ms: int) -> Result[None]:
    """Load *url* and wait for the network to go idle, within *timeout_ms*."""
    try:
        await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
    except PlaywrightTimeout as e:
        logger.error(f"[NAVIGATE] Timeout after {timeout_ms}ms: {url}")
        return Result.failure(ErrorKind.NAVIGATION_TIMEOUT, str(e), url=url)
    except PlaywrightError as e:
        logger.error(f"[NAVIGATE] Failed: {url} — {e}")
        return Result.failure(ErrorKind.NAVIGATION_FAILURE, str(e), url=url)
    return Result.success(None)


class BrowserSession:
    """
    Shared browser resource, opened once and released once per run.

    Usage::

        session = BrowserSession(config)
        opened = await session.open()
        try:
            async with session.page() as page:
                ...
        finally:
            await session.close()
    """

    def __init__(self, config: "RunConfig"):
        self.config = config
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._blocked = frozenset(config.blocked_resource_types)

    @property
    def is_open(self) -> bool:
        return self._context is not None

    async def open(self) -> Result[None]:
        """Launch Chromium and create the shared context."""
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                executable_path=self.config.executable_path or None,
                args=_LAUNCH_ARGS,
            )
            self._context = await self._browser.new_context(
                user_agent=self.config.user_agent,
                viewport={
                    'width': self.config.viewport_width,
                    'height': self.config.viewport_height,
                },
            )
            if self._blocked:
                await self._context.route("**/*", self._route_handler)
        except PlaywrightError as e:
            logger.error(f"[BROWSER] Launch failed: {e}")
            await self.close()
            return Result.failure(ErrorKind.BROWSER_FAILURE, f"browser launch failed: {e}")

        logger.info(
            f"[BROWSER] Chromium started (headless={self.config.headless}, "
            f"blocking={','.join(sorted(self._blocked)) or 'none'})"
        )
        return Result.success(None)

    async def _route_handler(self, route) -> None:
        """Abort blocked resource classes, let everything else through."""
        if route.request.resource_type in self._blocked:
            await route.abort()
            return
        await route.continue_()

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Open a page that is closed when the block exits, however it exits."""
        if self._context is None:
            raise RuntimeError("BrowserSession.page() called before open()")
        page = await self._context.new_page()
        try:
            yield page
        finally:
            try:
                await page.close()
            except PlaywrightError as e:
                logger.debug(f"[BROWSER] Page close failed: {e}")

    async def close(self) -> None:
        """Release context, browser and Playwright. Safe to call twice."""
        if self._context:
            try:
                await self._context.close()
            except PlaywrightError as e:
                logger.debug(f"[BROWSER] Context close failed: {e}")
            self._context = None
        if self._browser:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                logger.debug(f"[BROWSER] Browser close failed: {e}")
            self._browser = None
        if self._playwright:
            try:
                await self._playwright.stop()
            except PlaywrightError as e:
                logger.debug(f"[BROWSER] Playwright stop failed: {e}")
            self._playwright = None
