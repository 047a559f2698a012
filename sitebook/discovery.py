"""
Link Discovery
==============
Loads the seed document and returns the anchors whose resolved href
matches the run's pattern.  One hop only — discovered pages are never
themselves scanned for links.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Pattern

from playwright.async_api import Error as PlaywrightError

from .browser import navigate
from .errors import ErrorKind, Result

logger = logging.getLogger(__name__)

DEFAULT_NAVIGATION_TIMEOUT_MS = 30_000

# ``a.href`` (not the attribute) so the browser resolves relative links
_COLLECT_HREFS_JS = """
() => Array.from(document.querySelectorAll('a[href]')).map((a) => a.href)
"""


def filter_links(hrefs: List[str], pattern: Pattern[str]) -> List[str]:
    """Keep hrefs matching *pattern*, in document order (duplicates kept)."""
    return [href for href in hrefs if isinstance(href, str) and pattern.search(href)]


async def discover_links(
    session,
    seed_url: str,
    pattern: Pattern[str],
    timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
    on_loaded: Optional[Callable[[], None]] = None,
) -> Result[List[str]]:
    """
    Load *seed_url* and collect matching anchor hrefs.

    Args:
        session:    Open ``BrowserSession`` (or anything with a ``page()`` scope)
        seed_url:   Document to scan
        pattern:    Compiled link pattern; matched with ``search``
        timeout_ms: Navigation deadline
        on_loaded:  Called once the seed document has finished loading

    Returns:
        Matching hrefs in document order, or a NAVIGATION_* failure
    """
    async with session.page() as page:
        loaded = await navigate(page, seed_url, timeout_ms)
        if not loaded.ok:
            return Result.from_failure(loaded.error)
        if on_loaded:
            on_loaded()

        try:
            hrefs = await page.evaluate(_COLLECT_HREFS_JS)
        except PlaywrightError as e:
            logger.error(f"[DISCOVER] Could not read anchors on {seed_url}: {e}")
            return Result.failure(ErrorKind.NAVIGATION_FAILURE, str(e), url=seed_url)

    matches = filter_links(hrefs or [], pattern)
    logger.info(
        f"[DISCOVER] {len(hrefs or [])} anchors on seed, "
        f"{len(matches)} match {pattern.pattern!r}"
    )
    return Result.success(matches)
