"""
Page Renderer
=============
Turns one loaded page into a paginated PDF artifact.

The live DOM is serialized, passed through ``sanitize_html`` and loaded
back into the same page before printing, so the printed page is exactly
the sanitized skeleton.
"""

from __future__ import annotations

import io
import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .errors import ErrorKind, Result
from .models import PageArtifact
from .sanitizer import sanitize_html

logger = logging.getLogger(__name__)

# Fixed layout: A4, 20px margins, no header/footer, no CSS page sizing
PDF_OPTIONS = {
    'format': 'A4',
    'print_background': True,
    'margin': {'top': '20px', 'right': '20px', 'bottom': '20px', 'left': '20px'},
    'prefer_css_page_size': False,
    'scale': 1,
    'display_header_footer': False,
}


def count_pages(data: bytes) -> Result[int]:
    """Number of pages in a PDF byte string."""
    try:
        return Result.success(len(PdfReader(io.BytesIO(data)).pages))
    except (PyPdfError, ValueError) as e:
        return Result.failure(ErrorKind.RENDER_FAILURE, f"unreadable PDF output: {e}")


async def render_page(page: Page, source_link: str, timeout_ms: int = 30_000) -> Result[PageArtifact]:
    """
    Sanitize the document currently loaded in *page* and print it to PDF.

    Args:
        page:        Page that has already navigated to the document
        source_link: Normalized document-list entry the artifact belongs to
        timeout_ms:  Deadline for reloading the sanitized markup

    Returns:
        ``PageArtifact`` or a RENDER_FAILURE
    """
    try:
        html = await page.content()
        sanitized = sanitize_html(html, page.url or source_link)
        await page.set_content(sanitized, wait_until="load", timeout=timeout_ms)
        data = await page.pdf(**PDF_OPTIONS)
    except PlaywrightError as e:
        logger.error(f"[RENDER] Failed: {source_link} — {e}")
        return Result.failure(ErrorKind.RENDER_FAILURE, str(e), url=source_link)

    pages = count_pages(data)
    if not pages.ok:
        return Result.failure(ErrorKind.RENDER_FAILURE, pages.error.message, url=source_link)

    return Result.success(PageArtifact(
        source_link=source_link,
        data=bytes(data),
        page_count=pages.value,
    ))
