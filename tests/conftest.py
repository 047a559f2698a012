"""
Shared fakes for the sitebook test-suite.

``FakeSite`` describes what each URL serves; ``FakeSession`` / ``FakePage``
stand in for the Playwright collaborator so the pipeline can be exercised
without a browser.  PDFs are real, generated with reportlab, so the
assembler and page counting run against genuine files.
"""

import asyncio
import io
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout
from reportlab.pdfgen import canvas

from sitebook.errors import ErrorKind, Result
from sitebook.utils import normalize_url


def make_pdf(page_texts: List[str]) -> bytes:
    """One PDF page per entry, each carrying its text at a fixed spot."""
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=(595, 842))
    for text in page_texts:
        pdf.setFont("Helvetica", 12)
        pdf.drawString(72, 720, text)
        pdf.showPage()
    pdf.save()
    return buf.getvalue()


@dataclass
class FakeDocument:
    html: str = "<html><body><h1>Title</h1><p>Body text</p></body></html>"
    links: List[str] = field(default_factory=list)
    pages: int = 1
    delay: float = 0.0
    timeout: bool = False
    crash: bool = False
    explode: bool = False


class FakeSite:
    """URL → FakeDocument, looked up by normalized URL."""

    def __init__(self, documents: Optional[Dict[str, FakeDocument]] = None):
        self.documents: Dict[str, FakeDocument] = {}
        self.navigations: List[str] = []
        for url, doc in (documents or {}).items():
            self.add(url, doc)

    def add(self, url: str, doc: FakeDocument) -> None:
        self.documents[normalize_url(url)] = doc

    def lookup(self, url: str) -> Optional[FakeDocument]:
        return self.documents.get(normalize_url(url))


class FakePage:
    def __init__(self, site: FakeSite):
        self.site = site
        self.url = "about:blank"
        self.closed = False
        self.goto_kwargs = {}
        self.pdf_kwargs = {}
        self.set_content_html = None
        self._doc: Optional[FakeDocument] = None

    async def goto(self, url, **kwargs):
        self.goto_kwargs = kwargs
        self.site.navigations.append(url)
        doc = self.site.lookup(url)
        if doc is None:
            raise PlaywrightError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        if doc.delay:
            await asyncio.sleep(doc.delay)
        if doc.timeout:
            raise PlaywrightTimeout(f"Timeout {kwargs.get('timeout')}ms exceeded.")
        self.url = url
        self._doc = doc

    async def evaluate(self, script):
        return list(self._doc.links)

    async def content(self):
        return self._doc.html

    async def set_content(self, html, **kwargs):
        self.set_content_html = html

    async def pdf(self, **kwargs):
        self.pdf_kwargs = kwargs
        if self._doc.crash:
            raise PlaywrightError("Target page, context or browser has been closed")
        if self._doc.explode:
            raise RuntimeError("renderer bug")
        await asyncio.sleep(0)
        return make_pdf([f"DOC {normalize_url(self.url)}"] * self._doc.pages)

    async def close(self):
        self.closed = True


class FakeSession:
    """Mimics ``BrowserSession``: open/close plus a scoped ``page()``."""

    def __init__(self, site: FakeSite, fail_open: bool = False):
        self.site = site
        self.fail_open = fail_open
        self.opened = False
        self.closed = False
        self.pages: List[FakePage] = []
        self.open_pages = 0
        self.peak_open_pages = 0

    async def open(self):
        if self.fail_open:
            return Result.failure(ErrorKind.BROWSER_FAILURE, "browser launch failed")
        self.opened = True
        return Result.success(None)

    async def close(self):
        self.closed = True

    @asynccontextmanager
    async def page(self):
        page = FakePage(self.site)
        self.pages.append(page)
        self.open_pages += 1
        self.peak_open_pages = max(self.peak_open_pages, self.open_pages)
        try:
            yield page
        finally:
            await page.close()
            self.open_pages -= 1


class SessionFactory:
    """Records every session the pipeline asks for."""

    def __init__(self, site: FakeSite, fail_open: bool = False):
        self.site = site
        self.fail_open = fail_open
        self.sessions: List[FakeSession] = []

    def __call__(self, config):
        session = FakeSession(self.site, fail_open=self.fail_open)
        self.sessions.append(session)
        return session


@pytest.fixture
def site():
    return FakeSite()


@pytest.fixture
def session_factory(site):
    return SessionFactory(site)
