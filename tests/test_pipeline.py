"""
End-to-end pipeline tests against the fake browser session.

Covers the run state machine, ordering under uneven render times, the
concurrency bound, all-or-nothing failure and browser release on every
exit path.
"""

import asyncio
import io

import pytest
from pypdf import PdfReader

from conftest import FakeDocument, SessionFactory
from sitebook.errors import ErrorKind
from sitebook.models import RunStage
from sitebook.pipeline import SiteBookPipeline, generate_pdf
from sitebook.run_config import RunConfig

SEED = "https://docs.example.com/guide/"
A = "https://docs.example.com/guide/a"
B = "https://docs.example.com/guide/b"
C = "https://docs.example.com/guide/c"


@pytest.fixture
def docs_site(site):
    site.add(SEED, FakeDocument(links=[A, "https://other.com/x", B, f"{A}#part", f"{B}/", C]))
    site.add(A, FakeDocument(pages=2))
    site.add(B, FakeDocument())
    site.add(C, FakeDocument(pages=3))
    site.add("https://other.com/x", FakeDocument())
    return site


def _run(session_factory, concurrency=2, pattern=None):
    config = RunConfig(concurrency=concurrency)
    request = config.to_seed_request(SEED, pattern).unwrap()
    pipeline = SiteBookPipeline(config, session_factory)
    return pipeline, pipeline.run(request)


def _page_texts(data):
    return [page.extract_text() for page in PdfReader(io.BytesIO(data)).pages]


class TestSuccessfulRun:

    def test_documents_and_pages(self, docs_site, session_factory):
        pipeline, result = _run(session_factory)
        assert result.ok
        doc = result.value
        assert doc.links == ("https://docs.example.com/guide", A, B, C)
        assert doc.page_count == 1 + 1 + 2 + 1 + 3

    def test_default_pattern_excludes_other_hosts(self, docs_site, session_factory):
        _run(session_factory)
        assert "https://other.com/x" not in docs_site.navigations

    def test_page_order_follows_document_list(self, docs_site, session_factory):
        _, result = _run(session_factory)
        texts = _page_texts(result.value.data)
        assert "1. https://docs.example.com/guide" in texts[0]
        expected = ["https://docs.example.com/guide", A, A, B, C, C, C]
        for text, link in zip(texts[1:], expected):
            assert f"DOC {link}" in text

    def test_uneven_render_times_keep_order(self, docs_site, session_factory):
        """The first sub-page is slowest; it still comes first after the seed."""
        docs_site.add(A, FakeDocument(pages=2, delay=0.1))
        _, result = _run(session_factory, concurrency=4)
        texts = _page_texts(result.value.data)
        assert f"DOC {A}" in texts[2]
        assert f"DOC {B}" in texts[4]

    def test_stages_in_order(self, docs_site, session_factory):
        pipeline, _ = _run(session_factory)
        assert pipeline.stages_visited == [
            RunStage.INIT,
            RunStage.BROWSER_ACQUIRED,
            RunStage.SEED_LOADED,
            RunStage.LINKS_DISCOVERED,
            RunStage.LIST_NORMALIZED,
            RunStage.RENDERING,
            RunStage.ASSEMBLING,
            RunStage.SUCCEEDED,
        ]

    def test_concurrency_bound(self, docs_site, session_factory):
        for delay_url in (A, B, C):
            docs_site.documents[delay_url.rstrip("/")].delay = 0.02
        _run(session_factory, concurrency=2)
        session = session_factory.sessions[0]
        assert session.peak_open_pages <= 2

    def test_browser_and_pages_released(self, docs_site, session_factory):
        _run(session_factory)
        session = session_factory.sessions[0]
        assert session.closed
        assert session.open_pages == 0
        assert all(page.closed for page in session.pages)

    def test_custom_pattern(self, docs_site, session_factory):
        _, result = _run(session_factory, pattern=r"/guide/(a|c)$")
        assert result.value.links == ("https://docs.example.com/guide", A, C)

    def test_progress_and_metrics(self, docs_site, session_factory):
        config = RunConfig(concurrency=2)
        pipeline = SiteBookPipeline(config, session_factory)
        calls = []
        pipeline.set_progress_callback(lambda done, total, url: calls.append((done, total, url)))
        pipeline.run(config.to_seed_request(SEED).unwrap())
        assert sorted(done for done, _, _ in calls) == [1, 2, 3, 4]
        assert all(total == 4 for _, total, _ in calls)
        assert pipeline.metrics.documents_rendered == 4
        assert pipeline.metrics.pages_produced == 7


class TestFailures:

    def test_one_timeout_fails_whole_run(self, docs_site, session_factory):
        docs_site.add(B, FakeDocument(timeout=True))
        pipeline, result = _run(session_factory)
        assert not result.ok
        assert result.error.kind == ErrorKind.NAVIGATION_TIMEOUT
        assert result.error.url == B
        assert pipeline.stage == RunStage.FAILED
        assert RunStage.ASSEMBLING not in pipeline.stages_visited

        session = session_factory.sessions[0]
        assert session.closed
        assert session.open_pages == 0
        assert all(page.closed for page in session.pages)

    def test_seed_timeout(self, docs_site, session_factory):
        docs_site.add(SEED, FakeDocument(timeout=True))
        pipeline, result = _run(session_factory)
        assert result.error.kind == ErrorKind.NAVIGATION_TIMEOUT
        assert pipeline.stages_visited == [RunStage.INIT, RunStage.BROWSER_ACQUIRED, RunStage.FAILED]
        assert session_factory.sessions[0].closed

    def test_render_crash(self, docs_site, session_factory):
        docs_site.add(C, FakeDocument(crash=True))
        _, result = _run(session_factory)
        assert result.error.kind == ErrorKind.RENDER_FAILURE
        assert result.error.url == C

    def test_unexpected_render_error_is_contained(self, docs_site, session_factory):
        """A non-browser exception in one render becomes a failure, not a crash."""
        docs_site.add(A, FakeDocument(explode=True))
        docs_site.add(B, FakeDocument(delay=0.05))
        pipeline, result = _run(session_factory, concurrency=3)
        assert result.error.kind == ErrorKind.RENDER_FAILURE
        assert result.error.url == A
        assert "RuntimeError" in result.error.message
        assert pipeline.stage == RunStage.FAILED

        session = session_factory.sessions[0]
        assert session.closed
        assert session.open_pages == 0
        assert all(page.closed for page in session.pages)

    def test_browser_launch_failure(self, docs_site):
        factory = SessionFactory(docs_site, fail_open=True)
        pipeline, result = _run(factory)
        assert result.error.kind == ErrorKind.BROWSER_FAILURE
        assert pipeline.stages_visited == [RunStage.INIT, RunStage.FAILED]
        assert factory.sessions[0].closed
        assert docs_site.navigations == []


class TestGeneratePdf:

    def test_bad_pattern_needs_no_browser(self, docs_site, session_factory):
        result = asyncio.run(generate_pdf(SEED, "(unterminated", session_factory=session_factory))
        assert result.error.kind == ErrorKind.PATTERN_COMPILE_ERROR
        assert session_factory.sessions == []

    def test_missing_url(self, session_factory):
        result = asyncio.run(generate_pdf(None, session_factory=session_factory))
        assert result.error.kind == ErrorKind.MISSING_ARGUMENT
        assert session_factory.sessions == []

    def test_bad_concurrency(self, session_factory):
        result = asyncio.run(generate_pdf(SEED, concurrency=0, session_factory=session_factory))
        assert result.error.kind == ErrorKind.INVALID_ARGUMENT
        assert session_factory.sessions == []

    def test_end_to_end(self, docs_site, session_factory):
        result = asyncio.run(generate_pdf(SEED, concurrency=3, session_factory=session_factory))
        assert result.ok
        assert result.value.page_count == 8
