"""
Pipeline Orchestrator
=====================
End-to-end run: seed URL in, assembled PDF bytes out.

Stages::

    INIT → BROWSER_ACQUIRED → SEED_LOADED → LINKS_DISCOVERED
         → LIST_NORMALIZED → RENDERING → ASSEMBLING → SUCCEEDED

Any stage may move straight to FAILED.  The browser is released on every
exit path.  Render tasks are submitted in document-list order and their
results are consumed in that same order, so the final page order never
depends on render timing.  If any render fails, nothing is assembled.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from typing import Callable, Optional

from playwright.async_api import Error as PlaywrightError

from .assembler import assemble_document
from .browser import BrowserSession, navigate
from .discovery import discover_links
from .errors import ErrorKind, Result
from .limiter import RenderPool
from .models import AssembledDocument, PageArtifact, RunStage, SeedRequest
from .monitor import RenderMetrics, RenderMonitor, RenderTiming
from .renderer import render_page
from .run_config import RunConfig
from .utils import build_document_list

logger = logging.getLogger(__name__)


class SiteBookPipeline:
    """
    Usage::

        config = RunConfig()
        request = config.to_seed_request("https://docs.example.com/guide/").unwrap()
        result = SiteBookPipeline(config).run(request)
        if result.ok:
            Path("guide.pdf").write_bytes(result.value.data)
    """

    def __init__(
        self,
        config: Optional[RunConfig] = None,
        session_factory: Optional[Callable[[RunConfig], object]] = None,
    ):
        self.config = config or RunConfig()
        self._session_factory = session_factory or BrowserSession
        self.stage = RunStage.INIT
        self.stages_visited = [RunStage.INIT]
        self.monitor: Optional[RenderMonitor] = None
        self.metrics: Optional[RenderMetrics] = None
        self._progress_callback: Optional[Callable] = None

    def set_progress_callback(self, callback: Callable) -> None:
        """Set callback: callback(done, total, url)"""
        self._progress_callback = callback

    def _advance(self, stage: RunStage) -> None:
        logger.debug(f"[PIPELINE] {self.stage.value} → {stage.value}")
        self.stage = stage
        self.stages_visited.append(stage)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(self, request: SeedRequest) -> Result[AssembledDocument]:
        """Sync wrapper — run the async pipeline from synchronous code."""
        return asyncio.run(self.generate(request))

    async def generate(self, request: SeedRequest) -> Result[AssembledDocument]:
        """Run every stage for *request*; the browser is always released."""
        self.stage = RunStage.INIT
        self.stages_visited = [RunStage.INIT]
        self.monitor = RenderMonitor()

        session = self._session_factory(self.config)
        try:
            result = await self._run_stages(session, request)
        finally:
            await session.close()
            logger.debug("[PIPELINE] Browser released")
        self.metrics = await self.monitor.snapshot()

        if result.ok:
            self._advance(RunStage.SUCCEEDED)
            logger.info(
                f"[PIPELINE] Done: {len(result.value.links)} documents, "
                f"{result.value.page_count} pages"
            )
        else:
            failed_in = self.stage
            self._advance(RunStage.FAILED)
            logger.error(
                f"[PIPELINE] Failed during {failed_in.value}: {result.error.describe()}"
            )
        return result

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _run_stages(self, session, request: SeedRequest) -> Result[AssembledDocument]:
        opened = await session.open()
        if not opened.ok:
            return Result.from_failure(opened.error)
        self._advance(RunStage.BROWSER_ACQUIRED)

        try:
            discovered = await discover_links(
                session,
                request.main_url,
                request.pattern,
                timeout_ms=self.config.navigation_timeout_ms,
                on_loaded=lambda: self._advance(RunStage.SEED_LOADED),
            )
        except PlaywrightError as e:
            return Result.failure(ErrorKind.BROWSER_FAILURE, str(e), url=request.main_url)
        if not discovered.ok:
            return Result.from_failure(discovered.error)
        self._advance(RunStage.LINKS_DISCOVERED)

        documents = build_document_list(request.main_url, discovered.value)
        self._advance(RunStage.LIST_NORMALIZED)
        logger.info(
            f"[PIPELINE] {len(documents)} documents "
            f"({len(discovered.value)} matched links before dedup)"
        )

        self._advance(RunStage.RENDERING)
        self.monitor.start(total=len(documents))
        pool: RenderPool[PageArtifact] = RenderPool(request.concurrency_limit)
        for link in documents:
            pool.submit(lambda link=link: self._render_document(session, link, len(documents)))
        results = await pool.join()

        if pool.first_failure is not None:
            if pool.skipped:
                logger.info(f"[PIPELINE] {pool.skipped} renders not started after failure")
            return Result.from_failure(pool.first_failure)

        self._advance(RunStage.ASSEMBLING)
        artifacts = [r.value for r in results]
        return assemble_document(documents, artifacts)

    async def _render_document(self, session, link: str, total: int) -> Result[PageArtifact]:
        """Navigate, sanitize and print one document inside its own page."""
        timing = RenderTiming(url=link)
        t_start = time.monotonic()
        await self.monitor.render_started()
        try:
            async with session.page() as page:
                loaded = await navigate(page, link, self.config.navigation_timeout_ms)
                timing.navigate_ms = (time.monotonic() - t_start) * 1000
                if not loaded.ok:
                    result = Result.from_failure(loaded.error)
                else:
                    t_render = time.monotonic()
                    result = await render_page(page, link, self.config.navigation_timeout_ms)
                    timing.render_ms = (time.monotonic() - t_render) * 1000
        except PlaywrightError as e:
            logger.error(f"[RENDER] Browser error on {link}: {e}")
            result = Result.failure(ErrorKind.BROWSER_FAILURE, str(e), url=link)
        except Exception as e:
            # Must not escape into the pool; siblings still hold pages
            logger.exception(f"[RENDER] Unexpected error on {link}: {e}")
            result = Result.failure(ErrorKind.RENDER_FAILURE, f"{type(e).__name__}: {e}", url=link)

        timing.total_ms = (time.monotonic() - t_start) * 1000
        if result.ok:
            timing.page_count = result.value.page_count
            timing.bytes = len(result.value.data)
        elif result.error.kind == ErrorKind.NAVIGATION_TIMEOUT:
            timing.status = "timeout"
        else:
            timing.status = "failed"
        await self.monitor.render_finished(timing)

        if result.ok:
            logger.info(
                f"[RENDER] Generated PDF for {link} "
                f"({timing.page_count} pages, {timing.total_ms:.0f} ms)"
            )
            if self._progress_callback:
                metrics = await self.monitor.snapshot()
                self._progress_callback(metrics.documents_rendered, total, link)
        return result


async def generate_pdf(
    main_url: Optional[str],
    pattern_text: Optional[str] = None,
    concurrency: Optional[int] = None,
    config: Optional[RunConfig] = None,
    session_factory: Optional[Callable[[RunConfig], object]] = None,
) -> Result[AssembledDocument]:
    """
    One-call convenience: validate inputs, then run the pipeline.

    Input errors (missing URL, bad pattern, bad concurrency) are returned
    before any browser is launched.
    """
    config = config or RunConfig()
    if concurrency is not None:
        config = replace(config, concurrency=concurrency)
    request = config.to_seed_request(main_url, pattern_text)
    if not request.ok:
        logger.error(f"[PIPELINE] Invalid input: {request.error.describe()}")
        return Result.from_failure(request.error)
    return await SiteBookPipeline(config, session_factory).generate(request.value)
