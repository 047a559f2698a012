"""
Render Monitor
==============
Metrics for the per-document render phase.

Tracks:
- Documents rendered / failed
- Active and peak concurrent renders
- Per-document timing (navigate, render, total; avg + p95)
- PDF pages and bytes produced

All methods take an ``asyncio.Lock`` so render tasks can report freely.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)


@dataclass
class RenderTiming:
    """Timing breakdown for one document."""
    url: str = ""
    navigate_ms: float = 0.0
    render_ms: float = 0.0
    total_ms: float = 0.0
    page_count: int = 0
    bytes: int = 0
    status: str = "ok"   # ok | failed | timeout


@dataclass
class RenderMetrics:
    """Snapshot of render metrics at a point in time."""
    documents_total: int = 0
    documents_rendered: int = 0
    documents_failed: int = 0
    active_renders: int = 0
    peak_renders: int = 0
    pages_produced: int = 0
    total_bytes: int = 0
    avg_document_ms: float = 0.0
    avg_navigate_ms: float = 0.0
    p95_document_ms: float = 0.0
    elapsed_sec: float = 0.0


class RenderMonitor:
    """
    Usage::

        monitor = RenderMonitor()
        monitor.start(total=len(documents))

        # In each render task:
        await monitor.render_started()
        ...
        await monitor.render_finished(timing)

        metrics = await monitor.snapshot()
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._start_time = 0.0
        self._total = 0
        self._rendered = 0
        self._failed = 0
        self._active = 0
        self._peak = 0
        self._pages = 0
        self._bytes = 0
        self._timings: List[RenderTiming] = []

    def start(self, total: int) -> None:
        self._start_time = time.monotonic()
        self._total = total

    async def render_started(self) -> None:
        async with self._lock:
            self._active += 1
            self._peak = max(self._peak, self._active)

    async def render_finished(self, timing: RenderTiming) -> None:
        async with self._lock:
            self._active = max(0, self._active - 1)
            if timing.status == "ok":
                self._rendered += 1
                self._pages += timing.page_count
                self._bytes += timing.bytes
            else:
                self._failed += 1
            self._timings.append(timing)
            logger.debug(
                f"[MONITOR] {timing.status} {timing.url} "
                f"({timing.total_ms:.0f} ms, {len(self._timings)}/{self._total})"
            )

    async def snapshot(self) -> RenderMetrics:
        """Take a consistent snapshot of all metrics."""
        async with self._lock:
            elapsed = time.monotonic() - self._start_time if self._start_time else 0.0
            totals = [t.total_ms for t in self._timings if t.total_ms > 0]
            navs = [t.navigate_ms for t in self._timings if t.navigate_ms > 0]

            p95 = 0.0
            if totals:
                ordered = sorted(totals)
                p95 = ordered[min(int(len(ordered) * 0.95), len(ordered) - 1)]

            return RenderMetrics(
                documents_total=self._total,
                documents_rendered=self._rendered,
                documents_failed=self._failed,
                active_renders=self._active,
                peak_renders=self._peak,
                pages_produced=self._pages,
                total_bytes=self._bytes,
                avg_document_ms=round(sum(totals) / len(totals), 1) if totals else 0.0,
                avg_navigate_ms=round(sum(navs) / len(navs), 1) if navs else 0.0,
                p95_document_ms=round(p95, 1),
                elapsed_sec=round(elapsed, 2),
            )

    def format_summary(self, metrics: RenderMetrics) -> str:
        """Format a human-readable summary string."""
        lines = [
            "=" * 65,
            "  RENDER SUMMARY",
            "=" * 65,
            f"  Documents:           {metrics.documents_rendered}/{metrics.documents_total}",
            f"  Failed:              {metrics.documents_failed}",
            f"  PDF pages:           {metrics.pages_produced}",
            f"  PDF bytes:           {metrics.total_bytes:,}",
            "-" * 65,
            f"  Avg document time:   {metrics.avg_document_ms:.0f} ms",
            f"  Avg navigate time:   {metrics.avg_navigate_ms:.0f} ms",
            f"  P95 document time:   {metrics.p95_document_ms:.0f} ms",
            f"  Peak concurrency:    {metrics.peak_renders}",
            "-" * 65,
            f"  Elapsed time:        {metrics.elapsed_sec:.1f} s",
            "=" * 65,
        ]
        return "\n".join(lines)
