"""
Render Pool
===========
Bounded, order-preserving task pool for per-document render work.

- ``asyncio.Semaphore`` caps simultaneous tasks at ``limit``; waiters are
  released in submission order
- ``submit()`` records the submission index; ``join()`` returns results
  indexed by that order, whatever order they completed in
- With ``fail_fast`` the pool stops *starting* tasks after the first
  failure; tasks already running are left to finish
- Active and peak render counts live in ``RenderMonitor``, not here
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar

from .errors import Failure, Result
from .models import default_concurrency

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RenderPool(Generic[T]):
    """
    Usage::

        pool = RenderPool(limit=4)
        for url in documents:
            pool.submit(lambda url=url: render(url))
        results = await pool.join()        # same order as submit()
        if pool.first_failure:
            ...
    """

    def __init__(self, limit: Optional[int] = None, *, fail_fast: bool = True):
        if limit is None:
            limit = default_concurrency()
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        self.limit = limit
        self.fail_fast = fail_fast

        self._semaphore = asyncio.Semaphore(limit)
        self._tasks: List[asyncio.Task] = []
        self._first_failure: Optional[Failure] = None

        self.skipped = 0

    @property
    def first_failure(self) -> Optional[Failure]:
        """Earliest failure to *complete*, not earliest by submission."""
        return self._first_failure

    def submit(self, factory: Callable[[], Awaitable[Result[T]]]) -> int:
        """Schedule *factory()*; returns its submission index."""
        index = len(self._tasks)
        self._tasks.append(asyncio.create_task(self._run(index, factory)))
        return index

    async def _run(
        self, index: int, factory: Callable[[], Awaitable[Result[T]]]
    ) -> Optional[Result[T]]:
        async with self._semaphore:
            if self.fail_fast and self._first_failure is not None:
                self.skipped += 1
                logger.debug(f"[POOL] Task {index} not started — earlier failure")
                return None

            result = await factory()

        if not result.ok and self._first_failure is None:
            self._first_failure = result.error
        return result

    async def join(self) -> List[Optional[Result[T]]]:
        """
        Wait for every submitted task and return results in submission order.

        Entries are ``None`` for tasks skipped after a failure.
        """
        if not self._tasks:
            return []
        return list(await asyncio.gather(*self._tasks))
