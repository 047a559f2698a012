"""
Data Model
==========
Immutable values flowing through one sitebook run.

- ``SeedRequest``        — the validated run input (URL, pattern, concurrency)
- ``PageArtifact``       — one rendered PDF per document-list entry
- ``AssembledDocument``  — index page + every artifact, merged in list order
- ``RunStage``           — orchestrator state machine
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Pattern, Tuple

from .errors import ErrorKind, Result
from .utils import compile_pattern


class RunStage(str, Enum):
    """Orchestrator stages, in the order a successful run visits them."""
    INIT = "init"
    BROWSER_ACQUIRED = "browser_acquired"
    SEED_LOADED = "seed_loaded"
    LINKS_DISCOVERED = "links_discovered"
    LIST_NORMALIZED = "list_normalized"
    RENDERING = "rendering"
    ASSEMBLING = "assembling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SeedRequest:
    """Run input, built once at the boundary and read-only afterwards."""
    main_url: str
    pattern: Pattern[str]
    concurrency_limit: int


@dataclass(frozen=True)
class PageArtifact:
    """Paginated PDF produced for exactly one document-list entry."""
    source_link: str
    data: bytes
    page_count: int


@dataclass(frozen=True)
class AssembledDocument:
    """Final merged output: one index page followed by all artifacts."""
    data: bytes
    page_count: int
    links: Tuple[str, ...]


def default_pattern(main_url: str) -> Pattern[str]:
    """Pattern matching URLs whose text starts with *main_url*."""
    return re.compile("^" + re.escape(main_url))


def default_concurrency() -> int:
    return os.cpu_count() or 1


def build_seed_request(
    main_url: Optional[str],
    pattern_text: Optional[str] = None,
    concurrency_limit: Optional[int] = None,
) -> Result[SeedRequest]:
    """
    Validate raw inputs and build a ``SeedRequest``.

    Checks run in a fixed order so the cheapest failure wins:
    missing URL → bad concurrency → bad pattern.  Nothing here touches
    the network.
    """
    if not main_url or not main_url.strip():
        return Result.failure(ErrorKind.MISSING_ARGUMENT, "<main_url> is required")
    main_url = main_url.strip()

    if concurrency_limit is None:
        concurrency_limit = default_concurrency()
    if concurrency_limit < 1:
        return Result.failure(
            ErrorKind.INVALID_ARGUMENT,
            f"concurrency must be a positive integer, got {concurrency_limit}",
        )

    if pattern_text:
        compiled = compile_pattern(pattern_text)
        if not compiled.ok:
            return Result.from_failure(compiled.error)
        pattern = compiled.value
    else:
        pattern = default_pattern(main_url)

    return Result.success(SeedRequest(
        main_url=main_url,
        pattern=pattern,
        concurrency_limit=concurrency_limit,
    ))
