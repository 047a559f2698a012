"""
Utility Functions
URL normalization, slug generation, pattern compilation and document-list
ordering.  Everything here is pure: no network, no filesystem.
"""

import logging
import re
from typing import Iterable, Pattern, Tuple

from .errors import ErrorKind, Result

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"https?://")
_NON_WORD_RE = re.compile(r"[^\w\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHEN_RUN_RE = re.compile(r"-+")
_EDGE_HYPHEN_RE = re.compile(r"^-|-$")


def normalize_url(url: str) -> str:
    """
    Canonicalize a URL for deduplication.

    Drops everything from the first ``#`` onward, then removes a single
    trailing slash.  A run of two or more trailing slashes is left alone
    so that normalizing an already-normalized value never changes it.

    Comparison is purely textual; malformed input is accepted as-is.

    Examples:
        https://a/b/#frag  -> https://a/b
        https://a/b/       -> https://a/b
        https://a/b//      -> https://a/b//
    """
    without_fragment = url.split("#", 1)[0]
    if without_fragment.endswith("/") and not without_fragment.endswith("//"):
        return without_fragment[:-1]
    return without_fragment


def generate_slug(url: str) -> str:
    """
    Derive a filesystem-safe identifier from a URL.

    Example:
        https://a.b.com/Docs/ -> a-b-com-docs
    """
    slug = _SCHEME_RE.sub("", url, count=1)
    slug = _NON_WORD_RE.sub("-", slug)
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = slug.replace(".", "-")
    slug = _HYPHEN_RUN_RE.sub("-", slug)
    slug = _EDGE_HYPHEN_RE.sub("", slug)
    return slug.lower()


def compile_pattern(pattern_text: str) -> Result[Pattern[str]]:
    """Compile a user-supplied link pattern, reporting bad syntax as a failure."""
    try:
        return Result.success(re.compile(pattern_text))
    except re.error as e:
        logger.error(f"[PATTERN] Invalid pattern {pattern_text!r}: {e}")
        return Result.failure(
            ErrorKind.PATTERN_COMPILE_ERROR,
            f"invalid pattern {pattern_text!r}: {e}",
        )


def build_document_list(seed_url: str, links: Iterable[str]) -> Tuple[str, ...]:
    """
    Normalize and deduplicate ``[seed_url, *links]``.

    Order is first occurrence, so the normalized seed is always first and
    discovered links follow in discovery order.  This order later drives
    both the index numbering and the final page order.
    """
    seen = set()
    ordered = []
    for link in [seed_url, *links]:
        normalized = normalize_url(link)
        if normalized in seen:
            continue
        seen.add(normalized)
        ordered.append(normalized)
    return tuple(ordered)
