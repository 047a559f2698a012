"""
Content Sanitizer
=================
Reduces a rendered page to a minimal, machine-readable HTML skeleton.

Stages (applied in order):
1. **Remove** comments, media, scripts, landmarks and ad/social/popup hooks
2. **Strip** every attribute from every element
3. **Prune** elements with no text, depth-first (``<br>`` survives)
4. **Mark** headings, paragraphs, code and list items with a short prefix
5. **Anchor** the page with a leading ``U:<url>`` line
6. **Collapse** whitespace runs and drop whitespace between tags

Structural prefixes:

    T:   h1       title
    S:   h2       section
    SS:  h3       subsection
    SSS: h4       sub-subsection
    P:   p        paragraph
    C:   pre/code code
    L:   li       list item

``sanitize_html`` is a pure function of its input HTML and URL.  Running
it again on its own output returns the same document.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Comment, Tag

logger = logging.getLogger(__name__)

_PARSER = "lxml"

BLOCKED_SELECTORS = [
    'img', 'svg', 'video', 'canvas', 'audio',
    'style', 'script', 'noscript', 'iframe',
    'nav', 'header', 'footer', 'aside',
    '.ad', '.ads', '.advertisement', '.banner',
    '.share', '.social', '.comment', '.popup', '.modal',
    '[role="banner"]', '[role="navigation"]',
    '[role="complementary"]', '[role="contentinfo"]',
]

STRUCTURE_MARKERS = {
    'h1': 'T:',
    'h2': 'S:',
    'h3': 'SS:',
    'h4': 'SSS:',
    'p': 'P:',
    'pre': 'C:',
    'code': 'C:',
    'li': 'L:',
}

URL_MARKER_PREFIX = "U:"

_WHITESPACE_RE = re.compile(r"\s+")
_INTER_TAG_RE = re.compile(r">\s+<")


def sanitize_html(html: str, url: str) -> str:
    """
    Return the sanitized form of *html*, tagged with its source *url*.

    Args:
        html: Serialized document (typically ``page.content()``)
        url:  Address the document was loaded from

    Returns:
        Full HTML document string with a stripped, marked-up body
    """
    soup = BeautifulSoup(html or "", _PARSER)
    body = _ensure_body(soup)

    removed = _remove_blocked(soup)
    _strip_attributes(soup)
    _prune_empty(body)
    _add_structure_markers(body)
    _insert_url_marker(soup, body, url)
    _collapse_whitespace(body)

    logger.debug(f"[SANITIZE] {url}: removed {removed} blocked elements")
    return str(soup)


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

def _ensure_body(soup: BeautifulSoup) -> Tag:
    """Guarantee an ``<html><body>`` pair exists (empty or fragmentary input)."""
    if soup.body is not None:
        return soup.body
    html = soup.html
    if html is None:
        html = soup.new_tag("html")
        soup.append(html)
    body = soup.new_tag("body")
    html.append(body)
    return body


def _remove_blocked(soup: BeautifulSoup) -> int:
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    removed = 0
    for el in soup.select(", ".join(BLOCKED_SELECTORS)):
        # Descendants of an element removed earlier in this loop are already gone
        if el.decomposed:
            continue
        el.decompose()
        removed += 1
    return removed


def _strip_attributes(soup: BeautifulSoup) -> None:
    """Drop all attributes, event handlers and data-* included."""
    for tag in soup.find_all(True):
        tag.attrs = {}


def _prune_empty(parent: Tag) -> None:
    """Remove text-less elements; children are resolved before their parent."""
    for child in list(parent.find_all(True, recursive=False)):
        if child.find(True) is not None:
            _prune_empty(child)
        if not child.get_text().strip() and child.name != 'br':
            child.decompose()


def _add_structure_markers(body: Tag) -> None:
    # find_all snapshots document order, so an outer <pre> is rewritten
    # before its inner <code>; the detached <code> is then harmless.
    for tag in body.find_all(list(STRUCTURE_MARKERS)):
        text = tag.get_text()
        if not text:
            continue
        prefix = STRUCTURE_MARKERS[tag.name]
        stripped = text.strip()
        if not stripped.startswith(prefix):
            stripped = f"{prefix}{stripped}"
        tag.string = stripped


def _insert_url_marker(soup: BeautifulSoup, body: Tag, url: str) -> None:
    marker = f"{URL_MARKER_PREFIX}{url}"
    first = body.contents[0] if body.contents else None
    # Compare in collapsed form; that is how an earlier pass left the marker
    collapsed = _WHITESPACE_RE.sub(" ", marker)
    if isinstance(first, Tag) and first.name == 'div' and first.get_text() == collapsed:
        return
    div = soup.new_tag("div")
    div.string = marker
    body.insert(0, div)


def _collapse_whitespace(body: Tag) -> None:
    inner = body.decode_contents()
    inner = _WHITESPACE_RE.sub(" ", inner)
    inner = _INTER_TAG_RE.sub("><", inner).strip()

    fragment = BeautifulSoup(f"<body>{inner}</body>", _PARSER)
    body.clear()
    if fragment.body is None:
        return
    for node in list(fragment.body.contents):
        body.append(node.extract())
