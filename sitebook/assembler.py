"""
Document Assembler
==================
Merges per-document PDFs behind a generated index page.

Layout of the assembled PDF:
- Page 1: index — ``"<n>. <url>"`` per document, plain text, fixed origin
- Pages 2..: every artifact's pages, in document-list order

The index is a single page by design.  Entries that would fall below the
bottom edge are not drawn; this is logged as a warning rather than spilling
onto extra pages, so the page-count law
``assembled.page_count == 1 + sum(artifact.page_count)`` always holds.

Assembly is all-or-nothing: any unreadable artifact fails the whole merge.
"""

from __future__ import annotations

import io
import logging
from typing import Sequence

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from reportlab.pdfgen import canvas

from .errors import ErrorKind, Result
from .models import AssembledDocument, PageArtifact

logger = logging.getLogger(__name__)

DOCUMENT_TITLE = "Documentation"
DOCUMENT_AUTHOR = "sitebook"

INDEX_PAGE_SIZE = (595, 842)      # A4 in points
INDEX_ORIGIN = (50, 800)
INDEX_FONT = "Helvetica"
INDEX_FONT_SIZE = 8
INDEX_LEADING = 24


def index_capacity() -> int:
    """How many index lines fit between the origin and the page bottom."""
    return INDEX_ORIGIN[1] // INDEX_LEADING + 1


def index_lines(links: Sequence[str]) -> list:
    return [f"{i}. {link}" for i, link in enumerate(links, 1)]


def build_index_page(links: Sequence[str]) -> bytes:
    """Render the one-page index PDF for *links*."""
    lines = index_lines(links)
    capacity = index_capacity()
    if len(lines) > capacity:
        # Known limitation: the index is never paginated
        logger.warning(
            f"[ASSEMBLE] Index overflow: {len(lines) - capacity} of {len(lines)} "
            f"entries do not fit on the index page and are not drawn"
        )
        lines = lines[:capacity]

    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=INDEX_PAGE_SIZE, pageCompression=1)
    text = pdf.beginText(*INDEX_ORIGIN)
    text.setFont(INDEX_FONT, INDEX_FONT_SIZE)
    text.setLeading(INDEX_LEADING)
    for line in lines:
        text.textLine(line)
    pdf.drawText(text)
    pdf.showPage()
    pdf.save()
    return buf.getvalue()


def assemble_document(
    links: Sequence[str],
    artifacts: Sequence[PageArtifact],
) -> Result[AssembledDocument]:
    """
    Merge *artifacts* behind an index of *links*.

    Args:
        links:     Document list (index numbering and required order)
        artifacts: One artifact per link, already in document-list order

    Returns:
        ``AssembledDocument`` or an ASSEMBLY_FAILURE
    """
    if len(artifacts) != len(links):
        return Result.failure(
            ErrorKind.ASSEMBLY_FAILURE,
            f"expected {len(links)} artifacts, got {len(artifacts)}",
        )
    for position, (link, artifact) in enumerate(zip(links, artifacts), 1):
        if artifact.source_link != link:
            return Result.failure(
                ErrorKind.ASSEMBLY_FAILURE,
                f"artifact {position} is for {artifact.source_link}, expected {link}",
                url=link,
            )

    writer = PdfWriter()
    writer.add_metadata({"/Title": DOCUMENT_TITLE, "/Author": DOCUMENT_AUTHOR})

    current = None
    try:
        index_reader = PdfReader(io.BytesIO(build_index_page(links)))
        writer.add_page(index_reader.pages[0])

        for artifact in artifacts:
            current = artifact.source_link
            reader = PdfReader(io.BytesIO(artifact.data))
            for page in reader.pages:
                writer.add_page(page)
        current = None

        for page in writer.pages:
            page.compress_content_streams()
        writer.compress_identical_objects()

        buf = io.BytesIO()
        writer.write(buf)
    except (PyPdfError, ValueError, KeyError) as e:
        logger.error(f"[ASSEMBLE] Merge failed{f' at {current}' if current else ''}: {e}")
        return Result.failure(ErrorKind.ASSEMBLY_FAILURE, str(e), url=current)

    page_count = len(writer.pages)
    logger.info(f"[ASSEMBLE] {len(artifacts)} documents, {page_count} pages")
    return Result.success(AssembledDocument(
        data=buf.getvalue(),
        page_count=page_count,
        links=tuple(links),
    ))
