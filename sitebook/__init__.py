"""
sitebook
Turns a documentation site into one AI-friendly PDF: the seed page plus
every linked sub-page matching a pattern, sanitized to marked-up text and
merged behind a numbered index page.

CLI Usage:
    python -m sitebook <main_url> [url_pattern] [options]

    Options:
        --concurrency   Simultaneous renders (default: CPU count)
        --output-dir    Directory for <slug>.pdf (default: out)
        --timeout       Per-document navigation timeout in seconds (default: 30)
        --headed        Show the browser window
        --chrome-path   Use this Chrome/Chromium executable
"""

from .assembler import assemble_document, build_index_page
from .browser import BrowserSession
from .discovery import discover_links
from .errors import ErrorKind, Failure, Result
from .limiter import RenderPool
from .models import AssembledDocument, PageArtifact, RunStage, SeedRequest, build_seed_request
from .pipeline import SiteBookPipeline, generate_pdf
from .renderer import render_page
from .run_config import RunConfig
from .sanitizer import sanitize_html
from .utils import build_document_list, compile_pattern, generate_slug, normalize_url

__all__ = [
    'SiteBookPipeline',
    'generate_pdf',
    'RunConfig',
    # Values
    'SeedRequest',
    'PageArtifact',
    'AssembledDocument',
    'RunStage',
    'build_seed_request',
    # Results
    'ErrorKind',
    'Failure',
    'Result',
    # Components
    'BrowserSession',
    'discover_links',
    'sanitize_html',
    'render_page',
    'RenderPool',
    'assemble_document',
    'build_index_page',
    # Helpers
    'normalize_url',
    'generate_slug',
    'compile_pattern',
    'build_document_list',
]

__version__ = '1.0.0'
