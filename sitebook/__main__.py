#!/usr/bin/env python3
"""
sitebook CLI
============
Generate an AI-optimized PDF for a URL and its matching sub-links.

All configuration flows through ``RunConfig`` (defaults → SITEBOOK_* env
vars / .env → flags).  The run input is validated into a ``SeedRequest``
before the browser is started.

Run with: python -m sitebook <main_url> [url_pattern]
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

from .output import save_document
from .pipeline import SiteBookPipeline
from .run_config import RunConfig
from .utils import generate_slug

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sitebook',
        description='Generate one AI-friendly PDF from a page and its matching sub-links',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m sitebook https://docs.example.com/guide/
  python -m sitebook https://docs.example.com/guide/ "^https://docs\\.example\\.com/(guide|api)/"
  python -m sitebook https://example.com/docs --concurrency 2 --output-dir pdfs
        """
    )
    parser.add_argument('main_url', nargs='?', help='The main URL to generate the PDF from')
    parser.add_argument(
        'url_pattern', nargs='?',
        help='Regular expression for sub-links to include (default: ^main_url)',
    )
    parser.add_argument('--concurrency', type=int, help='Simultaneous renders (default: CPU count)')
    parser.add_argument('--output-dir', type=str, help='Output directory (default: out)')
    parser.add_argument('--timeout', type=float, help='Navigation timeout per document, seconds (default: 30)')
    parser.add_argument('--headed', action='store_true', help='Run the browser with a visible window')
    parser.add_argument('--chrome-path', type=str, metavar='PATH', help='Chrome/Chromium executable to use')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    return parser


def print_summary(pipeline: SiteBookPipeline) -> None:
    """Print render summary."""
    if pipeline.metrics is None:
        return
    print("\n" + pipeline.monitor.format_summary(pipeline.metrics))


def main(argv=None) -> int:
    """Parse argv, build RunConfig + SeedRequest, run, persist."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )

    if not args.main_url:
        parser.print_help()
        print("\nError: <main_url> is required", file=sys.stderr)
        return EXIT_USAGE

    try:
        cfg = RunConfig.from_env().with_cli_args(args)
    except ValueError as e:
        print(f"Error: invalid SITEBOOK_* setting: {e}", file=sys.stderr)
        return EXIT_USAGE

    request = cfg.to_seed_request(args.main_url, args.url_pattern)
    if not request.ok:
        print(f"Error: {request.error.describe()}", file=sys.stderr)
        return EXIT_USAGE
    seed = request.value

    logger.info(
        f"Generating AI-optimized PDF for {seed.main_url} "
        f"and sub-links matching {seed.pattern.pattern}"
    )
    cfg.log_summary(seed)

    pipeline = SiteBookPipeline(cfg)
    pipeline.set_progress_callback(
        lambda done, total, url: print(f"[{done}/{total}] {url[:70]}")
    )
    result = pipeline.run(seed)
    print_summary(pipeline)

    if not result.ok:
        print(f"\nError generating PDF: {result.error.describe()}", file=sys.stderr)
        return EXIT_FAILED

    saved = save_document(result.value.data, generate_slug(seed.main_url), cfg.output_dir)
    if not saved.ok:
        print(f"\nError saving PDF: {saved.error.describe()}", file=sys.stderr)
        return EXIT_FAILED

    print("\n" + "-" * 40)
    print(f"  AI-optimized PDF saved to {saved.value}")
    print(f"  Documents: {len(result.value.links)}   Pages: {result.value.page_count}")
    print("-" * 40)
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
