"""
Unified Run Configuration
=========================
Single source of truth for sitebook defaults and runtime knobs.

Resolution order (later wins):
  1. ``_DEFAULTS`` below
  2. ``SITEBOOK_*`` environment variables (``.env`` loaded by the CLI)
  3. CLI flags

The run *input* (seed URL, pattern, concurrency) is not stored here; it is
validated into an immutable ``SeedRequest`` via ``to_seed_request()``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional, Tuple

from .errors import Result
from .models import SeedRequest, build_seed_request

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Canonical defaults — the ONLY place these numbers live
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "output_dir": "out",
    "headless": True,
    "navigation_timeout_ms": 30_000,   # per-document load deadline
    "concurrency": None,               # None → os.cpu_count()
    "executable_path": None,           # None → Playwright's bundled Chromium
    "viewport_width": 1280,
    "viewport_height": 1024,
    "user_agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
    ),
    "blocked_resource_types": ("image", "stylesheet", "font", "media"),
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class RunConfig:
    """
    Configuration consumed by the pipeline, browser session and CLI.

    Populate via:
      - ``RunConfig()``                        → all defaults
      - ``RunConfig.from_env()``               → defaults + SITEBOOK_* vars
      - ``cfg.with_cli_args(ns)``              → overlay argparse flags
    """

    # ---- Output ----
    output_dir: str = _DEFAULTS["output_dir"]

    # ---- Browser ----
    headless: bool = _DEFAULTS["headless"]
    executable_path: Optional[str] = _DEFAULTS["executable_path"]
    viewport_width: int = _DEFAULTS["viewport_width"]
    viewport_height: int = _DEFAULTS["viewport_height"]
    user_agent: str = _DEFAULTS["user_agent"]
    blocked_resource_types: Tuple[str, ...] = field(
        default_factory=lambda: tuple(_DEFAULTS["blocked_resource_types"])
    )

    # ---- Limits ----
    navigation_timeout_ms: int = _DEFAULTS["navigation_timeout_ms"]
    concurrency: Optional[int] = _DEFAULTS["concurrency"]

    # -----------------------------------------------------------------------
    # Factory helpers
    # -----------------------------------------------------------------------
    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RunConfig":
        """Build config from ``SITEBOOK_*`` environment variables."""
        env = os.environ if environ is None else environ
        cfg = cls()
        if env.get("SITEBOOK_OUTPUT_DIR"):
            cfg.output_dir = env["SITEBOOK_OUTPUT_DIR"]
        if env.get("SITEBOOK_CHROME_PATH"):
            cfg.executable_path = env["SITEBOOK_CHROME_PATH"]
        if env.get("SITEBOOK_HEADLESS"):
            cfg.headless = _env_bool(env["SITEBOOK_HEADLESS"])
        if env.get("SITEBOOK_TIMEOUT"):
            cfg.navigation_timeout_ms = int(float(env["SITEBOOK_TIMEOUT"]) * 1000)
        if env.get("SITEBOOK_CONCURRENCY"):
            cfg.concurrency = int(env["SITEBOOK_CONCURRENCY"])
        return cfg

    def with_cli_args(self, args) -> "RunConfig":
        """Return a copy with argparse flags applied (unset flags keep values)."""
        overrides = {}
        if getattr(args, "output_dir", None):
            overrides["output_dir"] = args.output_dir
        if getattr(args, "chrome_path", None):
            overrides["executable_path"] = args.chrome_path
        if getattr(args, "headed", False):
            overrides["headless"] = False
        if getattr(args, "timeout", None) is not None:
            overrides["navigation_timeout_ms"] = int(args.timeout * 1000)
        if getattr(args, "concurrency", None) is not None:
            overrides["concurrency"] = args.concurrency
        return replace(self, **overrides)

    def to_seed_request(
        self, main_url: Optional[str], pattern_text: Optional[str] = None
    ) -> Result[SeedRequest]:
        """Validate the run input against this config's concurrency."""
        return build_seed_request(main_url, pattern_text, self.concurrency)

    # -----------------------------------------------------------------------
    # Logging helper
    # -----------------------------------------------------------------------
    def log_summary(self, request: SeedRequest) -> None:
        """Emit a structured summary to the logger."""
        logger.info("=" * 60)
        logger.info("SITEBOOK RUN CONFIG")
        logger.info("=" * 60)
        logger.info(f"  URL:              {request.main_url}")
        logger.info(f"  Pattern:          {request.pattern.pattern}")
        logger.info(f"  Concurrency:      {request.concurrency_limit}")
        logger.info(f"  Timeout:          {self.navigation_timeout_ms}ms per document")
        logger.info(f"  Headless:         {self.headless}")
        logger.info(f"  Output Dir:       {self.output_dir}")
        if self.executable_path:
            logger.info(f"  Chrome:           {self.executable_path}")
        logger.info(f"  Blocked:          {', '.join(self.blocked_resource_types) or 'none'}")
        logger.info("=" * 60)
