"""
Output
======
Persists an assembled PDF as ``<output_dir>/<slug>.pdf``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from .errors import ErrorKind, Result

logger = logging.getLogger(__name__)


def output_path(slug: str, output_dir: Union[str, Path]) -> Path:
    return Path(output_dir) / f"{slug}.pdf"


def save_document(data: bytes, slug: str, output_dir: Union[str, Path]) -> Result[Path]:
    """Write *data*, creating *output_dir* if needed."""
    path = output_path(slug, output_dir)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        logger.error(f"[OUTPUT] Could not write {path}: {e}")
        return Result.failure(ErrorKind.FILESYSTEM_ERROR, str(e), url=str(path))
    logger.info(f"[OUTPUT] Saved {len(data):,} bytes to {path.absolute()}")
    return Result.success(path.absolute())
