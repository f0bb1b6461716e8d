"""Scoped scratch directories."""

from __future__ import annotations

import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


@contextmanager
def scratch_directory(keep: bool = False, prefix: str = "videoclipper_") -> Iterator[Path]:
    """Yield a fresh temporary directory, removed on exit unless ``keep``."""
    path = Path(tempfile.mkdtemp(prefix=prefix))
    logger.debug(f"Scratch directory: {path}")
    try:
        yield path
    finally:
        if keep:
            logger.info(f"Keeping scratch directory {path}")
        else:
            shutil.rmtree(path, ignore_errors=True)
