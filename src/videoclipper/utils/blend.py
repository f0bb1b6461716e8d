"""Pixel blending of two images at a given opacity."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from ..core.errors import OutputError

logger = logging.getLogger(__name__)


def blend_arrays(base: np.ndarray, overlay: np.ndarray, opacity: float) -> np.ndarray:
    """``base * (1 - opacity) + overlay * opacity``, truncated to uint8.

    ``overlay`` must already have the shape of ``base``.
    """
    mixed = base.astype(np.float32) * (1.0 - opacity) + overlay.astype(np.float32) * opacity
    return np.clip(mixed, 0, 255).astype(np.uint8)


def blend_files(first: Path, second: Path, output: Path, opacity: float) -> Path:
    """Blend ``second`` over ``first`` (resized to it with Lanczos) and write ``output``."""
    import cv2

    base = cv2.imread(str(first), cv2.IMREAD_COLOR)
    if base is None:
        raise OutputError(f"cannot read image {first}")
    overlay = cv2.imread(str(second), cv2.IMREAD_COLOR)
    if overlay is None:
        raise OutputError(f"cannot read image {second}")

    height, width = base.shape[:2]
    if overlay.shape[:2] != (height, width):
        overlay = cv2.resize(overlay, (width, height), interpolation=cv2.INTER_LANCZOS4)

    if not cv2.imwrite(str(output), blend_arrays(base, overlay, opacity)):
        raise OutputError(f"cannot write image {output}")
    return Path(output)
