"""Duration derivation: explicit value, else audio, else video; clamped to the video."""

from __future__ import annotations

import logging
from pathlib import Path

from ..utils import ffmpeg
from ..utils.interrupt import CancelToken

logger = logging.getLogger(__name__)


def derive_duration_ms(
    explicit_ms: int | None = None,
    audio_path: Path | None = None,
    video_path: Path | None = None,
    cancel: CancelToken | None = None,
) -> int | None:
    """Milliseconds to process, or None when no source is available."""
    video_ms = ffmpeg.probe_duration_ms(video_path, cancel) if video_path is not None else None

    if explicit_ms is not None:
        derived, source = explicit_ms, "command line"
    elif audio_path is not None:
        derived, source = ffmpeg.probe_duration_ms(audio_path, cancel), f"audio {audio_path.name}"
    elif video_ms is not None:
        derived, source = video_ms, f"video {video_path.name}"
    else:
        return None

    if video_ms is not None and derived > video_ms:
        logger.info(f"Duration {derived} ms exceeds the video ({video_ms} ms), clamping")
        derived = video_ms
    logger.debug(f"Duration {derived} ms from {source}")
    return derived
