"""ffmpeg / ffprobe command assembly.

Every function builds one argument vector and hands it to ``run_command``;
the tools themselves define what the output looks like.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Callable

from ..core.errors import ToolFailureError
from .interrupt import CancelToken
from .subprocess_utils import run_command

logger = logging.getLogger(__name__)

FFMPEG = "ffmpeg"
FFPROBE = "ffprobe"
FFMPEG_BASE_ARGS = ["-y", "-nostdin", "-loglevel", "error"]
CUT_MARGIN_MS = 1000


def _ffmpeg(*args) -> list[str]:
    return [FFMPEG, *FFMPEG_BASE_ARGS, *(str(a) for a in args)]


def _seconds(ms: int) -> str:
    return f"{ms / 1000:.3f}"


# ── Probing ──────────────────────────────────────────────────────────

def probe_duration_ms(path: Path, cancel: CancelToken | None = None) -> int:
    """Media duration in milliseconds."""
    result = run_command(
        [
            FFPROBE, "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(path),
        ],
        stage="probe duration",
        cancel=cancel,
        capture=True,
    )
    raw = (result.stdout or "").strip()
    try:
        seconds = float(raw.splitlines()[0])
    except (IndexError, ValueError) as e:
        raise ToolFailureError(FFPROBE, "probe duration", 0, f"unexpected output {raw!r}") from e
    duration = int(round(seconds * 1000))
    logger.debug(f"Duration of {Path(path).name}: {duration} ms")
    return duration


def probe_dimensions(path: Path, cancel: CancelToken | None = None) -> tuple[int, int]:
    """Width and height of the first video stream."""
    result = run_command(
        [
            FFPROBE, "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=width,height",
            "-of", "csv=s=x:p=0",
            str(path),
        ],
        stage="probe dimensions",
        cancel=cancel,
        capture=True,
    )
    raw = (result.stdout or "").strip()
    try:
        width, height = (int(v) for v in raw.splitlines()[0].split("x")[:2])
    except (IndexError, ValueError) as e:
        raise ToolFailureError(FFPROBE, "probe dimensions", 0, f"unexpected output {raw!r}") from e
    logger.debug(f"Dimensions of {Path(path).name}: {width}x{height}")
    return width, height


def ensure_even(value: int) -> int:
    return value + 1 if value % 2 else value


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def scaled_dimensions(width: int, height: int, pixel_upper_limit: int) -> tuple[int, int]:
    """Scale so the longer side equals the limit, keeping aspect; both sides even.

    An odd limit is rounded down to even so the longer side never exceeds it.
    """
    aspect = width / height
    longer = max(2, pixel_upper_limit - pixel_upper_limit % 2)
    if width >= height:
        return longer, ensure_even(_round_half_up(longer / aspect))
    return ensure_even(_round_half_up(longer * aspect)), longer


# ── Transforms ───────────────────────────────────────────────────────

def cut_video(src: Path, dst: Path, duration_ms: int, cancel: CancelToken | None = None) -> Path:
    """Stream-copy the first ``duration_ms`` (plus a one second margin)."""
    run_command(
        _ffmpeg("-i", src, "-t", _seconds(duration_ms + CUT_MARGIN_MS), "-c", "copy", dst),
        stage="cut video",
        cancel=cancel,
    )
    return Path(dst)


def resize_video(
    src: Path, dst: Path, width: int, height: int, cancel: CancelToken | None = None
) -> Path:
    run_command(
        _ffmpeg("-i", src, "-vf", f"scale={width}:{height}", dst),
        stage="resize video",
        cancel=cancel,
    )
    return Path(dst)


def adjust_framerate(src: Path, dst: Path, fps: int, cancel: CancelToken | None = None) -> Path:
    run_command(
        _ffmpeg("-i", src, "-filter:v", f"fps=fps={fps}", "-c:a", "copy", dst),
        stage="adjust framerate",
        cancel=cancel,
    )
    return Path(dst)


def encode_frames(
    frames_dir: Path,
    pattern: str,
    fps: int,
    dst: Path,
    cancel: CancelToken | None = None,
    on_tick: Callable[[], None] | None = None,
) -> Path:
    """Encode ``frames_dir/pattern`` (printf-style, 1-based) to H.264 without audio."""
    run_command(
        _ffmpeg(
            "-framerate", fps,
            "-start_number", 1,
            "-i", Path(frames_dir) / pattern,
            "-c:v", "libx264",
            "-pix_fmt", "yuv420p",
            dst,
        ),
        stage="encode frames",
        cancel=cancel,
        on_tick=on_tick,
    )
    return Path(dst)


def mux_audio(
    video: Path,
    audio: Path,
    dst: Path,
    cancel: CancelToken | None = None,
    on_tick: Callable[[], None] | None = None,
) -> Path:
    run_command(
        _ffmpeg("-i", video, "-i", audio, "-c:v", "copy", "-c:a", "aac", dst),
        stage="mux audio",
        cancel=cancel,
        on_tick=on_tick,
    )
    return Path(dst)


def trim_video(
    src: Path,
    dst: Path,
    duration_ms: int,
    cancel: CancelToken | None = None,
    on_tick: Callable[[], None] | None = None,
) -> Path:
    run_command(
        _ffmpeg("-i", src, "-t", _seconds(duration_ms), "-c", "copy", dst),
        stage="trim video",
        cancel=cancel,
        on_tick=on_tick,
    )
    return Path(dst)


# ── Frame extraction ─────────────────────────────────────────────────

def extract_frame(
    video: Path, timestamp_ms: int, dst: Path, cancel: CancelToken | None = None
) -> Path:
    """Write the frame at ``timestamp_ms`` as a single image."""
    run_command(
        _ffmpeg("-ss", _seconds(timestamp_ms), "-i", video, "-frames:v", 1, "-update", 1, dst),
        stage="extract frame",
        cancel=cancel,
    )
    return Path(dst)


def extract_frames(
    video: Path,
    output_dir: Path,
    count: int,
    cancel: CancelToken | None = None,
    on_tick: Callable[[], None] | None = None,
    pattern: str = "frame_%04d.png",
) -> Path:
    """Write the first ``count`` frames as ``frame_0001.png`` ... in one invocation."""
    run_command(
        _ffmpeg(
            "-i", video,
            "-fps_mode", "passthrough",
            "-frames:v", count,
            "-start_number", 1,
            Path(output_dir) / pattern,
        ),
        stage="extract frames",
        cancel=cancel,
        on_tick=on_tick,
    )
    return Path(output_dir)
