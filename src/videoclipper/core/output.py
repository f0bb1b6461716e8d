"""Output target resolution shared by every mode.

``resolve_output`` switches on the mode and applies that mode's policy:
target kind, default location and base name, how an explicit hint is
interpreted and what happens on a name collision.
"""

from __future__ import annotations

import logging
import random
import shutil
import string
from pathlib import Path
from typing import Sequence

from .contracts import Mode, OutputTarget
from .errors import InvalidHintError, OutputError

logger = logging.getLogger(__name__)

SAMPLE_FRAME_NAME = "sample_frame.png"
SAMPLE_FRAMES_DIR = "sample_frames"
CLIP_EXTENSION = ".mp4"
RANDOM_SUFFIX_LENGTH = 2
_ALPHANUMERIC = string.ascii_letters + string.digits


def format_opacity(opacity: float) -> str:
    """Shortest general form: 0.5 -> '0.5', 1.0 -> '1'."""
    return f"{opacity:g}"


def _input_name(path: Path) -> str:
    return path.name or "input"


def _parent(path: Path) -> Path:
    return path.parent if path.parent != Path("") else Path(".")


def _mkdir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputError(f"cannot create directory {path}: {e}") from e


# ── Collision policies ───────────────────────────────────────────────

def unique_directory(parent: Path, base: str) -> Path:
    """Create and return ``parent/base``, or the first free ``base_N``."""
    candidate = parent / base
    counter = 0
    while candidate.exists():
        counter += 1
        candidate = parent / f"{base}_{counter}"
    _mkdir(candidate)
    logger.debug(f"Created output directory {candidate}")
    return candidate


def random_suffix_directory(parent: Path, base: str, rng: random.Random | None = None) -> Path:
    """Create and return ``parent/base_XY`` with a random free two-character suffix."""
    rng = rng or random.Random()
    while True:
        suffix = "".join(rng.choice(_ALPHANUMERIC) for _ in range(RANDOM_SUFFIX_LENGTH))
        candidate = parent / f"{base}_{suffix}"
        if not candidate.exists():
            break
    _mkdir(candidate)
    logger.debug(f"Created output directory {candidate}")
    return candidate


def unique_file(parent: Path, stem: str, extension: str) -> Path:
    """First free ``stem.ext``, ``stem_1.ext``, ... (not created)."""
    candidate = parent / f"{stem}{extension}"
    counter = 0
    while candidate.exists():
        counter += 1
        candidate = parent / f"{stem}_{counter}{extension}"
    return candidate


def explicit_directory(hint: Path) -> Path:
    """Use ``hint`` as a directory, creating it if needed."""
    if hint.exists() and not hint.is_dir():
        raise InvalidHintError(hint, "exists and is not a directory")
    _mkdir(hint)
    return hint


def replaced_directory(hint: Path, input_path: Path) -> Path:
    """Remove ``hint`` if present and recreate it empty."""
    if hint.exists() and not hint.is_dir():
        raise InvalidHintError(hint, "exists and is not a directory")
    if hint.exists() and input_path.exists():
        if hint.resolve() == input_path.resolve():
            raise InvalidHintError(hint, "is the input directory")
        if input_path.resolve().is_relative_to(hint.resolve()):
            raise InvalidHintError(hint, "contains the input directory")
    if hint.exists():
        logger.info(f"Output directory {hint} exists, replacing it")
        try:
            shutil.rmtree(hint)
        except OSError as e:
            raise OutputError(f"cannot remove {hint}: {e}") from e
    _mkdir(hint)
    return hint


def file_target(path: Path) -> OutputTarget:
    _mkdir(_parent(path))
    return OutputTarget.file(path)


# ── Per-mode policies ────────────────────────────────────────────────

def _export_output(input_path: Path, hint: Path | None) -> OutputTarget:
    if hint is not None:
        return OutputTarget.directory(explicit_directory(hint))
    base = f"{input_path.stem}_original_frames"
    return OutputTarget.directory(unique_directory(_parent(input_path), base))


def _sample_output(input_path: Path, hint: Path | None, sampling_number: int) -> OutputTarget:
    if sampling_number <= 1:
        if hint is None:
            return file_target(_parent(input_path) / SAMPLE_FRAME_NAME)
        if hint.is_dir():
            return file_target(hint / SAMPLE_FRAME_NAME)
        return file_target(hint)
    if hint is not None:
        return OutputTarget.directory(explicit_directory(hint))
    return OutputTarget.directory(unique_directory(_parent(input_path), SAMPLE_FRAMES_DIR))


def _merge_output(input_path: Path, hint: Path | None, opacity: float | None) -> OutputTarget:
    if hint is not None:
        return OutputTarget.directory(explicit_directory(hint))
    if opacity is None:
        raise OutputError("merge output needs an opacity to name the directory")
    base = f"{_input_name(input_path)}_merged_{format_opacity(opacity)}"
    return OutputTarget.directory(unique_directory(_parent(input_path), base))


def _clut_output(input_path: Path, hint: Path | None) -> OutputTarget:
    if hint is not None:
        return OutputTarget.directory(replaced_directory(hint, input_path))
    base = f"{_input_name(input_path)}_clutted"
    return OutputTarget.directory(unique_directory(_parent(input_path), base))


def _clip_output(input_path: Path, hint: Path | None, audio_path: Path | None) -> OutputTarget:
    if audio_path is not None:
        parent, stem = _parent(audio_path), audio_path.stem or "input"
    else:
        parent, stem = _parent(input_path), _input_name(input_path)

    if hint is None:
        return file_target(unique_file(parent, stem, CLIP_EXTENSION))
    if hint.is_dir():
        return file_target(hint / f"{stem}{CLIP_EXTENSION}")
    if not hint.name or not hint.stem:
        raise InvalidHintError(hint, "output file has no name")
    return file_target(hint)


def _filter_output(
    input_path: Path, hint: Path | None, filter_args: Sequence[str] | None
) -> OutputTarget:
    if hint is not None:
        return OutputTarget.directory(replaced_directory(hint, input_path))
    if not filter_args:
        raise OutputError("filter output needs at least one filter argument to name the directory")
    first = filter_args[0].lstrip("-").replace("/", "_") or "filter"
    base = f"{_input_name(input_path)}_{first}"
    return OutputTarget.directory(random_suffix_directory(_parent(input_path), base))


def resolve_output(
    mode: Mode,
    input_path: Path | str,
    hint: Path | str | None = None,
    *,
    opacity: float | None = None,
    audio_path: Path | str | None = None,
    filter_args: Sequence[str] | None = None,
    sampling_number: int = 1,
) -> OutputTarget:
    """Resolve (and for directories, create) the destination of ``mode``."""
    mode = Mode(mode)
    input_path = Path(input_path)
    hint = Path(hint).expanduser() if hint is not None and str(hint) != "" else None
    audio = Path(audio_path) if audio_path is not None else None

    if mode is Mode.EXPORT:
        target = _export_output(input_path, hint)
    elif mode is Mode.SAMPLE:
        target = _sample_output(input_path, hint, sampling_number)
    elif mode is Mode.MERGE:
        target = _merge_output(input_path, hint, opacity)
    elif mode is Mode.CLUT:
        target = _clut_output(input_path, hint)
    elif mode is Mode.CLIP:
        target = _clip_output(input_path, hint, audio)
    elif mode is Mode.FILTER:
        target = _filter_output(input_path, hint, filter_args)
    else:
        raise OutputError(f"unknown mode {mode!r}")

    logger.info(f"Output {target.kind}: {target.path}")
    return target


# ── Encoder extension handling ───────────────────────────────────────

def encoder_path(path: Path) -> Path:
    """Path the encoder writes to: ``path`` itself if it ends in .mp4."""
    path = Path(path)
    if path.suffix.lower() == CLIP_EXTENSION:
        return path
    return path.with_suffix(CLIP_EXTENSION) if path.suffix else path.with_name(path.name + CLIP_EXTENSION)


def finalize_encoded(encoded: Path, requested: Path) -> Path:
    """Move the encoder's output to the requested name when they differ."""
    encoded, requested = Path(encoded), Path(requested)
    if encoded == requested:
        return requested
    try:
        encoded.replace(requested)
    except OSError as e:
        raise OutputError(f"cannot rename {encoded} to {requested}: {e}") from e
    logger.debug(f"Renamed {encoded.name} -> {requested.name}")
    return requested
