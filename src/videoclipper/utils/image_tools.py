"""ImageMagick (CLUT) and G'MIC (filters) invocations."""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Sequence

from .interrupt import CancelToken
from .subprocess_utils import run_command

logger = logging.getLogger(__name__)

GMIC = "gmic"
GMIC_VERBOSITY_FLAGS = frozenset({"-v", "-vv", "-vvv", "-vvvv"})
_MULTI_OUTPUT = re.compile(r"^.+_(\d+)_(\d+)\.[^.]+$")


def imagemagick_binary() -> str:
    """``magick`` (ImageMagick 7) when installed, else the legacy ``convert``."""
    return "magick" if shutil.which("magick") else "convert"


def apply_clut(
    image: Path, clut: Path, output: Path, cancel: CancelToken | None = None
) -> Path:
    """Recolour ``image`` through the lookup table ``clut``."""
    run_command(
        [imagemagick_binary(), str(image), str(clut), "-clut", str(output)],
        stage=f"clut {Path(image).name}",
        cancel=cancel,
    )
    return Path(output)


def strip_verbosity(args: Sequence[str]) -> list[str]:
    """Drop G'MIC verbosity switches from passthrough arguments."""
    kept = [a for a in args if a not in GMIC_VERBOSITY_FLAGS]
    if len(kept) != len(args):
        logger.debug("Removed G'MIC verbosity flags from filter arguments")
    return kept


def apply_filter(
    image: Path, args: Sequence[str], output: Path, cancel: CancelToken | None = None
) -> Path:
    run_command(
        [GMIC, str(image), *strip_verbosity(args), "-output", str(output)],
        stage=f"filter {Path(image).name}",
        cancel=cancel,
    )
    return Path(output)


def multi_output_groups(directory: Path) -> list[int]:
    """Distinct second numbers in names like ``image_0001_000001.png``."""
    groups = set()
    for path in Path(directory).iterdir():
        match = _MULTI_OUTPUT.match(path.name)
        if match:
            groups.add(int(match.group(2)))
    return sorted(groups)


def warn_multi_output(directory: Path) -> list[int]:
    groups = multi_output_groups(directory)
    if groups:
        logger.warning(
            f"The filter produced several images per frame in {directory} "
            f"(outputs {', '.join(str(g) for g in groups)}); pick one before clipping"
        )
    return groups
