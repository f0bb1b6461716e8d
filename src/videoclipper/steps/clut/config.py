"""Configuration for Clut: colour lookup per frame, with optional follow-up merges."""

from __future__ import annotations

import logging
from typing import Mapping

from pydantic import BaseModel, Field

from videoclipper.core.contracts import AppConfig
from videoclipper.core.params import MULTIPLE_OPACITIES, OPACITY, resolve

logger = logging.getLogger(__name__)


class ClutConfig(BaseModel):
    merge_opacities: list[float] = Field(
        default_factory=list,
        description="Blend the clutted frames with the originals once per opacity",
    )


def resolve_merge_opacities(
    clut_opacity: float | None,
    clut_multiple: bool,
    clut_merge: bool,
    config: AppConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> list[float]:
    """Opacities for the follow-up merges selected by the clut flags."""
    if clut_opacity is not None:
        if clut_multiple:
            logger.warning(
                "Both --clut-opacity and --clut-multiple are given, the single opacity takes priority"
            )
        return [resolve(OPACITY, clut_opacity, config, environ)]
    if clut_multiple:
        return list(resolve(MULTIPLE_OPACITIES, None, config, environ))
    if clut_merge:
        return [resolve(OPACITY, None, config, environ)]
    return []
