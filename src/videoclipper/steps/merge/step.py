"""Merge: blend frames sharing an id across two directories."""

from __future__ import annotations

import logging
from typing import ClassVar

from videoclipper.core.contracts import Mode
from videoclipper.core.filenames import InPlaceValidator, canonical_digits, load_directory
from videoclipper.core.output import resolve_output
from videoclipper.core.step_base import ModeStep
from videoclipper.utils.blend import blend_files
from videoclipper.utils.progress import track_progress
from videoclipper.utils.scratch import scratch_directory
from .config import MergeConfig
from .contracts import MergeInput, MergeOutput

logger = logging.getLogger(__name__)


class MergeStep(ModeStep[MergeInput, MergeOutput, MergeConfig]):
    name: ClassVar[str] = "merge"
    input_type: ClassVar = MergeInput
    output_type: ClassVar = MergeOutput
    config_type: ClassVar = MergeConfig

    def validate_inputs(self, inputs: MergeInput) -> bool:
        for directory in (inputs.first_dir, inputs.second_dir):
            if not directory.is_dir():
                logger.error(f"Input directory not found: {directory}")
                return False
        return True

    def run(self, inputs: MergeInput) -> MergeOutput:
        opacity = self.config.opacity
        with scratch_directory(self.keep_scratch, prefix="videoclipper_merge_") as scratch:
            first = load_directory(
                inputs.first_dir, validator=InPlaceValidator(fallback_dir=scratch / "first")
            )
            second = load_directory(
                inputs.second_dir, validator=InPlaceValidator(fallback_dir=scratch / "second")
            )

            common = [i for i in first if i in second]
            skipped = sorted(set(first.ids()).symmetric_difference(second.ids()))
            if skipped:
                logger.warning(
                    f"{len(skipped)} frame ids have no partner and are skipped "
                    f"(ids {skipped[:5]}{'...' if len(skipped) > 5 else ''})"
                )

            target = resolve_output(Mode.MERGE, inputs.first_dir, inputs.output_hint, opacity=opacity)
            logger.debug(f"Blending {len(common)} frame pairs at opacity {opacity}")

            with track_progress("Merging frames", len(common)) as bar:
                for identifier in common:
                    self.check_cancelled("merge frames")
                    out = target.path / f"image_{canonical_digits(identifier)}.png"
                    blend_files(first[identifier], second[identifier], out, opacity)
                    bar.advance()

        logger.info(f"Merged {len(common)} frames into {target.path}")
        return MergeOutput(
            output_dir=target.path,
            merged_count=len(common),
            skipped_ids=skipped,
            opacity=opacity,
        )
