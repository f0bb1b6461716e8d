"""Clut: apply a colour lookup table to every frame through ImageMagick."""

from __future__ import annotations

import logging
from typing import ClassVar

from videoclipper.core.contracts import Mode
from videoclipper.core.filenames import InPlaceValidator, load_directory
from videoclipper.core.output import resolve_output
from videoclipper.core.step_base import ModeStep
from videoclipper.steps.merge.config import MergeConfig
from videoclipper.steps.merge.contracts import MergeInput
from videoclipper.steps.merge.step import MergeStep
from videoclipper.utils.image_tools import apply_clut
from videoclipper.utils.progress import track_progress
from videoclipper.utils.scratch import scratch_directory
from .config import ClutConfig
from .contracts import ClutInput, ClutOutput

logger = logging.getLogger(__name__)


class ClutStep(ModeStep[ClutInput, ClutOutput, ClutConfig]):
    name: ClassVar[str] = "clut"
    input_type: ClassVar = ClutInput
    output_type: ClassVar = ClutOutput
    config_type: ClassVar = ClutConfig

    def validate_inputs(self, inputs: ClutInput) -> bool:
        if not inputs.input_dir.is_dir():
            logger.error(f"Input directory not found: {inputs.input_dir}")
            return False
        if not inputs.clut_path.is_file():
            logger.error(f"CLUT image not found: {inputs.clut_path}")
            return False
        return True

    def run(self, inputs: ClutInput) -> ClutOutput:
        with scratch_directory(self.keep_scratch, prefix="videoclipper_clut_") as scratch:
            index = load_directory(
                inputs.input_dir, validator=InPlaceValidator(fallback_dir=scratch / "renamed")
            )
            target = resolve_output(Mode.CLUT, inputs.input_dir, inputs.output_hint)

            with track_progress("Applying CLUT", len(index)) as bar:
                for _, path in index.items():
                    self.check_cancelled("clut frames")
                    apply_clut(path, inputs.clut_path, target.path / path.name, self.cancel)
                    bar.advance()
        logger.info(f"Applied {inputs.clut_path.name} to {len(index)} frames in {target.path}")

        merged_dirs = []
        for opacity in self.config.merge_opacities:
            self.check_cancelled("clut merge")
            merger = MergeStep(
                config=MergeConfig(opacity=opacity),
                cancel=self.cancel,
                keep_scratch=self.keep_scratch,
            )
            result = merger.execute(MergeInput(first_dir=target.path, second_dir=inputs.input_dir))
            merged_dirs.append(result.output_dir)

        return ClutOutput(output_dir=target.path, frame_count=len(index), merged_dirs=merged_dirs)
