"""Filter: run a G'MIC command over every frame of a directory."""

from __future__ import annotations

import logging
from typing import ClassVar

from videoclipper.core.contracts import Mode
from videoclipper.core.filenames import InPlaceValidator, canonical_digits, load_directory
from videoclipper.core.output import resolve_output
from videoclipper.core.step_base import ModeStep
from videoclipper.utils.image_tools import apply_filter, strip_verbosity, warn_multi_output
from videoclipper.utils.progress import track_progress
from videoclipper.utils.scratch import scratch_directory
from .config import FilterConfig
from .contracts import FilterInput, FilterOutput

logger = logging.getLogger(__name__)


class FilterStep(ModeStep[FilterInput, FilterOutput, FilterConfig]):
    name: ClassVar[str] = "filter"
    input_type: ClassVar = FilterInput
    output_type: ClassVar = FilterOutput
    config_type: ClassVar = FilterConfig

    def validate_inputs(self, inputs: FilterInput) -> bool:
        if not inputs.input_dir.is_dir():
            logger.error(f"Filter input must be a directory: {inputs.input_dir}")
            return False
        if not strip_verbosity(self.config.filter_args):
            logger.error("No filter arguments left after removing verbosity flags")
            return False
        return True

    def run(self, inputs: FilterInput) -> FilterOutput:
        args = strip_verbosity(self.config.filter_args)
        with scratch_directory(self.keep_scratch, prefix="videoclipper_filter_") as scratch:
            index = load_directory(
                inputs.input_dir, validator=InPlaceValidator(fallback_dir=scratch / "renamed")
            )
            target = resolve_output(Mode.FILTER, inputs.input_dir, inputs.output_hint, filter_args=args)
            logger.debug(f"G'MIC arguments: {args}")

            with track_progress("Filtering frames", len(index)) as bar:
                for identifier, path in index.items():
                    self.check_cancelled("filter frames")
                    out = target.path / f"image_{canonical_digits(identifier)}{path.suffix}"
                    apply_filter(path, args, out, self.cancel)
                    bar.advance()

        groups = warn_multi_output(target.path)
        logger.info(f"Filtered {len(index)} frames into {target.path}")
        return FilterOutput(output_dir=target.path, frame_count=len(index), multi_output_groups=groups)
