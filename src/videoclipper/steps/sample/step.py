"""Sample: one frame from the middle, or n frames evenly spread over the duration."""

from __future__ import annotations

import logging
from typing import ClassVar

from videoclipper.core.contracts import Mode
from videoclipper.core.duration import derive_duration_ms
from videoclipper.core.output import resolve_output
from videoclipper.core.step_base import ModeStep
from videoclipper.utils import ffmpeg
from videoclipper.utils.progress import track_progress
from .config import SampleConfig
from .contracts import SampleInput, SampleOutput

logger = logging.getLogger(__name__)


def sample_timestamps(duration_ms: int, count: int) -> list[int]:
    """Midpoint for one sample; otherwise ``k * (duration // (count + 1))`` for k = 1..count."""
    if count <= 1:
        return [duration_ms // 2]
    interval = duration_ms // (count + 1)
    return [interval * k for k in range(1, count + 1)]


class SampleStep(ModeStep[SampleInput, SampleOutput, SampleConfig]):
    name: ClassVar[str] = "sample"
    input_type: ClassVar = SampleInput
    output_type: ClassVar = SampleOutput
    config_type: ClassVar = SampleConfig

    def validate_inputs(self, inputs: SampleInput) -> bool:
        if not inputs.video_path.is_file():
            logger.error(f"Video not found: {inputs.video_path}")
            return False
        return True

    def run(self, inputs: SampleInput) -> SampleOutput:
        count = self.config.sampling_number
        duration_ms = derive_duration_ms(
            inputs.duration_ms, inputs.audio_path, inputs.video_path, self.cancel
        )
        target = resolve_output(
            Mode.SAMPLE, inputs.video_path, inputs.output_hint, sampling_number=count
        )
        timestamps = sample_timestamps(duration_ms, count)

        if target.is_file:
            ffmpeg.extract_frame(inputs.video_path, timestamps[0], target.path, self.cancel)
            logger.info(f"Sampled frame at {timestamps[0]} ms to {target.path}")
            return SampleOutput(
                output_path=target.path,
                frame_paths=[target.path],
                timestamps_ms=timestamps,
                duration_ms=duration_ms,
            )

        written = []
        with track_progress("Sampling frames", len(timestamps)) as bar:
            for k, timestamp in enumerate(timestamps, start=1):
                self.check_cancelled("sample frames")
                frame = target.path / f"sample_frame_{k}.png"
                ffmpeg.extract_frame(inputs.video_path, timestamp, frame, self.cancel)
                written.append(frame)
                bar.advance()

        logger.info(f"Sampled {len(written)} frames to {target.path}")
        return SampleOutput(
            output_path=target.path,
            frame_paths=written,
            timestamps_ms=timestamps,
            duration_ms=duration_ms,
        )
