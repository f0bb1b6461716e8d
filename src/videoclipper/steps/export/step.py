"""Export: cut, resize and resample a video, then write its frames as PNGs."""

from __future__ import annotations

import logging
from typing import ClassVar

from videoclipper.core.contracts import Mode
from videoclipper.core.duration import derive_duration_ms
from videoclipper.core.errors import ParameterError
from videoclipper.core.output import resolve_output
from videoclipper.core.step_base import ModeStep
from videoclipper.utils import ffmpeg
from videoclipper.utils.progress import track_progress
from videoclipper.utils.scratch import scratch_directory
from .config import ExportConfig
from .contracts import ExportInput, ExportOutput

logger = logging.getLogger(__name__)


class ExportStep(ModeStep[ExportInput, ExportOutput, ExportConfig]):
    name: ClassVar[str] = "export"
    input_type: ClassVar = ExportInput
    output_type: ClassVar = ExportOutput
    config_type: ClassVar = ExportConfig

    def validate_inputs(self, inputs: ExportInput) -> bool:
        if not inputs.video_path.is_file():
            logger.error(f"Video not found: {inputs.video_path}")
            return False
        return True

    def run(self, inputs: ExportInput) -> ExportOutput:
        duration_ms = derive_duration_ms(
            inputs.duration_ms, inputs.audio_path, inputs.video_path, self.cancel
        )
        frame_count = duration_ms * self.config.fps // 1000
        if frame_count <= 0:
            raise ParameterError("duration", f"{duration_ms} ms is too short for one frame")

        target = resolve_output(Mode.EXPORT, inputs.video_path, inputs.output_hint)
        suffix = inputs.video_path.suffix or ".mp4"

        with scratch_directory(self.keep_scratch, prefix="videoclipper_export_") as scratch:
            self.check_cancelled("cut video")
            cut = ffmpeg.cut_video(inputs.video_path, scratch / f"cut{suffix}", duration_ms, self.cancel)

            width, height = ffmpeg.probe_dimensions(cut, self.cancel)
            new_width, new_height = ffmpeg.scaled_dimensions(
                width, height, self.config.pixel_upper_limit
            )
            logger.debug(f"Resizing {width}x{height} -> {new_width}x{new_height}")
            resized = ffmpeg.resize_video(cut, scratch / f"resized{suffix}", new_width, new_height, self.cancel)

            resampled = ffmpeg.adjust_framerate(
                resized, scratch / f"resampled{suffix}", self.config.fps, self.cancel
            )

            with track_progress("Exporting frames", frame_count) as bar:
                tick = bar.directory_counter(target.path, "frame_*.png")
                ffmpeg.extract_frames(resampled, target.path, frame_count, self.cancel, on_tick=tick)
                tick()

        written = len(list(target.path.glob("frame_*.png")))
        if written < frame_count:
            logger.warning(f"Expected {frame_count} frames, the video yielded {written}")
        logger.info(f"Exported {written} frames to {target.path}")
        return ExportOutput(
            frames_dir=target.path,
            frame_count=written,
            duration_ms=duration_ms,
            fps_used=self.config.fps,
            width=new_width,
            height=new_height,
        )
