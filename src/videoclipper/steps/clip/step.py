"""Clip: encode a frame directory to MP4, then mux and trim the audio.

States: idle -> encoding_frames -> (with audio) muxing -> trimming -> done.
Any stage may end in cancelled or failed; ``failed_stage`` names the stage.
"""

from __future__ import annotations

import logging
import shutil
from enum import Enum
from pathlib import Path
from typing import ClassVar

from videoclipper.core.contracts import Mode
from videoclipper.core.duration import derive_duration_ms
from videoclipper.core.errors import OutputError, PipelineCancelled, VideoClipperError
from videoclipper.core.filenames import InPlaceValidator, load_directory, stage_sequence
from videoclipper.core.output import encoder_path, finalize_encoded, resolve_output
from videoclipper.core.step_base import ModeStep
from videoclipper.utils import ffmpeg
from videoclipper.utils.progress import track_progress
from videoclipper.utils.scratch import scratch_directory
from .config import ClipConfig
from .contracts import ClipInput, ClipOutput

logger = logging.getLogger(__name__)


class ClipState(str, Enum):
    IDLE = "idle"
    ENCODING_FRAMES = "encoding_frames"
    MUXING = "muxing"
    TRIMMING = "trimming"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ClipStep(ModeStep[ClipInput, ClipOutput, ClipConfig]):
    name: ClassVar[str] = "clip"
    input_type: ClassVar = ClipInput
    output_type: ClassVar = ClipOutput
    config_type: ClassVar = ClipConfig

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.state = ClipState.IDLE
        self.failed_stage: str | None = None

    def validate_inputs(self, inputs: ClipInput) -> bool:
        if not inputs.frames_dir.is_dir():
            logger.error(f"Frames directory not found: {inputs.frames_dir}")
            return False
        if inputs.audio_path is not None and not inputs.audio_path.is_file():
            logger.error(f"Audio file not found: {inputs.audio_path}")
            return False
        return True

    def _enter(self, state: ClipState) -> None:
        self.check_cancelled(state.value)
        logger.debug(f"Clip state: {self.state.value} -> {state.value}")
        self.state = state

    def run(self, inputs: ClipInput) -> ClipOutput:
        self.state = ClipState.IDLE
        self.failed_stage = None
        try:
            return self._run(inputs)
        except PipelineCancelled:
            self.state = ClipState.CANCELLED
            raise
        except VideoClipperError:
            self.failed_stage = self.state.value
            self.state = ClipState.FAILED
            raise

    def _run(self, inputs: ClipInput) -> ClipOutput:
        audio = inputs.audio_path
        with scratch_directory(self.keep_scratch, prefix="videoclipper_clip_") as scratch:
            validator = InPlaceValidator(
                required_prefix=self.config.frame_prefix, fallback_dir=scratch / "renamed"
            )
            index = load_directory(inputs.frames_dir, validator=validator)
            target = resolve_output(Mode.CLIP, inputs.frames_dir, inputs.output_hint, audio_path=audio)
            requested = target.path
            encoded = encoder_path(requested)
            if encoded != requested:
                logger.info(f"Encoding to {encoded.name}, renamed to {requested.name} when done")

            staged_dir = scratch / "frames"
            pattern, count = stage_sequence(index, staged_dir)
            stem = requested.stem

            self._enter(ClipState.ENCODING_FRAMES)
            no_audio = scratch / f"{stem}_no_audio.mp4"
            with track_progress("Encoding frames", None) as bar:
                ffmpeg.encode_frames(
                    staged_dir, pattern, self.config.fps, no_audio, self.cancel,
                    on_tick=lambda: bar.advance(0),
                )

            duration_ms = None
            if audio is None:
                if inputs.duration_ms is not None:
                    logger.warning("A duration without audio is ignored, the clip keeps every frame")
                _copy(no_audio, encoded)
            else:
                self._enter(ClipState.MUXING)
                merged = scratch / f"{stem}_merged.mp4"
                ffmpeg.mux_audio(no_audio, audio, merged, self.cancel)

                duration_ms = derive_duration_ms(inputs.duration_ms, audio, None, self.cancel)
                self._enter(ClipState.TRIMMING)
                if duration_ms is None:
                    _copy(merged, encoded)
                else:
                    ffmpeg.trim_video(merged, encoded, duration_ms, self.cancel)

            final = finalize_encoded(encoded, requested)

        self.state = ClipState.DONE
        logger.info(f"Clip written to {final}")
        return ClipOutput(
            video_path=final,
            frame_count=count,
            has_audio=audio is not None,
            duration_ms=duration_ms,
        )


def _copy(src: Path, dst: Path) -> None:
    try:
        shutil.copy2(src, dst)
    except OSError as e:
        raise OutputError(f"cannot copy {src} to {dst}: {e}") from e
