"""I/O contracts for Clip."""

from pathlib import Path
from pydantic import BaseModel, Field


class ClipInput(BaseModel):
    frames_dir: Path = Field(..., description="Directory of frames to encode")
    output_hint: Path | None = Field(None, description="Output file, or directory to place it in")
    audio_path: Path | None = Field(None, description="Audio track to mux in")
    duration_ms: int | None = Field(None, gt=0, description="Explicit clip duration in milliseconds")


class ClipOutput(BaseModel):
    video_path: Path = Field(..., description="Final clip")
    frame_count: int = Field(..., description="Number of frames encoded")
    has_audio: bool = Field(..., description="Whether an audio track was muxed in")
    duration_ms: int | None = Field(None, description="Duration the clip was trimmed to")
