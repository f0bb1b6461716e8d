"""I/O contracts for Sample."""

from pathlib import Path
from pydantic import BaseModel, Field


class SampleInput(BaseModel):
    video_path: Path = Field(..., description="Video to sample")
    output_hint: Path | None = Field(None, description="Output file or directory")
    audio_path: Path | None = Field(None, description="Audio file whose duration bounds the sampling")
    duration_ms: int | None = Field(None, gt=0, description="Explicit duration in milliseconds")


class SampleOutput(BaseModel):
    output_path: Path = Field(..., description="Sample file, or directory of samples")
    frame_paths: list[Path] = Field(default_factory=list, description="Written sample frames")
    timestamps_ms: list[int] = Field(default_factory=list, description="Timestamp of each sample")
    duration_ms: int = Field(..., description="Duration the samples were spread over")
