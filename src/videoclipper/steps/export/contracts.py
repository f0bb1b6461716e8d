"""I/O contracts for Export."""

from pathlib import Path
from pydantic import BaseModel, Field


class ExportInput(BaseModel):
    video_path: Path = Field(..., description="Video to export frames from")
    output_hint: Path | None = Field(None, description="Output directory (auto-generated if omitted)")
    audio_path: Path | None = Field(None, description="Audio file whose duration bounds the export")
    duration_ms: int | None = Field(None, gt=0, description="Explicit duration in milliseconds")


class ExportOutput(BaseModel):
    frames_dir: Path = Field(..., description="Directory containing the exported frames")
    frame_count: int = Field(..., description="Number of frames written")
    duration_ms: int = Field(..., description="Duration that was exported")
    fps_used: int = Field(..., description="Frame rate used for extraction")
    width: int = Field(..., description="Frame width")
    height: int = Field(..., description="Frame height")
