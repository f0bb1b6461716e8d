"""I/O contracts for Clut."""

from pathlib import Path
from pydantic import BaseModel, Field


class ClutInput(BaseModel):
    input_dir: Path = Field(..., description="Frames to recolour")
    clut_path: Path = Field(..., description="Colour lookup table image")
    output_hint: Path | None = Field(
        None, description="Output directory; an existing one is replaced"
    )


class ClutOutput(BaseModel):
    output_dir: Path = Field(..., description="Directory containing the recoloured frames")
    frame_count: int = Field(..., description="Number of frames recoloured")
    merged_dirs: list[Path] = Field(default_factory=list, description="Follow-up merge directories")
