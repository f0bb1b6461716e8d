"""I/O contracts for Filter."""

from pathlib import Path
from pydantic import BaseModel, Field


class FilterInput(BaseModel):
    input_dir: Path = Field(..., description="Directory of frames to filter")
    output_hint: Path | None = Field(
        None, description="Output directory; an existing one is replaced"
    )


class FilterOutput(BaseModel):
    output_dir: Path = Field(..., description="Directory containing the filtered frames")
    frame_count: int = Field(..., description="Number of frames filtered")
    multi_output_groups: list[int] = Field(
        default_factory=list, description="Output numbers when the filter emitted several images per frame"
    )
