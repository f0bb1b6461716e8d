"""I/O contracts for Merge."""

from pathlib import Path
from pydantic import BaseModel, Field


class MergeInput(BaseModel):
    first_dir: Path = Field(..., description="Base frames (their size is kept)")
    second_dir: Path = Field(..., description="Frames blended on top")
    output_hint: Path | None = Field(None, description="Output directory (auto-generated if omitted)")


class MergeOutput(BaseModel):
    output_dir: Path = Field(..., description="Directory containing the blended frames")
    merged_count: int = Field(..., description="Number of frames blended")
    skipped_ids: list[int] = Field(default_factory=list, description="Ids present in only one input")
    opacity: float = Field(..., description="Opacity used")
