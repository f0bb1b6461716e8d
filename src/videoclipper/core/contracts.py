"""Common Pydantic models shared across modes."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class Mode(str, Enum):
    """The six pipelines exposed on the command line."""

    EXPORT = "export"
    SAMPLE = "sample"
    MERGE = "merge"
    CLUT = "clut"
    CLIP = "clip"
    FILTER = "filter"


class OutputTarget(BaseModel):
    """Destination of a mode: a single file or a directory of frames."""

    kind: Literal["file", "directory"]
    path: Path

    @classmethod
    def file(cls, path: Path) -> OutputTarget:
        return cls(kind="file", path=Path(path))

    @classmethod
    def directory(cls, path: Path) -> OutputTarget:
        return cls(kind="directory", path=Path(path))

    @property
    def is_file(self) -> bool:
        return self.kind == "file"

    @property
    def is_directory(self) -> bool:
        return self.kind == "directory"


class AppConfig(BaseModel):
    """Persisted user configuration (config.yaml in the app directory).

    Values are stored as entered; range checks happen in the parameter
    resolver so one bad field only affects the parameter that reads it.
    """

    audio_path: str | None = Field(None, description="Audio file or directory holding one")
    fps: int = Field(30, description="Frames per second for export and clip")
    pixel_upper_limit: int = Field(480, description="Longer side of exported frames")
    sampling_number: int = Field(10, description="Frames taken by sample --multiple")
    opacity: float = Field(0.5, description="Blend opacity of the second image")
    multiple_opacities_1: float = Field(0.25, description="First opacity for clut --clut-multiple")
    multiple_opacities_2: float = Field(0.5, description="Second opacity for clut --clut-multiple")
    multiple_opacities_3: float = Field(0.75, description="Third opacity for clut --clut-multiple")
    keep_scratch: bool = Field(False, description="Keep scratch directories for inspection")
