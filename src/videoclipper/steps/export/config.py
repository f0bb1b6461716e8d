"""Configuration for Export: video to frames."""

from pydantic import BaseModel, Field


class ExportConfig(BaseModel):
    fps: int = Field(30, gt=0, description="Frame rate the video is resampled to before extraction")
    pixel_upper_limit: int = Field(480, gt=0, description="Longer side of the exported frames")
