"""Configuration for Clip: frames (and audio) to the final video."""

from pydantic import BaseModel, Field


class ClipConfig(BaseModel):
    fps: int = Field(30, gt=0, description="Frame rate of the encoded clip")
    frame_prefix: str = Field("frame", description="Prefix every input frame is renamed to")
