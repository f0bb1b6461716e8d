"""Configuration for Sample: representative frames of a video."""

from pydantic import BaseModel, Field


class SampleConfig(BaseModel):
    sampling_number: int = Field(1, gt=0, description="Frames to sample (1 writes a single file)")
