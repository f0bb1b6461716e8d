"""Configuration for Merge: pixel blend of two frame directories."""

from pydantic import BaseModel, Field


class MergeConfig(BaseModel):
    opacity: float = Field(0.5, ge=0.0, le=1.0, description="Weight of the second directory's frames")
