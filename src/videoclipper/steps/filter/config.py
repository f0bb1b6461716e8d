"""Configuration for Filter: a G'MIC command over every frame."""

from pydantic import BaseModel, Field


class FilterConfig(BaseModel):
    filter_args: list[str] = Field(..., min_length=1, description="G'MIC arguments, passed through")
