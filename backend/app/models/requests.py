"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AnalyzeOptions(BaseModel):
    compute_edge_map: bool = Field(
        default=True,
        description="Compute the informational Sobel edge map",
    )


class AnalyzeRequest(BaseModel):
    image: str = Field(..., description="Encoded image as base64 or a data: URL")
    options: AnalyzeOptions = Field(default_factory=AnalyzeOptions)
