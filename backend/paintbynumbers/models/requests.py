"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RasterPayload(BaseModel):
    width: int = Field(..., description="Raster width in pixels")
    height: int = Field(..., description="Raster height in pixels")
    data: str = Field(..., description="Base64 of the raw RGBA bytes, row-major")


class GenerateOptions(BaseModel):
    color_threshold: float = Field(default=20.0, description="Max RGB distance from a region's seed pixel")
    min_region_size: int = Field(default=100, description="Smaller regions are merged and left unlabeled")
    thinness_threshold: float = Field(default=10.0, description="Max bounding-box aspect ratio before merging")
    smooth: bool = Field(default=False, description="Median-filter and re-segment before labeling")
    outline_by_color: bool = Field(default=False, description="Outline palette colour changes instead of regions")
    seed: int | None = Field(default=None, description="Random seed for k-means initialisation")


class GenerateRequest(BaseModel):
    raster: RasterPayload
    palette_size: int = Field(..., description="Number of paint colours (k)")
    options: GenerateOptions = Field(default_factory=GenerateOptions)
