"""API response models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from paintbynumbers.models.requests import RasterPayload


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    environment: str = "development"
    stages_registered: int = 0
    stages: list[str] = Field(default_factory=list)


class GenerateSuccess(BaseModel):
    status: Literal["success"] = "success"
    palette: list[tuple[int, int, int]] = Field(default_factory=list)
    outline_raster: RasterPayload
    colored_raster: RasterPayload
    region_count: int = 0
    processing_time_ms: float = 0.0


class GenerateError(BaseModel):
    status: Literal["error"] = "error"
    message: str
    diagnostic: str = ""


GenerateResponse = GenerateSuccess | GenerateError
