"""S0.01 — Input validation.

Fail fast on rasters and parameters the pipeline cannot process, instead of
letting a later stage degrade silently.
"""

from __future__ import annotations

import numpy as np

from paintbynumbers.engine.context import PipelineContext
from paintbynumbers.engine.errors import InvalidInputError
from paintbynumbers.engine.registry import Phase, stage


def validate(ctx: PipelineContext) -> None:
    raster = ctx.raster
    if raster.ndim != 3 or raster.shape[2] != 4:
        raise InvalidInputError(f"Raster must be (height, width, 4) RGBA, got shape {raster.shape}")
    if raster.shape[0] == 0 or raster.shape[1] == 0:
        raise InvalidInputError(f"Raster must have a positive area, got {raster.shape[1]}x{raster.shape[0]}")
    if raster.dtype != np.uint8:
        raise InvalidInputError(f"Raster must hold 8-bit channels, got {raster.dtype}")
    if ctx.palette_size < 1:
        raise InvalidInputError(f"Palette size must be at least 1, got {ctx.palette_size}")

    cfg = ctx.config
    if cfg.color_threshold < 0:
        raise InvalidInputError(f"color_threshold must be non-negative, got {cfg.color_threshold}")
    if cfg.min_region_size < 0:
        raise InvalidInputError(f"min_region_size must be non-negative, got {cfg.min_region_size}")
    if cfg.thinness_threshold <= 0:
        raise InvalidInputError(f"thinness_threshold must be positive, got {cfg.thinness_threshold}")
    if cfg.sample_size < 1:
        raise InvalidInputError(f"sample_size must be at least 1, got {cfg.sample_size}")


@stage(
    id="S0.01",
    phase=Phase.VALIDATION,
    description="Validate raster shape and run parameters",
)
def validate_input(ctx: PipelineContext) -> None:
    validate(ctx)
