"""S1.01 — Pixel sampling.

Stride sample of the raster's RGB triples for clustering. Deterministic:
step = floor(N / S), indices 0, step, 2*step, ... while < N.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from paintbynumbers.engine.context import PipelineContext
from paintbynumbers.engine.registry import Phase, stage


def get_pixels(raster: NDArray[np.uint8]) -> NDArray[np.int64]:
    """All RGB triples in raster order, alpha dropped."""
    return raster[:, :, :3].reshape(-1, 3).astype(np.int64)


def sample_pixels(pixels: NDArray[np.int64], sample_size: int) -> NDArray[np.int64]:
    n = len(pixels)
    if n <= sample_size:
        return pixels
    step = n // sample_size
    return pixels[::step]


@stage(
    id="S1.01",
    phase=Phase.PALETTE,
    dependencies=["S0.01"],
    description="Stride-sample pixels for clustering",
)
def pixel_sampling(ctx: PipelineContext) -> None:
    ctx.sample = sample_pixels(get_pixels(ctx.raster), ctx.config.sample_size)
