"""S3.01 — Median smoothing (optional).

Paint the merged regions with their palette colours and run a 3×3 per-channel
median filter over the result to erase jagged merge boundaries. Border pixels
are copied unchanged; filtered pixels get full opacity.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy.ndimage import median_filter

from paintbynumbers.engine.context import PipelineContext
from paintbynumbers.engine.registry import Phase, stage
from paintbynumbers.utils.raster import paint_regions

# 3×3 window over rows/columns, channels filtered independently
_WINDOW = (3, 3, 1)


def median_filter_3x3(raster: NDArray[np.uint8]) -> NDArray[np.uint8]:
    out = raster.copy()
    height, width = raster.shape[:2]
    if height < 3 or width < 3:
        return out
    filtered = median_filter(raster[:, :, :3], size=_WINDOW)
    out[1:-1, 1:-1, :3] = filtered[1:-1, 1:-1]
    out[1:-1, 1:-1, 3] = 255
    return out


@stage(
    id="S3.01",
    phase=Phase.SMOOTHING,
    dependencies=["S2.02"],
    tags={"smoothing"},
    description="Median-filter the region colours",
)
def smoothing(ctx: PipelineContext) -> None:
    if ctx.regions is None or ctx.region_map is None:
        return
    ctx.smoothed_raster = median_filter_3x3(paint_regions(ctx.region_map, ctx.regions))
