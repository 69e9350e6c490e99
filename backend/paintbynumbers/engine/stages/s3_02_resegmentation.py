"""S3.02 — Exact-colour re-segmentation (optional).

After smoothing, the region map no longer matches the pixels. Rebuild it from
4-connected components of identical colour in the smoothed raster, then assign
palette colours again exactly as region growing does.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray
from skimage.measure import label

from paintbynumbers.engine.context import PipelineContext, RegionMap, RegionTable
from paintbynumbers.engine.registry import Phase, stage
from paintbynumbers.engine.stages.s2_01_region_growing import assign_palette

logger = logging.getLogger(__name__)


def _pack_rgb(raster: NDArray[np.uint8]) -> NDArray[np.int64]:
    rgb = raster[:, :, :3].astype(np.int64)
    return (rgb[:, :, 0] << 16) | (rgb[:, :, 1] << 8) | rgb[:, :, 2]


def label_exact_regions(raster: NDArray[np.uint8]) -> tuple[RegionTable, RegionMap]:
    height, width = raster.shape[:2]
    # background=-1 never occurs, so black pixels are labeled too
    labels = label(_pack_rgb(raster), background=-1, connectivity=1)
    flat = labels.ravel().astype(np.int32)

    # Labels run 1..L in scan order; a stable sort keeps raster order within each run
    order = np.argsort(flat, kind="stable").astype(np.int64)
    bounds = np.zeros(int(flat.max()) + 1, dtype=np.int64)
    np.cumsum(np.bincount(flat)[1:], out=bounds[1:])

    table = RegionTable.from_runs(order, bounds, raster)
    return table, RegionMap(width=width, height=height, ids=flat)


@stage(
    id="S3.02",
    phase=Phase.SMOOTHING,
    dependencies=["S3.01"],
    tags={"smoothing"},
    description="Rebuild regions from exact colours of the smoothed raster",
)
def resegmentation(ctx: PipelineContext) -> None:
    if ctx.smoothed_raster is None:
        return
    table, region_map = label_exact_regions(ctx.smoothed_raster)
    assign_palette(table, ctx.palette)
    ctx.regions = table
    ctx.region_map = region_map
    logger.debug("Re-segmentation: %d regions", len(table))
