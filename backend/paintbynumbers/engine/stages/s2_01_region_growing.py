"""S2.01 — Region growing.

Flood-fill the full-resolution raster into fine regions. Pixels are visited in
raster order; every unassigned pixel seeds a new region that grows over
4-connected neighbours whose colour is closer than ``color_threshold`` to the
*seed* colour, never the running average, so the outcome depends on scan
order.

Once all regions exist each one is given the palette colour nearest to its
average RGB.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from paintbynumbers.engine.context import Color, PipelineContext, RegionMap, RegionTable
from paintbynumbers.engine.registry import Phase, stage
from paintbynumbers.utils.color import closest_color_index

logger = logging.getLogger(__name__)


def grow_regions(raster: NDArray[np.uint8], color_threshold: float) -> tuple[RegionTable, RegionMap]:
    height, width = raster.shape[:2]
    n = width * height
    region_map = RegionMap.empty(width, height)
    # Pixel order of the fill; each region occupies one contiguous run
    order = np.empty(n, dtype=np.int64)
    bounds = np.zeros(n + 1, dtype=np.int64)

    # memoryviews give plain-int element access without per-pixel Python objects
    ids = memoryview(region_map.ids)
    visited = memoryview(order)
    run_ends = memoryview(bounds)
    red, green, blue = (memoryview(np.ascontiguousarray(raster[:, :, c]).ravel()) for c in range(3))
    limit_sq = color_threshold * color_threshold
    last_row = (height - 1) * width
    rid = 0
    pos = 0

    for start in range(n):
        if ids[start]:
            continue
        rid += 1
        sr, sg, sb = red[start], green[start], blue[start]
        ids[start] = rid
        # Explicit stack, no recursion
        stack = [start]
        while stack:
            idx = stack.pop()
            visited[pos] = idx
            pos += 1
            x = idx % width

            neighbors = []
            if idx >= width:
                neighbors.append(idx - width)
            if idx < last_row:
                neighbors.append(idx + width)
            if x > 0:
                neighbors.append(idx - 1)
            if x < width - 1:
                neighbors.append(idx + 1)

            for nb in neighbors:
                if ids[nb]:
                    continue
                dr = red[nb] - sr
                dg = green[nb] - sg
                db = blue[nb] - sb
                if dr * dr + dg * dg + db * db < limit_sq:
                    ids[nb] = rid
                    stack.append(nb)
        run_ends[rid] = pos

    table = RegionTable.from_runs(order, bounds[:rid + 1], raster)
    return table, region_map


def assign_palette(table: RegionTable, palette: Sequence[Color]) -> None:
    """Give every live region the palette colour closest to its average."""
    if not palette:
        return
    for region in table:
        index = closest_color_index(region.average_color, palette)
        region.color_index = index
        region.color = palette[index]


@stage(
    id="S2.01",
    phase=Phase.SEGMENTATION,
    dependencies=["S1.03"],
    description="Grow seed-thresholded regions and assign palette colours",
)
def region_growing(ctx: PipelineContext) -> None:
    table, region_map = grow_regions(ctx.raster, ctx.config.color_threshold)
    assign_palette(table, ctx.palette)
    ctx.regions = table
    ctx.region_map = region_map
    logger.debug("Region growing: %d regions", len(table))
