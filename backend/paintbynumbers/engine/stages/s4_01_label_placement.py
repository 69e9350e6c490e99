"""S4.01 — Label placement by boundary erosion.

Find a point well inside each region, also for non-convex ("C"-shaped)
regions where the plain centroid can fall outside. The region mask is eroded
one 4-connected boundary layer at a time; once a step would remove every
remaining pixel, the survivors are kept and their rounded mean position is the
label point.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from scipy.ndimage import binary_erosion, generate_binary_structure

from paintbynumbers.engine.context import PipelineContext
from paintbynumbers.engine.registry import Phase, stage
from paintbynumbers.utils.color import round_half_up

# Cross-shaped structuring element: a pixel survives only if all 4 neighbours are set
_CROSS = generate_binary_structure(2, 1)


def find_label_position(pixels: Sequence[int], width: int) -> tuple[int, int] | None:
    """Interior (x, y) for a region given by flat pixel indices; None if empty."""
    if len(pixels) == 0:
        return None

    idx = np.asarray(pixels, dtype=np.int64)
    xs = idx % width
    ys = idx // width
    x0, y0 = int(xs.min()), int(ys.min())

    # Zero margin so pixels on the bounding box edge count as boundary
    mask = np.zeros((int(ys.max()) - y0 + 3, int(xs.max()) - x0 + 3), dtype=bool)
    mask[ys - y0 + 1, xs - x0 + 1] = True

    while True:
        eroded = binary_erosion(mask, structure=_CROSS, border_value=0)
        if not eroded.any():
            break
        mask = eroded

    rows, cols = np.nonzero(mask)
    x = round_half_up(float(cols.mean())) + x0 - 1
    y = round_half_up(float(rows.mean())) + y0 - 1
    return (int(x), int(y))


@stage(
    id="S4.01",
    phase=Phase.RENDERING,
    dependencies=["S2.02", "S3.02"],
    description="Place one label per labelable region",
)
def label_placement(ctx: PipelineContext) -> None:
    if ctx.regions is None:
        return
    positions: dict[int, tuple[int, int]] = {}
    for region in ctx.regions:
        if region.size < ctx.config.min_region_size or region.color_index < 0:
            continue
        pos = find_label_position(region.pixels, ctx.width)
        if pos is not None:
            positions[region.id] = pos
    ctx.label_positions = positions
