"""S1.03 — Palette optimisation.

Reduce the k-means candidates to at most k colours:

- Weight each candidate by its own cluster size, drop empty clusters and sort
  by weight, heaviest first; an identical colour later in that order is dropped.
- Seed the palette with the heaviest candidate, then repeatedly add the
  candidate whose minimum distance to the palette is largest (max-min
  diversity) until k colours are chosen or candidates run out.
- Sort the result by ascending luminance; list position + 1 is the paint number.

When there are no more candidates than k, every distinct centroid is kept.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from paintbynumbers.engine.context import Color, PipelineContext
from paintbynumbers.engine.registry import Phase, stage
from paintbynumbers.utils.color import euclidean_distance, sort_by_luminance

logger = logging.getLogger(__name__)


def _distinct(colors: Sequence[Sequence[int]]) -> list[Color]:
    seen: dict[Color, None] = {}
    for c in colors:
        seen.setdefault((int(c[0]), int(c[1]), int(c[2])), None)
    return list(seen)


def weighted_candidates(centroids: NDArray[np.int64], sizes: Sequence[int]) -> list[Color]:
    """Non-empty centroids, heaviest cluster first, each colour once."""
    weighted = [
        ((int(c[0]), int(c[1]), int(c[2])), int(size))
        for c, size in zip(centroids, sizes)
        if size > 0
    ]
    # list.sort is stable, so equal weights keep centroid order
    weighted.sort(key=lambda item: -item[1])
    return _distinct([color for color, _ in weighted])


def optimize_palette(centroids: NDArray[np.int64], sizes: Sequence[int], k: int) -> list[Color]:
    if len(centroids) <= k:
        return sort_by_luminance(_distinct(centroids))

    candidates = weighted_candidates(centroids, sizes)
    palette: list[Color] = []
    if candidates:
        palette.append(candidates.pop(0))

    while len(palette) < k and candidates:
        best_idx = -1
        best_min_dist = -1.0
        for i, candidate in enumerate(candidates):
            min_dist = min(euclidean_distance(candidate, color) for color in palette)
            if min_dist > best_min_dist:
                best_min_dist = min_dist
                best_idx = i
        palette.append(candidates.pop(best_idx))

    return sort_by_luminance(palette)


@stage(
    id="S1.03",
    phase=Phase.PALETTE,
    dependencies=["S1.02"],
    description="Reduce candidate colours to a luminance-ordered palette",
)
def palette_optimization(ctx: PipelineContext) -> None:
    if ctx.kmeans is None:
        return
    ctx.palette = optimize_palette(ctx.kmeans.centroids, ctx.kmeans.sizes.tolist(), ctx.palette_size)
    logger.debug(
        "Palette: %d colours from %d candidates", len(ctx.palette), len(ctx.kmeans.centroids)
    )
