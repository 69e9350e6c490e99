"""S2.02 — Region merging.

Fold small or thin regions into a neighbour. Regions are visited once, in
ascending order of their size before any merge; each visit uses the region's
current state. A region qualifies when it has fewer than ``min_region_size``
pixels or its bounding-box aspect ratio exceeds ``thinness_threshold``.

Target choice: the first neighbour already carrying the same palette colour,
otherwise the neighbour whose palette colour is nearest. A region without live
neighbours stays as it is. The target keeps its assigned colour.
"""

from __future__ import annotations

import logging

import numpy as np

from paintbynumbers.engine.config import PipelineConfig
from paintbynumbers.engine.context import PipelineContext, Region, RegionMap, RegionTable
from paintbynumbers.engine.registry import Phase, stage
from paintbynumbers.utils.color import euclidean_distance

logger = logging.getLogger(__name__)


def is_merge_candidate(region: Region, config: PipelineConfig) -> bool:
    return region.size < config.min_region_size or region.aspect_ratio > config.thinness_threshold


def neighbor_ids(region: Region, region_map: RegionMap, table: RegionTable) -> list[int]:
    """Live 4-connected neighbour ids, in order of discovery.

    Pixels are scanned in the region's pixel order, each looking north, south,
    west, then east.
    """
    width, height = region_map.width, region_map.height
    pixels = region.pixels
    x = pixels % width
    candidates = np.stack([pixels - width, pixels + width, pixels - 1, pixels + 1], axis=1)
    inside = np.stack([
        pixels >= width,
        pixels < (height - 1) * width,
        x > 0,
        x < width - 1,
    ], axis=1)
    found = region_map.ids[candidates[inside]]
    found = found[found != region.id]
    _, first = np.unique(found, return_index=True)
    ordered = found[np.sort(first)].tolist()
    return [nid for nid in ordered if table.get(nid) is not None]


def choose_target(region: Region, candidates: list[int], table: RegionTable) -> int | None:
    best_id: int | None = None
    best_dist = float("inf")
    for nid in candidates:
        neighbor = table.get(nid)
        if neighbor.color == region.color:
            return nid
        if region.color is None or neighbor.color is None:
            continue
        dist = euclidean_distance(region.color, neighbor.color)
        if dist < best_dist:
            best_dist = dist
            best_id = nid
    return best_id


def merge_into(region: Region, target: Region, region_map: RegionMap, table: RegionTable) -> None:
    region_map.ids[region.pixels] = target.id
    target.absorb(region)
    table.remove(region.id)


def merge_regions(table: RegionTable, region_map: RegionMap, config: PipelineConfig) -> int:
    """Merge qualifying regions in place; returns how many were merged away."""
    order = sorted(table, key=lambda r: r.size)
    merged = 0
    for region in order:
        if not region.live or not is_merge_candidate(region, config):
            continue
        target_id = choose_target(region, neighbor_ids(region, region_map, table), table)
        if target_id is None:
            continue
        merge_into(region, table.get(target_id), region_map, table)
        merged += 1
    return merged


@stage(
    id="S2.02",
    phase=Phase.SEGMENTATION,
    dependencies=["S2.01"],
    description="Merge small and thin regions into their best neighbour",
)
def region_merging(ctx: PipelineContext) -> None:
    if ctx.regions is None or ctx.region_map is None:
        return
    before = len(ctx.regions)
    merged = merge_regions(ctx.regions, ctx.region_map, ctx.config)
    logger.debug("Region merging: %d -> %d regions (%d merged)", before, before - merged, merged)
