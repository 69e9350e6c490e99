"""S4.03 — Flat-coloured preview: every live region filled with its palette colour."""

from __future__ import annotations

from paintbynumbers.engine.context import PipelineContext
from paintbynumbers.engine.registry import Phase, stage
from paintbynumbers.utils.raster import paint_regions


@stage(
    id="S4.03",
    phase=Phase.RENDERING,
    dependencies=["S2.02", "S3.02"],
    description="Fill regions with their palette colours",
)
def colored_rendering(ctx: PipelineContext) -> None:
    if ctx.regions is None or ctx.region_map is None:
        return
    ctx.colored_raster = paint_regions(ctx.region_map, ctx.regions)
