"""S4.02 — Outline rendering.

White canvas, black 1-pixel boundaries wherever a pixel's right or bottom
neighbour belongs to a different region (or carries a different palette
colour when ``outline_by_color`` is set), then the 1-based palette number of
each labeled region centred on its label point.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageDraw, ImageFont

from paintbynumbers.engine.context import PipelineContext, RegionMap, RegionTable
from paintbynumbers.engine.registry import Phase, stage

_WHITE = (255, 255, 255, 255)
_BLACK = (0, 0, 0, 255)


def boundary_mask(keys: NDArray[np.int64]) -> NDArray[np.bool_]:
    """True on the far side of every edge between differing keys."""
    mask = np.zeros(keys.shape, dtype=bool)
    mask[:, 1:] |= keys[:, :-1] != keys[:, 1:]
    mask[1:, :] |= keys[:-1, :] != keys[1:, :]
    return mask


def outline_keys(region_map: RegionMap, table: RegionTable, by_color: bool) -> NDArray[np.int64]:
    ids = region_map.to_array().astype(np.int64)
    if not by_color:
        return ids
    lut = np.full(table.capacity + 1, -1, dtype=np.int64)
    for region in table:
        lut[region.id] = region.color_index
    return lut[ids]


def draw_labels(
    canvas: NDArray[np.uint8],
    labels: list[tuple[str, tuple[int, int]]],
    font_size: int,
) -> NDArray[np.uint8]:
    if not labels:
        return canvas
    image = Image.fromarray(canvas)
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default(size=font_size)
    for text, (x, y) in labels:
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        origin = (x - (right - left) / 2 - left, y - (bottom - top) / 2 - top)
        draw.text(origin, text, fill=_BLACK, font=font)
    return np.array(image, dtype=np.uint8)


def render_outline(
    region_map: RegionMap,
    table: RegionTable,
    label_positions: dict[int, tuple[int, int]],
    by_color: bool = False,
    font_size: int = 8,
) -> NDArray[np.uint8]:
    canvas = np.empty((region_map.height, region_map.width, 4), dtype=np.uint8)
    canvas[:] = _WHITE
    canvas[boundary_mask(outline_keys(region_map, table, by_color))] = _BLACK

    labels = []
    for region_id, pos in label_positions.items():
        region = table.get(region_id)
        if region is None or region.color_index < 0:
            continue
        labels.append((str(region.color_index + 1), pos))
    return draw_labels(canvas, labels, font_size)


@stage(
    id="S4.02",
    phase=Phase.RENDERING,
    dependencies=["S4.01"],
    description="Draw region outlines and palette numbers",
)
def outline_rendering(ctx: PipelineContext) -> None:
    if ctx.regions is None or ctx.region_map is None:
        return
    ctx.outline_raster = render_outline(
        ctx.region_map,
        ctx.regions,
        ctx.label_positions,
        by_color=ctx.config.outline_by_color,
        font_size=ctx.config.label_font_size,
    )
