"""Tests for S4.02 outline rendering and S4.03 coloured rendering."""

import numpy as np

from paintbynumbers.engine.stages.s2_01_region_growing import assign_palette, grow_regions
from paintbynumbers.engine.stages.s4_02_outline_rendering import boundary_mask, render_outline
from paintbynumbers.utils.raster import paint_regions
from tests.conftest import BLACK, FOUR_COLOR_ROWS, RED, make_raster, solid_raster


def _segment(raster, palette, threshold=5):
    table, region_map = grow_regions(raster, threshold)
    assign_palette(table, palette)
    return table, region_map


def _is_black(raster):
    return np.all(raster[:, :, :3] == 0, axis=2)


def test_boundary_mask_marks_right_and_bottom_edges():
    keys = np.array([[1, 1, 2], [1, 1, 2], [3, 3, 3]])
    expected = np.array([
        [False, False, True],
        [False, False, True],
        [True, True, True],
    ])
    assert np.array_equal(boundary_mask(keys), expected)


def test_single_region_without_label_is_blank():
    table, region_map = _segment(solid_raster(6, 4, RED), [RED])
    out = render_outline(region_map, table, {})
    assert out.shape == (4, 6, 4)
    assert np.all(out == 255)


def test_label_is_drawn_near_its_position():
    table, region_map = _segment(solid_raster(21, 21, RED), [RED])
    out = render_outline(region_map, table, {1: (10, 10)}, font_size=8)
    # Glyph edges are anti-aliased
    dark = out[:, :, 0] < 128
    assert dark.any()
    ys, xs = np.nonzero(dark)
    assert 4 <= xs.mean() <= 16
    assert 4 <= ys.mean() <= 16
    assert np.all(out[:, :, 3] == 255)
    assert tuple(out[0, 0]) == (255, 255, 255, 255)


def test_outline_by_region_or_by_colour():
    raster = make_raster([[BLACK, (20, 20, 20)]])
    table, region_map = _segment(raster, [BLACK])
    assert len(table) == 2

    by_region = render_outline(region_map, table, {})
    assert _is_black(by_region).tolist() == [[False, True]]

    by_color = render_outline(region_map, table, {}, by_color=True)
    assert not _is_black(by_color).any()


def test_paint_regions_uses_palette_colours():
    raster = make_raster(FOUR_COLOR_ROWS)
    table, region_map = _segment(raster, [rgb for row in FOUR_COLOR_ROWS for rgb in row])
    colored = paint_regions(region_map, table)
    assert np.array_equal(colored, raster)


def test_paint_regions_leaves_uncoloured_regions_transparent():
    table, region_map = grow_regions(solid_raster(2, 2, RED), 5)
    colored = paint_regions(region_map, table)
    assert np.all(colored == 0)
