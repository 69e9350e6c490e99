"""Tests for S2.01 region growing and palette assignment."""

import numpy as np

from paintbynumbers.engine.stages.s2_01_region_growing import assign_palette, grow_regions
from tests.conftest import BLACK, FOUR_COLOR_ROWS, RED, WHITE, make_raster, random_raster, solid_raster


def _grey(v):
    return (v, v, v)


def test_distinct_pixels_become_unit_regions():
    table, region_map = grow_regions(make_raster(FOUR_COLOR_ROWS), 20)
    assert len(table) == 4
    assert region_map.ids.tolist() == [1, 2, 3, 4]
    assert all(r.size == 1 for r in table)


def test_regions_partition_the_image():
    raster = random_raster(11, 7, seed=4)
    table, region_map = grow_regions(raster, 60)
    all_pixels = sorted(idx for region in table for idx in region.pixels)
    assert all_pixels == list(range(11 * 7))
    for region in table:
        assert all(region_map.ids[idx] == region.id for idx in region.pixels)
    assert 0 not in region_map.ids


def test_threshold_is_relative_to_seed():
    # Consecutive steps are ~26 apart, under the threshold; the seed is not
    raster = make_raster([[_grey(0), _grey(15), _grey(30), _grey(45), _grey(60)]])
    table, region_map = grow_regions(raster, 30)
    assert region_map.ids.tolist() == [1, 1, 2, 2, 3]
    assert len(table) == 3


def test_threshold_is_exclusive():
    raster = make_raster([[BLACK, (10, 0, 0)]])
    table, _ = grow_regions(raster, 10)
    assert len(table) == 2
    table, _ = grow_regions(raster, 10.01)
    assert len(table) == 1


def test_diagonal_pixels_are_not_connected():
    raster = make_raster([[WHITE, BLACK], [BLACK, WHITE]])
    table, region_map = grow_regions(raster, 5)
    assert len(table) == 4


def test_region_sums_and_bounds():
    table, _ = grow_regions(solid_raster(3, 2, (10, 20, 30)), 1)
    (region,) = list(table)
    assert region.size == 6
    assert (region.min_x, region.min_y, region.max_x, region.max_y) == (0, 0, 2, 1)
    assert (region.sum_x, region.sum_y) == (6, 3)
    assert region.average_color == (10.0, 20.0, 30.0)


def test_palette_assignment_nearest_first_wins():
    table, _ = grow_regions(solid_raster(2, 2, (10, 10, 10)), 1)
    assign_palette(table, [BLACK, (20, 20, 20)])
    (region,) = list(table)
    assert region.color == BLACK
    assert region.color_index == 0


def test_palette_assignment_uses_average_not_seed():
    raster = make_raster([[(100, 0, 0), (140, 0, 0)]])
    table, _ = grow_regions(raster, 50)
    assign_palette(table, [BLACK, (120, 0, 0), RED])
    (region,) = list(table)
    assert region.color == (120, 0, 0)
    assert region.color_index == 1


def test_large_blocky_raster():
    block, cols, rows = 50, 40, 30
    width, height = block * cols, block * rows
    ys, xs = np.mgrid[0:height, 0:width]
    bx, by = xs // block, ys // block
    raster = np.empty((height, width, 4), dtype=np.uint8)
    # Neighbouring blocks always differ by more than the threshold
    raster[:, :, 0] = (bx * 37) % 256
    raster[:, :, 1] = (by * 53) % 256
    raster[:, :, 2] = ((bx + by) * 17) % 256
    raster[:, :, 3] = 255

    table, region_map = grow_regions(raster, 20)

    assert len(table) == cols * rows
    assert region_map.ids.dtype == np.int32
    assert np.array_equal(region_map.to_array(), by * cols + bx + 1)
    assert table.total_pixels == width * height
    assert all(region.size == block * block for region in table)
    first = table.get(1)
    assert (first.min_x, first.min_y, first.max_x, first.max_y) == (0, 0, block - 1, block - 1)
    assert first.sum_x == block * sum(range(block))
