"""Tests for S3.01 median smoothing and S3.02 exact-colour re-segmentation."""

import numpy as np

from paintbynumbers.engine.stages.s3_01_smoothing import median_filter_3x3
from paintbynumbers.engine.stages.s3_02_resegmentation import label_exact_regions
from tests.conftest import BLACK, RED, WHITE, make_raster, random_raster, solid_raster


class TestMedianFilter:
    def test_constant_raster_is_unchanged(self):
        raster = solid_raster(6, 5, (12, 34, 56))
        out = median_filter_3x3(raster)
        assert np.array_equal(out, raster)
        assert np.array_equal(median_filter_3x3(out), out)

    def test_speck_is_removed(self, speck_raster):
        out = median_filter_3x3(speck_raster)
        assert tuple(out[4, 4, :3]) == WHITE

    def test_border_copied_and_interior_is_channel_median(self):
        raster = random_raster(6, 5, seed=2)
        raster[:, :, 3] = 100
        out = median_filter_3x3(raster)

        assert np.array_equal(out[0], raster[0])
        assert np.array_equal(out[-1], raster[-1])
        assert np.array_equal(out[:, 0], raster[:, 0])
        assert np.array_equal(out[:, -1], raster[:, -1])

        for y in range(1, 4):
            for x in range(1, 5):
                window = raster[y - 1:y + 2, x - 1:x + 2, :3].reshape(-1, 3)
                expected = np.sort(window, axis=0)[4]
                assert out[y, x, :3].tolist() == expected.tolist()
                assert out[y, x, 3] == 255

    def test_tiny_raster_is_copied(self):
        raster = make_raster([[RED, WHITE], [BLACK, RED]])
        out = median_filter_3x3(raster)
        assert np.array_equal(out, raster)
        assert out is not raster


class TestExactRegions:
    def test_diagonal_equal_colours_stay_separate(self):
        raster = make_raster([[RED, WHITE], [WHITE, RED]])
        table, region_map = label_exact_regions(raster)
        assert len(table) == 4
        assert sorted(region_map.ids) == [1, 2, 3, 4]

    def test_black_is_not_background(self):
        table, region_map = label_exact_regions(solid_raster(3, 3, BLACK))
        assert len(table) == 1
        assert set(region_map.ids) == {1}

    def test_region_geometry(self):
        raster = make_raster([[RED, RED, WHITE], [RED, WHITE, WHITE]])
        table, region_map = label_exact_regions(raster)
        assert len(table) == 2
        red = table.get(region_map.ids[0])
        assert sorted(red.pixels) == [0, 1, 3]
        assert (red.min_x, red.min_y, red.max_x, red.max_y) == (0, 0, 1, 1)
        assert (red.sum_x, red.sum_y) == (1, 1)
        assert red.average_color == (255.0, 0.0, 0.0)

    def test_partition(self):
        raster = random_raster(9, 8, seed=6)
        table, region_map = label_exact_regions(raster)
        assert table.total_pixels == 72
        for region in table:
            assert all(region_map.ids[idx] == region.id for idx in region.pixels)
