"""Shared test fixtures."""

from __future__ import annotations

import base64

import numpy as np
import pytest

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
RUST = (120, 60, 30)


def make_raster(rows: list[list[tuple[int, int, int]]]) -> np.ndarray:
    """RGBA raster (alpha 255) from rows of RGB triples."""
    rgb = np.array(rows, dtype=np.uint8)
    alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([rgb, alpha], axis=2)


def solid_raster(width: int, height: int, color: tuple[int, int, int]) -> np.ndarray:
    return make_raster([[color] * width for _ in range(height)])


def random_raster(width: int, height: int, seed: int = 0, levels: int = 4) -> np.ndarray:
    """Blocky random raster with a handful of distinct grey-ish colours."""
    rng = np.random.default_rng(seed)
    values = rng.integers(0, levels, size=(height, width)) * (255 // (levels - 1))
    rgb = np.stack([values, values // 2, 255 - values], axis=2).astype(np.uint8)
    alpha = np.full((height, width, 1), 255, dtype=np.uint8)
    return np.concatenate([rgb, alpha], axis=2)


def payload(raster: np.ndarray) -> dict:
    height, width = raster.shape[:2]
    return {
        "width": width,
        "height": height,
        "data": base64.b64encode(raster.tobytes()).decode("ascii"),
    }


# 2×2: red green / blue white
FOUR_COLOR_ROWS = [[RED, GREEN], [BLUE, WHITE]]


@pytest.fixture
def four_color_raster() -> np.ndarray:
    return make_raster(FOUR_COLOR_ROWS)


@pytest.fixture
def uniform_raster() -> np.ndarray:
    return solid_raster(7, 5, RUST)


@pytest.fixture
def speck_raster() -> np.ndarray:
    """9×9 white with a single black pixel in the middle."""
    raster = solid_raster(9, 9, WHITE)
    raster[4, 4, :3] = BLACK
    return raster
