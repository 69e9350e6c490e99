"""Colour arithmetic shared by clustering, segmentation and rendering."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

# ITU-R BT.709 relative luminance weights
_LUMA_R = 0.2126
_LUMA_G = 0.7152
_LUMA_B = 0.0722


def luminance(rgb: Sequence[float]) -> float:
    """Perceptual luminance used to order the palette."""
    return _LUMA_R * rgb[0] + _LUMA_G * rgb[1] + _LUMA_B * rgb[2]


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.sqrt((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2)


def closest_color_index(rgb: Sequence[float], palette: Sequence[Sequence[float]]) -> int:
    """Index of the nearest palette colour; the first of equally near colours wins."""
    best = 0
    best_dist = math.inf
    for i, color in enumerate(palette):
        dist = euclidean_distance(rgb, color)
        if dist < best_dist:
            best_dist = dist
            best = i
    return best


def round_half_up(values: NDArray[np.floating] | float) -> NDArray[np.int64] | int:
    """Round halves upwards: 2.5 -> 3, 3.5 -> 4."""
    if isinstance(values, np.ndarray):
        return np.floor(values + 0.5).astype(np.int64)
    return int(math.floor(values + 0.5))


def sort_by_luminance(colors: Sequence[Sequence[int]]) -> list[tuple[int, int, int]]:
    """Stable ascending luminance sort, returning plain int triples."""
    triples = [(int(c[0]), int(c[1]), int(c[2])) for c in colors]
    return sorted(triples, key=luminance)
