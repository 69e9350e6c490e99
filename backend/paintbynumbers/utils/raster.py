"""Raster buffer helpers: raw RGBA bytes <-> numpy arrays."""

from __future__ import annotations

import base64

import numpy as np
from numpy.typing import NDArray

from paintbynumbers.engine.context import RegionMap, RegionTable
from paintbynumbers.engine.errors import InvalidInputError

CHANNELS = 4


def decode_rgba(data: str, width: int, height: int) -> NDArray[np.uint8]:
    """Turn a base64-encoded RGBA buffer into a (height, width, 4) array."""
    if width <= 0 or height <= 0:
        raise InvalidInputError(f"Raster must have a positive area, got {width}x{height}")

    raw = base64.b64decode(data, validate=True)
    expected = width * height * CHANNELS
    if len(raw) != expected:
        raise InvalidInputError(
            f"Raster buffer holds {len(raw)} bytes, expected {expected} for {width}x{height} RGBA"
        )
    return np.frombuffer(raw, dtype=np.uint8).reshape(height, width, CHANNELS).copy()


def encode_rgba(raster: NDArray[np.uint8]) -> str:
    """Base64 of the raw RGBA bytes in raster order."""
    return base64.b64encode(np.ascontiguousarray(raster, dtype=np.uint8).tobytes()).decode("ascii")


def paint_regions(region_map: RegionMap, table: RegionTable) -> NDArray[np.uint8]:
    """RGBA raster with every live region's palette colour; other pixels stay transparent."""
    lut = np.zeros((table.capacity + 1, CHANNELS), dtype=np.uint8)
    for region in table:
        if region.color is not None:
            lut[region.id] = (*region.color, 255)
    return lut[region_map.to_array()]
