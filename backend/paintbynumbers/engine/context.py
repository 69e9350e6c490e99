"""PipelineContext — the per-run session object flowing through all stages.

Region bookkeeping lives here too: the RegionTable is an arena of id-indexed
slots (merged regions become dead slots, ids are never reused) and the
RegionMap is the flat int32 grid of region ids, index = y * width + x.
Pixel indices and ids stay in numpy arrays; a full-resolution photo has
tens of millions of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

import numpy as np
from numpy.typing import NDArray

from paintbynumbers.engine.config import PipelineConfig

Color = tuple[int, int, int]

_NO_PIXELS = np.empty(0, dtype=np.int64)


@dataclass
class Region:
    """A 4-connected set of pixels with colour/position sums and bounds."""

    id: int
    # Flat pixel indices in fill order; absorbed regions are appended as extra chunks
    parts: list[NDArray[np.int64]] = field(default_factory=list, repr=False)
    sum_r: int = 0
    sum_g: int = 0
    sum_b: int = 0
    sum_x: int = 0
    sum_y: int = 0
    min_x: int = -1
    min_y: int = -1
    max_x: int = -1
    max_y: int = -1
    # Palette colour, assigned once after growing
    color: Color | None = None
    # 0-based position of color in the palette; -1 until assigned
    color_index: int = -1
    live: bool = True

    @property
    def pixels(self) -> NDArray[np.int64]:
        if len(self.parts) > 1:
            self.parts = [np.concatenate(self.parts)]
        return self.parts[0] if self.parts else _NO_PIXELS

    def absorb(self, other: Region) -> None:
        """Take over another region's pixels, sums and bounds.

        The assigned palette colour is left untouched.
        """
        self.parts.extend(other.parts)
        self.sum_r += other.sum_r
        self.sum_g += other.sum_g
        self.sum_b += other.sum_b
        self.sum_x += other.sum_x
        self.sum_y += other.sum_y
        self.min_x = min(self.min_x, other.min_x)
        self.min_y = min(self.min_y, other.min_y)
        self.max_x = max(self.max_x, other.max_x)
        self.max_y = max(self.max_y, other.max_y)

    @property
    def size(self) -> int:
        return sum(len(p) for p in self.parts)

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    @property
    def average_color(self) -> tuple[float, float, float]:
        n = self.size
        if n == 0:
            return (0.0, 0.0, 0.0)
        return (self.sum_r / n, self.sum_g / n, self.sum_b / n)

    @property
    def aspect_ratio(self) -> float:
        short_side = min(self.width, self.height)
        if short_side <= 0:
            return 0.0
        return max(self.width, self.height) / short_side


class RegionTable:
    """Arena of Region slots keyed by id. Slot 0 is never used."""

    def __init__(self) -> None:
        self._slots: list[Region] = [Region(id=0, live=False)]

    @classmethod
    def from_runs(
        cls,
        order: NDArray[np.int64],
        bounds: NDArray[np.int64],
        raster: NDArray[np.uint8],
    ) -> RegionTable:
        """One region per run: pixels ``order[bounds[i]:bounds[i + 1]]`` become region i + 1.

        Sums and bounds for all runs are reduced in one pass per quantity.
        """
        table = cls()
        if len(order) == 0:
            return table
        width = raster.shape[1]
        starts = bounds[:-1]
        ys, xs = np.divmod(order, width)

        channel_sums = [
            np.add.reduceat(raster[:, :, c].ravel()[order], starts, dtype=np.int64).tolist()
            for c in range(3)
        ]
        sum_x = np.add.reduceat(xs, starts).tolist()
        sum_y = np.add.reduceat(ys, starts).tolist()
        min_x = np.minimum.reduceat(xs, starts).tolist()
        max_x = np.maximum.reduceat(xs, starts).tolist()
        min_y = np.minimum.reduceat(ys, starts).tolist()
        max_y = np.maximum.reduceat(ys, starts).tolist()

        for i in range(len(starts)):
            region = table.new_region()
            region.parts = [order[bounds[i]:bounds[i + 1]]]
            region.sum_r, region.sum_g, region.sum_b = (s[i] for s in channel_sums)
            region.sum_x, region.sum_y = sum_x[i], sum_y[i]
            region.min_x, region.max_x = min_x[i], max_x[i]
            region.min_y, region.max_y = min_y[i], max_y[i]
        return table

    def new_region(self) -> Region:
        region = Region(id=len(self._slots))
        self._slots.append(region)
        return region

    def get(self, region_id: int) -> Region | None:
        """Return the live region with this id, or None if merged away / unknown."""
        if 0 < region_id < len(self._slots):
            region = self._slots[region_id]
            if region.live:
                return region
        return None

    def remove(self, region_id: int) -> None:
        region = self._slots[region_id]
        region.live = False
        region.parts = []

    def __iter__(self) -> Iterator[Region]:
        return (r for r in self._slots if r.live)

    def __len__(self) -> int:
        return sum(1 for r in self._slots if r.live)

    @property
    def capacity(self) -> int:
        """Number of ids ever issued."""
        return len(self._slots) - 1

    @property
    def total_pixels(self) -> int:
        return sum(r.size for r in self)


@dataclass
class RegionMap:
    """Grid of region ids (0 = unassigned), stored flat in raster order."""

    width: int
    height: int
    ids: NDArray[np.int32]

    @classmethod
    def empty(cls, width: int, height: int) -> RegionMap:
        return cls(width=width, height=height, ids=np.zeros(width * height, dtype=np.int32))

    def to_array(self) -> NDArray[np.int32]:
        return self.ids.reshape(self.height, self.width)


@dataclass
class KMeansResult:
    """Converged centroids plus the final sample-to-cluster assignment."""

    centroids: NDArray[np.int64]       # (m, 3)
    labels: NDArray[np.int64]          # (n,) cluster index per sample pixel
    samples: NDArray[np.int64]         # (n, 3)
    iterations: int = 0
    converged: bool = False

    @property
    def sizes(self) -> NDArray[np.int64]:
        return np.bincount(self.labels, minlength=len(self.centroids))

    @property
    def clusters(self) -> list[NDArray[np.int64]]:
        return [self.samples[self.labels == i] for i in range(len(self.centroids))]


@dataclass
class PipelineContext:
    """Shared state for one pipeline run."""

    # Input raster, (height, width, 4) uint8 RGBA
    raster: NDArray[np.uint8] = field(default_factory=lambda: np.zeros((0, 0, 4), dtype=np.uint8))
    palette_size: int = 1
    config: PipelineConfig = field(default_factory=PipelineConfig)

    # --- Palette extraction ---
    sample: NDArray[np.int64] | None = None
    kmeans: KMeansResult | None = None
    palette: list[Color] = field(default_factory=list)

    # --- Segmentation ---
    regions: RegionTable | None = None
    region_map: RegionMap | None = None
    smoothed_raster: NDArray[np.uint8] | None = None

    # --- Labeling / output ---
    # region id -> (x, y)
    label_positions: dict[int, tuple[int, int]] = field(default_factory=dict)
    outline_raster: NDArray[np.uint8] | None = None
    colored_raster: NDArray[np.uint8] | None = None

    # --- Pipeline metadata ---
    completed_stages: list[str] = field(default_factory=list)
    timings_ms: dict[str, float] = field(default_factory=dict)

    @property
    def height(self) -> int:
        return int(self.raster.shape[0])

    @property
    def width(self) -> int:
        return int(self.raster.shape[1]) if self.raster.ndim >= 2 else 0

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def palette_number(self, region: Region) -> int:
        """1-based paint number for a region, 0 if it has no palette colour."""
        return region.color_index + 1
