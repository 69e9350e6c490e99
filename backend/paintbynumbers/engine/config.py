"""Pipeline configuration — per-run thresholds and clustering knobs."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PipelineConfig:
    """Controls segmentation, merging and rendering for one pipeline run."""

    # Region growing: max RGB distance from the seed pixel (exclusive)
    color_threshold: float = 20.0
    # Regions below this pixel count are merged away and left unlabeled
    min_region_size: int = 100
    # Bounding-box aspect ratio above which a region counts as thin
    thinness_threshold: float = 10.0

    # Pixel sampling for k-means
    sample_size: int = 30000

    # K-means runs with k * oversample_factor candidates, capped at max_candidates
    oversample_factor: int = 5
    max_candidates: int = 50
    max_iterations: int = 30
    convergence_tolerance: float = 1.0
    seed: int | None = None

    # Median filter + exact-colour re-segmentation before labeling
    smooth: bool = False

    # Draw outlines where palette colours differ instead of region ids
    outline_by_color: bool = False
    label_font_size: int = 8

    def candidate_count(self, palette_size: int) -> int:
        """Number of k-means clusters to compute before palette reduction."""
        return max(palette_size, min(palette_size * self.oversample_factor, self.max_candidates))
