"""S1.02 — K-means colour clustering.

Plain Lloyd iterations in RGB space with Euclidean distance:

1. Initial centroids: min(k, n) distinct sample indices drawn without replacement.
2. Assign every sample to its nearest centroid (ties → lowest centroid index).
3. New centroid = per-channel mean of its cluster, rounded half-up. An empty
   cluster is reseeded with a random sample pixel.
4. Converged when every centroid moved by at most ``tolerance``; the first
   iteration never converges. At most ``max_iterations`` iterations.

The centroid set is deliberately oversized (see PipelineConfig.candidate_count)
and reduced to the final palette by S1.03.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray

from paintbynumbers.engine.context import KMeansResult, PipelineContext
from paintbynumbers.engine.registry import Phase, stage
from paintbynumbers.utils.color import round_half_up

logger = logging.getLogger(__name__)


def assign_clusters(samples: NDArray[np.int64], centroids: NDArray[np.int64]) -> NDArray[np.int64]:
    """Nearest-centroid index per sample. argmin keeps the first of tied minima."""
    diff = samples[:, None, :] - centroids[None, :, :]
    dist_sq = np.einsum("ijk,ijk->ij", diff, diff)
    return np.argmin(dist_sq, axis=1)


def kmeans(
    samples: NDArray[np.int64],
    k: int,
    max_iterations: int = 30,
    tolerance: float = 1.0,
    rng: np.random.Generator | None = None,
) -> KMeansResult:
    rng = rng if rng is not None else np.random.default_rng()
    samples = np.asarray(samples, dtype=np.int64).reshape(-1, 3)
    n = len(samples)
    if n == 0 or k < 1:
        return KMeansResult(
            centroids=np.empty((0, 3), dtype=np.int64),
            labels=np.empty(0, dtype=np.int64),
            samples=samples,
        )

    m = min(k, n)
    centroids = samples[rng.choice(n, size=m, replace=False)].copy()
    labels = np.zeros(n, dtype=np.int64)
    previous: NDArray[np.int64] | None = None
    converged = False
    iterations = 0

    while iterations < max_iterations:
        labels = assign_clusters(samples, centroids)
        counts = np.bincount(labels, minlength=m)

        sums = np.zeros((m, 3), dtype=np.float64)
        np.add.at(sums, labels, samples)
        new_centroids = np.empty_like(centroids)
        filled = counts > 0
        new_centroids[filled] = round_half_up(sums[filled] / counts[filled, None])
        for i in np.flatnonzero(~filled):
            new_centroids[i] = samples[rng.integers(n)]

        previous, centroids = centroids, new_centroids
        iterations += 1

        shift = np.sqrt(((previous - centroids) ** 2).sum(axis=1))
        if iterations > 1 and bool(np.all(shift <= tolerance)):
            converged = True
            break

    logger.debug("k-means: %d centroids, %d iterations, converged=%s", m, iterations, converged)
    return KMeansResult(
        centroids=centroids,
        labels=labels,
        samples=samples,
        iterations=iterations,
        converged=converged,
    )


@stage(
    id="S1.02",
    phase=Phase.PALETTE,
    dependencies=["S1.01"],
    description="Cluster sampled pixels into candidate colours",
)
def color_clustering(ctx: PipelineContext) -> None:
    if ctx.sample is None:
        return
    cfg = ctx.config
    ctx.kmeans = kmeans(
        ctx.sample,
        cfg.candidate_count(ctx.palette_size),
        max_iterations=cfg.max_iterations,
        tolerance=cfg.convergence_tolerance,
        rng=np.random.default_rng(cfg.seed),
    )
