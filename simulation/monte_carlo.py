# simulation/monte_carlo.py

"""
Monte Carlo estimate of the unit-sphere volume.

Rejection sampling over the cube [-1, 1]^3:

    for each point:
        x, y, z = 2u - 1 for three successive draws u (in that order)
        inside if x^2 + y^2 + z^2 <= 1       (boundary counts as inside)

    estimate = 8 * hits / points

The x, y, z order is part of the reproducibility contract: it fixes
which stream positions become which coordinate. Draws are pulled in
chunks of `chunk_size` points and reshaped to (chunk, 3), which keeps
that order while staying vectorized.

Two modes live here:
    - estimate_sphere_volume: one run over one engine,
    - run_sequential: R runs back to back over one continuing engine.
Parallel modes are in simulation/parallel.py and reuse `count_hits`.
"""

from __future__ import annotations

import time
from typing import List, Optional

import numpy as np

from config import CHUNK_SIZE, REPLICATIONS
from core_types import (
    CUBE_VOLUME,
    CheckpointId,
    EstimationResult,
    SequentialReport,
)
from utils.logging_utils import get_logger
from utils.rng import StreamEngine


logger = get_logger(__name__)


def count_hits(draws: np.ndarray) -> int:
    """
    Count points inside the unit sphere.

    Args:
        draws:
            Flat array of uniforms in [0, 1) whose length is a multiple of 3,
            laid out x0, y0, z0, x1, y1, z1, ...

    Returns:
        Number of points with x^2 + y^2 + z^2 <= 1.
    """
    coords = draws.reshape(-1, 3) * 2.0 - 1.0
    r2 = np.einsum("ij,ij->i", coords, coords)
    return int(np.count_nonzero(r2 <= 1.0))


def points_per_chunk(chunk_size: int) -> int:
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return max(1, chunk_size // 3)


def estimate_sphere_volume(
    engine: StreamEngine,
    points: int,
    chunk_size: int = CHUNK_SIZE,
    origin: Optional[CheckpointId] = None,
) -> EstimationResult:
    """
    Estimate the unit-sphere volume from `points` samples of `engine`.

    Args:
        engine:
            Engine to draw from; advanced by exactly 3 * points draws.
        points:
            Draw budget in points (B >= 1).
        chunk_size:
            Upper bound on draws held in memory at once.
        origin:
            Checkpoint the engine was restored from, recorded on the result.

    Returns:
        EstimationResult with estimate in [0, 8].
    """
    if points <= 0:
        raise ValueError(f"points must be positive, got {points}")

    per_chunk = points_per_chunk(chunk_size)
    t0 = time.perf_counter()

    hits = 0
    remaining = points
    while remaining > 0:
        n = min(per_chunk, remaining)
        hits += count_hits(engine.draw_many(3 * n))
        remaining -= n

    elapsed = time.perf_counter() - t0
    return EstimationResult(
        estimate=CUBE_VOLUME * hits / points,
        elapsed_s=elapsed,
        points=points,
        hits=hits,
        origin=origin,
    )


def run_sequential(
    engine: StreamEngine,
    points: int,
    replications: int = REPLICATIONS,
    chunk_size: int = CHUNK_SIZE,
) -> SequentialReport:
    """
    Run `replications` estimates back to back on one continuing engine.

    The engine is not reset between runs, so each replication consumes
    the next 3 * points draws of the same sequence. The reported estimate
    is the mean over replications.
    """
    if replications <= 0:
        raise ValueError(f"replications must be positive, got {replications}")

    t0 = time.perf_counter()
    results: List[EstimationResult] = []
    for rep in range(replications):
        result = estimate_sphere_volume(engine, points, chunk_size=chunk_size)
        results.append(result)
        logger.debug(
            "Replication %d/%d: %.6f (%.1f ms)",
            rep + 1, replications, result.estimate, result.elapsed_s * 1000.0,
        )

    report = SequentialReport(results=results, elapsed_s=time.perf_counter() - t0)
    logger.info(
        "Sequential estimate over %d replications: %.6f",
        replications, report.estimate,
    )
    return report
