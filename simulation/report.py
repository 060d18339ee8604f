# simulation/report.py

"""
Tabular summaries of sphere-volume estimates.

Per-run results become a pandas DataFrame:

    origin  points  hits  estimate  std_error  elapsed_ms

and `summarize` pools them into one estimate with a standard error, so a
sequential batch and a parallel batch can be compared statistically
(`within_tolerance`). Point assignment differs between the two modes, so
they agree within Monte Carlo error, not bit-for-bit.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Dict, Sequence

import pandas as pd

from core_types import CUBE_VOLUME, SPHERE_VOLUME, EstimationResult


COLUMNS = ["origin", "points", "hits", "estimate", "std_error", "elapsed_ms"]


def results_frame(results: Sequence[EstimationResult]) -> pd.DataFrame:
    """
    One row per EstimationResult.
    """
    rows = [
        {
            "origin": r.origin,
            "points": r.points,
            "hits": r.hits,
            "estimate": r.estimate,
            "std_error": r.std_error,
            "elapsed_ms": r.elapsed_s * 1000.0,
        }
        for r in results
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def summarize(results: Sequence[EstimationResult]) -> Dict[str, float]:
    """
    Pool a batch of results.

    Returns:
        {
          "estimate":  mean of the per-run estimates,
          "std_error": standard error of that mean (binomial, all points pooled),
          "points":    total points,
          "abs_error": |estimate - 4/3 pi|,
        }
    """
    if not results:
        raise ValueError("cannot summarize an empty batch")

    df = results_frame(results)
    mean = float(df["estimate"].mean())
    points = int(df["points"].sum())
    p = float(df["hits"].sum()) / points
    # Equal-sized runs: the mean of estimates equals the pooled ratio, so the
    # pooled binomial error applies. Unequal runs are weighted by their own errors.
    if df["points"].nunique() == 1:
        se = CUBE_VOLUME * math.sqrt(p * (1.0 - p) / points)
    else:
        se = math.sqrt(float((df["std_error"] ** 2).sum())) / len(df)

    return {
        "estimate": mean,
        "std_error": se,
        "points": float(points),
        "abs_error": abs(mean - SPHERE_VOLUME),
    }


def within_tolerance(
    a: Sequence[EstimationResult],
    b: Sequence[EstimationResult],
    n_se: float = 3.0,
) -> bool:
    """
    True if two batches agree within `n_se` combined standard errors.
    """
    sa = summarize(a)
    sb = summarize(b)
    combined = math.hypot(sa["std_error"], sb["std_error"])
    return abs(sa["estimate"] - sb["estimate"]) <= n_se * combined


def save_frame(df: pd.DataFrame, path: Path) -> Path:
    """Write a results frame to CSV, creating the parent directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path
