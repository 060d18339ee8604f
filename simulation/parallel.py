# simulation/parallel.py

"""
Parallel sphere-volume estimation over checkpointed substreams.

Strategies (pick one by name through `run_parallel(strategy=...)`):

    "threads"
        One thread per worker. Worker i restores ladder rung
        `first_ordinal + i` into its own private engine and estimates
        independently. Only the final report goes through the shared,
        lock-guarded ReportSink.

    "processes"
        Same contract as "threads" but each worker runs in its own process
        and loads its rung from the store directory itself. The coordinator
        reports every result once the pool is done.

    "reduction"
        One engine restored from rung `first_ordinal`. The coordinating
        thread pulls chunks from it serially (the engine is never touched by
        two threads), a thread pool counts hits per chunk, and the counts
        are summed. Draw order is fixed, so the result is reproducible too.
        Total points are `n_workers * points`.

A worker whose checkpoint cannot be restored fails the whole batch with
the error it hit; there is no fallback state.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from concurrent.futures import Future, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import Callable, Deque, Dict, List, Optional, Tuple

from config import CHUNK_SIZE, N_WORKERS, POINTS_PER_ESTIMATE
from core_types import CUBE_VOLUME, EstimationResult, ParallelReport
from errors import StreamError
from simulation.monte_carlo import (
    points_per_chunk,
    count_hits,
    estimate_sphere_volume,
)
from state.checkpoint_store import CheckpointStore
from state.ladder import check_budget
from utils.logging_utils import get_logger
from utils.rng import make_engine


logger = get_logger(__name__)


def _log_result(result: EstimationResult) -> None:
    logger.info(
        "Checkpoint %s: estimated volume %.6f in %.1f ms",
        result.origin, result.estimate, result.elapsed_s * 1000.0,
    )


class ReportSink:
    """
    Shared output guarded by a mutex.

    Workers call `emit` once, after their computation is done, so the lock
    only ever serializes reporting.
    """

    def __init__(self, write: Optional[Callable[[EstimationResult], None]] = None) -> None:
        self._write = write or _log_result
        self._lock = threading.Lock()

    def emit(self, result: EstimationResult) -> None:
        with self._lock:
            self._write(result)


# -------------------------------------------------------------------
# Workers
# -------------------------------------------------------------------


def _estimate_from_checkpoint(
    store: CheckpointStore,
    ordinal: int,
    points: int,
    chunk_size: int,
) -> EstimationResult:
    """Restore `ordinal` into a private engine and estimate; time includes the restore."""
    t0 = time.perf_counter()
    engine = make_engine(state=store.load(ordinal))
    result = estimate_sphere_volume(engine, points, chunk_size=chunk_size, origin=ordinal)
    return replace(result, elapsed_s=time.perf_counter() - t0)


def _thread_worker(
    store: CheckpointStore,
    ordinal: int,
    points: int,
    chunk_size: int,
    sink: ReportSink,
) -> EstimationResult:
    result = _estimate_from_checkpoint(store, ordinal, points, chunk_size)
    sink.emit(result)
    return result


def _process_worker(args: Tuple[str, str, int, int, int]) -> EstimationResult:
    root, tag, ordinal, points, chunk_size = args
    return _estimate_from_checkpoint(CheckpointStore(Path(root), tag), ordinal, points, chunk_size)


def _collect(futures: List[Tuple[int, Future]]) -> List[EstimationResult]:
    results: List[EstimationResult] = []
    for ordinal, fut in futures:
        try:
            results.append(fut.result())
        except StreamError:
            logger.error("Worker for checkpoint %d could not restore its state", ordinal)
            raise
    return results


# -------------------------------------------------------------------
# Strategies
# -------------------------------------------------------------------


def _run_thread_per_worker(
    store: CheckpointStore,
    n_workers: int,
    points: int,
    first_ordinal: int,
    chunk_size: int,
    sink: ReportSink,
) -> List[EstimationResult]:
    with ThreadPoolExecutor(max_workers=n_workers) as executor:
        futures = [
            (
                ordinal,
                executor.submit(_thread_worker, store, ordinal, points, chunk_size, sink),
            )
            for ordinal in range(first_ordinal, first_ordinal + n_workers)
        ]
        return _collect(futures)


def _run_process_per_worker(
    store: CheckpointStore,
    n_workers: int,
    points: int,
    first_ordinal: int,
    chunk_size: int,
    sink: ReportSink,
) -> List[EstimationResult]:
    with ProcessPoolExecutor(max_workers=n_workers) as executor:
        futures = [
            (
                ordinal,
                executor.submit(
                    _process_worker,
                    (str(store.root), store.tag, ordinal, points, chunk_size),
                ),
            )
            for ordinal in range(first_ordinal, first_ordinal + n_workers)
        ]
        results = _collect(futures)

    for result in results:
        sink.emit(result)
    return results


def _run_shared_reduction(
    store: CheckpointStore,
    n_workers: int,
    points: int,
    first_ordinal: int,
    chunk_size: int,
    sink: ReportSink,
) -> List[EstimationResult]:
    t0 = time.perf_counter()
    engine = make_engine(state=store.load(first_ordinal))

    total = n_workers * points
    per_chunk = points_per_chunk(chunk_size)
    # Bound the number of drawn-but-uncounted chunks held in memory.
    window = 2 * n_workers

    hits = 0
    pending: Deque[Future] = deque()
    with ThreadPoolExecutor(max_workers=n_workers) as executor:
        remaining = total
        while remaining > 0:
            n = min(per_chunk, remaining)
            pending.append(executor.submit(count_hits, engine.draw_many(3 * n)))
            remaining -= n
            if len(pending) >= window:
                hits += pending.popleft().result()
        while pending:
            hits += pending.popleft().result()

    result = EstimationResult(
        estimate=CUBE_VOLUME * hits / total,
        elapsed_s=time.perf_counter() - t0,
        points=total,
        hits=hits,
        origin=first_ordinal,
    )
    sink.emit(result)
    return [result]


Strategy = Callable[
    [CheckpointStore, int, int, int, int, ReportSink],
    List[EstimationResult],
]

STRATEGIES: Dict[str, Strategy] = {
    "threads": _run_thread_per_worker,
    "processes": _run_process_per_worker,
    "reduction": _run_shared_reduction,
}


def run_parallel(
    store: CheckpointStore,
    n_workers: int = N_WORKERS,
    points: int = POINTS_PER_ESTIMATE,
    strategy: str = "threads",
    first_ordinal: int = 0,
    chunk_size: int = CHUNK_SIZE,
    skip_distance: Optional[int] = None,
    sink: Optional[ReportSink] = None,
) -> ParallelReport:
    """
    Estimate the sphere volume with `n_workers` workers.

    Args:
        store:
            Ladder checkpoints; worker i uses rung `first_ordinal + i`.
        n_workers:
            Number of workers / pool threads.
        points:
            Points per worker.
        strategy:
            One of STRATEGIES ("threads", "processes", "reduction").
        first_ordinal:
            First ladder rung to use.
        chunk_size:
            Upper bound on draws held in memory per chunk.
        skip_distance:
            If given, reject budgets that would overrun a substream.
        sink:
            Shared report output; defaults to logging each result.

    Returns:
        ParallelReport with the per-worker results and their mean.
    """
    if strategy not in STRATEGIES:
        raise ValueError(
            f"unknown strategy {strategy!r}; expected one of {sorted(STRATEGIES)}"
        )
    if n_workers <= 0:
        raise ValueError(f"n_workers must be positive, got {n_workers}")
    if points <= 0:
        raise ValueError(f"points must be positive, got {points}")
    if first_ordinal < 0:
        raise ValueError(f"first_ordinal must be >= 0, got {first_ordinal}")
    if skip_distance is not None:
        budget = n_workers * points if strategy == "reduction" else points
        check_budget(skip_distance, budget)

    sink = sink or ReportSink()
    logger.info(
        "Parallel estimate: strategy=%s workers=%d points=%d first_ordinal=%d",
        strategy, n_workers, points, first_ordinal,
    )

    t0 = time.perf_counter()
    results = STRATEGIES[strategy](
        store, n_workers, points, first_ordinal, chunk_size, sink
    )
    report = ParallelReport(
        strategy=strategy,
        results=results,
        elapsed_s=time.perf_counter() - t0,
    )
    logger.info("Combined estimate: %.6f", report.estimate)
    return report
