# main.py

"""
Entry point for the sphere-streams project.

Typical usage:

    # Save/restore self-test (10 checkpoints x 10 draws)
    python main.py selftest

    # Provision a ladder of 10 checkpoints spaced 2e9 draws apart
    python main.py ladder
    python main.py ladder --resume          # finish an interrupted build

    # Sequential estimate: 10 replications on one continuing stream
    python main.py sequential --points 100000000

    # Parallel estimate over ladder rungs 0..3
    python main.py parallel --workers 4 --strategy threads

    # Peptide demo
    python main.py peptide

This script wires together:
    - config (paths, seed, ladder geometry, budgets),
    - utils.rng.make_engine,
    - state.checkpoint_store / state.ladder / state.reproducibility,
    - simulation.monte_carlo / simulation.parallel / simulation.report.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from config import (
    CHECKPOINT_DIR,
    CHUNK_SIZE,
    LADDER_SIZE,
    LADDER_TAG,
    N_WORKERS,
    PEPTIDE_TARGET,
    POINTS_PER_ESTIMATE,
    REPLICATIONS,
    REPORTS_DIR,
    SELFTEST_CHECKPOINTS,
    SELFTEST_DRAWS,
    SELFTEST_TAG,
    SKIP_DISTANCE,
)
from core_types import SPHERE_VOLUME, EstimationResult
from errors import StreamError
from simulation.monte_carlo import run_sequential
from simulation.parallel import STRATEGIES, ReportSink, run_parallel
from simulation.peptide import search_peptide
from simulation.report import results_frame, save_frame, summarize
from state.checkpoint_store import CheckpointStore
from state.ladder import build_ladder, resume_ladder
from state.reproducibility import run_self_test
from utils.logging_utils import configure_root_logger
from utils.rng import make_engine


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Checkpointable MT19937 streams and Monte Carlo sphere volume"
    )
    parser.add_argument(
        "--checkpoint-dir",
        type=Path,
        default=CHECKPOINT_DIR,
        help=f"Directory holding checkpoints (default: {CHECKPOINT_DIR})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for a fresh engine (default: the documented default seed)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=CHUNK_SIZE,
        help=f"Draws generated per numpy call (default: {CHUNK_SIZE})",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("selftest", help="Save checkpoints and verify restores replay exactly.")
    p.add_argument("--checkpoints", type=int, default=SELFTEST_CHECKPOINTS)
    p.add_argument("--draws", type=int, default=SELFTEST_DRAWS)

    p = sub.add_parser("ladder", help="Build a ladder of checkpoints spaced by a skip distance.")
    p.add_argument("--size", type=int, default=LADDER_SIZE)
    p.add_argument("--skip", type=int, default=SKIP_DISTANCE)
    p.add_argument("--resume", action="store_true", help="Continue from rungs already on disk.")

    p = sub.add_parser("sequential", help="Replicated estimate on one continuing stream.")
    p.add_argument("--points", type=int, default=POINTS_PER_ESTIMATE)
    p.add_argument("--replications", type=int, default=REPLICATIONS)
    p.add_argument("--save-report", action="store_true",
                   help=f"Write per-replication results to {REPORTS_DIR}")

    p = sub.add_parser("parallel", help="Estimate across workers seeded from ladder rungs.")
    p.add_argument("--points", type=int, default=POINTS_PER_ESTIMATE,
                   help="Points per worker")
    p.add_argument("--workers", type=int, default=N_WORKERS)
    p.add_argument("--strategy", choices=sorted(STRATEGIES), default="threads")
    p.add_argument("--first-ordinal", type=int, default=0)
    p.add_argument("--skip", type=int, default=SKIP_DISTANCE,
                   help="Skip distance the ladder was built with (budget check)")
    p.add_argument("--save-report", action="store_true",
                   help=f"Write per-worker results to {REPORTS_DIR}")

    p = sub.add_parser("peptide", help="Draw peptides until the target appears.")
    p.add_argument("--target", default=PEPTIDE_TARGET)

    return parser.parse_args(argv)


def _print_result(result: EstimationResult) -> None:
    print(f"  [checkpoint {result.origin}] volume {result.estimate:.6f} "
          f"in {result.elapsed_s * 1000.0:.1f} ms")


def _cmd_selftest(args: argparse.Namespace) -> None:
    store = CheckpointStore(args.checkpoint_dir, SELFTEST_TAG)
    comparisons = run_self_test(
        make_engine(args.seed), store, args.checkpoints, args.draws
    )
    for ordinal, (recorded, restored) in enumerate(comparisons):
        print(f"Checkpoint {ordinal}:")
        for want, got in zip(recorded, restored):
            print(f"  {got!r} = {want!r}")
    print(f"All {len(comparisons)} checkpoints replayed exactly.")


def _cmd_ladder(args: argparse.Namespace) -> None:
    store = CheckpointStore(args.checkpoint_dir, LADDER_TAG)
    t0 = time.perf_counter()
    if args.resume:
        written = resume_ladder(store, args.size, args.skip, seed=args.seed,
                                chunk_size=args.chunk_size)
    else:
        written = build_ladder(make_engine(args.seed), store, args.size, args.skip,
                               chunk_size=args.chunk_size)
    elapsed_ms = (time.perf_counter() - t0) * 1000.0
    print(f"Wrote rungs {written} to {store.root} in {elapsed_ms:.0f} ms")


def _cmd_sequential(args: argparse.Namespace) -> None:
    report = run_sequential(
        make_engine(args.seed), args.points, args.replications,
        chunk_size=args.chunk_size,
    )
    stats = summarize(report.results)
    print(f"Mean sphere volume: {report.estimate:.6f} "
          f"(+/- {stats['std_error']:.6f}, exact {SPHERE_VOLUME:.6f}) "
          f"in {report.elapsed_s * 1000.0:.0f} ms")

    if args.save_report:
        path = save_frame(results_frame(report.results), REPORTS_DIR / "sequential.csv")
        print(f"Report saved to {path}")


def _cmd_parallel(args: argparse.Namespace) -> None:
    store = CheckpointStore(args.checkpoint_dir, LADDER_TAG)
    report = run_parallel(
        store,
        n_workers=args.workers,
        points=args.points,
        strategy=args.strategy,
        first_ordinal=args.first_ordinal,
        chunk_size=args.chunk_size,
        skip_distance=args.skip,
        sink=ReportSink(_print_result),
    )
    stats = summarize(report.results)
    print(f"Combined sphere volume ({report.strategy}): {report.estimate:.6f} "
          f"(+/- {stats['std_error']:.6f}) in {report.elapsed_s * 1000.0:.0f} ms")

    if args.save_report:
        path = save_frame(
            results_frame(report.results),
            REPORTS_DIR / f"parallel_{report.strategy}.csv",
        )
        print(f"Report saved to {path}")


def _cmd_peptide(args: argparse.Namespace) -> None:
    found = search_peptide(make_engine(args.seed), target=args.target)
    print(f"Peptide: {found.peptide}")
    print(f"Attempts to draw {found.target!r}: {found.attempts}")
    print(f"Elapsed: {found.elapsed_s * 1000.0:.0f} ms")


COMMANDS = {
    "selftest": _cmd_selftest,
    "ladder": _cmd_ladder,
    "sequential": _cmd_sequential,
    "parallel": _cmd_parallel,
    "peptide": _cmd_peptide,
}


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    configure_root_logger(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        COMMANDS[args.command](args)
    except (StreamError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
