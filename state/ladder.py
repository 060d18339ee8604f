# state/ladder.py

"""
Checkpoint ladders: disjoint substreams for parallel workers.

A ladder is N checkpoints of one global MT19937 sequence, spaced exactly
`skip_distance` draws apart:

    ladder_0 ---S draws--- ladder_1 ---S draws--- ladder_2 ...

A worker restored from ladder_i that consumes fewer than S draws never
touches a position that belongs to ladder_j's substream (i != j).

Building a ladder is an offline, one-time step (at the default skip
distance of 2e9 draws it takes a while per rung). It is resumable: every
save depends only on the engine state at that rung, so an interrupted
build can continue from the last checkpoint on disk.
"""

from __future__ import annotations

import time
from typing import List, Optional

from config import CHUNK_SIZE, LADDER_SIZE, SKIP_DISTANCE
from state.checkpoint_store import CheckpointStore
from utils.logging_utils import get_logger
from utils.rng import StreamEngine, make_engine


# Draws consumed per Monte Carlo point (x, y, z).
DRAWS_PER_POINT: int = 3

logger = get_logger(__name__)


def _check_geometry(ladder_size: int, skip_distance: int) -> None:
    if ladder_size <= 0:
        raise ValueError(f"ladder_size must be positive, got {ladder_size}")
    if skip_distance <= 0:
        raise ValueError(f"skip_distance must be positive, got {skip_distance}")


def check_budget(skip_distance: int, points: int) -> None:
    """
    Make sure an estimation of `points` points fits inside one substream.

    Raises:
        ValueError: the estimation would need `skip_distance` draws or more.
    """
    draws = points * DRAWS_PER_POINT
    if draws >= skip_distance:
        raise ValueError(
            f"{points} points need {draws} draws, which does not fit strictly "
            f"inside a substream of {skip_distance} draws"
        )


def build_ladder(
    engine: StreamEngine,
    store: CheckpointStore,
    ladder_size: int = LADDER_SIZE,
    skip_distance: int = SKIP_DISTANCE,
    start_ordinal: int = 0,
    chunk_size: int = CHUNK_SIZE,
) -> List[int]:
    """
    Save rungs `start_ordinal .. ladder_size - 1`, advancing the engine by
    `skip_distance` draws after each save.

    Args:
        engine:
            Engine positioned at rung `start_ordinal`. It is advanced in place.
        store:
            Where the rungs are written (its tag names the ladder).
        ladder_size:
            Total number of rungs in the finished ladder.
        skip_distance:
            Draws between consecutive rungs.
        start_ordinal:
            First rung to write; rungs below it are assumed to exist.
        chunk_size:
            Draws generated per numpy call while skipping.

    Returns:
        The ordinals written, in order.

    Raises:
        CheckpointIOError: a rung could not be written. Earlier rungs stay
        valid and the ladder can be resumed.
    """
    _check_geometry(ladder_size, skip_distance)
    if not 0 <= start_ordinal <= ladder_size:
        raise ValueError(
            f"start_ordinal must be in [0, {ladder_size}], got {start_ordinal}"
        )

    written: List[int] = []
    for ordinal in range(start_ordinal, ladder_size):
        store.save(ordinal, engine.capture_state())
        written.append(ordinal)
        logger.info(
            "Saved %s rung %d/%d", store.tag, ordinal + 1, ladder_size
        )

        t0 = time.perf_counter()
        engine.advance(skip_distance, chunk_size=chunk_size)
        logger.debug(
            "Skipped %d draws in %.1f ms",
            skip_distance, (time.perf_counter() - t0) * 1000.0,
        )

    return written


def _last_contiguous_ordinal(store: CheckpointStore) -> Optional[int]:
    expected = 0
    for ordinal in store.ordinals():
        if ordinal != expected:
            break
        expected += 1
    return expected - 1 if expected > 0 else None


def resume_ladder(
    store: CheckpointStore,
    ladder_size: int = LADDER_SIZE,
    skip_distance: int = SKIP_DISTANCE,
    seed: Optional[int] = None,
    chunk_size: int = CHUNK_SIZE,
) -> List[int]:
    """
    Finish a partially written ladder.

    The highest rung of the contiguous run 0..k already on disk is
    restored and the build continues from there (rung k is rewritten with
    the identical state). With no rungs on disk the build starts from a
    fresh engine seeded with `seed` (default seed when None).

    Returns:
        The ordinals written by this call.
    """
    _check_geometry(ladder_size, skip_distance)

    last = _last_contiguous_ordinal(store)
    if last is None:
        logger.info("No %s rungs on disk; building from the start", store.tag)
        return build_ladder(
            make_engine(seed), store, ladder_size, skip_distance,
            chunk_size=chunk_size,
        )

    if last >= ladder_size - 1:
        logger.info("Ladder %s already has %d rungs", store.tag, last + 1)
        return []

    logger.info("Resuming %s ladder from rung %d", store.tag, last)
    engine = make_engine(state=store.load(last))
    return build_ladder(
        engine, store, ladder_size, skip_distance,
        start_ordinal=last, chunk_size=chunk_size,
    )
