# state/reproducibility.py

"""
Save / restore self-test for the stream engine.

Workflow:
    1. For each of N checkpoints: save the engine state, then record the
       next D draws.
    2. For each checkpoint: restore it and draw D values again.
    3. Every restored draw must equal its recorded draw bit-for-bit.

A mismatch means the engine or the checkpoint format is broken, so it
raises ReproducibilityError (an AssertionError) instead of a recoverable
runtime error.
"""

from __future__ import annotations

from typing import List, Tuple

from config import SELFTEST_CHECKPOINTS, SELFTEST_DRAWS
from errors import ReproducibilityError
from state.checkpoint_store import CheckpointStore
from utils.logging_utils import get_logger
from utils.rng import StreamEngine


# (recorded draws, restored draws) for one checkpoint
Comparison = Tuple[List[float], List[float]]

logger = get_logger(__name__)


def run_self_test(
    engine: StreamEngine,
    store: CheckpointStore,
    n_checkpoints: int = SELFTEST_CHECKPOINTS,
    draws_per_checkpoint: int = SELFTEST_DRAWS,
) -> List[Comparison]:
    """
    Check that restoring each saved checkpoint replays its draws exactly.

    The engine is used for both phases and ends positioned right after
    the last replayed checkpoint.

    Returns:
        One (recorded, restored) pair per checkpoint.

    Raises:
        ReproducibilityError: a restored draw differs from the recorded one.
    """
    if n_checkpoints <= 0:
        raise ValueError(f"n_checkpoints must be positive, got {n_checkpoints}")
    if draws_per_checkpoint <= 0:
        raise ValueError(
            f"draws_per_checkpoint must be positive, got {draws_per_checkpoint}"
        )

    recorded: List[List[float]] = []
    for ordinal in range(n_checkpoints):
        store.save(ordinal, engine.capture_state())
        recorded.append([engine.draw() for _ in range(draws_per_checkpoint)])
        logger.info("Saved %s checkpoint %d", store.tag, ordinal)

    comparisons: List[Comparison] = []
    for ordinal, expected in enumerate(recorded):
        engine.install_state(store.load(ordinal))
        replayed = [engine.draw() for _ in range(draws_per_checkpoint)]

        for i, (want, got) in enumerate(zip(expected, replayed)):
            if want != got:
                raise ReproducibilityError(
                    f"checkpoint {ordinal}, draw {i}: restored {got!r} "
                    f"but recorded {want!r}"
                )

        comparisons.append((expected, replayed))
        logger.info("Checkpoint %d replayed %d draws exactly", ordinal, len(replayed))

    return comparisons
