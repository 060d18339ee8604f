# tests/conftest.py

from __future__ import annotations

import pytest

from state.checkpoint_store import CheckpointStore
from state.ladder import build_ladder
from utils.rng import make_engine


# Small ladder geometry shared by the parallel tests
SMALL_SKIP = 200_000
SMALL_LADDER = 4


@pytest.fixture
def store(tmp_path):
    return CheckpointStore(tmp_path, "ladder")


@pytest.fixture
def small_ladder(store):
    build_ladder(make_engine(), store, ladder_size=SMALL_LADDER, skip_distance=SMALL_SKIP,
                 chunk_size=50_000)
    return store
