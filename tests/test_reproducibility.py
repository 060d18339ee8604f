# tests/test_reproducibility.py

from __future__ import annotations

import pytest

from errors import ReproducibilityError
from state.checkpoint_store import CheckpointStore
from state.reproducibility import run_self_test
from utils.rng import make_engine


def test_self_test_replays_every_checkpoint(tmp_path):
    store = CheckpointStore(tmp_path, "selftest")
    comparisons = run_self_test(make_engine(), store, n_checkpoints=10,
                                draws_per_checkpoint=10)

    assert len(comparisons) == 10
    for recorded, restored in comparisons:
        assert recorded == restored
        assert len(recorded) == 10
    assert store.ordinals() == list(range(10))


class _OffByOneStore(CheckpointStore):
    """Hands back the state one draw later than the one saved."""

    def load(self, identity):
        engine = make_engine(state=super().load(identity))
        engine.draw()
        return engine.capture_state()


def test_self_test_mismatch_is_an_assertion(tmp_path):
    with pytest.raises(ReproducibilityError):
        run_self_test(make_engine(), _OffByOneStore(tmp_path, "selftest"),
                      n_checkpoints=2, draws_per_checkpoint=3)
    assert issubclass(ReproducibilityError, AssertionError)


def test_self_test_rejects_empty_geometry(tmp_path):
    with pytest.raises(ValueError):
        run_self_test(make_engine(), CheckpointStore(tmp_path), n_checkpoints=0)
