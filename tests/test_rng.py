# tests/test_rng.py

from __future__ import annotations

import numpy as np
import pytest

from config import DEFAULT_SEED
from core_types import StreamState
from errors import CorruptState
from utils.rng import StreamEngine, make_engine


def test_default_engines_produce_identical_sequences():
    a = StreamEngine()
    b = StreamEngine()
    assert a.seed == DEFAULT_SEED
    assert [a.draw() for _ in range(10)] == [b.draw() for _ in range(10)]


def test_draws_are_uniform_in_unit_interval():
    values = make_engine().draw_many(10_000)
    assert values.dtype == np.float64
    assert values.min() >= 0.0
    assert values.max() < 1.0
    assert abs(values.mean() - 0.5) < 0.02


def test_seed_changes_sequence():
    assert make_engine(1).draw_many(5).tolist() != make_engine(2).draw_many(5).tolist()


def test_draw_many_matches_single_draws():
    a = make_engine()
    b = make_engine()
    assert a.draw_many(25).tolist() == [b.draw() for _ in range(25)]


def test_capture_does_not_advance():
    engine = make_engine()
    engine.draw_many(3)
    first = engine.capture_state()
    second = engine.capture_state()
    assert first == second

    reference = make_engine()
    reference.draw_many(3)
    assert engine.draw() == reference.draw()


def test_install_continues_from_captured_point():
    engine = make_engine()
    engine.draw_many(100)
    state = engine.capture_state()
    expected = engine.draw_many(50).tolist()

    other = make_engine(seed=999)
    other.install_state(state)
    assert other.draw_many(50).tolist() == expected


def test_install_same_state_many_times():
    engine = make_engine()
    state = engine.capture_state()
    expected = engine.draw_many(7).tolist()
    for _ in range(3):
        engine.install_state(state)
        assert engine.draw_many(7).tolist() == expected


def test_advance_matches_drawing_in_one_go():
    chunked = make_engine()
    chunked.advance(1_001, chunk_size=100)

    direct = make_engine()
    direct.draw_many(1_001)

    assert chunked.capture_state() == direct.capture_state()
    assert chunked.draw() == direct.draw()


def test_advance_zero_is_a_no_op():
    engine = make_engine()
    before = engine.capture_state()
    engine.advance(0)
    assert engine.capture_state() == before


@pytest.mark.parametrize("n", [-1, -100])
def test_negative_counts_rejected(n):
    engine = make_engine()
    with pytest.raises(ValueError):
        engine.draw_many(n)
    with pytest.raises(ValueError):
        engine.advance(n)


@pytest.mark.parametrize(
    "bad",
    [
        lambda s: StreamState(key=s.key[:-1], pos=s.pos),
        lambda s: StreamState(key=(0,) * 624, pos=s.pos),
        lambda s: StreamState(key=s.key, pos=625),
        lambda s: StreamState(key=(2**32,) + s.key[1:], pos=s.pos),
        lambda s: StreamState(key=("x",) + s.key[1:], pos=s.pos),
    ],
)
def test_install_rejects_malformed_state_and_keeps_prior_state(bad):
    engine = make_engine()
    engine.draw_many(10)
    good = engine.capture_state()

    with pytest.raises(CorruptState):
        engine.install_state(bad(good))

    assert engine.capture_state() == good


def test_install_rejects_non_state():
    engine = make_engine()
    with pytest.raises(CorruptState):
        engine.install_state({"key": [1, 2, 3]})


def test_seed_describes_construction_until_state_installed():
    assert make_engine(seed=7).seed == 7

    engine = make_engine(seed=7)
    engine.install_state(make_engine(seed=8).capture_state())
    assert engine.seed is None
    assert make_engine(state=make_engine().capture_state()).seed is None


def test_failed_install_keeps_seed():
    engine = make_engine(seed=7)
    with pytest.raises(CorruptState):
        engine.install_state(StreamState(key=(0,) * 624, pos=624))
    assert engine.seed == 7
