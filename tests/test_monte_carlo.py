# tests/test_monte_carlo.py

from __future__ import annotations

import numpy as np
import pytest

from core_types import SPHERE_VOLUME
from simulation.monte_carlo import count_hits, estimate_sphere_volume, run_sequential
from utils.rng import make_engine


class _ConstantEngine:
    def __init__(self, value):
        self.value = value

    def draw_many(self, n):
        return np.full(n, self.value)


def test_boundary_point_counts_as_inside():
    # (0.0, 0.5, 0.5) maps to (-1, 0, 0), exactly on the sphere
    assert count_hits(np.array([0.0, 0.5, 0.5])) == 1


def test_corner_point_is_outside():
    assert count_hits(np.array([0.0, 0.0, 0.0])) == 0


def test_coordinates_taken_in_xyz_order():
    # Two points: centre (inside) then a corner (outside)
    draws = np.array([0.5, 0.5, 0.5, 0.0, 0.0, 0.0])
    assert count_hits(draws) == 1
    assert count_hits(draws[3:]) == 0


def test_centre_only_estimate_is_cube_volume():
    result = estimate_sphere_volume(_ConstantEngine(0.5), 10)
    assert result.estimate == 8.0
    assert result.hits == 10


@pytest.mark.parametrize("points", [1, 2, 3, 7, 20])
def test_estimates_stay_in_cube_volume(points):
    result = estimate_sphere_volume(make_engine(), points)
    assert 0.0 <= result.estimate <= 8.0
    assert result.points == points
    assert 0 <= result.hits <= points


def test_estimate_converges():
    result = estimate_sphere_volume(make_engine(), 200_000)
    assert abs(result.estimate - SPHERE_VOLUME) < 0.05
    assert result.std_error < 0.01


def test_spread_shrinks_with_larger_budgets():
    engine = make_engine()
    small = [estimate_sphere_volume(engine, 1_000).estimate for _ in range(20)]
    large = [estimate_sphere_volume(engine, 100_000).estimate for _ in range(20)]

    # 100x the points should cut the spread about 10x
    assert np.std(large) < np.std(small) / 3
    assert abs(np.mean(large) - SPHERE_VOLUME) < abs(np.mean(small) - SPHERE_VOLUME) + 0.05


def test_chunk_size_does_not_change_result():
    big = estimate_sphere_volume(make_engine(), 5_000)
    small = estimate_sphere_volume(make_engine(), 5_000, chunk_size=7)
    assert big.hits == small.hits


def test_consumes_exactly_three_draws_per_point():
    engine = make_engine()
    estimate_sphere_volume(engine, 1_234, chunk_size=100)

    reference = make_engine()
    reference.advance(3 * 1_234)
    assert engine.draw() == reference.draw()


def test_same_start_state_gives_same_estimate():
    state = make_engine().capture_state()
    a = estimate_sphere_volume(make_engine(state=state), 10_000)
    b = estimate_sphere_volume(make_engine(state=state), 10_000)
    assert a.hits == b.hits


def test_sequential_replications_continue_the_stream():
    report = run_sequential(make_engine(), 2_000, replications=3)

    engine = make_engine()
    manual = [estimate_sphere_volume(engine, 2_000).hits for _ in range(3)]

    assert [r.hits for r in report.results] == manual
    assert report.estimate == pytest.approx(
        sum(r.estimate for r in report.results) / 3
    )


@pytest.mark.parametrize("points", [0, -5])
def test_non_positive_budget_rejected(points):
    with pytest.raises(ValueError):
        estimate_sphere_volume(make_engine(), points)


def test_zero_replications_rejected():
    with pytest.raises(ValueError):
        run_sequential(make_engine(), 10, replications=0)
