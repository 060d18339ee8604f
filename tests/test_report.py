# tests/test_report.py

from __future__ import annotations

import pandas as pd
import pytest

from core_types import EstimationResult
from simulation.report import COLUMNS, results_frame, save_frame, summarize, within_tolerance


def _result(hits, points=1_000, origin=None):
    return EstimationResult(estimate=8.0 * hits / points, elapsed_s=0.002,
                            points=points, hits=hits, origin=origin)


def test_results_frame_has_one_row_per_result():
    df = results_frame([_result(520, origin=0), _result(530, origin=1)])
    assert list(df.columns) == COLUMNS
    assert df["origin"].tolist() == [0, 1]
    assert df["elapsed_ms"].tolist() == pytest.approx([2.0, 2.0])


def test_summarize_pools_equal_runs():
    stats = summarize([_result(500), _result(540)])
    assert stats["estimate"] == pytest.approx(8.0 * 1_040 / 2_000)
    assert stats["points"] == 2_000
    assert stats["std_error"] > 0.0


def test_summarize_unequal_runs():
    stats = summarize([_result(500), _result(1_050, points=2_000)])
    assert stats["std_error"] > 0.0


def test_summarize_empty_rejected():
    with pytest.raises(ValueError):
        summarize([])


def test_within_tolerance():
    batch = [_result(523), _result(524)]
    assert within_tolerance(batch, batch)
    assert not within_tolerance(batch, [_result(900), _result(910)])


def test_save_frame_writes_csv(tmp_path):
    path = save_frame(results_frame([_result(520, origin=3)]), tmp_path / "out" / "r.csv")
    loaded = pd.read_csv(path)
    assert loaded["hits"].tolist() == [520]
