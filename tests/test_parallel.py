# SPDX-License-Identifier: MIT
"""
Tests for mvloess.parallel
"""

import numpy as np
import pytest

import mvloess.parallel as parallel
from mvloess.index import PointIndex
from mvloess.parallel import FitWorker, fit_points, partition_sizes
from mvloess.solver import local_fit


def _make_index(n=200, seed=0):
    rng = np.random.default_rng(seed)
    x = rng.uniform(0.0, 10.0, size=(n, 2))
    v = np.sin(x[:, 0]) + np.cos(x[:, 1]) + rng.normal(0.0, 0.1, n)
    return PointIndex(x, v), x


# --------------------------------------------------------------------------- #
# Partitioning
# --------------------------------------------------------------------------- #


def test_partition_sizes():
    assert partition_sizes(10, 3) == [4, 3, 3]
    assert partition_sizes(9, 3) == [3, 3, 3]
    assert partition_sizes(2, 8) == [1, 1]
    assert partition_sizes(5, 0) == [5]
    assert partition_sizes(0, 4) == []

    sizes = partition_sizes(1001, 7)
    assert sum(sizes) == 1001
    assert max(sizes) - min(sizes) <= 1


# --------------------------------------------------------------------------- #
# Worker
# --------------------------------------------------------------------------- #


def test_fit_worker_writes_its_slice_and_reaches_full_progress():
    idx, x = _make_index(50)
    out = np.full(60, -1.0)
    pts = x[:10]

    worker = FitWorker(idx, pts, out[20:30], q=12, order=1)
    assert worker.progress == 0.0
    worker.run()

    assert worker.progress == 1.0
    assert np.all(out[:20] == -1.0)
    assert np.all(out[30:] == -1.0)
    expected = [local_fit(idx, p, 12, 1) for p in pts]
    np.testing.assert_array_equal(out[20:30], expected)


# --------------------------------------------------------------------------- #
# Coordinator
# --------------------------------------------------------------------------- #


def test_fit_points_independent_of_thread_count():
    idx, _ = _make_index()
    rng = np.random.default_rng(5)
    query = rng.uniform(-1.0, 11.0, size=(37, 2))
    query[4] = [np.nan, 1.0]

    single = fit_points(idx, query, 20, 2, nthreads=1)
    multi = fit_points(idx, query, 20, 2, nthreads=4)

    assert single.shape == (37,)
    np.testing.assert_array_equal(single, multi)
    assert np.isnan(single[4])
    assert np.all(np.isfinite(np.delete(single, 4)))


def test_fit_points_more_threads_than_points():
    idx, _ = _make_index(30)
    query = np.array([[5.0, 5.0], [2.0, 3.0]])

    out = fit_points(idx, query, 10, 1, nthreads=16)
    np.testing.assert_array_equal(out, [local_fit(idx, q, 10, 1) for q in query])


def test_fit_points_one_dimensional_query_is_many_points():
    x = np.linspace(0.0, 1.0, 30)
    idx = PointIndex(x, 3.0 * x + 1.0)

    out = fit_points(idx, np.array([0.2, 0.5, 0.7]), 8, 1)
    np.testing.assert_allclose(out, [1.6, 2.5, 3.1], atol=1e-10)


def test_fit_points_empty_query():
    idx, _ = _make_index(30)
    seen = []
    out = fit_points(idx, np.empty((0, 2)), 10, 1, nthreads=4, progress=seen.append)

    assert out.shape == (0,)
    assert seen == [1.0]


def test_fit_points_reports_progress_in_unit_interval():
    idx, x = _make_index(120)
    seen = []

    fit_points(idx, x, 15, 1, nthreads=3, progress=seen.append, poll_interval=0.01)

    assert seen
    assert all(0.0 <= p <= 1.0 for p in seen)
    assert seen[-1] == 1.0


def test_fit_points_propagates_worker_errors(monkeypatch):
    idx, x = _make_index(20)

    def _boom(*args, **kwargs):
        raise RuntimeError("solver failed")

    monkeypatch.setattr(parallel, "local_fit", _boom)
    with pytest.raises(RuntimeError, match="solver failed"):
        fit_points(idx, x, 5, 1, nthreads=2, poll_interval=0.01)
