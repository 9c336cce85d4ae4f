# SPDX-License-Identifier: MIT
"""
mvloess.parallel
================

Split a batch of query locations over worker threads.

The locations are cut into contiguous, near-equal partitions (the first
``m % k`` partitions get one extra point). Each partition is handled by a
:class:`FitWorker` that runs :func:`mvloess.solver.local_fit` point by
point and writes into its own slice of the output array, so no locking is
needed on the results.

:func:`fit_points` starts a fresh thread pool per call, polls the workers
every ``poll_interval`` seconds and reports the mean of their progress to
an optional callback. Each local fit is one batched tree query
(:meth:`mvloess.index.PointIndex.nearest`) and one SVD solve, both run in
compiled code that releases the GIL; the per-point Python glue around
them still runs one thread at a time.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Optional

import numpy as np

from .index import PointIndex
from .prepare import as_locations
from .solver import local_fit

ProgressCallback = Callable[[float], None]


def partition_sizes(m: int, nthreads: int) -> List[int]:
    """
    Sizes of ``min(max(nthreads, 1), m)`` contiguous partitions of ``m`` points.

    >>> partition_sizes(10, 3)
    [4, 3, 3]
    """
    if m <= 0:
        return []
    k = min(max(int(nthreads), 1), m)
    base, extra = divmod(m, k)
    return [base + 1 if i < extra else base for i in range(k)]


class FitWorker:
    """
    Fits one contiguous slice of query locations.

    ``progress`` goes from 0 to 1 as points are processed and can be read
    from another thread at any time.
    """

    def __init__(
        self,
        index: PointIndex,
        points: np.ndarray,
        out: np.ndarray,
        *,
        q: int,
        order: int,
    ):
        if points.shape[0] != out.shape[0]:
            raise ValueError("points and output slice must have the same length.")
        self.index = index
        self.points = points
        self.out = out
        self.q = q
        self.order = order
        self.progress = 0.0

    def run(self) -> None:
        total = self.points.shape[0]
        for i in range(total):
            self.out[i] = local_fit(self.index, self.points[i], self.q, self.order)
            self.progress = (i + 1) / total
        self.progress = 1.0


def fit_points(
    index: PointIndex,
    points,
    q: int,
    order: int,
    nthreads: int = 1,
    *,
    progress: Optional[ProgressCallback] = None,
    poll_interval: float = 1.0,
) -> np.ndarray:
    """
    Run the local fit at every location in ``points``.

    Parameters
    ----------
    index : PointIndex
        Index over the input points. Not modified.
    points : array-like, shape (m, n_dims)
        Query locations. Rows with non-finite coordinates give NaN.
    q : int
        Neighbors per fit.
    order : {1, 2}
        Order of the local polynomial.
    nthreads : int, default 1
        Maximum number of worker threads (clamped to ``[1, m]``).
    progress : callable or None
        Called with the mean worker progress in ``[0, 1]`` on every poll.
    poll_interval : float, default 1.0
        Seconds between progress polls.

    Returns
    -------
    ndarray, shape (m,)
        Fitted values, NaN where the fit was undetermined.

    Notes
    -----
    An exception raised inside a worker is re-raised here once all workers
    have finished.
    """
    points = as_locations(points, "points")
    m = points.shape[0]
    out = np.full(m, np.nan, dtype="float64")

    sizes = partition_sizes(m, nthreads)
    if not sizes:
        if progress is not None:
            progress(1.0)
        return out

    workers: List[FitWorker] = []
    start = 0
    for size in sizes:
        stop = start + size
        workers.append(
            FitWorker(index, points[start:stop], out[start:stop], q=q, order=order)
        )
        start = stop

    def _report() -> None:
        if progress is not None:
            progress(float(np.mean([w.progress for w in workers])))

    with ThreadPoolExecutor(max_workers=len(workers)) as ex:
        futures = [ex.submit(w.run) for w in workers]
        pending = set(futures)
        while pending:
            _, pending = wait(pending, timeout=poll_interval)
            _report()

    # Surfaces the first worker failure, if any.
    for f in futures:
        f.result()

    _report()
    return out


__all__ = [
    "ProgressCallback",
    "partition_sizes",
    "FitWorker",
    "fit_points",
]
