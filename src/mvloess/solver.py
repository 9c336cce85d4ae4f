# SPDX-License-Identifier: MIT
"""
mvloess.solver
==============

Local weighted polynomial fit at a single query location.

For a query location ``p`` the solver:

1. takes up to ``q`` nearest usable neighbors from the index,
2. gives up (returns NaN) if fewer than ``n_terms`` were found,
3. weights them with :func:`mvloess.weights.neighbor_weights`,
4. builds a design matrix on coordinates centered at ``p``
   (intercept, linear terms and, for ``order=2``, all cross-products),
5. solves the weighted least-squares problem with
   :func:`numpy.linalg.lstsq` (SVD, minimum-norm under rank deficiency),
6. returns the intercept, which is the fitted value at ``p``.
"""

from __future__ import annotations

import numpy as np

from .index import PointIndex
from .weights import neighbor_weights


def n_terms(n_dims: int, order: int) -> int:
    """
    Number of regression terms for a polynomial of ``order`` in ``n_dims``.

    ``n_dims + 1`` for order 1; order 2 adds ``n_dims * (n_dims + 1) / 2``
    cross-products (squares included).
    """
    if order not in (1, 2):
        raise ValueError(f"order must be 1 or 2, got {order}.")
    n = n_dims + 1
    if order == 2:
        n += n_dims * (n_dims + 1) // 2
    return n


def design_matrix(centered: np.ndarray, order: int) -> np.ndarray:
    """
    Unweighted design matrix for centered coordinates.

    Parameters
    ----------
    centered : ndarray, shape (k, n_dims)
        Neighbor coordinates minus the query location.
    order : {1, 2}
        Polynomial order.

    Returns
    -------
    ndarray, shape (k, n_terms(n_dims, order))
        Columns: ``1``, ``c_0 .. c_{d-1}`` and, for order 2, ``c_i * c_j``
        for ``i <= j`` in the order ``(0,0), (0,1), ..., (d-1,d-1)``.
    """
    centered = np.asarray(centered, dtype="float64")
    k, n_dims = centered.shape
    cols = [np.ones((k, 1)), centered]
    if order == 2:
        i1, i2 = np.triu_indices(n_dims)
        cols.append(centered[:, i1] * centered[:, i2])
    elif order != 1:
        raise ValueError(f"order must be 1 or 2, got {order}.")
    return np.hstack(cols)


def local_fit(index: PointIndex, location, q: int, order: int) -> float:
    """
    Fitted value at ``location``, or NaN if it cannot be determined.

    Parameters
    ----------
    index : PointIndex
        Index over the input points (read only).
    location : array-like, shape (n_dims,)
        Query location.
    q : int
        Maximum number of neighbors used in the fit.
    order : {1, 2}
        Order of the local polynomial.
    """
    loc = np.asarray(location, dtype="float64")
    if not np.all(np.isfinite(loc)):
        return float("nan")

    n = n_terms(index.n_dims, order)
    slots, dists = index.nearest(loc, q)
    if slots.shape[0] < n:
        return float("nan")

    w = neighbor_weights(dists, index.weights[slots])

    A = design_matrix(index.coords[slots] - loc, order) * w[:, None]
    b = index.values[slots] * w

    x = np.linalg.lstsq(A, b, rcond=None)[0]
    return float(x[0])


__all__ = [
    "n_terms",
    "design_matrix",
    "local_fit",
]
