# SPDX-License-Identifier: MIT
"""
mvloess.weights
===============

Kernel weights used by the local fits and the robustness iterations.

- :func:`tricube` / :func:`neighbor_weights`:
    distance kernel applied to the neighbors of one query location,
    multiplied by each neighbor's current robustness weight.
- :func:`bicube` / :func:`robust_weights`:
    residual kernel used to down-weight outliers between robust passes.
- :func:`median`:
    selection-based median used to scale the residuals.

Distances handed to :func:`neighbor_weights` are squared Euclidean
distances (see :mod:`mvloess.index`), hence the ``1.5`` exponent in
:func:`tricube`: ``(d**2 / dmax**2) ** 1.5 == (d / dmax) ** 3``.
"""

from __future__ import annotations

from typing import Optional

import numpy as np


# --------------------------------------------------------------------------- #
# Kernels
# --------------------------------------------------------------------------- #


def tricube(u) -> np.ndarray:
    """
    Tricube kernel on squared-distance ratios: ``(1 - u**1.5)**3`` for
    ``u < 1`` and 0 otherwise.
    """
    u = np.asarray(u, dtype="float64")
    inside = u < 1.0
    out = np.zeros_like(u)
    out[inside] = (1.0 - u[inside] ** 1.5) ** 3
    return out


def bicube(u) -> np.ndarray:
    """Bicube kernel: ``(1 - u**2)**2`` for ``|u| < 1`` and 0 otherwise."""
    u = np.abs(np.asarray(u, dtype="float64"))
    inside = u < 1.0
    out = np.zeros_like(u)
    out[inside] = (1.0 - u[inside] ** 2) ** 2
    return out


# --------------------------------------------------------------------------- #
# Median
# --------------------------------------------------------------------------- #


def median(values) -> float:
    """
    Selection-based median.

    The input is copied and partially partitioned so that the element at
    position ``len // 2`` is in its sorted place. For even lengths this is
    the upper of the two central elements.

    Examples
    --------
    >>> median([5, 3, 1, 4, 2])
    3.0
    >>> median([1, 2, 3, 4])
    3.0
    """
    arr = np.array(values, dtype="float64").ravel()
    if arr.size == 0:
        raise ValueError("median of an empty sequence is undefined.")
    mid = arr.size // 2
    return float(np.partition(arr, mid)[mid])


# --------------------------------------------------------------------------- #
# Weight builders
# --------------------------------------------------------------------------- #


def neighbor_weights(distances, robustness) -> np.ndarray:
    """
    Regression weights for the neighbors of one query location.

    Parameters
    ----------
    distances : array-like, shape (k,)
        Squared distances in non-decreasing order; the last one is the
        farthest selected neighbor.
    robustness : array-like, shape (k,)
        Current robustness weights of the same neighbors.

    Returns
    -------
    ndarray, shape (k,)
        ``robustness_i * tricube(d_i / d_max)``. The farthest neighbor
        gets 0. When ``d_max`` is 0 every neighbor sits on the query
        location and the kernel is taken as 1.
    """
    d = np.asarray(distances, dtype="float64")
    rw = np.asarray(robustness, dtype="float64")
    if d.shape != rw.shape:
        raise ValueError(
            f"distances and robustness must have the same shape. "
            f"Got {d.shape} vs {rw.shape}."
        )
    if d.size == 0:
        return np.zeros(0, dtype="float64")

    dmax = d[-1]
    if dmax <= 0.0:
        return rw.copy()
    return rw * tricube(d / dmax)


def robust_weights(
    residuals,
    previous: Optional[np.ndarray] = None,
    *,
    return_scale: bool = False,
):
    """
    Robustness weights from absolute residuals.

    ``s = 6 * median(|r|)`` over the finite residuals and each weight is
    ``bicube(|r| / s)``. Non-finite residuals (points whose fit was
    undetermined) get weight 0.

    If ``s`` is 0, or no residual is finite, the scale is degenerate and a
    copy of ``previous`` is returned (all ones when ``previous`` is None).

    Parameters
    ----------
    residuals : array-like, shape (n,)
        Residuals at the input points.
    previous : ndarray or None
        Weights of the previous pass.
    return_scale : bool, default False
        If True, also return ``s`` (0.0 when the scale was degenerate).

    Returns
    -------
    ndarray, shape (n,)
        The new weights, or ``(weights, s)`` with ``return_scale``.
    """
    r = np.abs(np.asarray(residuals, dtype="float64").ravel())
    if previous is None:
        prev = np.ones_like(r)
    else:
        prev = np.array(previous, dtype="float64").ravel()
        if prev.shape != r.shape:
            raise ValueError(
                f"residuals and previous weights must have the same shape. "
                f"Got {r.shape} vs {prev.shape}."
            )

    finite = np.isfinite(r)
    scale = 6.0 * median(r[finite]) if finite.any() else 0.0
    if scale == 0.0:
        out = prev
    else:
        out = np.zeros_like(r)
        out[finite] = bicube(r[finite] / scale)

    if return_scale:
        return out, scale
    return out


__all__ = [
    "tricube",
    "bicube",
    "median",
    "neighbor_weights",
    "robust_weights",
]
