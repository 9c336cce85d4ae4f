# SPDX-License-Identifier: MIT
"""
mvloess.prepare
===============

Turn caller-supplied arrays into what the LOESS engine expects.

- :func:`as_locations`:
    coerce a location array to 2-D float (1-D means one dimension).
- :func:`validate_inputs`:
    check that locations, values and query locations agree in shape.
- :func:`finite_rows`:
    mask of input rows whose coordinates and value are all finite.
- :func:`span_to_neighbors`:
    convert a span (count or fraction) to the neighbor count ``q``.
- :func:`resolve_threads`:
    turn ``nthreads=0`` into the number of available CPUs.
- :func:`require_columns`:
    column check for the DataFrame entry point.
"""

from __future__ import annotations

import math
import os
from typing import Sequence

import numpy as np
import pandas as pd


def as_locations(arr, name: str = "locations") -> np.ndarray:
    """
    Coerce ``arr`` to a 2-D float64 array of shape ``(rows, n_dims)``.

    A 1-D array is read as ``rows`` points in one dimension.
    """
    out = np.asarray(arr, dtype="float64")
    if out.ndim == 0:
        raise ValueError(f"{name} must be at least 1-D, got a scalar.")
    if out.ndim == 1:
        out = out.reshape(-1, 1)
    elif out.ndim > 2:
        raise ValueError(f"{name} must be 1-D or 2-D, got {out.ndim} dimensions.")
    return out


def validate_inputs(x: np.ndarray, v: np.ndarray, xi: np.ndarray) -> None:
    """
    Raise a ValueError if locations, values and query locations disagree.

    Parameters
    ----------
    x : ndarray, shape (n, d)
        Input locations.
    v : ndarray, shape (n,)
        Input values.
    xi : ndarray, shape (m, d)
        Query locations.
    """
    if v.ndim != 1:
        raise ValueError(f"values must be 1-D, got shape {v.shape}.")
    if x.shape[0] != v.shape[0]:
        raise ValueError(
            "Second input (values) should have same number of rows as first input "
            f"(locations): got {v.shape[0]} values for {x.shape[0]} locations."
        )
    if x.shape[1] != xi.shape[1]:
        raise ValueError(
            "Third input (query points) should have same number of columns as first "
            f"input (locations): got {xi.shape[1]} vs {x.shape[1]}."
        )


def finite_rows(x: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Boolean mask of rows where every coordinate and the value are finite."""
    return np.isfinite(x).all(axis=1) & np.isfinite(v)


def span_to_neighbors(span: float, n: int) -> int:
    """
    Number of neighbors used in each local fit.

    ``span > 1`` is an absolute count (floored); otherwise it is a fraction
    of ``n``. The result is clamped to ``max(3, min(n, q))``.

    Parameters
    ----------
    span : float
        Absolute count or fraction of the input points.
    n : int
        Number of usable input points.
    """
    if span > 1:
        q = int(math.floor(span))
    else:
        q = int(math.floor(span * n))
    return max(3, min(int(n), q))


def resolve_threads(nthreads: int) -> int:
    """Worker thread count; 0 means one per available CPU."""
    if nthreads == 0:
        return os.cpu_count() or 1
    return max(1, int(nthreads))


def require_columns(df: pd.DataFrame, columns: Sequence[str], *, role: str) -> None:
    """
    Check that a table handed to :func:`mvloess.smooth_frame` has ``columns``.

    ``role`` names the table in the error (``"data"`` or ``"query"``).
    """
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(
            f"[smooth_frame] {role} frame is missing required columns {missing}; "
            f"it has {list(df.columns)}."
        )


__all__ = [
    "as_locations",
    "validate_inputs",
    "finite_rows",
    "span_to_neighbors",
    "resolve_threads",
    "require_columns",
]
