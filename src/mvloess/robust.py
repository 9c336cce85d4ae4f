# SPDX-License-Identifier: MIT
"""
mvloess.robust
==============

Robust LOESS iterations.

:func:`robust_fit` runs ``niter + 1`` stages over a :class:`PointIndex`:

- ``niter`` robust passes: fit at the *input* locations, compute absolute
  residuals against the stored values and replace the robustness weights
  with :func:`mvloess.weights.robust_weights`;
- one final pass: fit at the caller's *query* locations with the weights
  left by the last robust pass.

With ``niter=0`` this is plain (non-robust) LOESS.

Progress is reported as one number in ``[0, 1]`` through an optional
callback. Each robust pass weighs ``N / (N * niter + M)`` of the total and
the final pass ``M / (N * niter + M)``, where ``N`` is the number of input
points and ``M`` the number of query locations.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from tqdm.auto import tqdm

from .index import PointIndex
from .parallel import ProgressCallback, fit_points
from .prepare import as_locations
from .weights import robust_weights


def robust_fit(
    index: PointIndex,
    query,
    q: int,
    niter: int,
    order: int,
    nthreads: int = 1,
    *,
    progress: Optional[ProgressCallback] = None,
    show_progress: bool = False,
    poll_interval: float = 1.0,
) -> np.ndarray:
    """
    Robust local regression at ``query`` locations.

    Parameters
    ----------
    index : PointIndex
        Index over the input points. Its robustness weights are updated in
        place after every robust pass.
    query : array-like, shape (m, n_dims)
        Output locations.
    q : int
        Neighbors per local fit.
    niter : int
        Number of robust passes (>= 0).
    order : {1, 2}
        Order of the local polynomial.
    nthreads : int, default 1
        Worker threads per pass.
    progress : callable or None
        Receives the overall progress in ``[0, 1]``.
    show_progress : bool, default False
        If True, write a status line after each robust pass.
    poll_interval : float, default 1.0
        Seconds between progress polls inside a pass.

    Returns
    -------
    ndarray, shape (m,)
        Fitted values at ``query``; NaN where undetermined.
    """
    if niter < 0:
        raise ValueError(f"niter must be >= 0, got {niter}.")

    query = as_locations(query, "query")
    n_in = len(index)
    n_out = query.shape[0]

    total = float(n_in * niter + n_out)
    frac_pass = n_in / total if total > 0 else 0.0
    frac_final = n_out / total if total > 0 else 0.0

    def _stage_progress(offset: float, share: float) -> Optional[ProgressCallback]:
        if progress is None:
            return None
        return lambda p: progress(offset + p * share)

    for citer in range(niter):
        fitted = fit_points(
            index,
            index.coords,
            q,
            order,
            nthreads,
            progress=_stage_progress(citer * frac_pass, frac_pass),
            poll_interval=poll_interval,
        )
        residuals = np.abs(index.values - fitted)
        new_weights, scale = robust_weights(residuals, index.weights, return_scale=True)
        index.set_weights(new_weights)

        if show_progress:
            if scale == 0.0:
                tqdm.write(
                    f"[loess] robust pass {citer + 1}/{niter}: "
                    f"degenerate residual scale, weights kept."
                )
            else:
                tqdm.write(
                    f"[loess] robust pass {citer + 1}/{niter}: "
                    f"median |residual|={scale / 6.0:.4g}  "
                    f"zero-weight points={int(np.sum(new_weights == 0.0)):,}"
                )

    return fit_points(
        index,
        query,
        q,
        order,
        nthreads,
        progress=_stage_progress(niter * frac_pass, frac_final),
        poll_interval=poll_interval,
    )


__all__ = ["robust_fit"]
