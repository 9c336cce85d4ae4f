# SPDX-License-Identifier: MIT
"""
mvloess.api
===========

Public entry points.

- :func:`loess`
    Array interface: input locations ``x`` (N×D), values ``v`` (N) and
    query locations ``xi`` (M×D) in, fitted values (M) out.

- :func:`smooth_frame`
    DataFrame interface with caller-defined column names; fits at the
    rows of ``query`` (or of ``data`` itself) and returns a copy with the
    fitted column appended.

Both validate their arguments before doing any work, silently drop input
rows with a non-finite coordinate or value, and return NaN for query rows
that cannot be fitted.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from .config import LoessConfig
from .index import PointIndex
from .prepare import (
    as_locations,
    finite_rows,
    require_columns,
    resolve_threads,
    span_to_neighbors,
    validate_inputs,
)
from .robust import robust_fit


def _run(
    x: np.ndarray,
    v: np.ndarray,
    xi: np.ndarray,
    cfg: LoessConfig,
) -> Tuple[np.ndarray, np.ndarray]:
    """Fit on validated arrays; returns (fitted at xi, weights aligned with x)."""
    n_rows = x.shape[0]
    n_out = xi.shape[0]
    weights_out = np.full(n_rows, np.nan, dtype="float64")

    keep = finite_rows(x, v)
    n_keep = int(keep.sum())
    if cfg.show_progress and n_keep < n_rows:
        tqdm.write(f"[loess] dropped {n_rows - n_keep:,} non-finite input rows.")

    if n_keep == 0:
        if cfg.show_progress:
            tqdm.write("[loess] no finite input rows; every output is NaN.")
        return np.full(n_out, np.nan, dtype="float64"), weights_out

    q = span_to_neighbors(cfg.span, n_keep)
    nthreads = resolve_threads(cfg.nthreads)
    index = PointIndex(x[keep], v[keep])

    if cfg.show_progress:
        with tqdm(
            total=100.0,
            desc="LOESS",
            unit="%",
            bar_format="{desc}: {percentage:6.2f}%|{bar}| [{elapsed}<{remaining}]",
        ) as bar:

            def _progress(p: float) -> None:
                bar.n = min(100.0, 100.0 * p)
                bar.refresh()

            fitted = robust_fit(
                index,
                xi,
                q,
                cfg.niter,
                cfg.order,
                nthreads,
                progress=_progress,
                show_progress=True,
                poll_interval=cfg.poll_interval,
            )
            _progress(1.0)
        tqdm.write("Done.")
    else:
        fitted = robust_fit(
            index,
            xi,
            q,
            cfg.niter,
            cfg.order,
            nthreads,
            poll_interval=cfg.poll_interval,
        )

    weights_out[keep] = index.weights
    return fitted, weights_out


def loess(
    x,
    v,
    xi,
    span: float = 0.75,
    niter: int = 3,
    order: int = 1,
    nthreads: int = 0,
    *,
    show_progress: bool = False,
    poll_interval: float = 1.0,
    return_weights: bool = False,
) -> Union[np.ndarray, Tuple[np.ndarray, np.ndarray]]:
    """
    Robust multivariate LOESS.

    Parameters
    ----------
    x : array-like, shape (n,) or (n, d)
        Input locations. A 1-D array is one dimension.
    v : array-like, shape (n,)
        Values at the input locations.
    xi : array-like, shape (m,) or (m, d)
        Query locations.
    span : float, default 0.75
        Neighbors per local fit: an absolute count if > 1, otherwise a
        fraction of the number of finite input rows. Clamped to at least 3
        and at most the number of finite input rows.
    niter : int, default 3
        Robust iterations (0 = plain LOESS).
    order : {1, 2}, default 1
        Order of the local polynomial.
    nthreads : int, default 0
        Worker threads; 0 uses every available CPU.
    show_progress : bool, default False
        Render a progress bar and status lines on stderr.
    poll_interval : float, default 1.0
        Seconds between progress polls.
    return_weights : bool, default False
        Also return the final robustness weights, aligned with the rows of
        ``x`` (NaN for dropped rows).

    Returns
    -------
    ndarray, shape (m,)
        Fitted values; NaN where a fit could not be determined.
    (ndarray, ndarray)
        ``(fitted, weights)`` when ``return_weights`` is True.

    Raises
    ------
    ValueError
        On mismatched shapes or invalid parameters.
    """
    cfg = LoessConfig(
        span=span,
        niter=niter,
        order=order,
        nthreads=nthreads,
        poll_interval=poll_interval,
        show_progress=show_progress,
    )

    x_arr = as_locations(x, "x")
    v_arr = np.asarray(v, dtype="float64")
    if v_arr.ndim == 2 and v_arr.shape[1] == 1:
        v_arr = v_arr[:, 0]
    xi_arr = as_locations(xi, "xi")
    validate_inputs(x_arr, v_arr, xi_arr)

    fitted, weights = _run(x_arr, v_arr, xi_arr, cfg)
    if return_weights:
        return fitted, weights
    return fitted


def smooth_frame(
    data: pd.DataFrame,
    *,
    coord_cols: Sequence[str],
    value_col: str,
    query: Optional[pd.DataFrame] = None,
    out_col: str = "fitted",
    add_weights: bool = False,
    **config: Any,
) -> pd.DataFrame:
    """
    LOESS on a long-format table.

    Parameters
    ----------
    data : DataFrame
        Table with at least ``coord_cols`` and ``value_col``.
    coord_cols : sequence of str
        Columns holding the coordinates (one per dimension).
    value_col : str
        Column holding the values to smooth.
    query : DataFrame or None
        Rows to evaluate at; must contain ``coord_cols``. Defaults to
        ``data`` itself.
    out_col : str, default "fitted"
        Name of the column receiving the fitted values.
    add_weights : bool, default False
        When fitting at ``data`` itself, also add a ``"robustness_weight"``
        column. Ignored when ``query`` is given.
    **config
        Any field of :class:`mvloess.config.LoessConfig`.

    Returns
    -------
    DataFrame
        Copy of the query table with ``out_col`` (and optionally
        ``"robustness_weight"``) appended.
    """
    coord_cols = list(coord_cols)
    if not coord_cols:
        raise ValueError("[smooth_frame] coord_cols must name at least one column.")
    require_columns(data, coord_cols + [value_col], role="data")

    cfg = LoessConfig(**config)

    at_data = query is None
    target = data if at_data else query
    if not at_data:
        require_columns(target, coord_cols, role="query")

    x_arr = data[coord_cols].to_numpy(dtype="float64")
    v_arr = data[value_col].to_numpy(dtype="float64")
    xi_arr = target[coord_cols].to_numpy(dtype="float64")
    validate_inputs(x_arr, v_arr, xi_arr)

    fitted, weights = _run(x_arr, v_arr, xi_arr, cfg)

    out = target.copy()
    out[out_col] = fitted
    if add_weights and at_data:
        out["robustness_weight"] = weights
    return out


__all__ = ["loess", "smooth_frame"]
