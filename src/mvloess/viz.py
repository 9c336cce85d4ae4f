# SPDX-License-Identifier: MIT
"""
mvloess.viz
===========

Diagnostic plots for LOESS fits.

- :func:`plot_parity_scatter`:
    observed values vs. fitted values with a 1:1 reference line.
- :func:`plot_robustness_weights`:
    input locations colored by their final robustness weight, which makes
    the points treated as outliers stand out.

Both functions draw on a given ``Axes`` (or create one), return it, and
annotate "No data" instead of failing on empty input.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure


# --------------------------------------------------------------------- #
# Internal helpers
# --------------------------------------------------------------------- #


def _ensure_ax(
    ax: Optional[Axes] = None,
    figsize: Tuple[float, float] = (8.0, 4.0),
) -> Tuple[Figure, Axes, bool]:
    """
    Return (fig, ax, created) ensuring an Axes exists.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        return fig, ax, True
    return ax.figure, ax, False


def _no_data(ax: Axes, message: str = "No data") -> Axes:
    """
    Render a centered 'No data' message on the given Axes and hide ticks.
    """
    ax.text(0.5, 0.5, message, ha="center", va="center", transform=ax.transAxes)
    ax.set_xticks([])
    ax.set_yticks([])
    return ax


# --------------------------------------------------------------------- #
# Public plots
# --------------------------------------------------------------------- #


def plot_parity_scatter(
    observed,
    fitted,
    *,
    sample: Optional[int] = 10000,
    ax: Optional[Axes] = None,
    figsize: Tuple[float, float] = (5.0, 5.0),
) -> Axes:
    """
    Parity scatter: observed vs. fitted with a 1:1 reference line.

    Parameters
    ----------
    observed, fitted : array-like
        Paired values; pairs with a NaN are dropped.
    sample : int or None
        Optional random subsample size to avoid overplotting. If None, plot all.
    ax : Axes or None
        Axes to draw on. If None, create a new Figure/Axes.
    figsize : (float, float)
        Figure size used when ``ax`` is None.

    Returns
    -------
    Axes
    """
    fig, ax, _ = _ensure_ax(ax, figsize)

    x = np.asarray(observed, dtype="float64").ravel()
    y = np.asarray(fitted, dtype="float64").ravel()
    if x.shape != y.shape:
        raise ValueError(
            f"observed and fitted must have the same shape. Got {x.shape} vs {y.shape}."
        )

    keep = np.isfinite(x) & np.isfinite(y)
    x, y = x[keep], y[keep]
    if x.size == 0:
        return _no_data(ax, "No parity data")

    if sample is not None and x.size > sample:
        pick = np.random.default_rng(42).choice(x.size, size=sample, replace=False)
        x, y = x[pick], y[pick]

    ax.scatter(x, y, s=8, alpha=0.6)

    # 1:1 line
    lo = float(min(x.min(), y.min()))
    hi = float(max(x.max(), y.max()))
    ax.plot([lo, hi], [lo, hi], linestyle="--")

    ax.set_xlabel("Observed")
    ax.set_ylabel("Fitted")
    ax.set_title("Observed vs. LOESS fit (parity)")
    return ax


def plot_robustness_weights(
    coords,
    weights,
    *,
    ax: Optional[Axes] = None,
    figsize: Tuple[float, float] = (6.0, 5.0),
) -> Axes:
    """
    Scatter of input locations colored by robustness weight.

    Two or more dimensions: the first two coordinates are plotted. One
    dimension: coordinate on x, weight on y.

    Parameters
    ----------
    coords : array-like, shape (n,) or (n, d)
        Input locations.
    weights : array-like, shape (n,)
        Robustness weights in [0, 1]; NaN rows (dropped inputs) are skipped.
    ax : Axes or None
        Axes to draw on. If None, create a new Figure/Axes.
    figsize : (float, float)
        Figure size used when ``ax`` is None.

    Returns
    -------
    Axes
    """
    fig, ax, _ = _ensure_ax(ax, figsize)

    xy = np.asarray(coords, dtype="float64")
    if xy.ndim == 1:
        xy = xy.reshape(-1, 1)
    w = np.asarray(weights, dtype="float64").ravel()
    if xy.shape[0] != w.shape[0]:
        raise ValueError(
            f"coords and weights must have the same number of rows. "
            f"Got {xy.shape[0]} vs {w.shape[0]}."
        )

    keep = np.isfinite(w) & np.isfinite(xy[:, : min(2, xy.shape[1])]).all(axis=1)
    xy, w = xy[keep], w[keep]
    if w.size == 0:
        return _no_data(ax, "No weights")

    if xy.shape[1] == 1:
        sc = ax.scatter(xy[:, 0], w, c=w, s=20, vmin=0.0, vmax=1.0)
        ax.set_xlabel("x0")
        ax.set_ylabel("Robustness weight")
    else:
        sc = ax.scatter(xy[:, 0], xy[:, 1], c=w, s=20, vmin=0.0, vmax=1.0)
        ax.set_xlabel("x0")
        ax.set_ylabel("x1")
    ax.set_title("Robustness weights")
    cbar = fig.colorbar(sc, ax=ax)
    cbar.set_label("weight")
    return ax


__all__ = [
    "plot_parity_scatter",
    "plot_robustness_weights",
]
