# tests/test_viz.py
import numpy as np
import matplotlib

# Use non-interactive backend for tests
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest
from matplotlib.axes import Axes

from mvloess import loess
from mvloess.viz import plot_parity_scatter, plot_robustness_weights


def _fit_with_weights():
    rng = np.random.default_rng(0)
    x = rng.uniform(0.0, 1.0, size=(60, 2))
    v = x[:, 0] + rng.normal(0.0, 0.05, 60)
    v[3] += 10.0
    fitted, w = loess(x, v, x, span=0.4, niter=2, return_weights=True)
    return x, v, fitted, w


def test_plot_parity_scatter_returns_axes():
    x, v, fitted, _ = _fit_with_weights()
    ax = plot_parity_scatter(v, fitted)
    assert isinstance(ax, Axes)
    assert ax.get_xlabel() == "Observed"
    plt.close("all")


def test_plot_parity_scatter_subsamples_and_handles_nan():
    obs = np.linspace(0.0, 1.0, 200)
    fit = obs.copy()
    fit[::10] = np.nan
    ax = plot_parity_scatter(obs, fit, sample=50)
    assert isinstance(ax, Axes)
    plt.close("all")


def test_plot_parity_scatter_empty_shows_no_data():
    ax = plot_parity_scatter([np.nan], [1.0])
    texts = [t.get_text() for t in ax.texts]
    assert "No parity data" in texts
    plt.close("all")


def test_plot_parity_scatter_shape_mismatch_raises():
    with pytest.raises(ValueError):
        plot_parity_scatter([1.0, 2.0], [1.0])


def test_plot_robustness_weights_2d_and_1d():
    x, _, _, w = _fit_with_weights()

    fig, ax = plt.subplots()
    out = plot_robustness_weights(x, w, ax=ax)
    assert out is ax
    assert ax.get_ylabel() == "x1"

    ax1 = plot_robustness_weights(x[:, 0], w)
    assert ax1.get_ylabel() == "Robustness weight"
    plt.close("all")


def test_plot_robustness_weights_all_nan_shows_no_data():
    ax = plot_robustness_weights(np.zeros((3, 2)), np.full(3, np.nan))
    texts = [t.get_text() for t in ax.texts]
    assert "No weights" in texts
    plt.close("all")
