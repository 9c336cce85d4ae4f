# SPDX-License-Identifier: MIT
"""
mvloess
=======

Robust multivariate LOESS (locally weighted regression) for scattered
data in any number of dimensions.

For every query location a degree-1 or degree-2 polynomial is fitted by
weighted least squares to its nearest input points (tricube distance
weights). Optional robust iterations re-weight the input points with a
bicube kernel on the residuals so that outliers lose their influence.

Main high-level entry points
----------------------------

- :func:`loess` – array interface: locations, values, query locations.
- :func:`smooth_frame` – the same on a pandas DataFrame with
  caller-defined column names.

Core submodules
---------------

- :mod:`mvloess.index`    – KD-tree neighbor index with mutable weights
- :mod:`mvloess.weights`  – tricube / bicube kernels and the median
- :mod:`mvloess.solver`   – single-location weighted least-squares fit
- :mod:`mvloess.parallel` – multithreaded fitting of many locations
- :mod:`mvloess.robust`   – robust iteration driver
- :mod:`mvloess.prepare`  – argument validation and input cleaning
- :mod:`mvloess.config`   – run configuration
- :mod:`mvloess.viz`      – diagnostic plots
"""

from __future__ import annotations

# Core high-level functions
from .api import loess, smooth_frame

# Configuration
from .config import LoessConfig

# Engine
from .index import NeighborRecord, Point, PointIndex
from .parallel import fit_points
from .robust import robust_fit
from .solver import local_fit, n_terms
from .weights import median, neighbor_weights, robust_weights


__all__ = [
    # High-level
    "loess",
    "smooth_frame",
    "LoessConfig",
    # Engine
    "PointIndex",
    "NeighborRecord",
    "Point",
    "local_fit",
    "n_terms",
    "fit_points",
    "robust_fit",
    # Weights
    "median",
    "neighbor_weights",
    "robust_weights",
]


# Sync this with pyproject.toml if you bump the version
__version__ = "0.1.0"
