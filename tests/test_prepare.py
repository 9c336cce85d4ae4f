# SPDX-License-Identifier: MIT
"""
Tests for mvloess.prepare and mvloess.config
"""

import numpy as np
import pandas as pd
import pytest

from mvloess.config import LoessConfig
from mvloess.prepare import (
    as_locations,
    finite_rows,
    require_columns,
    resolve_threads,
    span_to_neighbors,
    validate_inputs,
)


# --------------------------------------------------------------------------- #
# Array coercion and validation
# --------------------------------------------------------------------------- #


def test_as_locations_shapes():
    assert as_locations([1.0, 2.0, 3.0]).shape == (3, 1)
    assert as_locations(np.zeros((4, 3))).shape == (4, 3)
    with pytest.raises(ValueError):
        as_locations(np.zeros((2, 2, 2)))
    with pytest.raises(ValueError):
        as_locations(1.0)


def test_validate_inputs_mismatches():
    x = np.zeros((5, 2))
    validate_inputs(x, np.zeros(5), np.zeros((3, 2)))

    with pytest.raises(ValueError, match="same number of rows"):
        validate_inputs(x, np.zeros(4), np.zeros((3, 2)))
    with pytest.raises(ValueError, match="same number of columns"):
        validate_inputs(x, np.zeros(5), np.zeros((3, 3)))


def test_finite_rows_mask():
    x = np.array([[0.0, 1.0], [np.nan, 1.0], [2.0, np.inf], [3.0, 3.0]])
    v = np.array([1.0, 1.0, 1.0, np.nan])
    assert finite_rows(x, v).tolist() == [True, False, False, False]


def test_require_columns_names_frame_and_missing_columns():
    df = pd.DataFrame({"a": [1], "b": [2]})
    require_columns(df, ["a", "b"], role="data")
    with pytest.raises(ValueError, match=r"\[smooth_frame\] query frame is missing required columns \['c'\]"):
        require_columns(df, ["a", "c"], role="query")


# --------------------------------------------------------------------------- #
# Span and threads
# --------------------------------------------------------------------------- #


def test_span_to_neighbors():
    assert span_to_neighbors(0.5, 100) == 50
    assert span_to_neighbors(0.255, 100) == 25
    assert span_to_neighbors(10, 100) == 10
    assert span_to_neighbors(10.9, 100) == 10
    # Clamped to [3, n]
    assert span_to_neighbors(0.01, 100) == 3
    assert span_to_neighbors(500, 100) == 100
    assert span_to_neighbors(1.0, 100) == 100
    assert span_to_neighbors(2, 2) == 3


def test_resolve_threads():
    assert resolve_threads(0) >= 1
    assert resolve_threads(3) == 3


# --------------------------------------------------------------------------- #
# LoessConfig
# --------------------------------------------------------------------------- #


def test_config_defaults():
    cfg = LoessConfig()
    assert cfg.span == 0.75
    assert cfg.niter == 3
    assert cfg.order == 1
    assert cfg.nthreads == 0
    assert cfg.show_progress is False


@pytest.mark.parametrize(
    "kwargs",
    [
        {"order": 3},
        {"order": 0},
        {"niter": -1},
        {"niter": 1.5},
        {"span": 0.0},
        {"span": float("nan")},
        {"nthreads": -2},
        {"poll_interval": 0.0},
    ],
)
def test_config_rejects_invalid_values(kwargs):
    with pytest.raises(ValueError):
        LoessConfig(**kwargs)
