# SPDX-License-Identifier: MIT
"""
mvloess.index
=============

Spatial index over the input points of a LOESS fit.

The index owns three parallel arrays addressed by a stable integer slot:

- coordinates, shape ``(n_points, n_dims)``,
- values, shape ``(n_points,)``,
- robustness weights, shape ``(n_points,)``, initialized to 1.

Nearest neighbors are found with a :class:`sklearn.neighbors.KDTree`
built once at construction. The tree never changes; only the weights do,
through :meth:`PointIndex.set_weight` / :meth:`PointIndex.set_weights`.

Neighbor enumeration is lazy: :meth:`PointIndex.neighbors` returns a
generator that queries the tree in growing batches and yields
:class:`NeighborRecord` objects in increasing distance order, skipping
points whose robustness weight is zero. :meth:`PointIndex.nearest` is
the batch form used by the solver: one tree query returning slot and
distance arrays. Distances are **squared** Euclidean distances.
"""

from __future__ import annotations

from typing import Iterator, NamedTuple

import numpy as np
from sklearn.neighbors import KDTree

# First batch size requested from the tree by a neighbor generator.
_FIRST_BATCH = 16


class NeighborRecord(NamedTuple):
    """A stored point's slot and its squared distance to the query."""

    index: int
    distance: float


class Point(NamedTuple):
    """Read-only snapshot of a stored point."""

    coords: np.ndarray
    value: float
    weight: float


class PointIndex:
    """
    Static nearest-neighbor index with mutable per-point robustness weights.

    Parameters
    ----------
    coords : array-like, shape (n_points, n_dims) or (n_points,)
        Input locations. Must be finite. A 1-D array is one dimension.
    values : array-like, shape (n_points,)
        Values observed at the input locations.
    leaf_size : int, default 40
        Passed to :class:`sklearn.neighbors.KDTree`.
    """

    def __init__(self, coords, values, *, leaf_size: int = 40):
        coords = np.array(coords, dtype="float64")
        if coords.ndim == 1:
            coords = coords.reshape(-1, 1)
        values = np.array(values, dtype="float64").ravel()

        if coords.shape[0] == 0:
            raise ValueError("[PointIndex] cannot build an index from zero points.")
        if coords.shape[0] != values.shape[0]:
            raise ValueError(
                f"[PointIndex] got {coords.shape[0]} locations but "
                f"{values.shape[0]} values."
            )

        self._coords = coords
        self._values = values
        self._weights = np.ones(coords.shape[0], dtype="float64")
        self._tree = KDTree(coords, leaf_size=leaf_size)

    # ------------------------------------------------------------------ #
    # Sizes and read access
    # ------------------------------------------------------------------ #

    def __len__(self) -> int:
        return self._coords.shape[0]

    def size(self) -> int:
        return len(self)

    @property
    def n_dims(self) -> int:
        return self._coords.shape[1]

    @property
    def coords(self) -> np.ndarray:
        view = self._coords.view()
        view.flags.writeable = False
        return view

    @property
    def values(self) -> np.ndarray:
        view = self._values.view()
        view.flags.writeable = False
        return view

    @property
    def weights(self) -> np.ndarray:
        view = self._weights.view()
        view.flags.writeable = False
        return view

    def point_at(self, i: int) -> Point:
        return Point(
            coords=self._coords[i].copy(),
            value=float(self._values[i]),
            weight=float(self._weights[i]),
        )

    # ------------------------------------------------------------------ #
    # Weight mutation
    # ------------------------------------------------------------------ #

    def set_weight(self, i: int, w: float) -> None:
        """Set the robustness weight of the point stored in slot ``i``."""
        w = float(w)
        if not 0.0 <= w <= 1.0:
            raise ValueError(f"[PointIndex] robustness weight must be in [0, 1], got {w}.")
        self._weights[i] = w

    def set_weights(self, weights) -> None:
        """Replace all robustness weights at once."""
        weights = np.asarray(weights, dtype="float64").ravel()
        if weights.shape != self._weights.shape:
            raise ValueError(
                f"[PointIndex] expected {self._weights.shape[0]} weights, "
                f"got {weights.shape[0]}."
            )
        if np.any(~((weights >= 0.0) & (weights <= 1.0))):
            raise ValueError("[PointIndex] robustness weights must be in [0, 1].")
        self._weights[:] = weights

    # ------------------------------------------------------------------ #
    # Neighbor search
    # ------------------------------------------------------------------ #

    def neighbors(self, location) -> Iterator[NeighborRecord]:
        """
        Lazily enumerate stored points by increasing distance to ``location``.

        Points with a robustness weight of zero are skipped. The returned
        generator is independent of any other; calling ``neighbors`` again
        restarts the enumeration.

        Parameters
        ----------
        location : array-like, shape (n_dims,)
            Query location.

        Yields
        ------
        NeighborRecord
            ``(index, squared_distance)`` in non-decreasing distance order.
        """
        return self._enumerate(self._as_query(location))

    def nearest(self, location, k: int):
        """
        The ``k`` nearest stored points with a non-zero robustness weight.

        Batch counterpart of :meth:`neighbors`: the tree is queried for
        ``k`` points at once, zero-weight points are masked out, and the
        query is repeated with a doubled ``k`` only while the mask has left
        too few. Fewer than ``k`` points are returned when the index does
        not hold that many usable points.

        Parameters
        ----------
        location : array-like, shape (n_dims,)
            Query location.
        k : int
            Number of neighbors wanted.

        Returns
        -------
        slots : ndarray of intp, shape (<= k,)
            Slots of the neighbors, nearest first.
        distances : ndarray of float64, shape (<= k,)
            Their squared distances to ``location``.
        """
        loc = self._as_query(location)
        n_points = len(self)
        k = int(k)
        if k <= 0:
            return np.zeros(0, dtype=np.intp), np.zeros(0, dtype="float64")

        batch = min(k, n_points)
        while True:
            dist, ind = self._tree.query(loc, k=batch, return_distance=True, sort_results=True)
            ind = ind[0]
            usable = self._weights[ind] != 0.0
            if np.count_nonzero(usable) >= k or batch == n_points:
                slots = ind[usable][:k].astype(np.intp, copy=False)
                d = dist[0][usable][:k]
                return slots, d * d
            batch = min(2 * batch, n_points)

    def _as_query(self, location) -> np.ndarray:
        loc = np.asarray(location, dtype="float64").reshape(1, -1)
        if loc.shape[1] != self.n_dims:
            raise ValueError(
                f"[PointIndex] query has {loc.shape[1]} dimensions, "
                f"index has {self.n_dims}."
            )
        return loc

    def _enumerate(self, loc: np.ndarray) -> Iterator[NeighborRecord]:
        n_points = len(self)
        k = min(_FIRST_BATCH, n_points)
        seen = set()

        while True:
            dist, ind = self._tree.query(loc, k=k, return_distance=True, sort_results=True)
            for d, i in zip(dist[0], ind[0]):
                i = int(i)
                # Earlier (smaller) batches are a prefix of this one, up to ties.
                if i in seen:
                    continue
                seen.add(i)
                if self._weights[i] == 0.0:
                    continue
                yield NeighborRecord(index=i, distance=float(d) * float(d))
            if k == n_points:
                return
            k = min(2 * k, n_points)


__all__ = [
    "NeighborRecord",
    "Point",
    "PointIndex",
]
