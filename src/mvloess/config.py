# SPDX-License-Identifier: MIT
"""
Run configuration for mvloess.

All tunables of a LOESS run live in :class:`LoessConfig`. The dataclass
validates itself on construction, so an invalid combination fails before
any index is built.

Example
-------
from mvloess.config import LoessConfig

cfg = LoessConfig(span=0.3, niter=4, order=2, nthreads=0, show_progress=True)
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class LoessConfig:
    # Neighborhood size: absolute count (> 1) or fraction of the inputs (0, 1]
    span: float = 0.75

    # Robust passes before the final fit (0 = plain LOESS)
    niter: int = 3

    # Local polynomial order
    order: int = 1

    # Worker threads; 0 = one per CPU
    nthreads: int = 0

    # Seconds between progress polls
    poll_interval: float = 1.0

    # Verbosity
    show_progress: bool = False

    def __post_init__(self):
        span = float(self.span)
        if not math.isfinite(span) or span <= 0.0:
            raise ValueError(f"[LoessConfig] span must be a positive number, got {self.span!r}.")
        self.span = span

        if int(self.niter) != self.niter or self.niter < 0:
            raise ValueError(f"[LoessConfig] niter must be a non-negative integer, got {self.niter!r}.")
        self.niter = int(self.niter)

        if self.order not in (1, 2):
            raise ValueError("[LoessConfig] order should be equal to one or two.")
        self.order = int(self.order)

        if int(self.nthreads) != self.nthreads or self.nthreads < 0:
            raise ValueError(
                f"[LoessConfig] nthreads must be a non-negative integer, got {self.nthreads!r}."
            )
        self.nthreads = int(self.nthreads)

        if not float(self.poll_interval) > 0.0:
            raise ValueError(
                f"[LoessConfig] poll_interval must be positive, got {self.poll_interval!r}."
            )
        self.poll_interval = float(self.poll_interval)


__all__ = ["LoessConfig"]
