"""
Separable smoothing of the lattice.

Repeated ``[1, 2, 1] / 4`` passes along every axis approximate a Gaussian blur
in the joint space-range domain.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
from scipy.ndimage import correlate1d

from hdrgrid.grid.lattice import Lattice

logger = logging.getLogger(__name__)

BOX_KERNEL = np.array([0.25, 0.5, 0.25])


def convolve(lattice: Lattice, iterations: int = 2, order: Optional[Sequence[int]] = None) -> Lattice:
    """
    Smooth ``lattice`` in place.

    Axes are processed in ``order`` (default ``0, 1, ..., D - 1``: x, y, then
    the range axes), ``iterations`` passes each. Only cells interior on every
    axis are written; padding cells keep their post-splat values.
    """

    if order is None:
        order = range(lattice.dimension)

    interior = lattice.interior()
    current = lattice.data
    scratch = current.copy()

    for axis in order:
        for _ in range(iterations):
            smoothed = correlate1d(current, BOX_KERNEL, axis=axis, mode="nearest")
            scratch[interior] = smoothed[interior]
            current, scratch = scratch, current

    if current is not lattice.data:
        lattice.data[...] = current

    logger.debug("Convolved lattice %s: %d passes per axis", lattice.size, iterations)
    return lattice


def normalize(lattice: Lattice) -> Lattice:
    """
    Replace accumulators by ``accumulator / mass`` in place.

    Cells with zero mass get a zero accumulator. Mass is kept.
    """

    accumulator = lattice.accumulator
    mass = lattice.mass
    occupied = mass != 0

    accumulator[occupied] /= mass[occupied][:, np.newaxis]
    accumulator[~occupied] = 0.0

    logger.debug("Normalized %d of %d cells", int(np.count_nonzero(occupied)), lattice.cell_count)
    return lattice
