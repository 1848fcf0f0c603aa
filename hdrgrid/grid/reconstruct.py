"""
Multilinear interpolation of the lattice at continuous positions.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from hdrgrid.grid.cell import Cell
from hdrgrid.grid.lattice import Lattice


class Reconstructor:
    """
    Point and batch queries over a built lattice.

    Each query blends the ``2^D`` corners surrounding its position. Corner
    ``c`` takes the upper index on axis ``d`` when bit ``d`` of ``c`` is set,
    weighted by ``alpha[d]``, and the lower index otherwise, weighted by
    ``1 - alpha[d]``.
    """

    def __init__(self, lattice: Lattice) -> None:
        self.lattice = lattice
        self._upper_bound = np.asarray(lattice.size) - 1

    def corners(self, positions: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Lower indices, upper indices and fractional weights of ``positions``.

        All arrays have the shape of ``positions`` (N, D). Indices are clamped
        to the lattice and ``alpha`` to ``[0, 1]``; a NaN position keeps a NaN
        weight.
        """

        safe = np.nan_to_num(positions, nan=0.0, posinf=float(self._upper_bound.max()), neginf=0.0)
        lower = np.clip(np.floor(safe), 0, self._upper_bound).astype(np.intp)
        upper = np.minimum(lower + 1, self._upper_bound)
        alpha = np.clip(positions - lower, 0.0, 1.0)
        return lower, upper, alpha

    def cell_at(self, position: np.ndarray) -> Cell:
        """Interpolated cell at a single position of length ``D``."""

        lower, upper, alpha = self.corners(np.asarray(position, dtype=np.float64)[np.newaxis, :])
        lower, upper, alpha = lower[0], upper[0], alpha[0]

        result = Cell.zeros(self.lattice.channels)
        index = [0] * self.lattice.dimension
        for corner in range(1 << self.lattice.dimension):
            weight = 1.0
            for axis in range(self.lattice.dimension):
                if corner >> axis & 1:
                    index[axis] = upper[axis]
                    weight *= alpha[axis]
                else:
                    index[axis] = lower[axis]
                    weight *= 1.0 - alpha[axis]
            result = result.add_scaled(weight, self.lattice.cell(*index))
        return result

    def interpolate(self, positions: np.ndarray) -> np.ndarray:
        """
        Interpolated cells at ``N`` positions.

        Returns an ``(N, channels + 1)`` array laid out like lattice cells.
        """

        lower, upper, alpha = self.corners(positions)
        flat = self.lattice.flat
        count, dimension = positions.shape

        result = np.zeros((count, self.lattice.channels + 1))
        for corner in range(1 << dimension):
            weight = np.ones(count)
            index = np.empty((dimension, count), dtype=np.intp)
            for axis in range(dimension):
                if corner >> axis & 1:
                    index[axis] = upper[:, axis]
                    weight *= alpha[:, axis]
                else:
                    index[axis] = lower[:, axis]
                    weight *= 1.0 - alpha[:, axis]
            result += weight[:, np.newaxis] * flat[np.ravel_multi_index(index, self.lattice.size)]
        return result


def normalize_cells(cells: np.ndarray) -> np.ndarray:
    """Divide interpolated accumulators by their mass; zero mass yields 0."""

    accumulator = cells[:, :-1]
    mass = cells[:, -1:]
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(mass != 0, accumulator / mass, 0.0)
