"""
Dense multidimensional lattice of cells.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from hdrgrid.core.errors import SizeError
from hdrgrid.grid.cell import Cell

logger = logging.getLogger(__name__)


class Lattice:
    """
    Cells of a ``D``-dimensional grid in one flat, C-contiguous buffer.

    ``data`` has shape ``size + (channels + 1,)``: the first ``channels``
    slots of a cell hold its accumulator and the last one its mass. Cells are
    addressed in row-major order by :meth:`offset`.
    """

    def __init__(self, size: Sequence[int], channels: int, data: Optional[np.ndarray] = None) -> None:
        self.size: Tuple[int, ...] = tuple(int(s) for s in size)
        self.channels = int(channels)

        shape = self.size + (self.channels + 1,)
        if data is None:
            data = np.zeros(shape, dtype=np.float64)
        elif data.shape != shape:
            raise ValueError(f"Lattice data shape {data.shape} does not match {shape}")
        self.data = data

    @classmethod
    def allocate(cls, size: Sequence[int], channels: int, max_cells: Optional[int] = None) -> "Lattice":
        """
        Allocate a zeroed lattice after checking its size.

        Raises
        ------
        SizeError
            If any axis is empty or ``product(size)`` exceeds ``max_cells``.
        """

        if len(size) < 3:
            raise SizeError(f"Lattice needs at least 3 dimensions, got {len(size)}")
        if any(s <= 0 for s in size):
            raise SizeError(f"Lattice size must be positive along every axis, got {tuple(size)}")

        cells = int(np.prod(size, dtype=np.int64))
        if max_cells is not None and cells > max_cells:
            raise SizeError(f"Lattice of {cells} cells exceeds the limit of {max_cells}")

        logger.debug("Allocating lattice %s (%d cells, %d channels)", tuple(size), cells, channels)
        return cls(size, channels)

    @property
    def dimension(self) -> int:
        return len(self.size)

    @property
    def cell_count(self) -> int:
        return int(np.prod(self.size, dtype=np.int64))

    @property
    def flat(self) -> np.ndarray:
        """View of the buffer as ``(cell_count, channels + 1)``."""

        return self.data.reshape(-1, self.channels + 1)

    @property
    def accumulator(self) -> np.ndarray:
        return self.data[..., :-1]

    @property
    def mass(self) -> np.ndarray:
        return self.data[..., -1]

    @property
    def read_only(self) -> bool:
        return not self.data.flags.writeable

    def offset(self, *index: int) -> int:
        """Row-major flat index of the cell at ``index``."""

        if len(index) != self.dimension:
            raise IndexError(f"Expected {self.dimension} indices, got {len(index)}")
        return int(np.ravel_multi_index(index, self.size))

    def cell(self, *index: int) -> Cell:
        return Cell.from_vector(self.flat[self.offset(*index)])

    def set_cell(self, index: Sequence[int], cell: Cell) -> None:
        self.flat[self.offset(*index)] = cell.to_vector()

    def interior(self) -> Tuple[slice, ...]:
        """Slices selecting cells that are not padding on any axis."""

        return tuple(slice(1, s - 1) for s in self.size)

    def freeze(self) -> "Lattice":
        """Make the buffer read-only for the query phase."""

        self.data.flags.writeable = False
        return self

    # ------------------------------------------------------------------
    # Element-wise linear combination
    # ------------------------------------------------------------------

    def add(self, other: "Lattice") -> "Lattice":
        self._check_compatible(other)
        return Lattice(self.size, self.channels, self.data + other.data)

    def scale(self, k: float) -> "Lattice":
        return Lattice(self.size, self.channels, k * self.data)

    def add_scaled(self, k: float, other: "Lattice") -> "Lattice":
        """``self + k * other``."""

        self._check_compatible(other)
        return Lattice(self.size, self.channels, self.data + k * other.data)

    def _check_compatible(self, other: "Lattice") -> None:
        if other.size != self.size or other.channels != self.channels:
            raise ValueError(
                f"Incompatible lattices: {self.size}/{self.channels} vs {other.size}/{other.channels}"
            )
