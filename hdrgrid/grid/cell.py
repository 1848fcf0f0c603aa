"""
Atomic storage unit of the bilateral grid.
"""

from __future__ import annotations

import numpy as np


class Cell:
    """
    Accumulated channel values plus the number of samples ("mass").

    Cells form a vector space: :meth:`add`, :meth:`scale` and
    :meth:`add_scaled` act component-wise on both the accumulator and the
    mass, and return new cells.
    """

    __slots__ = ("accumulator", "mass")

    def __init__(self, accumulator: np.ndarray, mass: float = 0.0) -> None:
        self.accumulator = np.asarray(accumulator, dtype=np.float64)
        self.mass = float(mass)

    @classmethod
    def zeros(cls, channels: int) -> "Cell":
        return cls(np.zeros(channels), 0.0)

    @classmethod
    def from_vector(cls, vector: np.ndarray) -> "Cell":
        """Build a cell from a lattice slot laid out as ``(v0..vk-1, mass)``."""

        return cls(np.array(vector[:-1], dtype=np.float64), vector[-1])

    @property
    def channels(self) -> int:
        return self.accumulator.shape[0]

    def add(self, other: "Cell") -> "Cell":
        return Cell(self.accumulator + other.accumulator, self.mass + other.mass)

    def scale(self, k: float) -> "Cell":
        return Cell(k * self.accumulator, k * self.mass)

    def add_scaled(self, k: float, other: "Cell") -> "Cell":
        """``self + k * other``."""

        return Cell(self.accumulator + k * other.accumulator, self.mass + k * other.mass)

    def normalized(self) -> np.ndarray:
        """Accumulator divided by mass, zero when the cell is empty."""

        if self.mass == 0:
            return np.zeros_like(self.accumulator)
        return self.accumulator / self.mass

    def to_vector(self) -> np.ndarray:
        return np.append(self.accumulator, self.mass)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return self.mass == other.mass and np.array_equal(self.accumulator, other.accumulator)

    def __repr__(self) -> str:
        return f"Cell(accumulator={self.accumulator.tolist()}, mass={self.mass})"
