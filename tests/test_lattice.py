"""
Tests for lattice cells and storage.
"""

from __future__ import annotations

import numpy as np
import pytest

from hdrgrid import SizeError
from hdrgrid.grid import Cell, Lattice


def test_cell_vector_space_operations() -> None:
    a = Cell(np.array([1.0, 2.0, 3.0]), 2.0)
    b = Cell(np.array([0.5, -1.0, 4.0]), 1.0)

    assert a.add(b) == Cell(np.array([1.5, 1.0, 7.0]), 3.0)
    assert a.scale(0.5) == Cell(np.array([0.5, 1.0, 1.5]), 1.0)
    assert a.add_scaled(2.0, b) == Cell(np.array([2.0, 0.0, 11.0]), 4.0)


def test_cell_normalized_handles_empty_cell() -> None:
    np.testing.assert_array_equal(Cell(np.array([4.0, 6.0]), 2.0).normalized(), [2.0, 3.0])
    np.testing.assert_array_equal(Cell.zeros(2).normalized(), [0.0, 0.0])


def test_offset_is_row_major() -> None:
    lattice = Lattice.allocate((4, 5, 6), channels=1)
    assert lattice.offset(0, 0, 0) == 0
    assert lattice.offset(0, 0, 1) == 1
    assert lattice.offset(0, 1, 0) == 6
    assert lattice.offset(1, 0, 0) == 30
    assert lattice.offset(3, 4, 5) == lattice.cell_count - 1


def test_cell_roundtrip_through_flat_buffer() -> None:
    lattice = Lattice.allocate((5, 5, 5, 5, 5), channels=3)
    cell = Cell(np.array([0.1, 0.2, 0.3]), 7.0)
    lattice.set_cell((1, 2, 3, 4, 0), cell)

    assert lattice.cell(1, 2, 3, 4, 0) == cell
    np.testing.assert_array_equal(lattice.data[1, 2, 3, 4, 0], [0.1, 0.2, 0.3, 7.0])
    assert lattice.mass.sum() == 7.0


def test_lattice_linear_combination() -> None:
    rng = np.random.default_rng(1)
    a = Lattice((3, 4, 5), 1, rng.random((3, 4, 5, 2)))
    b = Lattice((3, 4, 5), 1, rng.random((3, 4, 5, 2)))

    np.testing.assert_allclose(a.add(b).data, a.data + b.data)
    np.testing.assert_allclose(a.scale(0.25).data, 0.25 * a.data)
    np.testing.assert_allclose(a.add_scaled(2.0, b).data, a.data + 2.0 * b.data)


def test_lattice_merge_is_commutative() -> None:
    rng = np.random.default_rng(2)
    parts = [Lattice((3, 3, 4), 1, rng.random((3, 3, 4, 2))) for _ in range(3)]

    left = parts[0].add(parts[1]).add(parts[2])
    right = parts[2].add(parts[0]).add(parts[1])
    np.testing.assert_allclose(left.data, right.data, rtol=1e-12)


def test_incompatible_lattices_raise() -> None:
    with pytest.raises(ValueError):
        Lattice.allocate((3, 3, 3), 1).add(Lattice.allocate((3, 3, 4), 1))


def test_allocate_rejects_degenerate_sizes() -> None:
    with pytest.raises(SizeError):
        Lattice.allocate((5, 0, 5), channels=1)
    with pytest.raises(SizeError):
        Lattice.allocate((5, 5), channels=1)


def test_allocate_honours_cell_limit() -> None:
    with pytest.raises(SizeError):
        Lattice.allocate((10, 10, 10), channels=1, max_cells=999)
    assert Lattice.allocate((10, 10, 10), channels=1, max_cells=1000).cell_count == 1000


def test_frozen_lattice_is_read_only() -> None:
    lattice = Lattice.allocate((3, 3, 3), channels=1).freeze()
    assert lattice.read_only
    with pytest.raises(ValueError):
        lattice.data[1, 1, 1, 0] = 1.0
