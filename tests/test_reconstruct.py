"""
Tests for multilinear reconstruction.
"""

from __future__ import annotations

import itertools

import numpy as np

from hdrgrid.grid import Lattice, Reconstructor


def _random_lattice(size, channels: int, seed: int) -> Lattice:
    rng = np.random.default_rng(seed)
    return Lattice(size, channels, rng.random(tuple(size) + (channels + 1,)))


def test_grid_point_queries_are_exact_in_3d() -> None:
    lattice = _random_lattice((6, 5, 7), 1, seed=10)
    reconstructor = Reconstructor(lattice)

    for index in itertools.product(range(6), range(5), range(7)):
        cell = reconstructor.cell_at(np.array(index, dtype=float))
        assert cell == lattice.cell(*index)


def test_grid_point_queries_are_exact_in_5d() -> None:
    lattice = _random_lattice((5, 6, 5, 5, 6), 3, seed=11)
    reconstructor = Reconstructor(lattice)

    indices = np.array([[0, 0, 0, 0, 0], [2, 3, 4, 1, 2], [4, 5, 4, 4, 5], [1, 1, 2, 3, 3]])
    cells = reconstructor.interpolate(indices.astype(float))
    for row, index in zip(cells, indices):
        np.testing.assert_array_equal(row, lattice.data[tuple(index)])


def test_midpoint_averages_corners() -> None:
    lattice = _random_lattice((4, 4, 4), 1, seed=12)
    reconstructor = Reconstructor(lattice)

    cell = reconstructor.cell_at(np.array([1.5, 1.5, 1.5]))
    expected = lattice.data[1:3, 1:3, 1:3].reshape(-1, 2).mean(axis=0)
    np.testing.assert_allclose(cell.to_vector(), expected)


def test_linear_field_is_reproduced() -> None:
    size = (6, 6, 6)
    grid = np.indices(size).astype(float)
    data = np.stack([2.0 * grid[0] - grid[1] + 0.5 * grid[2], np.ones(size)], axis=-1)
    reconstructor = Reconstructor(Lattice(size, 1, data))

    rng = np.random.default_rng(13)
    positions = rng.uniform(0.0, 5.0, size=(50, 3))
    cells = reconstructor.interpolate(positions)

    expected = 2.0 * positions[:, 0] - positions[:, 1] + 0.5 * positions[:, 2]
    np.testing.assert_allclose(cells[:, 0], expected, atol=1e-12)
    np.testing.assert_allclose(cells[:, 1], 1.0)


def test_point_and_batch_queries_agree() -> None:
    lattice = _random_lattice((5, 5, 6, 4, 5), 3, seed=14)
    reconstructor = Reconstructor(lattice)

    rng = np.random.default_rng(15)
    positions = rng.uniform(0.0, 4.0, size=(20, 5))
    batch = reconstructor.interpolate(positions)
    for position, row in zip(positions, batch):
        np.testing.assert_allclose(reconstructor.cell_at(position).to_vector(), row, rtol=1e-12)


def test_out_of_range_positions_are_clamped() -> None:
    lattice = _random_lattice((4, 4, 4), 1, seed=16)
    reconstructor = Reconstructor(lattice)

    below = reconstructor.cell_at(np.array([-3.0, -1.0, -0.5]))
    above = reconstructor.cell_at(np.array([9.0, 3.0, 12.0]))
    assert below == lattice.cell(0, 0, 0)
    assert above == lattice.cell(3, 3, 3)


def test_nan_position_poisons_result() -> None:
    lattice = _random_lattice((4, 4, 4), 1, seed=17)
    cell = Reconstructor(lattice).cell_at(np.array([1.0, 1.0, np.nan]))
    assert np.isnan(cell.mass)
