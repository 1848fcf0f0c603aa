"""
Tests for downsampling, separable smoothing and normalization.
"""

from __future__ import annotations

import numpy as np

from hdrgrid.grid import (
    ChannelStatistics,
    Lattice,
    build_geometry,
    convolve,
    normalize,
    scan_statistics,
    splat,
)


def _geometry(samples: np.ndarray, sigma_space: float, sigma_range: float):
    height, width, _ = samples.shape
    return build_geometry(scan_statistics(samples), width, height, sigma_space, sigma_range)


def test_splat_accumulates_values_and_mass() -> None:
    samples = np.array([[[1.0], [2.0]], [[3.0], [4.0]]])
    geometry = _geometry(samples, 1.0, 1.0)
    lattice = splat(Lattice.allocate(geometry.size, 1), geometry, samples)

    assert lattice.mass.sum() == 4.0
    assert lattice.accumulator.sum() == 10.0
    # x=1, y=0, v=2 lands at (1 + 2, 0 + 2, (2 - 1) + 2)
    assert lattice.cell(3, 2, 3).mass == 1.0
    assert lattice.cell(3, 2, 3).accumulator[0] == 2.0


def test_splat_rounds_half_up_and_shares_cells() -> None:
    samples = np.zeros((1, 4, 1))
    samples[0, :, 0] = [0.0, 0.0, 0.0, 1.0]
    stats = ChannelStatistics((0.0,), (1.0,))
    geometry = build_geometry(stats, 4, 1, 2.0, 1.0)
    lattice = splat(Lattice.allocate(geometry.size, 1), geometry, samples)

    # x / 2 + 0.5 -> 0, 1, 1, 2 (plus padding 2)
    assert lattice.cell(2, 2, 2).mass == 1.0
    assert lattice.cell(3, 2, 2).mass == 2.0
    assert lattice.cell(4, 2, 3).mass == 1.0


def test_padding_cells_are_empty_after_splat() -> None:
    rng = np.random.default_rng(5)
    samples = rng.random((9, 11, 3))
    geometry = _geometry(samples, 2.0, 0.2)
    lattice = splat(Lattice.allocate(geometry.size, 3), geometry, samples)

    for axis, size in enumerate(lattice.size):
        assert np.all(np.take(lattice.mass, [0, 1, size - 1], axis=axis) == 0)
    assert lattice.mass.sum() == 9 * 11


def test_partitioned_splat_matches_sequential() -> None:
    rng = np.random.default_rng(6)
    samples = rng.random((31, 17, 3))
    geometry = _geometry(samples, 3.0, 0.25)

    sequential = splat(Lattice.allocate(geometry.size, 3), geometry, samples)
    partitioned = splat(Lattice.allocate(geometry.size, 3), geometry, samples, workers=4)

    np.testing.assert_array_equal(partitioned.mass, sequential.mass)
    np.testing.assert_allclose(partitioned.data, sequential.data, rtol=1e-12, atol=1e-12)


def test_convolution_matches_box_formula_on_interior() -> None:
    lattice = Lattice.allocate((7, 7, 7), 1)
    lattice.data[3, 3, 3] = [8.0, 2.0]
    convolve(lattice, iterations=1)

    # One [1, 2, 1] / 4 pass per axis is a separable tensor product.
    kernel = np.array([0.25, 0.5, 0.25])
    expected = np.einsum("i,j,k->ijk", kernel, kernel, kernel)
    np.testing.assert_allclose(lattice.mass[2:5, 2:5, 2:5], 2.0 * expected)
    np.testing.assert_allclose(lattice.accumulator[2:5, 2:5, 2:5, 0], 8.0 * expected)
    assert lattice.mass.sum() == 2.0


def test_convolution_never_writes_padding() -> None:
    rng = np.random.default_rng(7)
    data = rng.random((6, 5, 7, 2))
    lattice = Lattice((6, 5, 7), 1, data.copy())
    convolve(lattice)

    for axis, size in enumerate(lattice.size):
        for index in (0, size - 1):
            np.testing.assert_array_equal(
                np.take(lattice.data, index, axis=axis),
                np.take(data, index, axis=axis),
            )
    assert not np.array_equal(lattice.data[lattice.interior()], data[lattice.interior()])


def test_convolution_keeps_constant_ratio() -> None:
    samples = np.full((10, 12, 1), 0.75)
    geometry = build_geometry(scan_statistics(samples), 12, 10, 2.0, 1.0)
    lattice = convolve(splat(Lattice.allocate(geometry.size, 1), geometry, samples))

    occupied = lattice.mass > 0
    np.testing.assert_allclose(lattice.accumulator[occupied, 0] / lattice.mass[occupied], 0.75)


def test_normalize_divides_by_mass_once() -> None:
    rng = np.random.default_rng(8)
    data = rng.random((5, 5, 5, 2))
    data[2, 2, 2] = [3.0, 0.0]
    lattice = Lattice((5, 5, 5), 1, data.copy())
    normalize(lattice)

    occupied = data[..., 1] != 0
    np.testing.assert_allclose(lattice.accumulator[occupied, 0], data[occupied, 0] / data[occupied, 1])
    assert lattice.cell(2, 2, 2).accumulator[0] == 0.0
    np.testing.assert_array_equal(lattice.mass, data[..., 1])
