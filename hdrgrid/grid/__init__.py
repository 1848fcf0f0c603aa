"""Lattice infrastructure shared by the bilateral filters."""

from hdrgrid.grid.cell import Cell
from hdrgrid.grid.convolve import convolve, normalize
from hdrgrid.grid.lattice import Lattice
from hdrgrid.grid.reconstruct import Reconstructor
from hdrgrid.grid.splat import splat
from hdrgrid.grid.statistics import (
    ChannelStatistics,
    GridGeometry,
    build_geometry,
    lattice_size,
    scan_statistics,
)

__all__ = [
    "Cell",
    "Lattice",
    "ChannelStatistics",
    "GridGeometry",
    "Reconstructor",
    "build_geometry",
    "convolve",
    "lattice_size",
    "normalize",
    "scan_statistics",
    "splat",
]
