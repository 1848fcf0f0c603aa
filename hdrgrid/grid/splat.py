"""
Downsampling of pixel samples into the lattice.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import numpy as np

from hdrgrid.grid.lattice import Lattice
from hdrgrid.grid.statistics import GridGeometry
from hdrgrid.parallel import Tile, reduce_tiles, run_tiles

logger = logging.getLogger(__name__)


def splat(
    lattice: Lattice,
    geometry: GridGeometry,
    samples: np.ndarray,
    workers: int = 1,
    cancel: Optional[threading.Event] = None,
) -> Lattice:
    """
    Accumulate every pixel of ``samples`` (H, W, k) into its nearest cell.

    Each pixel adds ``(v0..vk-1, 1.0)`` to the cell at its rounded lattice
    position. With ``workers > 1`` every tile fills its own partial lattice
    and the partials are merged with :meth:`Lattice.add`, so the result only
    differs from the sequential one by floating point reassociation.
    """

    height, width, _ = samples.shape

    if workers <= 1:
        _accumulate(lattice, geometry, samples, Tile(0, 0, width, height))
        return lattice

    def partial(tile: Tile) -> Lattice:
        part = Lattice(lattice.size, lattice.channels)
        _accumulate(part, geometry, samples, tile)
        return part

    merged = reduce_tiles(run_tiles(width, height, partial, workers, cancel), Lattice.add)
    lattice.data += merged.data
    return lattice


def _accumulate(lattice: Lattice, geometry: GridGeometry, samples: np.ndarray, tile: Tile) -> None:
    ys, xs = np.mgrid[tile.y1:tile.y2, tile.x1:tile.x2]
    values = samples[tile.y1:tile.y2, tile.x1:tile.x2].reshape(-1, lattice.channels)

    indices = geometry.nearest_indices(geometry.positions(xs.ravel(), ys.ravel(), values))
    offsets = np.ravel_multi_index(indices.T, lattice.size)

    flat = lattice.flat
    cells = lattice.cell_count
    for channel in range(lattice.channels):
        flat[:, channel] += np.bincount(offsets, weights=values[:, channel], minlength=cells)
    flat[:, -1] += np.bincount(offsets, minlength=cells)

    logger.debug("Splatted %d samples from tile %s", len(offsets), tile)
