"""
Shared lifecycle of the bilateral grid filters.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import numpy as np

from hdrgrid.core.config import BilateralConfig, FilterState
from hdrgrid.grid.convolve import convolve
from hdrgrid.grid.lattice import Lattice
from hdrgrid.grid.reconstruct import Reconstructor
from hdrgrid.grid.splat import splat
from hdrgrid.grid.statistics import (
    ChannelStatistics,
    GridGeometry,
    build_geometry,
    scan_statistics,
)
from hdrgrid.image import HDRImage
from hdrgrid.parallel import Tile, run_tiles

logger = logging.getLogger(__name__)


class BilateralGridFilter:
    """
    Bilateral filter approximated on a joint space-range lattice.

    Phases run in order and at most once::

        UNINITIALIZED -> STATISTICS_READY -> LATTICE_READY -> QUERYABLE

    Subclasses choose which channels are filtered (:meth:`_samples`) and how
    the lattice is finalized and queried.
    Phase entry holds an instance lock, so concurrent lazy queries on a fresh
    filter build the lattice once.
    """

    def __init__(
        self,
        image: HDRImage,
        config: Optional[BilateralConfig] = None,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        self.image = image
        self.config = config or BilateralConfig()
        self.config.validate()
        self.cancel = cancel

        self.state = FilterState.UNINITIALIZED
        self.statistics: Optional[ChannelStatistics] = None
        self.geometry: Optional[GridGeometry] = None
        self.lattice: Optional[Lattice] = None
        self._reconstructor: Optional[Reconstructor] = None
        self._samples_cache: Optional[np.ndarray] = None
        self._lock = threading.RLock()

    @classmethod
    def automatic(cls, image: HDRImage, sigma_space: float = 16.0, **kwargs) -> "BilateralGridFilter":
        """Filter with ``sigma_space`` pixels and an automatic range bandwidth."""

        return cls(image, BilateralConfig.automatic(sigma_space=sigma_space, **kwargs))

    @property
    def sigma_space(self) -> float:
        return self.config.sigma_space

    @property
    def sigma_range(self) -> float:
        """Effective range bandwidth (derived once statistics are ready)."""

        if self.geometry is not None:
            return self.geometry.sigma_range
        return self.config.sigma_range

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def perform(self) -> "BilateralGridFilter":
        """Run every remaining phase. Further calls are no-ops."""

        self.finalize()
        return self

    def scan_statistics(self) -> GridGeometry:
        with self._lock:
            if self.state == FilterState.UNINITIALIZED:
                width, height = self.image.bounds()
                logger.debug("Scanning statistics of %dx%d image", width, height)

                self.statistics = scan_statistics(self._samples(), self.config.workers, self.cancel)
                self.geometry = build_geometry(
                    self.statistics,
                    width,
                    height,
                    self.config.sigma_space,
                    self.config.sigma_range,
                    auto=self.config.auto_sigma_range,
                    padding_space=self.config.padding_space,
                    padding_range=self.config.padding_range,
                )
                self.state = FilterState.STATISTICS_READY
            return self.geometry

    def build_lattice(self) -> Lattice:
        with self._lock:
            self.scan_statistics()
            if self.state == FilterState.STATISTICS_READY:
                lattice = Lattice.allocate(self.geometry.size, self.geometry.channels, self.config.max_cells)
                splat(lattice, self.geometry, self._samples(), self.config.workers, self.cancel)
                convolve(lattice, self.config.iterations)
                self.lattice = lattice
                self.state = FilterState.LATTICE_READY
            return self.lattice

    def finalize(self) -> Lattice:
        with self._lock:
            self.build_lattice()
            if self.state == FilterState.LATTICE_READY:
                self._finalize_lattice(self.lattice)
                self.lattice.freeze()
                self._reconstructor = Reconstructor(self.lattice)
                self.state = FilterState.QUERYABLE
            return self.lattice

    def _finalize_lattice(self, lattice: Lattice) -> None:
        """Hook run once before the lattice becomes read-only."""

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def reconstructor(self) -> Reconstructor:
        self.perform()
        return self._reconstructor

    def position_at(self, x: int, y: int) -> np.ndarray:
        """Continuous lattice position of the pixel at ``(x, y)``."""

        width, height = self.image.bounds()
        if not (0 <= x < width and 0 <= y < height):
            raise IndexError(f"Pixel ({x}, {y}) outside {width}x{height} image")

        values = self._samples()[y, x][np.newaxis, :]
        return self.scan_statistics().positions(np.array([x]), np.array([y]), values)[0]

    def _interpolate_tile(self, tile: Tile) -> np.ndarray:
        """Interpolated cells of every pixel in ``tile``, shape (h, w, k + 1)."""

        ys, xs = np.mgrid[tile.y1:tile.y2, tile.x1:tile.x2]
        values = self._samples()[tile.y1:tile.y2, tile.x1:tile.x2].reshape(-1, self.geometry.channels)
        positions = self.geometry.positions(xs.ravel(), ys.ravel(), values)
        cells = self.reconstructor.interpolate(positions)
        return cells.reshape(tile.height, tile.width, -1)

    def _interpolate_image(self) -> np.ndarray:
        """Interpolated cells of the whole image, shape (H, W, k + 1)."""

        self.perform()
        width, height = self.image.bounds()
        out = np.empty((height, width, self.geometry.channels + 1))

        def fill(tile: Tile) -> None:
            out[tile.y1:tile.y2, tile.x1:tile.x2] = self._interpolate_tile(tile)

        run_tiles(width, height, fill, self.config.workers, self.cancel)
        return out

    def _samples(self) -> np.ndarray:
        """Filtered channels as an (H, W, k) array."""

        with self._lock:
            if self._samples_cache is None:
                self._samples_cache = self._extract_samples()
            return self._samples_cache

    def _extract_samples(self) -> np.ndarray:
        raise NotImplementedError
