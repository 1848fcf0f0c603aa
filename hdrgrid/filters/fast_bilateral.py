"""
Multi-channel bilateral grid filter.
"""

from __future__ import annotations

import numpy as np

from hdrgrid.filters.base import BilateralGridFilter
from hdrgrid.grid.reconstruct import normalize_cells
from hdrgrid.image import HDRImage


class FastBilateral(BilateralGridFilter):
    """
    Edge-preserving smoothing of every channel of an image.

    The lattice has ``k + 2`` dimensions (two spatial axes plus one range axis
    per channel): 5 for RGB/XYZ images, 3 for luminance images. Cells keep
    their raw accumulator and mass; normalization happens per query.

    References:
        S. Paris and F. Durand, "A Fast Approximation of the Bilateral
        Filter using a Signal Processing Approach", ECCV 2006.
    """

    def value_at(self, x: int, y: int) -> np.ndarray:
        """Filtered channel values of the pixel at ``(x, y)``, shape (k,)."""

        cell = self.reconstructor.cell_at(self.position_at(x, y))
        return cell.normalized()

    def materialize(self) -> HDRImage:
        """Filtered image in the source color space."""

        cells = self._interpolate_image()
        height, width, slots = cells.shape
        values = normalize_cells(cells.reshape(-1, slots)).reshape(height, width, slots - 1)
        return HDRImage(values, self.image.color_space)

    def _extract_samples(self) -> np.ndarray:
        return self.image.pixels
