"""
Luminance-only bilateral grid filter.
"""

from __future__ import annotations

import numpy as np

from hdrgrid.core.config import ColorSpace
from hdrgrid.filters.base import BilateralGridFilter
from hdrgrid.grid.convolve import normalize
from hdrgrid.grid.lattice import Lattice
from hdrgrid.image import HDRImage


class YFastBilateral(BilateralGridFilter):
    """
    Edge-preserving smoothing of the luminance (CIE Y) of an image.

    The lattice is 3-dimensional (x, y, Y). Cells are normalized once after
    convolution, so a query is a single trilinear interpolation. Used to
    extract base layers for tone mapping.
    """

    def value_at(self, x: int, y: int) -> float:
        """Filtered luminance of the pixel at ``(x, y)``."""

        cell = self.reconstructor.cell_at(self.position_at(x, y))
        return float(cell.accumulator[0])

    def luminance_map(self) -> np.ndarray:
        """Filtered luminance of every pixel, shape (H, W)."""

        return self._interpolate_image()[:, :, 0]

    def materialize(self) -> HDRImage:
        """
        Filtered image in the source color space.

        Chromatic channels are shifted by the luminance change:
        ``(X - delta, Y', Z - delta)`` with ``delta = Y - Y'``.
        """

        filtered = self.luminance_map()
        if self.image.color_space == ColorSpace.LUMINANCE:
            return HDRImage(filtered, ColorSpace.LUMINANCE)

        xyz = self.image.to_xyz()
        delta = xyz[:, :, 1] - filtered
        out = np.stack(
            [xyz[:, :, 0] - delta, filtered, xyz[:, :, 2] - delta],
            axis=-1,
        )
        return HDRImage.from_xyz(out, self.image.color_space)

    def _finalize_lattice(self, lattice: Lattice) -> None:
        normalize(lattice)

    def _extract_samples(self) -> np.ndarray:
        return self.image.luminance()[:, :, np.newaxis]
