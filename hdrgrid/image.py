"""
Floating point pixel container tagged with a color space.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from hdrgrid.core.config import ColorSpace
from hdrgrid.utils.color import ColorTransform

_CHANNELS = {
    ColorSpace.RGB: 3,
    ColorSpace.XYZ: 3,
    ColorSpace.LUMINANCE: 1,
}

_transform = ColorTransform()


class HDRImage:
    """
    Rectangular grid of float64 pixels addressed by ``(x, y)``.

    Pixels are stored as an ``(H, W, k)`` array with ``k = 3`` for RGB and
    XYZ images and ``k = 1`` for luminance images. A 2D array is accepted
    for luminance images.
    """

    def __init__(self, pixels: np.ndarray, color_space: ColorSpace = ColorSpace.RGB) -> None:
        pixels = np.asarray(pixels, dtype=np.float64)
        if pixels.ndim == 2 and color_space == ColorSpace.LUMINANCE:
            pixels = pixels[:, :, np.newaxis]

        expected = _CHANNELS[color_space]
        if pixels.ndim != 3 or pixels.shape[2] != expected:
            raise ValueError(
                f"Expected H×W×{expected} array for {color_space.value} image, got shape {pixels.shape}"
            )

        self.pixels = pixels
        self.color_space = color_space

    @classmethod
    def from_xyz(cls, xyz: np.ndarray, color_space: ColorSpace) -> "HDRImage":
        """Build an image in ``color_space`` from XYZ pixels."""

        if color_space == ColorSpace.XYZ:
            return cls(xyz, ColorSpace.XYZ)
        if color_space == ColorSpace.RGB:
            return cls(_transform.xyz_to_srgb(xyz), ColorSpace.RGB)
        return cls(xyz[:, :, 1], ColorSpace.LUMINANCE)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    def bounds(self) -> Tuple[int, int]:
        """Return ``(width, height)``."""

        return self.width, self.height

    def color_space_tag(self) -> ColorSpace:
        return self.color_space

    def channels_at(self, x: int, y: int) -> Tuple[float, ...]:
        """Channel values of the pixel at ``(x, y)``."""

        return tuple(float(v) for v in self.pixels[y, x])

    def luminance(self) -> np.ndarray:
        """CIE Y of every pixel, shape (H, W)."""

        if self.color_space == ColorSpace.XYZ:
            return self.pixels[:, :, 1]
        if self.color_space == ColorSpace.RGB:
            return _transform.rgb_to_luminance(self.pixels)
        return self.pixels[:, :, 0]

    def to_xyz(self) -> np.ndarray:
        """XYZ pixels, shape (H, W, 3). Not defined for luminance images."""

        if self.color_space == ColorSpace.XYZ:
            return self.pixels
        if self.color_space == ColorSpace.RGB:
            return _transform.srgb_to_xyz(self.pixels)
        raise ValueError("Luminance images carry no chromaticity")
