"""
Color space transformations used around the bilateral grid.
"""

from __future__ import annotations

import numpy as np

# Values below this floor are clamped before taking log10.
LOG10_FLOOR = 1e-4


class ColorTransform:
    """Color space transformation utilities."""

    def __init__(self) -> None:
        """Initialize color transform matrices."""

        # Linear sRGB to XYZ (D65)
        self.srgb_to_xyz_matrix = np.array(
            [
                [0.4124564, 0.3575761, 0.1804375],
                [0.2126729, 0.7151522, 0.0721750],
                [0.0193339, 0.1191920, 0.9503041],
            ]
        )

        # XYZ to linear sRGB
        self.xyz_to_srgb_matrix = np.linalg.inv(self.srgb_to_xyz_matrix)

    def srgb_to_xyz(self, rgb: np.ndarray) -> np.ndarray:
        """
        Convert linear sRGB to XYZ.

        Parameters
        ----------
        rgb : np.ndarray
            Linear sRGB, shape (H, W, 3)
        """

        return np.dot(rgb, self.srgb_to_xyz_matrix.T)

    def xyz_to_srgb(self, xyz: np.ndarray) -> np.ndarray:
        """Convert XYZ to linear sRGB."""

        return np.dot(xyz, self.xyz_to_srgb_matrix.T)

    def rgb_to_luminance(self, rgb: np.ndarray) -> np.ndarray:
        """
        Compute luminance from linear RGB.

        Parameters
        ----------
        rgb : np.ndarray
            Linear RGB, shape (H, W, 3)
        """

        return (
            0.2126729 * rgb[:, :, 0]
            + 0.7151522 * rgb[:, :, 1]
            + 0.0721750 * rgb[:, :, 2]
        )


def log10_clamped(values: np.ndarray, floor: float = LOG10_FLOOR) -> np.ndarray:
    """log10 with values below ``floor`` raised to ``floor``."""

    return np.log10(np.maximum(values, floor))


def pow10(values: np.ndarray) -> np.ndarray:
    """Inverse of :func:`log10_clamped` above the floor."""

    return np.power(10.0, values)
