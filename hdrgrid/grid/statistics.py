"""
Channel statistics and lattice geometry.

The scanner runs once per filter: it computes per-channel extrema, derives
the automatic range bandwidth when requested, and sizes the lattice.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from hdrgrid.core.config import AUTO_RANGE_FACTOR, PADDING_RANGE, PADDING_SPACE
from hdrgrid.core.errors import ConfigurationError, SizeError
from hdrgrid.parallel import Tile, reduce_tiles, run_tiles

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelStatistics:
    """Per-channel minimum and maximum over the finite samples."""

    minimum: Tuple[float, ...]
    maximum: Tuple[float, ...]

    @classmethod
    def empty(cls, channels: int) -> "ChannelStatistics":
        return cls((np.inf,) * channels, (-np.inf,) * channels)

    @classmethod
    def of(cls, samples: np.ndarray) -> "ChannelStatistics":
        """Statistics of an ``(..., k)`` sample array, ignoring NaN and inf."""

        channels = samples.shape[-1]
        values = samples.reshape(-1, channels)
        finite = np.isfinite(values)

        minimum = np.where(finite, values, np.inf).min(axis=0, initial=np.inf)
        maximum = np.where(finite, values, -np.inf).max(axis=0, initial=-np.inf)
        return cls(tuple(float(v) for v in minimum), tuple(float(v) for v in maximum))

    @property
    def channels(self) -> int:
        return len(self.minimum)

    @property
    def min_all(self) -> float:
        return min(self.minimum)

    @property
    def max_all(self) -> float:
        return max(self.maximum)

    @property
    def is_empty(self) -> bool:
        return not all(np.isfinite(self.minimum)) or not all(np.isfinite(self.maximum))

    def merge(self, other: "ChannelStatistics") -> "ChannelStatistics":
        return ChannelStatistics(
            tuple(min(a, b) for a, b in zip(self.minimum, other.minimum)),
            tuple(max(a, b) for a, b in zip(self.maximum, other.maximum)),
        )


def scan_statistics(
    samples: np.ndarray,
    workers: int = 1,
    cancel: Optional[threading.Event] = None,
) -> ChannelStatistics:
    """
    Per-channel extrema of an ``(H, W, k)`` sample array.

    Tiles are scanned in parallel when ``workers > 1`` and merged with
    :meth:`ChannelStatistics.merge`.
    """

    height, width, channels = samples.shape
    if width == 0 or height == 0:
        raise SizeError(f"Cannot filter an image of {width}x{height} pixels")

    def scan(tile: Tile) -> ChannelStatistics:
        return ChannelStatistics.of(samples[tile.y1:tile.y2, tile.x1:tile.x2])

    stats = reduce_tiles(run_tiles(width, height, scan, workers, cancel), ChannelStatistics.merge)

    if stats.is_empty:
        logger.warning("No finite samples in %dx%d image, using a zero value range", width, height)
        stats = ChannelStatistics((0.0,) * channels, (0.0,) * channels)

    return stats


def auto_sigma_range(stats: ChannelStatistics) -> float:
    """Range bandwidth as a tenth of the global value range."""

    sigma_range = (stats.max_all - stats.min_all) * AUTO_RANGE_FACTOR
    if not sigma_range > 0:
        raise ConfigurationError(
            f"Automatic sigma_range is {sigma_range}: image has no dynamic range "
            f"[{stats.min_all}, {stats.max_all}]"
        )
    return sigma_range


def lattice_size(
    width: int,
    height: int,
    minimum: Sequence[float],
    maximum: Sequence[float],
    sigma_space: float,
    sigma_range: float,
    padding_space: int = PADDING_SPACE,
    padding_range: int = PADDING_RANGE,
) -> Tuple[int, ...]:
    """
    Size of every lattice axis: two spatial axes then one per channel.

    ``floor((extent - 1) / sigma_space) + 1 + 2 * padding_space`` spatially
    and ``floor((max - min) / sigma_range) + 1 + 2 * padding_range`` per
    channel.
    """

    if not sigma_space > 0:
        raise ConfigurationError(f"sigma_space must be positive, got {sigma_space}")
    if not sigma_range > 0:
        raise ConfigurationError(f"sigma_range must be positive, got {sigma_range}")
    if width <= 0 or height <= 0:
        raise SizeError(f"Cannot size a lattice for a {width}x{height} image")

    size = [
        int(np.floor((width - 1) / sigma_space)) + 1 + 2 * padding_space,
        int(np.floor((height - 1) / sigma_space)) + 1 + 2 * padding_space,
    ]
    for lo, hi in zip(minimum, maximum):
        size.append(int(np.floor((hi - lo) / sigma_range)) + 1 + 2 * padding_range)

    if any(s <= 0 for s in size):
        raise SizeError(f"Degenerate lattice size {tuple(size)}")
    return tuple(size)


@dataclass(frozen=True)
class GridGeometry:
    """
    Mapping from pixel samples to continuous lattice positions.

    Axis order is ``(x, y, v0, ..., vk-1)``.
    """

    sigma_space: float
    sigma_range: float
    minimum: Tuple[float, ...]
    size: Tuple[int, ...]
    padding_space: int = PADDING_SPACE
    padding_range: int = PADDING_RANGE

    @property
    def dimension(self) -> int:
        return len(self.size)

    @property
    def channels(self) -> int:
        return len(self.minimum)

    def positions(self, xs: np.ndarray, ys: np.ndarray, values: np.ndarray) -> np.ndarray:
        """
        Continuous lattice positions of ``N`` samples.

        Parameters
        ----------
        xs, ys : np.ndarray
            Pixel coordinates, shape (N,)
        values : np.ndarray
            Channel values, shape (N, k)
        """

        positions = np.empty((len(xs), self.dimension), dtype=np.float64)
        positions[:, 0] = np.asarray(xs, dtype=np.float64) / self.sigma_space + self.padding_space
        positions[:, 1] = np.asarray(ys, dtype=np.float64) / self.sigma_space + self.padding_space
        positions[:, 2:] = (values - np.asarray(self.minimum)) / self.sigma_range + self.padding_range
        return positions

    def nearest_indices(self, positions: np.ndarray) -> np.ndarray:
        """Round half up and clamp to the lattice (splat indices)."""

        return self.clamp_indices(np.floor(positions + 0.5))

    def clamp_indices(self, positions: np.ndarray) -> np.ndarray:
        """
        Clamp integral float positions into ``[0, size - 1]``.

        NaN and -inf land on index 0, +inf on the last index.
        """

        upper = np.asarray(self.size) - 1
        positions = np.nan_to_num(positions, nan=0.0, posinf=float(upper.max()), neginf=0.0)
        return np.clip(positions, 0, upper).astype(np.intp)


def build_geometry(
    stats: ChannelStatistics,
    width: int,
    height: int,
    sigma_space: float,
    sigma_range: float,
    auto: bool = False,
    padding_space: int = PADDING_SPACE,
    padding_range: int = PADDING_RANGE,
) -> GridGeometry:
    """Resolve the range bandwidth and size the lattice."""

    if auto:
        sigma_range = auto_sigma_range(stats)

    size = lattice_size(
        width,
        height,
        stats.minimum,
        stats.maximum,
        sigma_space,
        sigma_range,
        padding_space,
        padding_range,
    )

    logger.info("sigma_space=%g sigma_range=%g", sigma_space, sigma_range)
    logger.info("min=%s max=%s", stats.minimum, stats.maximum)
    logger.info("lattice size=%s (%d cells)", size, int(np.prod(size, dtype=np.int64)))

    return GridGeometry(
        sigma_space=float(sigma_space),
        sigma_range=float(sigma_range),
        minimum=stats.minimum,
        size=size,
        padding_space=padding_space,
        padding_range=padding_range,
    )
