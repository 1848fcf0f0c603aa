"""
Configuration primitives for hdrgrid.

Defines enums for color spaces and filter states, and dataclasses collecting
the bilateral grid and tone mapping parameters.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from hdrgrid.core.errors import ConfigurationError


class ColorSpace(Enum):
    """Color space tag carried by an HDR image."""

    RGB = "rgb"              # Linear sRGB primaries, D65
    XYZ = "xyz"              # CIE 1931 XYZ
    LUMINANCE = "luminance"  # Single channel (Y or log Y)


class FilterState(Enum):
    """Lifecycle of a bilateral grid filter."""

    UNINITIALIZED = "uninitialized"
    STATISTICS_READY = "statistics_ready"
    LATTICE_READY = "lattice_ready"
    QUERYABLE = "queryable"


# Cells added on each side of every lattice axis.
PADDING_SPACE = 2
PADDING_RANGE = 2

# Fraction of the global value range used as automatic range bandwidth.
AUTO_RANGE_FACTOR = 0.1


@dataclass
class BilateralConfig:
    """
    Parameters of the bilateral grid filters.

    The defaults mirror the automatic filter: 16 pixels of spatial bandwidth
    and a range bandwidth derived from the image statistics.
    """

    sigma_space: float = 16.0  # pixels per lattice cell
    sigma_range: float = 0.1  # value units per lattice cell
    auto_sigma_range: bool = False

    padding_space: int = PADDING_SPACE
    padding_range: int = PADDING_RANGE
    iterations: int = 2  # box passes per axis

    # Execution
    workers: int = 1
    max_cells: Optional[int] = None  # optional guard on product(size)

    @classmethod
    def automatic(cls, sigma_space: float = 16.0, **kwargs) -> "BilateralConfig":
        """Configuration whose range bandwidth is derived from the image."""

        return cls(sigma_space=sigma_space, auto_sigma_range=True, **kwargs)

    def validate(self) -> None:
        """Validate configuration parameters."""

        if not self.sigma_space > 0:
            raise ConfigurationError(f"sigma_space must be positive, got {self.sigma_space}")

        if not self.auto_sigma_range and not self.sigma_range > 0:
            raise ConfigurationError(f"sigma_range must be positive, got {self.sigma_range}")

        if self.padding_space < 1 or self.padding_range < 1:
            raise ConfigurationError(
                f"Padding must be at least one cell, got "
                f"space={self.padding_space} range={self.padding_range}"
            )

        if self.iterations < 0:
            raise ConfigurationError(f"iterations must be >= 0, got {self.iterations}")

        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")

        if self.max_cells is not None and self.max_cells < 1:
            raise ConfigurationError(f"max_cells must be positive, got {self.max_cells}")


@dataclass
class DurandConfig:
    """
    Parameters of the Durand & Dorsey (2002) tone mapper.
    """

    contrast: float = 5.0  # target base-layer contrast
    gamma: float = 2.2
    sigma_space: Optional[float] = None  # None keeps the automatic 16 px
    workers: int = 1

    def validate(self) -> None:
        """Validate configuration parameters."""

        if not self.contrast > 1.0:
            raise ConfigurationError(f"Contrast {self.contrast} must be greater than 1")

        if not self.gamma > 0:
            raise ConfigurationError(f"Gamma {self.gamma} must be positive")

        if self.sigma_space is not None and not self.sigma_space > 0:
            raise ConfigurationError(f"sigma_space must be positive, got {self.sigma_space}")

        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")
