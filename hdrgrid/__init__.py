"""hdrgrid: HDR imaging on an approximate bilateral grid.

Edge-preserving smoothing of HDR images through a joint space-range lattice
(splatting, separable smoothing, multilinear slicing), with the Durand &
Dorsey tone mapper built on top of it.
"""

from hdrgrid.core.config import BilateralConfig, ColorSpace, DurandConfig, FilterState
from hdrgrid.core.errors import ConfigurationError, FilterCancelled, HDRGridError, SizeError
from hdrgrid.filters import BilateralGridFilter, FastBilateral, YFastBilateral
from hdrgrid.image import HDRImage
from hdrgrid.tmo.durand import DurandToneMapper, tone_map_durand

__all__ = [
    "HDRImage",
    "ColorSpace",
    "BilateralConfig",
    "DurandConfig",
    "FilterState",
    "BilateralGridFilter",
    "FastBilateral",
    "YFastBilateral",
    "DurandToneMapper",
    "tone_map_durand",
    "HDRGridError",
    "ConfigurationError",
    "SizeError",
    "FilterCancelled",
]

__version__ = "1.0.0"
