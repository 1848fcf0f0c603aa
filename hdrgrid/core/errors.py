"""
Error taxonomy for the bilateral grid.
"""

from __future__ import annotations


class HDRGridError(Exception):
    """Base class for every error raised by hdrgrid."""


class ConfigurationError(HDRGridError, ValueError):
    """Invalid filter parameters (non-positive bandwidth, bad padding, ...)."""


class SizeError(HDRGridError, ValueError):
    """Degenerate image extent or lattice size, detected before allocation."""


class FilterCancelled(HDRGridError):
    """A tile-parallel phase was cancelled before all tiles ran."""
