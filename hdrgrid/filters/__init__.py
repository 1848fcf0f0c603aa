"""Bilateral grid filters."""

from hdrgrid.filters.base import BilateralGridFilter
from hdrgrid.filters.fast_bilateral import FastBilateral
from hdrgrid.filters.y_fast_bilateral import YFastBilateral

__all__ = ["BilateralGridFilter", "FastBilateral", "YFastBilateral"]
