"""
Basic usage examples for hdrgrid.
"""

from __future__ import annotations

import numpy as np

from hdrgrid import (
    BilateralConfig,
    ColorSpace,
    FastBilateral,
    HDRImage,
    YFastBilateral,
    tone_map_durand,
)


def example_color_filter() -> HDRImage:
    """Smooth every channel of an RGB image on a 5D lattice."""

    img = HDRImage(np.random.rand(128, 128, 3) * 1000.0)
    bilateral = FastBilateral(img, BilateralConfig.automatic(sigma_space=8.0))
    smoothed = bilateral.materialize()
    print(f"5D lattice size: {bilateral.lattice.size}")
    print(f"Color filter output range: [{smoothed.pixels.min():0.3f}, {smoothed.pixels.max():0.3f}]")
    return smoothed


def example_luminance_filter() -> np.ndarray:
    """Smooth log luminance on a 3D lattice and query single pixels."""

    log_lum = np.log10(np.random.rand(256, 256) * 1000.0 + 1e-4)
    img = HDRImage(log_lum, ColorSpace.LUMINANCE)
    bilateral = YFastBilateral(img, BilateralConfig(sigma_space=16.0, sigma_range=0.4))

    print(f"Base value at (10, 20): {bilateral.value_at(10, 20):0.4f}")
    base = bilateral.luminance_map()
    print(f"Luminance filter output range: [{base.min():0.3f}, {base.max():0.3f}]")
    return base


def example_tone_mapping() -> np.ndarray:
    """Tone-map with the Durand & Dorsey operator."""

    img_hdr = np.random.rand(256, 256, 3) * 1500.0
    img_display = tone_map_durand(img_hdr, contrast=5.0, gamma=2.2, workers=4)
    print(f"Tone mapping output range: [{img_display.min():0.3f}, {img_display.max():0.3f}]")
    return img_display


if __name__ == "__main__":
    print("Running hdrgrid basic examples...")
    example_color_filter()
    example_luminance_filter()
    example_tone_mapping()
