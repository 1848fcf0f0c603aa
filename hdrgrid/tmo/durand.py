"""
Durand & Dorsey (2002) tone mapping on top of the luminance bilateral grid.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Union

import numpy as np

from hdrgrid.core.config import BilateralConfig, ColorSpace, DurandConfig
from hdrgrid.filters.y_fast_bilateral import YFastBilateral
from hdrgrid.grid.statistics import scan_statistics
from hdrgrid.image import HDRImage
from hdrgrid.utils.color import ColorTransform, log10_clamped, pow10

logger = logging.getLogger(__name__)

# Color correction constants
K1 = 1.48
K2 = 0.82


class DurandToneMapper:
    """
    Fast bilateral filtering for the display of HDR images.

    Pipeline stages:
        1. Base layer: bilateral grid on log10 luminance
        2. Compression factor from the base layer range
        3. Base compression, detail preservation
        4. Color correction, gamma and clipping

    Reference:
        F. Durand and J. Dorsey, "Fast Bilateral Filtering for the Display of
        High-Dynamic-Range Images", SIGGRAPH 2002.
    """

    def __init__(self, config: Optional[DurandConfig] = None) -> None:
        self.config = config or DurandConfig()
        self.config.validate()
        self.color_transform = ColorTransform()

        logger.info("Initializing Durand tone mapper")
        logger.info("  Contrast: %g", self.config.contrast)
        logger.info("  Gamma: %g", self.config.gamma)

    def process(
        self,
        img_hdr: Union[np.ndarray, HDRImage],
        return_intermediate: bool = False,
    ) -> Union[np.ndarray, Dict[str, np.ndarray]]:
        """
        Tone-map a linear RGB (or XYZ) HDR image into [0, 1] RGB.
        """

        rgb = self._as_rgb(img_hdr)

        if not np.isfinite(rgb).all():
            raise ValueError("Input contains NaN or Inf values")
        if np.any(rgb < 0):
            logger.warning("Input contains negative values, clipping to 0")
            rgb = np.clip(rgb, 0, None)

        logger.info("Processing HDR image: shape=%s", rgb.shape)

        luminance = self.color_transform.rgb_to_luminance(rgb)
        log_lum = log10_clamped(luminance)

        base = self._stage_base_layer(log_lum)
        compression = self._stage_compression_factor(base)
        compressed = self._stage_compress(luminance, base, compression)
        display = self._stage_color(rgb, luminance, compressed, compression)

        logger.info(
            "Processing complete. Output range: [%0.3f, %0.3f]",
            float(np.min(display)),
            float(np.max(display)),
        )

        if return_intermediate:
            return {
                "input": rgb,
                "log_luminance": log_lum,
                "base": base,
                "compressed_luminance": compressed,
                "output": display,
            }
        return display

    # ------------------------------------------------------------------
    # Individual stages
    # ------------------------------------------------------------------

    def _stage_base_layer(self, log_lum: np.ndarray) -> np.ndarray:
        logger.debug("Stage 1: base layer")

        if np.ptp(log_lum) == 0:
            logger.warning("Flat log luminance, skipping bilateral filtering")
            return log_lum.copy()

        config = BilateralConfig.automatic(workers=self.config.workers)
        if self.config.sigma_space is not None:
            config.sigma_space = self.config.sigma_space

        bilateral = YFastBilateral(HDRImage(log_lum, ColorSpace.LUMINANCE), config)
        return bilateral.luminance_map()

    def _stage_compression_factor(self, base: np.ndarray) -> float:
        logger.debug("Stage 2: compression factor")

        stats = scan_statistics(base[:, :, np.newaxis], self.config.workers)
        base_range = stats.max_all - stats.min_all
        if base_range <= 0:
            return 1.0
        return float(np.log10(self.config.contrast) / base_range)

    def _stage_compress(self, luminance: np.ndarray, base: np.ndarray, compression: float) -> np.ndarray:
        logger.debug("Stage 3: base compression")

        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            detail = np.log10(_clamp_to_zero(luminance / pow10(base)))
            return pow10(base * compression + detail - np.log10(self.config.contrast))

    def _stage_color(
        self,
        rgb: np.ndarray,
        luminance: np.ndarray,
        compressed: np.ndarray,
        compression: float,
    ) -> np.ndarray:
        logger.debug("Stage 4: color correction")

        p = np.power(np.power(10.0, compression), K2)
        saturation = ((1.0 + K1) * p) / (1.0 + K1 * p)

        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            ratio = rgb / luminance[:, :, np.newaxis]
            corrected = _clamp_to_zero(np.power(ratio, saturation) * compressed[:, :, np.newaxis])
            display = np.power(corrected, 1.0 / self.config.gamma)

        return np.clip(display, 0.0, 1.0)

    def _as_rgb(self, img_hdr: Union[np.ndarray, HDRImage]) -> np.ndarray:
        if isinstance(img_hdr, HDRImage):
            if img_hdr.color_space == ColorSpace.XYZ:
                return self.color_transform.xyz_to_srgb(img_hdr.pixels)
            if img_hdr.color_space == ColorSpace.LUMINANCE:
                raise ValueError("Durand tone mapping needs a color image")
            return img_hdr.pixels

        img_hdr = np.asarray(img_hdr, dtype=np.float64)
        if img_hdr.ndim != 3 or img_hdr.shape[2] != 3:
            raise ValueError(f"Expected H×W×3 image, got shape {img_hdr.shape}")
        return img_hdr


def _clamp_to_zero(values: np.ndarray) -> np.ndarray:
    return np.where(np.isfinite(values), values, 0.0)


def tone_map_durand(
    img_hdr: Union[np.ndarray, HDRImage],
    contrast: float = 5.0,
    gamma: float = 2.2,
    sigma_space: Optional[float] = None,
    workers: int = 1,
) -> np.ndarray:
    """
    Convenience function for Durand tone mapping.
    """

    config = DurandConfig(contrast=contrast, gamma=gamma, sigma_space=sigma_space, workers=workers)
    return DurandToneMapper(config).process(img_hdr)
