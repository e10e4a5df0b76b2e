"""
Transparency Compositor.

Rewrites the alpha channel of every pixel according to its Euclidean RGB
distance d from a target color:

- d <= tolerance: alpha 0. RGB is left as-is.
- tolerance < d <= tolerance + smoothness: linear ramp
  ((d - tolerance) / smoothness) * 255, rounded half-to-even.
- otherwise: alpha 255, whatever the previous alpha was.

A smoothness of 0 is treated as 1. Each pixel is classified independently,
so rows can be split into bands and processed concurrently with identical
output.

Example:
    >>> raster = RasterBuffer.from_image(Image.open("icon.png"))
    >>> target = detect_background_color(raster)
    >>> result = make_transparent(raster, target, tolerance=20, smoothness=30)
    >>> result.to_image().save("icon-transparent.png")
"""

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from PV_Libs.ChromaKeyLib.color_distance import color_distance, color_distance_array
from PV_Libs.ChromaKeyLib.image_models import (
    ProcessingOptions,
    RasterBuffer,
    RgbColor,
    validate_non_negative,
)
from PV_Libs.constants import ALPHA_OPAQUE, ALPHA_TRANSPARENT, MIN_EFFECTIVE_SMOOTHNESS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlphaStats:
    """Pixel counts by output alpha."""

    transparent: int
    partial: int
    opaque: int

    @property
    def total(self) -> int:
        return self.transparent + self.partial + self.opaque


def compute_alpha(distance: float, tolerance: float, smoothness: float) -> int:
    """
    Alpha for a single pixel at the given distance from the target color.

    Args:
        distance: Euclidean RGB distance to the target color
        tolerance: Distance up to which the pixel is fully transparent
        smoothness: Width of the ramp band (values below 1 act as 1)

    Returns:
        Alpha in [0, 255]
    """
    smooth_range = max(smoothness, MIN_EFFECTIVE_SMOOTHNESS)

    if distance <= tolerance:
        return ALPHA_TRANSPARENT
    if distance <= tolerance + smooth_range:
        alpha = ((distance - tolerance) / smooth_range) * 255
        return int(max(ALPHA_TRANSPARENT, min(ALPHA_OPAQUE, round(alpha))))
    return ALPHA_OPAQUE


def classify_pixel(pixel: Any, target_color: Any, tolerance: float, smoothness: float) -> int:
    """Alpha for an (r, g, b[, a]) pixel against target_color."""
    return compute_alpha(color_distance(pixel, target_color), tolerance, smoothness)


def _apply_alpha_band(
    pixels: np.ndarray,
    target: RgbColor,
    tolerance: float,
    smooth_range: float,
) -> None:
    """Rewrite alpha in place for a (rows, width, 4) view."""
    distance = color_distance_array(pixels, target)

    alpha = np.full(distance.shape, float(ALPHA_OPAQUE))
    ramp = (distance > tolerance) & (distance <= tolerance + smooth_range)
    alpha[ramp] = ((distance[ramp] - tolerance) / smooth_range) * 255.0
    alpha[distance <= tolerance] = float(ALPHA_TRANSPARENT)

    pixels[..., 3] = np.clip(np.rint(alpha), ALPHA_TRANSPARENT, ALPHA_OPAQUE).astype(np.uint8)


def alpha_statistics(raster: RasterBuffer) -> AlphaStats:
    """Count fully transparent, partially transparent and opaque pixels."""
    if raster.is_empty:
        return AlphaStats(0, 0, 0)
    alpha = raster.as_array()[..., 3]
    transparent = int(np.count_nonzero(alpha == ALPHA_TRANSPARENT))
    opaque = int(np.count_nonzero(alpha == ALPHA_OPAQUE))
    return AlphaStats(transparent, int(alpha.size) - transparent - opaque, opaque)


def make_transparent(
    raster: RasterBuffer,
    target_color: Any,
    tolerance: float,
    smoothness: float,
    in_place: bool = False,
    max_workers: Optional[int] = None,
) -> RasterBuffer:
    """
    Apply chroma-key transparency to a raster.

    Args:
        raster: Source raster (source plus any composited mask overlay)
        target_color: Background color (RgbColor, hex string or tuple)
        tolerance: Distance treated as fully transparent (>= 0)
        smoothness: Ramp width beyond tolerance (>= 0, 0 acts as 1)
        in_place: Rewrite raster's own alpha instead of working on a copy
        max_workers: Process row bands on this many threads (None or 1 = sequential)

    Returns:
        The processed raster (raster itself when in_place is True)

    Raises:
        TypeError: If raster is not a RasterBuffer
        ValueError: If tolerance or smoothness is negative or not finite
    """
    if not isinstance(raster, RasterBuffer):
        raise TypeError(f"Expected RasterBuffer, got {type(raster)}")

    validate_non_negative("tolerance", tolerance)
    validate_non_negative("smoothness", smoothness)
    target = RgbColor.from_any(target_color)
    smooth_range = max(smoothness, MIN_EFFECTIVE_SMOOTHNESS)

    result = raster if in_place else raster.copy()
    if result.is_empty:
        return result

    pixels = result.as_array()

    if max_workers is not None and max_workers > 1 and result.height > 1:
        bands = np.array_split(np.arange(result.height), min(max_workers, result.height))
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(
                    _apply_alpha_band,
                    pixels[band[0]:band[-1] + 1],
                    target,
                    tolerance,
                    smooth_range,
                )
                for band in bands
                if len(band)
            ]
            for future in concurrent.futures.as_completed(futures):
                future.result()
    else:
        _apply_alpha_band(pixels, target, tolerance, smooth_range)

    if logger.isEnabledFor(logging.DEBUG):
        stats = alpha_statistics(result)
        logger.debug(
            f"Composited {result.width}x{result.height} against {target.to_hex()} "
            f"(tolerance={tolerance}, smoothness={smooth_range}): "
            f"{stats.transparent} transparent, {stats.partial} partial, {stats.opaque} opaque"
        )

    return result


def apply_options(
    raster: RasterBuffer,
    options: ProcessingOptions,
    target_color: Optional[RgbColor] = None,
    in_place: bool = False,
    max_workers: Optional[int] = None,
) -> RasterBuffer:
    """
    make_transparent driven by a ProcessingOptions snapshot.

    target_color, when given, overrides options.target_color (e.g. a color
    just returned by the background detector).
    """
    return make_transparent(
        raster,
        target_color if target_color is not None else options.target_color,
        options.tolerance,
        options.smoothness,
        in_place=in_place,
        max_workers=max_workers,
    )
