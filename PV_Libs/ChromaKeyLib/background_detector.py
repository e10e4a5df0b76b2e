"""
Background color estimation from fixed sample points.

Icons are assumed to sit on a uniform background touching all four corners,
so the four corners plus the top midpoint are averaged. Alpha is ignored and
no outlier rejection is attempted.
"""

import logging
import math
from typing import List, Tuple

from PV_Libs.ChromaKeyLib.image_models import RasterBuffer, RgbColor

logger = logging.getLogger(__name__)


def sample_points(width: int, height: int) -> List[Tuple[int, int]]:
    """
    The five (x, y) coordinates sampled for a raster of the given size.

    Points may coincide on 1-pixel-wide or 1-pixel-tall rasters; coincident
    points weight that pixel more heavily.
    """
    return [
        (0, 0),
        (width - 1, 0),
        (0, height - 1),
        (width - 1, height - 1),
        (width // 2, 0),
    ]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def detect_background_color(raster: RasterBuffer) -> RgbColor:
    """
    Estimate the background color of a raster.

    Args:
        raster: Source raster (read only)

    Returns:
        Per-channel average of the sampled pixels, rounded to nearest

    Raises:
        TypeError: If raster is not a RasterBuffer
        ValueError: If the raster has no pixels
    """
    if not isinstance(raster, RasterBuffer):
        raise TypeError(f"Expected RasterBuffer, got {type(raster)}")
    if raster.is_empty:
        raise ValueError("Cannot detect the background of an empty raster")

    points = sample_points(raster.width, raster.height)
    totals = [0, 0, 0]
    for x, y in points:
        pixel = raster.get_pixel(x, y)
        for channel in range(3):
            totals[channel] += pixel[channel]

    count = len(points)
    color = RgbColor(*(_round_half_up(total / count) for total in totals))
    logger.debug(f"Detected background {color.to_hex()} on {raster.width}x{raster.height} raster")
    return color
