"""
Euclidean RGB distance, the only color metric used by the compositor.

Functions:
    color_distance: Distance between two colors
    color_distance_array: Distance from every pixel of an RGBA array to one color
"""

import math
from typing import Any

import numpy as np

from PV_Libs.ChromaKeyLib.image_models import RgbColor

# sqrt(3 * 255^2)
MAX_COLOR_DISTANCE = math.sqrt(3 * 255 * 255)


def color_distance(c1: Any, c2: Any) -> float:
    """
    Euclidean distance between two RGB colors.

    Args:
        c1: RgbColor, hex string or (r, g, b[, a]) sequence
        c2: RgbColor, hex string or (r, g, b[, a]) sequence

    Returns:
        Distance in [0, MAX_COLOR_DISTANCE]
    """
    a = RgbColor.from_any(c1)
    b = RgbColor.from_any(c2)
    dr = a.r - b.r
    dg = a.g - b.g
    db = a.b - b.b
    return math.sqrt(dr * dr + dg * dg + db * db)


def color_distance_array(pixels: np.ndarray, target: RgbColor) -> np.ndarray:
    """
    Distance from each pixel to target, ignoring alpha.

    Args:
        pixels: Array of shape (..., 3) or (..., 4)
        target: Color to measure against

    Returns:
        float64 array of shape pixels.shape[:-1]
    """
    rgb = pixels[..., :3].astype(np.float64)
    diff = rgb - np.asarray(target.as_tuple(), dtype=np.float64)
    return np.sqrt(np.sum(diff * diff, axis=-1))
