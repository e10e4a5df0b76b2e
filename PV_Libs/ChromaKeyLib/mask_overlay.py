"""
Mask overlay for manual erase strokes.

Pointer positions arrive in display coordinates (the image may be drawn
scaled on screen). They are mapped to raster coordinates and a filled disc of
the current target color is painted into an overlay raster of the same size as
the source. The overlay is composited over the source before the compositor
runs, so painted areas become background.

Overlay pixels are either untouched (alpha 0) or fully painted (alpha 255).

Classes:
    BrushDab: A disc in raster coordinates
    MaskOverlay: Accumulated strokes for one source image

Functions:
    map_pointer_to_raster: Display position -> BrushDab, or None when outside
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from PV_Libs.ChromaKeyLib.image_models import DisplayRect, RasterBuffer, RgbColor
from PV_Libs.constants import ALPHA_OPAQUE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BrushDab:
    center_x: float
    center_y: float
    radius: float
    scale_x: float
    scale_y: float


def map_pointer_to_raster(
    display_rect: DisplayRect,
    raster_width: int,
    raster_height: int,
    pointer_x: float,
    pointer_y: float,
    brush_size: float,
) -> Optional[BrushDab]:
    """
    Map a pointer position to a brush disc in raster pixels.

    The radius is brush_size * scale_x / 2: brush size is measured in display
    pixels and corrected by the horizontal scale only, even when the vertical
    scale differs.

    Args:
        display_rect: Rendered image rectangle in display coordinates
        raster_width: Native raster width
        raster_height: Native raster height
        pointer_x: Pointer x in display coordinates
        pointer_y: Pointer y in display coordinates
        brush_size: Brush diameter in display pixels

    Returns:
        BrushDab, or None if the pointer lies outside the rendered image or the
        rectangle has no area
    """
    if display_rect.is_degenerate:
        return None

    rel_x = pointer_x - display_rect.left
    rel_y = pointer_y - display_rect.top
    if not (0 <= rel_x <= display_rect.width and 0 <= rel_y <= display_rect.height):
        return None

    scale_x = raster_width / display_rect.width
    scale_y = raster_height / display_rect.height
    return BrushDab(
        center_x=rel_x * scale_x,
        center_y=rel_y * scale_y,
        radius=(brush_size * scale_x) / 2,
        scale_x=scale_x,
        scale_y=scale_y,
    )


class MaskOverlay:
    """
    Overlay raster recording painted erase strokes.

    Strokes accumulate until reset() is called; reset() with new dimensions is
    used when a different source image is loaded.
    """

    def __init__(self, width: int, height: int) -> None:
        self._raster = RasterBuffer.blank(width, height)
        self.stroke_count = 0

    @property
    def width(self) -> int:
        return self._raster.width

    @property
    def height(self) -> int:
        return self._raster.height

    @property
    def raster(self) -> RasterBuffer:
        return self._raster

    @property
    def is_empty(self) -> bool:
        return self.stroke_count == 0

    def reset(self, width: Optional[int] = None, height: Optional[int] = None) -> None:
        """Drop all strokes, optionally resizing to new source dimensions."""
        new_width = self.width if width is None else width
        new_height = self.height if height is None else height
        self._raster = RasterBuffer.blank(new_width, new_height)
        self.stroke_count = 0
        logger.debug(f"Mask overlay reset to {new_width}x{new_height}")

    def paint_disc(self, center_x: float, center_y: float, radius: float, color: Any) -> int:
        """
        Paint a filled disc of color at full opacity.

        A pixel is covered when its centre (x + 0.5, y + 0.5) lies within
        radius of the disc centre. Parts of the disc outside the raster are
        clipped.

        Returns:
            Number of pixels covered
        """
        rgb = RgbColor.from_any(color)
        if radius <= 0 or self._raster.is_empty:
            return 0

        x0 = max(0, int(math.floor(center_x - radius)))
        x1 = min(self.width, int(math.ceil(center_x + radius)) + 1)
        y0 = max(0, int(math.floor(center_y - radius)))
        y1 = min(self.height, int(math.ceil(center_y + radius)) + 1)
        if x0 >= x1 or y0 >= y1:
            return 0

        ys, xs = np.ogrid[y0:y1, x0:x1]
        inside = (xs + 0.5 - center_x) ** 2 + (ys + 0.5 - center_y) ** 2 <= radius * radius

        region = self._raster.as_array()[y0:y1, x0:x1]
        region[inside] = (rgb.r, rgb.g, rgb.b, ALPHA_OPAQUE)

        covered = int(np.count_nonzero(inside))
        if covered:
            self.stroke_count += 1
        return covered

    def paint_at_pointer(
        self,
        display_rect: DisplayRect,
        pointer_x: float,
        pointer_y: float,
        brush_size: float,
        color: Any,
    ) -> Optional[BrushDab]:
        """
        Map a pointer position and paint one disc there.

        Returns:
            The painted BrushDab, or None when the pointer was outside the image
        """
        dab = map_pointer_to_raster(
            display_rect, self.width, self.height, pointer_x, pointer_y, brush_size
        )
        if dab is None:
            return None
        self.paint_disc(dab.center_x, dab.center_y, dab.radius, color)
        return dab

    def composite_onto(self, source: RasterBuffer) -> RasterBuffer:
        """
        Source-over composite of the overlay on top of source.

        Returns:
            A new raster; source is not modified

        Raises:
            ValueError: If source and overlay dimensions differ
        """
        if source.size != self._raster.size:
            raise ValueError(
                f"Overlay is {self.width}x{self.height} but source is "
                f"{source.width}x{source.height}"
            )

        result = source.copy()
        if self.is_empty or result.is_empty:
            return result

        overlay_pixels = self._raster.as_array()
        painted = overlay_pixels[..., 3] > 0
        result.as_array()[painted] = overlay_pixels[painted]
        return result
