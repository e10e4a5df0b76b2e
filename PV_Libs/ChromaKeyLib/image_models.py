"""
Chroma key data models for PureVision.

This module defines core data structures used throughout the chroma key system.

Classes:
    RgbColor: Immutable 8-bit RGB triple
    RasterBuffer: Width x height grid of RGBA bytes (row-major, origin top-left)
    ProcessingOptions: Validated, immutable option snapshot for one compositing pass
    ImageState: References to the source and processed images plus decoded size
    DisplayRect: Where a raster is rendered on screen, in display coordinates

Type Aliases:
    RgbTuple: A tuple of 3 integers (0-255)
    RgbaPixel: A tuple of 4 integers (0-255)
"""

import math
import re
from dataclasses import dataclass, field, replace
from numbers import Real
from typing import Any, Optional, Tuple

import numpy as np

from PV_Libs.constants import (
    BYTES_PER_PIXEL,
    CHANNEL_MAX,
    CHANNEL_MIN,
    DEFAULT_AUTO_DETECT,
    DEFAULT_BRUSH_SIZE,
    DEFAULT_SMOOTHNESS,
    DEFAULT_TARGET_COLOR,
    DEFAULT_TOLERANCE,
    MIN_EFFECTIVE_SMOOTHNESS,
)
from PV_Libs.pillow_compat import Image, ImageClass

RgbTuple = Tuple[int, int, int]
RgbaPixel = Tuple[int, int, int, int]

_HEX_PATTERN = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def validate_number(name: str, value: Any) -> float:
    """
    Check that a value is a finite real number.

    Raises:
        TypeError: If value is not a real number (bool is rejected)
        ValueError: If value is NaN or infinite
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"{name} must be a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")
    return value


def validate_non_negative(name: str, value: Any) -> float:
    """Check that a value is a finite real number >= 0."""
    validate_number(name, value)
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


@dataclass(frozen=True)
class RgbColor:
    """An 8-bit RGB color. Alpha is never part of a color comparison."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise TypeError(f"{name} must be an int, got {type(value).__name__}")
            if not (CHANNEL_MIN <= value <= CHANNEL_MAX):
                raise ValueError(f"{name} must be 0-255, got {value}")
            object.__setattr__(self, name, int(value))

    def as_tuple(self) -> RgbTuple:
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        """Format as '#rrggbb'."""
        return "#{:02x}{:02x}{:02x}".format(self.r, self.g, self.b)

    @classmethod
    def from_hex(cls, value: str) -> "RgbColor":
        """
        Parse '#rrggbb' or 'rrggbb' (case-insensitive).

        Raises:
            ValueError: If the string is not a 6-digit hex color
        """
        match = _HEX_PATTERN.match(str(value).strip())
        if match is None:
            raise ValueError(f"Invalid hex color: {value!r}")
        return cls(*(int(group, 16) for group in match.groups()))

    @classmethod
    def from_any(cls, value: Any) -> "RgbColor":
        """
        Coerce an RgbColor, hex string or 3/4-item sequence into an RgbColor.

        A fourth (alpha) item is ignored.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.from_hex(value)
        try:
            items = list(value)
        except TypeError:
            raise TypeError(f"Cannot interpret {type(value).__name__} as a color") from None
        if len(items) not in (3, 4):
            raise ValueError(f"Color needs 3 or 4 channels, got {len(items)}")
        return cls(items[0], items[1], items[2])


@dataclass
class RasterBuffer:
    """
    A width x height grid of RGBA pixels stored as one flat bytearray.

    The buffer is owned by whichever component currently holds it. Malformed
    buffers (negative dimensions, length not a multiple of 4, or a length that
    disagrees with the dimensions) are rejected at construction.
    """

    width: int
    height: int
    data: bytearray = field(repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.width, bool) or not isinstance(self.width, int):
            raise TypeError(f"width must be an int, got {type(self.width).__name__}")
        if isinstance(self.height, bool) or not isinstance(self.height, int):
            raise TypeError(f"height must be an int, got {type(self.height).__name__}")
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Raster dimensions must be >= 0, got {self.width}x{self.height}")

        if not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)

        if len(self.data) % BYTES_PER_PIXEL != 0:
            raise ValueError(
                f"Raster length must be a multiple of {BYTES_PER_PIXEL}, got {len(self.data)}"
            )

        expected = self.width * self.height * BYTES_PER_PIXEL
        if len(self.data) != expected:
            raise ValueError(
                f"Raster length {len(self.data)} does not match "
                f"{self.width}x{self.height} RGBA ({expected} bytes)"
            )

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @classmethod
    def blank(cls, width: int, height: int) -> "RasterBuffer":
        """A raster where every byte is 0 (fully transparent black)."""
        return cls(width, height, bytearray(max(width, 0) * max(height, 0) * BYTES_PER_PIXEL))

    @classmethod
    def filled(cls, width: int, height: int, pixel: RgbaPixel) -> "RasterBuffer":
        """A raster where every pixel is the given RGBA value."""
        return cls(width, height, bytearray(bytes(pixel) * (width * height)))

    @classmethod
    def from_image(cls, image: ImageClass) -> "RasterBuffer":
        """
        Build a raster from a PIL Image (converted to RGBA if needed).

        Raises:
            TypeError: If image is not a PIL Image
        """
        if not isinstance(image, ImageClass):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(image.width, image.height, bytearray(image.tobytes()))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RasterBuffer":
        """Build a raster from a (height, width, 4) uint8 array."""
        if array.ndim != 3 or array.shape[2] != BYTES_PER_PIXEL:
            raise ValueError(f"Expected array of shape (h, w, 4), got {array.shape}")
        if array.dtype != np.uint8:
            raise ValueError(f"Expected uint8 array, got {array.dtype}")
        height, width = array.shape[:2]
        return cls(width, height, bytearray(np.ascontiguousarray(array).tobytes()))

    def to_image(self) -> ImageClass:
        """Return an RGBA PIL Image holding a copy of the pixels."""
        return Image.frombytes("RGBA", (self.width, self.height), bytes(self.data))

    def as_array(self) -> np.ndarray:
        """A writable (height, width, 4) uint8 view sharing this buffer's memory."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(
            self.height, self.width, BYTES_PER_PIXEL
        )

    def copy(self) -> "RasterBuffer":
        return RasterBuffer(self.width, self.height, bytearray(self.data))

    def get_pixel(self, x: int, y: int) -> RgbaPixel:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} raster")
        offset = (y * self.width + x) * BYTES_PER_PIXEL
        r, g, b, a = self.data[offset:offset + BYTES_PER_PIXEL]
        return (r, g, b, a)

    def set_pixel(self, x: int, y: int, pixel: RgbaPixel) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} raster")
        offset = (y * self.width + x) * BYTES_PER_PIXEL
        self.data[offset:offset + BYTES_PER_PIXEL] = bytes(pixel)


@dataclass(frozen=True)
class ProcessingOptions:
    """Immutable option snapshot threaded through every operation.

    Attributes:
        tolerance: Max color distance treated as background (>= 0)
        smoothness: Width of the alpha ramp beyond tolerance (>= 0, 0 acts as 1)
        target_color: Background color for the pass
        auto_detect: Whether the background detector overrides target_color
        brush_size: Erase brush diameter in display pixels (> 0)
    """

    tolerance: float
    smoothness: float
    target_color: RgbColor
    auto_detect: bool
    brush_size: float

    def __post_init__(self) -> None:
        validate_non_negative("tolerance", self.tolerance)
        validate_non_negative("smoothness", self.smoothness)
        object.__setattr__(self, "target_color", RgbColor.from_any(self.target_color))
        if not isinstance(self.auto_detect, bool):
            raise TypeError(f"auto_detect must be a bool, got {type(self.auto_detect).__name__}")
        validate_number("brush_size", self.brush_size)
        if self.brush_size <= 0:
            raise ValueError(f"brush_size must be > 0, got {self.brush_size}")

    @property
    def effective_smoothness(self) -> float:
        return max(self.smoothness, MIN_EFFECTIVE_SMOOTHNESS)

    def replace(self, **changes: Any) -> "ProcessingOptions":
        """Return a validated copy with the given fields changed."""
        return replace(self, **changes)

    @classmethod
    def defaults(cls) -> "ProcessingOptions":
        return cls(
            tolerance=DEFAULT_TOLERANCE,
            smoothness=DEFAULT_SMOOTHNESS,
            target_color=RgbColor(*DEFAULT_TARGET_COLOR),
            auto_detect=DEFAULT_AUTO_DETECT,
            brush_size=DEFAULT_BRUSH_SIZE,
        )


@dataclass
class ImageState:
    """
    original_url references the source image; processed_url stays None until
    the compositor has run. width/height stay 0 until the source is decoded.
    """

    original_url: str
    processed_url: Optional[str] = None
    width: int = 0
    height: int = 0

    @property
    def is_decoded(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class DisplayRect:
    left: float
    top: float
    width: float
    height: float

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0
