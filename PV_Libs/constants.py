"""
Constants and configuration values for PureVision.

This module centralizes all constant values, magic numbers, and
default settings used throughout the library.
"""

# Processing defaults
DEFAULT_TOLERANCE = 20
DEFAULT_SMOOTHNESS = 30
DEFAULT_TARGET_COLOR = (255, 255, 255)
DEFAULT_AUTO_DETECT = True
DEFAULT_BRUSH_SIZE = 20

# Smoothness below this is treated as this value in the falloff
MIN_EFFECTIVE_SMOOTHNESS = 1

# Ranges enforced by the control surface (the core accepts any non-negative value)
TOLERANCE_RANGE = (0, 150)
SMOOTHNESS_RANGE = (0, 100)
BRUSH_SIZE_RANGE = (5, 100)

# Channel limits
CHANNEL_MIN = 0
CHANNEL_MAX = 255
ALPHA_TRANSPARENT = 0
ALPHA_OPAQUE = 255
BYTES_PER_PIXEL = 4

# Output
DEFAULT_OUTPUT_FORMAT = "PNG"
DEFAULT_OUTPUT_MIME = "image/png"
DEFAULT_EXPORT_FILENAME = "refined-icon.png"
DATA_URL_PREFIX = "data:"

# AI enhancement
DEFAULT_ENHANCE_MODEL = "gemini-2.5-flash-image"
ENHANCE_PROMPT = (
    "Please redraw this icon in high resolution. Enhance the clarity, sharpen "
    "the edges, and remove noise. Keep the style identical. Output the enhanced "
    "icon on a solid pure background matching the original's primary background color."
)

# Environment variable names
ENV_API_KEY = "GEMINI_API_KEY"
ENV_API_KEY_FALLBACK = "GOOGLE_API_KEY"
ENV_ENHANCE_MODEL = "PUREVISION_ENHANCE_MODEL"
ENV_LOG_LEVEL = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def clamp_to_range(value: float, value_range) -> float:
    """Clamp a control value into one of the control-surface ranges above."""
    low, high = value_range
    return max(low, min(high, value))
