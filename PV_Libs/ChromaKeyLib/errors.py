"""
Exception types raised at the chroma key system's boundaries.

Pixel classification itself never raises for valid inputs; failures only
surface where images are decoded, where the AI enhancement service is called,
and where options are validated (ValueError / TypeError).
"""


class ChromaKeyError(Exception):
    """Base class for PureVision errors."""


class ImageDecodeError(ChromaKeyError):
    """The source image could not be read or decoded."""


class EnhancementError(ChromaKeyError):
    """The AI enhancement service failed or is not configured."""
