"""
Pytest configuration and shared fixtures for PureVision tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import io
import logging

import pytest

from PV_Libs.ChromaKeyLib.image_models import ProcessingOptions, RasterBuffer, RgbColor
from PV_Libs.pillow_compat import Image


@pytest.fixture
def white():
    return RgbColor(255, 255, 255)


@pytest.fixture
def icon_on_white():
    """
    A 10x10 white raster with a 4x4 red square in the middle.

    Returns:
        RasterBuffer
    """
    raster = RasterBuffer.filled(10, 10, (255, 255, 255, 255))
    for y in range(3, 7):
        for x in range(3, 7):
            raster.set_pixel(x, y, (200, 0, 0, 255))
    return raster


@pytest.fixture
def icon_png_path(tmp_path, icon_on_white):
    """The icon_on_white raster saved as a PNG file."""
    path = tmp_path / "icon.png"
    icon_on_white.to_image().save(path, format="PNG")
    return path


@pytest.fixture
def gray_jpeg_bytes():
    """A 12x8 mid-gray RGB JPEG, encoded."""
    buffer = io.BytesIO()
    Image.new("RGB", (12, 8), (128, 128, 128)).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def options():
    return ProcessingOptions(
        tolerance=20,
        smoothness=30,
        target_color=RgbColor(255, 255, 255),
        auto_detect=False,
        brush_size=20,
    )


@pytest.hookimpl(hookwrapper=True, trylast=True)
def pytest_runtest_call(item):
    """Give tests using ``bare_root`` a root logger without pytest's capture handlers.

    pytest's logging plugin attaches its handlers to the root logger after
    fixture setup, so ``bare_root`` alone cannot hand over an empty root.
    """
    if "bare_root" in getattr(item, "fixturenames", ()):
        logging.getLogger().handlers = []
    yield
