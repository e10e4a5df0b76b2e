"""
Tests for the Transparency Compositor.

Tests cover:
- Transparent / ramp / opaque classification and their boundaries
- RGB preservation under transparent pixels
- Forced opacity outside the ramp
- Copy vs in-place ownership
- Row-band parallel execution
- Option validation
"""

import unittest

import numpy as np

from PV_Libs.ChromaKeyLib.color_distance import color_distance
from PV_Libs.ChromaKeyLib.image_models import ProcessingOptions, RasterBuffer, RgbColor
from PV_Libs.ChromaKeyLib.transparency_compositor import (
    AlphaStats,
    alpha_statistics,
    apply_options,
    classify_pixel,
    compute_alpha,
    make_transparent,
)

BLACK = RgbColor(0, 0, 0)


def strip(*pixels):
    """A 1-row raster from (r, g, b, a) tuples."""
    raster = RasterBuffer.blank(len(pixels), 1)
    for x, pixel in enumerate(pixels):
        raster.set_pixel(x, 0, pixel)
    return raster


def alphas(raster):
    return [raster.get_pixel(x, y)[3] for y in range(raster.height) for x in range(raster.width)]


class TestComputeAlpha(unittest.TestCase):
    """Test the scalar classification rule."""

    def test_within_tolerance_is_transparent(self):
        self.assertEqual(compute_alpha(0, 20, 30), 0)
        self.assertEqual(compute_alpha(19.9, 20, 30), 0)

    def test_tolerance_boundary_is_transparent(self):
        self.assertEqual(compute_alpha(20, 20, 30), 0)

    def test_ramp_end_is_opaque(self):
        self.assertEqual(compute_alpha(50, 20, 30), 255)

    def test_beyond_ramp_is_opaque(self):
        self.assertEqual(compute_alpha(50.01, 20, 30), 255)
        self.assertEqual(compute_alpha(400, 20, 30), 255)

    def test_ramp_is_linear(self):
        self.assertEqual(compute_alpha(30, 20, 30), 85)
        # 127.5 rounds half to even
        self.assertEqual(compute_alpha(35, 20, 30), 128)

    def test_ramp_is_monotonic(self):
        values = [compute_alpha(20 + step * 0.25, 20, 30) for step in range(121)]
        self.assertEqual(values, sorted(values))
        self.assertEqual(values[0], 0)
        self.assertEqual(values[-1], 255)

    def test_zero_smoothness_acts_as_one(self):
        self.assertEqual(compute_alpha(10, 10, 0), 0)
        self.assertEqual(compute_alpha(10.5, 10, 0), 128)
        self.assertEqual(compute_alpha(11, 10, 0), 255)
        self.assertEqual(compute_alpha(11.01, 10, 0), 255)

    def test_zero_tolerance(self):
        self.assertEqual(compute_alpha(0, 0, 10), 0)
        self.assertEqual(compute_alpha(5, 0, 10), 128)

    def test_classify_pixel(self):
        self.assertEqual(classify_pixel((30, 0, 0, 255), BLACK, 20, 30), 85)


class TestMakeTransparent(unittest.TestCase):
    """Test compositing over whole rasters."""

    def test_classification_bands(self):
        raster = strip(
            (0, 0, 0, 255),      # d = 0
            (20, 0, 0, 255),     # d = 20, tolerance boundary
            (30, 0, 0, 255),     # d = 30, ramp
            (30, 40, 0, 255),    # d = 50, ramp end
            (60, 0, 0, 255),     # d = 60, beyond
        )

        result = make_transparent(raster, BLACK, tolerance=20, smoothness=30)

        self.assertEqual(alphas(result), [0, 0, 85, 255, 255])

    def test_transparent_pixels_keep_rgb(self):
        raster = strip((250, 251, 252, 255), (255, 255, 255, 255))

        result = make_transparent(raster, RgbColor(255, 255, 255), tolerance=20, smoothness=30)

        self.assertEqual(result.get_pixel(0, 0), (250, 251, 252, 0))
        self.assertEqual(result.get_pixel(1, 0), (255, 255, 255, 0))

    def test_opaque_branch_discards_previous_alpha(self):
        raster = strip((200, 0, 0, 0), (200, 0, 0, 17))

        result = make_transparent(raster, BLACK, tolerance=20, smoothness=30)

        self.assertEqual(alphas(result), [255, 255])

    def test_end_to_end_four_by_four(self):
        target = RgbColor(100, 100, 100)
        near = (130, 140, 100, 255)
        self.assertEqual(color_distance(near, target), 50.0)

        raster = RasterBuffer.blank(4, 4)
        for y in range(4):
            for x in range(4):
                if y < 2:
                    raster.set_pixel(x, y, (100, 100, 100, 255))
                else:
                    raster.set_pixel(x, y, near)

        result = make_transparent(raster, target, tolerance=20, smoothness=30)

        self.assertEqual(alphas(result), [0] * 8 + [255] * 8)

    def test_ramp_monotonic_across_raster(self):
        raster = strip(*[(value, 0, 0, 255) for value in range(15, 60)])

        values = alphas(make_transparent(raster, BLACK, tolerance=20, smoothness=30))

        self.assertEqual(values, sorted(values))
        self.assertEqual(values[:6], [0] * 6)
        self.assertTrue(all(value == 255 for value in values[35:]))

    def test_matches_scalar_rule(self):
        rng = np.random.default_rng(7)
        array = rng.integers(0, 256, size=(9, 11, 4), dtype=np.uint8)
        raster = RasterBuffer.from_array(array)
        target = RgbColor(120, 60, 200)

        result = make_transparent(raster, target, tolerance=40, smoothness=25)

        for y in range(raster.height):
            for x in range(raster.width):
                pixel = raster.get_pixel(x, y)
                expected = classify_pixel(pixel, target, 40, 25)
                self.assertEqual(result.get_pixel(x, y), pixel[:3] + (expected,))

    def test_returns_copy_by_default(self):
        raster = strip((0, 0, 0, 255))

        result = make_transparent(raster, BLACK, tolerance=20, smoothness=30)

        self.assertIsNot(result, raster)
        self.assertEqual(raster.get_pixel(0, 0), (0, 0, 0, 255))
        self.assertEqual(result.get_pixel(0, 0), (0, 0, 0, 0))

    def test_in_place(self):
        raster = strip((0, 0, 0, 255))

        result = make_transparent(raster, BLACK, tolerance=20, smoothness=30, in_place=True)

        self.assertIs(result, raster)
        self.assertEqual(raster.get_pixel(0, 0), (0, 0, 0, 0))

    def test_idempotent_without_ramp_pixels(self):
        raster = strip((0, 0, 0, 255), (5, 5, 5, 255), (200, 200, 200, 255))

        once = make_transparent(raster, BLACK, tolerance=20, smoothness=30)
        twice = make_transparent(once, BLACK, tolerance=20, smoothness=30)

        self.assertEqual(bytes(once.data), bytes(twice.data))

    def test_parallel_matches_sequential(self):
        rng = np.random.default_rng(3)
        raster = RasterBuffer.from_array(rng.integers(0, 256, size=(37, 23, 4), dtype=np.uint8))

        sequential = make_transparent(raster, "#808080", tolerance=60, smoothness=40)
        parallel = make_transparent(raster, "#808080", tolerance=60, smoothness=40, max_workers=4)

        self.assertEqual(bytes(sequential.data), bytes(parallel.data))

    def test_more_workers_than_rows(self):
        raster = RasterBuffer.filled(5, 2, (0, 0, 0, 255))

        result = make_transparent(raster, BLACK, tolerance=0, smoothness=0, max_workers=8)

        self.assertEqual(alphas(result), [0] * 10)

    def test_empty_raster(self):
        result = make_transparent(RasterBuffer.blank(0, 0), BLACK, tolerance=20, smoothness=30)
        self.assertTrue(result.is_empty)

    def test_invalid_arguments(self):
        raster = strip((0, 0, 0, 255))
        with self.assertRaises(ValueError):
            make_transparent(raster, BLACK, tolerance=-1, smoothness=30)
        with self.assertRaises(ValueError):
            make_transparent(raster, BLACK, tolerance=20, smoothness=-1)
        with self.assertRaises(TypeError):
            make_transparent(b"\x00\x00\x00\xff", BLACK, tolerance=20, smoothness=30)
        with self.assertRaises(ValueError):
            make_transparent(raster, (300, 0, 0), tolerance=20, smoothness=30)


class TestApplyOptions(unittest.TestCase):
    def setUp(self):
        self.options = ProcessingOptions(
            tolerance=20,
            smoothness=30,
            target_color=BLACK,
            auto_detect=False,
            brush_size=10,
        )

    def test_uses_option_snapshot(self):
        result = apply_options(strip((0, 0, 0, 255), (30, 0, 0, 255)), self.options)
        self.assertEqual(alphas(result), [0, 85])

    def test_target_override(self):
        result = apply_options(
            strip((0, 0, 0, 255), (255, 255, 255, 255)),
            self.options,
            target_color=RgbColor(255, 255, 255),
        )
        self.assertEqual(alphas(result), [255, 0])


class TestAlphaStatistics(unittest.TestCase):
    def test_counts(self):
        raster = strip((0, 0, 0, 0), (0, 0, 0, 10), (0, 0, 0, 255), (0, 0, 0, 255))
        stats = alpha_statistics(raster)
        self.assertEqual(stats, AlphaStats(transparent=1, partial=1, opaque=2))
        self.assertEqual(stats.total, 4)

    def test_empty(self):
        self.assertEqual(alpha_statistics(RasterBuffer.blank(0, 3)), AlphaStats(0, 0, 0))
