"""
Command-line driver for the icon workbench.

    pure-vision icon.jpg -o icon.png --tolerance 25 --smoothness 40
    pure-vision icon.jpg --color "#ffffff"
    pure-vision icon.jpg --enhance
"""

import argparse
import logging
import math
import sys
from typing import List, Optional

from PV_Libs.ChromaKeyLib.ai_enhancer import GeminiIconEnhancer
from PV_Libs.ChromaKeyLib.errors import EnhancementError
from PV_Libs.ChromaKeyLib.image_models import ProcessingOptions, RgbColor
from PV_Libs.ChromaKeyLib.workbench import IconWorkbench
from PV_Libs.config import get_settings
from PV_Libs.constants import (
    DEFAULT_BRUSH_SIZE,
    DEFAULT_EXPORT_FILENAME,
    DEFAULT_SMOOTHNESS,
    DEFAULT_TARGET_COLOR,
    DEFAULT_TOLERANCE,
    LOG_LEVELS,
    SMOOTHNESS_RANGE,
    TOLERANCE_RANGE,
    clamp_to_range,
)
from PV_Libs.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise argparse.ArgumentTypeError(f"must be a finite number, got {text!r}")
    return value


def _clamp_control(name: str, value: float, value_range) -> float:
    """Keep a value inside the range the interactive sliders allow."""
    clamped = clamp_to_range(value, value_range)
    if clamped != value:
        logger.warning(f"{name} {value} is outside {value_range}, using {clamped}")
    return clamped


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pure-vision",
        description="Remove a solid background from an icon and save a transparent PNG.",
    )
    parser.add_argument("input", help="Source image file")
    parser.add_argument(
        "-o", "--output", default=DEFAULT_EXPORT_FILENAME,
        help=f"Output PNG path or directory (default: {DEFAULT_EXPORT_FILENAME})",
    )
    parser.add_argument("--tolerance", type=_finite_float, default=DEFAULT_TOLERANCE)
    parser.add_argument("--smoothness", type=_finite_float, default=DEFAULT_SMOOTHNESS)
    parser.add_argument(
        "--color", type=RgbColor.from_hex, default=None,
        help="Background color as #rrggbb (default: detect from corners)",
    )
    parser.add_argument("--enhance", action="store_true", help="Redraw with the AI model first")
    parser.add_argument("--workers", type=int, default=None, help="Threads per compositing pass")
    parser.add_argument(
        "--log-level", type=str.upper, choices=LOG_LEVELS, default=None,
        help="Logging level (default: LOG_LEVEL or INFO)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    log_level = args.log_level or settings.log_level
    if log_level not in LOG_LEVELS:
        parser.error(f"unknown log level {log_level!r} (choose from {', '.join(LOG_LEVELS)})")
    setup_logging(log_level)

    tolerance = _clamp_control("tolerance", args.tolerance, TOLERANCE_RANGE)
    smoothness = _clamp_control("smoothness", args.smoothness, SMOOTHNESS_RANGE)
    options = ProcessingOptions(
        tolerance=tolerance,
        smoothness=smoothness,
        target_color=args.color or RgbColor(*DEFAULT_TARGET_COLOR),
        auto_detect=args.color is None,
        brush_size=DEFAULT_BRUSH_SIZE,
    )

    logger.debug(f"Processing {args.input} with {options}")
    bench = IconWorkbench(options, max_workers=args.workers)
    if not bench.load_image(args.input, use_detector=options.auto_detect):
        print(f"error: could not load image {args.input}", file=sys.stderr)
        return 1

    if args.enhance:
        try:
            enhancer = GeminiIconEnhancer()
        except EnhancementError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        if not bench.enhance(enhancer):
            print("warning: AI enhancement failed, keeping the original image", file=sys.stderr)
        elif args.color is not None:
            bench.set_target_color(args.color)
            bench.apply_settings()

    try:
        path = bench.export_png(args.output)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    color = bench.options.target_color
    print(f"Saved {path} ({bench.state.width}x{bench.state.height}, background {color.to_hex()})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
