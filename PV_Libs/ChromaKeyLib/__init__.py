"""
ChromaKeyLib - Background removal for raster icons

This module provides color distance, background detection, transparency
compositing, the manual erase overlay and the workbench that ties them
together for the PureVision project.
"""

from PV_Libs.ChromaKeyLib.image_models import (
    DisplayRect,
    ImageState,
    ProcessingOptions,
    RasterBuffer,
    RgbColor,
)
from PV_Libs.ChromaKeyLib.errors import ChromaKeyError, EnhancementError, ImageDecodeError
from PV_Libs.ChromaKeyLib.color_distance import color_distance, color_distance_array
from PV_Libs.ChromaKeyLib.background_detector import detect_background_color, sample_points
from PV_Libs.ChromaKeyLib.transparency_compositor import (
    AlphaStats,
    alpha_statistics,
    apply_options,
    compute_alpha,
    make_transparent,
)
from PV_Libs.ChromaKeyLib.mask_overlay import BrushDab, MaskOverlay, map_pointer_to_raster
from PV_Libs.ChromaKeyLib.edit_session import EditState, EraseSession
from PV_Libs.ChromaKeyLib.image_io import decode_image, encode_png, export_png, open_source, to_data_url
from PV_Libs.ChromaKeyLib.workbench import IconWorkbench

__all__ = [
    "DisplayRect",
    "ImageState",
    "ProcessingOptions",
    "RasterBuffer",
    "RgbColor",
    "ChromaKeyError",
    "EnhancementError",
    "ImageDecodeError",
    "color_distance",
    "color_distance_array",
    "detect_background_color",
    "sample_points",
    "AlphaStats",
    "alpha_statistics",
    "apply_options",
    "compute_alpha",
    "make_transparent",
    "BrushDab",
    "MaskOverlay",
    "map_pointer_to_raster",
    "EditState",
    "EraseSession",
    "decode_image",
    "encode_png",
    "export_png",
    "open_source",
    "to_data_url",
    "IconWorkbench",
]
