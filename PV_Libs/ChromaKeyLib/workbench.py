"""
Icon workbench: the coordinator behind the upload / adjust / erase / enhance /
export flow.

The workbench owns the untouched source raster, the mask overlay, the option
snapshot and the ImageState. Every compositing pass starts again from the
source plus overlay, so compositor output is never fed back into itself.

Example:
    >>> bench = IconWorkbench()
    >>> bench.load_image("icon.png")            # detector pass
    True
    >>> bench.update_options(tolerance=35)
    >>> bench.apply_settings()                  # stored target color
    >>> bench.export_png("out.png")
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional, Union

from PV_Libs.ChromaKeyLib.ai_enhancer import IconEnhancer
from PV_Libs.ChromaKeyLib.background_detector import detect_background_color
from PV_Libs.ChromaKeyLib.edit_session import EraseSession
from PV_Libs.ChromaKeyLib.errors import ImageDecodeError
from PV_Libs.ChromaKeyLib.image_io import (
    DecodedImage,
    ImageSource,
    encode_png,
    export_png,
    open_source,
    to_data_url,
)
from PV_Libs.ChromaKeyLib.image_models import (
    DisplayRect,
    ImageState,
    ProcessingOptions,
    RasterBuffer,
    RgbColor,
)
from PV_Libs.ChromaKeyLib.mask_overlay import MaskOverlay
from PV_Libs.ChromaKeyLib.transparency_compositor import make_transparent
from PV_Libs.constants import DEFAULT_OUTPUT_MIME

logger = logging.getLogger(__name__)


class IconWorkbench:
    """
    Holds one icon and re-runs background removal on demand.

    Args:
        options: Initial options (default: ProcessingOptions.defaults())
        max_workers: Thread count for each compositing pass (None = sequential)
    """

    def __init__(
        self,
        options: Optional[ProcessingOptions] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        self._options = options if options is not None else ProcessingOptions.defaults()
        self.max_workers = max_workers

        self.state: Optional[ImageState] = None
        self._source: Optional[RasterBuffer] = None
        self._processed: Optional[RasterBuffer] = None
        self._overlay: Optional[MaskOverlay] = None

        self.display_rect: Optional[DisplayRect] = None
        self.edit_mode = False
        self._session = EraseSession(self._paint_and_recompose)

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    @property
    def options(self) -> ProcessingOptions:
        return self._options

    def update_options(self, **changes: Any) -> ProcessingOptions:
        """
        Replace option fields. Invalid values raise before anything changes.

        Raises:
            ValueError / TypeError: On invalid option values
        """
        self._options = self._options.replace(**changes)
        return self._options

    def set_target_color(self, color: Any) -> ProcessingOptions:
        """Pick a background color by hand; this turns auto-detect off."""
        return self.update_options(target_color=RgbColor.from_any(color), auto_detect=False)

    # ------------------------------------------------------------------
    # Image lifecycle
    # ------------------------------------------------------------------

    @property
    def has_image(self) -> bool:
        return self._source is not None

    @property
    def source(self) -> Optional[RasterBuffer]:
        return self._source

    @property
    def processed(self) -> Optional[RasterBuffer]:
        return self._processed

    @property
    def overlay(self) -> Optional[MaskOverlay]:
        return self._overlay

    def load_image(self, source: ImageSource, use_detector: bool = True) -> bool:
        """
        Load a new source image and run a first pass.

        On decode failure nothing changes and False is returned.
        """
        try:
            decoded = open_source(source)
        except ImageDecodeError as exc:
            logger.warning(f"Image load failed: {exc}")
            return False

        self._install_source(decoded)
        logger.info(
            f"Loaded {decoded.raster.width}x{decoded.raster.height} image ({decoded.mime_type})"
        )
        self.process(use_detector=use_detector)
        return True

    def _install_source(self, decoded: DecodedImage) -> None:
        raster = decoded.raster
        self._source = raster
        self._processed = None
        self.state = ImageState(original_url=decoded.reference)
        if self._overlay is None:
            self._overlay = MaskOverlay(raster.width, raster.height)
        else:
            self._overlay.reset(raster.width, raster.height)
        self._session.pointer_up()

    def clear(self) -> None:
        """Forget the current image, its overlay and its output."""
        self.state = None
        self._source = None
        self._processed = None
        self._overlay = None
        self._session.pointer_up()

    # ------------------------------------------------------------------
    # Compositing
    # ------------------------------------------------------------------

    def process(self, use_detector: Optional[bool] = None) -> Optional[RasterBuffer]:
        """
        Run one compositing pass from the untouched source plus overlay.

        Args:
            use_detector: Detect the background color first and store it as the
                          target color. None follows options.auto_detect.

        Returns:
            The processed raster, or None when there is nothing to process
        """
        if self._source is None or self._source.is_empty:
            return None

        options = self._options
        if use_detector is None:
            use_detector = options.auto_detect

        target = options.target_color
        if use_detector:
            target = detect_background_color(self._source)
            self._options = self._options.replace(target_color=target)

        if self._overlay is not None and not self._overlay.is_empty:
            composite = self._overlay.composite_onto(self._source)
        else:
            composite = self._source.copy()

        result = make_transparent(
            composite,
            target,
            options.tolerance,
            options.smoothness,
            in_place=True,
            max_workers=self.max_workers,
        )

        self._processed = result
        self.state = replace(
            self.state,
            processed_url=to_data_url(encode_png(result)),
            width=result.width,
            height=result.height,
        )
        return result

    def apply_settings(self) -> Optional[RasterBuffer]:
        """Re-process with the stored target color."""
        return self.process(use_detector=False)

    # ------------------------------------------------------------------
    # AI enhancement
    # ------------------------------------------------------------------

    def enhance(self, enhancer: IconEnhancer) -> bool:
        """
        Replace the source with an AI-redrawn version and re-process it.

        The enhancer is called once. If it raises, returns nothing, or returns
        something undecodable, the previous image is kept and False is returned.
        """
        if self._source is None:
            return False

        try:
            result = enhancer.enhance(encode_png(self._source), DEFAULT_OUTPUT_MIME)
        except Exception as exc:
            # EnhancementError, or anything else the collaborator lets escape
            logger.error(f"AI enhancement failed: {exc}")
            return False

        if not result:
            logger.error("AI enhancement returned no image")
            return False

        try:
            decoded = open_source(bytes(result))
        except ImageDecodeError as exc:
            logger.error(f"AI enhancement returned an unreadable image: {exc}")
            return False

        self._install_source(decoded)
        logger.info(f"Source replaced by enhanced {decoded.raster.width}x{decoded.raster.height} image")
        self.process(use_detector=True)
        return True

    # ------------------------------------------------------------------
    # Manual erase mode
    # ------------------------------------------------------------------

    def set_display_rect(self, rect: Optional[DisplayRect]) -> None:
        self.display_rect = rect

    def set_edit_mode(self, enabled: bool) -> None:
        """Toggle erase mode. Existing strokes are kept either way."""
        self.edit_mode = bool(enabled)
        if not self.edit_mode:
            self._session.pointer_up()

    @property
    def session(self) -> EraseSession:
        return self._session

    def pointer_down(self, x: float, y: float) -> bool:
        if not self.edit_mode:
            return False
        return self._session.pointer_down(x, y)

    def pointer_move(self, x: float, y: float) -> bool:
        if not self.edit_mode:
            return False
        return self._session.pointer_move(x, y)

    def pointer_up(self) -> None:
        self._session.pointer_up()

    def pointer_leave(self) -> None:
        self._session.pointer_leave()

    def reset_strokes(self) -> None:
        """Remove every painted stroke and re-process."""
        if self._overlay is None:
            return
        self._overlay.reset()
        self._session.pointer_up()
        self.process(use_detector=False)

    def _paint_and_recompose(self, x: float, y: float) -> bool:
        if self._source is None or self._overlay is None or self.display_rect is None:
            return False

        options = self._options
        dab = self._overlay.paint_at_pointer(
            self.display_rect, x, y, options.brush_size, options.target_color
        )
        if dab is None:
            return False

        self.process(use_detector=False)
        return True

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def processed_png(self) -> Optional[bytes]:
        if self._processed is None:
            return None
        return encode_png(self._processed)

    def export_png(self, output_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Save the processed image.

        Raises:
            RuntimeError: If nothing has been processed yet
            OSError: If the file cannot be written
        """
        if self._processed is None:
            raise RuntimeError("No processed image to export")
        return export_png(self._processed, output_path)
