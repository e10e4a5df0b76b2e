"""
Image decoding and encoding for PureVision.

Sources can be a filesystem path, raw encoded bytes, or a 'data:' URL (the
form the processed image is handed back in). Output is always PNG, which
keeps alpha values exact.

Functions:
    open_source: Decode a source into a DecodedImage
    decode_image: Decode a source into a RasterBuffer
    encode_png: Encode a RasterBuffer as PNG bytes
    to_data_url: Wrap encoded bytes in a base64 data URL
    export_png: Save a RasterBuffer to disk as PNG
"""

import base64
import binascii
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from PV_Libs.ChromaKeyLib.errors import ImageDecodeError
from PV_Libs.ChromaKeyLib.image_models import RasterBuffer
from PV_Libs.constants import (
    DATA_URL_PREFIX,
    DEFAULT_EXPORT_FILENAME,
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_OUTPUT_MIME,
)
from PV_Libs.pillow_compat import DecompressionBombError, Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes, bytearray]


@dataclass
class DecodedImage:
    """A decoded raster plus a reference string describing where it came from."""

    raster: RasterBuffer
    reference: str
    mime_type: str


def parse_data_url(url: str) -> Tuple[str, bytes]:
    """
    Split a base64 data URL into (mime_type, payload).

    Raises:
        ImageDecodeError: If the URL is not a base64 data URL
    """
    header, sep, payload = url.partition(",")
    if not sep or not header.startswith(DATA_URL_PREFIX) or not header.endswith(";base64"):
        raise ImageDecodeError("Only base64 data URLs are supported")

    mime_type = header[len(DATA_URL_PREFIX):-len(";base64")] or "application/octet-stream"
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError(f"Invalid base64 payload in data URL: {exc}") from exc


def to_data_url(data: bytes, mime_type: str = DEFAULT_OUTPUT_MIME) -> str:
    encoded = base64.b64encode(bytes(data)).decode("ascii")
    return f"{DATA_URL_PREFIX}{mime_type};base64,{encoded}"


def _decode_bytes(data: bytes) -> Tuple[RasterBuffer, str]:
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            mime_type = Image.MIME.get(image.format or "", DEFAULT_OUTPUT_MIME)
            raster = RasterBuffer.from_image(image)
    except (UnidentifiedImageError, DecompressionBombError, OSError, ValueError) as exc:
        raise ImageDecodeError(f"Could not decode image data: {exc}") from exc
    return raster, mime_type


def open_source(source: ImageSource) -> DecodedImage:
    """
    Decode an image source.

    Args:
        source: File path, encoded bytes, or a base64 'data:' URL

    Returns:
        DecodedImage whose reference is the path, the data URL as given, or
        a data URL built from the bytes

    Raises:
        ImageDecodeError: If the source cannot be read or decoded
        TypeError: If source has an unsupported type
    """
    if isinstance(source, (bytes, bytearray)):
        raster, mime_type = _decode_bytes(bytes(source))
        return DecodedImage(raster, to_data_url(bytes(source), mime_type), mime_type)

    if isinstance(source, str) and source.startswith(DATA_URL_PREFIX):
        _, payload = parse_data_url(source)
        raster, mime_type = _decode_bytes(payload)
        return DecodedImage(raster, source, mime_type)

    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.is_file():
            raise ImageDecodeError(f"Image file not found: {path}")
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ImageDecodeError(f"Could not read {path}: {exc}") from exc
        raster, mime_type = _decode_bytes(data)
        logger.debug(f"Decoded {path} ({raster.width}x{raster.height}, {mime_type})")
        return DecodedImage(raster, str(path), mime_type)

    raise TypeError(f"Unsupported image source type: {type(source)}")


def decode_image(source: ImageSource) -> RasterBuffer:
    return open_source(source).raster


def encode_png(raster: RasterBuffer) -> bytes:
    """Losslessly encode a raster as PNG, alpha included."""
    buffer = io.BytesIO()
    raster.to_image().save(buffer, format=DEFAULT_OUTPUT_FORMAT)
    return buffer.getvalue()


def export_png(raster: RasterBuffer, output_path: Optional[Union[str, Path]] = None) -> Path:
    """
    Save a raster as PNG.

    Args:
        raster: Raster to save
        output_path: File path, or an existing directory to save
                     DEFAULT_EXPORT_FILENAME into (default: current directory)

    Returns:
        Path of the written file

    Raises:
        OSError: If the parent directory does not exist or cannot be written
    """
    path = Path(output_path) if output_path is not None else Path(DEFAULT_EXPORT_FILENAME)
    if path.is_dir():
        path = path / DEFAULT_EXPORT_FILENAME

    if not path.parent.exists():
        raise OSError(f"Output directory does not exist: {path.parent}")

    path.write_bytes(encode_png(raster))
    logger.info(f"Exported {raster.width}x{raster.height} PNG to {path}")
    return path
