"""
Asynchronous image loading.

Decoding happens in a worker thread so a host event loop is not blocked.
Callers receive a fully decoded RasterImage or an ImageLoadError, never a
partially filled buffer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np
from pydantic import ValidationError

from src.common.types import RasterImage
from src.sheet_alignment.exceptions import ImageLoadError, InputError

logger = logging.getLogger(__name__)

ImageSource = Union[RasterImage, np.ndarray, str, Path, bytes, bytearray]


def to_raster(image: Union[RasterImage, np.ndarray, None]) -> RasterImage:
    """
    Wrap an in-memory image as a validated RasterImage.

    Raises:
        InputError: If the image is missing, empty or not a uint8 raster.
    """
    if image is None:
        raise InputError("No image provided")
    if isinstance(image, RasterImage):
        return image
    try:
        return RasterImage(data=image)
    except ValidationError as e:
        raise InputError(f"Invalid raster image: {e.errors()[0]['msg']}") from e


def decode_image(source: Union[str, Path, bytes, bytearray]) -> RasterImage:
    """
    Synchronously read and decode an encoded image (path or bytes).

    The alpha channel is preserved when present.

    Raises:
        ImageLoadError: If the file is missing or cannot be decoded.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.is_file():
            raise ImageLoadError(f"Image file not found: {path}")
        buffer = np.fromfile(str(path), dtype=np.uint8)
        label = str(path)
    else:
        buffer = np.frombuffer(bytes(source), dtype=np.uint8)
        label = f"<{len(buffer)} bytes>"

    if buffer.size == 0:
        raise ImageLoadError(f"Image source is empty: {label}")

    decoded = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if decoded is None:
        raise ImageLoadError(f"Could not decode image: {label}")

    # 16-bit sources are reduced to 8-bit
    if decoded.dtype == np.uint16:
        decoded = (decoded >> 8).astype(np.uint8)

    try:
        raster = RasterImage(data=decoded)
    except ValidationError as e:
        raise ImageLoadError(f"Unsupported image format in {label}: {e.errors()[0]['msg']}") from e

    logger.debug(f"Decoded {label}: {raster.width}x{raster.height}, {raster.channels} channel(s)")
    return raster


async def load_image(source: ImageSource) -> RasterImage:
    """
    Resolve any supported image source into a decoded RasterImage.

    In-memory images are validated directly; paths and encoded bytes are
    decoded in a worker thread.

    Args:
        source: RasterImage, uint8 ndarray, file path or encoded bytes.

    Raises:
        InputError: For missing or invalid in-memory images.
        ImageLoadError: For unreadable or undecodable encoded sources.

    Example:
        >>> raster = asyncio.run(load_image("template.png"))
        >>> raster.size
        (800, 600)
    """
    if source is None or isinstance(source, (RasterImage, np.ndarray)):
        return to_raster(source)
    if isinstance(source, (str, Path, bytes, bytearray)):
        return await asyncio.to_thread(decode_image, source)
    raise InputError(f"Unsupported image source type: {type(source).__name__}")
