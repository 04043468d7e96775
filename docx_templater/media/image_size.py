"""
Raster image dimension sniffing.

Reads pixel dimensions straight from PNG, JPEG and GIF headers. Detection is
by magic bytes only; the declared file extension is never consulted.
"""

import logging
import struct
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

FALLBACK_SIZE: Tuple[int, int] = (100, 100)

PNG_SIGNATURE = b"\x89PNG"
JPEG_SIGNATURE = b"\xff\xd8"
GIF_SIGNATURE = b"GIF8"

# SOF0..SOF3: baseline, extended sequential, progressive, lossless
_JPEG_SOF_MARKERS = range(0xC0, 0xC4)


def detect_image_format(data: bytes) -> Optional[str]:
    """
    Detect raster format from the leading bytes.

    Args:
        data: Raw image bytes

    Returns:
        "png", "jpeg", "gif", or None when no signature matches
    """
    if data.startswith(PNG_SIGNATURE):
        return "png"
    if data.startswith(JPEG_SIGNATURE):
        return "jpeg"
    if data.startswith(GIF_SIGNATURE):
        return "gif"
    return None


def _png_size(data: bytes) -> Optional[Tuple[int, int]]:
    if len(data) < 24:
        return None
    return struct.unpack(">II", data[16:24])


def _jpeg_size(data: bytes) -> Optional[Tuple[int, int]]:
    i = 2
    while i < len(data) - 8:
        if data[i] != 0xFF:
            i += 1
            continue
        marker = data[i + 1]
        if marker in _JPEG_SOF_MARKERS:
            # FFCx, length (2), precision (1), height (2), width (2)
            height, width = struct.unpack(">HH", data[i + 5:i + 9])
            return width, height
        (length,) = struct.unpack(">H", data[i + 2:i + 4])
        i += length + 2
    return None


def _gif_size(data: bytes) -> Optional[Tuple[int, int]]:
    if len(data) < 10:
        return None
    return struct.unpack("<HH", data[6:10])


_SIZE_READERS = {
    "png": _png_size,
    "jpeg": _jpeg_size,
    "gif": _gif_size,
}


def get_image_size(data: bytes) -> Tuple[int, int]:
    """
    Get pixel dimensions of an image.

    Never raises: unknown, truncated or degenerate images yield
    ``FALLBACK_SIZE``.

    Args:
        data: Raw image bytes

    Returns:
        (width, height) in pixels
    """
    image_format = detect_image_format(data)
    if image_format is None:
        logger.debug("Unrecognized image signature, using fallback size")
        return FALLBACK_SIZE

    size = _SIZE_READERS[image_format](data)
    if size is None or size[0] <= 0 or size[1] <= 0:
        logger.debug(f"Could not read {image_format} dimensions, using fallback size")
        return FALLBACK_SIZE

    return int(size[0]), int(size[1])
