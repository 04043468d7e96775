"""Raster sniffing and picture layout."""

from .image_size import FALLBACK_SIZE, detect_image_format, get_image_size
from .image_layout import build_drawing_xml, compute_extent

__all__ = [
    "FALLBACK_SIZE",
    "detect_image_format",
    "get_image_size",
    "build_drawing_xml",
    "compute_extent",
]
