"""
Tests for raster dimension sniffing.
"""

import struct

import pytest

from docx_templater.media.image_size import (
    FALLBACK_SIZE,
    detect_image_format,
    get_image_size,
)


class TestDetectImageFormat:
    """Test signature detection."""

    @pytest.mark.parametrize("fmt,expected", [
        ("PNG", "png"),
        ("JPEG", "jpeg"),
        ("GIF", "gif"),
    ])
    def test_known_formats(self, image_bytes, fmt, expected):
        assert detect_image_format(image_bytes(4, 4, fmt)) == expected

    def test_unknown_format(self, image_bytes):
        assert detect_image_format(image_bytes(4, 4, "BMP")) is None
        assert detect_image_format(b"") is None


class TestGetImageSize:
    """Test dimension reading."""

    @pytest.mark.parametrize("fmt", ["PNG", "JPEG", "GIF"])
    def test_reads_dimensions(self, image_bytes, fmt):
        assert get_image_size(image_bytes(320, 200, fmt)) == (320, 200)

    def test_progressive_jpeg(self, image_bytes):
        data = image_bytes(64, 48, "JPEG", progressive=True)
        assert get_image_size(data) == (64, 48)

    def test_png_from_header_only(self):
        header = b"\x89PNG\r\n\x1a\n" + struct.pack(">I", 13) + b"IHDR" + struct.pack(">II", 1000, 500)
        assert get_image_size(header) == (1000, 500)

    def test_unknown_format_falls_back(self):
        assert get_image_size(b"not an image at all") == FALLBACK_SIZE == (100, 100)

    @pytest.mark.parametrize("data", [
        b"\x89PNG\r\n\x1a\n",
        b"\xff\xd8\xff\xe0\x00\x10JFIF",
        b"GIF89a\x01",
    ])
    def test_truncated_data_falls_back(self, data):
        assert get_image_size(data) == FALLBACK_SIZE

    def test_zero_dimension_falls_back(self):
        header = b"\x89PNG\r\n\x1a\n" + struct.pack(">I", 13) + b"IHDR" + struct.pack(">II", 0, 50)
        assert get_image_size(header) == FALLBACK_SIZE

    def test_extension_ignored(self, image_bytes):
        # GIF bytes are sized as GIF whatever name they are stored under
        assert get_image_size(image_bytes(7, 9, "GIF")) == (7, 9)
