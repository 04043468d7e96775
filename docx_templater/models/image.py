"""
Image descriptor model.

Images are passed in the data tree either as ``ImageDescriptor`` instances or
as plain mappings of the form::

    {"type": "image", "buffer": b"...", "extension": "png",
     "widthInches": 3, "heightInches": 2}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class ImageDescriptor:
    """Raster image to embed in place of a placeholder."""

    buffer: bytes
    extension: str
    width_inches: Optional[float] = None
    height_inches: Optional[float] = None

    def __post_init__(self) -> None:
        if isinstance(self.buffer, (bytearray, memoryview)):
            object.__setattr__(self, "buffer", bytes(self.buffer))
        if not isinstance(self.buffer, bytes) or not self.buffer:
            raise ValueError("Image buffer must be non-empty bytes")

        extension = str(self.extension or "").strip().lstrip(".").lower()
        if not extension or not extension.isalnum():
            raise ValueError(f"Invalid image extension: {self.extension!r}")
        object.__setattr__(self, "extension", extension)

        for attr in ("width_inches", "height_inches"):
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"{attr} must be a positive number, got {value!r}")

    @staticmethod
    def is_image_value(value: Any) -> bool:
        """Check whether a data tree value declares an image."""
        if isinstance(value, ImageDescriptor):
            return True
        return isinstance(value, Mapping) and value.get("type") == "image"

    @classmethod
    def from_value(cls, value: Any) -> Optional["ImageDescriptor"]:
        """
        Coerce a data tree value into a descriptor.

        Args:
            value: ImageDescriptor or ``{"type": "image", ...}`` mapping

        Returns:
            ImageDescriptor, or None when the value is not an image at all

        Raises:
            ValueError: If the value declares an image but is malformed
        """
        if isinstance(value, ImageDescriptor):
            return value
        if not cls.is_image_value(value):
            return None

        return cls(
            buffer=value.get("buffer") or b"",
            extension=value.get("extension", ""),
            width_inches=_first_present(value, "widthInches", "width_inches"),
            height_inches=_first_present(value, "heightInches", "height_inches"),
        )


def _first_present(mapping: Mapping[str, Any], *keys: str) -> Any:
    # A zero size means "not given": the image keeps its automatic size
    for key in keys:
        value = mapping.get(key)
        if value is not None and not (isinstance(value, (int, float)) and value == 0):
            return value
    return None
