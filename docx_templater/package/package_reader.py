"""
Package access for DOCX files.

Keeps every part of the zip container in memory, in archive order, so parts
can be rewritten and the package serialized again without touching disk.
"""

from __future__ import annotations

import fnmatch
import io
import logging
import zipfile
from typing import Dict, List

from ..exceptions import StructuralError

logger = logging.getLogger(__name__)

CONTENT_TYPES_PART = "[Content_Types].xml"


class DocxPackage:
    """
    In-memory DOCX package.

    Parts are addressed by their zip member name (``word/document.xml``).
    """

    def __init__(self, parts: Dict[str, bytes]):
        """
        Initialize package.

        Args:
            parts: Part name to content mapping, in archive order
        """
        self._parts: Dict[str, bytes] = dict(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "DocxPackage":
        """
        Read a package from raw zip bytes.

        Raises:
            StructuralError: If the data is not a readable zip archive
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data), "r") as zip_file:
                parts = {
                    info.filename: zip_file.read(info.filename)
                    for info in zip_file.infolist()
                    if not info.is_dir()
                }
        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as exc:
            raise StructuralError("Cannot open document package", details=str(exc)) from exc

        logger.debug(f"Opened DOCX package with {len(parts)} parts")
        return cls(parts)

    @property
    def part_names(self) -> List[str]:
        return list(self._parts)

    def has_part(self, name: str) -> bool:
        return name in self._parts

    def read_part(self, name: str) -> bytes:
        """
        Get raw content of a part.

        Raises:
            StructuralError: If the part does not exist
        """
        try:
            return self._parts[name]
        except KeyError:
            raise StructuralError("Required part is missing from the package", part=name) from None

    def read_text(self, name: str) -> str:
        """Get content of an XML part as text."""
        data = self.read_part(name)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StructuralError("Part is not valid UTF-8", part=name, details=str(exc)) from exc

    def write_part(self, name: str, content: bytes) -> None:
        """Replace or add a part; new parts go to the end of the archive."""
        self._parts[name] = content

    def list_parts(self, pattern: str) -> List[str]:
        """Part names matching an fnmatch pattern, in archive order."""
        return [name for name in self._parts if fnmatch.fnmatchcase(name, pattern)]

    def to_bytes(self) -> bytes:
        """
        Serialize the package to zip bytes.

        Raises:
            StructuralError: If the archive cannot be written
        """
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zip_file:
                for name, content in self._parts.items():
                    zip_file.writestr(name, content)
        except (ValueError, OSError, zipfile.LargeZipFile) as exc:
            raise StructuralError("Cannot serialize document package", details=str(exc)) from exc
        return buffer.getvalue()
