"""
OPC bookkeeping: part relationships and content types.

Only the operations needed to attach new media parts are provided: reading
existing relationship ids, adding relationships and declaring default content
types per file extension.
"""

from __future__ import annotations

import logging
import posixpath
import re
import xml.etree.ElementTree as ET
from typing import Dict, Optional, Set

from ..exceptions import StructuralError

logger = logging.getLogger(__name__)

# OPC namespaces
OPC_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
CONTENT_TYPES_NS = "http://schemas.openxmlformats.org/package/2006/content-types"

IMAGE_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"

_RID_PATTERN = re.compile(r"^rId(\d+)$")

IMAGE_CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "tif": "image/tiff",
    "tiff": "image/tiff",
    "svg": "image/svg+xml",
}


def content_type_for_extension(extension: str) -> str:
    """Content type declared for an image extension."""
    extension = extension.lower()
    return IMAGE_CONTENT_TYPES.get(extension, f"image/{extension}")


def relationships_path_for(part_name: str) -> str:
    """
    Relationship part of a part.

    Example: word/document.xml -> word/_rels/document.xml.rels
    """
    directory, file_name = posixpath.split(part_name)
    if directory:
        return f"{directory}/_rels/{file_name}.rels"
    return f"_rels/{file_name}.rels"


def _parse(xml: bytes, part_name: str) -> ET.Element:
    try:
        return ET.fromstring(xml)
    except ET.ParseError as exc:
        raise StructuralError("Cannot parse package XML", part=part_name, details=str(exc)) from exc


def _serialize(root: ET.Element, default_ns: str) -> bytes:
    # Default namespace avoids ns0: prefixes; the registration is process-wide and idempotent
    ET.register_namespace("", default_ns)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


class RelationshipIndex:
    """
    Relationships of a single source part.

    New ids continue above the highest numeric ``rIdN`` already present, so
    existing references in the part stay valid.
    """

    def __init__(self, rels_path: str, xml: Optional[bytes] = None):
        """
        Initialize index.

        Args:
            rels_path: Name of the ``.rels`` part
            xml: Current content, or None when the part has no relationships yet
        """
        self.rels_path = rels_path
        if xml is None:
            self._root = ET.Element(f"{{{OPC_NS}}}Relationships")
        else:
            self._root = _parse(xml, rels_path)

        self._ids: Set[str] = set()
        highest = 0
        for rel in self._root.findall(f"{{{OPC_NS}}}Relationship"):
            rel_id = rel.get("Id", "")
            self._ids.add(rel_id)
            match = _RID_PATTERN.match(rel_id)
            if match:
                highest = max(highest, int(match.group(1)))
        self._next_number = highest + 1
        self.modified = False

    def next_id(self) -> str:
        """Reserve the next free relationship id."""
        while f"rId{self._next_number}" in self._ids:
            self._next_number += 1
        rel_id = f"rId{self._next_number}"
        self._next_number += 1
        self._ids.add(rel_id)
        return rel_id

    def add(self, rel_type: str, target: str) -> str:
        """
        Add a relationship.

        Args:
            rel_type: Relationship type URI
            target: Target path relative to the source part

        Returns:
            New relationship id
        """
        rel_id = self.next_id()
        rel_elem = ET.SubElement(self._root, f"{{{OPC_NS}}}Relationship")
        rel_elem.set("Id", rel_id)
        rel_elem.set("Type", rel_type)
        rel_elem.set("Target", target)
        self.modified = True
        logger.debug(f"Added relationship: {rel_id} ({rel_type}) -> {target}")
        return rel_id

    def to_xml(self) -> bytes:
        return _serialize(self._root, OPC_NS)


class ContentTypes:
    """``[Content_Types].xml`` with support for adding Default entries."""

    def __init__(self, xml: bytes):
        self._root = _parse(xml, "[Content_Types].xml")
        self._defaults: Dict[str, str] = {}
        for default in self._root.findall(f"{{{CONTENT_TYPES_NS}}}Default"):
            extension = default.get("Extension", "")
            if extension:
                self._defaults[extension.lower()] = default.get("ContentType", "")
        self.modified = False

    def has_default(self, extension: str) -> bool:
        return extension.lower() in self._defaults

    def add_default(self, extension: str, content_type: Optional[str] = None) -> bool:
        """
        Declare a default content type for an extension.

        Returns:
            True if a new entry was added, False if the extension was declared
        """
        if self.has_default(extension):
            return False
        content_type = content_type or content_type_for_extension(extension)
        default_elem = ET.Element(f"{{{CONTENT_TYPES_NS}}}Default")
        default_elem.set("Extension", extension)
        default_elem.set("ContentType", content_type)
        # Defaults conventionally precede Overrides
        position = len(self._root.findall(f"{{{CONTENT_TYPES_NS}}}Default"))
        self._root.insert(position, default_elem)
        self._defaults[extension.lower()] = content_type
        self.modified = True
        logger.debug(f"Declared content type {content_type} for .{extension}")
        return True

    def to_xml(self) -> bytes:
        return _serialize(self._root, CONTENT_TYPES_NS)
