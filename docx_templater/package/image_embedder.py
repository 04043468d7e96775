"""
Image embedding for rendered parts.

Replaces the image markers left by the template engine with inline pictures
and records the package changes this needs: the media part, a relationship
from the rendered part to it, and a default content type for its extension.
"""

from __future__ import annotations

import logging
import posixpath
import re
from typing import Dict, List, Mapping, Optional

from ..config import TemplateConfig
from ..engine.placeholder_engine import image_marker
from ..media.image_layout import build_drawing_xml, compute_extent
from ..media.image_size import detect_image_format, get_image_size
from ..models.image import ImageDescriptor
from ..models.result import IssueCategory, TemplateIssue
from .package_reader import CONTENT_TYPES_PART, DocxPackage
from .relationships import IMAGE_REL_TYPE, ContentTypes, RelationshipIndex, relationships_path_for

logger = logging.getLogger(__name__)

MEDIA_DIR = "word/media"

_DOCPR_ID_PATTERN = re.compile(r"<wp:docPr\b[^>]*?\bid=\"(\d+)\"")


class DrawingIdCounter:
    """Issues ``docPr`` ids above every id already used in the document."""

    def __init__(self, start: int = 1):
        self._next = max(start, 1)

    @classmethod
    def from_texts(cls, texts: List[str]) -> "DrawingIdCounter":
        highest = 0
        for text in texts:
            for match in _DOCPR_ID_PATTERN.finditer(text):
                highest = max(highest, int(match.group(1)))
        return cls(highest + 1)

    def next(self) -> int:
        value = self._next
        self._next += 1
        return value


class ImageEmbedder:
    """
    Embeds referenced images into the parts of one package.

    One instance serves one rendering call; relationship indexes and the
    drawing id counter are never shared between calls.
    """

    def __init__(self, package: DocxPackage, config: Optional[TemplateConfig] = None,
                 drawing_ids: Optional[DrawingIdCounter] = None):
        """
        Initialize embedder.

        Args:
            package: Package receiving media parts and relationships
            config: Rendering settings (image size caps)
            drawing_ids: Counter for ``docPr`` ids (starts at 1 if omitted)
        """
        self.package = package
        self.config = config or TemplateConfig()
        self.drawing_ids = drawing_ids or DrawingIdCounter()
        self.issues: List[TemplateIssue] = []
        self.embedded = 0

        self._relationships: Dict[str, RelationshipIndex] = {}
        self._content_types: Optional[ContentTypes] = None
        # (key, extension) -> media part name, so an image used by several parts is stored once
        self._media_parts: Dict[tuple, str] = {}

    def embed(self, part_name: str, text: str, images: Mapping[str, ImageDescriptor]) -> str:
        """
        Replace image markers in a rendered part.

        Args:
            part_name: Name of the part the text belongs to
            text: Rendered part text containing image markers
            images: Image placeholders referenced by the text

        Returns:
            Part text with every marker replaced by an inline picture
        """
        for key, image in images.items():
            marker = image_marker(key)
            if marker not in text:
                continue

            if detect_image_format(image.buffer) is None:
                self._record(
                    IssueCategory.FORMAT_UNKNOWN,
                    f"Image '{key}' has an unrecognized format, using default size",
                )
            extent = compute_extent(
                get_image_size(image.buffer),
                image.width_inches,
                image.height_inches,
                self.config.max_image_width_inches,
                self.config.max_image_height_inches,
            )

            media_part = self._store_media(key, image)
            target = posixpath.relpath(media_part, posixpath.dirname(part_name) or ".")
            rel_id = self._relationships_for(part_name).add(IMAGE_REL_TYPE, target)

            text = self._replace_markers(text, marker, rel_id, extent, key)
            self.embedded += 1
            logger.debug(f"Embedded image '{key}' in {part_name} as {rel_id}")

        return text

    def finish(self) -> None:
        """Write modified relationship parts and content types to the package."""
        for index in self._relationships.values():
            if index.modified:
                self.package.write_part(index.rels_path, index.to_xml())
        if self._content_types is not None and self._content_types.modified:
            self.package.write_part(CONTENT_TYPES_PART, self._content_types.to_xml())

    def _replace_markers(self, text: str, marker: str, rel_id: str, extent, key: str) -> str:
        pos = 0
        while True:
            index = text.find(marker, pos)
            if index == -1:
                return text
            drawing = build_drawing_xml(rel_id, extent, self.drawing_ids.next(), name=key)
            if self._inside_text_element(text, index):
                # A run cannot contain another run: close the text run around the picture
                drawing = f'</w:t></w:r>{drawing}<w:r><w:t xml:space="preserve">'
            text = text[:index] + drawing + text[index + len(marker):]
            pos = index + len(drawing)

    @staticmethod
    def _inside_text_element(text: str, index: int) -> bool:
        last_open = max(text.rfind("<w:t>", 0, index), text.rfind("<w:t ", 0, index))
        last_close = text.rfind("</w:t>", 0, index)
        return last_open > last_close

    def _store_media(self, key: str, image: ImageDescriptor) -> str:
        cache_key = (key, image.extension)
        if cache_key in self._media_parts:
            return self._media_parts[cache_key]

        media_part = f"{MEDIA_DIR}/{key}.{image.extension}"
        suffix = 1
        while self.package.has_part(media_part):
            media_part = f"{MEDIA_DIR}/{key}_{suffix}.{image.extension}"
            suffix += 1

        self.package.write_part(media_part, image.buffer)
        self._get_content_types().add_default(image.extension)
        self._media_parts[cache_key] = media_part
        return media_part

    def _relationships_for(self, part_name: str) -> RelationshipIndex:
        rels_path = relationships_path_for(part_name)
        if rels_path not in self._relationships:
            xml = self.package.read_part(rels_path) if self.package.has_part(rels_path) else None
            self._relationships[rels_path] = RelationshipIndex(rels_path, xml)
        return self._relationships[rels_path]

    def _get_content_types(self) -> ContentTypes:
        if self._content_types is None:
            self._content_types = ContentTypes(self.package.read_part(CONTENT_TYPES_PART))
        return self._content_types

    def _record(self, category: IssueCategory, message: str) -> None:
        issue = TemplateIssue(category, message)
        self.issues.append(issue)
        if issue.silent:
            logger.debug(message)
        else:
            logger.warning(message)
