"""
Document package layer: zip container, OPC bookkeeping and image embedding.
"""

from .package_reader import CONTENT_TYPES_PART, DocxPackage
from .relationships import (
    IMAGE_REL_TYPE,
    ContentTypes,
    RelationshipIndex,
    content_type_for_extension,
    relationships_path_for,
)
from .image_embedder import DrawingIdCounter, ImageEmbedder

__all__ = [
    "CONTENT_TYPES_PART",
    "DocxPackage",
    "IMAGE_REL_TYPE",
    "ContentTypes",
    "RelationshipIndex",
    "content_type_for_extension",
    "relationships_path_for",
    "DrawingIdCounter",
    "ImageEmbedder",
]
