"""
Template engine: run normalization, tag scanning and tag resolution.
"""

from .placeholder_engine import TemplateEngine, expand, image_marker, is_truthy, scan_placeholders
from .run_normalizer import TextFragment, normalize_fragments, normalize_part_xml
from .tokenizer import Token, TokenKind, tokenize

__all__ = [
    "TemplateEngine",
    "expand",
    "image_marker",
    "is_truthy",
    "scan_placeholders",
    "TextFragment",
    "normalize_fragments",
    "normalize_part_xml",
    "Token",
    "TokenKind",
    "tokenize",
]
