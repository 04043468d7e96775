"""
Document renderer - runs the template pipeline over the parts of a package.

For every template part (main document, headers, footers):
normalize runs -> expand tags -> embed images. Package bookkeeping
(relationships, content types) is written once all parts are done.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Dict, List, Optional

from lxml import etree as lxml_etree

from .config import MAIN_DOCUMENT_PART, TemplateConfig
from .engine.placeholder_engine import TemplateEngine, scan_placeholders
from .engine.run_normalizer import normalize_part_xml
from .exceptions import StructuralError
from .models.result import ExpansionStats, GenerationResult, PlaceholderInfo, TemplateIssue
from .package.image_embedder import DrawingIdCounter, ImageEmbedder
from .package.package_reader import DocxPackage

logger = logging.getLogger(__name__)


class DocumentRenderer:
    """Renders one template package with one data tree."""

    def __init__(self, package: DocxPackage, config: Optional[TemplateConfig] = None):
        """
        Initialize renderer.

        Args:
            package: Template package; rendered parts are written back into it
            config: Rendering settings
        """
        self.package = package
        self.config = config or TemplateConfig()
        self.engine = TemplateEngine(self.config)

    def template_parts(self) -> List[str]:
        """
        Names of the parts that contain template text, in archive order.

        Raises:
            StructuralError: If the main document part is missing
        """
        if not self.package.has_part(MAIN_DOCUMENT_PART):
            raise StructuralError("Required part is missing from the package", part=MAIN_DOCUMENT_PART)

        parts: List[str] = []
        for pattern in self.config.part_patterns:
            for name in self.package.list_parts(pattern):
                if name not in parts:
                    parts.append(name)
        return parts

    def render(self, data: Mapping) -> GenerationResult:
        """
        Render all template parts and serialize the package.

        Args:
            data: Data tree

        Returns:
            GenerationResult with the new package bytes, stats and issues

        Raises:
            StructuralError: If the package or one of its parts is unusable
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"Template data must be a mapping, got {type(data).__name__}")

        parts = self.template_parts()
        texts = {name: self._normalized_text(name) for name in parts}

        stats = ExpansionStats()
        issues: List[TemplateIssue] = []
        embedder = ImageEmbedder(
            self.package, self.config, DrawingIdCounter.from_texts(list(texts.values()))
        )

        for name, text in texts.items():
            result = self.engine.expand(text, data)
            rendered = embedder.embed(name, result.text, result.images)
            self.package.write_part(name, rendered.encode("utf-8"))
            stats.merge(result.stats)
            issues.extend(result.issues)
            logger.debug(f"Rendered part {name}")

        embedder.finish()
        stats.images = embedder.embedded
        issues.extend(embedder.issues)

        logger.info(
            f"Rendered {len(parts)} part(s): {stats.placeholders} placeholder(s), "
            f"{stats.loops} loop(s), {stats.conditionals} conditional(s), "
            f"{stats.tables} table(s), {stats.images} image(s)"
        )
        return GenerationResult(content=self.package.to_bytes(), stats=stats, issues=issues)

    def extract_placeholders(self) -> List[PlaceholderInfo]:
        """
        List the tags used by the template parts.

        Returns:
            PlaceholderInfo list sorted by name and type
        """
        merged: Dict[str, PlaceholderInfo] = {}
        for name in self.template_parts():
            for key, info in scan_placeholders(self._normalized_text(name)).items():
                if key not in merged:
                    merged[key] = PlaceholderInfo(name=info.name, type=info.type)
                merged[key].count += info.count
                merged[key].parts.append(name)
        return sorted(merged.values(), key=lambda info: (info.name, info.type))

    def _normalized_text(self, part_name: str) -> str:
        try:
            normalized = normalize_part_xml(self.package.read_part(part_name))
        except lxml_etree.XMLSyntaxError as exc:
            raise StructuralError("Part is not well-formed XML", part=part_name, details=str(exc)) from exc
        return normalized.decode("utf-8")
