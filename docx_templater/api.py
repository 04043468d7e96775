"""
High-level API for DOCX Templater.

Example:
    >>> from docx_templater import generate_docx
    >>> content = generate_docx("template.docx", {"name": "Amy"})
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import List, Optional, Union

import requests

from .config import TemplateConfig
from .exceptions import StructuralError
from .models.result import GenerationResult, PlaceholderInfo
from .package.package_reader import DocxPackage
from .renderer import DocumentRenderer

logger = logging.getLogger(__name__)

TemplateSource = Union[bytes, bytearray, memoryview, str, Path]

DOWNLOAD_TIMEOUT = 30


def load_template(source: TemplateSource) -> bytes:
    """
    Load template bytes.

    Args:
        source: Raw bytes, an ``http(s)://`` URL, or a file path

    Returns:
        Template package bytes

    Raises:
        StructuralError: If the template cannot be downloaded or read
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)

    if isinstance(source, str) and source.startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=DOWNLOAD_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise StructuralError(f"Failed to download template from {source}", details=str(exc)) from exc
        logger.info(f"Downloaded template: {source} ({len(response.content)} bytes)")
        return response.content

    path = Path(source)
    if not path.exists():
        raise StructuralError(f"File not found: {path}")
    try:
        return path.read_bytes()
    except OSError as exc:
        raise StructuralError(f"Cannot read template {path}", details=str(exc)) from exc


def generate_docx_detailed(
    template: TemplateSource,
    data: Mapping,
    config: Optional[TemplateConfig] = None,
) -> GenerationResult:
    """
    Render a template and report what was done.

    Args:
        template: Template bytes, URL or path
        data: Data tree
        config: Rendering settings

    Returns:
        GenerationResult with the rendered package, stats and warnings

    Raises:
        StructuralError: If the package is unreadable, unwritable or lacks
            ``word/document.xml``
    """
    package = DocxPackage.from_bytes(load_template(template))
    return DocumentRenderer(package, config).render(data)


def generate_docx(
    template: TemplateSource,
    data: Mapping,
    config: Optional[TemplateConfig] = None,
) -> bytes:
    """Render a template and return the new package bytes."""
    return generate_docx_detailed(template, data, config).content


def render_to_file(
    template: TemplateSource,
    data: Mapping,
    output_path: Union[str, Path],
    config: Optional[TemplateConfig] = None,
) -> GenerationResult:
    """
    Render a template and write the result to ``output_path``.

    Returns:
        GenerationResult of the rendering
    """
    result = generate_docx_detailed(template, data, config)
    output_path = Path(output_path)
    try:
        output_path.write_bytes(result.content)
    except OSError as exc:
        raise StructuralError(f"Cannot write {output_path}", details=str(exc)) from exc
    logger.info(f"Saved: {output_path}")
    return result


def extract_placeholders(
    template: TemplateSource,
    config: Optional[TemplateConfig] = None,
) -> List[PlaceholderInfo]:
    """
    List the tags used by a template.

    Args:
        template: Template bytes, URL or path
        config: Settings selecting the template parts

    Returns:
        PlaceholderInfo list sorted by name
    """
    package = DocxPackage.from_bytes(load_template(template))
    return DocumentRenderer(package, config).extract_placeholders()
