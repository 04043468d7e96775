"""
DOCX Templater - fill Word templates with data.

Templates are ordinary DOCX files whose text contains tags:

- ``{name}``: value substitution (text, numbers, booleans, images)
- ``{#items}...{/items}``: repeat content for every item of a list
- ``{?flag}...{:else}...{/flag}``: conditional content
- ``{table:items}``: repeat the enclosing table row for every item

Main Components:
- api: generate_docx / generate_docx_detailed / extract_placeholders
- engine: run normalization and tag resolution
- media: image size sniffing and layout
- package: zip container, relationships, image embedding
"""

__version__ = "1.0.0"

from .exceptions import DocxTemplaterError, StructuralError
from .config import TemplateConfig
from .models import (
    ExpansionResult,
    ExpansionStats,
    GenerationResult,
    ImageDescriptor,
    IssueCategory,
    PlaceholderInfo,
    TemplateIssue,
)
from .engine import TemplateEngine, expand
from .api import (
    extract_placeholders,
    generate_docx,
    generate_docx_detailed,
    load_template,
    render_to_file,
)

__all__ = [
    "__version__",
    "DocxTemplaterError",
    "StructuralError",
    "TemplateConfig",
    "ExpansionResult",
    "ExpansionStats",
    "GenerationResult",
    "ImageDescriptor",
    "IssueCategory",
    "PlaceholderInfo",
    "TemplateIssue",
    "TemplateEngine",
    "expand",
    "extract_placeholders",
    "generate_docx",
    "generate_docx_detailed",
    "load_template",
    "render_to_file",
]
