"""
Models module for template data and rendering results.
"""

from .image import ImageDescriptor
from .result import (
    ExpansionResult,
    ExpansionStats,
    GenerationResult,
    IssueCategory,
    PlaceholderInfo,
    TemplateIssue,
)

__all__ = [
    "ImageDescriptor",
    "ExpansionResult",
    "ExpansionStats",
    "GenerationResult",
    "IssueCategory",
    "PlaceholderInfo",
    "TemplateIssue",
]
