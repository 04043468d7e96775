"""
Result models returned by the template engine and the generation API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from .image import ImageDescriptor


class IssueCategory(Enum):
    """Recoverable anomalies found while rendering."""

    DATA_MISMATCH = "data_mismatch"        # key absent, wrong type, empty list
    LAYOUT_AMBIGUITY = "layout_ambiguity"  # table marker outside a row
    FORMAT_UNKNOWN = "format_unknown"      # image bytes with no known signature


@dataclass(frozen=True)
class TemplateIssue:
    """A recovered problem; never interrupts rendering."""

    category: IssueCategory
    message: str

    @property
    def silent(self) -> bool:
        return self.category is IssueCategory.FORMAT_UNKNOWN


@dataclass
class ExpansionStats:
    """Counters collected during one rendering call."""

    placeholders: int = 0
    loops: int = 0
    conditionals: int = 0
    tables: int = 0
    images: int = 0

    def merge(self, other: "ExpansionStats") -> None:
        self.placeholders += other.placeholders
        self.loops += other.loops
        self.conditionals += other.conditionals
        self.tables += other.tables
        self.images += other.images

    def to_dict(self) -> Dict[str, int]:
        return {
            "placeholders": self.placeholders,
            "loops": self.loops,
            "conditionals": self.conditionals,
            "tables": self.tables,
            "images": self.images,
        }


@dataclass
class ExpansionResult:
    """
    Output of ``TemplateEngine.expand``.

    Attributes:
        text: Expanded text; image placeholders are left as internal markers.
        issues: Recovered anomalies in the order they were found.
        stats: Counters for this expansion.
        images: Image placeholders referenced by the text, by key, in
            first-reference order.
    """

    text: str
    issues: List[TemplateIssue] = field(default_factory=list)
    stats: ExpansionStats = field(default_factory=ExpansionStats)
    images: Dict[str, ImageDescriptor] = field(default_factory=dict)

    @property
    def warnings(self) -> List[str]:
        return [issue.message for issue in self.issues if not issue.silent]


@dataclass
class GenerationResult:
    """Output of ``generate_docx_detailed``: the rendered package and its report."""

    content: bytes
    stats: ExpansionStats = field(default_factory=ExpansionStats)
    issues: List[TemplateIssue] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        return [issue.message for issue in self.issues if not issue.silent]


@dataclass
class PlaceholderInfo:
    """Placeholder found in a template."""

    name: str
    type: str  # "text", "loop", "conditional", "table"
    count: int = 0
    parts: List[str] = field(default_factory=list)
