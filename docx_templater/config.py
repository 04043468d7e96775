"""
Configuration for template rendering.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Tuple


DEFAULT_PART_PATTERNS: Tuple[str, ...] = (
    "word/document.xml",
    "word/header*.xml",
    "word/footer*.xml",
)

MAIN_DOCUMENT_PART = "word/document.xml"


@dataclass(frozen=True)
class TemplateConfig:
    """
    Settings for one rendering call.

    Attributes:
        max_image_width_inches: Width cap applied to images without explicit size.
        max_image_height_inches: Height cap applied to images without explicit size.
        escape_values: Whether substituted text is XML-escaped.
        part_patterns: fnmatch patterns of the parts that are expanded.
    """

    max_image_width_inches: float = 6.0
    max_image_height_inches: float = 6.0
    escape_values: bool = True
    part_patterns: Tuple[str, ...] = DEFAULT_PART_PATTERNS

    def __post_init__(self) -> None:
        if self.max_image_width_inches <= 0 or self.max_image_height_inches <= 0:
            raise ValueError("Maximum image size must be positive")
        if MAIN_DOCUMENT_PART not in self.part_patterns:
            object.__setattr__(
                self, "part_patterns", (MAIN_DOCUMENT_PART,) + tuple(self.part_patterns)
            )

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "TemplateConfig":
        """
        Build a config from a plain mapping (CLI flags, JSON settings).

        Args:
            values: Field name to value mapping; ``None`` values are ignored

        Returns:
            TemplateConfig instance
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown config options: {', '.join(sorted(unknown))}")

        kwargs = {key: value for key, value in values.items() if value is not None}
        if "part_patterns" in kwargs:
            kwargs["part_patterns"] = tuple(kwargs["part_patterns"])
        return cls(**kwargs)
