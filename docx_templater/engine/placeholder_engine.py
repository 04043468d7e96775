"""
Placeholder Engine - expands template tags against a data tree.

Supports:
- Loops ({#items}...{/items})
- Conditionals ({?flag}...{:else}...{/flag})
- Table rows ({table:items} inside a ``<w:tr>``)
- Simple placeholders ({name}), including image placeholders

Passes run in a fixed order, each one scanning the output of the previous
one: loops, conditionals, table markers, simple placeholders. Image
placeholders become internal markers that the image embedder replaces once
the package side (relationships, media parts) is ready.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from ..config import TemplateConfig
from ..models.image import ImageDescriptor
from ..models.result import (
    ExpansionResult,
    ExpansionStats,
    IssueCategory,
    PlaceholderInfo,
    TemplateIssue,
)
from .tokenizer import Token, TokenKind, find_close, find_token, iter_tokens, tokenize

logger = logging.getLogger(__name__)

IMAGE_MARKER = "__IMAGE__{key}__"

ROW_START_PATTERN = re.compile(r"<w:tr[\s>/]")
ROW_END = "</w:tr>"

FALSY_STRINGS = ("false", "0", "")

PLACEHOLDER_TYPES = {
    TokenKind.SIMPLE: "text",
    TokenKind.LOOP_OPEN: "loop",
    TokenKind.COND_OPEN: "conditional",
    TokenKind.TABLE: "table",
}


def image_marker(key: str) -> str:
    """Internal marker left in the text for image placeholder ``key``."""
    return IMAGE_MARKER.format(key=key)


def is_truthy(value: Any) -> bool:
    """
    Evaluate a conditional value.

    ``None``, ``False``, numeric zero, empty lists and the strings
    ``"false"``, ``"0"`` and ``""`` are falsy; everything else is truthy,
    including empty mappings.
    """
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value not in FALSY_STRINGS
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def format_scalar(value: Any) -> str:
    """Canonical text of a scalar: lowercase booleans, integral floats without ``.0``."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class _ExpansionContext:
    """Per-call state: issues, counters and referenced images."""

    def __init__(self) -> None:
        self.issues: List[TemplateIssue] = []
        self.stats = ExpansionStats()
        self.images: Dict[str, ImageDescriptor] = {}

    def warn(self, category: IssueCategory, message: str) -> None:
        self.issues.append(TemplateIssue(category, message))
        logger.warning(message)


class TemplateEngine:
    """
    Expands loops, conditionals, table rows and placeholders in template text.

    The engine holds configuration only; every ``expand`` call is independent.
    """

    def __init__(self, config: Optional[TemplateConfig] = None) -> None:
        """
        Initialize the engine.

        Args:
            config: Rendering settings (defaults if omitted)
        """
        self.config = config or TemplateConfig()

    def expand(self, text: str, data: Mapping) -> ExpansionResult:
        """
        Expand all tags of ``text``.

        Args:
            text: Template text (normalized part XML or plain text)
            data: Data tree; not modified

        Returns:
            ExpansionResult with the text, issues, stats and image references
        """
        ctx = _ExpansionContext()

        text = self._expand_loops(text, data, ctx)
        text = self._expand_conditionals(text, data, ctx)
        text = self._expand_tables(text, data, ctx)
        text = self._expand_simple(text, data, ctx)

        logger.debug(
            f"Expanded {ctx.stats.loops} loop(s), {ctx.stats.conditionals} conditional(s), "
            f"{ctx.stats.tables} table(s), {ctx.stats.placeholders} placeholder(s)"
        )
        return ExpansionResult(text=text, issues=ctx.issues, stats=ctx.stats, images=ctx.images)

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def _expand_loops(self, text: str, data: Mapping, ctx: _ExpansionContext) -> str:
        tokens = tokenize(text)
        pieces: List[str] = []
        pos = 0
        index = 0
        while index < len(tokens):
            token = tokens[index]
            if token.kind is not TokenKind.LOOP_OPEN:
                index += 1
                continue

            close_index = find_close(tokens, index)
            if close_index is None:
                ctx.warn(IssueCategory.DATA_MISMATCH, f"Loop '{token.name}' is never closed")
                index += 1
                continue

            close = tokens[close_index]
            pieces.append(text[pos:token.start])
            pieces.append(self._render_loop(token.name, text[token.end:close.start], data, ctx))
            ctx.stats.loops += 1
            pos = close.end
            index = close_index + 1

        pieces.append(text[pos:])
        return "".join(pieces)

    def _render_loop(self, key: str, body: str, data: Mapping, ctx: _ExpansionContext) -> str:
        items = self._get_items(key, data, ctx, "Array")
        if items is None:
            return ""
        return "".join(
            self._substitute_fields(body, item, ctx) for item in items if item is not None
        )

    def _expand_conditionals(self, text: str, data: Mapping, ctx: _ExpansionContext) -> str:
        tokens = tokenize(text)
        pieces: List[str] = []
        pos = 0
        index = 0
        while index < len(tokens):
            token = tokens[index]
            if token.kind is not TokenKind.COND_OPEN:
                index += 1
                continue

            close_index = find_close(tokens, index)
            if close_index is None:
                ctx.warn(IssueCategory.DATA_MISMATCH, f"Condition '{token.name}' is never closed")
                index += 1
                continue

            close = tokens[close_index]
            else_token = next(
                (t for t in tokens[index + 1:close_index] if t.kind is TokenKind.ELSE), None
            )
            if else_token is not None:
                if_branch = text[token.end:else_token.start]
                else_branch = text[else_token.end:close.start]
            else:
                if_branch = text[token.end:close.start]
                else_branch = ""

            pieces.append(text[pos:token.start])
            pieces.append(if_branch if is_truthy(data.get(token.name)) else else_branch)
            ctx.stats.conditionals += 1
            pos = close.end
            index = close_index + 1

        pieces.append(text[pos:])
        return "".join(pieces)

    def _expand_tables(self, text: str, data: Mapping, ctx: _ExpansionContext) -> str:
        pos = 0
        while True:
            marker = find_token(text, TokenKind.TABLE, pos)
            if marker is None:
                return text
            ctx.stats.tables += 1

            row_start = self._find_row_start(text, marker.start)
            row_end = text.find(ROW_END, marker.end)
            if not self._encloses(text, row_start, row_end, marker):
                ctx.warn(
                    IssueCategory.LAYOUT_AMBIGUITY,
                    f"Could not find table row structure for {marker.source}",
                )
                text = text[:marker.start] + text[marker.end:]
                pos = marker.start
                continue
            row_end += len(ROW_END)

            items = self._get_items(marker.name, data, ctx, "Table data")
            if items is None:
                text = text[:row_start] + text[row_end:]
                pos = row_start
                continue

            marker_offset = marker.start - row_start
            row_template = text[row_start:row_end]
            row_template = row_template[:marker_offset] + row_template[marker_offset + len(marker.source):]
            rows = "".join(
                self._substitute_fields(row_template, item, ctx) for item in items if item is not None
            )
            logger.debug(f"Table '{marker.name}': generated {len(items)} row(s)")

            text = text[:row_start] + rows + text[row_end:]
            pos = row_start + len(rows)

    def _expand_simple(self, text: str, data: Mapping, ctx: _ExpansionContext) -> str:
        pieces: List[str] = []
        pos = 0
        for token in iter_tokens(text):
            if token.kind is not TokenKind.SIMPLE:
                continue
            pieces.append(text[pos:token.start])
            pieces.append(self._resolve_simple(token, data, ctx))
            pos = token.end
        pieces.append(text[pos:])
        return "".join(pieces)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_simple(self, token: Token, data: Mapping, ctx: _ExpansionContext) -> str:
        key = token.name
        value = data.get(key)

        if isinstance(value, (str, int, float)):
            ctx.stats.placeholders += 1
            return self._escape(format_scalar(value))

        if ImageDescriptor.is_image_value(value):
            if key not in ctx.images:
                try:
                    ctx.images[key] = ImageDescriptor.from_value(value)
                except ValueError as exc:
                    ctx.warn(IssueCategory.DATA_MISMATCH, f"Invalid image data for '{key}': {exc}")
                    return ""
                ctx.stats.images += 1
            return image_marker(key)

        return ""

    def _get_items(self, key: str, data: Mapping, ctx: _ExpansionContext,
                   label: str) -> Optional[list]:
        """Return the list under ``key`` or record why it cannot be used."""
        value = data.get(key)
        if value is None:
            ctx.warn(IssueCategory.DATA_MISMATCH, f"{label} '{key}' not found in data")
            return None
        if not isinstance(value, (list, tuple)):
            ctx.warn(
                IssueCategory.DATA_MISMATCH,
                f"{label} '{key}' is not an array, got: {type(value).__name__}",
            )
            return None
        if len(value) == 0:
            ctx.warn(IssueCategory.DATA_MISMATCH, f"{label} '{key}' is empty")
            return None
        return list(value)

    def _substitute_fields(self, body: str, item: Any, ctx: _ExpansionContext) -> str:
        pieces: List[str] = []
        pos = 0
        for token in iter_tokens(body):
            if token.kind is not TokenKind.SIMPLE:
                continue
            value = item.get(token.name) if isinstance(item, Mapping) else None
            pieces.append(body[pos:token.start])
            if value is not None:
                ctx.stats.placeholders += 1
                pieces.append(self._escape(format_scalar(value)))
            pos = token.end
        pieces.append(body[pos:])
        return "".join(pieces)

    def _escape(self, value: str) -> str:
        return escape(value) if self.config.escape_values else value

    @staticmethod
    def _find_row_start(text: str, index: int) -> int:
        """Offset of the last ``<w:tr>`` start tag before ``index`` (``<w:trPr>`` excluded)."""
        start = text.rfind("<w:tr", 0, index)
        while start != -1 and not ROW_START_PATTERN.match(text, start):
            start = text.rfind("<w:tr", 0, start)
        return start

    @staticmethod
    def _encloses(text: str, row_start: int, row_end: int, marker: Token) -> bool:
        """Check that both boundaries belong to the one row holding the marker."""
        if row_start == -1 or row_end == -1:
            return False
        if text.find(ROW_END, row_start, marker.start) != -1:
            return False
        return ROW_START_PATTERN.search(text, marker.end, row_end) is None


def expand(text: str, data: Mapping, config: Optional[TemplateConfig] = None) -> ExpansionResult:
    """Expand ``text`` against ``data`` with a one-off engine."""
    return TemplateEngine(config).expand(text, data)


def scan_placeholders(text: str) -> Dict[str, PlaceholderInfo]:
    """
    List the tags used in ``text``.

    Args:
        text: Template text

    Returns:
        Mapping of ``"<type>:<name>"`` to PlaceholderInfo
    """
    found: Dict[str, PlaceholderInfo] = {}
    for token in iter_tokens(text):
        ph_type = PLACEHOLDER_TYPES.get(token.kind)
        if ph_type is None:
            continue
        key = f"{ph_type}:{token.name}"
        if key not in found:
            found[key] = PlaceholderInfo(name=token.name, type=ph_type)
        found[key].count += 1
    return found
