"""
Run normalization for placeholder detection.

Word splits the text of a paragraph into many ``<w:t>`` fragments (spell
checking, revision ids, formatting changes), so a placeholder typed as
``{name}`` may end up stored as ``{na`` + ``me}``. Before tags are resolved,
every brace-delimited span is moved into the fragment where it starts.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, MutableSequence, Protocol, Tuple

from lxml import etree as lxml_etree

logger = logging.getLogger(__name__)

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"

MAX_TOKEN_LENGTH = 256

# Lexical over-approximation of a tag; kinds are classified by the tokenizer.
SPAN_PATTERN = re.compile(r"\{[^{}]{1,%d}\}" % (MAX_TOKEN_LENGTH - 2))


class SupportsText(Protocol):
    text: str


@dataclass
class TextFragment:
    """Plain text fragment (stand-in for a ``<w:t>`` element)."""

    text: str = ""


def find_spans(full_text: str) -> List[Tuple[int, int]]:
    """Return (start, end) offsets of all token-shaped spans."""
    return [match.span() for match in SPAN_PATTERN.finditer(full_text)]


def normalize_fragments(fragments: MutableSequence[SupportsText]) -> MutableSequence[SupportsText]:
    """
    Move every token-shaped span into the fragment where it starts.

    Fragments are mutated in place. Fragments not touched by any span keep
    their content; a fragment lying entirely inside a span is emptied.

    Args:
        fragments: Ordered fragments with a mutable ``text`` attribute

    Returns:
        The same sequence
    """
    texts = [fragment.text or "" for fragment in fragments]
    offsets: List[int] = []
    position = 0
    for text in texts:
        offsets.append(position)
        position += len(text)
    full_text = "".join(texts)

    spans = find_spans(full_text)
    if not spans:
        return fragments

    # span index -> fragment index that holds the reassembled token
    owners: Dict[int, int] = {}
    overlapping: Dict[int, List[int]] = {}
    span_idx = 0
    for frag_idx, text in enumerate(texts):
        frag_start = offsets[frag_idx]
        frag_end = frag_start + len(text)
        if frag_start == frag_end:
            continue
        # spans are sorted and disjoint: skip the ones that end before this fragment
        while span_idx < len(spans) and spans[span_idx][1] <= frag_start:
            span_idx += 1
        idx = span_idx
        while idx < len(spans) and spans[idx][0] < frag_end:
            overlapping.setdefault(frag_idx, []).append(idx)
            owners.setdefault(idx, frag_idx)
            idx += 1

    for frag_idx, span_ids in overlapping.items():
        frag_start = offsets[frag_idx]
        frag_end = frag_start + len(texts[frag_idx])
        pieces: List[str] = []
        cursor = frag_start
        for sid in span_ids:
            start, end = spans[sid]
            if cursor < start:
                pieces.append(full_text[cursor:min(start, frag_end)])
            if owners[sid] == frag_idx:
                pieces.append(full_text[start:end])
            cursor = max(cursor, end)
        if cursor < frag_end:
            pieces.append(full_text[cursor:frag_end])

        new_text = "".join(pieces)
        if new_text != texts[frag_idx]:
            fragments[frag_idx].text = new_text

    moved = sum(1 for sid, owner in owners.items() if spans[sid][1] > offsets[owner] + len(texts[owner]))
    if moved:
        logger.debug(f"Reassembled {moved} split placeholder(s) across {len(overlapping)} fragment(s)")
    return fragments


class _ElementFragment:
    """Adapter exposing an lxml ``<w:t>`` element as a fragment."""

    __slots__ = ("element",)

    def __init__(self, element):
        self.element = element

    @property
    def text(self) -> str:
        return self.element.text or ""

    @text.setter
    def text(self, value: str) -> None:
        self.element.text = value
        if value and (value[0].isspace() or value[-1].isspace()):
            self.element.set(XML_SPACE, "preserve")


def normalize_part_xml(xml: bytes) -> bytes:
    """
    Normalize the text runs of one WordprocessingML part.

    Args:
        xml: Serialized part

    Returns:
        Serialized part with no token split across ``<w:t>`` elements

    Raises:
        lxml.etree.XMLSyntaxError: If the part is not well-formed XML
    """
    parser = lxml_etree.XMLParser(remove_blank_text=False, resolve_entities=False)
    root = lxml_etree.fromstring(xml, parser)
    fragments = [_ElementFragment(el) for el in root.iter(f"{{{W_NS}}}t")]
    normalize_fragments(fragments)
    return lxml_etree.tostring(
        root.getroottree(), xml_declaration=True, encoding="UTF-8", standalone=True
    )
