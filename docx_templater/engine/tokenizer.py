"""
Tag scanner for the template grammar.

    {name}                   simple placeholder
    {#name} ... {/name}      loop
    {?name} ... {/name}      conditional, optionally split by {:else}
    {table:name}             table-row marker

Names are word characters and case-sensitive. Braces that do not form one of
these tags are ordinary text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence


class TokenKind(Enum):
    SIMPLE = "simple"
    LOOP_OPEN = "loop_open"
    COND_OPEN = "cond_open"
    CLOSE = "close"
    ELSE = "else"
    TABLE = "table"


TAG_PATTERN = re.compile(
    r"\{(?:"
    r"(?P<sigil>[#?/])(?P<tag>\w+)"
    r"|table:(?P<table>\w+)"
    r"|(?P<else>:else)"
    r"|(?P<name>\w+)"
    r")\}"
)

_SIGIL_KINDS = {
    "#": TokenKind.LOOP_OPEN,
    "?": TokenKind.COND_OPEN,
    "/": TokenKind.CLOSE,
}


@dataclass(frozen=True)
class Token:
    """A recognized tag and its character span in the scanned text."""

    kind: TokenKind
    name: str
    start: int
    end: int

    @property
    def source(self) -> str:
        if self.kind is TokenKind.SIMPLE:
            return f"{{{self.name}}}"
        if self.kind is TokenKind.TABLE:
            return f"{{table:{self.name}}}"
        if self.kind is TokenKind.ELSE:
            return "{:else}"
        sigil = {TokenKind.LOOP_OPEN: "#", TokenKind.COND_OPEN: "?", TokenKind.CLOSE: "/"}[self.kind]
        return f"{{{sigil}{self.name}}}"


def _make_token(match: "re.Match[str]") -> Token:
    start, end = match.span()
    if match.group("sigil"):
        return Token(_SIGIL_KINDS[match.group("sigil")], match.group("tag"), start, end)
    if match.group("table"):
        return Token(TokenKind.TABLE, match.group("table"), start, end)
    if match.group("else"):
        return Token(TokenKind.ELSE, "else", start, end)
    return Token(TokenKind.SIMPLE, match.group("name"), start, end)


def iter_tokens(text: str, pos: int = 0) -> Iterator[Token]:
    """Yield tokens of ``text`` starting at ``pos``, left to right."""
    for match in TAG_PATTERN.finditer(text, pos):
        yield _make_token(match)


def tokenize(text: str) -> List[Token]:
    """Return all tokens of ``text``."""
    return list(iter_tokens(text))


def find_token(text: str, kind: TokenKind, pos: int = 0) -> Optional[Token]:
    """Return the first token of ``kind`` at or after ``pos``."""
    for token in iter_tokens(text, pos):
        if token.kind is kind:
            return token
    return None


def find_close(tokens: Sequence[Token], open_index: int) -> Optional[int]:
    """
    Find the close tag matching ``tokens[open_index]``.

    The nearest ``{/name}`` with the same name wins; same-named nesting is not
    tracked.

    Returns:
        Index of the close token, or None if the tag is never closed
    """
    name = tokens[open_index].name
    for index in range(open_index + 1, len(tokens)):
        token = tokens[index]
        if token.kind is TokenKind.CLOSE and token.name == name:
            return index
    return None
