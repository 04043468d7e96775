"""Custom exceptions for DOCX Templater."""

from typing import Optional


class DocxTemplaterError(Exception):
    """Base exception for DOCX Templater errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class StructuralError(DocxTemplaterError):
    """
    Exception raised when the document package itself is unusable.

    Covers packages that cannot be opened or serialized and required parts
    that are missing. The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, part: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message, details)
        self.part = part

    def __str__(self) -> str:
        text = super().__str__()
        if self.part:
            return f"{text} (part: {self.part})"
        return text
