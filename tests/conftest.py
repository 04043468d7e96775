"""
Pytest configuration for DOCX Templater
"""

import io
import logging
import sys
import zipfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from PIL import Image

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

CONTENT_TYPES_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types"><Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/><Default Extension="xml" ContentType="application/xml"/><Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/></Types>"""

ROOT_RELS_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships"><Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="word/document.xml"/></Relationships>"""

DOCUMENT_RELS_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships"><Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles" Target="styles.xml"/><Relationship Id="rId7" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/settings" Target="settings.xml"/></Relationships>"""


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid handler leaks between tests."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(name)s - %(levelname)s - %(message)s'))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    import tempfile
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


def _paragraph(fragments: List[str]) -> str:
    runs = "".join(
        f'<w:r><w:t xml:space="preserve">{text}</w:t></w:r>' for text in fragments
    )
    return f"<w:p>{runs}</w:p>"


def _document(body: str, root: str = "w:document", wrap_body: bool = True) -> str:
    inner = f"<w:body>{body}</w:body>" if wrap_body else body
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<{root} xmlns:w="{W_NS}" xmlns:r="{R_NS}">{inner}</{root}>'
    )


@pytest.fixture
def paragraph_xml():
    """Build ``<w:p>`` markup with one run per text fragment."""
    return _paragraph


@pytest.fixture
def table_xml():
    """Build a one-table ``<w:tbl>``; each row is a list of cell texts."""
    def build(rows: List[List[str]]) -> str:
        row_xml = []
        for cells in rows:
            cells_xml = "".join(f"<w:tc>{_paragraph([text])}</w:tc>" for text in cells)
            row_xml.append(f"<w:tr><w:trPr><w:cantSplit/></w:trPr>{cells_xml}</w:tr>")
        return f"<w:tbl>{''.join(row_xml)}</w:tbl>"
    return build


@pytest.fixture
def make_docx():
    """
    Build a minimal DOCX package in memory.

    Args (of the returned factory):
        body: Markup placed inside ``<w:body>``
        headers: Optional header part name -> paragraph markup
        extra_parts: Optional additional parts
        document_rels: Content of ``word/_rels/document.xml.rels`` (None to omit)
        include_document: Whether ``word/document.xml`` is written
    """
    def build(
        body: str,
        headers: Optional[Dict[str, str]] = None,
        extra_parts: Optional[Dict[str, bytes]] = None,
        document_rels: Optional[str] = DOCUMENT_RELS_XML,
        include_document: bool = True,
    ) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr("[Content_Types].xml", CONTENT_TYPES_XML)
            zf.writestr("_rels/.rels", ROOT_RELS_XML)
            if include_document:
                zf.writestr("word/document.xml", _document(body))
            if document_rels is not None:
                zf.writestr("word/_rels/document.xml.rels", document_rels)
            for name, content in (headers or {}).items():
                zf.writestr(name, _document(content, root="w:hdr", wrap_body=False))
            for name, content in (extra_parts or {}).items():
                zf.writestr(name, content)
        return buffer.getvalue()
    return build


@pytest.fixture
def read_part():
    """Read one part of a DOCX package given as bytes."""
    def read(package: bytes, name: str) -> str:
        with zipfile.ZipFile(io.BytesIO(package)) as zf:
            return zf.read(name).decode("utf-8")
    return read


@pytest.fixture
def image_bytes():
    """Encode a blank image of the given size with Pillow."""
    def build(width: int, height: int, fmt: str = "PNG", **save_options) -> bytes:
        mode = "P" if fmt == "GIF" else "RGB"
        buffer = io.BytesIO()
        Image.new(mode, (width, height)).save(buffer, format=fmt, **save_options)
        return buffer.getvalue()
    return build
