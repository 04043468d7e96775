"""
Tests for ImageEmbedder.
"""

import re

import pytest

from docx_templater.config import TemplateConfig
from docx_templater.models.image import ImageDescriptor
from docx_templater.models.result import IssueCategory
from docx_templater.package.image_embedder import DrawingIdCounter, ImageEmbedder
from docx_templater.package.package_reader import CONTENT_TYPES_PART, DocxPackage

DOCUMENT = "word/document.xml"
IN_RUN = '<w:p><w:r><w:t xml:space="preserve">a__IMAGE__logo__b</w:t></w:r></w:p>'


@pytest.fixture
def package(make_docx):
    return DocxPackage.from_bytes(make_docx("<w:p/>"))


@pytest.fixture
def png(image_bytes):
    return ImageDescriptor(image_bytes(200, 100), "png")


def _docpr_ids(text):
    return [int(value) for value in re.findall(r'<wp:docPr id="(\d+)"', text)]


class TestDrawingIdCounter:
    """Test docPr id allocation."""

    def test_starts_above_existing(self):
        counter = DrawingIdCounter.from_texts(['<wp:docPr id="5" name="x"/>', '<wp:docPr id="2"/>'])
        assert counter.next() == 6
        assert counter.next() == 7

    def test_empty(self):
        assert DrawingIdCounter.from_texts(["<w:p/>"]).next() == 1


class TestImageEmbedder:
    """Test marker replacement and package updates."""

    def test_marker_inside_text_run(self, package, png):
        embedder = ImageEmbedder(package)
        text = embedder.embed(DOCUMENT, IN_RUN, {"logo": png})

        assert "__IMAGE__" not in text
        assert '<w:t xml:space="preserve">a</w:t></w:r><w:r><w:drawing>' in text
        assert '</w:drawing></w:r><w:r><w:t xml:space="preserve">b</w:t></w:r>' in text
        assert 'r:embed="rId8"' in text
        assert embedder.embedded == 1
        assert package.read_part("word/media/logo.png") == png.buffer

    def test_marker_outside_text_run(self, package, png):
        text = ImageEmbedder(package).embed(DOCUMENT, "<w:p>__IMAGE__logo__</w:p>", {"logo": png})
        assert text.startswith("<w:p><w:r><w:drawing>")
        assert text.endswith("</w:drawing></w:r></w:p>")

    def test_package_updated_on_finish(self, package, png):
        embedder = ImageEmbedder(package)
        embedder.embed(DOCUMENT, IN_RUN, {"logo": png})
        embedder.finish()

        rels = package.read_text("word/_rels/document.xml.rels")
        assert 'Id="rId8"' in rels
        assert 'Target="media/logo.png"' in rels
        assert 'Extension="png"' in package.read_text(CONTENT_TYPES_PART)

    def test_every_occurrence_gets_own_drawing_id(self, package, png):
        embedder = ImageEmbedder(package, drawing_ids=DrawingIdCounter(4))
        text = embedder.embed(DOCUMENT, "<w:p>__IMAGE__logo__</w:p><w:p>__IMAGE__logo__</w:p>", {"logo": png})

        assert _docpr_ids(text) == [4, 5]
        assert text.count('r:embed="rId8"') == 2

    def test_size_from_pixels(self, package, png):
        text = ImageEmbedder(package).embed(DOCUMENT, IN_RUN, {"logo": png})
        assert '<wp:extent cx="1905000" cy="952500"/>' in text

    def test_explicit_width(self, package, image_bytes):
        image = ImageDescriptor(image_bytes(1000, 500), "png", width_inches=4)
        text = ImageEmbedder(package).embed(DOCUMENT, IN_RUN, {"logo": image})
        assert '<wp:extent cx="3657600" cy="1828800"/>' in text

    def test_config_caps(self, package, png):
        config = TemplateConfig(max_image_width_inches=1, max_image_height_inches=1)
        text = ImageEmbedder(package, config).embed(DOCUMENT, IN_RUN, {"logo": png})
        assert '<wp:extent cx="914400" cy="457200"/>' in text

    def test_unknown_format_is_silent_issue(self, package):
        image = ImageDescriptor(b"not an image", "bin")
        embedder = ImageEmbedder(package)
        text = embedder.embed(DOCUMENT, IN_RUN, {"logo": image})

        assert '<wp:extent cx="952500" cy="952500"/>' in text
        assert len(embedder.issues) == 1
        assert embedder.issues[0].category is IssueCategory.FORMAT_UNKNOWN
        assert embedder.issues[0].silent

    def test_unreferenced_image_skipped(self, package, png):
        embedder = ImageEmbedder(package)
        text = embedder.embed(DOCUMENT, "<w:p/>", {"logo": png})
        embedder.finish()

        assert text == "<w:p/>"
        assert embedder.embedded == 0
        assert not package.has_part("word/media/logo.png")
        assert "rId8" not in package.read_text("word/_rels/document.xml.rels")

    def test_part_without_relationships(self, package, png):
        embedder = ImageEmbedder(package)
        text = embedder.embed("word/header1.xml", IN_RUN, {"logo": png})
        embedder.finish()

        assert 'r:embed="rId1"' in text
        rels = package.read_text("word/_rels/header1.xml.rels")
        assert 'Target="media/logo.png"' in rels

    def test_media_name_collision(self, package, png):
        package.write_part("word/media/logo.png", b"existing")
        embedder = ImageEmbedder(package)
        embedder.embed(DOCUMENT, IN_RUN, {"logo": png})
        embedder.finish()

        assert package.read_part("word/media/logo.png") == b"existing"
        assert package.read_part("word/media/logo_1.png") == png.buffer
        assert 'Target="media/logo_1.png"' in package.read_text("word/_rels/document.xml.rels")

    def test_media_shared_between_parts(self, package, png):
        embedder = ImageEmbedder(package)
        embedder.embed(DOCUMENT, IN_RUN, {"logo": png})
        embedder.embed("word/footer1.xml", IN_RUN, {"logo": png})

        media = [name for name in package.part_names if name.startswith("word/media/")]
        assert media == ["word/media/logo.png"]
        assert embedder.embedded == 2
