"""
Tests for CLI functionality.
"""

import base64
import io
import json

import pytest
from rich.console import Console

from docx_templater import __version__
from docx_templater.cli import create_parser, load_data, main


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def template_path(temp_dir, make_docx, paragraph_xml):
    path = temp_dir / "letter.docx"
    path.write_bytes(make_docx(paragraph_xml(["Dear {name} {logo} {#items}{v}{/items}"])))
    return path


def _write_json(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestParser:
    """Test argument parsing."""

    def test_render_arguments(self):
        args = create_parser().parse_args(
            ["render", "t.docx", "d.json", "-o", "out.docx", "--max-image-width", "2", "--no-escape"]
        )
        assert args.command == "render"
        assert args.output == "out.docx"
        assert args.max_image_width == 2.0
        assert args.max_image_height is None
        assert args.no_escape

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--log-level", "LOUD", "inspect", "t.docx"])


class TestLoadData:
    """Test JSON data loading."""

    def test_image_from_path(self, temp_dir, image_bytes):
        (temp_dir / "logo.png").write_bytes(image_bytes(3, 3))
        path = _write_json(temp_dir / "data.json", {
            "name": "Amy",
            "logo": {"type": "image", "path": "logo.png", "widthInches": 1},
        })

        data = load_data(path)

        assert data["name"] == "Amy"
        assert data["logo"]["buffer"] == (temp_dir / "logo.png").read_bytes()
        assert data["logo"]["extension"] == "png"
        assert "path" not in data["logo"]

    def test_image_from_base64(self, temp_dir):
        path = _write_json(temp_dir / "data.json", {
            "logo": {"type": "image", "base64": base64.b64encode(b"GIF89a").decode(), "extension": "gif"},
        })
        assert load_data(path)["logo"]["buffer"] == b"GIF89a"

    def test_top_level_must_be_object(self, temp_dir):
        path = _write_json(temp_dir / "data.json", [1, 2])
        with pytest.raises(ValueError):
            load_data(path)


class TestCommands:
    """Test render and inspect commands."""

    def test_render(self, temp_dir, template_path, image_bytes, console):
        (temp_dir / "logo.png").write_bytes(image_bytes(20, 10))
        data_path = _write_json(temp_dir / "data.json", {
            "name": "Amy",
            "logo": {"type": "image", "path": "logo.png"},
            "items": [{"v": "1"}],
        })
        output = temp_dir / "out.docx"

        code = main(["render", str(template_path), str(data_path), "-o", str(output)], console=console)

        assert code == 0
        assert output.exists()
        text = console.file.getvalue()
        assert "Rendering statistics" in text
        assert "Saved" in text

    def test_render_default_output(self, temp_dir, template_path, console):
        data_path = _write_json(temp_dir / "data.json", {"name": "Amy"})

        assert main(["render", str(template_path), str(data_path)], console=console) == 0
        assert (temp_dir / "letter_rendered.docx").exists()
        assert "Array 'items' not found in data" in console.file.getvalue()

    def test_render_missing_template(self, temp_dir, console):
        data_path = _write_json(temp_dir / "data.json", {})
        code = main(["render", str(temp_dir / "none.docx"), str(data_path)], console=console)

        assert code == 1
        assert "File not found" in console.file.getvalue()

    def test_render_missing_data(self, temp_dir, template_path, console):
        code = main(["render", str(template_path), str(temp_dir / "none.json")], console=console)
        assert code == 1
        assert "Invalid input" in console.file.getvalue()

    def test_inspect_json(self, template_path, console):
        assert main(["inspect", str(template_path), "--json"], console=console) == 0

        payload = json.loads(console.file.getvalue())
        names = {(entry["name"], entry["type"]) for entry in payload}
        assert names == {("name", "text"), ("logo", "text"), ("items", "loop"), ("v", "text")}
        assert payload[0]["parts"] == ["word/document.xml"]

    def test_inspect_table(self, template_path, console):
        assert main(["inspect", str(template_path)], console=console) == 0
        assert "items" in console.file.getvalue()

    def test_no_command_prints_help(self, capsys, console):
        assert main([], console=console) == 0
        assert "usage:" in capsys.readouterr().out
