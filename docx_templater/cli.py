"""
Command-line interface for DOCX Templater.

Usage:
    docx-templater render template.docx data.json --output out.docx
    docx-templater inspect template.docx
    docx-templater inspect template.docx --json
"""

import argparse
import base64
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .api import extract_placeholders, render_to_file
from .config import TemplateConfig
from .exceptions import StructuralError
from .utils.logger import LOG_LEVELS, setup_logging


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="docx-templater",
        description="DOCX Templater - fill DOCX templates with JSON data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  docx-templater render template.docx data.json -o out.docx
  docx-templater inspect template.docx --json
        """,
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Log level (default: WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    render_parser = subparsers.add_parser("render", help="Render a template with JSON data")
    render_parser.add_argument("template", help="Template DOCX file")
    render_parser.add_argument("data", help="JSON file with the data tree")
    render_parser.add_argument(
        "-o", "--output",
        help="Output file path (default: <template>_rendered.docx)"
    )
    render_parser.add_argument(
        "--max-image-width",
        type=float,
        help="Maximum width in inches of automatically sized images (default: 6)"
    )
    render_parser.add_argument(
        "--max-image-height",
        type=float,
        help="Maximum height in inches of automatically sized images (default: 6)"
    )
    render_parser.add_argument(
        "--no-escape",
        action="store_true",
        help="Insert values without XML escaping"
    )

    inspect_parser = subparsers.add_parser("inspect", help="List the placeholders of a template")
    inspect_parser.add_argument("template", help="Template DOCX file")
    inspect_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON"
    )

    return parser


def load_data(path: Path) -> Dict[str, Any]:
    """
    Load a data tree from JSON.

    Image entries may reference a file instead of carrying bytes::

        {"logo": {"type": "image", "path": "logo.png", "widthInches": 2}}

    Paths are relative to the JSON file. ``"base64"`` is accepted as well.
    """
    with open(path, "r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError("Data file must contain a JSON object")

    for key, value in data.items():
        if not (isinstance(value, dict) and value.get("type") == "image"):
            continue
        image = dict(value)
        if "path" in image:
            image_path = path.parent / image.pop("path")
            image["buffer"] = image_path.read_bytes()
            image.setdefault("extension", image_path.suffix.lstrip("."))
        elif "base64" in image:
            image["buffer"] = base64.b64decode(image.pop("base64"))
        data[key] = image

    return data


def cmd_render(args, console: Console) -> int:
    """Handle render command."""
    template_path = Path(args.template)
    data_path = Path(args.data)
    output_path = Path(args.output) if args.output else template_path.with_name(
        f"{template_path.stem}_rendered.docx"
    )

    try:
        data = load_data(data_path)
        config = TemplateConfig.from_dict({
            "max_image_width_inches": args.max_image_width,
            "max_image_height_inches": args.max_image_height,
            "escape_values": False if args.no_escape else None,
        })
    except (OSError, ValueError) as exc:
        console.print(f"[red]✗ Invalid input: {escape(str(exc))}[/red]")
        return 1

    try:
        result = render_to_file(template_path, data, output_path, config)
    except StructuralError as exc:
        console.print(f"[red]✗ {escape(str(exc))}[/red]")
        return 1

    table = Table(title="Rendering statistics")
    table.add_column("Item", style="cyan")
    table.add_column("Count", style="magenta", justify="right")
    for name, count in result.stats.to_dict().items():
        table.add_row(name, str(count))
    console.print(table)

    for warning in result.warnings:
        console.print(f"[yellow]! {escape(warning)}[/yellow]")
    console.print(f"[green]✓ Saved: {escape(str(output_path))}[/green]")
    return 0


def cmd_inspect(args, console: Console) -> int:
    """Handle inspect command."""
    try:
        placeholders = extract_placeholders(Path(args.template))
    except StructuralError as exc:
        console.print(f"[red]✗ {escape(str(exc))}[/red]")
        return 1

    if args.json:
        payload = [
            {"name": info.name, "type": info.type, "count": info.count, "parts": info.parts}
            for info in placeholders
        ]
        console.print_json(json.dumps(payload))
        return 0

    table = Table(title=f"Placeholders in {escape(args.template)}")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Count", justify="right")
    table.add_column("Parts")
    for info in placeholders:
        table.add_row(info.name, info.type, str(info.count), ", ".join(info.parts))
    console.print(table)
    return 0


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)
    console = console or Console()

    setup_logging(args.log_level)

    if args.command == "render":
        return cmd_render(args, console)
    elif args.command == "inspect":
        return cmd_inspect(args, console)

    # No command specified, show help
    parser.print_help()
    return 0
