"""
Entry point for running DOCX Templater as a module.

Usage:
    python -m docx_templater render template.docx data.json -o out.docx
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
