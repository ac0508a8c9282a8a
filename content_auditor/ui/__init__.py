"""User interface modules.

Public API:
    - main: CLI entry point function
    - build_parser: argparse parser used by main
"""

from __future__ import annotations

from content_auditor.ui.cli import main, build_parser

__all__ = ["main", "build_parser"]
