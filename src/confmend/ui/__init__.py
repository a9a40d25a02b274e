"""Command-line surface: argparse router and rich rendering."""

from confmend.ui.cli import CLIError, build_parser, parse_assignments, run_cli
from confmend.ui.render import CLIRenderer, create_renderer

__all__ = [
    "CLIError",
    "CLIRenderer",
    "build_parser",
    "create_renderer",
    "parse_assignments",
    "run_cli",
]
