"""Output rendering for the confmend CLI.

File: src/confmend/ui/render.py

Purpose
- Provide a thin rendering layer over ``rich`` for human-readable CLI output.
- Respect the NO_COLOR environment variable and the --no-color CLI flag.

Functional requirements
- Machine-readable output (``--json``) bypasses this module entirely.
- Raw document text is written verbatim: no wrapping, markup, or highlighting.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Any, TextIO

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Sequence


def _color_allowed(no_color_flag: bool) -> bool:
    if no_color_flag:
        return False
    return not os.environ.get("NO_COLOR", "")


class CLIRenderer:
    """Rich-backed CLI output renderer."""

    def __init__(self, *, no_color: bool = False, file: TextIO | None = None) -> None:
        color = _color_allowed(no_color)
        self._console = Console(
            file=file if file is not None else sys.stdout,
            no_color=not color,
            color_system="auto" if color else None,
            highlight=color,
            soft_wrap=True,
        )

    @property
    def console(self) -> Console:
        return self._console

    def heading(self, text: str) -> None:
        self._console.print(text, style="bold", markup=False)

    def kv(self, key: str, value: object) -> None:
        self._console.print(f"{key}: {value}", markup=False)

    def text(self, line: str) -> None:
        self._console.print(line, markup=False)

    def warning(self, text: str) -> None:
        self._console.print(f"Warning: {text}", style="yellow", markup=False)

    def success(self, text: str) -> None:
        self._console.print(text, style="green", markup=False)

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        for entry in entries:
            self._console.print(f"  {prefix}{entry}", markup=False)

    def raw(self, text: str) -> None:
        """Write ``text`` exactly as given."""

        self._console.out(text, end="", highlight=False)

    def document(self, payload: Any) -> None:
        """Pretty-print a JSON-compatible value."""

        self._console.print_json(data=payload, indent=2, highlight=self._console.is_terminal)

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        title: str | None = None,
    ) -> None:
        if not rows:
            return
        table = Table(title=title, show_lines=False, header_style="bold")
        for header in headers:
            table.add_column(header, overflow="fold")
        for row in rows:
            table.add_row(*(str(cell) for cell in row))
        self._console.print(table)


def create_renderer(*, no_color: bool = False, file: TextIO | None = None) -> CLIRenderer:
    """Factory function for creating a CLI renderer with appropriate settings."""

    return CLIRenderer(no_color=no_color, file=file)


__all__ = ["CLIRenderer", "create_renderer"]
