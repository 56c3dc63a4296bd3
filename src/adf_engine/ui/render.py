"""Output rendering abstraction for the adf CLI.

File: src/adf_engine/ui/render.py
Last updated: 2026-10-18

Purpose
- Provide a thin plain-text rendering layer for human-readable command output.

What should be included in this file
- CLIRenderer class with methods for common output patterns.
- Factory function to create a renderer bound to an output stream.

Functional requirements
- Output is deterministic: no color, no terminal probing.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence


class CLIRenderer:
    """Thin CLI output renderer writing plain lines to one stream."""

    def __init__(self, *, stream: TextIO | None = None) -> None:
        self._stream = stream

    def _write(self, line: str) -> None:
        print(line, file=self._stream if self._stream is not None else sys.stdout)

    def heading(self, text: str) -> None:
        """Print a heading line with an underline."""

        self._write(text)
        self._write("=" * len(text))

    def kv(self, key: str, value: object) -> None:
        """Print an indented key: value pair."""

        self._write(f"  {key}: {value}")

    def text(self, line: str) -> None:
        self._write(line)

    def blank(self) -> None:
        self._write("")

    def section(self, title: str) -> None:
        """Print a section header with a preceding blank line."""

        self._write(f"\n{title}")

    def warning(self, text: str) -> None:
        self._write(f"  Warning: {text}")

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        """Print a bulleted list."""

        for entry in entries:
            self._write(f"  {prefix}{entry}")

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        title: str | None = None,
    ) -> None:
        """Print a formatted ASCII table."""

        if not rows:
            return

        col_count = len(headers)
        widths = [len(h) for h in headers]
        for row in rows:
            for i in range(min(len(row), col_count)):
                widths[i] = max(widths[i], len(str(row[i])))

        def _pad(cells: Sequence[str]) -> str:
            parts: list[str] = []
            for i in range(col_count):
                cell = str(cells[i]) if i < len(cells) else ""
                parts.append(cell.ljust(widths[i]))
            return "  ".join(parts).rstrip()

        if title:
            self.section(title)
        self._write(f"  {_pad(list(headers))}")
        self._write(f"  {'  '.join('-' * w for w in widths)}")
        for row in rows:
            self._write(f"  {_pad(list(row))}")

    def ok(self, label: str) -> None:
        self._write(f"  OK    {label}")

    def warn(self, label: str) -> None:
        self._write(f"  WARN  {label}")

    def fail(self, label: str) -> None:
        self._write(f"  FAIL  {label}")


def create_renderer(*, stream: TextIO | None = None) -> CLIRenderer:
    """Create a CLI renderer bound to ``stream`` (stdout when omitted)."""

    return CLIRenderer(stream=stream)


__all__ = ["CLIRenderer", "create_renderer"]
