"""
adf-engine — structured engine errors.

File: src/adf_engine/errors.py
Last updated: 2026-10-18

Purpose
- Define the three terminal failure kinds raised by the engine.

Functional requirements
- Each error carries structured context (line, operation, section, module path)
  in addition to a rendered message.
- Errors never imply an exit code; the CLI boundary decides how to surface them.
"""

from __future__ import annotations


class AdfError(Exception):
    """Base class for every failure raised by the ADF engine."""

    message: str

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ParseError(AdfError):
    """Malformed or unsupported version declaration."""

    line: int | None

    def __init__(self, message: str, *, line: int | None = None) -> None:
        self.line = line
        rendered = message if line is None else f"line {line}: {message}"
        super().__init__(rendered)
        self.message = message


class PatchError(AdfError):
    """An operation referenced an invalid target."""

    op: str
    section: str
    detail: str
    index: int | None
    valid_range: tuple[int, int] | None
    op_index: int | None

    def __init__(
        self,
        *,
        op: str,
        section: str,
        detail: str,
        index: int | None = None,
        valid_range: tuple[int, int] | None = None,
        op_index: int | None = None,
    ) -> None:
        self.op = op
        self.section = section
        self.detail = detail
        self.index = index
        self.valid_range = valid_range
        self.op_index = op_index
        prefix = op if op_index is None else f"operation {op_index} ({op})"
        super().__init__(f"{prefix}: {detail}")


class BundleError(AdfError):
    """A resolved module could not be read, parsed, or merged."""

    module_path: str | None

    def __init__(self, message: str, *, module_path: str | None = None) -> None:
        self.module_path = module_path
        super().__init__(message)


__all__ = ["AdfError", "BundleError", "ParseError", "PatchError"]
