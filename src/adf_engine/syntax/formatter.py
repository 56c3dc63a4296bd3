"""
adf-engine — canonical ADF formatter.

File: src/adf_engine/syntax/formatter.py
Last updated: 2026-10-18

Purpose
- Render a ``Document`` as canonical ADF text.

Functional requirements
- Emit the version line first, then each section preceded by one blank line.
- Order sections by the fixed canonical key rank; unknown keys follow in their
  original relative order.
- Inject the default glyph for known keys that carry no decoration.
- ``format_document(parse(format_document(d))) == format_document(d)`` for every
  parsed document ``d``.

Non-functional requirements
- Pure, total, deterministic; output never carries trailing whitespace.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

from adf_engine.constants import BODY_INDENT, CANONICAL_KEY_ORDER, STANDARD_DECORATIONS
from adf_engine.document.models import (
    Content,
    Document,
    ListContent,
    MapContent,
    MetricContent,
    Section,
    TextContent,
    format_number,
)
from adf_engine.syntax.parser import parse

_KEY_RANK: Final[dict[str, int]] = {key: rank for rank, key in enumerate(CANONICAL_KEY_ORDER)}
UNKNOWN_KEY_RANK: Final[int] = len(CANONICAL_KEY_ORDER)


def section_rank(key: str) -> int:
    """Total rank function: canonical keys by table position, everything else after them."""

    return _KEY_RANK.get(key, UNKNOWN_KEY_RANK)


def canonical_sections(sections: Iterable[Section]) -> tuple[Section, ...]:
    return tuple(sorted(sections, key=lambda section: section_rank(section.key)))


def default_decoration(key: str) -> str | None:
    return STANDARD_DECORATIONS.get(key)


def format_document(doc: Document) -> str:
    """Render ``doc`` as canonical text ending in a single newline."""

    lines = [f"ADF: {doc.version}"]
    for section in canonical_sections(doc.sections):
        lines.append("")
        lines.extend(format_section(section))
    return "\n".join(lines) + "\n"


def format_section(section: Section) -> list[str]:
    header = _header(section)
    content = section.content
    if isinstance(content, TextContent):
        value = content.value
        if not value:
            return [header]
        if "\n" not in value:
            return [f"{header} {value}".rstrip()]
        return [header, *_indent(value.split("\n"))]
    return [header, *_indent(_body_lines(content))]


def _header(section: Section) -> str:
    glyph = section.decoration
    if glyph is None:
        glyph = default_decoration(section.key)
    parts = [section.key] if glyph is None else [glyph, section.key]
    if section.weight is not None:
        parts.append(f"[{section.weight.value}]")
    return " ".join(parts) + ":"


def _body_lines(content: Content) -> list[str]:
    if isinstance(content, ListContent):
        return [f"- {item}" for item in content.items]
    if isinstance(content, MapContent):
        return [f"{entry.key}: {entry.value}" for entry in content.entries]
    if isinstance(content, MetricContent):
        rendered: list[str] = []
        for entry in content.entries:
            line = f"{entry.key}: {format_number(entry.value)} / {format_number(entry.ceiling)}"
            if entry.unit:
                line = f"{line} [{entry.unit}]"
            rendered.append(line)
        return rendered
    return content.value.split("\n")


def _indent(lines: Iterable[str]) -> list[str]:
    return [f"{BODY_INDENT}{line}".rstrip() if line.strip() else "" for line in lines]


def check_canonical(text: str) -> bool:
    """Report whether ``text`` is already in canonical form."""

    return text == format_document(parse(text))


__all__ = [
    "UNKNOWN_KEY_RANK",
    "canonical_sections",
    "check_canonical",
    "default_decoration",
    "format_document",
    "format_section",
    "section_rank",
]
