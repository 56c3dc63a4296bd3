"""
adf-engine — tolerant ADF parser.

File: src/adf_engine/syntax/parser.py
Last updated: 2026-10-18

Purpose
- Turn raw ADF text into an immutable ``Document``.

What should be included in this file
- Line normalization (line endings, trailing whitespace, byte-order mark).
- Version line handling with line-numbered ``ParseError`` failures.
- A lexing pass that splits text into raw sections at header lines.
- A classification pass that maps each body to exactly one content variant.

Functional requirements
- Tolerate decorative noise: unknown glyphs, lines before the first header,
  blank padding, inconsistent indentation.
- Apply the content disambiguation rule in a fixed order:
  List, then Metric, then Map, otherwise Text.
- Empty input, or a lone version line, yields a Document with no sections.

Non-functional requirements
- Pure and linear in input size; body text is never evaluated.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Final

from adf_engine.constants import SUPPORTED_VERSIONS
from adf_engine.document.models import (
    GLYPH_RE,
    Content,
    Document,
    ListContent,
    MapContent,
    MapEntry,
    MetricContent,
    MetricEntry,
    Number,
    Section,
    TextContent,
    Weight,
)
from adf_engine.errors import ParseError

_VERSION_RE: Final[re.Pattern[str]] = re.compile(r"^ADF\s*:(?P<value>.*)$", re.IGNORECASE)
_HEADER_RE: Final[re.Pattern[str]] = re.compile(
    rf"^(?:(?P<glyph>{GLYPH_RE.pattern})\s+)?"
    r"(?P<key>[A-Z][A-Z0-9_]*)"
    r"(?:\s*\[(?P<weight>load-bearing|advisory)\])?"
    r"\s*:(?P<rest>.*)$"
)
_BULLET_RE: Final[re.Pattern[str]] = re.compile(r"^\s*[-*+•](?:\s+(?P<item>.*))?$")
_NUMBER: Final[str] = r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
_METRIC_RE: Final[re.Pattern[str]] = re.compile(
    r"^\s*(?P<key>[a-z][a-z0-9_]*)\s*:\s*"
    rf"(?P<value>{_NUMBER})\s*/\s*(?P<ceiling>{_NUMBER})"
    r"(?:\s*\[(?P<bracket>.*)\]|\s+(?P<bare>.*))?$"
)
_MAP_RE: Final[re.Pattern[str]] = re.compile(r"^\s*(?P<key>[A-Z][A-Z0-9_]*)\s*:(?P<value>.*)$")
_INTEGER_RE: Final[re.Pattern[str]] = re.compile(r"^[+-]?[0-9]+$")


@dataclass(frozen=True, slots=True)
class _RawSection:
    key: str
    decoration: str | None
    weight: Weight | None
    inline: str
    body: tuple[str, ...]


def parse(text: str) -> Document:
    """Parse ADF text into a Document.

    Raises ``ParseError`` only for a malformed or unsupported version declaration;
    every other irregularity is absorbed.
    """

    lines = _normalize_lines(text)
    start = _consume_version(lines)
    raw_sections = _split_sections(lines, start)
    return Document(sections=tuple(_build_section(raw) for raw in raw_sections))


def _normalize_lines(text: str) -> list[str]:
    if text.startswith("\ufeff"):
        text = text[1:]
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return [line.rstrip() for line in normalized.split("\n")]


def _consume_version(lines: list[str]) -> int:
    for index, line in enumerate(lines):
        if not line.strip():
            continue
        match = _VERSION_RE.match(line)
        if match is None:
            return index
        version = match.group("value").strip()
        if not version:
            raise ParseError("malformed ADF version declaration", line=index + 1)
        if version not in SUPPORTED_VERSIONS:
            raise ParseError(f"unsupported ADF version: {version}", line=index + 1)
        return index + 1
    return len(lines)


def _split_sections(lines: list[str], start: int) -> list[_RawSection]:
    sections: list[_RawSection] = []
    header: re.Match[str] | None = None
    body: list[str] = []

    def flush() -> None:
        if header is None:
            return
        weight = header.group("weight")
        sections.append(
            _RawSection(
                key=header.group("key"),
                decoration=header.group("glyph"),
                weight=None if weight is None else Weight(weight),
                inline=header.group("rest").strip(),
                body=_trim_blank_edges(body),
            )
        )

    for index in range(start, len(lines)):
        line = lines[index]
        match = _HEADER_RE.match(line)
        if match is not None:
            flush()
            header = match
            body = []
            continue
        if header is not None:
            body.append(line)
        # Lines before the first header are decorative noise.

    flush()
    return sections


def _trim_blank_edges(lines: list[str]) -> tuple[str, ...]:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return tuple(lines[start:end])


def _dedent(line: str) -> str:
    if line.startswith("  "):
        return line[2:]
    if line.startswith(("\t", " ")):
        return line[1:]
    return line


def _build_section(raw: _RawSection) -> Section:
    return Section(
        key=raw.key,
        content=classify_body(raw.inline, [_dedent(line) for line in raw.body]),
        decoration=raw.decoration,
        weight=raw.weight,
    )


def classify_body(inline: str, body: list[str]) -> Content:
    """Classify an inline value plus dedented body lines into one content variant."""

    if not body:
        return TextContent(inline)

    lines = [inline, *body] if inline else list(body)
    filled = [line for line in lines if line.strip()]

    items = _as_list_items(filled)
    if items is not None:
        return ListContent(items)

    metrics = _as_metric_entries(filled)
    if metrics is not None:
        return MetricContent(metrics)

    entries = _as_map_entries(filled)
    if entries is not None:
        return MapContent(entries)

    return TextContent("\n".join(lines).strip())


def _as_list_items(lines: list[str]) -> tuple[str, ...] | None:
    items: list[str] = []
    for line in lines:
        match = _BULLET_RE.match(line)
        if match is None:
            return None
        items.append((match.group("item") or "").strip())
    return tuple(items)


def _as_metric_entries(lines: list[str]) -> tuple[MetricEntry, ...] | None:
    entries: list[MetricEntry] = []
    for line in lines:
        entry = parse_metric_line(line)
        if entry is None:
            return None
        entries.append(entry)
    return tuple(entries)


def _as_map_entries(lines: list[str]) -> tuple[MapEntry, ...] | None:
    entries: list[MapEntry] = []
    for line in lines:
        match = _MAP_RE.match(line)
        if match is None:
            return None
        entries.append(MapEntry(key=match.group("key"), value=match.group("value").strip()))
    return tuple(entries)


def parse_metric_line(line: str) -> MetricEntry | None:
    """Parse ``key: value / ceiling [unit]``; ``None`` when the line is not metric-shaped."""

    match = _METRIC_RE.match(line)
    if match is None:
        return None
    value = _parse_number(match.group("value"))
    ceiling = _parse_number(match.group("ceiling"))
    if value is None or ceiling is None:
        return None
    unit = match.group("bracket")
    if unit is None:
        unit = match.group("bare") or ""
    return MetricEntry(key=match.group("key"), value=value, ceiling=ceiling, unit=unit.strip())


def _parse_number(text: str) -> Number | None:
    try:
        if _INTEGER_RE.match(text):
            return int(text)
        parsed = float(text)
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


__all__ = ["classify_body", "parse", "parse_metric_line"]
