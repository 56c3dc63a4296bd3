"""
adf-engine — markdown agent-config reader.

File: src/adf_engine/migration/markdown.py
Last updated: 2026-10-18

Purpose
- Split a markdown agent-config file (CLAUDE.md, .cursorrules, ...) into
  H2-headed sections of typed elements that the migration classifier routes
  into ADF sections.

What should be included in this file
- Element kinds: rule bullets, fenced code blocks, table rows, prose runs.
- Rule strength detection: imperative (NEVER/ALWAYS/MUST...), advisory
  (prefer/should/avoid...), otherwise neutral.

Functional requirements
- Content before the first ``## `` heading becomes a preamble section with an
  empty heading, kept only when it holds elements.
- A leading ``# `` title line is skipped; fenced blocks swallow headings and
  bullets until the closing fence, and an unclosed fence runs to the end of
  the input.
- Table separator rows are dropped; blank lines are skipped, so consecutive
  prose lines accumulate into one element.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Final

from adf_engine.document.models import JSONValue


class ElementKind(StrEnum):
    RULE = "rule"
    CODE_BLOCK = "code-block"
    TABLE_ROW = "table-row"
    PROSE = "prose"


class RuleStrength(StrEnum):
    IMPERATIVE = "imperative"
    ADVISORY = "advisory"
    NEUTRAL = "neutral"


_IMPERATIVE_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"\bNEVER\b"),
    re.compile(r"\bALWAYS\b"),
    re.compile(r"\bMUST\b"),
    re.compile(r"\bDO NOT\b", re.IGNORECASE),
    re.compile(r"\bIMPORTANT\b"),
    re.compile(r"\bCRITICAL\b"),
    re.compile(r"\bREQUIRE[DS]?\b"),
)
_ADVISORY_PATTERNS: Final[tuple[re.Pattern[str], ...]] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\bprefer\b",
        r"\bshould\b",
        r"\bbias\b",
        r"\brecommend",
        r"\bavoid\b",
        r"\bconsider\b",
        r"\btry to\b",
    )
)

_FENCE_RE: Final[re.Pattern[str]] = re.compile(r"^```(?P<language>\w*)$")
_RULE_RE: Final[re.Pattern[str]] = re.compile(r"^\s*-\s+(?P<text>.*)$")
_TABLE_ROW_RE: Final[re.Pattern[str]] = re.compile(r"^\s*\|.*\|")
_TABLE_SEPARATOR_RE: Final[re.Pattern[str]] = re.compile(r"^\s*\|[\s\-:|]+\|$")


@dataclass(frozen=True, slots=True)
class MarkdownElement:
    kind: ElementKind
    content: str
    strength: RuleStrength | None = None
    language: str | None = None

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "kind": self.kind.value,
            "content": self.content,
            "strength": None if self.strength is None else self.strength.value,
            "language": self.language,
        }


@dataclass(frozen=True, slots=True)
class MarkdownSection:
    heading: str
    elements: tuple[MarkdownElement, ...] = ()

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "heading": self.heading,
            "elements": [element.to_dict() for element in self.elements],
        }


def detect_strength(text: str) -> RuleStrength:
    if any(pattern.search(text) for pattern in _IMPERATIVE_PATTERNS):
        return RuleStrength.IMPERATIVE
    if any(pattern.search(text) for pattern in _ADVISORY_PATTERNS):
        return RuleStrength.ADVISORY
    return RuleStrength.NEUTRAL


def parse_markdown_sections(text: str) -> tuple[MarkdownSection, ...]:
    """Split markdown into H2 sections of classified elements."""

    sections: list[MarkdownSection] = []
    heading = ""
    elements: list[MarkdownElement] = []
    fence_language: str | None = None
    fence_lines: list[str] = []

    def flush_code_block() -> None:
        if fence_lines:
            elements.append(
                MarkdownElement(
                    kind=ElementKind.CODE_BLOCK,
                    content="\n".join(fence_lines).rstrip("\n"),
                    language=fence_language or "",
                )
            )
        fence_lines.clear()

    def flush_section() -> None:
        nonlocal fence_language
        if fence_language is not None:
            flush_code_block()
            fence_language = None
        if elements or heading:
            sections.append(MarkdownSection(heading=heading, elements=tuple(elements)))
        elements.clear()

    for line in text.replace("\r\n", "\n").split("\n"):
        fence = _FENCE_RE.match(line)
        if fence is not None:
            if fence_language is None:
                fence_language = fence.group("language")
                fence_lines.clear()
            else:
                flush_code_block()
                fence_language = None
            continue
        if fence_language is not None:
            fence_lines.append(line)
            continue

        if line.startswith("## "):
            flush_section()
            heading = line[3:].strip()
            continue
        if line.startswith("# ") and not heading and not elements:
            continue

        rule = _RULE_RE.match(line)
        if rule is not None:
            rule_text = rule.group("text")
            elements.append(
                MarkdownElement(
                    kind=ElementKind.RULE, content=rule_text, strength=detect_strength(rule_text)
                )
            )
            continue
        if _TABLE_ROW_RE.match(line):
            if not _TABLE_SEPARATOR_RE.match(line):
                elements.append(MarkdownElement(kind=ElementKind.TABLE_ROW, content=line.strip()))
            continue
        if not line.strip():
            continue

        if elements and elements[-1].kind is ElementKind.PROSE:
            last = elements[-1]
            elements[-1] = replace(last, content=f"{last.content}\n{line}")
        else:
            elements.append(MarkdownElement(kind=ElementKind.PROSE, content=line))

    flush_section()
    return tuple(sections)


__all__ = [
    "ElementKind",
    "MarkdownElement",
    "MarkdownSection",
    "RuleStrength",
    "detect_strength",
    "parse_markdown_sections",
]
