"""
adf-engine — unit tests for the markdown agent-config reader

File: tests/unit/migration/test_markdown.py
Last updated: 2026-10-18

Purpose
- Verify how a markdown agent-config file is split into sections and typed
  elements.

What this test file should cover
- H2 splitting, the preamble section, and the skipped title line.
- Fenced code blocks, table rows, and prose accumulation.
- Rule strength detection.
"""

from __future__ import annotations

import pytest

from adf_engine.migration import (
    ElementKind,
    MarkdownElement,
    MarkdownSection,
    RuleStrength,
    detect_strength,
    parse_markdown_sections,
)

pytestmark = pytest.mark.unit

GUIDE = """# Project guide

Intro line.

## Conventions
- NEVER commit secrets
- Prefer small functions
- Use snake_case

## Build
```bash
make build
make test
```

| Command | Purpose |
|---|---|
| make | build |
"""


def test_sections_split_on_h2_with_preamble() -> None:
    sections = parse_markdown_sections(GUIDE)

    assert [section.heading for section in sections] == ["", "Conventions", "Build"]
    assert sections[0].elements == (MarkdownElement(kind=ElementKind.PROSE, content="Intro line."),)


def test_rules_carry_detected_strength() -> None:
    rules = parse_markdown_sections(GUIDE)[1].elements

    assert [(rule.kind, rule.content, rule.strength) for rule in rules] == [
        (ElementKind.RULE, "NEVER commit secrets", RuleStrength.IMPERATIVE),
        (ElementKind.RULE, "Prefer small functions", RuleStrength.ADVISORY),
        (ElementKind.RULE, "Use snake_case", RuleStrength.NEUTRAL),
    ]


def test_code_block_and_table_rows() -> None:
    elements = parse_markdown_sections(GUIDE)[2].elements

    assert elements == (
        MarkdownElement(
            kind=ElementKind.CODE_BLOCK, content="make build\nmake test", language="bash"
        ),
        MarkdownElement(kind=ElementKind.TABLE_ROW, content="| Command | Purpose |"),
        MarkdownElement(kind=ElementKind.TABLE_ROW, content="| make | build |"),
    )


def test_title_only_document_has_no_sections() -> None:
    assert parse_markdown_sections("# Title\n\n") == ()


def test_empty_headed_section_is_kept() -> None:
    assert parse_markdown_sections("## Empty\n") == (MarkdownSection(heading="Empty"),)


def test_fence_swallows_headings_and_bullets() -> None:
    text = "## A\n```\n## not a heading\n- not a rule\n```\n- rule\n"

    (section,) = parse_markdown_sections(text)

    assert section.elements == (
        MarkdownElement(
            kind=ElementKind.CODE_BLOCK,
            content="## not a heading\n- not a rule",
            language="",
        ),
        MarkdownElement(kind=ElementKind.RULE, content="rule", strength=RuleStrength.NEUTRAL),
    )


def test_unclosed_fence_runs_to_end_of_input() -> None:
    (section,) = parse_markdown_sections("## A\n```py\nx = 1\n## B\n")

    assert section.elements == (
        MarkdownElement(kind=ElementKind.CODE_BLOCK, content="x = 1\n## B", language="py"),
    )


def test_consecutive_prose_accumulates_across_blank_lines() -> None:
    text = "## Notes\nFirst line.\n\nSecond line.\n- a rule\nThird line.\n"

    elements = parse_markdown_sections(text)[0].elements

    assert [element.kind for element in elements] == [
        ElementKind.PROSE,
        ElementKind.RULE,
        ElementKind.PROSE,
    ]
    assert elements[0].content == "First line.\nSecond line."
    assert elements[2].content == "Third line."


def test_crlf_input_matches_lf_input() -> None:
    assert parse_markdown_sections(GUIDE.replace("\n", "\r\n")) == parse_markdown_sections(GUIDE)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("ALWAYS run the tests", RuleStrength.IMPERATIVE),
        ("Do not push to main", RuleStrength.IMPERATIVE),
        ("Tests are REQUIRED", RuleStrength.IMPERATIVE),
        ("never mind the lint output", RuleStrength.NEUTRAL),
        ("You should add docstrings", RuleStrength.ADVISORY),
        ("AVOID global state", RuleStrength.ADVISORY),
        ("Try to keep diffs small", RuleStrength.ADVISORY),
        ("Use tabs", RuleStrength.NEUTRAL),
    ],
)
def test_detect_strength(text: str, expected: RuleStrength) -> None:
    assert detect_strength(text) is expected
