"""
adf-engine — unit tests for the canonical formatter

File: tests/unit/syntax/test_formatter.py
Last updated: 2026-10-18

Purpose
- Verify canonical rendering: ordering, glyph injection, body layout, and idempotence.

What this test file should cover
- Version line and blank-line separation.
- Canonical key ranking with unknown keys kept in original relative order.
- Header layout with decoration and weight.
- Body layout per content variant.
- Property: formatting a reparsed canonical document reproduces it exactly.
"""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from adf_engine.document import (
    Content,
    Document,
    ListContent,
    MapContent,
    MapEntry,
    MetricContent,
    MetricEntry,
    Section,
    TextContent,
    Weight,
)
from adf_engine.syntax import (
    check_canonical,
    default_decoration,
    format_document,
    parse,
    section_rank,
)

pytestmark = pytest.mark.unit


def test_minimal_document_gets_version_and_glyph() -> None:
    assert format_document(parse("TASK: Build feature")) == "ADF: 0.1\n\n\U0001f3af TASK: Build feature\n"


def test_empty_document_is_version_line_only() -> None:
    assert format_document(Document()) == "ADF: 0.1\n"


def test_known_keys_sort_first_and_unknown_keys_keep_order() -> None:
    doc = Document(
        sections=(
            Section(key="ZETA", content=TextContent("z")),
            Section(key="STATE", content=TextContent("s")),
            Section(key="ALPHA", content=TextContent("a")),
            Section(key="TASK", content=TextContent("t")),
        )
    )
    rendered = format_document(doc)
    keys = parse(rendered).keys()

    assert keys == ("TASK", "STATE", "ZETA", "ALPHA")
    assert section_rank("TASK") < section_rank("STATE") < section_rank("ZETA")
    assert section_rank("ZETA") == section_rank("ALPHA")


def test_existing_decoration_is_kept_and_weight_rendered() -> None:
    doc = Document(
        sections=(
            Section(
                key="CONSTRAINTS",
                content=ListContent(("No new deps",)),
                weight=Weight.LOAD_BEARING,
            ),
            Section(key="CUSTOM", content=TextContent("x"), decoration="★", weight=Weight.ADVISORY),
            Section(key="PLAIN", content=TextContent("y")),
        )
    )

    assert format_document(doc) == (
        "ADF: 0.1\n"
        "\n"
        "⚠️ CONSTRAINTS [load-bearing]:\n"
        "  - No new deps\n"
        "\n"
        "★ CUSTOM [advisory]: x\n"
        "\n"
        "PLAIN: y\n"
    )
    assert default_decoration("PLAIN") is None


def test_body_layout_per_variant() -> None:
    doc = Document(
        sections=(
            Section(key="CONTEXT", content=TextContent("line one\n\nline two"), decoration="★"),
            Section(key="RULES", content=ListContent(("a", "")), decoration="★"),
            Section(
                key="BUDGET",
                content=MapContent((MapEntry("MAX_TOKENS", "4000"), MapEntry("NOTE", ""))),
            ),
            Section(
                key="METRICS",
                content=MetricContent(
                    (
                        MetricEntry("entry_loc", 142, 200, "lines"),
                        MetricEntry("ratio", 0.5, 1.5),
                    )
                ),
            ),
            Section(key="EMPTY", content=TextContent("")),
        )
    )

    assert format_document(doc) == (
        "ADF: 0.1\n"
        "\n"
        "★ CONTEXT:\n"
        "  line one\n"
        "\n"
        "  line two\n"
        "\n"
        "★ RULES:\n"
        "  - a\n"
        "  -\n"
        "\n"
        "BUDGET:\n"
        "  MAX_TOKENS: 4000\n"
        "  NOTE:\n"
        "\n"
        "METRICS:\n"
        "  entry_loc: 142 / 200 [lines]\n"
        "  ratio: 0.5 / 1.5\n"
        "\n"
        "EMPTY:\n"
    )


def test_check_canonical() -> None:
    assert not check_canonical("TASK: x")
    assert check_canonical("ADF: 0.1\n\n\U0001f3af TASK: x\n")
    assert not check_canonical("ADF: 0.1\n\n\U0001f3af TASK: x\n\n")


def test_noisy_input_normalizes() -> None:
    noisy = (
        "\ufeffADF: 0.1\r\n"
        "stray prose\r\n"
        "RULES:   \r\n"
        "\t* first\r\n"
        "\t+ second\r\n"
        "\r\n"
        "TASK:    Ship it\r\n"
    )
    assert format_document(parse(noisy)) == (
        "ADF: 0.1\n"
        "\n"
        "\U0001f3af TASK: Ship it\n"
        "\n"
        "\U0001f4d0 RULES:\n"
        "  - first\n"
        "  - second\n"
    )


_KEYS = ("TASK", "ROLE", "CONTEXT", "CONSTRAINTS", "RULES", "STATE", "METRICS", "CUSTOM", "NOTES")
_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 .,_/()-"

_line = st.text(alphabet=_ALPHABET, max_size=24).map(str.strip)
_map_key = st.from_regex(r"[A-Z][A-Z0-9_]{0,8}", fullmatch=True)
_metric_key = st.from_regex(r"[a-z][a-z0-9_]{0,8}", fullmatch=True)
_unit = st.sampled_from(["", "lines", "kb", "ms"])

_contents: st.SearchStrategy[Content] = st.one_of(
    _line.map(TextContent),
    st.lists(_line, max_size=4).map(lambda items: ListContent(tuple(items))),
    st.lists(st.builds(MapEntry, key=_map_key, value=_line), max_size=4).map(
        lambda entries: MapContent(tuple(entries))
    ),
    st.lists(
        st.builds(
            MetricEntry,
            key=_metric_key,
            value=st.integers(min_value=-1000, max_value=100_000),
            ceiling=st.integers(min_value=0, max_value=100_000),
            unit=_unit,
        ),
        max_size=4,
    ).map(lambda entries: MetricContent(tuple(entries))),
)

_sections = st.builds(
    Section,
    key=st.sampled_from(_KEYS),
    content=_contents,
    decoration=st.sampled_from([None, "★", "⚠️"]),
    weight=st.sampled_from([None, Weight.LOAD_BEARING, Weight.ADVISORY]),
)

_documents = st.lists(_sections, max_size=6).map(lambda sections: Document(sections=tuple(sections)))


@settings(max_examples=50, deadline=None)
@given(doc=_documents)
def test_formatting_is_idempotent(doc: Document) -> None:
    once = format_document(doc)

    assert format_document(parse(once)) == once
    assert check_canonical(once)
    assert all(line == line.rstrip() for line in once.split("\n"))
