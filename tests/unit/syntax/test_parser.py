"""
adf-engine — unit tests for the tolerant parser

File: tests/unit/syntax/test_parser.py
Last updated: 2026-10-18

Purpose
- Verify version handling, section splitting, and body classification.

What this test file should cover
- Version line acceptance and line-numbered failures.
- Glyph and weight annotations on headers; noise tolerance.
- List, Metric, Map, Text disambiguation order and the inline-value rule.
- Line ending, byte-order mark, and indentation normalization.
"""

from __future__ import annotations

import pytest

from adf_engine.document import (
    Document,
    ListContent,
    MapContent,
    MapEntry,
    MetricContent,
    MetricEntry,
    TextContent,
    Weight,
)
from adf_engine.errors import ParseError
from adf_engine.syntax import classify_body, parse, parse_metric_line

pytestmark = pytest.mark.unit


def test_single_inline_section_parses_as_text() -> None:
    doc = parse("TASK: Build feature")

    assert doc.version == "0.1"
    assert doc.keys() == ("TASK",)
    section = doc.sections[0]
    assert section.content == TextContent("Build feature")
    assert section.decoration is None
    assert section.weight is None


@pytest.mark.parametrize("text", ["", "\n\n", "ADF: 0.1\n", "  \nADF: 0.1"])
def test_empty_or_version_only_input_has_no_sections(text: str) -> None:
    assert parse(text) == Document()


def test_version_line_is_case_insensitive() -> None:
    assert parse("adf: 0.1\nTASK: x").keys() == ("TASK",)


def test_unsupported_version_reports_line() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("\nADF: 0.2\nTASK: x")

    assert excinfo.value.line == 2
    assert excinfo.value.message == "unsupported ADF version: 0.2"
    assert str(excinfo.value) == "line 2: unsupported ADF version: 0.2"


def test_empty_version_is_malformed() -> None:
    with pytest.raises(ParseError, match="malformed ADF version declaration") as excinfo:
        parse("ADF:\nTASK: x")
    assert excinfo.value.line == 1


def test_noise_before_first_header_is_ignored() -> None:
    text = "# Project context\nsome prose written by hand\n\nTASK: x\n"
    assert parse(text).keys() == ("TASK",)


def test_glyph_and_weight_annotations() -> None:
    doc = parse("⚠️ CONSTRAINTS [load-bearing]:\n  - No new deps\n  - Keep API stable\n")
    section = doc.sections[0]

    assert section.key == "CONSTRAINTS"
    assert section.decoration == "⚠️"
    assert section.weight is Weight.LOAD_BEARING
    assert section.content == ListContent(("No new deps", "Keep API stable"))


def test_unknown_glyph_is_kept_as_decoration() -> None:
    section = parse("★ CUSTOM [advisory]: value").sections[0]
    assert section.decoration == "★"
    assert section.weight is Weight.ADVISORY
    assert section.content == TextContent("value")


def test_letter_glyph_is_not_a_header() -> None:
    doc = parse("TASK: x\n\u00e9 NOTES: y\n")
    assert doc.keys() == ("TASK",)
    assert doc.sections[0].content == TextContent("x\n\u00e9 NOTES: y")


@pytest.mark.parametrize("marker", ["-", "*", "+", "•"])
def test_list_markers(marker: str) -> None:
    doc = parse(f"RULES:\n  {marker} one\n  {marker} two\n")
    assert doc.sections[0].content == ListContent(("one", "two"))


def test_bare_marker_is_empty_item() -> None:
    assert parse("RULES:\n  - one\n  -\n").sections[0].content == ListContent(("one", ""))


def test_blank_lines_inside_list_are_skipped() -> None:
    doc = parse("RULES:\n  - a\n\n  - b\n")
    assert doc.sections[0].content == ListContent(("a", "b"))


def test_metric_body() -> None:
    doc = parse(
        "METRICS:\n"
        "  entry_loc: 142 / 200 [lines]\n"
        "  ratio: 0.5 / 1.5\n"
        "  bundle_kb: 10 / 20 kilobytes\n"
    )
    assert doc.sections[0].content == MetricContent(
        (
            MetricEntry("entry_loc", 142, 200, "lines"),
            MetricEntry("ratio", 0.5, 1.5, ""),
            MetricEntry("bundle_kb", 10, 20, "kilobytes"),
        )
    )
    entry = doc.sections[0].content.entries[0]  # type: ignore[union-attr]
    assert isinstance(entry.value, int)


def test_map_body() -> None:
    doc = parse("BUDGET:\n  MAX_TOKENS: 4000\n  NOTE:\n")
    assert doc.sections[0].content == MapContent(
        (MapEntry("MAX_TOKENS", "4000"), MapEntry("NOTE", ""))
    )


def test_mixed_body_falls_back_to_text() -> None:
    doc = parse("CONTEXT:\n  line one\n  - bullet\n")
    assert doc.sections[0].content == TextContent("line one\n- bullet")


def test_lowercase_non_numeric_pairs_are_text() -> None:
    doc = parse("CONTEXT:\n  loc: many\n")
    assert doc.sections[0].content == TextContent("loc: many")


def test_inline_value_is_first_body_line() -> None:
    doc = parse("RULES: - first\n  - second\n")
    assert doc.sections[0].content == ListContent(("first", "second"))

    text_doc = parse("CONTEXT: intro\n  more detail\n")
    assert text_doc.sections[0].content == TextContent("intro\nmore detail")


def test_indented_header_like_line_stays_in_body() -> None:
    doc = parse("CONTEXT:\n  hello\n  TASK: nested\n")
    assert doc.keys() == ("CONTEXT",)
    assert doc.sections[0].content == TextContent("hello\nTASK: nested")


def test_text_body_keeps_inner_blank_lines_and_relative_indent() -> None:
    doc = parse("CONTEXT:\n  a\n\n    b\n\n")
    assert doc.sections[0].content == TextContent("a\n\n  b")


def test_tab_indented_body_is_dedented() -> None:
    doc = parse("CONTEXT:\n\tfirst\n\tsecond\n")
    assert doc.sections[0].content == TextContent("first\nsecond")


def test_crlf_and_byte_order_mark_are_normalized() -> None:
    doc = parse("\ufeffADF: 0.1\r\nTASK: x   \r\nCONTEXT:\r\n  - a\r\n")
    assert doc.keys() == ("TASK", "CONTEXT")
    assert doc.sections[0].content == TextContent("x")
    assert doc.sections[1].content == ListContent(("a",))


def test_duplicate_keys_are_preserved_in_order() -> None:
    doc = parse("NOTE: a\nNOTE: b\n")
    assert [section.content for section in doc.sections] == [TextContent("a"), TextContent("b")]


def test_empty_header_is_empty_text() -> None:
    assert parse("STATE:\n").sections[0].content == TextContent("")


def test_parse_metric_line() -> None:
    entry = parse_metric_line("loc: 1e3 / 2000")
    assert entry == MetricEntry("loc", 1000.0, 2000, "")
    assert parse_metric_line("  delta: -2 / +3.5 [pts]") == MetricEntry("delta", -2, 3.5, "pts")
    assert parse_metric_line("Loc: 1 / 2") is None
    assert parse_metric_line("loc: 1 /") is None


def test_classify_body_without_body_is_inline_text() -> None:
    assert classify_body("- looks like a bullet", []) == TextContent("- looks like a bullet")
