"""ADF text grammar: tolerant parser and canonical formatter."""

from adf_engine.syntax.formatter import (
    canonical_sections,
    check_canonical,
    default_decoration,
    format_document,
    format_section,
    section_rank,
)
from adf_engine.syntax.parser import classify_body, parse, parse_metric_line

__all__ = [
    "canonical_sections",
    "check_canonical",
    "classify_body",
    "default_decoration",
    "format_document",
    "format_section",
    "parse",
    "parse_metric_line",
    "section_rank",
]
