"""ADF document model: sections, content variants, and weight annotations."""

from adf_engine.document.models import (
    Content,
    ContentType,
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
    content_from_dict,
    format_number,
)

__all__ = [
    "Content",
    "ContentType",
    "Document",
    "ListContent",
    "MapContent",
    "MapEntry",
    "MetricContent",
    "MetricEntry",
    "Number",
    "Section",
    "TextContent",
    "Weight",
    "content_from_dict",
    "format_number",
]
