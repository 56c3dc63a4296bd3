"""Immutable ADF document model with strict validation and canonical serialization."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum, StrEnum
from typing import ClassVar, Final, NoReturn, TypeAlias, TypeVar

from adf_engine.constants import ADF_VERSION, SUPPORTED_VERSIONS

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
Number: TypeAlias = int | float

TEnum = TypeVar("TEnum", bound=Enum)

SECTION_KEY_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Z][A-Z0-9_]*$")
MAP_KEY_RE: Final[re.Pattern[str]] = SECTION_KEY_RE
METRIC_KEY_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z][a-z0-9_]*$")
GLYPH_RE: Final[re.Pattern[str]] = re.compile(r"[^\x00-\x7f\w\s]{1,8}")


class Weight(StrEnum):
    LOAD_BEARING = "load-bearing"
    ADVISORY = "advisory"


class ContentType(StrEnum):
    TEXT = "text"
    LIST = "list"
    MAP = "map"
    METRIC = "metric"


@dataclass(frozen=True, slots=True)
class TextContent:
    value: str = ""

    type: ClassVar[ContentType] = ContentType.TEXT

    def __post_init__(self) -> None:
        _as_str(self.value, "TextContent.value")

    def to_dict(self) -> dict[str, JSONValue]:
        return {"type": self.type.value, "value": self.value}


@dataclass(frozen=True, slots=True)
class ListContent:
    items: tuple[str, ...] = ()

    type: ClassVar[ContentType] = ContentType.LIST

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _as_str_tuple(self.items, "ListContent.items"))

    def to_dict(self) -> dict[str, JSONValue]:
        return {"type": self.type.value, "items": list(self.items)}


@dataclass(frozen=True, slots=True)
class MapEntry:
    key: str
    value: str = ""

    def __post_init__(self) -> None:
        key = _as_str(self.key, "MapEntry.key")
        if not MAP_KEY_RE.fullmatch(key):
            _fail("MapEntry.key", f"must be an UPPERCASE identifier, got {key!r}")
        _as_str(self.value, "MapEntry.value")

    def to_dict(self) -> dict[str, JSONValue]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True, slots=True)
class MapContent:
    entries: tuple[MapEntry, ...] = ()

    type: ClassVar[ContentType] = ContentType.MAP

    def __post_init__(self) -> None:
        entries = _as_tuple(self.entries, "MapContent.entries")
        for index, entry in enumerate(entries):
            if not isinstance(entry, MapEntry):
                _fail(f"MapContent.entries[{index}]", "expected MapEntry")
        object.__setattr__(self, "entries", entries)

    def get(self, key: str) -> str | None:
        for entry in self.entries:
            if entry.key == key:
                return entry.value
        return None

    def to_dict(self) -> dict[str, JSONValue]:
        return {"type": self.type.value, "entries": [entry.to_dict() for entry in self.entries]}


@dataclass(frozen=True, slots=True)
class MetricEntry:
    key: str
    value: Number
    ceiling: Number
    unit: str = ""

    def __post_init__(self) -> None:
        key = _as_str(self.key, "MetricEntry.key")
        if not METRIC_KEY_RE.fullmatch(key):
            _fail("MetricEntry.key", f"must be a lowercase identifier, got {key!r}")
        _as_number(self.value, "MetricEntry.value")
        _as_number(self.ceiling, "MetricEntry.ceiling")
        object.__setattr__(self, "unit", _as_str(self.unit, "MetricEntry.unit").strip())

    def to_dict(self) -> dict[str, JSONValue]:
        return {"key": self.key, "value": self.value, "ceiling": self.ceiling, "unit": self.unit}


@dataclass(frozen=True, slots=True)
class MetricContent:
    entries: tuple[MetricEntry, ...] = ()

    type: ClassVar[ContentType] = ContentType.METRIC

    def __post_init__(self) -> None:
        entries = _as_tuple(self.entries, "MetricContent.entries")
        for index, entry in enumerate(entries):
            if not isinstance(entry, MetricEntry):
                _fail(f"MetricContent.entries[{index}]", "expected MetricEntry")
        object.__setattr__(self, "entries", entries)

    def to_dict(self) -> dict[str, JSONValue]:
        return {"type": self.type.value, "entries": [entry.to_dict() for entry in self.entries]}


Content: TypeAlias = TextContent | ListContent | MapContent | MetricContent

_CONTENT_TYPES: Final[tuple[type, ...]] = (TextContent, ListContent, MapContent, MetricContent)


@dataclass(frozen=True, slots=True)
class Section:
    """One keyed unit of content; decoration and weight are optional."""

    key: str
    content: Content
    decoration: str | None = None
    weight: Weight | None = None

    def __post_init__(self) -> None:
        key = _as_str(self.key, "Section.key")
        if not SECTION_KEY_RE.fullmatch(key):
            _fail("Section.key", f"must be an UPPERCASE identifier, got {key!r}")
        if not isinstance(self.content, _CONTENT_TYPES):
            _fail("Section.content", f"unsupported content type {type(self.content).__name__}")
        if self.decoration is not None:
            decoration = _as_str(self.decoration, "Section.decoration")
            if not GLYPH_RE.fullmatch(decoration):
                _fail("Section.decoration", f"must be a non-ASCII glyph, got {decoration!r}")
        if self.weight is not None:
            object.__setattr__(self, "weight", _as_enum(Weight, self.weight, "Section.weight"))

    @property
    def content_type(self) -> ContentType:
        return self.content.type

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "key": self.key,
            "decoration": self.decoration,
            "weight": None if self.weight is None else self.weight.value,
            "content": self.content.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Section:
        parsed = _expect_object(
            data, "Section", required={"key", "content"}, optional={"decoration", "weight"}
        )
        decoration = parsed.get("decoration")
        weight = parsed.get("weight")
        return cls(
            key=_as_str(parsed["key"], "Section.key"),
            content=content_from_dict(parsed["content"], "Section.content"),
            decoration=None if decoration is None else _as_str(decoration, "Section.decoration"),
            weight=None if weight is None else _as_enum(Weight, weight, "Section.weight"),
        )


@dataclass(frozen=True, slots=True)
class Document:
    """Root AST value: a supported version plus an ordered section sequence."""

    sections: tuple[Section, ...] = ()
    version: str = ADF_VERSION

    def __post_init__(self) -> None:
        if self.version not in SUPPORTED_VERSIONS:
            _fail("Document.version", f"unsupported ADF version {self.version!r}")
        sections = _as_tuple(self.sections, "Document.sections")
        for index, section in enumerate(sections):
            if not isinstance(section, Section):
                _fail(f"Document.sections[{index}]", "expected Section")
        object.__setattr__(self, "sections", sections)

    def keys(self) -> tuple[str, ...]:
        return tuple(section.key for section in self.sections)

    def section(self, key: str) -> Section | None:
        """Return the first section stored under ``key``."""

        for section in self.sections:
            if section.key == key:
                return section
        return None

    def index_of(self, key: str) -> int | None:
        for index, section in enumerate(self.sections):
            if section.key == key:
                return index
        return None

    def with_sections(self, sections: tuple[Section, ...] | list[Section]) -> Document:
        return replace(self, sections=tuple(sections))

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "version": self.version,
            "sections": [section.to_dict() for section in self.sections],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Document:
        parsed = _expect_object(data, "Document", required={"sections"}, optional={"version"})
        raw_sections = parsed["sections"]
        if not isinstance(raw_sections, (list, tuple)):
            _fail("Document.sections", f"expected array, got {type(raw_sections).__name__}")
        sections = []
        for index, item in enumerate(raw_sections):
            if not isinstance(item, Mapping):
                _fail(f"Document.sections[{index}]", "expected object")
            sections.append(Section.from_dict(item))
        return cls(
            sections=tuple(sections),
            version=_as_str(parsed.get("version", ADF_VERSION), "Document.version"),
        )


def content_from_dict(data: object, path: str = "content") -> Content:
    """Build a content variant from its ``{"type": ..., ...}`` payload."""

    if not isinstance(data, Mapping):
        _fail(path, f"expected object, got {type(data).__name__}")
    content_type = _as_enum(ContentType, data.get("type"), f"{path}.type")
    if content_type is ContentType.TEXT:
        parsed = _expect_object(data, path, required={"type"}, optional={"value"})
        return TextContent(_as_str(parsed.get("value", ""), f"{path}.value"))
    if content_type is ContentType.LIST:
        parsed = _expect_object(data, path, required={"type", "items"})
        return ListContent(_as_str_tuple(parsed["items"], f"{path}.items"))
    if content_type is ContentType.MAP:
        parsed = _expect_object(data, path, required={"type", "entries"})
        map_entries = []
        for index, item in enumerate(_as_tuple(parsed["entries"], f"{path}.entries")):
            entry_path = f"{path}.entries[{index}]"
            entry = _expect_object(item, entry_path, required={"key"}, optional={"value"})
            map_entries.append(
                MapEntry(
                    key=_as_str(entry["key"], f"{entry_path}.key"),
                    value=_as_str(entry.get("value", ""), f"{entry_path}.value"),
                )
            )
        return MapContent(tuple(map_entries))

    parsed = _expect_object(data, path, required={"type", "entries"})
    metric_entries = []
    for index, item in enumerate(_as_tuple(parsed["entries"], f"{path}.entries")):
        entry_path = f"{path}.entries[{index}]"
        entry = _expect_object(
            item, entry_path, required={"key", "value", "ceiling"}, optional={"unit"}
        )
        metric_entries.append(
            MetricEntry(
                key=_as_str(entry["key"], f"{entry_path}.key"),
                value=_as_number(entry["value"], f"{entry_path}.value"),
                ceiling=_as_number(entry["ceiling"], f"{entry_path}.ceiling"),
                unit=_as_str(entry.get("unit", ""), f"{entry_path}.unit"),
            )
        )
    return MetricContent(tuple(metric_entries))


def format_number(value: Number) -> str:
    """Render a metric number so that parsing the output yields an equal value."""

    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


def _expect_object(
    value: object,
    path: str,
    *,
    required: set[str],
    optional: set[str] | None = None,
) -> dict[str, object]:
    if not isinstance(value, Mapping):
        _fail(path, f"expected object, got {type(value).__name__}")

    parsed: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            _fail(path, f"object keys must be strings, got {type(key).__name__}")
        parsed[key] = item

    allowed = required | (optional or set())
    unknown = sorted(key for key in parsed if key not in allowed)
    if unknown:
        _fail(path, f"unexpected fields: {unknown}")

    missing = sorted(key for key in required if key not in parsed)
    if missing:
        _fail(path, f"missing required fields: {missing}")

    return parsed


def _as_str(value: object, path: str) -> str:
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    return value


def _as_number(value: object, path: str) -> Number:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _fail(path, f"expected number, got {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        _fail(path, "must be finite")
    return value


def _as_enum(enum_type: type[TEnum], value: object, path: str) -> TEnum:
    if isinstance(value, enum_type):
        return value
    if not isinstance(value, str):
        _fail(path, f"expected string enum value, got {type(value).__name__}")
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(sorted(item.value for item in enum_type))
        _fail(path, f"invalid value {value!r}; expected one of: {allowed}")


def _as_tuple(value: object, path: str) -> tuple[object, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    _fail(path, f"expected array, got {type(value).__name__}")


def _as_str_tuple(value: object, path: str) -> tuple[str, ...]:
    items = _as_tuple(value, path)
    for index, item in enumerate(items):
        _as_str(item, f"{path}[{index}]")
    return tuple(str(item) for item in items)


__all__ = [
    "Content",
    "ContentType",
    "Document",
    "JSONScalar",
    "JSONValue",
    "GLYPH_RE",
    "ListContent",
    "MAP_KEY_RE",
    "METRIC_KEY_RE",
    "MapContent",
    "MapEntry",
    "MetricContent",
    "MetricEntry",
    "Number",
    "SECTION_KEY_RE",
    "Section",
    "TextContent",
    "Weight",
    "content_from_dict",
    "format_number",
]
