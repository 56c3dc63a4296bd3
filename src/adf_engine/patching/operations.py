"""
adf-engine — typed patch operations.

File: src/adf_engine/patching/operations.py
Last updated: 2026-10-18

Purpose
- Define the closed set of edit operations accepted by the patcher.
- Build operations from structured payloads (YAML or JSON text, or plain mappings).

Functional requirements
- Operations are immutable values validated at construction time.
- Malformed payload entries raise ``PatchError`` naming the entry position.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, TypeAlias

import yaml

from adf_engine.document.models import (
    SECTION_KEY_RE,
    Content,
    JSONValue,
    ListContent,
    Number,
    TextContent,
    Weight,
    content_from_dict,
)
from adf_engine.errors import PatchError


class OpKind(StrEnum):
    ADD_BULLET = "ADD_BULLET"
    REPLACE_BULLET = "REPLACE_BULLET"
    REMOVE_BULLET = "REMOVE_BULLET"
    ADD_SECTION = "ADD_SECTION"
    REPLACE_SECTION = "REPLACE_SECTION"
    REMOVE_SECTION = "REMOVE_SECTION"
    UPDATE_METRIC = "UPDATE_METRIC"


@dataclass(frozen=True, slots=True)
class AddBullet:
    section: str
    value: str

    op: ClassVar[OpKind] = OpKind.ADD_BULLET

    def __post_init__(self) -> None:
        _require_str(self.section, "AddBullet.section")
        _require_str(self.value, "AddBullet.value")

    @property
    def target(self) -> str:
        return self.section

    def to_dict(self) -> dict[str, JSONValue]:
        return {"op": self.op.value, "section": self.section, "value": self.value}


@dataclass(frozen=True, slots=True)
class ReplaceBullet:
    section: str
    index: int
    value: str

    op: ClassVar[OpKind] = OpKind.REPLACE_BULLET

    def __post_init__(self) -> None:
        _require_str(self.section, "ReplaceBullet.section")
        _require_index(self.index, "ReplaceBullet.index")
        _require_str(self.value, "ReplaceBullet.value")

    @property
    def target(self) -> str:
        return self.section

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "op": self.op.value,
            "section": self.section,
            "index": self.index,
            "value": self.value,
        }


@dataclass(frozen=True, slots=True)
class RemoveBullet:
    section: str
    index: int

    op: ClassVar[OpKind] = OpKind.REMOVE_BULLET

    def __post_init__(self) -> None:
        _require_str(self.section, "RemoveBullet.section")
        _require_index(self.index, "RemoveBullet.index")

    @property
    def target(self) -> str:
        return self.section

    def to_dict(self) -> dict[str, JSONValue]:
        return {"op": self.op.value, "section": self.section, "index": self.index}


@dataclass(frozen=True, slots=True)
class AddSection:
    key: str
    content: Content
    decoration: str | None = None
    weight: Weight | None = None

    op: ClassVar[OpKind] = OpKind.ADD_SECTION

    def __post_init__(self) -> None:
        _require_section_key(self.key, "AddSection.key")
        if self.weight is not None:
            object.__setattr__(self, "weight", Weight(self.weight))

    @property
    def target(self) -> str:
        return self.key

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "op": self.op.value,
            "key": self.key,
            "content": self.content.to_dict(),
            "decoration": self.decoration,
            "weight": None if self.weight is None else self.weight.value,
        }


@dataclass(frozen=True, slots=True)
class ReplaceSection:
    key: str
    content: Content
    decoration: str | None = None
    weight: Weight | None = None

    op: ClassVar[OpKind] = OpKind.REPLACE_SECTION

    def __post_init__(self) -> None:
        _require_section_key(self.key, "ReplaceSection.key")
        if self.weight is not None:
            object.__setattr__(self, "weight", Weight(self.weight))

    @property
    def target(self) -> str:
        return self.key

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "op": self.op.value,
            "key": self.key,
            "content": self.content.to_dict(),
            "decoration": self.decoration,
            "weight": None if self.weight is None else self.weight.value,
        }


@dataclass(frozen=True, slots=True)
class RemoveSection:
    key: str

    op: ClassVar[OpKind] = OpKind.REMOVE_SECTION

    def __post_init__(self) -> None:
        _require_str(self.key, "RemoveSection.key")

    @property
    def target(self) -> str:
        return self.key

    def to_dict(self) -> dict[str, JSONValue]:
        return {"op": self.op.value, "key": self.key}


@dataclass(frozen=True, slots=True)
class UpdateMetric:
    section: str
    key: str
    value: Number

    op: ClassVar[OpKind] = OpKind.UPDATE_METRIC

    def __post_init__(self) -> None:
        _require_str(self.section, "UpdateMetric.section")
        _require_str(self.key, "UpdateMetric.key")
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            kind = type(self.value).__name__
            raise ValueError(f"UpdateMetric.value: expected number, got {kind}")
        if not math.isfinite(self.value):
            raise ValueError("UpdateMetric.value: must be finite")

    @property
    def target(self) -> str:
        return self.section

    def to_dict(self) -> dict[str, JSONValue]:
        return {"op": self.op.value, "section": self.section, "key": self.key, "value": self.value}


Operation: TypeAlias = (
    AddBullet
    | ReplaceBullet
    | RemoveBullet
    | AddSection
    | ReplaceSection
    | RemoveSection
    | UpdateMetric
)


def load_operations(text: str) -> tuple[Operation, ...]:
    """Read an operation list from YAML or JSON text."""

    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise PatchError(
            op="PAYLOAD", section="", detail=f"invalid operations payload: {exc}"
        ) from exc
    if payload is None:
        return ()
    if isinstance(payload, Mapping) and "operations" in payload:
        payload = payload["operations"]
    return parse_operations(payload)


def parse_operations(payload: object) -> tuple[Operation, ...]:
    """Build operations from a sequence of ``{"op": ..., ...}`` mappings."""

    if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
        raise PatchError(
            op="PAYLOAD",
            section="",
            detail=f"operations payload must be a list, got {type(payload).__name__}",
        )
    return tuple(operation_from_dict(item, op_index=index) for index, item in enumerate(payload))


def operation_from_dict(data: object, *, op_index: int | None = None) -> Operation:
    if not isinstance(data, Mapping):
        raise PatchError(
            op="PAYLOAD",
            section="",
            detail=f"operation must be an object, got {type(data).__name__}",
            op_index=op_index,
        )
    raw_kind = data.get("op")
    try:
        kind = OpKind(raw_kind)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in OpKind)
        raise PatchError(
            op=str(raw_kind),
            section="",
            detail=f"unknown operation {raw_kind!r}; expected one of: {allowed}",
            op_index=op_index,
        ) from exc

    target = data.get("section", data.get("key", ""))
    try:
        return _build_operation(kind, data)
    except (KeyError, TypeError, ValueError) as exc:
        detail = f"missing field {exc}" if isinstance(exc, KeyError) else str(exc)
        raise PatchError(
            op=kind.value,
            section=target if isinstance(target, str) else "",
            detail=detail,
            op_index=op_index,
        ) from exc


def _build_operation(kind: OpKind, data: Mapping[str, object]) -> Operation:
    if kind is OpKind.ADD_BULLET:
        return AddBullet(section=_text(data["section"]), value=_text(data["value"]))
    if kind is OpKind.REPLACE_BULLET:
        return ReplaceBullet(
            section=_text(data["section"]),
            index=_index(data["index"]),
            value=_text(data["value"]),
        )
    if kind is OpKind.REMOVE_BULLET:
        return RemoveBullet(section=_text(data["section"]), index=_index(data["index"]))
    if kind is OpKind.ADD_SECTION:
        return AddSection(
            key=_text(data["key"]),
            content=_content(data["content"]),
            decoration=_optional_text(data.get("decoration")),
            weight=_optional_weight(data.get("weight")),
        )
    if kind is OpKind.REPLACE_SECTION:
        return ReplaceSection(
            key=_text(data["key"]),
            content=_content(data["content"]),
            decoration=_optional_text(data.get("decoration")),
            weight=_optional_weight(data.get("weight")),
        )
    if kind is OpKind.REMOVE_SECTION:
        return RemoveSection(key=_text(data["key"]))
    return UpdateMetric(
        section=_text(data["section"]),
        key=_text(data["key"]),
        value=_number(data["value"]),
    )


def _content(value: object) -> Content:
    # Shorthand: a bare string is Text, a list of strings is a List.
    if isinstance(value, str):
        return TextContent(value)
    if isinstance(value, (list, tuple)):
        return ListContent(tuple(_text(item) for item in value))
    return content_from_dict(value)


def _text(value: object) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValueError(f"expected string, got {type(value).__name__}")
    return value if isinstance(value, str) else str(value)


def _optional_text(value: object) -> str | None:
    return None if value is None else _text(value)


def _optional_weight(value: object) -> Weight | None:
    if value is None:
        return None
    return Weight(_text(value))


def _index(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"index must be an integer, got {type(value).__name__}")
    return value


def _number(value: object) -> Number:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"value must be a number, got {type(value).__name__}")
    return value


def _require_str(value: object, path: str) -> None:
    if not isinstance(value, str):
        raise ValueError(f"{path}: expected string, got {type(value).__name__}")


def _require_index(value: object, path: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{path}: expected integer, got {type(value).__name__}")


def _require_section_key(value: object, path: str) -> None:
    _require_str(value, path)
    if not SECTION_KEY_RE.fullmatch(str(value)):
        raise ValueError(f"{path}: must be an UPPERCASE identifier, got {value!r}")


__all__ = [
    "AddBullet",
    "AddSection",
    "OpKind",
    "Operation",
    "RemoveBullet",
    "RemoveSection",
    "ReplaceBullet",
    "ReplaceSection",
    "UpdateMetric",
    "load_operations",
    "operation_from_dict",
    "parse_operations",
]
