"""
adf-engine — immutable document patcher.

File: src/adf_engine/patching/patcher.py
Last updated: 2026-10-18

Purpose
- Apply an ordered list of typed operations to a Document, producing a new Document.

Functional requirements
- Each operation runs against the result of the previous one.
- The first invalid operation aborts the whole call with a ``PatchError``;
  nothing is partially applied and the input Document is never modified.
- Operations address the first section stored under a key.
- A section written by ADD_SECTION or REPLACE_SECTION must read back from its
  canonical text with the same content; empty list, map and metric sections
  are allowed and read back as empty text.

Non-functional requirements
- Model values are frozen and tuple-backed, so unchanged sections are reused
  as-is and changed ones are rebuilt with ``dataclasses.replace``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from adf_engine.document.models import (
    MAP_KEY_RE,
    Content,
    Document,
    ListContent,
    MapContent,
    MapEntry,
    MetricContent,
    Section,
    Weight,
)
from adf_engine.errors import PatchError
from adf_engine.observability import get_logger
from adf_engine.patching.operations import (
    AddBullet,
    AddSection,
    OpKind,
    Operation,
    RemoveBullet,
    RemoveSection,
    ReplaceBullet,
    ReplaceSection,
    UpdateMetric,
)
from adf_engine.syntax import format_document, parse

logger = get_logger(__name__)


def apply_patches(doc: Document, ops: Iterable[Operation]) -> Document:
    """Apply ``ops`` in order and return the resulting Document."""

    current = doc
    for op_index, op in enumerate(ops):
        current = apply_operation(current, op, op_index=op_index)
        logger.debug("adf_patch_applied", op=op.op.value, target=op.target, op_index=op_index)
    return current


def apply_operation(doc: Document, op: Operation, *, op_index: int | None = None) -> Document:
    if isinstance(op, AddBullet):
        return _add_bullet(doc, op, op_index)
    if isinstance(op, ReplaceBullet):
        return _replace_bullet(doc, op, op_index)
    if isinstance(op, RemoveBullet):
        return _remove_bullet(doc, op, op_index)
    if isinstance(op, AddSection):
        return _add_section(doc, op, op_index)
    if isinstance(op, ReplaceSection):
        return _replace_section(doc, op, op_index)
    if isinstance(op, RemoveSection):
        return _remove_section(doc, op, op_index)
    if isinstance(op, UpdateMetric):
        return _update_metric(doc, op, op_index)
    raise TypeError(f"unsupported patch operation: {type(op).__name__}")


def _add_bullet(doc: Document, op: AddBullet, op_index: int | None) -> Document:
    position, section = _require_section(doc, op.op.value, op.section, op_index)
    content = section.content
    _require_single_line(op.value, op.op.value, op.section, op_index)
    if isinstance(content, ListContent):
        updated: ListContent | MapContent = ListContent((*content.items, op.value.strip()))
    elif isinstance(content, MapContent):
        entry = _map_entry(op.value, op.op.value, op.section, op_index)
        updated = MapContent((*content.entries, entry))
    else:
        raise _type_mismatch(op.op.value, section, op_index)
    return _swap(doc, position, replace(section, content=updated))


def _replace_bullet(doc: Document, op: ReplaceBullet, op_index: int | None) -> Document:
    position, section = _require_section(doc, op.op.value, op.section, op_index)
    content = section.content
    _require_single_line(op.value, op.op.value, op.section, op_index)
    if isinstance(content, ListContent):
        _check_index(op.index, len(content.items), op.op.value, op.section, op_index)
        items = list(content.items)
        items[op.index] = op.value.strip()
        updated: ListContent | MapContent = ListContent(tuple(items))
    elif isinstance(content, MapContent):
        _check_index(op.index, len(content.entries), op.op.value, op.section, op_index)
        entries = list(content.entries)
        entries[op.index] = _map_entry(op.value, op.op.value, op.section, op_index)
        updated = MapContent(tuple(entries))
    else:
        raise _type_mismatch(op.op.value, section, op_index)
    return _swap(doc, position, replace(section, content=updated))


def _remove_bullet(doc: Document, op: RemoveBullet, op_index: int | None) -> Document:
    position, section = _require_section(doc, op.op.value, op.section, op_index)
    content = section.content
    if isinstance(content, ListContent):
        _check_index(op.index, len(content.items), op.op.value, op.section, op_index)
        items = content.items[: op.index] + content.items[op.index + 1 :]
        updated: ListContent | MapContent = ListContent(items)
    elif isinstance(content, MapContent):
        _check_index(op.index, len(content.entries), op.op.value, op.section, op_index)
        entries = content.entries[: op.index] + content.entries[op.index + 1 :]
        updated = MapContent(entries)
    else:
        raise _type_mismatch(op.op.value, section, op_index)
    return _swap(doc, position, replace(section, content=updated))


def _add_section(doc: Document, op: AddSection, op_index: int | None) -> Document:
    if doc.index_of(op.key) is not None:
        raise PatchError(
            op=op.op.value,
            section=op.key,
            detail=f'Section "{op.key}" already exists',
            op_index=op_index,
        )
    section = _build_section(op.op.value, op.key, op_index, op.content, op.decoration, op.weight)
    return doc.with_sections((*doc.sections, section))


def _replace_section(doc: Document, op: ReplaceSection, op_index: int | None) -> Document:
    position, section = _require_section(doc, op.op.value, op.key, op_index)
    decoration = op.decoration if op.decoration is not None else section.decoration
    weight = op.weight if op.weight is not None else section.weight
    rebuilt = _build_section(op.op.value, op.key, op_index, op.content, decoration, weight)
    return _swap(doc, position, rebuilt)


def _remove_section(doc: Document, op: RemoveSection, op_index: int | None) -> Document:
    position, _ = _require_section(doc, op.op.value, op.key, op_index)
    return doc.with_sections(doc.sections[:position] + doc.sections[position + 1 :])


def _update_metric(doc: Document, op: UpdateMetric, op_index: int | None) -> Document:
    position, section = _require_section(doc, op.op.value, op.section, op_index)
    content = section.content
    if not isinstance(content, MetricContent):
        raise _type_mismatch(op.op.value, section, op_index)
    for entry_index, entry in enumerate(content.entries):
        if entry.key != op.key:
            continue
        entries = list(content.entries)
        entries[entry_index] = replace(entry, value=op.value)
        return _swap(doc, position, replace(section, content=MetricContent(tuple(entries))))
    raise PatchError(
        op=op.op.value,
        section=op.section,
        detail=f'Metric key "{op.key}" not found in section "{op.section}"',
        op_index=op_index,
    )


def _require_section(
    doc: Document, op: str, key: str, op_index: int | None
) -> tuple[int, Section]:
    position = doc.index_of(key)
    if position is None:
        raise PatchError(op=op, section=key, detail=f'Section "{key}" not found', op_index=op_index)
    return position, doc.sections[position]


def _check_index(index: int, size: int, op: str, key: str, op_index: int | None) -> None:
    if 0 <= index < size:
        return
    valid_range = (0, size - 1) if size else None
    raise PatchError(
        op=op,
        section=key,
        detail=f'Index {index} out of bounds (section "{key}" has {size} items)',
        index=index,
        valid_range=valid_range,
        op_index=op_index,
    )


def _require_single_line(value: str, op: str, key: str, op_index: int | None) -> None:
    if "\n" in value or "\r" in value:
        raise PatchError(
            op=op,
            section=key,
            detail="bullet value must be a single line",
            op_index=op_index,
        )


def _map_entry(value: str, op: str, key: str, op_index: int | None) -> MapEntry:
    entry_key, separator, rest = value.partition(":")
    entry_key = entry_key.strip()
    if not MAP_KEY_RE.fullmatch(entry_key):
        raise PatchError(
            op=op,
            section=key,
            detail=f'Map key "{entry_key}" must be an UPPERCASE identifier',
            op_index=op_index,
        )
    return MapEntry(key=entry_key, value=rest.strip() if separator else "")


def _type_mismatch(op: str, section: Section, op_index: int | None) -> PatchError:
    expected = "metric" if op == OpKind.UPDATE_METRIC else "list or map"
    return PatchError(
        op=op,
        section=section.key,
        detail=(
            f"Cannot {op} on {section.content_type.value} section \"{section.key}\" "
            f"(expected {expected})"
        ),
        op_index=op_index,
    )


def _build_section(
    op: str,
    key: str,
    op_index: int | None,
    content: Content,
    decoration: str | None,
    weight: Weight | None,
) -> Section:
    try:
        section = Section(key=key, content=content, decoration=decoration, weight=weight)
    except ValueError as exc:
        raise PatchError(op=op, section=key, detail=str(exc), op_index=op_index) from exc
    if not _reads_back(section):
        raise PatchError(
            op=op,
            section=key,
            detail=(
                f'{content.type.value} content of section "{key}" would not read back '
                "unchanged from its formatted text"
            ),
            op_index=op_index,
        )
    return section


def _reads_back(section: Section) -> bool:
    content = section.content
    if isinstance(content, ListContent) and not content.items:
        return True
    if isinstance(content, (MapContent, MetricContent)) and not content.entries:
        return True
    reparsed = parse(format_document(Document(sections=(section,)))).sections
    return len(reparsed) == 1 and reparsed[0].content == content


def _swap(doc: Document, position: int, section: Section) -> Document:
    sections = list(doc.sections)
    sections[position] = section
    return doc.with_sections(sections)


__all__ = ["apply_operation", "apply_patches"]
