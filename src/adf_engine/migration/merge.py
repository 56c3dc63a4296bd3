"""
adf-engine — migration merge into ADF modules.

File: src/adf_engine/migration/merge.py
Last updated: 2026-10-18

Purpose
- Turn the migrating items routed to one module into patch operations and
  apply them to that module's Document through the patcher.

Functional requirements
- Items are grouped by target section (CONSTRAINTS, CONTEXT, ADVISORY) in the
  order the sections first appear in the plan.
- A missing section is added as a list, weighted load-bearing when any of its
  items is load-bearing and advisory otherwise.
- An existing section receives one ADD_BULLET per item (``append``), skips
  items that duplicate an existing bullet (``dedupe``), or is rewritten with
  exactly the migrated items (``replace``).
- An existing section that receives a load-bearing item is promoted to
  load-bearing.
- Every item is written as a single line so the module reads back unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import StrEnum
from typing import Final

from adf_engine.document.models import Document, ListContent, Weight
from adf_engine.migration.classifier import MigrationItem, TargetSection, is_duplicate_item
from adf_engine.migration.markdown import ElementKind
from adf_engine.observability import get_logger
from adf_engine.patching import (
    AddBullet,
    AddSection,
    Operation,
    ReplaceSection,
    apply_patches,
)

SHELL_LANGUAGES: Final[frozenset[str]] = frozenset({"bash", "sh"})
MAX_COMMAND_LINES: Final[int] = 3

logger = get_logger(__name__)


class MergeStrategy(StrEnum):
    APPEND = "append"
    DEDUPE = "dedupe"
    REPLACE = "replace"


def format_item(item: MigrationItem) -> str:
    """Render one migrating element as a single-line ADF bullet."""

    element = item.element
    text = element.content
    if element.kind is ElementKind.CODE_BLOCK:
        lines = [line for line in text.split("\n") if line.strip()]
        if element.language in SHELL_LANGUAGES:
            text = "[Build commands] " + "; ".join(lines[:MAX_COMMAND_LINES])
            if len(lines) > MAX_COMMAND_LINES:
                text += " (...)"
        else:
            text = f"[{element.language or 'code'}] {lines[0] if lines else ''}"
    return " ".join(text.split())


def group_by_section(
    items: Iterable[MigrationItem],
) -> dict[TargetSection, list[MigrationItem]]:
    groups: dict[TargetSection, list[MigrationItem]] = {}
    for item in items:
        groups.setdefault(item.classification.target_section, []).append(item)
    return groups


def migration_operations(
    doc: Document,
    items: Sequence[MigrationItem],
    strategy: MergeStrategy = MergeStrategy.DEDUPE,
) -> tuple[Operation, ...]:
    """Operations that merge ``items`` into ``doc`` without weight promotion."""

    ops: list[Operation] = []
    for target, grouped in group_by_section(items).items():
        key = target.value
        values = [format_item(item) for item in grouped]
        weight = _group_weight(grouped)
        existing = doc.section(key)
        if existing is None:
            ops.append(AddSection(key=key, content=ListContent(tuple(values)), weight=weight))
            continue
        if strategy is MergeStrategy.REPLACE:
            ops.append(ReplaceSection(key=key, content=ListContent(tuple(values))))
            continue
        current = existing.content.items if isinstance(existing.content, ListContent) else ()
        for value in values:
            if strategy is MergeStrategy.DEDUPE and any(
                is_duplicate_item(known, value) for known in current
            ):
                continue
            ops.append(AddBullet(section=key, value=value))
    return tuple(ops)


def apply_migration(
    doc: Document,
    items: Sequence[MigrationItem],
    strategy: MergeStrategy = MergeStrategy.DEDUPE,
) -> Document:
    """Merge one module's migrating ``items`` into ``doc``."""

    ops = migration_operations(doc, items, strategy)
    merged = apply_patches(doc, ops)

    promotions: list[Operation] = []
    for target, grouped in group_by_section(items).items():
        section = merged.section(target.value)
        if (
            section is not None
            and _group_weight(grouped) is Weight.LOAD_BEARING
            and section.weight is not Weight.LOAD_BEARING
        ):
            promotions.append(
                ReplaceSection(key=section.key, content=section.content, weight=Weight.LOAD_BEARING)
            )
    if promotions:
        merged = apply_patches(merged, promotions)

    logger.debug(
        "adf_migration_merged",
        operations=len(ops),
        promotions=len(promotions),
        strategy=strategy.value,
    )
    return merged


def _group_weight(items: Sequence[MigrationItem]) -> Weight:
    if any(item.classification.weight is Weight.LOAD_BEARING for item in items):
        return Weight.LOAD_BEARING
    return Weight.ADVISORY


__all__ = [
    "MAX_COMMAND_LINES",
    "MergeStrategy",
    "SHELL_LANGUAGES",
    "apply_migration",
    "format_item",
    "group_by_section",
    "migration_operations",
]
