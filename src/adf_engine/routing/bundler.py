"""
adf-engine — module bundler.

File: src/adf_engine/routing/bundler.py
Last updated: 2026-10-18

Purpose
- Read resolved module documents through a caller-supplied reader, merge them
  into one Document, and report token-budget and trigger accounting.

What should be included in this file
- Type-specific merge of same-keyed sections across modules.
- ``ceil(chars / 4)`` token estimates for the merged document and per module.
- Global and per-module budget reporting, trigger-match detail, unmatched
  and advisory-only module lists.

Functional requirements
- The engine itself performs no I/O: every read goes through ``file_reader``.
- Unreadable or unparsable modules raise ``BundleError`` carrying the path.
- Same key with different content types across modules raises ``BundleError``.

Non-functional requirements
- Each call is isolated: inputs and outputs are immutable value graphs.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from adf_engine.constants import CHARS_PER_TOKEN, MANIFEST_FILENAME
from adf_engine.document.models import (
    Content,
    Document,
    JSONValue,
    ListContent,
    MapContent,
    MetricContent,
    Section,
    TextContent,
    Weight,
)
from adf_engine.errors import BundleError, ParseError
from adf_engine.observability import get_logger
from adf_engine.routing.manifest import (
    Manifest,
    ManifestModule,
    matched_keywords,
    parse_manifest,
)
from adf_engine.syntax import format_document, parse

FileReader = Callable[[str], str]

logger = get_logger(__name__)


class LoadReason(StrEnum):
    DEFAULT = "default"
    TRIGGER = "trigger"


@dataclass(frozen=True, slots=True)
class TriggerMatch:
    module: str
    triggers: tuple[str, ...]
    matched: bool
    matched_keywords: tuple[str, ...]
    load_reason: LoadReason | None

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "module": self.module,
            "triggers": list(self.triggers),
            "matched": self.matched,
            "matched_keywords": list(self.matched_keywords),
            "load_reason": None if self.load_reason is None else self.load_reason.value,
        }


@dataclass(frozen=True, slots=True)
class ModuleBudgetOverrun:
    module: str
    tokens: int
    budget: int

    def to_dict(self) -> dict[str, JSONValue]:
        return {"module": self.module, "tokens": self.tokens, "budget": self.budget}


@dataclass(frozen=True, slots=True)
class BundleResult:
    """Merged Document plus token, budget, and trigger reporting."""

    document: Document
    modules: tuple[str, ...]
    token_estimate: int
    per_module_tokens: tuple[tuple[str, int], ...]
    token_budget: int | None = None
    token_utilization: float | None = None
    module_budget_overruns: tuple[ModuleBudgetOverrun, ...] = ()
    trigger_matches: tuple[TriggerMatch, ...] = ()
    unmatched_modules: tuple[str, ...] = ()
    advisory_only_modules: tuple[str, ...] = ()

    def tokens_for(self, module_path: str) -> int | None:
        for path, tokens in self.per_module_tokens:
            if path == module_path:
                return tokens
        return None

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "modules": list(self.modules),
            "token_estimate": self.token_estimate,
            "token_budget": self.token_budget,
            "token_utilization": self.token_utilization,
            "per_module_tokens": {path: tokens for path, tokens in self.per_module_tokens},
            "module_budget_overruns": [item.to_dict() for item in self.module_budget_overruns],
            "trigger_matches": [item.to_dict() for item in self.trigger_matches],
            "unmatched_modules": list(self.unmatched_modules),
            "advisory_only_modules": list(self.advisory_only_modules),
            "document": self.document.to_dict(),
        }


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def join_module_path(base_path: str, module_path: str) -> str:
    if not base_path:
        return module_path
    return f"{base_path.rstrip('/')}/{module_path}"


def load_manifest(
    base_path: str, file_reader: FileReader, *, filename: str = MANIFEST_FILENAME
) -> Manifest:
    """Read and project the manifest document from ``base_path`` through ``file_reader``."""

    manifest_path = join_module_path(base_path, filename)
    try:
        text = file_reader(manifest_path)
    except Exception as exc:
        raise BundleError(f"{filename} not found", module_path=manifest_path) from exc
    try:
        return parse_manifest(parse(text))
    except ParseError as exc:
        raise BundleError(
            f"{filename} could not be parsed: {exc}", module_path=manifest_path
        ) from exc


def bundle_modules(
    base_path: str,
    module_paths: Sequence[str],
    file_reader: FileReader,
    task_keywords: Iterable[str] = (),
    *,
    manifest: Manifest | None = None,
) -> BundleResult:
    """Parse, merge, and account for the resolved modules of one task."""

    keywords = tuple(task_keywords)
    active_manifest = manifest if manifest is not None else load_manifest(base_path, file_reader)
    paths = _dedupe(module_paths)

    loaded: list[tuple[str, Document]] = []
    per_module: list[tuple[str, int]] = []
    for path in paths:
        doc = _read_module(base_path, path, file_reader)
        tokens = estimate_tokens(format_document(doc))
        loaded.append((path, doc))
        per_module.append((path, tokens))
        logger.debug("adf_bundle_module_loaded", module_path=path, tokens=tokens)

    merged = merge_documents(loaded)
    token_estimate = estimate_tokens(format_document(merged))
    token_budget = active_manifest.token_budget
    utilization = None if token_budget is None else token_estimate / token_budget

    tokens_by_path = dict(per_module)
    overruns = tuple(
        ModuleBudgetOverrun(module=module.path, tokens=tokens_by_path[module.path], budget=budget)
        for module in active_manifest.on_demand
        if (budget := module.token_budget) is not None
        and module.path in tokens_by_path
        and tokens_by_path[module.path] > budget
    )
    for overrun in overruns:
        logger.info(
            "adf_bundle_module_budget_overrun",
            module_path=overrun.module,
            tokens=overrun.tokens,
            budget=overrun.budget,
        )

    loaded_paths = set(paths)
    default_paths = set(active_manifest.default_load)
    trigger_matches = tuple(
        _trigger_match(module, keywords, loaded_paths, default_paths)
        for module in active_manifest.on_demand
    )
    unmatched = tuple(
        module.path for module in active_manifest.on_demand if module.path not in loaded_paths
    )
    advisory_only = tuple(
        path
        for path, doc in loaded
        if path not in default_paths
        and not any(section.weight is Weight.LOAD_BEARING for section in doc.sections)
    )

    logger.debug(
        "adf_bundle_complete",
        modules=list(paths),
        token_estimate=token_estimate,
        token_budget=token_budget,
    )
    return BundleResult(
        document=merged,
        modules=paths,
        token_estimate=token_estimate,
        per_module_tokens=tuple(per_module),
        token_budget=token_budget,
        token_utilization=utilization,
        module_budget_overruns=overruns,
        trigger_matches=trigger_matches,
        unmatched_modules=unmatched,
        advisory_only_modules=advisory_only,
    )


def merge_documents(modules: Sequence[tuple[str, Document]]) -> Document:
    """Merge same-keyed sections across ``(path, document)`` pairs in list order."""

    order: list[str] = []
    merged: dict[str, Section] = {}
    origin: dict[str, str] = {}
    for path, doc in modules:
        for section in doc.sections:
            existing = merged.get(section.key)
            if existing is None:
                order.append(section.key)
                merged[section.key] = section
                origin[section.key] = path
                continue
            if existing.content_type is not section.content_type:
                raise BundleError(
                    f'Section "{section.key}" is {existing.content_type.value} in '
                    f"{origin[section.key]} but {section.content_type.value} in {path}",
                    module_path=path,
                )
            merged[section.key] = merge_sections(existing, section)
    return Document(sections=tuple(merged[key] for key in order))


def merge_sections(first: Section, second: Section) -> Section:
    """Merge two sections of the same key and content type."""

    a, b = first.content, second.content
    if isinstance(a, ListContent) and isinstance(b, ListContent):
        content: Content = ListContent(a.items + b.items)
    elif isinstance(a, MapContent) and isinstance(b, MapContent):
        content = MapContent(a.entries + b.entries)
    elif isinstance(a, MetricContent) and isinstance(b, MetricContent):
        content = MetricContent(a.entries + b.entries)
    elif isinstance(a, TextContent) and isinstance(b, TextContent):
        content = TextContent("\n".join(value for value in (a.value, b.value) if value))
    else:
        raise BundleError(
            f'Section "{first.key}" cannot merge {a.type.value} with {b.type.value}'
        )
    return Section(
        key=first.key,
        content=content,
        decoration=first.decoration if first.decoration is not None else second.decoration,
        weight=_promote_weight(first.weight, second.weight),
    )


def _promote_weight(first: Weight | None, second: Weight | None) -> Weight | None:
    if Weight.LOAD_BEARING in (first, second):
        return Weight.LOAD_BEARING
    if Weight.ADVISORY in (first, second):
        return Weight.ADVISORY
    return None


def _read_module(base_path: str, path: str, file_reader: FileReader) -> Document:
    try:
        text = file_reader(join_module_path(base_path, path))
    except Exception as exc:
        raise BundleError(f"Module not found: {path}", module_path=path) from exc
    try:
        return parse(text)
    except ParseError as exc:
        raise BundleError(f"Module {path} could not be parsed: {exc}", module_path=path) from exc


def _trigger_match(
    module: ManifestModule,
    keywords: tuple[str, ...],
    loaded_paths: set[str],
    default_paths: set[str],
) -> TriggerMatch:
    matched = module.path in loaded_paths
    if module.path in default_paths:
        reason: LoadReason | None = LoadReason.DEFAULT
    elif matched:
        reason = LoadReason.TRIGGER
    else:
        reason = None
    return TriggerMatch(
        module=module.path,
        triggers=module.triggers,
        matched=matched,
        matched_keywords=matched_keywords(module, keywords),
        load_reason=reason,
    )


def _dedupe(values: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return tuple(ordered)


__all__ = [
    "BundleResult",
    "FileReader",
    "LoadReason",
    "ModuleBudgetOverrun",
    "TriggerMatch",
    "bundle_modules",
    "estimate_tokens",
    "join_module_path",
    "load_manifest",
    "merge_documents",
    "merge_sections",
]
