"""
adf-engine — routing manifest projection and module resolution.

File: src/adf_engine/routing/manifest.py
Last updated: 2026-10-18

Purpose
- Project the routing-relevant sections of a parsed manifest Document into a
  ``Manifest`` value.
- Resolve which module documents a task needs from its keyword set.

Functional requirements
- Sections of an unexpected content type are ignored rather than rejected.
- Trigger matching is exact-token and case-insensitive: "React" matches
  "react" but never "Reactive".
- Resolution order is default-load order followed by matched on-demand modules
  in declaration order, without duplicates.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final

from adf_engine.constants import ADF_VERSION
from adf_engine.document.models import (
    Document,
    JSONValue,
    ListContent,
    MapContent,
    Section,
    TextContent,
)

_BUDGET_SUFFIX_RE: Final[re.Pattern[str]] = re.compile(
    r"\s*\[budget\s*:\s*(?P<budget>\d+)\s*\]\s*$", re.IGNORECASE
)
_TRIGGER_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?P<path>.+?)\s*\(\s*Triggers?\s+on\s*:\s*(?P<triggers>.*)\)\s*$", re.IGNORECASE
)
_SYNC_RE: Final[re.Pattern[str]] = re.compile(r"^(?P<source>.+?)\s*->\s*(?P<target>.+)$")
_LEADING_INT_RE: Final[re.Pattern[str]] = re.compile(r"^\s*(?P<value>[+-]?\d+)")


@dataclass(frozen=True, slots=True)
class ManifestModule:
    path: str
    triggers: tuple[str, ...] = ()
    token_budget: int | None = None

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "path": self.path,
            "triggers": list(self.triggers),
            "token_budget": self.token_budget,
        }


@dataclass(frozen=True, slots=True)
class SyncEntry:
    source: str
    target: str

    def to_dict(self) -> dict[str, JSONValue]:
        return {"source": self.source, "target": self.target}


@dataclass(frozen=True, slots=True)
class CadenceEntry:
    check: str
    frequency: str

    def to_dict(self) -> dict[str, JSONValue]:
        return {"check": self.check, "frequency": self.frequency}


@dataclass(frozen=True, slots=True)
class MetricSource:
    key: str
    path: str

    def to_dict(self) -> dict[str, JSONValue]:
        return {"key": self.key, "path": self.path}


@dataclass(frozen=True, slots=True)
class Manifest:
    """Resolver-facing projection of a manifest Document."""

    version: str = ADF_VERSION
    role: str | None = None
    default_load: tuple[str, ...] = ()
    on_demand: tuple[ManifestModule, ...] = ()
    rules: tuple[str, ...] = ()
    token_budget: int | None = None
    sync: tuple[SyncEntry, ...] = ()
    cadence: tuple[CadenceEntry, ...] = ()
    metrics: tuple[MetricSource, ...] = ()

    def module(self, path: str) -> ManifestModule | None:
        for module in self.on_demand:
            if module.path == path:
                return module
        return None

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "version": self.version,
            "role": self.role,
            "default_load": list(self.default_load),
            "on_demand": [module.to_dict() for module in self.on_demand],
            "rules": list(self.rules),
            "token_budget": self.token_budget,
            "sync": [entry.to_dict() for entry in self.sync],
            "cadence": [entry.to_dict() for entry in self.cadence],
            "metrics": [entry.to_dict() for entry in self.metrics],
        }


def parse_manifest(doc: Document) -> Manifest:
    """Project ``doc`` into a fresh Manifest; never mutates ``doc``."""

    role = _text(doc.section("ROLE"))
    default_load = _dedupe(item.strip() for item in _items(doc.section("DEFAULT_LOAD")))
    on_demand = tuple(
        parse_on_demand_entry(item) for item in _items(doc.section("ON_DEMAND")) if item.strip()
    )
    rules = tuple(item.strip() for item in _items(doc.section("RULES")))
    sync = tuple(
        entry
        for entry in (parse_sync_entry(item) for item in _items(doc.section("SYNC")))
        if entry is not None
    )
    cadence = tuple(
        CadenceEntry(check=key, frequency=value) for key, value in _pairs(doc.section("CADENCE"))
    )
    metrics = tuple(
        MetricSource(key=key, path=value) for key, value in _pairs(doc.section("METRICS"))
    )
    budget_pairs = dict(_pairs(doc.section("BUDGET")))
    token_budget = _positive_int(budget_pairs.get("MAX_TOKENS"))

    return Manifest(
        version=doc.version,
        role=role,
        default_load=default_load,
        on_demand=on_demand,
        rules=rules,
        token_budget=token_budget,
        sync=sync,
        cadence=cadence,
        metrics=metrics,
    )


def parse_on_demand_entry(entry: str) -> ManifestModule:
    """Parse ``path (Triggers on: A, B) [budget: N]``; both suffixes are optional."""

    remaining = entry.strip()
    token_budget: int | None = None
    budget_match = _BUDGET_SUFFIX_RE.search(remaining)
    if budget_match is not None:
        token_budget = _positive_int(budget_match.group("budget"))
        remaining = remaining[: budget_match.start()].strip()

    trigger_match = _TRIGGER_RE.match(remaining)
    if trigger_match is None:
        return ManifestModule(path=remaining, triggers=(), token_budget=token_budget)

    triggers = _dedupe(
        part.strip() for part in trigger_match.group("triggers").split(",") if part.strip()
    )
    return ManifestModule(
        path=trigger_match.group("path").strip(),
        triggers=triggers,
        token_budget=token_budget,
    )


def parse_sync_entry(entry: str) -> SyncEntry | None:
    match = _SYNC_RE.match(entry.strip())
    if match is None:
        return None
    return SyncEntry(source=match.group("source").strip(), target=match.group("target").strip())


def matched_keywords(module: ManifestModule, task_keywords: Iterable[str]) -> tuple[str, ...]:
    """Return the task keywords, in input order, that equal one of the module's triggers."""

    triggers = {trigger.casefold() for trigger in module.triggers}
    return _dedupe(keyword for keyword in task_keywords if keyword.casefold() in triggers)


def resolve_modules(manifest: Manifest, task_keywords: Iterable[str]) -> tuple[str, ...]:
    """Return default-load paths followed by on-demand paths whose triggers match."""

    keywords = tuple(task_keywords)
    resolved = list(manifest.default_load)
    seen = set(resolved)
    for module in manifest.on_demand:
        if module.path in seen:
            continue
        if matched_keywords(module, keywords):
            resolved.append(module.path)
            seen.add(module.path)
    return tuple(resolved)


def _text(section: Section | None) -> str | None:
    if section is None or not isinstance(section.content, TextContent):
        return None
    return section.content.value


def _items(section: Section | None) -> tuple[str, ...]:
    if section is None or not isinstance(section.content, ListContent):
        return ()
    return section.content.items


def _pairs(section: Section | None) -> tuple[tuple[str, str], ...]:
    if section is None or not isinstance(section.content, MapContent):
        return ()
    return tuple((entry.key, entry.value) for entry in section.content.entries)


def _positive_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    match = _LEADING_INT_RE.match(raw)
    if match is None:
        return None
    value = int(match.group("value"))
    return value if value > 0 else None


def _dedupe(values: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return tuple(ordered)


__all__ = [
    "CadenceEntry",
    "Manifest",
    "ManifestModule",
    "MetricSource",
    "SyncEntry",
    "matched_keywords",
    "parse_manifest",
    "parse_on_demand_entry",
    "parse_sync_entry",
    "resolve_modules",
]
