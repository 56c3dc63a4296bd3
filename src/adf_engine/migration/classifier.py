"""
adf-engine — migration routing classifier.

File: src/adf_engine/migration/classifier.py
Last updated: 2026-10-18

Purpose
- Route each markdown element to an ADF target (module, section, weight) or
  keep it in the vendor file, and assemble the result into a migration plan.

What should be included in this file
- STAY detection for environment/runtime-specific content.
- Heading-to-module routing: frontend.adf, backend.adf, otherwise core.adf.
- Rule routing by strength, with heading hints for neutral rules.
- Jaccard word-overlap duplicate detection against an existing ADF document.

Functional requirements
- Deterministic heuristics only; every element gets exactly one decision and
  nothing is silently dropped.
- Items already present in the existing document (overlap >= 0.8) are turned
  into STAY decisions rather than removed from the plan.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Final

from adf_engine.document.models import Document, JSONValue, ListContent, TextContent, Weight
from adf_engine.migration.markdown import (
    ElementKind,
    MarkdownElement,
    MarkdownSection,
    RuleStrength,
)

DUPLICATE_THRESHOLD: Final[float] = 0.8
DEFAULT_MODULE: Final[str] = "core.adf"
DEDUPLICATED_REASON: Final[str] = "Already exists in ADF (deduplicated)"
STAY_REASON: Final[str] = "Environment/runtime-specific (STAY in vendor file)"


class RouteDecision(StrEnum):
    STAY = "STAY"
    MIGRATE = "MIGRATE"


class TargetSection(StrEnum):
    CONSTRAINTS = "CONSTRAINTS"
    CONTEXT = "CONTEXT"
    ADVISORY = "ADVISORY"


_STAY_PATTERNS: Final[tuple[re.Pattern[str], ...]] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\bWSL\b",
        r"\bline.ending",
        r"\bcredential.helper",
        r"/mnt/c/",
        r"\bwindows\b",
        r"\bmingw",
        r"\bos[- ]specific\b",
        r"\bshell[- ]specific\b",
    )
)
_MODULE_ROUTES: Final[tuple[tuple[re.Pattern[str], str], ...]] = (
    (
        re.compile(r"\b(design.system|ui|frontend|css|component|react|vue|svelte)\b"),
        "frontend.adf",
    ),
    (re.compile(r"\b(api|backend|deploy|server|database|db|endpoint)\b"), "backend.adf"),
)
_STYLE_HEADING_RE: Final[re.Pattern[str]] = re.compile(
    r"\b(convention|style|naming|format)\b", re.IGNORECASE
)
_GIT_HEADING_RE: Final[re.Pattern[str]] = re.compile(
    r"\b(git|commit|workflow|hook)\b", re.IGNORECASE
)
_ARCHITECTURE_RE: Final[re.Pattern[str]] = re.compile(
    r"\b(architect|depend|flow|package|modul|struct|layer)", re.IGNORECASE
)
_STRUCTURE_RE: Final[re.Pattern[str]] = re.compile(
    r"\b(director|config)|\.charter\b|\.ai\b", re.IGNORECASE
)
_WORD_STRIP_RE: Final[re.Pattern[str]] = re.compile(r"[^a-z0-9\s]")


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    decision: RouteDecision
    target_section: TargetSection
    target_module: str
    weight: Weight
    reason: str

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "decision": self.decision.value,
            "target_section": self.target_section.value,
            "target_module": self.target_module,
            "weight": self.weight.value,
            "reason": self.reason,
        }


@dataclass(frozen=True, slots=True)
class MigrationItem:
    element: MarkdownElement
    source_heading: str
    classification: ClassificationResult

    @property
    def migrates(self) -> bool:
        return self.classification.decision is RouteDecision.MIGRATE

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "element": self.element.to_dict(),
            "source_heading": self.source_heading,
            "classification": self.classification.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class MigrationSummary:
    constraints: int
    context: int
    advisory: int
    stay: int
    total: int

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "constraints": self.constraints,
            "context": self.context,
            "advisory": self.advisory,
            "stay": self.stay,
            "total": self.total,
        }


@dataclass(frozen=True, slots=True)
class MigrationPlan:
    """Every classified element, in source order."""

    items: tuple[MigrationItem, ...] = ()

    @property
    def migrate_items(self) -> tuple[MigrationItem, ...]:
        return tuple(item for item in self.items if item.migrates)

    @property
    def stay_items(self) -> tuple[MigrationItem, ...]:
        return tuple(item for item in self.items if not item.migrates)

    @property
    def target_modules(self) -> tuple[str, ...]:
        modules = (item.classification.target_module for item in self.migrate_items)
        return tuple(dict.fromkeys(modules))

    def items_for(self, module: str) -> tuple[MigrationItem, ...]:
        return tuple(
            item for item in self.migrate_items if item.classification.target_module == module
        )

    @property
    def summary(self) -> MigrationSummary:
        migrating = self.migrate_items

        def count(section: TargetSection) -> int:
            return sum(1 for item in migrating if item.classification.target_section is section)

        return MigrationSummary(
            constraints=count(TargetSection.CONSTRAINTS),
            context=count(TargetSection.CONTEXT),
            advisory=count(TargetSection.ADVISORY),
            stay=len(self.items) - len(migrating),
            total=len(self.items),
        )

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "items": [item.to_dict() for item in self.items],
            "target_modules": list(self.target_modules),
            "summary": self.summary.to_dict(),
        }


def heading_to_module(heading: str) -> str:
    lowered = heading.lower()
    for pattern, module in _MODULE_ROUTES:
        if pattern.search(lowered):
            return module
    return DEFAULT_MODULE


def classify_element(element: MarkdownElement, heading: str) -> ClassificationResult:
    """Route one element found under ``heading``."""

    module = heading_to_module(heading)

    def route(
        section: TargetSection,
        weight: Weight,
        reason: str,
        decision: RouteDecision = RouteDecision.MIGRATE,
    ) -> ClassificationResult:
        return ClassificationResult(
            decision=decision,
            target_section=section,
            target_module=module,
            weight=weight,
            reason=reason,
        )

    if any(pattern.search(element.content) for pattern in _STAY_PATTERNS):
        return route(TargetSection.CONTEXT, Weight.ADVISORY, STAY_REASON, RouteDecision.STAY)

    if element.kind is ElementKind.RULE:
        if element.strength is RuleStrength.IMPERATIVE:
            return route(
                TargetSection.CONSTRAINTS,
                Weight.LOAD_BEARING,
                "Imperative rule (NEVER/ALWAYS/MUST)",
            )
        if element.strength is RuleStrength.ADVISORY:
            return route(
                TargetSection.ADVISORY, Weight.ADVISORY, "Advisory rule (prefer/should/bias)"
            )
        if _STYLE_HEADING_RE.search(heading):
            return route(TargetSection.CONSTRAINTS, Weight.ADVISORY, "Naming/style convention")
        if _GIT_HEADING_RE.search(heading):
            return route(TargetSection.CONSTRAINTS, Weight.LOAD_BEARING, "Git workflow rule")
        return route(TargetSection.CONSTRAINTS, Weight.ADVISORY, "Rule (neutral strength)")

    if element.kind is ElementKind.CODE_BLOCK:
        reason = "Build/tool commands" if element.language in ("bash", "sh") else "Code reference"
        return route(TargetSection.CONTEXT, Weight.ADVISORY, reason)
    if element.kind is ElementKind.TABLE_ROW:
        return route(TargetSection.CONTEXT, Weight.ADVISORY, "Tabular reference data")

    if _ARCHITECTURE_RE.search(element.content):
        return route(TargetSection.CONTEXT, Weight.ADVISORY, "Architecture description")
    if _STRUCTURE_RE.search(element.content):
        return route(TargetSection.CONTEXT, Weight.ADVISORY, "Configuration/structure description")
    return route(TargetSection.CONTEXT, Weight.ADVISORY, "Informational context")


def word_set(text: str) -> frozenset[str]:
    words = _WORD_STRIP_RE.sub(" ", text.lower()).split()
    return frozenset(word for word in words if len(word) > 1)


def is_duplicate_item(
    existing: str, candidate: str, *, threshold: float = DUPLICATE_THRESHOLD
) -> bool:
    """Jaccard overlap of the two items' word sets reaches ``threshold``."""

    first, second = word_set(existing), word_set(candidate)
    if not first and not second:
        return True
    if not first or not second:
        return False
    return len(first & second) / len(first | second) >= threshold


def existing_items(doc: Document) -> tuple[str, ...]:
    """List items and text values already present in ``doc``."""

    values: list[str] = []
    for section in doc.sections:
        content = section.content
        if isinstance(content, ListContent):
            values.extend(content.items)
        elif isinstance(content, TextContent):
            values.append(content.value)
    return tuple(values)


def build_migration_plan(
    sections: Iterable[MarkdownSection], existing: Document | None = None
) -> MigrationPlan:
    """Classify every element; migrating items already in ``existing`` become STAY."""

    known = existing_items(existing) if existing is not None else ()
    items: list[MigrationItem] = []
    for section in sections:
        for element in section.elements:
            classification = classify_element(element, section.heading)
            if (
                classification.decision is RouteDecision.MIGRATE
                and any(is_duplicate_item(value, element.content) for value in known)
            ):
                classification = replace(
                    classification, decision=RouteDecision.STAY, reason=DEDUPLICATED_REASON
                )
            items.append(
                MigrationItem(
                    element=element, source_heading=section.heading, classification=classification
                )
            )
    return MigrationPlan(items=tuple(items))


__all__ = [
    "ClassificationResult",
    "DEDUPLICATED_REASON",
    "DEFAULT_MODULE",
    "DUPLICATE_THRESHOLD",
    "MigrationItem",
    "MigrationPlan",
    "MigrationSummary",
    "RouteDecision",
    "STAY_REASON",
    "TargetSection",
    "build_migration_plan",
    "classify_element",
    "existing_items",
    "heading_to_module",
    "is_duplicate_item",
    "word_set",
]
