"""
adf-engine — metric constraint validation.

File: src/adf_engine/verification/validator.py
Last updated: 2026-10-18

Purpose
- Judge every metric entry of a Document against its ceiling, optionally
  substituting externally measured values, and tally sections by weight.
- Flag recorded metric baselines that have fallen far behind measured values.

Functional requirements
- ``value < ceiling`` passes, ``value == ceiling`` warns, ``value > ceiling`` fails.
- A numeric context value for a metric key overrides the recorded value.
- ``all_passing`` is true exactly when no constraint fails; warnings still pass.

Non-functional requirements
- Pure queries: no measurement, no I/O, no logging side effects on the inputs.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Final, Literal

from adf_engine.constants import DEFAULT_STALE_THRESHOLD, RECOMMENDED_CEILING_HEADROOM
from adf_engine.document.models import (
    Document,
    JSONValue,
    MetricContent,
    MetricEntry,
    Number,
    Weight,
    format_number,
)

MetricContext = Mapping[str, object]
ValueSource = Literal["context", "metric"]

MIN_STALE_THRESHOLD: Final[float] = 1.0
MAX_STALE_THRESHOLD: Final[float] = 10.0
STALE_SECTION_KEY: Final[str] = "METRICS"


class ConstraintStatus(StrEnum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


@dataclass(frozen=True, slots=True)
class ConstraintResult:
    section: str
    key: str
    value: Number
    ceiling: Number
    unit: str
    status: ConstraintStatus
    source: ValueSource

    @property
    def message(self) -> str:
        unit = f" [{self.unit}]" if self.unit else ""
        return (
            f"{self.key}: {format_number(self.value)} / {format_number(self.ceiling)}"
            f"{unit} -- {self.status.value.upper()}"
        )

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "section": self.section,
            "key": self.key,
            "value": self.value,
            "ceiling": self.ceiling,
            "unit": self.unit,
            "status": self.status.value,
            "source": self.source,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class WeightSummary:
    load_bearing: int = 0
    advisory: int = 0
    unweighted: int = 0

    @property
    def total(self) -> int:
        return self.load_bearing + self.advisory + self.unweighted

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "load_bearing": self.load_bearing,
            "advisory": self.advisory,
            "unweighted": self.unweighted,
            "total": self.total,
        }


@dataclass(frozen=True, slots=True)
class EvidenceResult:
    """Per-metric verdicts plus the weight census of the validated Document."""

    constraints: tuple[ConstraintResult, ...]
    weight_summary: WeightSummary

    @property
    def pass_count(self) -> int:
        return self._count(ConstraintStatus.PASS)

    @property
    def warn_count(self) -> int:
        return self._count(ConstraintStatus.WARN)

    @property
    def fail_count(self) -> int:
        return self._count(ConstraintStatus.FAIL)

    @property
    def all_passing(self) -> bool:
        return self.fail_count == 0

    def failures(self) -> tuple[ConstraintResult, ...]:
        return tuple(item for item in self.constraints if item.status is ConstraintStatus.FAIL)

    def _count(self, status: ConstraintStatus) -> int:
        return sum(1 for item in self.constraints if item.status is status)

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "constraints": [item.to_dict() for item in self.constraints],
            "weight_summary": self.weight_summary.to_dict(),
            "all_passing": self.all_passing,
            "pass_count": self.pass_count,
            "warn_count": self.warn_count,
            "fail_count": self.fail_count,
        }


@dataclass(frozen=True, slots=True)
class StaleBaseline:
    metric: str
    baseline: Number
    current: Number
    delta: Number
    ratio: float
    recommended_ceiling: int

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "metric": self.metric,
            "baseline": self.baseline,
            "current": self.current,
            "delta": self.delta,
            "ratio": self.ratio,
            "recommended_ceiling": self.recommended_ceiling,
        }


def constraint_status(value: Number, ceiling: Number) -> ConstraintStatus:
    if value < ceiling:
        return ConstraintStatus.PASS
    if value == ceiling:
        return ConstraintStatus.WARN
    return ConstraintStatus.FAIL


def validate_constraints(doc: Document, context: MetricContext | None = None) -> EvidenceResult:
    """Judge every metric entry in ``doc``, preferring numeric ``context`` values."""

    overrides = context or {}
    results: list[ConstraintResult] = []
    for section in doc.sections:
        if not isinstance(section.content, MetricContent):
            continue
        for entry in section.content.entries:
            value, source = _effective_value(entry, overrides)
            results.append(
                ConstraintResult(
                    section=section.key,
                    key=entry.key,
                    value=value,
                    ceiling=entry.ceiling,
                    unit=entry.unit,
                    status=constraint_status(value, entry.ceiling),
                    source=source,
                )
            )
    return EvidenceResult(constraints=tuple(results), weight_summary=compute_weight_summary(doc))


def compute_weight_summary(doc: Document) -> WeightSummary:
    load_bearing = advisory = unweighted = 0
    for section in doc.sections:
        if section.weight is Weight.LOAD_BEARING:
            load_bearing += 1
        elif section.weight is Weight.ADVISORY:
            advisory += 1
        else:
            unweighted += 1
    return WeightSummary(load_bearing=load_bearing, advisory=advisory, unweighted=unweighted)


def detect_stale_baselines(
    doc: Document,
    context: MetricContext,
    threshold: float = DEFAULT_STALE_THRESHOLD,
) -> tuple[StaleBaseline, ...]:
    """Report ``METRICS`` entries whose measured value outgrew the recorded one by ``threshold``."""

    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ValueError(f"threshold: expected number, got {type(threshold).__name__}")
    if not MIN_STALE_THRESHOLD <= threshold <= MAX_STALE_THRESHOLD:
        raise ValueError(
            f"threshold: must be between {MIN_STALE_THRESHOLD} and {MAX_STALE_THRESHOLD}, "
            f"got {threshold}"
        )

    stale: list[StaleBaseline] = []
    for section in doc.sections:
        if section.key != STALE_SECTION_KEY or not isinstance(section.content, MetricContent):
            continue
        for entry in section.content.entries:
            current = _context_number(context, entry.key)
            if current is None or entry.value <= 0:
                continue
            if current < threshold * entry.value:
                continue
            stale.append(
                StaleBaseline(
                    metric=entry.key,
                    baseline=entry.value,
                    current=current,
                    delta=current - entry.value,
                    ratio=round(current / entry.value, 2),
                    recommended_ceiling=math.ceil(current * RECOMMENDED_CEILING_HEADROOM),
                )
            )
    return tuple(stale)


def _effective_value(entry: MetricEntry, context: MetricContext) -> tuple[Number, ValueSource]:
    override = _context_number(context, entry.key)
    if override is None:
        return entry.value, "metric"
    return override, "context"


def _context_number(context: MetricContext, key: str) -> Number | None:
    value = context.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


__all__ = [
    "MAX_STALE_THRESHOLD",
    "MIN_STALE_THRESHOLD",
    "ConstraintResult",
    "ConstraintStatus",
    "EvidenceResult",
    "MetricContext",
    "StaleBaseline",
    "WeightSummary",
    "compute_weight_summary",
    "constraint_status",
    "detect_stale_baselines",
    "validate_constraints",
]
