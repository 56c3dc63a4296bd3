"""Constraint validation and baseline drift checks over ADF metric sections."""

from adf_engine.verification.validator import (
    MAX_STALE_THRESHOLD,
    MIN_STALE_THRESHOLD,
    ConstraintResult,
    ConstraintStatus,
    EvidenceResult,
    MetricContext,
    StaleBaseline,
    WeightSummary,
    compute_weight_summary,
    constraint_status,
    detect_stale_baselines,
    validate_constraints,
)

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
