"""Markdown agent-config migration into weighted ADF modules."""

from adf_engine.migration.classifier import (
    DUPLICATE_THRESHOLD,
    ClassificationResult,
    MigrationItem,
    MigrationPlan,
    MigrationSummary,
    RouteDecision,
    TargetSection,
    build_migration_plan,
    classify_element,
    heading_to_module,
    is_duplicate_item,
)
from adf_engine.migration.markdown import (
    ElementKind,
    MarkdownElement,
    MarkdownSection,
    RuleStrength,
    detect_strength,
    parse_markdown_sections,
)
from adf_engine.migration.merge import (
    MergeStrategy,
    apply_migration,
    format_item,
    migration_operations,
)

__all__ = [
    "ClassificationResult",
    "DUPLICATE_THRESHOLD",
    "ElementKind",
    "MarkdownElement",
    "MarkdownSection",
    "MergeStrategy",
    "MigrationItem",
    "MigrationPlan",
    "MigrationSummary",
    "RouteDecision",
    "RuleStrength",
    "TargetSection",
    "apply_migration",
    "build_migration_plan",
    "classify_element",
    "detect_strength",
    "format_item",
    "heading_to_module",
    "is_duplicate_item",
    "migration_operations",
    "parse_markdown_sections",
]
