"""Manifest projection, module resolution, and bundling."""

from adf_engine.routing.bundler import (
    BundleResult,
    FileReader,
    LoadReason,
    ModuleBudgetOverrun,
    TriggerMatch,
    bundle_modules,
    estimate_tokens,
    join_module_path,
    load_manifest,
    merge_documents,
    merge_sections,
)
from adf_engine.routing.manifest import (
    CadenceEntry,
    Manifest,
    ManifestModule,
    MetricSource,
    SyncEntry,
    matched_keywords,
    parse_manifest,
    parse_on_demand_entry,
    parse_sync_entry,
    resolve_modules,
)

__all__ = [
    "BundleResult",
    "CadenceEntry",
    "FileReader",
    "LoadReason",
    "Manifest",
    "ManifestModule",
    "MetricSource",
    "ModuleBudgetOverrun",
    "SyncEntry",
    "TriggerMatch",
    "bundle_modules",
    "estimate_tokens",
    "join_module_path",
    "load_manifest",
    "matched_keywords",
    "merge_documents",
    "merge_sections",
    "parse_manifest",
    "parse_on_demand_entry",
    "parse_sync_entry",
    "resolve_modules",
]
