"""Immutable patch operations over ADF documents."""

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
    load_operations,
    operation_from_dict,
    parse_operations,
)
from adf_engine.patching.patcher import apply_operation, apply_patches

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
    "apply_operation",
    "apply_patches",
    "load_operations",
    "operation_from_dict",
    "parse_operations",
]
