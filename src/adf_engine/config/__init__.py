"""
adf-engine config package public API.

File: src/adf_engine/config/__init__.py
Last updated: 2026-10-18

Purpose
- Export config loading/validation entrypoints and public error types.

Functional requirements
- Support loading from ``adf.toml`` + ``ADF_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from adf_engine.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    SETTABLE_FIELDS,
    ConfigLoadError,
    dump_effective_config,
    env_var_name,
    load_config,
)
from adf_engine.config.schema import (
    DEFAULT_CONFIG,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    EngineConfig,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "EngineConfig",
    "SETTABLE_FIELDS",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "env_var_name",
    "load_config",
    "merge_config",
    "validate_config",
]
