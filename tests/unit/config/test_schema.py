"""
adf-engine — unit tests for config schema validation

File: tests/unit/config/test_schema.py
Last updated: 2026-10-18

Purpose
- Validate strict schema checks, deterministic issue paths, and merge semantics.
"""

from __future__ import annotations

from typing import Any

import pytest

from adf_engine.config import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)
from adf_engine.config.schema import migration_guidance

pytestmark = pytest.mark.unit


def _with(section: str, key: str, value: object) -> dict[str, Any]:
    config = merge_config({}, default_config())
    config[section][key] = value
    return config


def test_default_config_is_valid_and_independent_copy() -> None:
    config = default_config()
    assert assert_valid_config(config) == merge_config({}, DEFAULT_CONFIG)

    config["paths"]["ai_dir"] = "elsewhere"
    assert DEFAULT_CONFIG["paths"]["ai_dir"] == ".ai"


@pytest.mark.parametrize(
    ("section", "key", "value", "path", "message"),
    [
        ("evidence", "stale_threshold", 0.5, "evidence.stale_threshold", "must be >= 1.0"),
        ("evidence", "stale_threshold", 11, "evidence.stale_threshold", "must be <= 10.0"),
        ("evidence", "stale_threshold", "1.2", "evidence.stale_threshold", "expected number, got str"),
        ("evidence", "auto_measure", "true", "evidence.auto_measure", "expected boolean, got str"),
        ("paths", "manifest", "manifest.txt", "paths.manifest", "must name an .adf file"),
        ("paths", "ai_dir", "   ", "paths.ai_dir", "must not be empty"),
        ("output", "format", "yaml", "output.format", "invalid value 'yaml'; expected one of: json, text"),
        ("meta", "schema_version", 0, "meta.schema_version", "must be >= 1"),
    ],
)
def test_field_issues_are_reported_with_paths(
    section: str, key: str, value: object, path: str, message: str
) -> None:
    result = validate_config(_with(section, key, value))

    assert not result.is_valid
    assert [(issue.path, issue.message) for issue in result.issues] == [(path, message)]


def test_log_level_is_case_insensitive() -> None:
    config = assert_valid_config(_with("observability", "log_level", "info"))
    assert config["observability"]["log_level"] == "INFO"


def test_newer_schema_version_gets_migration_guidance() -> None:
    result = validate_config(_with("meta", "schema_version", 2))
    assert result.issues[0].message == migration_guidance(2)
    assert "upgrade the adf-engine package" in result.issues[0].message


def test_unknown_and_missing_sections() -> None:
    config = default_config()
    del config["output"]  # type: ignore[misc]
    payload: dict[str, Any] = {**config, "extra": {}}

    result = validate_config(payload)

    assert [(issue.path, issue.message) for issue in result.issues] == [
        ("extra", "unknown field"),
        ("output", "missing required field"),
    ]


def test_non_object_root() -> None:
    result = validate_config(["not", "a", "mapping"])
    assert result.config is None
    assert result.issues[0].path == "<root>"


def test_validation_error_renders_every_issue() -> None:
    bad = _with("output", "format", 3)
    bad["evidence"]["auto_measure"] = 1

    with pytest.raises(ConfigValidationError) as excinfo:
        assert_valid_config(bad)

    rendered = str(excinfo.value)
    assert rendered.startswith("invalid config:\n")
    assert "- evidence.auto_measure: expected boolean, got int" in rendered
    assert "- output.format: expected string, got int" in rendered


def test_merge_config_is_deep_and_does_not_mutate_inputs() -> None:
    base = {"evidence": {"stale_threshold": 1.2, "auto_measure": False}}
    overlay = {"evidence": {"auto_measure": True}}

    merged = merge_config(base, overlay)

    assert merged == {"evidence": {"stale_threshold": 1.2, "auto_measure": True}}
    assert base["evidence"]["auto_measure"] is False
