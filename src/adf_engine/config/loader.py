"""
adf-engine — runtime config loader.

File: src/adf_engine/config/loader.py
Last updated: 2026-10-18

Purpose
- Build the effective engine config from defaults, ``adf.toml``, ``ADF_*``
  environment variables, and command-line flags.

Functional requirements
- Precedence: CLI > env > file > defaults; a ``None`` CLI value defers to the
  layer below.
- Only the settable fields in ``SETTABLE_FIELDS`` can be overridden from the
  environment or the command line; ``meta.schema_version`` cannot.
- ``paths.ai_dir`` is resolved relative to the directory holding the config
  file (the working directory when no file is given).
- A missing default ``adf.toml`` is not an error; a missing explicit file is.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from adf_engine.config.schema import assert_valid_config, default_config, merge_config

DEFAULT_CONFIG_FILE: Final[str] = "adf.toml"
ENV_PREFIX: Final[str] = "ADF_"

SETTABLE_FIELDS: Final[dict[str, type]] = {
    "paths.ai_dir": str,
    "paths.manifest": str,
    "evidence.stale_threshold": float,
    "evidence.auto_measure": bool,
    "observability.log_level": str,
    "observability.log_format": str,
    "output.format": str,
}

_BOOLEAN_WORDS: Final[dict[str, bool]] = {
    **dict.fromkeys(("1", "true", "t", "yes", "y", "on"), True),
    **dict.fromkeys(("0", "false", "f", "no", "n", "off"), False),
}


class ConfigLoadError(ValueError):
    """Raised when config cannot be read or an override cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load the effective config with precedence CLI > env > file > defaults."""

    resolved_path = (
        Path.cwd() / DEFAULT_CONFIG_FILE
        if config_path is None
        else Path(config_path).expanduser()
    ).resolve()
    file_payload = _read_toml(resolved_path, required=config_path is not None)
    config = assert_valid_config(merge_config(default_config(), file_payload))

    env = os.environ if environ is None else environ
    for field, raw in _env_values(env):
        _assign(config, field, _coerce_env(field, raw))
    for field, value in sorted((cli_overrides or {}).items()):
        if value is None:
            continue
        if field not in SETTABLE_FIELDS:
            raise ConfigLoadError(f"unknown config override {field!r}")
        _assign(config, field, value)

    config = assert_valid_config(config)
    config["paths"]["ai_dir"] = _resolve_dir(config["paths"]["ai_dir"], resolved_path.parent)
    return config


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Return a deterministic JSON dump of the effective config."""

    return json.dumps(
        merge_config({}, config), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def env_var_name(field: str) -> str:
    """``evidence.auto_measure`` -> ``ADF_EVIDENCE_AUTO_MEASURE``."""

    return ENV_PREFIX + field.replace(".", "_").upper()


def _read_toml(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _env_values(environ: Mapping[str, str]) -> list[tuple[str, str]]:
    return [
        (field, environ[name])
        for field in sorted(SETTABLE_FIELDS)
        if (name := env_var_name(field)) in environ
    ]


def _coerce_env(field: str, raw: str) -> object:
    value = raw.strip()
    kind = SETTABLE_FIELDS[field]
    name = env_var_name(field)
    if kind is bool:
        try:
            return _BOOLEAN_WORDS[value.lower()]
        except KeyError:
            raise ConfigLoadError(
                f"{name} -> {field} must be a boolean (true/false/1/0/yes/no/on/off)"
            ) from None
    if kind is float:
        try:
            return float(value)
        except ValueError as exc:
            raise ConfigLoadError(f"{name} -> {field} must be a number") from exc
    return value


def _assign(config: dict[str, Any], field: str, value: object) -> None:
    section, key = field.split(".")
    config[section][key] = value


def _resolve_dir(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(candidate)).as_posix()


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "SETTABLE_FIELDS",
    "dump_effective_config",
    "env_var_name",
    "load_config",
]
