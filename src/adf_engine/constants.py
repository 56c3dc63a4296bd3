"""Stable constants shared across the ADF engine."""

from __future__ import annotations

from typing import Final

# The one document version the engine reads and writes.
ADF_VERSION: Final[str] = "0.1"
SUPPORTED_VERSIONS: Final[frozenset[str]] = frozenset({ADF_VERSION})

# Canonical section ordering; keys outside this table sort after it.
CANONICAL_KEY_ORDER: Final[tuple[str, ...]] = (
    "TASK",
    "ROLE",
    "CONTEXT",
    "OUTPUT",
    "CONSTRAINTS",
    "RULES",
    "DEFAULT_LOAD",
    "ON_DEMAND",
    "FILES",
    "TOOLS",
    "RISKS",
    "STATE",
)

STANDARD_DECORATIONS: Final[dict[str, str]] = {
    "TASK": "\U0001f3af",
    "ROLE": "\U0001f9d1",
    "CONTEXT": "\U0001f4cb",
    "OUTPUT": "✅",
    "CONSTRAINTS": "⚠️",
    "RULES": "\U0001f4d0",
    "DEFAULT_LOAD": "\U0001f4e6",
    "ON_DEMAND": "\U0001f4c2",
    "FILES": "\U0001f5c2️",
    "TOOLS": "\U0001f6e0️",
    "RISKS": "\U0001f6a8",
    "STATE": "\U0001f9e0",
}

# Formatting.
BODY_INDENT: Final[str] = "  "
CHARS_PER_TOKEN: Final[int] = 4

# Routing manifest.
MANIFEST_FILENAME: Final[str] = "manifest.adf"
DEFAULT_AI_DIR: Final[str] = ".ai"

# Stale-baseline detection.
DEFAULT_STALE_THRESHOLD: Final[float] = 1.2
RECOMMENDED_CEILING_HEADROOM: Final[float] = 1.15

CONFIG_SCHEMA_VERSION: Final[int] = 1

__all__ = [
    "ADF_VERSION",
    "BODY_INDENT",
    "CANONICAL_KEY_ORDER",
    "CHARS_PER_TOKEN",
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_AI_DIR",
    "DEFAULT_STALE_THRESHOLD",
    "MANIFEST_FILENAME",
    "RECOMMENDED_CEILING_HEADROOM",
    "STANDARD_DECORATIONS",
    "SUPPORTED_VERSIONS",
]
