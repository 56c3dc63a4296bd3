"""
adf-engine — package root.

File: src/adf_engine/__init__.py
Last updated: 2026-10-18

Purpose
- Parse, canonically format, patch, bundle and validate ADF documents.

Import boundary rules
- Must not have side effects at import time (no config loading, no logging init).
- Subpackages are imported lazily by callers; only the version is exported here.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
