"""
adf-engine observability package public API.

Purpose
- Export logging setup helpers and the structured logger factory used by engine modules.
"""

from adf_engine.observability.logging import (
    LOG_FORMATS,
    LoggingConfig,
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "LOG_FORMATS",
    "LoggingConfig",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
