"""UI package exports for the adf command line and its rendering helpers."""

from adf_engine.ui.cli import CLIError, build_parser, run_cli
from adf_engine.ui.keywords import tokenize_task
from adf_engine.ui.render import CLIRenderer, create_renderer

__all__ = [
    "CLIError",
    "CLIRenderer",
    "build_parser",
    "create_renderer",
    "run_cli",
    "tokenize_task",
]
