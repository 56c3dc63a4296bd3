"""
adf-engine — unit tests for task keyword extraction

File: tests/unit/ui/test_keywords.py
Last updated: 2026-10-18
"""

from __future__ import annotations

import pytest

from adf_engine.ui import tokenize_task

pytestmark = pytest.mark.unit


def test_tokenize_splits_lowercases_and_dedupes() -> None:
    assert tokenize_task("Add a React login form (CSS), then fix the API! react") == (
        "add",
        "react",
        "login",
        "form",
        "css",
        "then",
        "fix",
        "the",
        "api",
    )


def test_tokenize_strips_inner_punctuation_and_drops_short_tokens() -> None:
    assert tokenize_task("node.js; [x] {db}: v2") == ("nodejs", "db", "v2")


@pytest.mark.parametrize("task", ["", "   ", "a b c", "!!! ?"])
def test_tokenize_without_keywords(task: str) -> None:
    assert tokenize_task(task) == ()
