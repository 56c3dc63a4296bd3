"""Task-description tokenization for module resolution."""

from __future__ import annotations

import re
from typing import Final

_SPLIT_RE: Final[re.Pattern[str]] = re.compile(r"[\s,;:()\[\]{}]+")
_NON_ALNUM_RE: Final[re.Pattern[str]] = re.compile(r"[^a-z0-9]+")


def tokenize_task(task: str) -> tuple[str, ...]:
    """Split free text into lowercase alphanumeric keywords, first occurrence order."""

    keywords: list[str] = []
    seen: set[str] = set()
    for raw in _SPLIT_RE.split(task):
        token = _NON_ALNUM_RE.sub("", raw.lower())
        if len(token) <= 1 or token in seen:
            continue
        seen.add(token)
        keywords.append(token)
    return tuple(keywords)


__all__ = ["tokenize_task"]
