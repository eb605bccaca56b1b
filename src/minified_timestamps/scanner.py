"""Template scanning: pull asset references out of raw template text."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator


def iter_asset_references(pattern: re.Pattern[str], text: str) -> Iterator[str]:
    """Yield the first group of every non-overlapping match, in text order."""
    for match in pattern.finditer(text):
        yield match.group(1)


def extract_asset_references(patterns: Iterable[re.Pattern[str]], text: str) -> list[str]:
    """Collect references for all patterns, pattern by pattern.

    Duplicates are kept as found.
    """
    references: list[str] = []
    for pattern in patterns:
        references.extend(iter_asset_references(pattern, text))
    return references


def unique_in_order(references: Iterable[str]) -> list[str]:
    """Drop repeated references, keeping the first occurrence."""
    return list(dict.fromkeys(references))
