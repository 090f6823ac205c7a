"""Canonicalization of transaction type labels and descriptions."""
from __future__ import annotations

import re
from typing import Optional, Sequence, Tuple

from .constants import CATEGORY_RULES, FALLBACK_CATEGORY

_MULTISPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w\s]")


def normalize_category(
    label: Optional[str],
    rules: Sequence[Tuple[str, str]] = CATEGORY_RULES,
) -> str:
    """Collapse a free-text type label onto the fixed taxonomy.

    Labels that match no rule are returned unchanged; a missing label
    becomes the fallback category.
    """
    if label is None:
        return FALLBACK_CATEGORY
    text = str(label)
    lowered = text.lower().strip()
    if not lowered:
        return FALLBACK_CATEGORY
    for pattern, canonical in rules:
        if pattern in lowered:
            return canonical
    return text


def normalize_description(text: Optional[str]) -> str:
    """Comparison form of a description; never shown to users."""
    lowered = (text or "").lower()
    lowered = _MULTISPACE.sub(" ", lowered).strip()
    return _NON_WORD.sub("", lowered)
