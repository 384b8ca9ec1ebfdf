"""Text normalization for tags, product types and category labels.

``normalize`` is the single canonical form used for equality comparisons
(categories, subcategories, style tags). ``normalize_phrase`` is the looser
form used for furniture-type matching: punctuation folded to spaces and each
word naively singularized.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

# Prefixes of Shopify tags that carry prompt metadata
_PROMPT_TAG_PREFIXES = {
    "category": "prompt.category:",
    "subcategory": "prompt.subcategory:",
    "hero_descriptor": "prompt.hero_descriptor:",
    "style": "prompt.style:",
}


def normalize(text: Any) -> str:
    """Trim and lowercase. ``None`` becomes an empty string."""
    if text is None:
        return ""
    return str(text).strip().lower()


def singularize_word(word: str) -> str:
    """Naive English singularization.

    Examples:
        "chairs"   → "chair"
        "benches"  → "bench"
        "shelves"  → "shelv"   (irregular plurals are not handled)
        "bookcases" → "bookcas"
    """
    if word.endswith("ies") and len(word) > 4:
        return word[:-3] + "y"
    if word.endswith("es") and len(word) > 4:
        return word[:-2]
    if word.endswith("s") and len(word) > 3:
        return word[:-1]
    return word


def normalize_phrase(text: Any) -> str:
    """Normalize a multi-word label for fuzzy comparison.

    "Accent-Chairs" → "accent chair"
    """
    folded = _NON_ALNUM_RE.sub(" ", normalize(text)).strip()
    if not folded:
        return ""
    return " ".join(singularize_word(word) for word in folded.split())


def parse_tag_list(value: Any) -> list[str]:
    """Parse a comma-separated string (or iterable) into normalized tags.

    Order of first appearance is kept; blanks and duplicates are dropped.
    """
    if not value:
        return []

    if isinstance(value, str):
        raw: Iterable[Any] = value.split(",")
    elif isinstance(value, Iterable):
        raw = value
    else:
        raw = str(value).split(",")

    tags: list[str] = []
    seen: set[str] = set()
    for item in raw:
        tag = normalize(item)
        if tag and tag not in seen:
            seen.add(tag)
            tags.append(tag)
    return tags


def first_non_empty(*values: Any) -> str:
    """Return the first value that is non-blank after trimming, else ``""``."""
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def parse_prompt_tags(tags: Iterable[Any] | None) -> dict[str, Any]:
    """Extract prompt metadata from ``prompt.<field>:<value>`` tags.

    Returns:
        Dict with ``category``, ``subcategory``, ``hero_descriptor`` (str)
        and ``style_tags`` (deduplicated list).
    """
    parsed: dict[str, Any] = {
        "category": "",
        "subcategory": "",
        "hero_descriptor": "",
        "style_tags": [],
    }
    styles: list[str] = []

    for raw_tag in tags or []:
        tag = normalize(raw_tag)
        for field, prefix in _PROMPT_TAG_PREFIXES.items():
            if not tag.startswith(prefix):
                continue
            value = tag[len(prefix):].strip()
            if field == "style":
                if value:
                    styles.append(value)
            else:
                parsed[field] = value

    parsed["style_tags"] = parse_tag_list(styles)
    return parsed
