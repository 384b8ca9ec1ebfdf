"""Fuzzy furniture-type matching.

Matching favours recall: "chair" matches "Accent Chairs" and the reverse.
Over-matches only widen the candidate pool handed to the scorer.
"""

from __future__ import annotations

from .normalize import normalize_phrase


def is_type_match(catalog_type: str | None, requested_type: str | None) -> bool:
    """Check if a catalog product type matches a requested furniture type.

    Strategy:
      1. Normalize both sides (punctuation folded, words singularized).
      2. Exact match.
      3. Substring match in either direction.

    Returns:
        False when either side is empty after normalization.
    """
    a = normalize_phrase(catalog_type)
    b = normalize_phrase(requested_type)
    if not a or not b:
        return False
    if a == b:
        return True
    return b in a or a in b
