"""Deterministic ranking with seeded tie-breaks.

Order: total score descending, then FNV-1a hash of ``"{seed}:{product_id}"``
ascending, then product id ascending. The hash stands in for randomness so
that the same pool and seed always produce the same winner, while a
different seed reshuffles tied products.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import ScoredProduct

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
_UINT32_MASK = 0xFFFFFFFF


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a hash over the UTF-8 bytes of ``text``."""
    h = FNV_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        h ^= byte
        h = (h * FNV_PRIME) & _UINT32_MASK
    return h


def tie_break_key(scored: ScoredProduct, seed: str) -> tuple[int, int, str]:
    """Sort key implementing the full ranking order."""
    product_id = scored.product.id
    return (-scored.total, fnv1a_32(f"{seed}:{product_id}"), product_id)


def rank_products(scored: Iterable[ScoredProduct], seed: str) -> list[ScoredProduct]:
    """Return a new list of scored products in ranking order."""
    seed = "" if seed is None else str(seed)
    return sorted(scored, key=lambda sp: tie_break_key(sp, seed))
