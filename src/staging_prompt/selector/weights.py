"""Weight table for product scoring.

Default weights are constant data; overrides (e.g. rows from a rules
sheet) are merged into a fresh dict that callers pass explicitly to the
scorer. Nothing here reads ambient configuration.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Union

logger = logging.getLogger(__name__)

STYLE_MATCH = "style_match"
HERO_DESCRIPTOR = "hero_descriptor"
IMAGE = "image"
IN_STOCK = "in_stock"

CRITERIA = (STYLE_MATCH, HERO_DESCRIPTOR, IMAGE, IN_STOCK)

DEFAULT_WEIGHTS: Mapping[str, int] = MappingProxyType({
    STYLE_MATCH: 50,
    HERO_DESCRIPTOR: 10,
    IMAGE: 10,
    IN_STOCK: 10,
})

WeightTable = dict[str, int]
RuleRow = Union[Mapping[str, Any], tuple[str, Any]]


def round_half_up(number: float) -> int:
    """Round .5 up for non-negative numbers (2.5 → 3)."""
    return int(math.floor(number + 0.5))


def _coerce_weight(value: Any) -> int | None:
    """Convert a raw weight to a non-negative int, or None if unusable."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return round_half_up(number)


def _unpack_row(row: RuleRow) -> tuple[str, Any]:
    if isinstance(row, Mapping):
        return str(row.get("rule_key", "")), row.get("weight_int")
    key, weight = row
    return str(key), weight


def merge_weights(rule_rows: Iterable[RuleRow] | None = None) -> WeightTable:
    """Merge ordered ``(rule_key, weight_int)`` overrides onto the defaults.

    Args:
        rule_rows: Mappings with ``rule_key`` / ``weight_int`` keys, or
            ``(rule_key, weight)`` pairs. Later rows win.

    Returns:
        A new WeightTable with every criterion defined. Unknown keys are
        ignored; a negative, non-finite or non-numeric weight resets the
        criterion to its default, discarding any earlier override.
    """
    merged: WeightTable = dict(DEFAULT_WEIGHTS)

    for row in rule_rows or []:
        key, raw_weight = _unpack_row(row)
        key = key.strip().lower()
        if key not in merged:
            logger.debug("Ignoring unknown weight rule '%s'", key)
            continue

        weight = _coerce_weight(raw_weight)
        if weight is None:
            logger.warning(
                "Invalid weight %r for rule '%s', using default %d",
                raw_weight, key, DEFAULT_WEIGHTS[key],
            )
            merged[key] = DEFAULT_WEIGHTS[key]
            continue
        merged[key] = weight

    return merged


def resolve_weight(weights: Mapping[str, Any] | None, criterion: str) -> int:
    """Usable weight for one criterion from any weight mapping.

    Tables not built by ``merge_weights`` may carry missing, negative or
    non-finite values; those fall back to the criterion's default.
    """
    raw = (weights or {}).get(criterion)
    if raw is None:
        return DEFAULT_WEIGHTS[criterion]
    weight = _coerce_weight(raw)
    if weight is None:
        logger.debug("Unusable weight %r for '%s', using default", raw, criterion)
        return DEFAULT_WEIGHTS[criterion]
    return weight
