"""Data models for the product selector.

All models use @dataclass with to_dict() for JSON serialization.
Products are frozen: the selector and scorer never mutate their inputs.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum

from .normalize import parse_tag_list


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _tag_set(value) -> frozenset[str]:
    if isinstance(value, str):
        return frozenset(parse_tag_list(value))
    return frozenset(value or ())


@dataclass(frozen=True)
class Product:
    """A catalog product as handed to the selector."""

    id: str
    title: str
    type: str
    category: str | None = None
    subcategory: str | None = None
    style_tags: frozenset[str] = field(default_factory=frozenset)
    hero_descriptor: str | None = None
    image_url: str | None = None
    in_stock: bool = False
    handle: str | None = None
    image_options: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable of tags or a comma-separated string
        if not isinstance(self.style_tags, frozenset):
            object.__setattr__(self, "style_tags", _tag_set(self.style_tags))
        if not isinstance(self.image_options, tuple):
            object.__setattr__(self, "image_options", tuple(self.image_options or ()))
        object.__setattr__(self, "id", str(self.id))

    @classmethod
    def from_dict(cls, data: dict) -> Product:
        """Build a Product from a plain dict (e.g. a JSON fixture)."""
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            type=str(data.get("type", "")),
            category=_clean_optional(data.get("category")),
            subcategory=_clean_optional(data.get("subcategory")),
            style_tags=_tag_set(data.get("style_tags")),
            hero_descriptor=_clean_optional(data.get("hero_descriptor")),
            image_url=_clean_optional(data.get("image_url")),
            in_stock=bool(data.get("in_stock", False)),
            handle=_clean_optional(data.get("handle")),
            image_options=tuple(data.get("image_options") or ()),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "category": self.category,
            "subcategory": self.subcategory,
            "style_tags": sorted(self.style_tags),
            "hero_descriptor": self.hero_descriptor,
            "image_url": self.image_url,
            "in_stock": self.in_stock,
            "handle": self.handle,
            "image_options": list(self.image_options),
        }


@dataclass(frozen=True)
class ScoredProduct:
    """A product with its per-criterion score breakdown.

    Derived per call; never reuse across calls with different weights or
    requested styles.
    """

    product: Product
    matched_style_tags: frozenset[str]
    breakdown: dict[str, int]
    total: int

    @property
    def style_matched(self) -> bool:
        return bool(self.matched_style_tags)

    def to_dict(self) -> dict:
        return {
            "product": self.product.to_dict(),
            "matched_style_tags": sorted(self.matched_style_tags),
            "breakdown": dict(self.breakdown),
            "total": self.total,
        }


class SelectionReason(str, Enum):
    """Why the selector picked from the pool it did."""
    NO_CATEGORY_MATCH = "no_category_match"
    STYLE_FALLBACK_TO_CATEGORY = "style_fallback_to_category"
    CATEGORY_SUBCATEGORY_MATCH = "category_subcategory_match"
    UNFILTERED_POOL_MATCH = "unfiltered_pool_match"

    @property
    def description(self) -> str:
        return _REASON_DESCRIPTIONS[self]


_REASON_DESCRIPTIONS = {
    SelectionReason.NO_CATEGORY_MATCH:
        "No products found for the requested category/subcategory.",
    SelectionReason.STYLE_FALLBACK_TO_CATEGORY:
        "No style match in the initial set, fell back to any product in category.",
    SelectionReason.CATEGORY_SUBCATEGORY_MATCH:
        "Selected from requested category/subcategory using deterministic scoring.",
    SelectionReason.UNFILTERED_POOL_MATCH:
        "Selected from requested pool using deterministic scoring.",
}


@dataclass
class SelectionResult:
    """The complete output of one selection call."""

    selected: ScoredProduct | None
    ranked: list[ScoredProduct]
    fallback_used: bool
    reason: SelectionReason

    @property
    def ranked_ids(self) -> list[str]:
        return [sp.product.id for sp in self.ranked]

    def to_dict(self) -> dict:
        return {
            "selected": self.selected.to_dict() if self.selected else None,
            "ranked": [sp.to_dict() for sp in self.ranked],
            "fallback_used": self.fallback_used,
            "reason": self.reason.value,
            "reason_detail": self.reason.description,
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

