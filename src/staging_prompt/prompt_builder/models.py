"""Request/result models for prompt assembly.

All models use @dataclass with to_dict() for JSON serialization.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ..catalog.sheet_config import MasterRow, Preset
from ..selector.models import Product, ScoredProduct
from ..selector.normalize import normalize, parse_tag_list


def _parse_featured(value: Any) -> dict[str, str]:
    """Normalize a ``{furniture_type: product_id}`` mapping, dropping blanks."""
    if not isinstance(value, dict):
        return {}
    featured: dict[str, str] = {}
    for key, product_id in value.items():
        ftype = normalize(key)
        pid = str(product_id or "").strip()
        if ftype and pid:
            featured[ftype] = pid
    return featured


@dataclass
class PromptRequest:
    """What the caller wants staged."""

    preset_slug: str = ""
    room_type: str = ""
    subcategory: str = ""
    style_tags: list[str] = field(default_factory=list)
    furniture_types: list[str] = field(default_factory=list)
    featured_products_by_type: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.style_tags = parse_tag_list(self.style_tags)
        self.furniture_types = parse_tag_list(self.furniture_types)
        self.featured_products_by_type = _parse_featured(self.featured_products_by_type)

    @classmethod
    def from_dict(cls, body: dict[str, Any]) -> PromptRequest:
        """Build from a JSON request body (camelCase keys, with aliases)."""
        return cls(
            preset_slug=str(body.get("presetSlug") or ""),
            room_type=str(body.get("roomType") or body.get("category") or ""),
            subcategory=str(body.get("subcategory") or ""),
            style_tags=body.get("styleTags") or [],
            furniture_types=body.get("furnitureTypes") or body.get("furniture") or [],
            featured_products_by_type=body.get("featuredProductsByType") or {},
        )


@dataclass
class SelectedItem:
    """The product chosen for one furniture type."""

    furniture_type: str
    scored: ScoredProduct
    manual: bool = False

    @property
    def product(self) -> Product:
        return self.scored.product

    def to_dict(self) -> dict:
        product = self.product.to_dict()
        return {
            "furniture_type": self.furniture_type,
            "total_score": self.scored.total,
            "breakdown": dict(self.scored.breakdown),
            "matched_style_tags": sorted(self.scored.matched_style_tags),
            "manual_selection": self.manual,
            **product,
        }


@dataclass
class PromptResult:
    """The complete output of one prompt build."""

    prompt: str
    room_type: str
    style_tags: list[str]
    furniture_types: list[str]
    selected: list[SelectedItem]
    weights: dict[str, int]
    preset: Preset | None = None
    master_row: MasterRow | None = None
    featured_products_by_type: dict[str, str] = field(default_factory=dict)
    debug: dict[str, Any] = field(default_factory=dict)

    @property
    def primary(self) -> SelectedItem:
        return self.selected[0]

    def to_dict(self) -> dict:
        primary = self.primary
        return {
            "ok": True,
            "preset": {"slug": self.preset.slug, "name": self.preset.name} if self.preset else None,
            "master": {
                "room": self.master_row.room,
                "style_tags": self.master_row.style_tags,
            } if self.master_row else None,
            "input": {
                "room_type": self.room_type,
                "style_tags": self.style_tags,
                "furniture_types": self.furniture_types,
                "featured_products_by_type": self.featured_products_by_type,
            },
            "prompt": self.prompt,
            "selected_product": primary.product.to_dict(),
            "selected_products": [item.to_dict() for item in self.selected],
            "score_breakdown": {
                "total": primary.scored.total,
                **primary.scored.breakdown,
                "matched_style_tags": sorted(primary.scored.matched_style_tags),
            },
            "debug": {**self.debug, "weights": dict(self.weights)},
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)
