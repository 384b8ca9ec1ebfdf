"""Prompt assembly — one product per furniture type, then the prompt text.

Flow:
  1. Resolve preset, room type, master row and style tags.
  2. Resolve furniture types (requested, or a seeded subset of the room's).
  3. Per furniture type: fuzzy type match → manual featured product, or
     deterministic selection seeded by ``preset|room|styles|type``.
  4. Nothing selected at all → one selection over the whole catalog.
  5. Render: master row via PromptComposer, else the preset template.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from typing import Any

from ..catalog.loader import SheetRepository
from ..catalog.room_furniture import RoomOption, sample_room_options
from ..catalog.sheet_config import (
    DEFAULT_PRESET,
    MasterRow,
    Preset,
    find_master_row_by_room,
    find_preset,
)
from ..common.config import Settings, settings as default_settings
from ..common.errors import PromptBuildError
from ..selector.models import Product
from ..selector.normalize import normalize, parse_tag_list
from ..selector.scorer import score_product
from ..selector.selector import select_product
from ..selector.type_matcher import is_type_match
from ..selector.weights import WeightTable, merge_weights
from ..template_engine.composer import PromptComposer
from ..template_engine.renderer import render_template
from .models import PromptRequest, PromptResult, SelectedItem

logger = logging.getLogger(__name__)

ANY_FURNITURE_TYPE = "any"


def pick_furniture_subset(
    items: Sequence[str],
    rng: random.Random,
    minimum: int = 2,
    maximum: int = 4,
) -> list[str]:
    """Pick between ``minimum`` and ``maximum`` distinct items (bounded by
    how many exist) using the given RNG."""
    source = list(dict.fromkeys(item for item in items if item))
    if not source:
        return []

    lower = max(1, min(minimum, len(source)))
    upper = max(lower, min(maximum, len(source)))
    count = rng.randint(lower, upper)
    return rng.sample(source, count)


class PromptBuilder:
    """Builds staging prompts from an in-memory catalog and sheet config.

    Usage:
        builder = PromptBuilder(products, presets=presets, rule_rows=rules)
        result = builder.build(PromptRequest(room_type="living-room"))
        print(result.prompt)
    """

    def __init__(
        self,
        products: Sequence[Product],
        presets: Sequence[Preset] | None = None,
        rule_rows: Sequence[Any] | None = None,
        master_rows: Sequence[MasterRow] | None = None,
        room_options: Sequence[RoomOption] | None = None,
        fallback_products: Sequence[Product] | None = None,
        settings: Settings | None = None,
        composer: PromptComposer | None = None,
    ) -> None:
        self.products = list(products)
        self.presets = list(presets) if presets is not None else [DEFAULT_PRESET]
        self.rule_rows = list(rule_rows or [])
        self.master_rows = list(master_rows or [])
        self.room_options = list(room_options) if room_options is not None else sample_room_options()
        self.fallback_products = list(fallback_products or [])
        self.settings = settings or default_settings
        self.composer = composer or PromptComposer()

    @classmethod
    def from_repository(cls, repository: SheetRepository, **kwargs: Any) -> PromptBuilder:
        """Load every tab through a SheetRepository."""
        master_rows = repository.master_rows()
        return cls(
            products=repository.products(),
            presets=repository.presets(),
            rule_rows=repository.rules(),
            master_rows=master_rows,
            room_options=repository.room_options(master_rows),
            settings=repository.settings,
            **kwargs,
        )

    def build(self, request: PromptRequest) -> PromptResult:
        """Select products and render the prompt for one request.

        Raises:
            PromptBuildError: No room type, unknown room in a non-empty
                master sheet, no product selectable, or an empty prompt.
        """
        slug = request.preset_slug or self.settings.selector.default_preset_slug
        preset = find_preset(self.presets, slug)

        room_type = normalize(request.room_type or (preset.default_category if preset else ""))
        if not room_type:
            raise PromptBuildError("roomType (or category) is required.")

        master_row = find_master_row_by_room(room_type, self.master_rows)
        if self.master_rows and master_row is None:
            raise PromptBuildError(
                f"No matching row in 'master' tab for roomType \"{room_type}\".",
                details={"available_rooms": [row.room for row in self.master_rows]},
            )

        style_tags = self._resolve_style_tags(request, preset, master_row)
        seed = "|".join([preset.slug if preset else slug, room_type, ",".join(style_tags)])

        furniture_types = list(request.furniture_types)
        auto_selected = False
        if not furniture_types:
            furniture_types = self._auto_furniture_types(room_type, seed)
            auto_selected = bool(furniture_types)

        weights = merge_weights(self.rule_rows)
        selected, debug = self._select_all(
            furniture_types, style_tags, weights, seed, request.featured_products_by_type,
        )

        if not selected:
            fallback_item = self._select_any(furniture_types, style_tags, weights, seed)
            if fallback_item is None:
                raise PromptBuildError(
                    "No matching product found after scoring. "
                    "Check the products sheet or the fallback catalog."
                )
            selected.append(fallback_item)

        prompt = self._render(
            preset, master_row, room_type, request.subcategory,
            style_tags, furniture_types, selected,
        )
        if not prompt:
            raise PromptBuildError("Unable to build prompt. Check master tab or preset template data.")

        logger.info(
            "Built prompt for room '%s': %d products, primary=%s",
            room_type, len(selected), selected[0].product.id,
        )

        debug.update({
            "total_products": len(self.products),
            "auto_selected_furniture_types": auto_selected,
            "master_row": master_row.room if master_row else None,
        })
        return PromptResult(
            prompt=prompt,
            room_type=room_type,
            style_tags=style_tags,
            furniture_types=furniture_types,
            selected=selected,
            weights=weights,
            preset=preset,
            master_row=master_row,
            featured_products_by_type=dict(request.featured_products_by_type),
            debug=debug,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_style_tags(
        request: PromptRequest,
        preset: Preset | None,
        master_row: MasterRow | None,
    ) -> list[str]:
        """Explicit request tags, else master row tags, else preset defaults."""
        if request.style_tags:
            return list(request.style_tags)
        if master_row and master_row.style_tags:
            return parse_tag_list(master_row.style_tags)
        if preset:
            return parse_tag_list(preset.default_style_tags)
        return []

    def _auto_furniture_types(self, room_type: str, seed: str) -> list[str]:
        room = next(
            (opt for opt in self.room_options if normalize(opt.room_type) == room_type),
            None,
        )
        if room is None or not room.furniture_types:
            return []

        cfg = self.settings.selector
        picked = pick_furniture_subset(
            room.furniture_types,
            random.Random(seed),
            cfg.furniture_subset_min,
            cfg.furniture_subset_max,
        )
        logger.info("Auto-selected furniture types for '%s': %s", room_type, picked)
        return picked

    def _candidates_for(self, furniture_type: str) -> tuple[list[Product], bool]:
        """Type-matched products, falling back to the secondary catalog."""
        matching = [p for p in self.products if is_type_match(p.type, furniture_type)]
        if matching:
            return matching, False
        fallback = [p for p in self.fallback_products if is_type_match(p.type, furniture_type)]
        return fallback, bool(fallback)

    def _select_all(
        self,
        furniture_types: list[str],
        style_tags: list[str],
        weights: WeightTable,
        seed: str,
        featured: dict[str, str],
    ) -> tuple[list[SelectedItem], dict[str, Any]]:
        selected: list[SelectedItem] = []
        per_type: list[dict[str, Any]] = []
        unmatched: list[str] = []
        fallback_used_for: list[str] = []

        for ftype in furniture_types:
            candidates, from_fallback = self._candidates_for(ftype)
            if from_fallback:
                fallback_used_for.append(ftype)

            if not candidates:
                unmatched.append(ftype)
                per_type.append({"furniture_type": ftype, "matched_products": 0, "picked": None})
                continue

            manual_id = featured.get(ftype)
            manual = next((p for p in candidates if p.id == manual_id), None) if manual_id else None
            if manual is not None:
                selected.append(SelectedItem(
                    furniture_type=ftype,
                    scored=score_product(manual, style_tags, weights),
                    manual=True,
                ))
                per_type.append({
                    "furniture_type": ftype,
                    "matched_products": len(candidates),
                    "selection_mode": "manual",
                    "selected_product_id": manual.id,
                    "selected_product_title": manual.title,
                })
                continue

            result = select_product(
                candidates,
                requested_style_tags=style_tags,
                weights=weights,
                seed=f"{seed}|{ftype}",
            )
            if result.selected is None:
                unmatched.append(ftype)
                per_type.append({
                    "furniture_type": ftype,
                    "matched_products": len(candidates),
                    "picked": None,
                })
                continue

            selected.append(SelectedItem(furniture_type=ftype, scored=result.selected))
            per_type.append({
                "furniture_type": ftype,
                "matched_products": len(candidates),
                "selection_mode": "deterministic",
                "reason": result.reason.value,
                "fallback_used": result.fallback_used,
                "selected_product_id": result.selected.product.id,
                "selected_product_title": result.selected.product.title,
            })

        if unmatched:
            logger.warning("No products matched furniture types: %s", unmatched)

        debug = {
            "fallback_catalog_used_for": fallback_used_for,
            "unmatched_furniture_types": unmatched,
            "furniture_type_debug": per_type,
        }
        return selected, debug

    def _select_any(
        self,
        furniture_types: list[str],
        style_tags: list[str],
        weights: WeightTable,
        seed: str,
    ) -> SelectedItem | None:
        """Last resort: pick from the whole catalog plus type-matched fallbacks."""
        extra = [
            p for p in self.fallback_products
            if any(is_type_match(p.type, ftype) for ftype in furniture_types)
        ]
        result = select_product(
            self.products + extra,
            requested_style_tags=style_tags,
            weights=weights,
            seed=f"{seed}|fallback",
        )
        if result.selected is None:
            return None
        logger.info("No per-type selection, fell back to %s", result.selected.product.id)
        return SelectedItem(furniture_type=ANY_FURNITURE_TYPE, scored=result.selected)

    def _render(
        self,
        preset: Preset | None,
        master_row: MasterRow | None,
        room_type: str,
        subcategory: str,
        style_tags: list[str],
        furniture_types: list[str],
        selected: list[SelectedItem],
    ) -> str:
        if master_row is not None:
            return self.composer.compose(
                master_row,
                room_type,
                style_tags,
                furniture_types,
                [(item.furniture_type, item.product) for item in selected],
            )

        if preset is None or not preset.prompt_template:
            return ""

        primary = selected[0].product
        bullets = "\n".join(f"- {item.furniture_type}: {item.product.title}" for item in selected)
        values = {
            "preset_slug": preset.slug,
            "preset_name": preset.name,
            "room_type": room_type,
            "requested_category": room_type,
            "requested_subcategory": normalize(subcategory),
            "requested_style_tags": ", ".join(style_tags),
            "selected_furniture_types": ", ".join(furniture_types),
            "selected_products_bullets": bullets,
            "selected_products_titles": ", ".join(item.product.title for item in selected),
            "product_id": primary.id,
            "product_title": primary.title,
            "product_handle": primary.handle,
            "prompt_category": primary.category,
            "prompt_subcategory": primary.subcategory,
            "prompt_style_tags": ", ".join(sorted(primary.style_tags)),
            "hero_descriptor": primary.hero_descriptor,
            # Image references go out in the structured result, not the prompt text
            "image_url": "",
        }
        return render_template(preset.prompt_template, values)
