"""Master-row prompt composition.

When a room has a row in the ``master`` sheet, the prompt is assembled from
that row's descriptive columns (room details, materials, lighting, ...)
plus the selected products, rendered through ``master_prompt.jinja2``.
Blank columns produce no section.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from .renderer import TemplateRenderer

if TYPE_CHECKING:
    from ..catalog.sheet_config import MasterRow
    from ..selector.models import Product

logger = logging.getLogger(__name__)

# (MasterRow attribute, section title) in prompt order
MASTER_SECTIONS: list[tuple[str, str]] = [
    ("room_details", "Room details"),
    ("furniture_decor", "Furniture decor"),
    ("materials", "Materials"),
    ("lighting", "Lighting"),
    ("camera", "Camera"),
    ("color_grade", "Color grade"),
    ("negative_styling_rules", "Negative styling rules"),
    ("hero_object_placement_logic", "Hero object placement logic"),
    ("realism_constraints", "Realism constraints"),
]


class PromptComposer:
    """Builds the structured room prompt from a master row.

    Usage:
        composer = PromptComposer()
        prompt = composer.compose(master_row, "living-room", ["warm"],
                                  ["sofa"], [("sofa", product)])
    """

    TEMPLATE_NAME = "master_prompt"

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def build_context(
        self,
        master_row: MasterRow,
        room_type: str,
        style_tags: Sequence[str],
        furniture_types: Sequence[str],
        selected: Sequence[tuple[str, Product]],
    ) -> dict:
        """Template context for ``master_prompt.jinja2``.

        Requested style tags win; the master row's own tags are used only
        when none were requested.
        """
        sections = []
        for attr, title in MASTER_SECTIONS:
            body = str(getattr(master_row, attr, "") or "").strip()
            if body:
                sections.append({"title": title, "body": body})

        tags = list(style_tags) or list(master_row.style_tags)
        primary = selected[0][1] if selected else None

        return {
            "room": master_row.room or room_type,
            "sections": sections,
            "furniture_types": list(furniture_types),
            "style_tags": tags,
            "selected_products": [
                {"furniture_type": ftype, "title": product.title}
                for ftype, product in selected
            ],
            "primary_title": primary.title.strip() if primary else "",
            "primary_hero_descriptor": (primary.hero_descriptor or "").strip() if primary else "",
        }

    def compose(
        self,
        master_row: MasterRow,
        room_type: str,
        style_tags: Sequence[str],
        furniture_types: Sequence[str],
        selected: Sequence[tuple[str, Product]],
    ) -> str:
        """Render the master-row prompt text."""
        context = self.build_context(
            master_row, room_type, style_tags, furniture_types, selected,
        )
        logger.debug(
            "Composing master prompt for room '%s' (%d sections, %d products)",
            context["room"], len(context["sections"]), len(context["selected_products"]),
        )
        return self.renderer.render_section(self.TEMPLATE_NAME, context)
