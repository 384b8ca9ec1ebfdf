"""Sheet-driven configuration: presets, weight rules, and master room rows.

Each parser takes already-loaded CSV records (dicts keyed by normalized
header) and tolerates a few header spellings per column.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..selector.normalize import normalize, parse_tag_list
from ..selector.weights import round_half_up
from .records import get_field

logger = logging.getLogger(__name__)

_ROOM_KEY_RE = re.compile(r"[^a-z0-9]+")


def normalize_room_key(value: Any) -> str:
    """Slug form of a room label: "Living Room" → "living-room"."""
    return _ROOM_KEY_RE.sub("-", normalize(value)).strip("-")


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------


@dataclass
class Preset:
    """A named prompt template with default room/style choices."""

    slug: str
    name: str
    prompt_template: str
    default_category: str = "living-room"
    default_subcategory: str = ""
    default_style_tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "slug": self.slug,
            "name": self.name,
            "prompt_template": self.prompt_template,
            "default_category": self.default_category,
            "default_subcategory": self.default_subcategory,
            "default_style_tags": self.default_style_tags,
        }


DEFAULT_PRESET = Preset(
    slug="living-room-corner-warm-minimal",
    name="Living Room Corner Warm Minimal",
    prompt_template="\n".join([
        "Create a furniture styling prompt for the room type: {{room_type}}.",
        "Style direction: {{requested_style_tags}}.",
        "Subcategory focus: {{requested_subcategory}}.",
        "Furniture types to include: {{selected_furniture_types}}.",
        "Selected products:",
        "{{selected_products_bullets}}",
        "Primary product: {{product_title}}.",
        "Product hero descriptor: {{hero_descriptor}}.",
        "Product image reference: {{image_url}}.",
        "Product category: {{prompt_category}}.",
        "Product subcategory: {{prompt_subcategory}}.",
        "Product style tags: {{prompt_style_tags}}.",
    ]),
    default_category="living-room",
    default_subcategory="corner",
    default_style_tags=["warm", "minimal"],
)


def parse_presets(records: Iterable[Mapping[str, Any]]) -> list[Preset]:
    """Parse ``presets`` sheet rows; falls back to ``[DEFAULT_PRESET]``."""
    presets: list[Preset] = []

    for record in records:
        slug = normalize(get_field(record, ["slug", "preset_slug"]))
        template = str(get_field(record, ["prompt_template", "template"])).strip()
        if not slug or not template:
            continue

        name = str(get_field(record, ["name", "preset_name"]) or slug).strip()
        presets.append(Preset(
            slug=slug,
            name=name,
            prompt_template=template,
            default_category=normalize(
                get_field(record, ["default_category", "category", "room_type"])
            ) or "living-room",
            default_subcategory=normalize(get_field(record, ["default_subcategory", "subcategory"])),
            default_style_tags=parse_tag_list(
                get_field(record, ["default_style_tags", "style_tags"])
            ),
        ))

    if not presets:
        logger.info("No usable preset rows — using default preset")
        return [DEFAULT_PRESET]
    return presets


def find_preset(presets: Iterable[Preset], slug: str | None) -> Preset | None:
    """Find a preset by slug; an empty slug means the default preset's slug."""
    wanted = normalize(slug) or DEFAULT_PRESET.slug
    for preset in presets:
        if preset.slug == wanted:
            return preset
    return None


# ---------------------------------------------------------------------------
# Weight rules
# ---------------------------------------------------------------------------

DEFAULT_RULES: list[dict[str, Any]] = [
    {"rule_key": "style_match", "weight_int": 50},
    {"rule_key": "hero_descriptor", "weight_int": 10},
    {"rule_key": "image", "weight_int": 10},
    {"rule_key": "in_stock", "weight_int": 10},
]


def parse_rules(records: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Parse ``rules`` sheet rows into ordered ``rule_key`` / ``weight_int`` rows.

    Rows with a blank key or a non-numeric weight are skipped. Unknown keys
    are kept here; ``merge_weights`` ignores them.
    """
    rules: list[dict[str, Any]] = []

    for record in records:
        rule_key = normalize(get_field(record, ["rule_key", "key", "rule"]))
        raw_weight = get_field(record, ["weight_int", "weight", "points"])
        try:
            weight = float(str(raw_weight).strip())
        except ValueError:
            continue
        if not rule_key or not math.isfinite(weight):
            continue
        rules.append({"rule_key": rule_key, "weight_int": round_half_up(weight)})

    if not rules:
        return [dict(rule) for rule in DEFAULT_RULES]
    return rules


# ---------------------------------------------------------------------------
# Master rows
# ---------------------------------------------------------------------------

# Descriptive columns copied verbatim (trimmed) from the master sheet
_MASTER_TEXT_COLUMNS = (
    "room_details",
    "furniture_decor",
    "materials",
    "lighting",
    "camera",
    "color_grade",
    "negative_styling_rules",
    "hero_object_placement_logic",
    "realism_constraints",
)


@dataclass
class MasterRow:
    """One room's art direction from the ``master`` sheet."""

    room: str
    room_key: str
    room_details: str = ""
    furniture_decor: str = ""
    materials: str = ""
    lighting: str = ""
    camera: str = ""
    color_grade: str = ""
    negative_styling_rules: str = ""
    hero_object_placement_logic: str = ""
    realism_constraints: str = ""
    style_tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {"room": self.room, "room_key": self.room_key}
        for column in _MASTER_TEXT_COLUMNS:
            data[column] = getattr(self, column)
        data["style_tags"] = self.style_tags
        return data


def parse_master_rows(records: Iterable[Mapping[str, Any]]) -> list[MasterRow]:
    """Parse ``master`` sheet rows; rows without a room label are skipped."""
    rows: list[MasterRow] = []

    for record in records:
        room = str(get_field(record, ["room", "room_type", "category"])).strip()
        room_key = normalize_room_key(room)
        if not room or not room_key:
            continue

        text_fields = {
            column: str(get_field(record, [column])).strip()
            for column in _MASTER_TEXT_COLUMNS
        }
        rows.append(MasterRow(
            room=room,
            room_key=room_key,
            style_tags=parse_tag_list(get_field(record, ["style_tags"])),
            **text_fields,
        ))

    return rows


def find_master_row_by_room(room_type: str | None, rows: list[MasterRow]) -> MasterRow | None:
    """Find the master row for a room: exact key first, then containment."""
    room_key = normalize_room_key(room_type)
    if not room_key or not rows:
        return None

    for row in rows:
        if row.room_key == room_key:
            return row

    for row in rows:
        if room_key in row.room_key or row.room_key in room_key:
            return row

    return None
