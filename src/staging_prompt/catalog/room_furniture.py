"""Room → furniture type mapping.

Sourced from the ``room_to_furniture`` sheet, or ``SAMPLE_ROOM_MAP`` when no
sheet is configured. When master rows exist they define the room list and
the furniture types are resolved against the base mapping.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..common.errors import SheetConfigError
from ..selector.normalize import normalize
from .records import get_field
from .sheet_config import MasterRow, normalize_room_key

logger = logging.getLogger(__name__)

SAMPLE_ROOM_MAP: dict[str, list[str]] = {
    "living-room": ["sofa", "coffee table", "accent chair", "side table", "console"],
    "bedroom": ["bed", "nightstand", "dresser", "bench"],
    "dining": ["dining table", "dining chair", "sideboard"],
    "office": ["desk", "office chair", "bookcase"],
}

ROOM_HEADER_KEYS = ["room_type", "room", "roomtype", "room_name"]
FURNITURE_HEADER_KEYS = [
    "furniture_types",
    "furniture_type",
    "furniture",
    "furniture_options",
    "furniture_pieces",
    "furniture_list",
    "product_types",
    "product_type",
]


@dataclass
class RoomOption:
    """A room and the furniture types that can be staged in it."""

    room_type: str
    furniture_types: list[str] = field(default_factory=list)
    style_tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "room_type": self.room_type,
            "furniture_types": self.furniture_types,
            "style_tags": self.style_tags,
        }


def sample_room_options() -> list[RoomOption]:
    return [
        RoomOption(room_type=room, furniture_types=list(types))
        for room, types in SAMPLE_ROOM_MAP.items()
    ]


def _parse_furniture_list(value: Any) -> list[str]:
    return [normalize(item) for item in str(value or "").split(",") if normalize(item)]


def parse_room_to_furniture_records(
    records: Sequence[Mapping[str, Any]],
    headers: Sequence[str] = (),
) -> list[RoomOption]:
    """Merge ``room_to_furniture`` rows into sorted RoomOptions.

    Raises:
        SheetConfigError: Rows exist but none has a room and furniture column.
    """
    merged: dict[str, set[str]] = {}

    for record in records:
        room_type = normalize(get_field(record, ROOM_HEADER_KEYS))
        furniture_types = _parse_furniture_list(get_field(record, FURNITURE_HEADER_KEYS))
        if not room_type or not furniture_types:
            continue
        merged.setdefault(room_type, set()).update(furniture_types)

    options = [
        RoomOption(room_type=room, furniture_types=sorted(types))
        for room, types in sorted(merged.items())
    ]

    if not options and records:
        raise SheetConfigError(
            "CSV must include room_type and furniture_types columns (or close variants). "
            f"Found headers: {', '.join(headers)}"
        )
    return options


def resolve_furniture_types_for_room(
    room_label: str,
    room_options: Iterable[RoomOption],
) -> list[str]:
    """Furniture types for a room label: exact key match, then containment."""
    room_key = normalize_room_key(room_label)
    if not room_key:
        return []

    options = list(room_options)
    for option in options:
        if normalize_room_key(option.room_type) == room_key and option.furniture_types:
            return list(option.furniture_types)

    for option in options:
        option_key = normalize_room_key(option.room_type)
        if option_key and (option_key in room_key or room_key in option_key):
            if option.furniture_types:
                return list(option.furniture_types)

    return []


def merge_master_rooms(
    master_rows: Iterable[MasterRow],
    base_options: list[RoomOption],
) -> list[RoomOption]:
    """Room options keyed by master rows (first row per room key wins).

    Returns ``base_options`` unchanged when there are no master rows.
    """
    deduped: dict[str, RoomOption] = {}

    for row in master_rows:
        if not row.room_key or row.room_key in deduped:
            continue
        deduped[row.room_key] = RoomOption(
            room_type=row.room,
            furniture_types=resolve_furniture_types_for_room(row.room, base_options),
            style_tags=list(row.style_tags),
        )

    if not deduped:
        return base_options

    logger.debug("Merged %d master rooms over %d base rooms", len(deduped), len(base_options))
    return sorted(deduped.values(), key=lambda option: option.room_type)
