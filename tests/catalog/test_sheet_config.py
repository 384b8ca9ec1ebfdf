"""Tests for preset, weight rule and master row parsing."""

from __future__ import annotations

import pytest

from staging_prompt.catalog.sheet_config import (
    DEFAULT_PRESET,
    DEFAULT_RULES,
    MasterRow,
    find_master_row_by_room,
    find_preset,
    normalize_room_key,
    parse_master_rows,
    parse_presets,
    parse_rules,
)
from staging_prompt.selector.weights import merge_weights


class TestNormalizeRoomKey:
    @pytest.mark.parametrize(
        "label, expected",
        [
            ("Living Room", "living-room"),
            ("  Dining / Kitchen ", "dining-kitchen"),
            ("--Office--", "office"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_slug(self, label, expected):
        assert normalize_room_key(label) == expected


# ===================================================================
# Presets
# ===================================================================


class TestParsePresets:
    def test_parses_rows(self):
        presets = parse_presets([{
            "slug": " Bedroom-Calm ",
            "name": "Bedroom Calm",
            "prompt_template": "Room: {{room_type}}",
            "default_category": "Bedroom",
            "default_subcategory": "Nook",
            "default_style_tags": "Calm, Soft",
        }])
        assert len(presets) == 1
        preset = presets[0]
        assert preset.slug == "bedroom-calm"
        assert preset.name == "Bedroom Calm"
        assert preset.default_category == "bedroom"
        assert preset.default_subcategory == "nook"
        assert preset.default_style_tags == ["calm", "soft"]

    def test_defaults_for_optional_columns(self):
        preset = parse_presets([{"slug": "quick", "template": "Hi"}])[0]
        assert preset.name == "quick"
        assert preset.default_category == "living-room"
        assert preset.default_subcategory == ""
        assert preset.default_style_tags == []

    def test_rows_without_slug_or_template_skipped(self):
        presets = parse_presets([
            {"slug": "", "prompt_template": "x"},
            {"slug": "a", "prompt_template": "  "},
            {"slug": "b", "prompt_template": "ok"},
        ])
        assert [p.slug for p in presets] == ["b"]

    def test_empty_falls_back_to_default(self):
        assert parse_presets([]) == [DEFAULT_PRESET]
        assert parse_presets([{"name": "no slug"}]) == [DEFAULT_PRESET]


class TestFindPreset:
    def test_by_slug(self):
        presets = parse_presets([{"slug": "a", "prompt_template": "A"}, {"slug": "b", "prompt_template": "B"}])
        assert find_preset(presets, " B ").prompt_template == "B"

    def test_empty_slug_means_default_slug(self):
        assert find_preset([DEFAULT_PRESET], "") is DEFAULT_PRESET
        assert find_preset([DEFAULT_PRESET], None) is DEFAULT_PRESET

    def test_unknown_slug(self):
        assert find_preset([DEFAULT_PRESET], "nope") is None

    def test_default_template_lines(self):
        lines = DEFAULT_PRESET.prompt_template.split("\n")
        assert len(lines) == 12
        assert lines[0] == "Create a furniture styling prompt for the room type: {{room_type}}."
        assert "Product image reference: {{image_url}}." in lines


# ===================================================================
# Rules
# ===================================================================


class TestParseRules:
    def test_parses_and_rounds(self):
        rules = parse_rules([
            {"rule_key": "Style_Match", "weight_int": "60"},
            {"key": "image", "weight": "12.6"},
        ])
        assert rules == [
            {"rule_key": "style_match", "weight_int": 60},
            {"rule_key": "image", "weight_int": 13},
        ]

    @pytest.mark.parametrize("raw, expected", [("2.5", 3), ("0.5", 1), ("3.5", 4), ("4.49", 4)])
    def test_halves_round_up(self, raw, expected):
        rules = parse_rules([{"rule_key": "image", "weight_int": raw}])
        assert rules == [{"rule_key": "image", "weight_int": expected}]

    @pytest.mark.parametrize("weight", ["", "abc", "nan", "inf"])
    def test_unusable_weight_skipped(self, weight):
        rules = parse_rules([
            {"rule_key": "image", "weight_int": weight},
            {"rule_key": "in_stock", "weight_int": "5"},
        ])
        assert rules == [{"rule_key": "in_stock", "weight_int": 5}]

    def test_blank_key_skipped(self):
        rules = parse_rules([{"rule_key": "", "weight_int": "5"}])
        assert rules == DEFAULT_RULES

    def test_empty_returns_copy_of_defaults(self):
        rules = parse_rules([])
        assert rules == DEFAULT_RULES
        rules[0]["weight_int"] = 0
        assert DEFAULT_RULES[0]["weight_int"] == 50

    def test_negative_kept_here_rejected_by_merge(self):
        rules = parse_rules([{"rule_key": "image", "weight_int": "-5"}])
        assert rules == [{"rule_key": "image", "weight_int": -5}]
        assert merge_weights(rules)["image"] == 10

    def test_unknown_key_kept_here_ignored_by_merge(self):
        rules = parse_rules([{"rule_key": "price", "weight_int": "9"}])
        assert rules == [{"rule_key": "price", "weight_int": 9}]
        assert "price" not in merge_weights(rules)


# ===================================================================
# Master rows
# ===================================================================


class TestParseMasterRows:
    def test_parses_columns(self):
        rows = parse_master_rows([{
            "room": " Living Room ",
            "lighting": "  Soft daylight ",
            "camera": "35mm, eye level",
            "style_tags": "Warm, Minimal",
        }])
        assert len(rows) == 1
        row = rows[0]
        assert row.room == "Living Room"
        assert row.room_key == "living-room"
        assert row.lighting == "Soft daylight"
        assert row.camera == "35mm, eye level"
        assert row.materials == ""
        assert row.style_tags == ["warm", "minimal"]

    def test_room_aliases_and_skips(self):
        rows = parse_master_rows([
            {"room_type": "Office"},
            {"room": "  "},
            {"room": "!!!"},
        ])
        assert [r.room_key for r in rows] == ["office"]

    def test_to_dict(self):
        row = MasterRow(room="Office", room_key="office", lighting="Cool")
        data = row.to_dict()
        assert data["room"] == "Office"
        assert data["lighting"] == "Cool"
        assert data["realism_constraints"] == ""
        assert data["style_tags"] == []


class TestFindMasterRow:
    @pytest.fixture
    def rows(self) -> list[MasterRow]:
        return [
            MasterRow(room="Primary Bedroom", room_key="primary-bedroom"),
            MasterRow(room="Living Room", room_key="living-room"),
        ]

    def test_exact_key(self, rows):
        assert find_master_row_by_room("living room", rows).room == "Living Room"

    def test_containment(self, rows):
        assert find_master_row_by_room("bedroom", rows).room == "Primary Bedroom"
        assert find_master_row_by_room("living-room-large", rows).room == "Living Room"

    def test_no_match(self, rows):
        assert find_master_row_by_room("kitchen", rows) is None

    def test_empty_inputs(self, rows):
        assert find_master_row_by_room("", rows) is None
        assert find_master_row_by_room("office", []) is None
