"""Tests for catalog record normalization (sheet rows and Shopify nodes)."""

from __future__ import annotations

import pytest

from staging_prompt.catalog.records import (
    get_field,
    normalize_products,
    normalize_sheet_product,
    normalize_shopify_product,
    parse_boolean,
    parse_list_raw,
)


# ===================================================================
# Helpers — build test data
# ===================================================================


def _make_row(**overrides) -> dict:
    row = {
        "shopify_product_id": "gid://shopify/Product/1",
        "handle": "Cloud-Sofa",
        "title": "Cloud Sofa",
        "product_type": "Sofa",
        "prompt_category": "Living-Room",
        "prompt_subcategory": "Corner",
        "prompt_style_tags": "Warm, Minimal, warm",
        "hero_descriptor": "  plush arm ",
        "image_url": "https://cdn.example.com/sofa.jpg",
        "in_stock": "yes",
        "status": "active",
    }
    row.update(overrides)
    return row


def _make_node(**overrides) -> dict:
    node = {
        "id": "gid://shopify/Product/42",
        "title": "Barrel Chair",
        "handle": "barrel-chair",
        "productType": "Accent Chair",
        "tags": [
            "prompt.category:Living-Room",
            "prompt.subcategory:corner",
            "prompt.hero_descriptor:curved back",
            "prompt.style:warm",
        ],
        "totalInventory": 3,
        "featuredImage": {"url": "https://cdn.example.com/a.jpg"},
        "images": {"edges": [
            {"node": {"url": "https://cdn.example.com/a.jpg"}},
            {"node": {"url": "https://cdn.example.com/b.jpg"}},
        ]},
    }
    node.update(overrides)
    return node


# ===================================================================
# Field helpers
# ===================================================================


class TestFieldHelpers:
    @pytest.mark.parametrize("value", ["1", "true", "YES", "y", "In Stock", "instock", True, 1])
    def test_truthy(self, value):
        assert parse_boolean(value) is True

    @pytest.mark.parametrize("value", ["0", "false", "no", "", None, "out of stock", 0])
    def test_falsy(self, value):
        assert parse_boolean(value) is False

    def test_parse_list_raw_keeps_case(self):
        assert parse_list_raw(" https://A/1.jpg , ,https://B/2.jpg") == [
            "https://A/1.jpg",
            "https://B/2.jpg",
        ]

    def test_get_field_first_non_blank_alias(self):
        record = {"title": "  ", "name": "Lamp"}
        assert get_field(record, ["title", "name"]) == "Lamp"
        assert get_field(record, ["missing"]) == ""


# ===================================================================
# Sheet rows
# ===================================================================


class TestNormalizeSheetProduct:
    def test_full_row(self):
        product = normalize_sheet_product(_make_row())
        assert product.id == "gid://shopify/Product/1"
        assert product.title == "Cloud Sofa"
        assert product.type == "sofa"
        assert product.category == "living-room"
        assert product.subcategory == "corner"
        assert product.style_tags == frozenset({"warm", "minimal"})
        assert product.hero_descriptor == "plush arm"
        assert product.in_stock is True
        assert product.handle == "cloud-sofa"
        assert product.image_options == ("https://cdn.example.com/sofa.jpg",)

    def test_header_aliases(self):
        product = normalize_sheet_product({
            "name": "Oak Desk",
            "furniture_type": "Desk",
            "category": "Office",
            "style_tags": "industrial",
            "image": "https://cdn.example.com/desk.jpg",
            "available": "1",
        })
        assert product.title == "Oak Desk"
        assert product.type == "desk"
        assert product.category == "office"
        assert product.style_tags == frozenset({"industrial"})
        assert product.image_url == "https://cdn.example.com/desk.jpg"
        assert product.in_stock is True

    def test_default_id_from_handle_then_title(self):
        assert normalize_sheet_product(_make_row(shopify_product_id="")).id == "sheet:cloud-sofa"
        row = _make_row(shopify_product_id="", handle="")
        assert normalize_sheet_product(row).id == "sheet:Cloud Sofa"

    def test_explicit_image_options(self):
        product = normalize_sheet_product(_make_row(image_options="https://x/1.jpg, https://x/2.jpg"))
        assert product.image_options == ("https://x/1.jpg", "https://x/2.jpg")

    def test_blank_optional_fields_become_none(self):
        row = _make_row(prompt_subcategory="", hero_descriptor=" ", image_url="", in_stock="")
        product = normalize_sheet_product(row)
        assert product.subcategory is None
        assert product.hero_descriptor is None
        assert product.image_url is None
        assert product.image_options == ()
        assert product.in_stock is False

    @pytest.mark.parametrize("overrides", [
        {"title": ""},
        {"product_type": "  "},
        {"status": "draft"},
        {"status": "Archived"},
    ])
    def test_rejected_rows(self, overrides):
        assert normalize_sheet_product(_make_row(**overrides)) is None

    def test_status_case_insensitive(self):
        assert normalize_sheet_product(_make_row(status=" Active ")) is not None


class TestNormalizeProducts:
    def test_drops_invalid_and_duplicates(self, caplog):
        rows = [
            _make_row(),
            _make_row(title="Duplicate id"),
            _make_row(shopify_product_id="gid://2", title=""),
            _make_row(shopify_product_id="gid://3", title="Lamp", product_type="lamp"),
        ]
        with caplog.at_level("INFO"):
            products = normalize_products(rows)
        assert [p.id for p in products] == ["gid://shopify/Product/1", "gid://3"]
        assert products[0].title == "Cloud Sofa"
        assert "1 rows dropped, 1 duplicate ids" in caplog.text

    def test_empty(self):
        assert normalize_products([]) == []

    def test_shopify_normalizer(self):
        nodes = [_make_node(), _make_node(title="Same id"), _make_node(id="")]
        products = normalize_products(nodes, normalize_shopify_product)
        assert [p.id for p in products] == ["gid://shopify/Product/42"]
        assert products[0].title == "Barrel Chair"
        assert products[0].category == "living-room"


# ===================================================================
# Shopify nodes
# ===================================================================


class TestNormalizeShopifyProduct:
    def test_tags_provide_prompt_fields(self):
        product = normalize_shopify_product(_make_node())
        assert product.id == "gid://shopify/Product/42"
        assert product.type == "accent chair"
        assert product.category == "living-room"
        assert product.subcategory == "corner"
        assert product.hero_descriptor == "curved back"
        assert product.style_tags == frozenset({"warm"})
        assert product.in_stock is True
        assert product.handle == "barrel-chair"
        assert product.image_url == "https://cdn.example.com/a.jpg"
        assert product.image_options == (
            "https://cdn.example.com/a.jpg",
            "https://cdn.example.com/b.jpg",
        )

    def test_metafields_win_over_tags(self):
        product = normalize_shopify_product(_make_node(
            promptCategory={"value": "Bedroom"},
            promptStyleTags={"value": "Boho, Coastal"},
            promptHeroDescriptor={"value": "Rattan weave"},
        ))
        assert product.category == "bedroom"
        assert product.style_tags == frozenset({"boho", "coastal"})
        assert product.hero_descriptor == "Rattan weave"

    def test_blank_metafield_falls_back_to_tag(self):
        product = normalize_shopify_product(_make_node(promptSubcategory={"value": "  "}))
        assert product.subcategory == "corner"

    @pytest.mark.parametrize("inventory", [0, -2, None, "abc", float("nan")])
    def test_not_in_stock(self, inventory):
        assert normalize_shopify_product(_make_node(totalInventory=inventory)).in_stock is False

    def test_minimal_node(self):
        product = normalize_shopify_product({"id": "x", "title": "Rug"})
        assert product.type == ""
        assert product.category is None
        assert product.style_tags == frozenset()
        assert product.image_url is None
        assert product.image_options == ()
