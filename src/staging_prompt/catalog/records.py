"""Catalog record normalization.

Turns raw catalog rows into ``Product`` records for the selector:
- sheet rows (dicts keyed by normalized CSV header), with header aliases
- Shopify Admin API product nodes (metafields + ``prompt.*`` tags)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ..selector.models import Product
from ..selector.normalize import first_non_empty, normalize, parse_prompt_tags, parse_tag_list

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "y", "in stock", "instock"}


def parse_boolean(value: Any) -> bool:
    """Interpret sheet-style truthy values ("yes", "In Stock", "1", ...)."""
    if value is True:
        return True
    return normalize(value) in _TRUE_VALUES


def parse_list_raw(value: Any) -> list[str]:
    """Split a comma-separated cell without lowercasing (URLs stay intact)."""
    return [item.strip() for item in str(value or "").split(",") if item.strip()]


def get_field(record: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """Return the first non-blank value among header aliases, else ``""``."""
    for key in keys:
        value = record.get(key)
        if value is not None and str(value).strip() != "":
            return value
    return ""


def normalize_sheet_product(record: Mapping[str, Any]) -> Product | None:
    """Normalize one ``products`` sheet row.

    Returns:
        Product, or None when the row has no title / product type, or has a
        status other than ``active``.
    """
    handle = normalize(get_field(record, ["handle", "product_handle"]))
    title = str(get_field(record, ["title", "name"])).strip()
    product_type = normalize(get_field(record, ["product_type", "furniture_type"]))
    status = normalize(get_field(record, ["status"]))

    if not title or not product_type:
        return None
    if status and status != "active":
        return None

    product_id = str(
        get_field(record, ["shopify_product_id", "product_id", "id"])
        or f"sheet:{handle or title}"
    ).strip()

    image_url = str(get_field(record, ["image_url", "image"])).strip()
    image_options = parse_list_raw(get_field(record, ["image_options"]))
    if not image_options and image_url:
        image_options = [image_url]

    return Product(
        id=product_id,
        title=title,
        type=product_type,
        category=normalize(get_field(record, ["prompt_category", "category", "room_type"])) or None,
        subcategory=normalize(get_field(record, ["prompt_subcategory", "subcategory"])) or None,
        style_tags=frozenset(parse_tag_list(get_field(record, ["prompt_style_tags", "style_tags"]))),
        hero_descriptor=first_non_empty(get_field(record, ["hero_descriptor"])) or None,
        image_url=image_url or None,
        in_stock=parse_boolean(get_field(record, ["in_stock", "available", "stock"])),
        handle=handle or None,
        image_options=tuple(image_options),
    )


def _metafield_value(item: Mapping[str, Any], key: str) -> Any:
    field = item.get(key)
    if isinstance(field, Mapping):
        return field.get("value")
    return None


def _parse_inventory(total_inventory: Any) -> bool:
    try:
        numeric = float(total_inventory)
    except (TypeError, ValueError):
        return False
    return math.isfinite(numeric) and numeric > 0


def _build_image_options(item: Mapping[str, Any]) -> list[str]:
    """Featured image first, then gallery images, deduplicated in order."""
    urls: list[str] = []
    seen: set[str] = set()

    def push(url: Any) -> None:
        normalized = str(url or "").strip()
        if not normalized or normalized in seen:
            return
        seen.add(normalized)
        urls.append(normalized)

    push((item.get("featuredImage") or {}).get("url"))
    for edge in (item.get("images") or {}).get("edges") or []:
        push(((edge or {}).get("node") or {}).get("url"))

    return urls


def normalize_shopify_product(item: Mapping[str, Any]) -> Product:
    """Normalize a Shopify product node.

    Prompt metadata comes from metafields (``promptCategory``, ...) and falls
    back to ``prompt.<field>:<value>`` tags.
    """
    prompt_tags = parse_prompt_tags(item.get("tags") or [])

    category = first_non_empty(_metafield_value(item, "promptCategory"), prompt_tags["category"])
    subcategory = first_non_empty(
        _metafield_value(item, "promptSubcategory"), prompt_tags["subcategory"],
    )
    hero = first_non_empty(
        _metafield_value(item, "promptHeroDescriptor"), prompt_tags["hero_descriptor"],
    )
    style_tags = parse_tag_list(
        first_non_empty(
            _metafield_value(item, "promptStyleTags"), ",".join(prompt_tags["style_tags"]),
        )
    )
    featured_url = first_non_empty((item.get("featuredImage") or {}).get("url"))

    return Product(
        id=str(item.get("id", "")),
        title=str(item.get("title") or ""),
        type=normalize(item.get("productType")),
        category=category.lower() or None,
        subcategory=subcategory.lower() or None,
        style_tags=frozenset(style_tags),
        hero_descriptor=hero or None,
        image_url=featured_url or None,
        in_stock=_parse_inventory(item.get("totalInventory")),
        handle=item.get("handle") or None,
        image_options=tuple(_build_image_options(item)),
    )


def normalize_products(
    records: Iterable[Mapping[str, Any]],
    normalizer: Callable[[Mapping[str, Any]], Product | None] = normalize_sheet_product,
) -> list[Product]:
    """Normalize catalog rows into a deduplicated product list (first id wins).

    ``normalizer`` maps one row to a Product; pass
    ``normalize_shopify_product`` for Shopify product nodes.
    """
    products: list[Product] = []
    seen_ids: set[str] = set()
    dropped = 0
    duplicates = 0

    for record in records:
        product = normalizer(record)
        if product is None or not product.id:
            dropped += 1
            continue
        if product.id in seen_ids:
            duplicates += 1
            continue
        seen_ids.add(product.id)
        products.append(product)

    if dropped or duplicates:
        logger.info(
            "Normalized %d products (%d rows dropped, %d duplicate ids)",
            len(products), dropped, duplicates,
        )
    return products
