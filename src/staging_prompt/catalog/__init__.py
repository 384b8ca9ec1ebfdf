"""Catalog Module — product records and sheet configuration.

Normalizes catalog rows into Products and parses the configuration tabs
(presets, weight rules, master room rows, room → furniture map). Products
can also be pulled from the Shopify Admin API.
"""

from .loader import SheetClient, SheetRepository, load_csv_file, parse_csv_records, resolve_sheet_csv_url
from .records import normalize_products, normalize_sheet_product, normalize_shopify_product
from .room_furniture import RoomOption, SAMPLE_ROOM_MAP, parse_room_to_furniture_records
from .sheet_config import (
    DEFAULT_PRESET,
    DEFAULT_RULES,
    MasterRow,
    Preset,
    find_master_row_by_room,
    find_preset,
    parse_master_rows,
    parse_presets,
    parse_rules,
)
from .shopify import ShopifyClient

__all__ = [
    "SheetClient",
    "SheetRepository",
    "ShopifyClient",
    "load_csv_file",
    "parse_csv_records",
    "resolve_sheet_csv_url",
    "normalize_products",
    "normalize_sheet_product",
    "normalize_shopify_product",
    "RoomOption",
    "SAMPLE_ROOM_MAP",
    "parse_room_to_furniture_records",
    "DEFAULT_PRESET",
    "DEFAULT_RULES",
    "MasterRow",
    "Preset",
    "find_master_row_by_room",
    "find_preset",
    "parse_master_rows",
    "parse_presets",
    "parse_rules",
]
