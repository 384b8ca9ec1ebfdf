"""CLI entry point for prompt generation.

Usage:
    # From local CSV exports
    python -m staging_prompt.prompt_builder.main --products data/products.csv \
        --room living-room --style warm,minimal --furniture sofa,"accent chair"

    # Pin a product for one furniture type
    python -m staging_prompt.prompt_builder.main --products data/products.csv \
        --room bedroom --feature bed=gid://shopify/Product/123

    # From the Google Sheet configured via GOOGLE_SHEETS_CSV_URL
    python -m staging_prompt.prompt_builder.main --room office --output prompt.json
"""

from __future__ import annotations

import argparse
import json
import logging

from ..catalog.loader import SheetRepository, load_csv_file
from ..catalog.records import normalize_products
from ..catalog.room_furniture import (
    merge_master_rooms,
    parse_room_to_furniture_records,
    sample_room_options,
)
from ..catalog.sheet_config import parse_master_rows, parse_presets, parse_rules
from ..common.config import settings
from ..common.errors import StagingPromptError
from ..common.logging import setup_logging
from .builder import PromptBuilder
from .models import PromptRequest

logger = logging.getLogger(__name__)


def _parse_features(values: list[str]) -> dict[str, str]:
    featured: dict[str, str] = {}
    for value in values:
        ftype, sep, product_id = value.partition("=")
        if not sep:
            raise SystemExit(f"Error: --feature expects TYPE=PRODUCT_ID, got '{value}'")
        featured[ftype] = product_id
    return featured


def _builder_from_files(args: argparse.Namespace) -> PromptBuilder:
    """Build from local CSV exports; omitted tabs use the built-in defaults."""
    _, product_records = load_csv_file(args.products)
    products = normalize_products(product_records)

    presets = parse_presets(load_csv_file(args.presets)[1]) if args.presets else None
    rules = parse_rules(load_csv_file(args.rules)[1]) if args.rules else None
    master_rows = parse_master_rows(load_csv_file(args.master)[1]) if args.master else []

    if args.rooms:
        headers, records = load_csv_file(args.rooms)
        base_rooms = parse_room_to_furniture_records(records, headers)
    else:
        base_rooms = sample_room_options()

    fallback = normalize_products(load_csv_file(args.fallback)[1]) if args.fallback else None

    return PromptBuilder(
        products,
        presets=presets,
        rule_rows=rules,
        master_rows=master_rows,
        room_options=merge_master_rooms(master_rows, base_rooms),
        fallback_products=fallback,
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Select furniture products and render a staged-room prompt",
    )
    parser.add_argument("--products", help="Products CSV file (default: products sheet)")
    parser.add_argument("--presets", help="Presets CSV file")
    parser.add_argument("--rules", help="Weight rules CSV file")
    parser.add_argument("--master", help="Master room rows CSV file")
    parser.add_argument("--rooms", help="Room → furniture CSV file")
    parser.add_argument("--fallback", help="Secondary products CSV used when a type has no match")
    parser.add_argument("--preset", default="", help="Preset slug")
    parser.add_argument("--room", default="", help="Room type (e.g. living-room)")
    parser.add_argument("--subcategory", default="", help="Subcategory focus")
    parser.add_argument("--style", default="", help="Comma-separated style tags")
    parser.add_argument("--furniture", default="", help="Comma-separated furniture types")
    parser.add_argument(
        "--feature", action="append", default=[], metavar="TYPE=ID",
        help="Pin a product id for a furniture type (repeatable)",
    )
    parser.add_argument("--output", help="Write the JSON result to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else settings.log_level)

    request = PromptRequest(
        preset_slug=args.preset,
        room_type=args.room,
        subcategory=args.subcategory,
        style_tags=args.style,
        furniture_types=args.furniture,
        featured_products_by_type=_parse_features(args.feature),
    )

    try:
        if args.products:
            builder = _builder_from_files(args)
        else:
            builder = PromptBuilder.from_repository(SheetRepository())
        result = builder.build(request)
    except StagingPromptError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc

    logger.info("=== Prompt (%s) ===", result.room_type)
    for item in result.selected:
        logger.info(
            "  %s: %s — score=%d%s",
            item.furniture_type, item.product.title, item.scored.total,
            " (manual)" if item.manual else "",
        )

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
        logger.info("Output written to %s", args.output)
    else:
        print(result.prompt)


if __name__ == "__main__":
    main()
