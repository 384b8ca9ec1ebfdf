"""Product scoring — all-or-nothing points per criterion.

Criteria (default weights):
- Style match: 50, any requested style tag present on the product
- Hero descriptor: 10, product has a non-blank hero descriptor
- Image: 10, product has a non-blank image URL
- In stock: 10
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from .models import Product, ScoredProduct
from .normalize import normalize, parse_tag_list
from .weights import HERO_DESCRIPTOR, IMAGE, IN_STOCK, STYLE_MATCH, resolve_weight

logger = logging.getLogger(__name__)


def _has_text(value: str | None) -> bool:
    return bool(value and str(value).strip())


def score_product(
    product: Product,
    requested_style_tags: Iterable[str] | str | None,
    weights: Mapping[str, int],
) -> ScoredProduct:
    """Score one product against requested style tags.

    Args:
        product: Product to score.
        requested_style_tags: Requested tags; normalized and deduplicated here.
        weights: Weight table (see ``merge_weights``). Missing or unusable
            entries fall back to the default weight.

    Returns:
        ScoredProduct with the matched tags, per-criterion breakdown and total.
    """
    requested = set(parse_tag_list(requested_style_tags))
    product_tags = {normalize(tag) for tag in product.style_tags}
    matched = frozenset(requested & product_tags)

    def weight(criterion: str) -> int:
        return resolve_weight(weights, criterion)

    breakdown = {
        STYLE_MATCH: weight(STYLE_MATCH) if matched else 0,
        HERO_DESCRIPTOR: weight(HERO_DESCRIPTOR) if _has_text(product.hero_descriptor) else 0,
        IMAGE: weight(IMAGE) if _has_text(product.image_url) else 0,
        IN_STOCK: weight(IN_STOCK) if product.in_stock else 0,
    }
    total = sum(breakdown.values())

    logger.debug(
        "Score %s: style=%d hero=%d image=%d stock=%d total=%d",
        product.id, breakdown[STYLE_MATCH], breakdown[HERO_DESCRIPTOR],
        breakdown[IMAGE], breakdown[IN_STOCK], total,
    )

    return ScoredProduct(
        product=product,
        matched_style_tags=matched,
        breakdown=breakdown,
        total=total,
    )
