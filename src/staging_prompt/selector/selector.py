"""Deterministic product selector.

Pipeline:
  1. Category narrowing (exact match on normalized category).
  2. Subcategory narrowing, a soft preference: dropped if it empties the set.
  3. Empty set → no selection (NO_CATEGORY_MATCH).
  4. Score the working set.
  5. Style fallback: if styles were requested and nothing in the working set
     matches any of them, re-score the whole category pool instead.
  6. Rank (score desc, seeded hash, id) and take the top product.

Expected "no result" conditions are returned as data, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from .models import Product, ScoredProduct, SelectionReason, SelectionResult
from .normalize import normalize, parse_tag_list
from .ranking import rank_products
from .scorer import score_product
from .weights import merge_weights

logger = logging.getLogger(__name__)


class ProductSelector:
    """Selects one product from a pool with full ranking and reasoning.

    Stateless: an instance holds nothing between calls, so one selector can
    serve concurrent requests for different furniture types.

    Usage:
        selector = ProductSelector()
        result = selector.select(products, category="living-room",
                                 requested_style_tags=["warm"],
                                 weights=merge_weights(), seed="preset|room")
        result.selected.product.id -> "p1"
    """

    def select(
        self,
        products: Sequence[Product],
        category: str | None = "",
        subcategory: str | None = "",
        requested_style_tags: Iterable[str] | str | None = None,
        weights: Mapping[str, int] | None = None,
        seed: str = "",
    ) -> SelectionResult:
        """Run the selection pipeline.

        Args:
            products: Candidate pool (not mutated).
            category: Hard category filter; empty keeps the full pool.
            subcategory: Soft subcategory preference.
            requested_style_tags: Style tags to match.
            weights: Merged weight table; defaults when None.
            seed: Tie-break seed.

        Returns:
            SelectionResult. ``selected`` is None only when the category
            pool is empty.
        """
        if weights is None:
            weights = merge_weights()

        styles = parse_tag_list(requested_style_tags)
        wanted_category = normalize(category)
        wanted_subcategory = normalize(subcategory)

        category_pool = self._filter_category(products, wanted_category)
        working_set = self._filter_subcategory(category_pool, wanted_subcategory)

        if not working_set:
            logger.info(
                "No products for category '%s' / subcategory '%s' (pool size %d)",
                wanted_category, wanted_subcategory, len(products),
            )
            return SelectionResult(
                selected=None,
                ranked=[],
                fallback_used=True,
                reason=SelectionReason.NO_CATEGORY_MATCH,
            )

        scored = self._score_all(working_set, styles, weights)

        fallback_used = bool(styles) and not any(sp.style_matched for sp in scored)
        if fallback_used:
            logger.info(
                "No style match for %s among %d products, falling back to "
                "category pool (%d products)",
                styles, len(working_set), len(category_pool),
            )
            scored = self._score_all(category_pool, styles, weights)
            reason = SelectionReason.STYLE_FALLBACK_TO_CATEGORY
        elif wanted_category:
            reason = SelectionReason.CATEGORY_SUBCATEGORY_MATCH
        else:
            reason = SelectionReason.UNFILTERED_POOL_MATCH

        ranked = rank_products(scored, seed)
        selected = ranked[0]

        logger.debug(
            "Selected %s (score=%d) from %d ranked: %s",
            selected.product.id, selected.total, len(ranked), reason.value,
        )

        return SelectionResult(
            selected=selected,
            ranked=ranked,
            fallback_used=fallback_used,
            reason=reason,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _filter_category(products: Sequence[Product], category: str) -> list[Product]:
        if not category:
            return list(products)
        return [p for p in products if normalize(p.category) == category]

    @staticmethod
    def _filter_subcategory(category_pool: list[Product], subcategory: str) -> list[Product]:
        if not subcategory:
            return category_pool
        narrowed = [p for p in category_pool if normalize(p.subcategory) == subcategory]
        if not narrowed:
            logger.debug("Subcategory '%s' matched nothing, keeping category pool", subcategory)
            return category_pool
        return narrowed

    @staticmethod
    def _score_all(
        products: list[Product],
        styles: list[str],
        weights: Mapping[str, int],
    ) -> list[ScoredProduct]:
        return [score_product(p, styles, weights) for p in products]


def select_product(
    products: Sequence[Product],
    category: str | None = "",
    subcategory: str | None = "",
    requested_style_tags: Iterable[str] | str | None = None,
    weights: Mapping[str, int] | None = None,
    seed: str = "",
) -> SelectionResult:
    """Convenience function wrapping ``ProductSelector().select``."""
    return ProductSelector().select(
        products,
        category=category,
        subcategory=subcategory,
        requested_style_tags=requested_style_tags,
        weights=weights,
        seed=seed,
    )
