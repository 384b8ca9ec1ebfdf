"""Product Selector — deterministic furniture product selection.

Normalizes tags and types, scores products against requested styles with a
weight table, and picks one product per request with a seeded, reproducible
tie-break.
"""

from .models import Product, ScoredProduct, SelectionReason, SelectionResult
from .normalize import normalize, normalize_phrase, parse_tag_list
from .ranking import fnv1a_32, rank_products
from .scorer import score_product
from .selector import ProductSelector, select_product
from .type_matcher import is_type_match
from .weights import DEFAULT_WEIGHTS, merge_weights

__all__ = [
    "Product",
    "ScoredProduct",
    "SelectionReason",
    "SelectionResult",
    "normalize",
    "normalize_phrase",
    "parse_tag_list",
    "fnv1a_32",
    "rank_products",
    "score_product",
    "ProductSelector",
    "select_product",
    "is_type_match",
    "DEFAULT_WEIGHTS",
    "merge_weights",
]
