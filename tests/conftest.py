"""Shared test fixtures for the staging prompt engine."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable without an install
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from staging_prompt.selector.models import Product
from staging_prompt.selector.weights import merge_weights


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def default_weights() -> dict:
    """Default weight table (50/10/10/10)."""
    return merge_weights()


@pytest.fixture
def warm_sofa() -> Product:
    """Fully-populated sofa: style match, hero descriptor, image, in stock."""
    return Product(
        id="p1",
        title="Cloud Sofa",
        type="sofa",
        category="living-room",
        style_tags=frozenset({"warm"}),
        hero_descriptor="plush arm",
        image_url="u1",
        in_stock=True,
    )


@pytest.fixture
def bare_sofa() -> Product:
    """Sofa with no tags, descriptor, image or stock."""
    return Product(
        id="p2",
        title="Basic Sofa",
        type="sofa",
        category="living-room",
        style_tags=frozenset(),
        hero_descriptor=None,
        image_url=None,
        in_stock=False,
    )


@pytest.fixture
def living_room_products() -> list[Product]:
    """Small living-room catalog with a mix of types and subcategories."""
    return [
        Product(id="sofa-1", title="Cloud Sofa", type="sofa", category="living-room",
                subcategory="corner", style_tags=frozenset({"warm", "minimal"}),
                hero_descriptor="deep seat", image_url="https://img/sofa-1.jpg", in_stock=True),
        Product(id="sofa-2", title="Linen Sofa", type="sofa", category="living-room",
                subcategory="open", style_tags=frozenset({"coastal"}),
                hero_descriptor="", image_url="https://img/sofa-2.jpg", in_stock=True),
        Product(id="chair-1", title="Barrel Chair", type="accent chairs", category="living-room",
                subcategory="corner", style_tags=frozenset({"warm"}),
                hero_descriptor="curved back", image_url=None, in_stock=True),
        Product(id="table-1", title="Oak Coffee Table", type="coffee table", category="living-room",
                subcategory="open", style_tags=frozenset({"minimal"}),
                hero_descriptor="solid oak", image_url="https://img/table-1.jpg", in_stock=False),
        Product(id="bed-1", title="Platform Bed", type="bed", category="bedroom",
                style_tags=frozenset({"warm"}), hero_descriptor="low profile",
                image_url="https://img/bed-1.jpg", in_stock=True),
    ]
