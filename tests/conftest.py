"""Shared pytest fixtures for all tests."""

import os
import pytest

# Must be set before storefront.config is imported
os.environ["STORE_BACKEND"] = "memory"
os.environ["CURRENCY"] = "GBP"
os.environ["DEFAULT_COUNTRY"] = "GB"
os.environ["TZ"] = "Europe/London"
os.environ["PAYMENT_GATEWAY_URL"] = ""

from storefront.database.record_store import MemoryRecordStore
from storefront.models.category import Category
from storefront.services import CategoryService, ProductService
from storefront.services.category_resolver import build_parent_map
from tests.helpers import FakePaymentGateway, make_product


@pytest.fixture
def categories():
    """Two-level furniture tree.

    Sofas -> Corner Sofas, Sofa Beds
    Armchairs -> Recliners
    Tables (no subcategories)
    """
    return [
        Category(id=1, name="Sofas"),
        Category(id=2, name="Armchairs"),
        Category(id=3, name="Tables"),
        Category(id=4, name="Corner Sofas", parent_id=1),
        Category(id=5, name="Sofa Beds", parent_id=1),
        Category(id=6, name="Recliners", parent_id=2),
    ]


@pytest.fixture
def products():
    """Catalog mixing all three category encodings."""
    return [
        # Top-level name only
        make_product(1, "Chesterfield Sofa", 1200, "Sofas"),
        # Explicit subcategory field
        make_product(2, "Haven Corner Sofa", 1299, "Sofas", subcategory="Corner Sofas", quantity=3),
        # Legacy: subcategory name stored in category
        make_product(3, "Nook Sofa Bed", 749, "Sofa Beds"),
        make_product(4, "Lounge Recliner", 300, "Recliners", quantity=1),
        make_product(5, "Wingback Chair", 450, "Armchairs", subcategory="Recliners", quantity=2),
        make_product(6, "Oak Dining Table", 899, "Tables", quantity=0),
    ]


@pytest.fixture
def parent_map(categories):
    return build_parent_map(categories)


@pytest.fixture
def store(categories, products):
    """In-memory record store seeded with the fixture catalog."""
    return MemoryRecordStore(categories, products)


@pytest.fixture
def empty_store():
    return MemoryRecordStore()


@pytest.fixture
def shared_categories():
    """Two parents each holding a subcategory called Outdoor."""
    return [
        Category(id=1, name="Sofas"),
        Category(id=2, name="Armchairs"),
        Category(id=3, name="Outdoor", parent_id=1),
        Category(id=4, name="Outdoor", parent_id=2),
    ]


@pytest.fixture
def shared_store(shared_categories):
    return MemoryRecordStore(shared_categories, [
        make_product(10, "Rattan Sofa", 800, "Sofas", subcategory="Outdoor"),
        make_product(11, "Deck Chair", 120, "Armchairs", subcategory="Outdoor"),
    ])


@pytest.fixture
def category_service(store):
    return CategoryService(store)


@pytest.fixture
def product_service(store):
    return ProductService(store)


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def billing():
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "address": "12 Analytical Row",
        "city": "London",
        "postcode": "N1 1AA",
        "country": "GB",
    }
