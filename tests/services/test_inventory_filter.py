from decimal import Decimal

from storefront.models.category import Category
from storefront.models.filters import FilterCriteria, PriceRange, SortKey
from storefront.services.category_resolver import build_parent_map
from storefront.services.inventory_filter import (
    MEMBERSHIP_RULES,
    compute_bounds,
    filter_by_category,
    filter_products,
    group_by_category,
    matches_category,
    sort_products,
)
from tests.helpers import make_product


def ids(products):
    return [product.id for product in products]


class TestCategoryMembership:
    """Tests for the ordered membership rules."""

    def test_rule_order(self):
        assert [rule.name for rule in MEMBERSHIP_RULES] == [
            "effective_category",
            "literal_category",
            "child_of_target",
            "explicit_subcategory",
        ]

    def test_top_level_target_collects_every_encoding(self, products, parent_map):
        """Direct, explicit-subcategory and legacy-subcategory products all match."""
        result = filter_by_category(products, "Sofas", parent_map)

        assert ids(result) == [1, 2, 3]

    def test_each_product_counted_once(self, products, parent_map):
        """A product matching several rules appears once."""
        result = filter_by_category(products, "Armchairs", parent_map)

        assert ids(result) == [4, 5]

    def test_first_matching_rule_is_reported(self, parent_map):
        legacy = make_product(1, "Nook", 100, "Sofa Beds")

        assert matches_category(legacy, "Sofas", parent_map) == "effective_category"
        assert matches_category(legacy, "Sofa Beds", parent_map) == "literal_category"
        assert matches_category(legacy, "Tables", parent_map) is None

    def test_subcategory_target(self, products, parent_map):
        """A subcategory page shows only products filed under that subcategory."""
        result = filter_by_category(products, "Recliners", parent_map)

        assert ids(result) == [4, 5]

    def test_explicit_subcategory_rule(self, parent_map):
        """A product filed under a stale parent still shows on its subcategory page."""
        product = make_product(1, "Haven", 100, "Tables", subcategory="Corner Sofas")

        assert matches_category(product, "Corner Sofas", parent_map) == "explicit_subcategory"

    def test_child_of_target_rule(self, parent_map):
        """A subcategory field that disagrees with the map still joins its parent page."""
        product = make_product(1, "Recliner", 100, "Recliners", subcategory="Mystery")

        # Effective category is "Mystery", literal is "Recliners"
        assert matches_category(product, "Armchairs", parent_map) == "child_of_target"

    def test_shared_subcategory_name_stays_with_its_parent(self, shared_categories):
        """Armchairs/Outdoor never lands on the Sofas page through Sofas/Outdoor."""
        parent_map = build_parent_map(shared_categories)
        chair = make_product(11, "Deck Chair", 120, "Armchairs", subcategory="Outdoor")

        assert matches_category(chair, "Armchairs", parent_map) == "effective_category"
        assert matches_category(chair, "Sofas", parent_map) is None

    def test_custom_rule_list(self, parent_map):
        product = make_product(1, "Nook", 100, "Sofa Beds")

        assert matches_category(product, "Sofas", parent_map, rules=MEMBERSHIP_RULES[1:]) == "child_of_target"
        assert matches_category(product, "Sofas", parent_map, rules=[]) is None

    def test_unknown_target_is_empty(self, products, parent_map):
        assert filter_by_category(products, "Beds", parent_map) == []


class TestFilterProducts:
    """Tests for filter_products."""

    def test_subcategory_restriction(self, products, parent_map):
        criteria = FilterCriteria(selected_subcategories={"Sofa Beds", "Corner Sofas"})

        result = filter_products(products, "Sofas", parent_map, criteria)

        assert ids(result) == [3, 2]

    def test_price_range_is_inclusive(self, products, parent_map):
        criteria = FilterCriteria(price_range=PriceRange(min=Decimal("749"), max=Decimal("1200")))

        result = filter_products(products, "Sofas", parent_map, criteria)

        assert ids(result) == [3, 1]

    def test_default_criteria_sorts_by_price(self, products, parent_map):
        result = filter_products(products, "Sofas", parent_map)

        assert ids(result) == [3, 1, 2]

    def test_end_to_end_armchairs(self):
        """Legacy and explicit subcategory products both land under the parent."""
        categories = [
            Category(id=1, name="Sofas"),
            Category(id=2, name="Armchairs"),
            Category(id=3, name="Recliners", parent_id=2),
        ]
        products = [
            make_product(2, "Wingback", 450, "Armchairs", subcategory="Recliners"),
            make_product(1, "Lounge", 300, "Recliners"),
        ]

        result = filter_products(
            products, "Armchairs", build_parent_map(categories),
            FilterCriteria(sort_key=SortKey.PRICE_ASC)
        )

        assert ids(result) == [1, 2]

    def test_does_not_mutate_input(self, products, parent_map):
        before = ids(products)

        filter_products(products, "Sofas", parent_map, FilterCriteria(sort_key=SortKey.NAME_DESC))

        assert ids(products) == before


class TestSortProducts:
    """Tests for sort_products."""

    def test_price_descending(self, products):
        assert ids(sort_products(products, SortKey.PRICE_DESC)) == [2, 1, 6, 3, 5, 4]

    def test_name_ascending_case_insensitive(self):
        products = [
            make_product(1, "banana", 10, "Tables"),
            make_product(2, "Apple", 10, "Tables"),
            make_product(3, "cherry", 10, "Tables"),
            make_product(4, "apple", 10, "Tables"),
        ]

        assert ids(sort_products(products, SortKey.NAME_ASC)) == [2, 4, 1, 3]

    def test_name_descending_keeps_ties_in_order(self):
        products = [
            make_product(1, "apple", 10, "Tables"),
            make_product(2, "Apple", 10, "Tables"),
            make_product(3, "Birch", 10, "Tables"),
        ]

        assert ids(sort_products(products, SortKey.NAME_DESC)) == [3, 1, 2]

    def test_stable_for_equal_prices(self):
        products = [make_product(i, f"Item {i}", 100, "Tables") for i in (5, 3, 9)]

        assert ids(sort_products(products, SortKey.PRICE_ASC)) == [5, 3, 9]
        assert ids(sort_products(products, SortKey.PRICE_DESC)) == [5, 3, 9]

    def test_repeatable(self, products):
        first = sort_products(products, SortKey.NAME_ASC)

        assert ids(sort_products(first, SortKey.NAME_ASC)) == ids(first)

    def test_accepts_string_key(self, products):
        assert ids(sort_products(products, "price-asc")) == [4, 5, 3, 6, 1, 2]


class TestComputeBounds:
    """Tests for compute_bounds."""

    def test_bounds_cover_every_price(self, products, parent_map):
        sofas = filter_by_category(products, "Sofas", parent_map)

        bounds = compute_bounds(sofas)

        assert bounds.min == Decimal("749")
        assert bounds.max == Decimal("1299")
        assert all(bounds.min <= p.price <= bounds.max for p in sofas)

    def test_empty_set_returns_zero_range(self):
        bounds = compute_bounds([])

        assert bounds.min == Decimal(0)
        assert bounds.max == Decimal(0)


class TestGroupByCategory:
    """Tests for the collection grouping."""

    def test_groups_by_effective_category(self, products, parent_map):
        groups = group_by_category(products, parent_map)

        assert list(groups) == ["Armchairs", "Sofas", "Tables"]
        assert ids(groups["Sofas"]) == [1, 2, 3]
        assert ids(groups["Armchairs"]) == [4, 5]
        assert ids(groups["Tables"]) == [6]
