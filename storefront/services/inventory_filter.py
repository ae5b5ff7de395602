# storefront/services/inventory_filter.py
"""Category views over the product list: membership, narrowing, sorting."""
import locale
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional

from ..models.filters import FilterCriteria, PriceRange, SortKey
from ..models.product import Product
from .category_resolver import ParentMap, is_top_level, resolve_effective_category


class MembershipRule(NamedTuple):
    name: str
    matches: Callable[[Product, str, ParentMap], bool]


def _effective_category(product: Product, target: str, parent_map: ParentMap) -> bool:
    return resolve_effective_category(product, parent_map) == target


def _literal_category(product: Product, target: str, parent_map: ParentMap) -> bool:
    return product.category == target


def _child_of_target(product: Product, target: str, parent_map: ParentMap) -> bool:
    if not is_top_level(target, parent_map):
        return False
    if parent_map.files_under(product.category, product.subcategory):
        # Filed under a real parent; effective_category has already decided
        return False
    for name in (product.category, product.subcategory):
        if name and name != target and parent_map.get(name) == target:
            return True
    return False


def _explicit_subcategory(product: Product, target: str, parent_map: ParentMap) -> bool:
    return product.subcategory is not None and product.subcategory == target


# Checked in order; the first rule that matches decides membership.
# Rules 2-4 tolerate inconsistent historical records.
MEMBERSHIP_RULES: List[MembershipRule] = [
    MembershipRule("effective_category", _effective_category),
    MembershipRule("literal_category", _literal_category),
    MembershipRule("child_of_target", _child_of_target),
    MembershipRule("explicit_subcategory", _explicit_subcategory),
]


def matches_category(product: Product, target: str, parent_map: ParentMap,
                     rules: Optional[List[MembershipRule]] = None) -> Optional[str]:
    """Name of the first rule placing `product` in `target`, or None"""
    for rule in rules if rules is not None else MEMBERSHIP_RULES:
        if rule.matches(product, target, parent_map):
            return rule.name
    return None


def filter_by_category(products: Iterable[Product], target: str,
                       parent_map: ParentMap) -> List[Product]:
    """Products shown on the `target` category page, original order kept"""
    return [
        product for product in products
        if matches_category(product, target, parent_map) is not None
    ]


def _in_subcategories(product: Product, selected: Iterable[str]) -> bool:
    return product.category in selected or (
        product.subcategory is not None and product.subcategory in selected
    )


def _name_key(product: Product) -> str:
    return locale.strxfrm(product.name.casefold())


def sort_products(products: Iterable[Product], sort_key: SortKey) -> List[Product]:
    """Stable sort; equal keys keep their incoming order in both directions"""
    sort_key = SortKey(sort_key)
    if sort_key == SortKey.PRICE_ASC:
        return sorted(products, key=lambda p: p.price)
    if sort_key == SortKey.PRICE_DESC:
        return sorted(products, key=lambda p: p.price, reverse=True)
    if sort_key == SortKey.NAME_ASC:
        return sorted(products, key=_name_key)
    return sorted(products, key=_name_key, reverse=True)


def filter_products(products: Iterable[Product], target: str, parent_map: ParentMap,
                    criteria: Optional[FilterCriteria] = None) -> List[Product]:
    """Category membership, subcategory and price narrowing, then sort"""
    criteria = criteria or FilterCriteria()
    result = filter_by_category(products, target, parent_map)

    if criteria.selected_subcategories:
        result = [p for p in result if _in_subcategories(p, criteria.selected_subcategories)]

    result = [p for p in result if criteria.price_range.contains(p.price)]

    return sort_products(result, criteria.sort_key)


def compute_bounds(products: Iterable[Product]) -> PriceRange:
    """Cheapest and dearest price; PriceRange(0, 0) for an empty set"""
    prices = [product.price for product in products]
    if not prices:
        return PriceRange(min=Decimal(0), max=Decimal(0))
    return PriceRange(min=min(prices), max=max(prices))


def group_by_category(products: Iterable[Product], parent_map: ParentMap) -> Dict[str, List[Product]]:
    """Products keyed by effective category, groups ordered by name"""
    groups: Dict[str, List[Product]] = {}
    for product in products:
        groups.setdefault(resolve_effective_category(product, parent_map), []).append(product)
    return {name: groups[name] for name in sorted(groups, key=str.casefold)}
