# storefront/services/category_resolver.py
"""Category name resolution.

The catalog is exactly two levels deep: top-level categories and their
subcategories. Older product records may carry a subcategory name in their
`category` field; everything that groups products goes through
`resolve_effective_category` so that encoding never leaks further.

Subcategory names are only unique within their parent. The flat name map
keeps the first parent listed for a shared name, so anything that can name
the parent as well (a normalised product record) is checked against
`ParentMap.children` first.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..models.category import Category, CategoryNode
from ..models.product import Product

logger = logging.getLogger(__name__)


class ParentMap(dict):
    """Category or subcategory name -> top-level name"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # top-level name -> its own subcategory names, in listing order
        self.children: Dict[str, List[str]] = {}

    def files_under(self, parent: Optional[str], subcategory: Optional[str]) -> bool:
        """True when top-level `parent` really has a subcategory called `subcategory`"""
        if not parent or not subcategory:
            return False
        return subcategory in self.children.get(parent, ())


def build_parent_map(categories: Iterable[Category]) -> ParentMap:
    """Map every category and subcategory name to its top-level name"""
    categories = list(categories)
    by_id = {category.id: category for category in categories}
    parent_map = ParentMap()

    for category in categories:
        if category.parent_id is None:
            parent_map[category.name] = category.name
            parent_map.children.setdefault(category.name, [])

    for category in categories:
        if category.parent_id is None:
            continue
        parent = by_id.get(category.parent_id)
        if parent is None:
            logger.warning(
                f"Subcategory '{category.name}' points at missing parent {category.parent_id}"
            )
            continue
        parent_map.children.setdefault(parent.name, []).append(category.name)
        # A top-level entry of the same name wins
        parent_map.setdefault(category.name, parent.name)

    return parent_map


def build_tree(categories: Iterable[Category]) -> List[CategoryNode]:
    """Group subcategories under their top-level category, both sorted by name"""
    categories = list(categories)
    nodes = {
        category.id: CategoryNode(id=category.id, name=category.name, subcategories=[])
        for category in categories
        if category.parent_id is None
    }
    for category in categories:
        if category.parent_id is not None and category.parent_id in nodes:
            nodes[category.parent_id].subcategories.append(category)

    tree = sorted(nodes.values(), key=lambda node: node.name)
    for node in tree:
        node.subcategories.sort(key=lambda sub: sub.name)
    return tree


def is_top_level(name: str, parent_map: ParentMap) -> bool:
    return parent_map.get(name) == name


def subcategory_names(parent_name: str, parent_map: ParentMap) -> List[str]:
    """Subcategories filed under `parent_name`, including names shared with other parents"""
    return list(parent_map.children.get(parent_name, []))


def resolve_effective_category(product: Product, parent_map: ParentMap) -> str:
    """Top-level category the product is grouped under"""
    if product.subcategory:
        if parent_map.files_under(product.category, product.subcategory):
            return product.category
        return parent_map.get(product.subcategory, product.subcategory)

    mapped = parent_map.get(product.category)
    if mapped is not None and mapped != product.category:
        # Legacy record: subcategory name stored in the category field
        return mapped

    return product.category


def normalize_category_fields(
    category: str,
    subcategory: Optional[str],
    parent_map: ParentMap,
) -> Tuple[str, Optional[str]]:
    """Rewrite a legacy (subcategory-in-category) pair to (parent, subcategory)"""
    if subcategory:
        if parent_map.files_under(category, subcategory):
            return category, subcategory
        return parent_map.get(subcategory, category), subcategory

    mapped = parent_map.get(category)
    if mapped is not None and mapped != category:
        return mapped, category

    return category, None
