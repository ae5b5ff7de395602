# storefront/services/category_service.py
import logging
from typing import List, Optional

from ..errors import (
    CategoryNotFoundError,
    DuplicateNameError,
    HasDependentsError,
    InvalidParentError,
    ValidationError,
)
from ..models.category import Category, CategoryNode
from ..models.product import Product
from .category_resolver import build_parent_map, build_tree, resolve_effective_category
from .inventory_filter import filter_by_category

class CategoryService:
    """Category tree management"""

    def __init__(self, store):
        self.store = store
        self.logger = logging.getLogger(__name__)

    async def list_all(self) -> List[Category]:
        """All categories, top-level first"""
        return await self.store.list_categories()

    async def get_tree(self) -> List[CategoryNode]:
        """Top-level categories with their subcategories"""
        return build_tree(await self.store.list_categories())

    async def get_category(self, category_id: int) -> Category:
        for category in await self.store.list_categories():
            if category.id == category_id:
                return category
        raise CategoryNotFoundError(f"Category {category_id} not found")

    async def add(self, name: str, parent_id: Optional[int] = None) -> Category:
        """Create a top-level category, or a subcategory when parent_id is given"""
        name = self._clean_name(name)
        categories = await self.store.list_categories()

        if parent_id is not None:
            parent = next((c for c in categories if c.id == parent_id), None)
            if parent is None:
                raise CategoryNotFoundError(f"Parent category {parent_id} not found")
            if not parent.is_top_level:
                raise InvalidParentError(
                    f"'{parent.name}' is a subcategory and cannot have subcategories"
                )

        if any(c.parent_id == parent_id and c.name == name for c in categories):
            raise DuplicateNameError(name, parent_id)

        category = await self.store.insert_category(name, parent_id)
        self.logger.info(
            f"Category '{category.name}' ({category.id}) added"
            + (f" under {parent_id}" if parent_id is not None else "")
        )
        return category

    async def rename(self, category_id: int, new_name: str) -> None:
        """Rename in place; products using the old name follow it"""
        new_name = self._clean_name(new_name)
        categories = await self.store.list_categories()

        category = next((c for c in categories if c.id == category_id), None)
        if category is None:
            raise CategoryNotFoundError(f"Category {category_id} not found")
        if category.name == new_name:
            return

        if any(
            c.id != category_id and c.parent_id == category.parent_id and c.name == new_name
            for c in categories
        ):
            raise DuplicateNameError(new_name, category.parent_id)

        touched = await self.store.rename_category(category_id, new_name)
        self.logger.info(
            f"Category {category_id} renamed '{category.name}' -> '{new_name}', "
            f"{touched} product reference(s) updated"
        )

    async def remove(self, category_id: int, cascade_delete_products: bool = False) -> int:
        """Delete a category and its subcategories.

        Products still filed under it block the deletion unless
        cascade_delete_products is set, in which case they are deleted too.
        Returns the number of products deleted.
        """
        categories = await self.store.list_categories()
        category = next((c for c in categories if c.id == category_id), None)
        if category is None:
            raise CategoryNotFoundError(f"Category {category_id} not found")

        dependents = self._dependents(category, categories, await self.store.list_products())
        if dependents and not cascade_delete_products:
            raise HasDependentsError(category_id, len(dependents))

        await self.store.delete_category(category_id, [p.id for p in dependents])
        self.logger.info(
            f"Category '{category.name}' ({category_id}) deleted with "
            f"{len(dependents)} product(s)"
        )
        return len(dependents)

    async def count_products(self, category_id: int) -> int:
        """Products that deleting this category would take with it"""
        categories = await self.store.list_categories()
        category = next((c for c in categories if c.id == category_id), None)
        if category is None:
            raise CategoryNotFoundError(f"Category {category_id} not found")
        return len(self._dependents(category, categories, await self.store.list_products()))

    @staticmethod
    def _dependents(category: Category, categories: List[Category],
                    products: List[Product]) -> List[Product]:
        parent_map = build_parent_map(categories)
        dependents = filter_by_category(products, category.name, parent_map)
        parent = next((c for c in categories if c.id == category.parent_id), None)
        if parent is None:
            return dependents
        # Another parent may hold a subcategory of the same name
        return [
            product for product in dependents
            if resolve_effective_category(product, parent_map) == parent.name
        ]

    @staticmethod
    def _clean_name(name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name must not be blank")
        return name
