# storefront/services/product_service.py
import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from ..errors import CategoryNotFoundError, ProductNotFoundError
from ..models.filters import FilterCriteria, PriceRange
from ..models.product import Product
from .category_resolver import build_parent_map, normalize_category_fields, subcategory_names
from .inventory_filter import compute_bounds, filter_by_category, filter_products, group_by_category

class ProductService:
    def __init__(self, store):
        self.store = store
        self.logger = logging.getLogger(__name__)

    async def list_all(self) -> List[Product]:
        return await self.store.list_products()

    async def get(self, product_id: int) -> Product:
        """Fetch one product"""
        product = await self.store.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product {product_id} not found")
        return product

    async def save(self, product: Product) -> Product:
        """Write the full record, creating it when the id is new.

        Legacy subcategory-in-category input is normalised and in_stock is
        derived from quantity before the write.
        """
        parent_map = build_parent_map(await self.store.list_categories())
        category, subcategory = normalize_category_fields(
            product.category, product.subcategory, parent_map
        )
        if category not in parent_map:
            raise CategoryNotFoundError(f"Category '{category}' not found")
        if subcategory is not None and subcategory not in subcategory_names(category, parent_map):
            raise CategoryNotFoundError(
                f"Subcategory '{subcategory}' not found under '{category}'"
            )

        record = product.model_copy(update={
            "category": category,
            "subcategory": subcategory,
            "in_stock": product.quantity > 0,
        })
        saved = await self.store.upsert_product(record)
        self.logger.info(f"Product '{saved.name}' ({saved.id}) saved")
        return saved

    async def create(self, **fields) -> Product:
        """Allocate an id and save a new product"""
        product_id = await self.store.next_product_id()
        return await self.save(Product(id=product_id, **fields))

    async def delete(self, product_id: int) -> None:
        if not await self.store.delete_product(product_id):
            raise ProductNotFoundError(f"Product {product_id} not found")
        self.logger.info(f"Product {product_id} deleted")

    async def list_in_category(self, category: str,
                               criteria: Optional[FilterCriteria] = None) -> Tuple[List[Product], PriceRange]:
        """Products for a category page and the price bounds of the whole category"""
        categories, products = await self._load()
        parent_map = build_parent_map(categories)
        if category not in parent_map:
            raise CategoryNotFoundError(f"Category '{category}' not found")

        bounds = compute_bounds(filter_by_category(products, category, parent_map))
        return filter_products(products, category, parent_map, criteria), bounds

    async def collection(self) -> Dict[str, List[Product]]:
        """Every product grouped by effective category"""
        categories, products = await self._load()
        return group_by_category(products, build_parent_map(categories))

    async def _load(self):
        return await asyncio.gather(
            self.store.list_categories(),
            self.store.list_products()
        )
